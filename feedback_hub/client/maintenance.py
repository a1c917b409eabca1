"""
Maintenance-mode polling for the web client.

A build-time flag wins outright. Otherwise the status endpoint is polled on a fixed
interval and any failure reads as "not in maintenance" so an unreachable status
endpoint never locks users out.
"""
import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from feedback_hub.client.api import ApiClient
from feedback_hub.client.config import client_settings

logger = logging.getLogger(__name__)

STATUS_PATH = "/maintenance-status"
POLL_JOB_ID = "maintenance_poll"


class MaintenanceModeMonitor:
    def __init__(self, api: ApiClient, build_flag: Optional[bool] = None, interval: Optional[float] = None):
        self.api = api
        self.build_flag = build_flag
        self.interval = interval if interval is not None else client_settings.maintenance_poll_seconds
        self.is_maintenance_mode = False
        self.is_checking = False
        self.scheduler: Optional[BackgroundScheduler] = None

    @classmethod
    def from_settings(cls, api: Optional[ApiClient] = None) -> "MaintenanceModeMonitor":
        return cls(api or ApiClient(), build_flag=client_settings.maintenance_mode)

    def check(self) -> bool:
        if self.build_flag:
            self.is_maintenance_mode = True
            return True

        self.is_checking = True
        try:
            payload = self.api.get(STATUS_PATH)
            self.is_maintenance_mode = bool(payload["data"]["maintenance"])
        except Exception as e:
            logger.warning("Maintenance status check failed, assuming service is up", extra={"reason": str(e)})
            self.is_maintenance_mode = False
        finally:
            self.is_checking = False
        return self.is_maintenance_mode

    def start(self) -> None:
        """Check once now, then keep re-checking every ``interval`` seconds."""
        self.check()
        if self.build_flag or (self.scheduler and self.scheduler.running):
            return
        self.scheduler = BackgroundScheduler(daemon=True)
        self.scheduler.add_job(
            self.check,
            trigger="interval",
            seconds=self.interval,
            id=POLL_JOB_ID,
            name="Maintenance status poll",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info("Maintenance polling started", extra={"interval_seconds": self.interval})

    def stop(self) -> None:
        # A request already in flight is left to finish on its own
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
