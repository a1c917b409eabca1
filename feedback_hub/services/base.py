import logging
from typing import Any, Optional
from sqlalchemy.orm import Session

from feedback_hub.database import UnitOfWork


class BaseService:
    """
    Common base for domain services.
    Holds the request session, the caller's organization context and a class-named logger.
    """

    def __init__(self, db: Session, org_id: Optional[str] = None):
        self.db = db
        self.org_id = org_id
        self._logger = logging.getLogger(f"feedback_hub.services.{self.__class__.__name__}")

    def unit_of_work(self, uow: Optional[UnitOfWork] = None) -> UnitOfWork:
        """Join the caller's unit when one is passed, else open a fresh one on this session."""
        return uow if uow is not None else UnitOfWork(self.db)

    def log_info(self, message: str, **fields: Any) -> None:
        self._logger.info(message, extra=fields or None)

    def log_warning(self, message: str, **fields: Any) -> None:
        self._logger.warning(message, extra=fields or None)

    def log_error(self, message: str, **fields: Any) -> None:
        self._logger.error(message, extra=fields or None, exc_info=True)
