from fastapi import APIRouter

from feedback_hub.core.config import settings

router = APIRouter(tags=["system"])


@router.get("/maintenance-status")
def maintenance_status():
    """Polled by clients to decide whether to show the maintenance screen."""
    return {"success": True, "data": {"maintenance": settings.maintenance_mode}}
