"""
Reporting lines: org chart reads for any member of the organization,
writes for HR and admins. Every endpoint answers with the {success, data} envelope.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from feedback_hub.core.config import settings
from feedback_hub.core.exceptions import ValidationError
from feedback_hub.core.limiter import limiter
from feedback_hub.core.schemas import ApiResponse
from feedback_hub.database import get_db
from feedback_hub.models.user import User
from feedback_hub.routers.auth_deps import get_current_user, require_people_admin
from feedback_hub.schemas.hierarchy import (
    BulkHierarchyRequest,
    CreateHierarchyRequest,
    HierarchyRecord,
    UpdateHierarchyRequest,
)
from feedback_hub.services.hierarchy_service import HierarchyService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/hierarchy",
    tags=["hierarchy"]
)


def _ok(data, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ApiResponse.ok(data).to_dict())


@router.get("/tree/{organization_id}")
@limiter.limit(settings.hierarchy_rate_limit)
def get_tree(
    request: Request,
    organization_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = HierarchyService(db, current_user)
    service.validate_org_access(organization_id)
    return _ok(service.get_hierarchy_tree(organization_id))


@router.get("/direct-reports/{manager_id}")
@limiter.limit(settings.hierarchy_rate_limit)
def get_direct_reports(
    request: Request,
    manager_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = HierarchyService(db, current_user)
    service.validate_user_belongs_to_org(manager_id)
    return _ok({"items": service.get_direct_reports(manager_id)})


@router.get("/manager-chain/{employee_id}")
@limiter.limit(settings.hierarchy_rate_limit)
def get_manager_chain(
    request: Request,
    employee_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = HierarchyService(db, current_user)
    service.validate_user_belongs_to_org(employee_id)
    return _ok({"chain": service.get_manager_chain(employee_id)})


@router.get("/stats/{organization_id}")
@limiter.limit(settings.hierarchy_rate_limit)
def get_stats(
    request: Request,
    organization_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = HierarchyService(db, current_user)
    service.validate_org_access(organization_id)
    return _ok(service.get_hierarchy_stats(organization_id))


@router.get("/validate/{organization_id}")
@limiter.limit(settings.hierarchy_rate_limit)
def validate_hierarchy(
    request: Request,
    organization_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = HierarchyService(db, current_user)
    service.validate_org_access(organization_id)
    return _ok(service.validate_hierarchy(organization_id))


@router.get("/search-employees")
@limiter.limit(settings.hierarchy_rate_limit)
def search_employees(
    request: Request,
    q: str = "",
    organization_id: Optional[str] = Query(None, alias="organizationId"),
    role: Optional[str] = None,
    exclude_ids: Optional[str] = Query(None, alias="excludeIds"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    org_id = organization_id or current_user.organization_id
    if not org_id:
        raise ValidationError("organizationId is required")
    service = HierarchyService(db, current_user)
    service.validate_org_access(org_id)
    excluded = [i.strip() for i in exclude_ids.split(",") if i.strip()] if exclude_ids else None
    return _ok({"items": service.search_employees(org_id, q, role, excluded)})


@router.post("")
@limiter.limit(settings.hierarchy_rate_limit)
def create_hierarchy(
    request: Request,
    body: CreateHierarchyRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_people_admin()),
):
    service = HierarchyService(db, current_user)
    service.validate_org_access(body.organization_id)
    edge = service.create_hierarchy(body.organization_id, body.employee_id, body.manager_id, body.effective_date)
    return _ok(HierarchyRecord.model_validate(edge), status.HTTP_201_CREATED)


@router.put("/{hierarchy_id}")
@limiter.limit(settings.hierarchy_rate_limit)
def update_hierarchy(
    request: Request,
    hierarchy_id: str,
    body: UpdateHierarchyRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_people_admin()),
):
    edge = HierarchyService(db, current_user).update_hierarchy(hierarchy_id, body.manager_id)
    return _ok(HierarchyRecord.model_validate(edge))


@router.delete("/{hierarchy_id}")
@limiter.limit(settings.hierarchy_rate_limit)
def delete_hierarchy(
    request: Request,
    hierarchy_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_people_admin()),
):
    HierarchyService(db, current_user).delete_hierarchy(hierarchy_id)
    return _ok({"success": True})


@router.post("/bulk")
@limiter.limit(settings.hierarchy_rate_limit)
def bulk_update(
    request: Request,
    body: BulkHierarchyRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_people_admin()),
):
    service = HierarchyService(db, current_user)
    service.validate_org_access(body.organization_id)
    result = service.bulk_update_hierarchy(body.organization_id, body.relationships)
    logger.info("Bulk hierarchy update finished", extra={"created_count": result.created, "updated_count": result.updated})
    return _ok(result)
