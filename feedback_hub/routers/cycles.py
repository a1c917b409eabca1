from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from feedback_hub.database import get_db
from feedback_hub.models.cycle import CycleStatus
from feedback_hub.models.user import User
from feedback_hub.routers.auth_deps import get_current_user, require_people_admin
from feedback_hub.schemas.cycle import CycleCreate, CycleResponse, CycleUpdate
from feedback_hub.services.cycle_service import CycleService

router = APIRouter(
    prefix="/cycles",
    tags=["cycles"]
)


@router.get("", response_model=List[CycleResponse])
def list_cycles(
    status_: Optional[CycleStatus] = Query(None, alias="status"),
    organization_id: Optional[str] = Query(None, alias="organizationId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return CycleService(db, current_user).list_cycles(status_, organization_id)


@router.post("", response_model=CycleResponse, status_code=status.HTTP_201_CREATED)
def create_cycle(
    body: CycleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_people_admin()),
):
    return CycleService(db, current_user).create_cycle(body)


@router.get("/{cycle_id}", response_model=CycleResponse)
def get_cycle(cycle_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return CycleService(db, current_user).get_cycle(cycle_id)


@router.put("/{cycle_id}", response_model=CycleResponse)
def update_cycle(
    cycle_id: str,
    body: CycleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_people_admin()),
):
    return CycleService(db, current_user).update_cycle(cycle_id, body)


@router.delete("/{cycle_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cycle(cycle_id: str, db: Session = Depends(get_db), current_user: User = Depends(require_people_admin())):
    CycleService(db, current_user).delete_cycle(cycle_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{cycle_id}/activate", response_model=CycleResponse)
def activate_cycle(cycle_id: str, db: Session = Depends(get_db), current_user: User = Depends(require_people_admin())):
    return CycleService(db, current_user).activate_cycle(cycle_id)


@router.post("/{cycle_id}/close", response_model=CycleResponse)
def close_cycle(cycle_id: str, db: Session = Depends(get_db), current_user: User = Depends(require_people_admin())):
    return CycleService(db, current_user).close_cycle(cycle_id)
