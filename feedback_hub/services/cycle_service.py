from typing import List, Optional
from sqlalchemy.orm import Session

from feedback_hub.core.exceptions import AccessDeniedError, NotFoundError, ValidationError
from feedback_hub.models.cycle import ReviewCycle, CycleStatus
from feedback_hub.models.user import User
from feedback_hub.schemas.cycle import CycleCreate, CycleUpdate
from feedback_hub.services.base import BaseService
from feedback_hub.stores.feedback import FeedbackStore


class CycleService(BaseService):
    """Review cycle CRUD scoped to the caller's organization (super admins see every organization)."""

    def __init__(self, db: Session, user: User):
        super().__init__(db, org_id=user.organization_id)
        self.user = user

    def _commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _get(self, cycle_id: str) -> ReviewCycle:
        cycle = self.db.get(ReviewCycle, cycle_id)
        if not cycle:
            raise NotFoundError("Review cycle not found")
        if not self.user.is_super_admin and cycle.organization_id != self.org_id:
            raise AccessDeniedError("Cannot access another organization's review cycles")
        return cycle

    def list_cycles(self, status: Optional[CycleStatus] = None, organization_id: Optional[str] = None) -> List[ReviewCycle]:
        query = self.db.query(ReviewCycle)
        if self.user.is_super_admin:
            if organization_id:
                query = query.filter(ReviewCycle.organization_id == organization_id)
        else:
            if not self.org_id:
                return []
            query = query.filter(ReviewCycle.organization_id == self.org_id)
        if status:
            query = query.filter(ReviewCycle.status == status)
        return query.order_by(ReviewCycle.start_date.desc()).all()

    def get_cycle(self, cycle_id: str) -> ReviewCycle:
        return self._get(cycle_id)

    def create_cycle(self, data: CycleCreate) -> ReviewCycle:
        org_id = data.organization_id if (self.user.is_super_admin and data.organization_id) else self.org_id
        if not org_id:
            raise ValidationError("An organization is required to create a review cycle")

        cycle = ReviewCycle(
            organization_id=org_id,
            created_by=self.user.id,
            **data.model_dump(exclude={"organization_id"}),
        )
        self.db.add(cycle)
        self._commit()
        self.db.refresh(cycle)
        self.log_info("Review cycle created", cycle_id=cycle.id, organization_id=org_id)
        return cycle

    def update_cycle(self, cycle_id: str, data: CycleUpdate) -> ReviewCycle:
        cycle = self._get(cycle_id)
        if cycle.status in (CycleStatus.CLOSED, CycleStatus.ARCHIVED):
            raise ValidationError("Closed or archived cycles cannot be edited")

        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(cycle, key, value)
        if cycle.end_date < cycle.start_date:
            self.db.rollback()
            raise ValidationError("endDate must be on or after startDate")

        self._commit()
        self.db.refresh(cycle)
        return cycle

    def delete_cycle(self, cycle_id: str) -> None:
        cycle = self._get(cycle_id)
        if FeedbackStore(self.db).count_for_cycle(cycle_id):
            raise ValidationError("Cannot delete a review cycle that already has feedback")
        self.db.delete(cycle)
        self._commit()
        self.log_info("Review cycle deleted", cycle_id=cycle_id)

    def _transition(self, cycle_id: str, expected: CycleStatus, target: CycleStatus) -> ReviewCycle:
        cycle = self._get(cycle_id)
        if cycle.status != expected:
            raise ValidationError(
                f"Only {expected.value} cycles can move to {target.value} (current: {cycle.status.value})"
            )
        cycle.status = target
        self._commit()
        self.db.refresh(cycle)
        self.log_info("Review cycle status changed", cycle_id=cycle_id, status=target.value)
        return cycle

    def activate_cycle(self, cycle_id: str) -> ReviewCycle:
        return self._transition(cycle_id, CycleStatus.DRAFT, CycleStatus.ACTIVE)

    def close_cycle(self, cycle_id: str) -> ReviewCycle:
        return self._transition(cycle_id, CycleStatus.ACTIVE, CycleStatus.CLOSED)
