from typing import List, Optional
from sqlalchemy.orm import Session

from feedback_hub.core.exceptions import NotFoundError
from feedback_hub.database import UnitOfWork
from feedback_hub.models.feedback import Goal, GoalStatus
from feedback_hub.schemas.feedback import GoalInput
from feedback_hub.services.base import BaseService
from feedback_hub.stores.children import GoalStore


class GoalService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.goals = GoalStore(db)

    def create(self, feedback_id: str, request: GoalInput, uow: Optional[UnitOfWork] = None) -> Goal:
        data = {
            "feedback_id": feedback_id,
            "title": request.title,
            "description": request.description or "",
            "category": request.category,
            "priority": request.priority,
            "target_date": request.target_date,
            "status": request.status or GoalStatus.NOT_STARTED,
            "progress": request.progress if request.progress is not None else 0,
        }
        return self.goals.create(data, uow=uow)

    def update_for_feedback(
        self, feedback_id: str, updates: List[GoalInput], uow: Optional[UnitOfWork] = None
    ) -> List[Goal]:
        """Merge ``updates`` into the feedback's goals (update by id, create new, drop missing)."""
        existing = {g.id: g for g in self.goals.find_by_feedback_id(feedback_id, uow=uow)}
        kept = set()
        result = []
        for item in updates:
            if not item.id:
                result.append(self.create(feedback_id, item, uow=uow))
                continue
            current = existing.get(item.id)
            if current is None:
                raise NotFoundError(f"Goal {item.id} not found on this feedback")
            partial = {
                "title": item.title,
                "description": item.description,
                "category": item.category,
                "priority": item.priority,
                "target_date": item.target_date,
            }
            if item.status is not None:
                partial["status"] = item.status
            if item.progress is not None:
                partial["progress"] = item.progress
            result.append(self.goals.update(item.id, partial, uow=uow))
            kept.add(item.id)
        for goal_id in existing.keys() - kept:
            self.goals.delete(goal_id, uow=uow)
        return result

    def find_by_feedback_id(self, feedback_id: str) -> List[Goal]:
        return self.goals.find_by_feedback_id(feedback_id)

    def delete_by_feedback_id(self, feedback_id: str, uow: Optional[UnitOfWork] = None) -> int:
        return self.goals.delete_by_feedback_id(feedback_id, uow=uow)
