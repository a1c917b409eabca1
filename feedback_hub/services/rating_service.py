from typing import List, Optional
from sqlalchemy.orm import Session

from feedback_hub.core.exceptions import NotFoundError
from feedback_hub.database import UnitOfWork
from feedback_hub.models.feedback import Rating
from feedback_hub.schemas.feedback import RatingInput
from feedback_hub.services.base import BaseService
from feedback_hub.stores.children import RatingStore

DEFAULT_WEIGHT = 1.0


class RatingService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.ratings = RatingStore(db)

    @staticmethod
    def _fields(request: RatingInput) -> dict:
        return {
            "category": request.category,
            "subcategory": request.subcategory,
            "score": request.score,
            "max_score": request.max_score,
            "weight": request.weight if request.weight is not None else DEFAULT_WEIGHT,
            "comment": request.comment,
        }

    def create(self, feedback_id: str, request: RatingInput, uow: Optional[UnitOfWork] = None) -> Rating:
        return self.ratings.create({"feedback_id": feedback_id, **self._fields(request)}, uow=uow)

    def update_for_feedback(
        self, feedback_id: str, updates: List[RatingInput], uow: Optional[UnitOfWork] = None
    ) -> List[Rating]:
        """
        Replace the feedback's ratings with ``updates``.
        Items carrying an id update that rating, items without one are created,
        and existing ratings missing from the list are removed.
        """
        existing = {r.id: r for r in self.ratings.find_by_feedback_id(feedback_id, uow=uow)}
        kept = set()
        result = []
        for item in updates:
            if item.id:
                if item.id not in existing:
                    raise NotFoundError(f"Rating {item.id} not found on this feedback")
                result.append(self.ratings.update(item.id, self._fields(item), uow=uow))
                kept.add(item.id)
            else:
                result.append(self.create(feedback_id, item, uow=uow))
        for rating_id in existing.keys() - kept:
            self.ratings.delete(rating_id, uow=uow)
        return result

    def find_by_feedback_id(self, feedback_id: str) -> List[Rating]:
        return self.ratings.find_by_feedback_id(feedback_id)

    def delete_by_feedback_id(self, feedback_id: str, uow: Optional[UnitOfWork] = None) -> int:
        return self.ratings.delete_by_feedback_id(feedback_id, uow=uow)
