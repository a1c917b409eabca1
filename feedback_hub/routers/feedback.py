from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.orm import Session

from feedback_hub.database import get_db
from feedback_hub.models.user import User
from feedback_hub.routers.auth_deps import get_current_user
from feedback_hub.schemas.feedback import (
    AcknowledgeRequest,
    AcknowledgmentResponse,
    CreateFeedbackRequest,
    FeedbackListResponse,
    FeedbackQuery,
    FeedbackResponse,
    FeedbackStats,
    FeedbackSummary,
    UpdateFeedbackRequest,
)
from feedback_hub.services.feedback_service import FeedbackService

router = APIRouter(
    prefix="/feedback",
    tags=["feedback"]
)


def feedback_query(
    cycle_id: Optional[str] = Query(None, alias="cycleId"),
    from_user_id: Optional[str] = Query(None, alias="fromUserId"),
    to_user_id: Optional[str] = Query(None, alias="toUserId"),
    review_type: Optional[str] = Query(None, alias="reviewType"),
    status_: Optional[str] = Query(None, alias="status"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> FeedbackQuery:
    return FeedbackQuery(
        cycle_id=cycle_id,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        review_type=review_type,
        status=status_,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )


@router.post("", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
def create_feedback(
    body: CreateFeedbackRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return FeedbackService(db).create_feedback(current_user.id, body)


@router.get("", response_model=FeedbackListResponse)
def list_feedback(
    query: FeedbackQuery = Depends(feedback_query),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return FeedbackService(db).get_feedback_list(query, current_user)


# Fixed paths are registered before /{feedback_id} so they are not captured as ids

@router.get("/summary", response_model=FeedbackSummary)
def my_summary(
    cycle_id: Optional[str] = Query(None, alias="cycleId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return FeedbackService(db).get_feedback_summary(current_user.id, cycle_id, current_user)


@router.get("/summary/{user_id}", response_model=FeedbackSummary)
def user_summary(
    user_id: str,
    cycle_id: Optional[str] = Query(None, alias="cycleId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return FeedbackService(db).get_feedback_summary(user_id, cycle_id, current_user)


@router.get("/stats", response_model=FeedbackStats)
def my_stats(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return FeedbackService(db).get_user_stats(current_user.id)


@router.get("/drafts", response_model=List[FeedbackResponse])
def my_drafts(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return FeedbackService(db).get_drafts(current_user.id)


@router.get("/pending", response_model=List[FeedbackResponse])
def my_pending(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return FeedbackService(db).get_pending(current_user.id)


@router.get("/{feedback_id}", response_model=FeedbackResponse)
def get_feedback(feedback_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return FeedbackService(db).get_feedback_by_id(feedback_id, current_user)


@router.put("/{feedback_id}", response_model=FeedbackResponse)
def update_feedback(
    feedback_id: str,
    body: UpdateFeedbackRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return FeedbackService(db).update_feedback(feedback_id, body, current_user.id)


@router.post("/{feedback_id}/submit", response_model=FeedbackResponse)
def submit_feedback(feedback_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return FeedbackService(db).submit_feedback(feedback_id, current_user.id)


@router.post("/{feedback_id}/complete", response_model=FeedbackResponse)
def complete_feedback(feedback_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return FeedbackService(db).complete_feedback(feedback_id, current_user.id)


@router.post("/{feedback_id}/acknowledge", response_model=AcknowledgmentResponse)
def acknowledge_feedback(
    feedback_id: str,
    body: Optional[AcknowledgeRequest] = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return FeedbackService(db).acknowledge_feedback(feedback_id, current_user.id, body.response if body else None)


@router.get("/{feedback_id}/acknowledgment", response_model=AcknowledgmentResponse)
def get_acknowledgment(feedback_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return FeedbackService(db).get_acknowledgment(feedback_id, current_user)


@router.delete("/{feedback_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_feedback(feedback_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    FeedbackService(db).delete_feedback(feedback_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
