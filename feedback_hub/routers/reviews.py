from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from feedback_hub.database import get_db
from feedback_hub.models.user import User
from feedback_hub.routers.auth_deps import get_current_user
from feedback_hub.schemas.feedback import FeedbackResponse
from feedback_hub.schemas.review import ReviewDashboard, ReviewTemplate
from feedback_hub.services.review_service import ReviewService

router = APIRouter(
    prefix="/reviews",
    tags=["reviews"]
)


@router.get("/assigned", response_model=List[FeedbackResponse])
def assigned_reviews(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ReviewService(db).get_assigned_reviews(current_user.id)


@router.get("/given", response_model=List[FeedbackResponse])
def given_reviews(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ReviewService(db).get_given_reviews(current_user.id)


@router.get("/received", response_model=List[FeedbackResponse])
def received_reviews(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ReviewService(db).get_received_reviews(current_user.id)


@router.get("/dashboard", response_model=ReviewDashboard)
def review_dashboard(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ReviewService(db).get_dashboard(current_user)


@router.get("/templates", response_model=List[ReviewTemplate])
def review_templates(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ReviewService(db).get_templates()


@router.get("/templates/{review_type}", response_model=ReviewTemplate)
def review_template(review_type: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ReviewService(db).get_template(review_type)


@router.post("/{feedback_id}/complete", response_model=FeedbackResponse)
def complete_review(feedback_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ReviewService(db).complete_review(feedback_id, current_user.id)
