"""
Comment threads attached to a feedback record.
Authorship always comes from the authenticated user, never from the request body.
"""
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from feedback_hub.database import get_db
from feedback_hub.models.user import User
from feedback_hub.routers.auth_deps import get_current_user
from feedback_hub.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from feedback_hub.services.comment_service import CommentService

router = APIRouter(
    prefix="/feedback/{feedback_id}/comments",
    tags=["comments"]
)


@router.get("", response_model=List[CommentResponse])
def list_comments(feedback_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return CommentService(db).find_by_feedback_id(feedback_id, current_user.id)


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def add_comment(
    feedback_id: str,
    body: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return CommentService(db).add_comment(feedback_id, current_user.id, body)


@router.put("/{comment_id}", response_model=CommentResponse)
def update_comment(
    feedback_id: str,
    comment_id: str,
    body: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return CommentService(db).update_comment(comment_id, body.content, current_user.id, feedback_id)


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    feedback_id: str,
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    CommentService(db).delete_comment(comment_id, current_user.id, feedback_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
