from datetime import datetime
from typing import Optional
from pydantic import ConfigDict, field_validator

from feedback_hub.core.schemas import CamelModel


class CommentCreate(CamelModel):
    content: str
    parent_comment_id: Optional[str] = None
    is_private: bool = False

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Comment content is required")
        return value


class CommentUpdate(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Comment content is required")
        return value


class CommentResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    feedback_id: str
    user_id: str
    parent_comment_id: Optional[str] = None
    content: str
    is_private: bool
    created_at: datetime
    updated_at: datetime
