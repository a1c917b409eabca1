from typing import Any, Dict, Generic, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone

T = TypeVar("T")

class CamelModel(BaseModel):
    """Base for API payloads: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class ErrorItem(BaseModel):
    msg: str
    code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

class ApiResponse(BaseModel, Generic[T]):
    """
    The ``{success, data, errors}`` envelope.
    Hierarchy endpoints wrap their payloads in it and domain errors are reported through it.
    """
    success: bool
    data: Optional[T] = None
    errors: List[ErrorItem] = []
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with JSON-serializable values."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def ok(cls, data: T) -> "ApiResponse[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str, code: str, details: Optional[Dict[str, Any]] = None) -> "ApiResponse[T]":
        return cls(success=False, errors=[ErrorItem(msg=message, code=code, details=details)])
