from datetime import date, datetime
from typing import Any, Dict, Optional
from pydantic import ConfigDict, Field, model_validator

from feedback_hub.core.schemas import CamelModel
from feedback_hub.models.cycle import CycleStatus, CycleType


class CycleCreate(CamelModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: CycleType = CycleType.QUARTERLY
    status: CycleStatus = CycleStatus.DRAFT
    start_date: date
    end_date: date
    feedback_start_date: Optional[date] = None
    feedback_end_date: Optional[date] = None
    settings: Dict[str, Any] = {}
    organization_id: Optional[str] = None

    @model_validator(mode="after")
    def dates_in_order(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must be on or after startDate")
        return self


class CycleUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    type: Optional[CycleType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    feedback_start_date: Optional[date] = None
    feedback_end_date: Optional[date] = None
    settings: Optional[Dict[str, Any]] = None


class CycleResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    name: str
    description: Optional[str] = None
    type: CycleType
    status: CycleStatus
    start_date: date
    end_date: date
    feedback_start_date: Optional[date] = None
    feedback_end_date: Optional[date] = None
    settings: Dict[str, Any] = {}
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
