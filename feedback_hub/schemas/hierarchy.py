"""
Hierarchy payloads.
Read models keep snake_case keys (they mirror the reporting-line rows); request bodies are camelCase.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from feedback_hub.core.schemas import CamelModel


class HierarchyNode(BaseModel):
    id: str
    employee_id: str
    employee_name: Optional[str] = None
    employee_email: str = ""
    manager_id: Optional[str] = None
    manager_name: Optional[str] = None
    level: Optional[int] = None
    employee_count: int = 0
    children: List["HierarchyNode"] = []


HierarchyNode.model_rebuild()


class HierarchyRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    manager_id: str
    employee_id: str
    level: int
    is_active: bool
    effective_date: datetime
    end_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class HierarchyStats(BaseModel):
    total_relationships: int = 0
    max_depth: int = 0
    average_span_of_control: float = 0
    orphaned_employees: int = 0


class HierarchyValidation(CamelModel):
    is_valid: bool
    errors: List[str] = []
    warnings: List[str] = []


class CreateHierarchyRequest(CamelModel):
    organization_id: str = Field(..., min_length=1)
    employee_id: str = Field(..., min_length=1)
    manager_id: str = Field(..., min_length=1)
    effective_date: Optional[datetime] = None


class UpdateHierarchyRequest(CamelModel):
    manager_id: str = Field(..., min_length=1)


class RelationshipInput(CamelModel):
    employee_id: str = Field(..., min_length=1)
    manager_id: str = Field(..., min_length=1)


class BulkHierarchyRequest(CamelModel):
    organization_id: str = Field(..., min_length=1)
    relationships: List[RelationshipInput]


class BulkHierarchyResult(BaseModel):
    created: int
    updated: int
    errors: List[str]
