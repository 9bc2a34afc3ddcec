from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import TaskValidationError
from .models import Task


# PUBLIC_INTERFACE
class TaskPayload(BaseModel):
    """
    Request body for creating or replacing a Task.

    Unknown fields are rejected. id and timestamps are accepted for
    symmetry with TaskOut but the repository overwrites them.
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
            }
        },
    )

    id: Optional[UUID] = Field(default=None, description="Ignored on create; taken from the path on update")
    title: Optional[str] = Field(default=None, description="Short title for the task")
    description: Optional[str] = Field(default=None, description="Detailed description")
    created_at: Optional[datetime] = Field(default=None, description="Ignored on create")
    updated_at: Optional[datetime] = Field(default=None, description="Always overwritten")

    def to_task(self) -> Task:
        return Task(
            title=self.title or "",
            description=self.description or "",
            id=self.id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a Task.
    """

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "0b6f3c1e-2f1e-4c55-9a43-6e3f6c1d2a10",
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "created_at": "2025-01-25T10:15:30.123456",
                "updated_at": "2025-01-26T09:00:00.000001",
            }
        },
    )

    id: Optional[UUID] = Field(default=None, description="Unique identifier of the task")
    title: str = Field(..., description="Short title for the task")
    description: str = Field(..., description="Detailed description")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")


class Metadata(BaseModel):
    offset: int = Field(..., description="Offset applied to the query")
    limit: int = Field(..., description="Limit applied to the query")
    total: int = Field(..., description="Total number of stored tasks")
    message: Optional[str] = Field(default=None)


class TaskEnvelope(BaseModel):
    """Envelope for single task responses. data is absent on delete."""

    data: Optional[TaskOut] = None


class TaskListEnvelope(BaseModel):
    """Envelope for list responses."""

    data: List[TaskOut] = Field(..., description="Tasks in the requested window")
    metadata: Optional[Metadata] = None


class ErrorMessage(BaseModel):
    message: str


def _describe(error: dict) -> str:
    field_name = ".".join(str(part) for part in error.get("loc", ())) or "body"
    if error.get("type") == "extra_forbidden":
        return f"Unknown field {field_name}"
    return f"Wrong type provided for field {field_name}"


# PUBLIC_INTERFACE
def validate_task(task: Task) -> None:
    """Reject tasks with a blank title or description, title checked first."""
    if not task.title.strip():
        raise TaskValidationError("Required field title")
    if not task.description.strip():
        raise TaskValidationError("Required field description")


# PUBLIC_INTERFACE
def decode_task(body: Any) -> Task:
    """
    Turn an already JSON-decoded request body into a validated Task.

    Raises:
        TaskValidationError with a client-facing message.
    """
    if not isinstance(body, dict):
        raise TaskValidationError("Malformed request body")
    try:
        payload = TaskPayload.model_validate(body)
    except ValidationError as exc:
        raise TaskValidationError(_describe(exc.errors()[0])) from exc
    task = payload.to_task()
    validate_task(task)
    return task
