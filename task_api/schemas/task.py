from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Optional

class TaskCreate(BaseModel):
    """Schema for creating new tasks.

    ``title`` is optional here so that a missing title can be reported as a
    400 by the handler instead of a schema error.
    """
    title: Optional[str] = None
    description: Optional[str] = None

class TaskUpdate(TaskCreate):
    """Schema for updating existing tasks."""
    pass

class TaskUpdated(BaseModel):
    """Body returned by a successful update."""
    id: int
    title: Optional[str] = None
    description: str = ""

class Task(BaseModel):
    """Complete task schema with all fields."""
    id: int
    title: str
    description: str = ""
    created_at: datetime

    @field_validator("description", mode="before")
    @classmethod
    def _empty_description(cls, value):
        return "" if value is None else value

    class Config:
        from_attributes = True
