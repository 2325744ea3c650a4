from datetime import datetime
from typing import Optional

from sqlalchemy import TIMESTAMP, Column, String, Text, text
from sqlmodel import Field, SQLModel


class Task(SQLModel, table=True):
    """Task model for todo items.

    ``id`` and ``created_at`` are assigned by the store on insert and never
    change afterwards.
    """
    __tablename__ = "tasks"
    # SQLite would otherwise reuse the ids of deleted rows.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(sa_column=Column(String(255), nullable=False))
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(TIMESTAMP, server_default=text("CURRENT_TIMESTAMP")),
    )
