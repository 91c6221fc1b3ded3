from datetime import datetime
from enum import IntEnum
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


class TaskStatus(IntEnum):
    INITIATED = 0
    IN_PROGRESS = 1
    DONE = 2


class Task(SQLModel, table=True):
    __tablename__ = "task"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    status: Optional[int] = Field(default=TaskStatus.INITIATED)
    attachment: Optional[str] = None
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
