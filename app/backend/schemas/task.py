from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.backend.models.task import TaskStatus


class TaskRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    attachment: Optional[str] = None


class TaskFilter(BaseModel):
    name: Optional[str] = None


class TaskResponse(BaseModel):
    # nullable fields are always emitted, as null when absent
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    description: Optional[str] = None
    status: Optional[int] = None
    attachment: Optional[str] = None
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class AttachmentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(..., alias="imageUrl")


def file_extension(file_name: str) -> str:
    """Suffix from the last dot of the base name, dot included; a bare '.png' counts as an extension."""
    base = file_name.rsplit("/", 1)[-1]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


@dataclass
class AttachmentUpload:
    """Multipart upload, only alive for the duration of one request."""

    file: BinaryIO
    file_name: str
    size: int
    file_name_param: str
    file_extension: str = ""

    def __post_init__(self):
        if not self.file_extension:
            self.file_extension = file_extension(self.file_name)
