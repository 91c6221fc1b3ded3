# app/backend/services/task_service.py
from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Callable, Iterable, Optional

from app.backend.core.exceptions import (
    AppError,
    InternalServerError,
    InvalidPayloadError,
    NotFoundError,
)
from app.backend.core.response import Response, error_response, success_response
from app.backend.models.task import Task, TaskStatus
from app.backend.repositories.task import TaskRepository
from app.backend.schemas.task import (
    AttachmentResponse,
    AttachmentUpload,
    TaskFilter,
    TaskRequest,
    TaskResponse,
)
from app.backend.services.storage import AttachmentStore, StorageError

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_FOLDERS = ("todo_attachment",)
DEFAULT_ALLOWED_EXTENSIONS = (".jpeg", ".jpg", ".png")


def _to_task_response(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        name=task.name,
        description=task.description,
        status=task.status,
        attachment=task.attachment,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def _internal_error() -> Response:
    return error_response(InternalServerError())


class TaskService:
    """
    Sequences repository and storage calls for the task endpoints.

    Only NotFound is surfaced as-is; every other failure is logged here and
    answered with a generic internal error so store details never leak.
    """

    def __init__(
        self,
        repository: TaskRepository,
        storage: AttachmentStore,
        location: tzinfo,
        *,
        bucket: str = "image-wreg",
        storage_host: str = "https://storage.googleapis.com/",
        key_prefix: str = "wr",
        content_type: str = "image/png",
        allowed_folders: Iterable[str] = DEFAULT_ALLOWED_FOLDERS,
        allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
        max_upload_bytes: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.storage = storage
        self.location = location
        self.bucket = bucket
        self.storage_host = storage_host
        self.key_prefix = key_prefix
        self.content_type = content_type
        self.allowed_folders = {f.lower() for f in allowed_folders}
        self.allowed_extensions = {e.lower() for e in allowed_extensions}
        self.max_upload_bytes = max_upload_bytes
        self._clock = clock

    def now(self) -> datetime:
        if self._clock is not None:
            return self._clock()
        return datetime.now(self.location)

    def list_tasks(self, filter: TaskFilter) -> Response:
        try:
            result = self.repository.find_many(filter)
        except AppError:
            logger.exception("list tasks failed (filter=%s)", filter.model_dump())
            return _internal_error()

        return success_response([_to_task_response(t) for t in result])

    def get_task(self, id: int) -> Response:
        try:
            task = self.repository.find_one_by_id(id)
        except NotFoundError as err:
            return error_response(err)
        except AppError:
            logger.exception("get task %s failed", id)
            return _internal_error()

        return success_response(_to_task_response(task))

    def create_task(self, request: TaskRequest) -> Response:
        task = Task(
            name=request.name,
            description=request.description,
            status=TaskStatus.INITIATED,
            attachment=request.attachment,
            created_at=self.now(),
        )

        try:
            task_id = self.repository.save(task)
        except AppError:
            logger.exception("create task %r failed", request.name)
            return _internal_error()

        return success_response(
            TaskResponse(
                id=task_id,
                name=task.name,
                description=task.description,
                status=int(task.status),
                attachment=task.attachment,
                created_at=task.created_at,
                updated_at=None,
            )
        )

    def update_task(self, id: int, request: TaskRequest) -> Response:
        # existence check and update are two separate calls, see DESIGN.md
        try:
            existing = self.repository.find_one_by_id(id)
        except NotFoundError as err:
            return error_response(err)
        except AppError:
            logger.exception("lookup before update of task %s failed", id)
            return _internal_error()

        task = Task(
            id=id,
            name=request.name,
            description=request.description,
            status=None if request.status is None else int(request.status),
            attachment=request.attachment,
            created_at=existing.created_at,
            updated_at=self.now(),
        )

        try:
            self.repository.update_by_id(id, task)
        except AppError:
            logger.exception("update task %s failed", id)
            return _internal_error()

        return success_response(_to_task_response(task))

    def upload_attachment(self, folder_name: str, payload: AttachmentUpload) -> Response:
        if folder_name.lower() not in self.allowed_folders:
            return error_response(InvalidPayloadError(f"invalid bucket name '{folder_name}'"))
        if payload.file_extension.lower() not in self.allowed_extensions:
            return error_response(InvalidPayloadError(f"invalid file extension '{payload.file_extension}'"))
        if not payload.file_name_param:
            return error_response(InvalidPayloadError("Invalid file name parameter"))
        if self.max_upload_bytes is not None and payload.size > self.max_upload_bytes:
            return error_response(InvalidPayloadError(f"file exceeds {self.max_upload_bytes} bytes"))

        key = self.object_key(folder_name, payload)
        try:
            self.storage.put(self.bucket, key, payload.file, self.content_type)
        except StorageError:
            logger.exception("attachment upload failed (bucket=%s key=%s)", self.bucket, key)
            return _internal_error()

        return success_response(AttachmentResponse(image_url=f"{self.storage_host}{self.bucket}/{key}"))

    def object_key(self, folder_name: str, payload: AttachmentUpload) -> str:
        return f"{self.key_prefix}/{folder_name}/{payload.file_name_param}{payload.file_extension}"
