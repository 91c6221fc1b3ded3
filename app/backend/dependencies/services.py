from functools import lru_cache

from fastapi import Depends

from app.backend.core.config import Settings, get_settings
from app.backend.db.session import Engines, get_engines
from app.backend.repositories.task import TaskRepository
from app.backend.repositories.user import UserRepository
from app.backend.services.storage import AttachmentStore, S3AttachmentStore
from app.backend.services.task_service import TaskService
from app.backend.services.user_service import UserService


@lru_cache
def get_attachment_store() -> AttachmentStore:
    return S3AttachmentStore.from_settings(get_settings())


def get_task_service(
    engines: Engines = Depends(get_engines),
    storage: AttachmentStore = Depends(get_attachment_store),
    settings: Settings = Depends(get_settings),
) -> TaskService:
    repository = TaskRepository(engines.read, engines.write, settings.location, settings.task_table)
    return TaskService(
        repository,
        storage,
        settings.location,
        bucket=settings.storage_bucket,
        storage_host=settings.storage_host,
        key_prefix=settings.storage_key_prefix,
        content_type=settings.attachment_content_type,
        allowed_folders=settings.allowed_folders,
        allowed_extensions=settings.allowed_extensions,
        max_upload_bytes=settings.max_upload_bytes,
    )


def get_user_service(
    engines: Engines = Depends(get_engines),
    settings: Settings = Depends(get_settings),
) -> UserService:
    return UserService(UserRepository(engines.read, settings.location, settings.user_table))
