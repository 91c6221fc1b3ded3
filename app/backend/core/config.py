# app/backend/core/config.py
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # DB: write pool is mandatory, read pool falls back to it
    database_url: str = Field(..., alias="DATABASE_URL")
    database_read_url: Optional[str] = Field(None, alias="DATABASE_READ_URL")
    db_read_pool_size: int = Field(5, alias="DB_READ_POOL_SIZE")
    db_read_max_overflow: int = Field(5, alias="DB_READ_MAX_OVERFLOW")
    db_write_pool_size: int = Field(5, alias="DB_WRITE_POOL_SIZE")
    db_write_max_overflow: int = Field(5, alias="DB_WRITE_MAX_OVERFLOW")
    db_pool_recycle: int = Field(180, alias="DB_POOL_RECYCLE")

    timezone: str = Field("Asia/Jakarta", alias="APP_TIMEZONE")
    task_table: str = Field("task", alias="TASK_TABLE")
    user_table: str = Field("user_encrypt", alias="USER_TABLE")

    # object storage (S3-compatible, GCS interop by default)
    storage_bucket: str = Field("image-wreg", alias="STORAGE_BUCKET")
    storage_host: str = Field("https://storage.googleapis.com/", alias="STORAGE_HOST")
    storage_key_prefix: str = Field("wr", alias="STORAGE_KEY_PREFIX")
    storage_endpoint_url: str = Field("https://storage.googleapis.com", alias="STORAGE_ENDPOINT_URL")
    storage_access_id: str = Field("", alias="STORAGE_ACCESS_ID")
    storage_secret_key: str = Field("", alias="STORAGE_SECRET_KEY")
    attachment_content_type: str = Field("image/png", alias="ATTACHMENT_CONTENT_TYPE")
    allowed_folders: List[str] = Field(default_factory=lambda: ["todo_attachment"], alias="ALLOWED_FOLDERS")
    allowed_extensions: List[str] = Field(
        default_factory=lambda: [".jpeg", ".jpg", ".png"], alias="ALLOWED_EXTENSIONS"
    )
    max_upload_bytes: int = Field(10 << 20, alias="MAX_UPLOAD_BYTES")

    basic_auth_username: str = Field("", alias="BASIC_AUTH_USERNAME")
    basic_auth_password: str = Field("", alias="BASIC_AUTH_PASSWORD")

    @property
    def location(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache
def get_settings() -> Settings:
    return Settings()
