# app/backend/repositories/user.py
from __future__ import annotations

import logging
from datetime import tzinfo

from sqlalchemy import DateTime, String, column, table
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.backend.core.exceptions import classify_db_error
from app.backend.db.query import SelectQuery
from app.backend.models.user import User
from app.backend.repositories.task import localize

log = logging.getLogger(__name__)


class UserRepository:
    """Read-only listing over the user table; no write path."""

    def __init__(self, db_read: Engine, location: tzinfo, table_name: str = "user_encrypt"):
        self.db_read = db_read
        self.location = location
        self.table_name = table_name
        self.table = table(
            table_name,
            column("uuid", String),
            column("name", String),
            column("email", String),
            column("created_at", DateTime(timezone=True)),
        )

    def find_many_users(self) -> list[User]:
        stmt = SelectQuery(self.table).build()
        try:
            with self.db_read.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            log.error("%s: %s", stmt, exc)
            raise classify_db_error(exc) from exc

        return [
            User(
                uuid=row["uuid"],
                name=row["name"],
                email=row["email"],
                created_at=localize(row["created_at"], self.location),
            )
            for row in rows
        ]
