# app/backend/repositories/task.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, tzinfo
from typing import Iterator, Optional

from sqlalchemy import DateTime, Integer, String, column, table
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import Executable, Select, TableClause

from app.backend.core.exceptions import NotFoundError, classify_db_error
from app.backend.db.query import InsertQuery, SelectQuery, UpdateQuery
from app.backend.db.session import EngineSink, StatementSink, transaction
from app.backend.models.task import Task
from app.backend.schemas.task import TaskFilter

log = logging.getLogger(__name__)


def task_table(name: str = "task") -> TableClause:
    return table(
        name,
        column("id", Integer),
        column("name", String),
        column("description", String),
        column("status", Integer),
        column("attachment", String),
        column("created_at", DateTime(timezone=True)),
        column("updated_at", DateTime(timezone=True)),
    )


def localize(value: Optional[datetime], location: tzinfo) -> Optional[datetime]:
    """Naive store timestamps are wall time in the service zone; aware ones are converted into it."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=location)
    return value.astimezone(location)


class TaskRepository:
    def __init__(self, db_read: Engine, db_write: Engine, location: tzinfo, table_name: str = "task"):
        self.db_read = db_read
        self.db_write = db_write
        self.location = location
        self.table_name = table_name
        self.table = task_table(table_name)

    @contextmanager
    def begin_transaction(self) -> Iterator[Connection]:
        """
        Open a write transaction scoped to a `with` block.
        Commits when the block exits normally, rolls back when it raises.
        """
        try:
            with transaction(self.db_write) as conn:
                yield conn
        except SQLAlchemyError as exc:
            raise classify_db_error(exc) from exc

    def find_many(self, filter: TaskFilter) -> list[Task]:
        query = SelectQuery(self.table)
        if filter.name is not None:
            query.where_eq("name", filter.name)
        return self._query(query.build())

    def find_one_by_id(self, id: int) -> Task:
        tasks = self._query(SelectQuery(self.table).where_eq("id", id).build())
        if not tasks:
            raise NotFoundError(f"task {id} not found")
        # ids are unique; if the store ever returns duplicates the last row wins
        return tasks[-1]

    def save(self, task: Task, tx: Optional[StatementSink] = None) -> int:
        sink = tx if tx is not None else EngineSink(self.db_write)
        stmt = InsertQuery(
            self.table,
            {
                "name": task.name,
                "description": task.description,
                "status": int(task.status),
                "created_at": task.created_at,
            },
            returning="id",
        ).build()
        result = self._exec(sink, stmt)
        try:
            return int(result.scalar_one())
        except SQLAlchemyError as exc:
            raise classify_db_error(exc) from exc

    def update_by_id(self, id: int, task: Task, tx: Optional[StatementSink] = None) -> None:
        sink = tx if tx is not None else EngineSink(self.db_write)
        stmt = (
            UpdateQuery(self.table)
            .set("name", task.name)
            .set("description", task.description)
            .set("status", None if task.status is None else int(task.status))
            .set("attachment", task.attachment)
            .set("updated_at", task.updated_at)
            .where_eq("id", id)
            .build()
        )
        self._exec(sink, stmt)

    def _query(self, stmt: Select) -> list[Task]:
        try:
            with self.db_read.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            log.error("%s: %s", stmt, exc)
            raise classify_db_error(exc) from exc

        return [
            Task(
                id=row["id"],
                name=row["name"],
                description=row["description"],
                status=row["status"],
                attachment=row["attachment"],
                created_at=localize(row["created_at"], self.location),
                updated_at=localize(row["updated_at"], self.location),
            )
            for row in rows
        ]

    def _exec(self, sink: StatementSink, stmt: Executable):
        try:
            return sink.execute(stmt)
        except SQLAlchemyError as exc:
            log.error("%s: %s", stmt, exc)
            raise classify_db_error(exc) from exc
