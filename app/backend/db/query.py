# app/backend/db/query.py
"""
Small statement builders over SQLAlchemy Core.

Predicates and assignments are collected as (column, operator, value) triples
and turned into `select`/`insert`/`update` constructs on `build()`. Tables are
lightweight `sqlalchemy.table()` clauses so their names can come from config;
typed columns keep datetime binds and results timezone-aware.
"""
from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy import insert, select, update
from sqlalchemy.sql import ColumnElement, Insert, Select, TableClause, Update

_OPERATORS: Dict[str, Callable[[Any, Any], ColumnElement]] = {
    "=": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "LIKE": lambda col, value: col.like(value),
}


@dataclass
class Predicate:
    column: str
    operator: str
    value: Any


def _clause(source: TableClause, p: Predicate) -> ColumnElement:
    col = source.c[p.column]
    # comparing with None through == / != already yields IS NULL / IS NOT NULL
    return _OPERATORS[p.operator](col, p.value)


class _Filtered:
    def __init__(self, source: TableClause):
        self.source = source
        self.predicates: List[Predicate] = []

    def where(self, column: str, op: str, value: Any):
        if op not in _OPERATORS:
            raise ValueError(f"unsupported operator {op!r}")
        if column not in self.source.c:
            raise ValueError(f"unknown column {column!r} on {self.source.name}")
        self.predicates.append(Predicate(column, op, value))
        return self

    def where_eq(self, column: str, value: Any):
        return self.where(column, "=", value)

    def _apply(self, stmt):
        for p in self.predicates:
            stmt = stmt.where(_clause(self.source, p))
        return stmt


class SelectQuery(_Filtered):
    def __init__(self, source: TableClause, columns: Optional[Sequence[str]] = None):
        super().__init__(source)
        self.columns = list(columns) if columns else [c.name for c in source.c]

    def build(self) -> Select:
        return self._apply(select(*(self.source.c[name] for name in self.columns)))


class InsertQuery:
    def __init__(self, source: TableClause, values: Dict[str, Any], returning: Optional[str] = None):
        self.source = source
        self.values = dict(values)
        self.returning = returning

    def build(self) -> Insert:
        stmt = insert(self.source).values(**self.values)
        if self.returning:
            stmt = stmt.returning(self.source.c[self.returning])
        return stmt


class UpdateQuery(_Filtered):
    def __init__(self, source: TableClause):
        super().__init__(source)
        self.assignments: Dict[str, Any] = {}

    def set(self, column: str, value: Any) -> "UpdateQuery":
        self.assignments[column] = value
        return self

    def build(self) -> Update:
        if not self.assignments:
            raise ValueError("update without assignments")
        return self._apply(update(self.source).values(**self.assignments))
