"""SQLAlchemy mapping metadata for cases and their history.

Column names follow the legacy schema (``casenumber``, ``modifiers``,
``action``); attribute keys follow the domain model.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from functools import cache
from typing import Any, Final, cast

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    TypeDecorator,
    orm,
)
from sqlalchemy.orm import configure_mappers

from caseflow.domain.model import AuditEntry, Case, Department

log = logging.getLogger(__name__)

# Digital cases were called "General" before the department was renamed.
_DEPARTMENT_TO_DB: Final[dict[Department, str]] = {
    Department.DIGITAL: "General",
    Department.METAL: Department.METAL.value,
    Department.CROWN_AND_BRIDGE: Department.CROWN_AND_BRIDGE.value,
}
_DEPARTMENT_FROM_DB: Final[dict[str, Department]] = {
    stored: department for department, stored in _DEPARTMENT_TO_DB.items()
}


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class DepartmentType(TypeDecorator[Department]):
    impl = String(32)
    cache_ok = True

    def process_bind_param(self, value: Department | str | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return _DEPARTMENT_TO_DB[Department(value)]

    def process_result_value(self, value: str | None, dialect: Dialect) -> Department | None:
        _ = dialect
        if value is None:
            return None
        department = _DEPARTMENT_FROM_DB.get(value)
        return department if department is not None else Department(value)


class TagListType(TypeDecorator[list[str]]):
    """Ordered tag list stored as a JSON array of strings."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[str] | None, dialect: Dialect) -> str:
        _ = dialect
        return json.dumps(list(value or []))

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[str]:
        _ = dialect
        if not value:
            return []
        try:
            loaded = json.loads(value)
        except ValueError:
            log.warning("Ignoring unparseable tag column value %r", value)
            return []
        if not isinstance(loaded, list):
            log.warning("Ignoring malformed tag column value %r", value)
            return []
        items = cast(list[Any], loaded)
        return [item for item in items if isinstance(item, str)]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

case_table = Table(
    "cases",
    mapper_registry.metadata,
    Column("id", String(36), primary_key=True),
    Column("casenumber", String(255), nullable=False, key="case_number"),
    Column("department", DepartmentType(), nullable=False),
    Column("due", Date, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("priority", Boolean, nullable=False, default=False),
    Column("completed", Boolean, nullable=False, default=False),
    Column("archived", Boolean, nullable=False, default=False),
    Column("archived_at", UTCDateTime(), nullable=True),
    Column("modifiers", TagListType(), nullable=False, key="tags"),
    Index("ix_cases_archived_due", "archived", "due"),
)

case_history_table = Table(
    "case_history",
    mapper_registry.metadata,
    Column("id", String(36), primary_key=True),
    Column(
        "case_id",
        String(36),
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("action", Text, nullable=False, key="text"),
    Column("user_name", String(255), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Map the domain dataclasses onto the tables. Safe to call repeatedly."""

    mapper_registry.map_imperatively(Case, case_table)
    mapper_registry.map_imperatively(AuditEntry, case_history_table)

    configure_mappers()
    return mapper_registry

