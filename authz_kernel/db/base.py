"""
Module: authz_kernel.db.base
Responsibility: Declarative base for the authorization ORM models.  Provides
    the UUID primary key convention, timezone-aware timestamps that survive
    backends without native timezone support, and a type annotation map for
    consistent column types.
Architecture position: Kernel > DB.  Lowest-level import target for
    ``authz_kernel.models``.  MUST NOT import from models/, domain/, or outer
    layers.

Invariants enforced:
    - UUID primary keys: every model inherits a uuid4-generated primary key
      stored as String(36).
    - Timestamps are always returned timezone-aware (UTC when the backend
      drops the offset).
"""

from datetime import datetime, timezone
from typing import Any, ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36) for cross-database portability.

    Guarantees:
        - process_bind_param: UUID -> str on INSERT/UPDATE.
        - process_result_value: str -> UUID on SELECT.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class AwareDateTime(TypeDecorator):
    """
    Timezone-aware datetime on every backend.

    SQLite stores ``DateTime(timezone=True)`` without an offset; values are
    normalized to UTC on write and re-tagged as UTC on read.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("naive datetimes are not accepted; pass a timezone-aware value")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Base(DeclarativeBase):
    """
    Declarative base for all authorization models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - datetime maps to AwareDateTime -- always timezone-aware.
        - dict maps to JSON -- used for policy condition payloads.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: AwareDateTime(),
        PyUUID: UUIDString(),
        dict[str, Any]: JSON,
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


# Re-export UUID for convenience
UUID = PyUUID
