from datetime import datetime, timezone
import enum

from sqlalchemy import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_column_type(enum_cls: type[enum.Enum], name: str) -> Enum:
    """Store enum values ("admin") rather than member names ("ADMIN")."""
    return Enum(enum_cls, name=name, values_callable=lambda members: [m.value for m in members])
