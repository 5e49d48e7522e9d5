from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    return datetime.utcnow()


class Entity(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    # Stable public id used on the wire (e.g. "entity1").
    key: str = Field(index=True, unique=True)
    name: str

    created_at: datetime = Field(default_factory=_utc_now)


class Hall(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    entity_id: int = Field(index=True, foreign_key="entity.id")
    key: str = Field(index=True, unique=True)
    name: str

    created_at: datetime = Field(default_factory=_utc_now)


class Camera(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    hall_id: int = Field(index=True, foreign_key="hall.id")
    key: str = Field(index=True, unique=True)
    name: str

    created_at: datetime = Field(default_factory=_utc_now)
