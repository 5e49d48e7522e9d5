from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class _Named(BaseModel):
    name: str = Field(min_length=1)
    # Optional public id; generated from the row id when omitted.
    key: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class EntityCreate(_Named):
    pass


class HallCreate(_Named):
    pass


class CameraCreate(_Named):
    pass


class ApiCamera(BaseModel):
    cameraId: str
    cameraName: str


class ApiHall(BaseModel):
    hallId: str
    hallName: str
    cameras: list[ApiCamera] = Field(default_factory=list)


class ApiEntity(BaseModel):
    id: str = Field(serialization_alias="_id")
    entityName: str
    halls: list[ApiHall] = Field(default_factory=list)


class EntitiesResponse(BaseModel):
    entities: list[ApiEntity]
