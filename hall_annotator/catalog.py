from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import requests
from pydantic import BaseModel, Field, ValidationError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Entity:
    id: str
    name: str


@dataclass(frozen=True)
class Hall:
    id: str
    name: str
    entity_id: str


@dataclass(frozen=True)
class Camera:
    id: str
    name: str
    hall_id: str


@dataclass(frozen=True)
class Catalog:
    entities: list[Entity] = field(default_factory=list)
    halls: list[Hall] = field(default_factory=list)
    cameras: list[Camera] = field(default_factory=list)
    source: str = "remote"

    def halls_for(self, entity_id: str) -> list[Hall]:
        return [h for h in self.halls if h.entity_id == entity_id]

    def cameras_for(self, hall_id: str) -> list[Camera]:
        return [c for c in self.cameras if c.hall_id == hall_id]

    def camera(self, camera_id: str) -> Optional[Camera]:
        for c in self.cameras:
            if c.id == camera_id:
                return c
        return None


SAMPLE_CATALOG = Catalog(
    entities=[
        Entity("entity1", "Cinema Complex A"),
        Entity("entity2", "Cinema Complex B"),
    ],
    halls=[
        Hall("hall1", "Hall 1", "entity1"),
        Hall("hall2", "Hall 2", "entity1"),
        Hall("hall3", "Hall 3", "entity2"),
    ],
    cameras=[
        Camera("camera1", "Front Camera", "hall1"),
        Camera("camera2", "Back Camera", "hall1"),
        Camera("camera3", "Main Camera", "hall2"),
        Camera("camera4", "Side Camera", "hall3"),
    ],
    source="sample",
)


# Wire format of GET /entities


class ApiCamera(BaseModel):
    cameraId: str
    cameraName: str


class ApiHall(BaseModel):
    hallId: str
    hallName: str
    cameras: list[ApiCamera] = Field(default_factory=list)


class ApiEntity(BaseModel):
    id: str = Field(alias="_id")
    entityName: str
    halls: list[ApiHall] = Field(default_factory=list)


class ApiResponse(BaseModel):
    entities: list[ApiEntity]


def catalog_from_api(payload: dict) -> Catalog:
    data = ApiResponse.model_validate(payload)
    entities = [Entity(e.id, e.entityName) for e in data.entities]
    halls = [Hall(h.hallId, h.hallName, e.id) for e in data.entities for h in e.halls]
    cameras = [Camera(c.cameraId, c.cameraName, h.hallId) for e in data.entities for h in e.halls for c in h.cameras]
    return Catalog(entities=entities, halls=halls, cameras=cameras, source="remote")


class CatalogProvider:
    """
    Fetches the entity/hall/camera catalog from the catalog service.

    Any failure (connection, HTTP status, malformed payload) falls back to
    ``SAMPLE_CATALOG`` so annotation is never blocked on the network.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 5.0,
        ttl: float = 300.0,
        retries: int = 1,
        fallback: Catalog = SAMPLE_CATALOG,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.url = url
        self.timeout = timeout
        self.ttl = ttl
        self.retries = max(0, int(retries))
        self.fallback = fallback
        self._clock = clock
        self._cached: Optional[Catalog] = None
        self._fetched_at = 0.0

    def _fetch(self) -> Catalog:
        resp = requests.get(self.url, headers={"Content-Type": "application/json"}, timeout=self.timeout)
        resp.raise_for_status()
        return catalog_from_api(resp.json())

    def get(self, *, refresh: bool = False) -> Catalog:
        if not refresh and self._cached is not None and self._clock() - self._fetched_at < self.ttl:
            return self._cached

        last_error: Optional[Exception] = None
        for attempt in range(self.retries + 1):
            try:
                catalog = self._fetch()
            except (requests.RequestException, ValueError, ValidationError) as e:
                last_error = e
                LOGGER.debug("Catalog fetch attempt %d failed: %s", attempt + 1, e)
                continue
            LOGGER.info(
                "Loaded catalog from %s (%d entities, %d cameras)", self.url, len(catalog.entities), len(catalog.cameras)
            )
            self._cached = catalog
            self._fetched_at = self._clock()
            return catalog

        LOGGER.warning("Catalog service unavailable (%s); using sample catalog", last_error)
        self._cached = self.fallback
        self._fetched_at = self._clock()
        return self.fallback
