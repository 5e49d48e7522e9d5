from __future__ import annotations

from typing import Optional
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session, delete, select

from .db import get_session, init_db
from .models import Camera, Entity, Hall
from .schemas import (
    ApiCamera,
    ApiEntity,
    ApiHall,
    CameraCreate,
    EntitiesResponse,
    EntityCreate,
    HallCreate,
)


app = FastAPI(title="Cinema Hall Catalog API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup() -> None:
    init_db()


def _session() -> Session:
    return get_session()


def _ensure_key(session: Session, row, prefix: str, key: Optional[str]) -> None:
    # Rows are flushed first so a generated key can reuse the row id.
    row.key = key or f"{prefix}-{uuid4().hex}"
    session.add(row)
    session.flush()
    if key:
        return
    candidate = f"{prefix}{row.id}"
    suffix = 1
    # Client-chosen keys may already occupy the id-derived one.
    while _key_taken(session, type(row), candidate):
        suffix += 1
        candidate = f"{prefix}{row.id}-{suffix}"
    row.key = candidate
    session.add(row)


def _key_taken(session: Session, model, key: Optional[str]) -> bool:
    if not key:
        return False
    return session.exec(select(model).where(model.key == key)).first() is not None


def _entity_by_key(session: Session, key: str) -> Entity:
    entity = session.exec(select(Entity).where(Entity.key == key)).first()
    if not entity:
        raise HTTPException(status_code=404, detail="entity not found")
    return entity


def _hall_by_key(session: Session, key: str) -> Hall:
    hall = session.exec(select(Hall).where(Hall.key == key)).first()
    if not hall:
        raise HTTPException(status_code=404, detail="hall not found")
    return hall


@app.get("/health")
def health() -> dict:
    return {"ok": True}


@app.get("/entities")
def list_entities(session: Session = Depends(_session)) -> dict:
    entities = session.exec(select(Entity).order_by(Entity.id)).all()
    halls = session.exec(select(Hall).order_by(Hall.id)).all()
    cameras = session.exec(select(Camera).order_by(Camera.id)).all()

    cams_by_hall: dict[int, list[ApiCamera]] = {}
    for c in cameras:
        cams_by_hall.setdefault(c.hall_id, []).append(ApiCamera(cameraId=c.key, cameraName=c.name))
    halls_by_entity: dict[int, list[ApiHall]] = {}
    for h in halls:
        halls_by_entity.setdefault(h.entity_id, []).append(
            ApiHall(hallId=h.key, hallName=h.name, cameras=cams_by_hall.get(h.id, []))
        )
    resp = EntitiesResponse(
        entities=[ApiEntity(id=e.key, entityName=e.name, halls=halls_by_entity.get(e.id, [])) for e in entities]
    )
    return resp.model_dump(by_alias=True)


@app.post("/entities")
def create_entity(payload: EntityCreate, session: Session = Depends(_session)) -> dict:
    if _key_taken(session, Entity, payload.key):
        raise HTTPException(status_code=409, detail="entity key already exists")
    e = Entity(key="", name=payload.name)
    _ensure_key(session, e, "entity", payload.key)
    session.commit()
    session.refresh(e)
    return {"id": e.key, "name": e.name}


@app.delete("/entities/{entity_key}")
def delete_entity(entity_key: str, session: Session = Depends(_session)) -> dict:
    entity = _entity_by_key(session, entity_key)
    hall_ids = [h.id for h in session.exec(select(Hall).where(Hall.entity_id == entity.id)).all()]
    if hall_ids:
        session.exec(delete(Camera).where(Camera.hall_id.in_(hall_ids)))
        session.exec(delete(Hall).where(Hall.id.in_(hall_ids)))
    session.delete(entity)
    session.commit()
    return {"deleted": True}


@app.get("/entities/{entity_key}/halls")
def list_halls(entity_key: str, session: Session = Depends(_session)) -> list[dict]:
    entity = _entity_by_key(session, entity_key)
    halls = session.exec(select(Hall).where(Hall.entity_id == entity.id).order_by(Hall.id)).all()
    return [{"id": h.key, "name": h.name, "entityId": entity.key} for h in halls]


@app.post("/entities/{entity_key}/halls")
def create_hall(entity_key: str, payload: HallCreate, session: Session = Depends(_session)) -> dict:
    entity = _entity_by_key(session, entity_key)
    if _key_taken(session, Hall, payload.key):
        raise HTTPException(status_code=409, detail="hall key already exists")
    h = Hall(key="", name=payload.name, entity_id=entity.id)
    _ensure_key(session, h, "hall", payload.key)
    session.commit()
    session.refresh(h)
    return {"id": h.key, "name": h.name, "entityId": entity.key}


@app.get("/halls/{hall_key}/cameras")
def list_cameras(hall_key: str, session: Session = Depends(_session)) -> list[dict]:
    hall = _hall_by_key(session, hall_key)
    cameras = session.exec(select(Camera).where(Camera.hall_id == hall.id).order_by(Camera.id)).all()
    return [{"id": c.key, "name": c.name, "hallId": hall.key} for c in cameras]


@app.post("/halls/{hall_key}/cameras")
def create_camera(hall_key: str, payload: CameraCreate, session: Session = Depends(_session)) -> dict:
    hall = _hall_by_key(session, hall_key)
    if _key_taken(session, Camera, payload.key):
        raise HTTPException(status_code=409, detail="camera key already exists")
    c = Camera(key="", name=payload.name, hall_id=hall.id)
    _ensure_key(session, c, "camera", payload.key)
    session.commit()
    session.refresh(c)
    return {"id": c.key, "name": c.name, "hallId": hall.key}


@app.delete("/cameras/{camera_key}")
def delete_camera(camera_key: str, session: Session = Depends(_session)) -> dict:
    camera = session.exec(select(Camera).where(Camera.key == camera_key)).first()
    if not camera:
        raise HTTPException(status_code=404, detail="camera not found")
    session.delete(camera)
    session.commit()
    return {"deleted": True}
