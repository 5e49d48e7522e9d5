from __future__ import annotations

import logging
import os
from pathlib import Path

from sqlmodel import Session, SQLModel, create_engine, select

LOGGER = logging.getLogger(__name__)


def _default_db_url() -> str:
    # Keep data out of git by default.
    data_dir = Path(os.environ.get("HALL_CATALOG_DATA_DIR", Path.cwd() / "data"))
    data_dir.mkdir(parents=True, exist_ok=True)
    db_path = data_dir / "hall_catalog.db"
    return f"sqlite:///{db_path}"


_engine = None


def get_engine():
    global _engine
    if _engine is None:
        _engine = create_engine(
            os.environ.get("HALL_CATALOG_DB_URL", _default_db_url()),
            echo=False,
            connect_args={"check_same_thread": False},
        )
    return _engine


def _seed_enabled() -> bool:
    return os.environ.get("HALL_CATALOG_SEED", "1").lower() not in ("0", "false", "no")


def seed_sample_catalog(session: Session) -> bool:
    from hall_annotator.catalog import SAMPLE_CATALOG

    from .models import Camera, Entity, Hall

    if session.exec(select(Entity)).first() is not None:
        return False

    entity_ids: dict[str, int] = {}
    hall_ids: dict[str, int] = {}
    for e in SAMPLE_CATALOG.entities:
        row = Entity(key=e.id, name=e.name)
        session.add(row)
        session.flush()
        entity_ids[e.id] = row.id
    for h in SAMPLE_CATALOG.halls:
        row = Hall(key=h.id, name=h.name, entity_id=entity_ids[h.entity_id])
        session.add(row)
        session.flush()
        hall_ids[h.id] = row.id
    for c in SAMPLE_CATALOG.cameras:
        session.add(Camera(key=c.id, name=c.name, hall_id=hall_ids[c.hall_id]))
    session.commit()
    LOGGER.info("Seeded sample catalog")
    return True


def init_db() -> None:
    from . import models  # noqa: F401 - ensure models are registered

    engine = get_engine()
    SQLModel.metadata.create_all(engine)
    if _seed_enabled():
        with Session(engine) as session:
            seed_sample_catalog(session)


def get_session() -> Session:
    return Session(get_engine())
