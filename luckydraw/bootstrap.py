"""Composition root wiring engine, storage tiers, services and diagnostics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import Settings, settings as default_settings
from .db.engine import get_sessionmaker, make_engine
from .draw import DrawEngine
from .services import AdminService, ContestService, ParticipantService, PrizeService
from .storage import (
    CONTESTS,
    PARTICIPANTS,
    PRIZES,
    FallbackRepository,
    LocalRepository,
    LocalStorage,
    SqlRepository,
    StorageMonitor,
)
from .storage.base import EntitySpec

logger = logging.getLogger(__name__)


@dataclass
class LuckyDrawApp:
    """Everything a front end needs, built once and passed around explicitly."""

    engine: Engine
    session_factory: sessionmaker
    local_storage: LocalStorage
    contests: ContestService
    prizes: PrizeService
    participants: ParticipantService
    monitor: StorageMonitor

    def session(self) -> Session:
        return self.session_factory()

    def draw_engine(self, session: Session) -> DrawEngine:
        return DrawEngine(session)

    def admin_service(self, session: Session) -> AdminService:
        return AdminService(session)


def build_app(
    config: Optional[Settings] = None,
    *,
    engine: Optional[Engine] = None,
    local_storage: Optional[LocalStorage] = None,
) -> LuckyDrawApp:
    """Build a :class:`LuckyDrawApp`.

    Parameters
    ----------
    config : Optional[Settings], default: None
        Settings to use; defaults to the environment-derived settings.
    engine : Optional[Engine], default: None
        Pre-built SQLAlchemy engine for the remote store (tests pass an
        in-memory one).
    local_storage : Optional[LocalStorage], default: None
        Local fallback store; defaults to the file at ``LOCAL_STORAGE_PATH``.
    """
    cfg = config or default_settings
    engine = engine or make_engine(cfg.DB_URL, echo=cfg.DB_ECHO)
    session_factory = get_sessionmaker(engine)
    local_storage = local_storage if local_storage is not None else LocalStorage(
        cfg.LOCAL_STORAGE_PATH
    )

    def accessor(spec: EntitySpec) -> FallbackRepository:
        return FallbackRepository(
            SqlRepository(session_factory, spec),
            LocalRepository(local_storage, spec),
            fallback_on_empty=cfg.FALLBACK_ON_EMPTY,
        )

    contests, prizes, participants = accessor(CONTESTS), accessor(PRIZES), accessor(PARTICIPANTS)
    logger.debug("Lucky draw app wired to %s", engine.url.render_as_string(hide_password=True))
    return LuckyDrawApp(
        engine=engine,
        session_factory=session_factory,
        local_storage=local_storage,
        contests=ContestService(contests),
        prizes=PrizeService(prizes),
        participants=ParticipantService(participants),
        monitor=StorageMonitor([contests, prizes, participants]),
    )
