"""
Tesouro FastAPI server.

Endpoints:
- POST /sessions                          - New game
- GET  /sessions                          - Saved sessions
- GET  /sessions/{id}                     - Full snapshot
- POST /sessions/{id}/play_card           - {"index": N}
- POST /sessions/{id}/discard_card        - {"index": N}
- POST /sessions/{id}/end_turn
- POST /sessions/{id}/resolve_event       - {"index": N}
- POST /sessions/{id}/resolve_council     - {"index": N}
- POST /sessions/{id}/pick_reward         - {"index": N}
- POST /sessions/{id}/skip_reward
- POST /sessions/{id}/set_biome           - {"biome": "praia"}
- POST /sessions/{id}/reset               - {"biome": null}
- GET  /sessions/{id}/profile             - Dominant profile, alerts, report
- DELETE /sessions/{id}

Every accepted command writes the new snapshot back to the store, so a
restarted server picks the game up where it stopped.
"""

import logging
from collections import OrderedDict
from typing import Callable

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import EngineConfig
from ..state.catalog import Catalog, default_catalog
from ..state.event_bus import EventBus
from ..state.schemas.result import CommandResult
from ..state.store import MemorySessionStore, SessionRecord, SessionStore
from ..systems.turns import GameEngine
from ..tools.rng import SeededRandom
from .schemas import (
    BiomeRequest,
    CommandResponse,
    CreateSessionRequest,
    IndexRequest,
    ProfileResponse,
    ResetRequest,
    SessionResponse,
)

logger = logging.getLogger(__name__)


class TesouroAPI:
    """
    Session registry behind the HTTP routes.

    Live engines are cached per session, least recently used evicted
    first. A session missing from the cache is rebuilt from its stored
    snapshot with a fresh random source.
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        catalog: Catalog | None = None,
        config: EngineConfig | None = None,
        max_engines: int = 64,
    ):
        self.store = store or MemorySessionStore()
        self.catalog = catalog or default_catalog()
        self.config = config or EngineConfig()
        self.bus = EventBus()
        self.max_engines = max_engines
        self._engines: OrderedDict[str, GameEngine] = OrderedDict()

    def create(self, biome: str | None, seed: int | None) -> tuple[SessionRecord, GameEngine]:
        if biome is not None and not self.catalog.has_biome(biome):
            raise HTTPException(status_code=422, detail=f"Unknown biome: {biome}")
        record = SessionRecord()
        engine = GameEngine(
            catalog=self.catalog,
            config=self.config,
            rng=SeededRandom(seed),
            bus=self.bus,
            biome=biome,
            session_id=record.id,
        )
        self._cache(record.id, engine)
        self.persist(record, engine)
        logger.info(f"Created session {record.id} in {engine.state.biome}")
        return record, engine

    def get(self, session_id: str) -> tuple[SessionRecord, GameEngine]:
        record = self.store.load(session_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
        engine = self._engines.get(record.id)
        if engine is not None:
            self._engines.move_to_end(record.id)
        else:
            engine = GameEngine.from_snapshot(
                record.snapshot,
                catalog=self.catalog,
                config=self.config,
                bus=self.bus,
                session_id=record.id,
            )
            self._cache(record.id, engine)
        return record, engine

    def _cache(self, session_id: str, engine: GameEngine) -> None:
        self._engines[session_id] = engine
        self._engines.move_to_end(session_id)
        while len(self._engines) > self.max_engines:
            evicted, _ = self._engines.popitem(last=False)
            logger.debug(f"Evicted engine for session {evicted}")

    def persist(self, record: SessionRecord, engine: GameEngine) -> None:
        record.snapshot = engine.snapshot()
        self.store.save(record)

    def run(self, session_id: str, command: Callable[[GameEngine], CommandResult]) -> CommandResponse:
        record, engine = self.get(session_id)
        result = command(engine)
        if result.accepted:
            self.persist(record, engine)
        return CommandResponse(
            ok=result.accepted,
            session_id=record.id,
            command=result.command,
            reason=result.reason,
            state_version=result.state_version,
            phase=engine.phase.value,
            log=result.summary,
            state=engine.snapshot(),
        )

    def delete(self, session_id: str) -> bool:
        record = self.store.load(session_id)
        if record is None:
            return False
        self._engines.pop(record.id, None)
        return self.store.delete(record.id)


def create_app(
    store: SessionStore | None = None,
    catalog: Catalog | None = None,
    config: EngineConfig | None = None,
) -> FastAPI:
    """Create the FastAPI application."""
    api = TesouroAPI(store=store, catalog=catalog, config=config)

    app = FastAPI(
        title="Tesouro API",
        description="REST API for the Tesouro deck engine",
        version=__version__,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.api = api

    def get_api() -> TesouroAPI:
        return app.state.api

    @app.get("/health")
    async def health_check():
        return {"ok": True, "service": "tesouro-api", "version": __version__}

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    @app.post("/sessions", response_model=SessionResponse)
    async def create_session(request: CreateSessionRequest, api: TesouroAPI = Depends(get_api)):
        record, engine = api.create(request.biome, request.seed)
        return SessionResponse(session_id=record.id, state=engine.snapshot())

    @app.get("/sessions")
    async def list_sessions(api: TesouroAPI = Depends(get_api)):
        sessions = [
            {**summary, "updated_at": summary["updated_at"].isoformat()}
            for summary in api.store.list_all()
        ]
        return {"ok": True, "sessions": sessions}

    @app.get("/sessions/{session_id}", response_model=SessionResponse)
    async def get_session(session_id: str, api: TesouroAPI = Depends(get_api)):
        record, engine = api.get(session_id)
        return SessionResponse(session_id=record.id, state=engine.snapshot())

    @app.delete("/sessions/{session_id}")
    async def delete_session(session_id: str, api: TesouroAPI = Depends(get_api)):
        if not api.delete(session_id):
            raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
        return {"ok": True}

    @app.get("/sessions/{session_id}/profile", response_model=ProfileResponse)
    async def get_profile(session_id: str, api: TesouroAPI = Depends(get_api)):
        record, engine = api.get(session_id)
        return ProfileResponse(
            session_id=record.id,
            dominant_profile=engine.dominant_profile().value,
            alerts=engine.alerts(),
            report=engine.edu_report(),
        )

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    @app.post("/sessions/{session_id}/play_card", response_model=CommandResponse)
    async def play_card(session_id: str, request: IndexRequest, api: TesouroAPI = Depends(get_api)):
        return api.run(session_id, lambda engine: engine.play_card(request.index))

    @app.post("/sessions/{session_id}/discard_card", response_model=CommandResponse)
    async def discard_card(session_id: str, request: IndexRequest, api: TesouroAPI = Depends(get_api)):
        return api.run(session_id, lambda engine: engine.discard_card(request.index))

    @app.post("/sessions/{session_id}/end_turn", response_model=CommandResponse)
    async def end_turn(session_id: str, api: TesouroAPI = Depends(get_api)):
        return api.run(session_id, lambda engine: engine.end_turn())

    @app.post("/sessions/{session_id}/resolve_event", response_model=CommandResponse)
    async def resolve_event(session_id: str, request: IndexRequest, api: TesouroAPI = Depends(get_api)):
        return api.run(session_id, lambda engine: engine.resolve_event(request.index))

    @app.post("/sessions/{session_id}/resolve_council", response_model=CommandResponse)
    async def resolve_council(session_id: str, request: IndexRequest, api: TesouroAPI = Depends(get_api)):
        return api.run(session_id, lambda engine: engine.resolve_council(request.index))

    @app.post("/sessions/{session_id}/pick_reward", response_model=CommandResponse)
    async def pick_reward(session_id: str, request: IndexRequest, api: TesouroAPI = Depends(get_api)):
        return api.run(session_id, lambda engine: engine.pick_reward(request.index))

    @app.post("/sessions/{session_id}/skip_reward", response_model=CommandResponse)
    async def skip_reward(session_id: str, api: TesouroAPI = Depends(get_api)):
        return api.run(session_id, lambda engine: engine.skip_reward())

    @app.post("/sessions/{session_id}/set_biome", response_model=CommandResponse)
    async def set_biome(session_id: str, request: BiomeRequest, api: TesouroAPI = Depends(get_api)):
        return api.run(session_id, lambda engine: engine.set_biome(request.biome))

    @app.post("/sessions/{session_id}/reset", response_model=CommandResponse)
    async def reset(session_id: str, request: ResetRequest, api: TesouroAPI = Depends(get_api)):
        return api.run(session_id, lambda engine: engine.reset(request.biome))

    return app
