# app/main.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis

from app.catalog import FactCatalog, load_default_catalog
from app.domain.engine import RoomEngine
from app.domain.sync import SyncCoordinator
from app.settings import Settings, get_settings
from app.store.memory_repo import MemoryRepo
from app.store.redis_repo import RedisRepo
from app.transport.admin import router as admin_router
from app.transport.http import router as api_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    repo=None,
    catalog: Optional[FactCatalog] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(title=settings.APP_NAME)
    allowed_origins = [o.strip() for o in settings.CORS_ALLOWED_ORIGINS.split(",") if o.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def _startup() -> None:
        app.state.redis = None
        if repo is not None:
            app.state.repo = repo
        elif settings.ROOM_STORE == "redis":
            r = Redis.from_url(settings.REDIS_URL, decode_responses=False)
            app.state.redis = r
            app.state.repo = RedisRepo(r, room_ttl_sec=settings.ROOM_TTL_SEC)
            await r.ping()
        else:
            app.state.repo = MemoryRepo()

        cat = catalog or load_default_catalog()
        app.state.engine = RoomEngine(app.state.repo, cat)
        app.state.sync = SyncCoordinator(
            app.state.engine,
            timeout_sec=settings.LONG_POLL_TIMEOUT_SEC,
            interval_sec=settings.LONG_POLL_INTERVAL_SEC,
        )
        logger.info(
            "%s started (store=%s, facts real=%s fake=%s)",
            settings.APP_NAME,
            type(app.state.repo).__name__,
            getattr(cat, "real_count", "?"),
            getattr(cat, "fake_count", "?"),
        )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        r: Optional[Redis] = app.state.redis
        if r is not None:
            await r.close()

    @app.get("/health")
    async def health():
        ok = await app.state.repo.ping()
        return {"ok": ok, "store": type(app.state.repo).__name__}

    app.include_router(api_router)
    app.include_router(admin_router)
    return app


app = create_app()
