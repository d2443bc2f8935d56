"""FastAPI application factory for Mythra-Engine."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mythra_engine.common.config import get_settings
from mythra_engine.common.logging import setup_logging
from mythra_engine.common.schemas import HealthResponse


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        from mythra_engine.deps import get_db
        db = get_db()
        await db.init()
        await db.create_all()
        yield
        # Shutdown
        await db.close()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(version=settings.api_version)

    from mythra_engine.events.router import router as events_router
    from mythra_engine.investments.router import router as investments_router
    from mythra_engine.dao.router import router as dao_router
    from mythra_engine.payouts.router import router as payouts_router
    from mythra_engine.tickets.router import router as tickets_router
    from mythra_engine.stats.router import router as stats_router

    prefix = settings.api_prefix
    app.include_router(events_router, prefix=prefix, tags=["events"])
    app.include_router(investments_router, prefix=prefix, tags=["investments"])
    app.include_router(dao_router, prefix=prefix, tags=["dao"])
    app.include_router(payouts_router, prefix=prefix, tags=["payouts"])
    app.include_router(tickets_router, prefix=prefix, tags=["tickets"])
    app.include_router(stats_router, prefix=prefix, tags=["stats"])

    return app
