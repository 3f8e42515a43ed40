import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.infrastructure.code_store.sweeper import CodeSweeper
from app.infrastructure.db.pool import close_pool, get_pool
from app.infrastructure.redis_cache.pool import close_redis, get_redis
from app.logging import setup_logging
from app.presentation.api import api
from app.presentation.dependencies import get_code_vault
from app.presentation.error_handlers import register_error_handlers
from app.settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    await get_pool().open()
    get_redis()
    sweeper = CodeSweeper(
        get_code_vault(), interval=settings.code_sweep_interval_seconds
    )
    sweeper.start()
    logger.info("api started", extra={"env": settings.app_env})
    try:
        yield
    finally:
        await sweeper.stop()
        await close_redis()
        await close_pool()
        logger.info("api stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)
    app = FastAPI(title="Ride-hailing API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    register_error_handlers(app)
    app.include_router(api)
    return app


app = create_app()
