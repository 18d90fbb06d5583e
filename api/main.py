# api/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.errors import register_error_handlers
from api.routes import (
    analytics,
    auth,
    creative_works,
    health,
    ledger,
    license_offerings,
    licenses,
    orders,
    royalty_splits,
)
from config.settings import settings
from models.database import build_engine, build_sessionmaker

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("creativechain")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """One engine per process, built on startup and disposed on shutdown."""
    engine = build_engine()
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)
    logger.info(f"CreativeChain API starting ({settings.environment})")

    yield

    await engine.dispose()
    logger.info("CreativeChain API shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(title="CreativeChain API", version="0.1.0", lifespan=lifespan)
    register_error_handlers(app)

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(creative_works.router, prefix="/api", tags=["creative-works"])
    app.include_router(license_offerings.router, prefix="/api", tags=["license-offerings"])
    app.include_router(royalty_splits.router, prefix="/api", tags=["royalty-splits"])
    app.include_router(orders.router, prefix="/api", tags=["orders"])
    app.include_router(licenses.router, prefix="/api", tags=["licenses"])
    app.include_router(ledger.router, prefix="/api", tags=["ledger"])
    app.include_router(analytics.router, prefix="/api", tags=["analytics"])

    @app.get("/")
    async def root():
        return {"message": "CreativeChain API"}

    return app


app = create_app()
