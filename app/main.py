# app/main.py

import logging
import subprocess
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app.core.config import get_settings
from app.core.logging_config import configure_logging
from app.database import create_tables
from app.routes import dashboard, health, mappings, marketplaces, migrations
from app.services.migration_runner import recover_stuck_migrations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    settings = get_settings()

    if settings.RUN_MIGRATIONS:
        logger.info("Running database migrations...")
        result = subprocess.run(['alembic', 'upgrade', 'head'], capture_output=True, text=True)
        if result.returncode == 0:
            logger.info("Migrations completed successfully")
        else:
            logger.error(f"Migration failed: {result.stderr}")
    elif settings.is_sqlite:
        await create_tables()

    if settings.RECOVER_STUCK_MIGRATIONS:
        try:
            await recover_stuck_migrations()
        except Exception as e:
            logger.error(f"Could not recover interrupted migrations: {e}")

    yield


app = FastAPI(
    title="Marketplace Migrator",
    lifespan=lifespan
)


# Add middleware to handle HTTPS behind proxy
@app.middleware("http")
async def proxy_headers_middleware(request: Request, call_next):
    forwarded_proto = request.headers.get("x-forwarded-proto")
    if forwarded_proto == "https":
        request.scope["scheme"] = "https"
    return await call_next(request)


app.include_router(health.router)
app.include_router(dashboard.router)
app.include_router(migrations.router)
app.include_router(mappings.router)
# Catch-all /api/{marketplace} prefix goes last
app.include_router(marketplaces.router)
