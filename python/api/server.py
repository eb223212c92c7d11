"""
FastAPI Watchlist Sync API Server

Provides REST endpoints to trigger list synchronization and to read the
synchronized sanctions store.

Usage:
    uvicorn api.server:app --reload --port 8000
"""

import os
import time
import logging
import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Depends, Query

from api.models import (
    SyncResponse,
    SyncAllResponse,
    SearchRequest,
    SearchResponse,
    EntityResponse,
    StatsResponse,
    SyncHistoryEntryResponse,
    HealthResponse,
    ErrorResponse,
)
from api.middleware import (
    setup_cors,
    setup_exception_handlers,
    RequestLoggingMiddleware,
)
from config_manager import get_config, ConfigManager, ConfigurationError
from database.connection import DatabaseSessionProvider, DatabaseSettings, init_db, close_db
from database.models import ListSource
from database.store import SanctionsStore
from ingestion.coordinator import FanOutCoordinator
from ingestion.registry import SOURCES
from logging_config import setup_logging
from xml_utils import sanitize_for_logging

logger = logging.getLogger(__name__)

# Environment variables with defaults
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
CONFIG_PATH = os.getenv("CONFIG_PATH", "config.yaml")

# Global state
_config: Optional[ConfigManager] = None
_db_provider: Optional[DatabaseSessionProvider] = None
_store: Optional[SanctionsStore] = None
_coordinator: Optional[FanOutCoordinator] = None
_startup_time: Optional[datetime] = None
_executor = ThreadPoolExecutor(max_workers=4)  # For blocking store and sync calls

# URL path segment -> list
SOURCE_KEYS: Dict[str, ListSource] = {
    definition.config_key: source for source, definition in SOURCES.items()
}


def get_store() -> SanctionsStore:
    """Dependency to get the store instance."""
    if _store is None:
        raise HTTPException(
            status_code=503, detail="Store not initialized. Service is starting up."
        )
    return _store


def get_coordinator() -> FanOutCoordinator:
    """Dependency to get the sync coordinator."""
    if _coordinator is None:
        raise HTTPException(
            status_code=503, detail="Sync coordinator not initialized. Service is starting up."
        )
    return _coordinator


async def _run_blocking(fn, *args):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_executor, fn, *args)


# Create FastAPI application
app = FastAPI(
    title="Watchlist Sync API",
    description="Synchronize OFAC, UN, EU and Interpol lists into one sanctions store",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# Setup middleware
setup_cors(app)
app.add_middleware(RequestLoggingMiddleware)
setup_exception_handlers(app)


@app.on_event("startup")
async def startup():
    """Load configuration and connect to the store."""
    global _config, _db_provider, _store, _coordinator, _startup_time

    start_time = time.time()

    try:
        _config = get_config(CONFIG_PATH)
        setup_logging(_config.logging)
        logger.info("🚀 Starting Watchlist Sync API...")
        logger.info(f"✓ Configuration loaded from {_config.config_path}")

        settings = DatabaseSettings.from_config(_config.database)
        _db_provider = await _run_blocking(init_db, settings)
        await _run_blocking(_db_provider.create_tables)

        _store = SanctionsStore(_db_provider, batch_size=_config.sync.batch_size)
        _coordinator = FanOutCoordinator(_store, config=_config, logger=logging.getLogger("watchlist_sync"))
        _startup_time = datetime.now(timezone.utc)

        logger.info("✓ API ready in %.2f seconds", time.time() - start_time)

    except ConfigurationError as e:
        logger.error(f"✗ Configuration error: {e}")
        raise
    except Exception as e:
        logger.error(f"✗ Startup error: {e}")
        raise


@app.on_event("shutdown")
async def shutdown():
    """Cleanup on shutdown."""
    logger.info("Shutting down Watchlist Sync API...")
    close_db()


# ============================================
# SYNC
# ============================================

@app.post(
    "/api/v1/sync/all",
    response_model=SyncAllResponse,
    responses={
        200: {"model": SyncAllResponse, "description": "Every list was attempted"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        503: {"model": ErrorResponse, "description": "Service starting up"},
    },
    summary="Sync every list",
    description="Run the OFAC, EU, UN and Interpol syncs concurrently",
)
async def sync_all(coordinator: FanOutCoordinator = Depends(get_coordinator)):
    """Fan out to every list and report one detail line per list."""
    try:
        result = await coordinator.run_all()
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.error("Sync of all lists failed: type=%s message=%s", type(e).__name__, sanitize_for_logging(str(e)))
        raise HTTPException(status_code=500, detail=f"Sync failed: {e}")

    return SyncAllResponse(**result.to_dict())


@app.post(
    "/api/v1/sync/{source}",
    response_model=SyncResponse,
    responses={
        200: {"model": SyncResponse, "description": "Sync attempted"},
        404: {"model": ErrorResponse, "description": "Unknown list"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        503: {"model": ErrorResponse, "description": "Service starting up"},
    },
    summary="Sync one list",
    description="Replace one list's entities with a fresh copy (ofac, un, eu or interpol)",
)
async def sync_source(
    source: str,
    coordinator: FanOutCoordinator = Depends(get_coordinator),
):
    """Sync a single list. A failed sync is reported in the body, not as an error status."""
    list_source = SOURCE_KEYS.get(source.lower())
    if list_source is None:
        raise HTTPException(status_code=404, detail=f"Unknown list '{sanitize_for_logging(source)}'")

    try:
        result = await _run_blocking(coordinator.run_source, list_source)
    except Exception as e:
        logger.error(
            "Sync error: source=%s type=%s message=%s",
            list_source.value,
            type(e).__name__,
            sanitize_for_logging(str(e)),
        )
        raise HTTPException(
            status_code=500,
            detail=f"{SOURCES[list_source].label} sync failed: {e}",
        )

    return SyncResponse(**result.to_dict())


# ============================================
# READ
# ============================================

@app.post(
    "/api/v1/search",
    response_model=SearchResponse,
    responses={
        422: {"model": ErrorResponse, "description": "Validation error"},
        503: {"model": ErrorResponse, "description": "Store unavailable"},
    },
    summary="Search entities",
    description="Filter sanctioned entities by name substring, list, type and nationality",
)
async def search(
    request: SearchRequest,
    store: SanctionsStore = Depends(get_store),
):
    """Return one page of matching entities, ordered by name."""
    page = await _run_blocking(
        lambda: store.search_entities(
            name=request.name,
            list_sources=request.list_sources,
            entity_types=request.entity_types,
            nationalities=request.nationalities,
            page=request.page,
            page_size=request.page_size,
        )
    )
    return SearchResponse(**page)


@app.get(
    "/api/v1/entities/{entity_id}",
    response_model=EntityResponse,
    responses={404: {"model": ErrorResponse, "description": "Entity not found"}},
    summary="Entity details",
)
async def get_entity(
    entity_id: int,
    store: SanctionsStore = Depends(get_store),
):
    entity = await _run_blocking(store.get_entity, entity_id)
    if entity is None:
        raise HTTPException(status_code=404, detail=f"Entity {entity_id} not found")
    return EntityResponse(**entity)


@app.get(
    "/api/v1/admin/stats",
    response_model=StatsResponse,
    summary="Store statistics",
    description="Entity counts per list and type, plus the last update time of each list",
)
async def admin_stats(store: SanctionsStore = Depends(get_store)):
    stats = await _run_blocking(store.get_stats)
    return StatsResponse(**stats)


@app.get(
    "/api/v1/admin/sync-history",
    response_model=List[SyncHistoryEntryResponse],
    summary="Recent sync history",
)
async def admin_sync_history(
    limit: int = Query(default=20, ge=1, le=100),
    store: SanctionsStore = Depends(get_store),
):
    entries = await _run_blocking(store.list_sync_history, limit)
    return [SyncHistoryEntryResponse(**entry) for entry in entries]


@app.get(
    "/api/v1/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check service and database health",
)
async def health_check():
    """Return health status. Always returns HTTP 200."""
    uptime_seconds = None
    if _startup_time:
        uptime_seconds = int((datetime.now(timezone.utc) - _startup_time).total_seconds())

    if _store is None:
        return HealthResponse(status="starting", database="unavailable", uptime_seconds=uptime_seconds)

    try:
        healthy = await _run_blocking(_store.provider.health_check)
        total_records = None
        if healthy:
            stats = await _run_blocking(_store.get_stats)
            total_records = stats["totalRecords"]
    except Exception as e:
        logger.error("Health check failed: %s", sanitize_for_logging(str(e)))
        healthy, total_records = False, None

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        database="ok" if healthy else "unavailable",
        total_records=total_records,
        uptime_seconds=uptime_seconds,
    )


# Root redirect to docs
@app.get("/", include_in_schema=False)
async def root():
    """Redirect root to API documentation."""
    from fastapi.responses import RedirectResponse

    return RedirectResponse(url="/api/docs")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=API_HOST, port=API_PORT)
