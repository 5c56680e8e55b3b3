from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request, Response

from normconv.core.config import settings
from normconv.core.logging import configure_logging, correlation_context, get_logger
from normconv.core.metrics import get_counters, get_metrics
from normconv.data.registry import get_norm_store
from normconv.engine.norms.store import NormativeTableStore
from normconv.routers.convert import router as convert_router
from normconv.routers.exceptions import register_exception_handlers


configure_logging(environment=settings.environment, debug=settings.debug)
logger = get_logger("normconv.main", component="app")

_app_start_time = datetime.now(timezone.utc)
CORRELATION_HEADER = "X-Correlation-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Build the shared read-only store before serving the first request.
    store = get_norm_store()
    logger.info(
        "startup_norm_store_ready",
        extra={"structured_data": {"bands": len(store), "skipped": len(store.skipped)}},
    )
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)
register_exception_handlers(app)
app.include_router(convert_router)


@app.middleware("http")
async def bind_correlation_id(request: Request, call_next):
    with correlation_context(request.headers.get(CORRELATION_HEADER)) as cid:
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = cid
        return response


@app.get("/health")
def health(store: NormativeTableStore = Depends(get_norm_store)):
    """Liveness plus a summary of the loaded norms and recorded metrics."""
    now = datetime.now(timezone.utc)
    counters = get_counters()
    return {
        "status": "healthy" if len(store) else "degraded",
        "started_at": _app_start_time.isoformat(),
        "uptime_seconds": round((now - _app_start_time).total_seconds(), 2),
        "environment": settings.environment,
        "norms": {
            "bands": len(store),
            "skipped_definitions": len(store.skipped),
        },
        "metrics_summary": {
            "tracked_operations": len(get_metrics()),
            "conversions": int(counters.get("conversion.convert.calls", 0)),
        },
    }


@app.get("/", include_in_schema=False)
def root():
    return {
        "name": settings.app_name,
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/favicon.ico", include_in_schema=False)
def favicon():
    return Response(status_code=204)
