"""FastAPI application entrypoint.

This module wires the VentureHub API together: logging, CORS, the
request-id middleware, the JSON error handler for service errors, the
routers in `venturehub.routes` and the read-only `/storage` file mount.
Controllers are intentionally thin: they accept requests, delegate to
services, and return JSON responses.
"""

import json
import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from .config import settings
from .database import create_db_and_tables
from .errors import ServiceError
from .routes import admin, articles, auth, connections, investors, matchmakings, notifications, startups, storage

app = FastAPI(title="VentureHub API")
logger = logging.getLogger("venturehub.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

# Wide-open CORS lets a local front-end dev server talk to the API without extra config.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


def _request_log(request: Request, req_id: str, started: float, **extra) -> str:
    return json.dumps(
        {
            "request_id": req_id,
            "path": request.url.path,
            "method": request.method,
            **extra,
            "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
            "client": request.client.host if request.client else "unknown",
        },
        ensure_ascii=True,
    )


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("request_failed %s", _request_log(request, req_id, started))
        raise
    response.headers["X-Request-ID"] = req_id
    logger.info("request_done %s", _request_log(request, req_id, started, status_code=response.status_code))
    return response


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("service error on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}


for module in (auth, startups, investors, connections, matchmakings, notifications, articles, admin, storage):
    app.include_router(module.router)

# Uploaded pitch decks and logos; mounted after the routers so upload endpoints win.
settings.STORAGE_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/storage", StaticFiles(directory=settings.STORAGE_DIR), name="storage")
