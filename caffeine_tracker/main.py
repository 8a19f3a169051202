"""
Caffeine Tracker API entry point.

  uvicorn caffeine_tracker.main:app
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from caffeine_tracker.api import routes
from caffeine_tracker.config import LOG_LEVEL
from caffeine_tracker.core.errors import (
    CaffeineEngineError,
    InvalidConfiguration,
    InvalidInput,
    OutOfRange,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
log = logging.getLogger("caffeine.api")

# OutOfRange is the only kind a client can fix by asking for a wider range.
ERROR_STATUS = {
    InvalidInput: 400,
    InvalidConfiguration: 422,
    OutOfRange: 416,
}


async def engine_error_handler(request: Request, exc: CaffeineEngineError):
    status = next(
        (code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)),
        500,
    )
    log.warning("%s %s -> %d %s: %s", request.method, request.url.path,
                status, type(exc).__name__, exc)
    return JSONResponse(
        status_code=status,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Caffeine Tracker API",
        description="Caffeine decay, aggregation and intake statistics",
        version="0.1.0",
    )
    app.add_exception_handler(CaffeineEngineError, engine_error_handler)
    app.include_router(routes.router, tags=["caffeine"])

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app


app = create_app()
