"""FastAPI application for the exchange engine."""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from dex.api.endpoints import router
from dex.config import load_pool_config
from dex.errors import DexError, PoolAlreadyExists, PoolNotFound
from dex.models import ErrorResponse
from dex.pools import PoolRegistry

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("DEX_HOST", "0.0.0.0")
PORT = int(os.environ.get("DEX_PORT", "8000"))
DEBUG = os.environ.get("DEX_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("DEX_LOG_LEVEL", "info").upper()

# Engine errors that map to a status other than 422
ERROR_STATUS: dict[type[DexError], int] = {
    PoolNotFound: status.HTTP_404_NOT_FOUND,
    PoolAlreadyExists: status.HTTP_409_CONFLICT,
}


def status_for(error: DexError) -> int:
    """HTTP status code for an engine error."""
    for error_type, code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return code
    return status.HTTP_422_UNPROCESSABLE_ENTITY


async def handle_dex_error(request: Request, exc: Exception) -> JSONResponse:
    """Turn an engine error into a JSON error body."""
    assert isinstance(exc, DexError)
    status_code = status_for(exc)
    logger.warning(
        "api_request_failed",
        method=request.method,
        path=request.url.path,
        error=exc.code,
        detail=str(exc),
        status_code=status_code,
    )
    body = ErrorResponse(error=exc.code, detail=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app(registry: PoolRegistry | None = None) -> FastAPI:
    """Build the API application around a registry.

    Args:
        registry: Registry to serve. If None, an empty one is built from
            the DEX_* environment variables.
    """
    app = FastAPI(
        title="DEX Engine",
        description="Constant product liquidity pools with claim token accounting",
        version="0.1.0",
    )
    app.state.registry = registry if registry is not None else PoolRegistry(load_pool_config())
    app.add_exception_handler(DexError, handle_dex_error)
    app.include_router(router)

    @app.get("/health")
    async def health() -> dict[str, object]:
        """Health check endpoint."""
        return {"status": "ok", "pools": len(app.state.registry)}

    return app


app = create_app()


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure structlog for console output at the given level."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )


def run() -> None:
    """Run the engine API server.

    Configuration via environment variables:
    - DEX_HOST: Host to bind to (default: 0.0.0.0)
    - DEX_PORT: Port to bind to (default: 8000)
    - DEX_DEBUG: Enable debug/reload mode (default: false)
    - DEX_LOG_LEVEL: Minimum log level (default: info)
    - DEX_DEFAULT_FEE_RATE: Fee for pools created without one (default: 0.003)
    """
    configure_logging()
    uvicorn.run(
        "dex.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
