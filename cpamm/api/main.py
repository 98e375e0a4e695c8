"""FastAPI application for the AMM program.

Note: Authentication is not implemented at the application level. Callers
name their key in the request body; signature verification belongs to the
gateway in front of this service.
"""

import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cpamm import __version__
from cpamm.api.endpoints import router
from cpamm.errors import AmmError, PoolNotFound

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("CPAMM_HOST", "0.0.0.0")
PORT = int(os.environ.get("CPAMM_PORT", "8000"))
DEBUG = os.environ.get("CPAMM_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

app = FastAPI(
    title="Constant-Product AMM",
    description="Constant-product automated market maker over an in-memory reserve ledger",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(AmmError)
async def amm_error_handler(request: Request, exc: AmmError) -> JSONResponse:
    """Report a rejected instruction as 400 (404 for an unknown pool)."""
    status_code = 404 if isinstance(exc, PoolNotFound) else 400
    return JSONResponse(status_code=status_code, content={"error": exc.code, "detail": str(exc)})


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the AMM API server.

    Configuration via environment variables:
    - CPAMM_HOST: Host to bind to (default: 0.0.0.0)
    - CPAMM_PORT: Port to bind to (default: 8000)
    - CPAMM_DEBUG: Enable debug/reload mode (default: false)
    """
    uvicorn.run(
        "cpamm.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
