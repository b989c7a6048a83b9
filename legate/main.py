"""FastAPI application entry point."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from legate.api import router as api_router
from legate.core.logging import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title="Legate Readiness",
    description="Estate readiness scoring, readiness plans and plan diffs",
    version="0.1.0",
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Keep the {ok, error} envelope for anything a route did not catch."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        content={"ok": False, "error": "server_error"},
        status_code=500,
        headers={"Cache-Control": "no-store"},
    )


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "ok"}, status_code=200)


app.include_router(api_router, prefix="/v1", tags=["v1"])
