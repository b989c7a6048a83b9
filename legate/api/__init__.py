"""API router for v1 endpoints."""

from fastapi import APIRouter

from legate.api import readiness

router = APIRouter()

# Estate readiness score and plan routes
router.include_router(readiness.router, tags=["readiness"])
