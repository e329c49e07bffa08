"""HTTP routes."""

from fastapi import APIRouter

from campus_pulse.api.routes import auth, comments, health, pings

router = APIRouter()
router.include_router(health.router, tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(pings.router, tags=["pings"])
router.include_router(comments.router, tags=["comments"])
