"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from roady.app.api.v1.endpoints import auth, tracking, trips

router = APIRouter()

# Identity collaborator
router.include_router(auth.router)

# Trip session lifecycle and telemetry ingestion
router.include_router(tracking.router)

# Trip history
router.include_router(trips.router)
