"""FastAPI API endpoints under /api.

Endpoint groups:
  interact      POST /interact                 item-on-object resolution (cached)
  jacobs        POST /jacobs/react|review|chat Jacobs' voice
  interactions  /interactions[/{id}]           rule cache admin (CRUD)
  settings      /health, /settings, /check-connection

The AI endpoints are rate-limited per caller (first X-Forwarded-For entry);
a denied call gets 429 with {"error", "retryAfter"} and a Retry-After header.
"""

from fastapi import APIRouter

from .interact import router as interact_router
from .interactions import router as interactions_router
from .jacobs import router as jacobs_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(interact_router)
router.include_router(jacobs_router)
router.include_router(interactions_router)
