"""Interaction resolution endpoint."""

from fastapi import APIRouter, Request

from backend.resolver import InteractionResolver, RateLimitExceeded

from .limits import caller, rate_limited
from .models import InteractBody

router = APIRouter()


@router.post("/interact")
async def interact(body: InteractBody, request: Request):
    """Resolve using an item on an object. Cache hits are free; misses ask the LLM."""
    resolver: InteractionResolver = request.app.state.resolver
    try:
        result = await resolver.resolve(**body.model_dump(), identifier=caller(request))
    except RateLimitExceeded as e:
        return rate_limited(e.retry_after)
    return result.model_dump()
