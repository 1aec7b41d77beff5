"""Jacobs reaction, review and terminal chat endpoints.

LLM and template failures surface as 502; the game client owns the
fallbacks for these three calls.
"""

import logging

from fastapi import APIRouter, HTTPException, Request

from backend.ai import generate_chat, generate_reaction, generate_review
from backend.llm import LLMError
from backend.prompts import PromptError

from .limits import check_rate_limit
from .models import ChatBody, ReactBody, ReviewBody

logger = logging.getLogger(__name__)

router = APIRouter()


def _bad_gateway(what: str, e: Exception) -> HTTPException:
    logger.warning("%s failed: %s", what, e)
    return HTTPException(502, f"Jacobs {what} unavailable")


@router.post("/jacobs/react")
async def react(body: ReactBody, request: Request):
    """React to a batch of gameplay events."""
    denied = check_rate_limit(request, "jacobs_react")
    if denied:
        return denied
    try:
        reaction = await generate_reaction(
            request.app.state.llm,
            body.events,
            body.current_mood,
            body.world_state,
            body.current_job,
            body.session_stats,
        )
    except (LLMError, PromptError) as e:
        raise _bad_gateway("reaction", e) from e
    return reaction.model_dump()


@router.post("/jacobs/review")
async def review(body: ReviewBody, request: Request):
    """Score the phase that just ended."""
    denied = check_rate_limit(request, "jacobs_review")
    if denied:
        return denied
    try:
        result = await generate_review(
            request.app.state.llm,
            body.events,
            body.job,
            body.current_mood,
            body.world_state,
            body.session_stats,
        )
    except (LLMError, PromptError) as e:
        raise _bad_gateway("review", e) from e
    return result.model_dump()


@router.post("/jacobs/chat")
async def chat(body: ChatBody, request: Request):
    """Reply to a terminal message."""
    denied = check_rate_limit(request, "jacobs_chat")
    if denied:
        return denied
    try:
        reply = await generate_chat(
            request.app.state.llm,
            body.message,
            body.history,
            body.current_mood,
            body.recent_events,
            body.current_job,
            body.session_stats,
        )
    except (LLMError, PromptError) as e:
        raise _bad_gateway("chat", e) from e
    return reply.model_dump()
