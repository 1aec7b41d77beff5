"""Client for the Jacobs AI service.

The game loops depend on the JacobsClient protocol:

    async def interact(request: InteractRequest) -> InteractionResult
    async def react(events, current_mood, world_state, current_job, session_stats) -> Reaction
    async def review(events, job, current_mood, world_state, session_stats) -> Review
    async def chat(message, history, current_mood, recent_events, current_job, session_stats) -> ChatReply

HttpJacobsClient talks to the backend over HTTP and decodes every response
through the boundary models in jacobs_office.models. All failures raise
ClientError (RateLimitedError for HTTP 429); the loops own the fallbacks.
Tests substitute an AsyncMock with the same methods.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Protocol

import httpx
from pydantic import BaseModel, ValidationError

from jacobs_office.models import (
    ChatMessage,
    ChatReply,
    GameplayEvent,
    InteractionResult,
    Job,
    Reaction,
    Review,
    SessionStats,
)

logger = logging.getLogger(__name__)


@dataclass
class InteractRequest:
    item_id: str | None
    object_id: str
    item_tags: list[str]
    object_tags: list[str]
    object_state: str | None
    item_name: str
    object_name: str


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

class JacobsClient(Protocol):
    async def interact(self, request: InteractRequest) -> InteractionResult: ...

    async def react(
        self,
        events: list[GameplayEvent],
        current_mood: str,
        world_state: dict[str, Any],
        current_job: Job | None,
        session_stats: SessionStats,
    ) -> Reaction: ...

    async def review(
        self,
        events: list[GameplayEvent],
        job: Job,
        current_mood: str,
        world_state: dict[str, Any],
        session_stats: SessionStats,
    ) -> Review: ...

    async def chat(
        self,
        message: str,
        history: list[ChatMessage],
        current_mood: str,
        recent_events: list[GameplayEvent],
        current_job: Job | None,
        session_stats: SessionStats,
    ) -> ChatReply: ...


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ClientError(RuntimeError):
    """Raised when the AI service cannot be reached or returns garbage."""


class RateLimitedError(ClientError):
    def __init__(self, retry_after: int) -> None:
        super().__init__(f"Rate limited, retry after {retry_after}s")
        self.retry_after = retry_after


# ---------------------------------------------------------------------------
# HttpJacobsClient
# ---------------------------------------------------------------------------

class HttpJacobsClient:
    """Async HTTP client for the backend's /api endpoints.

    Args:
        base_url:   Backend root, e.g. "http://localhost:13013".
        timeout:    HTTP timeout in seconds. Defaults to 30.
        client_id:  Sent as X-Forwarded-For so the service rate-limits
                    this player separately. Optional.
    """

    def __init__(self, base_url: str, timeout: float = 30.0, client_id: str = "") -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client_id = client_id

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._client_id:
            headers["X-Forwarded-For"] = self._client_id
        return headers

    async def _post(self, path: str, body: dict[str, Any]) -> Any:
        url = f"{self._base_url}/api{path}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
        except httpx.ConnectError as e:
            raise ClientError(f"Cannot connect to Jacobs service at {self._base_url}") from e
        except httpx.TimeoutException as e:
            raise ClientError(f"Jacobs service timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise ClientError(f"Jacobs service request failed: {e}") from e

        if resp.status_code == 429:
            retry_after = _retry_after(resp)
            logger.warning("rate limited on %s, retry after %ss", path, retry_after)
            raise RateLimitedError(retry_after)
        if resp.status_code >= 400:
            raise ClientError(f"Jacobs service returned HTTP {resp.status_code} for {path}")
        try:
            return resp.json()
        except ValueError as e:
            raise ClientError(f"Jacobs service returned invalid JSON for {path}") from e

    async def _call(self, path: str, body: dict[str, Any], model: type[BaseModel]) -> Any:
        data = await self._post(path, body)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ClientError(f"Unexpected response format from {path}: {e}") from e

    async def interact(self, request: InteractRequest) -> InteractionResult:
        return await self._call("/interact", asdict(request), InteractionResult)

    async def react(
        self,
        events: list[GameplayEvent],
        current_mood: str,
        world_state: dict[str, Any],
        current_job: Job | None,
        session_stats: SessionStats,
    ) -> Reaction:
        body = {
            "events": [e.model_dump() for e in events],
            "current_mood": current_mood,
            "world_state": world_state,
            "current_job": current_job.model_dump() if current_job else None,
            "session_stats": session_stats.model_dump(),
        }
        return await self._call("/jacobs/react", body, Reaction)

    async def review(
        self,
        events: list[GameplayEvent],
        job: Job,
        current_mood: str,
        world_state: dict[str, Any],
        session_stats: SessionStats,
    ) -> Review:
        body = {
            "events": [e.model_dump() for e in events],
            "job": job.model_dump(),
            "current_mood": current_mood,
            "world_state": world_state,
            "session_stats": session_stats.model_dump(),
        }
        return await self._call("/jacobs/review", body, Review)

    async def chat(
        self,
        message: str,
        history: list[ChatMessage],
        current_mood: str,
        recent_events: list[GameplayEvent],
        current_job: Job | None,
        session_stats: SessionStats,
    ) -> ChatReply:
        body = {
            "message": message,
            "history": [m.model_dump() for m in history],
            "current_mood": current_mood,
            "recent_events": [e.model_dump() for e in recent_events],
            "current_job": current_job.model_dump() if current_job else None,
            "session_stats": session_stats.model_dump(),
        }
        return await self._call("/jacobs/chat", body, ChatReply)


def _retry_after(resp: httpx.Response) -> int:
    header = resp.headers.get("Retry-After")
    if header and header.isdigit():
        return int(header)
    try:
        return int(resp.json().get("retryAfter", 60))
    except (ValueError, AttributeError, TypeError):
        return 60
