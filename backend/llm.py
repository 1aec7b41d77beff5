"""LLM client — HTTP connection to a JSON-capable text-generation backend.

Every AI call site receives an LLM callable matching the protocol:

    async def __call__(self, stage: str, prompt: str, schema: dict | None = None) -> str: ...

`stage` identifies the caller ("interaction", "reaction", "review", "chat")
and is only used for logging. `schema` is a response schema in the Gemini
dialect (OBJECT/STRING/ARRAY types, `nullable`); backends that cannot
enforce it ignore it and rely on the prompt asking for JSON.

Implementations:

    HttpLLM   — real HTTP client for Gemini, OpenAI-compatible and KoboldCpp
                backends. Selected by provider_format.
    EchoLLM   — returns the prompt back unchanged. Useful for checking the
                prompt wiring without a running model.

Tests patch HttpLLM.__call__ or pass an AsyncMock instead.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Protocol

import httpx

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol — every LLM implementation must match this signature
# ---------------------------------------------------------------------------

class LLM(Protocol):
    async def __call__(self, stage: str, prompt: str, schema: dict | None = None) -> str: ...


# ---------------------------------------------------------------------------
# HttpLLM — connects to a real backend
# ---------------------------------------------------------------------------

ProviderFormat = Literal["gemini", "openai", "koboldcpp"]

# Where the generated text sits in each format's response body.
_TEXT_PATHS: dict[str, tuple[str | int, ...]] = {
    "gemini": ("candidates", 0, "content", "parts", 0, "text"),
    "openai": ("choices", 0, "message", "content"),
    "koboldcpp": ("results", 0, "text"),
}


def _dig(data: Any, path: tuple[str | int, ...]) -> Any:
    for key in path:
        data = data[key]
    return data


class HttpLLM:
    """Async HTTP client for JSON-generation backends.

    Wire formats, picked by provider_format:

      gemini     POST {url}/v1beta/models/{model}:generateContent
                 prompt as a single user turn; JSON mime type, plus
                 responseSchema when a schema is passed
      openai     POST {url}/v1/chat/completions
                 json_object response_format when a schema is passed
      koboldcpp  POST {url}/api/v1/generate with the bare prompt

    Gemini authenticates with x-goog-api-key, the others with a bearer
    token. Both are omitted when api_key is empty.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "gemini",
        model: str = "",
        timeout: float = 60.0,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._api_key = api_key
        self._format = provider_format
        self._model = model
        self._timeout = timeout

    def _auth_headers(self) -> dict[str, str]:
        if not self._api_key:
            return {}
        if self._format == "gemini":
            return {"x-goog-api-key": self._api_key}
        return {"Authorization": f"Bearer {self._api_key}"}

    def _endpoint(self, prompt: str, schema: dict | None) -> tuple[str, dict[str, Any]]:
        if self._format == "gemini":
            config: dict[str, Any] = {"responseMimeType": "application/json"}
            if schema:
                config["responseSchema"] = schema
            return (
                f"{self._base_url}/v1beta/models/{self._model}:generateContent",
                {"contents": [{"role": "user", "parts": [{"text": prompt}]}], "generationConfig": config},
            )
        if self._format == "openai":
            payload: dict[str, Any] = {"messages": [{"role": "user", "content": prompt}]}
            if self._model:
                payload["model"] = self._model
            if schema:
                payload["response_format"] = {"type": "json_object"}
            return f"{self._base_url}/v1/chat/completions", payload
        return f"{self._base_url}/api/v1/generate", {"prompt": prompt}

    def _extract_text(self, data: Any) -> str:
        try:
            text = _dig(data, _TEXT_PATHS[self._format])
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError(f"Malformed {self._format} response: no completion text") from e
        if not isinstance(text, str):
            raise LLMError(f"Malformed {self._format} response: completion is not text")
        return text

    async def __call__(self, stage: str, prompt: str, schema: dict | None = None) -> str:
        url, payload = self._endpoint(prompt, schema)
        headers = {"Content-Type": "application/json", **self._auth_headers()}
        logger.debug("[%s] POST %s (%d prompt chars)", stage, url, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=payload, headers=headers)
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"LLM provider unreachable at {self._base_url}") from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM provider timed out after {self._timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(f"LLM provider answered HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise LLMError(f"LLM provider request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError(f"Malformed {self._format} response: body is not JSON") from e
        text = self._extract_text(data)
        logger.debug("[%s] %d completion chars", stage, len(text))
        return text


# ---------------------------------------------------------------------------
# EchoLLM — returns the prompt unchanged
# ---------------------------------------------------------------------------

class EchoLLM:
    """Stand-in model used when no provider URL is configured.

    Its answer is never valid JSON, so every generator takes its fallback
    path and the service stays usable offline.
    """

    async def __call__(self, stage: str, prompt: str, schema: dict | None = None) -> str:
        logger.debug("[%s] echo, %d prompt chars", stage, len(prompt))
        return prompt


# ---------------------------------------------------------------------------
# LLMError — raised by HttpLLM for all connection and protocol failures
# ---------------------------------------------------------------------------

class LLMError(RuntimeError):
    """Transport, HTTP or response-shape failure talking to the provider."""


def make_llm(settings: dict[str, Any]) -> LLM:
    """Build the LLM client from settings; EchoLLM when no provider is set."""
    if not settings.get("llm_provider_url"):
        logger.warning("no LLM provider configured, using EchoLLM")
        return EchoLLM()
    return HttpLLM(
        provider_url=settings["llm_provider_url"],
        api_key=settings.get("llm_api_key", ""),
        provider_format=settings.get("llm_format", "gemini"),
        model=settings.get("llm_model", ""),
        timeout=float(settings.get("llm_timeout", 60.0)),
    )
