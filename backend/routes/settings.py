"""Health check, settings and connection check endpoints."""

import httpx
from fastapi import APIRouter, Request

from .models import CheckConnectionBody

router = APIRouter()

_MODEL_PATHS = {
    "gemini": "/v1beta/models",
    "openai": "/v1/models",
    "koboldcpp": "/api/v1/model",
}


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings(request: Request):
    """Effective service settings, with the API key redacted."""
    settings = request.app.state.settings
    return {
        "data_dir": settings["data_dir"],
        "llm_provider_url": settings["llm_provider_url"],
        "llm_api_key_set": bool(settings["llm_api_key"]),
        "llm_format": settings["llm_format"],
        "llm_model": settings["llm_model"],
        "llm_timeout": settings["llm_timeout"],
        "rate_limits": {
            name: limit.max_requests for name, limit in settings["rate_limits"].items()
        },
    }


@router.post("/check-connection")
async def check_connection(body: CheckConnectionBody):
    """Quick health check against an LLM provider URL."""
    path = _MODEL_PATHS.get(body.provider_format, _MODEL_PATHS["koboldcpp"])
    url = f"{body.provider_url.rstrip('/')}{path}"
    headers: dict[str, str] = {}
    if body.api_key:
        if body.provider_format == "gemini":
            headers["x-goog-api-key"] = body.api_key
        else:
            headers["Authorization"] = f"Bearer {body.api_key}"
    try:
        async with httpx.AsyncClient(timeout=5) as client:
            resp = await client.get(url, headers=headers)
            resp.raise_for_status()
        return {"ok": True}
    except httpx.HTTPError:
        return {"ok": False}
