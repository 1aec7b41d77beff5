"""Service settings: defaults merged with environment variables.

Read once per app instance by create_app(). `.env` at the repo root is loaded
by backend.app before this runs, so values there behave like real env vars.

    DATA_DIR           where interactions.json lives
    LLM_PROVIDER_URL   LLM backend root; empty means EchoLLM (always falls back)
    LLM_API_KEY        sent as x-goog-api-key (gemini) or a bearer token
    LLM_FORMAT         gemini | openai | koboldcpp
    LLM_MODEL          model id for gemini/openai
    LLM_TIMEOUT        seconds
    RATE_LIMIT_<NAME>  per-minute budget, e.g. RATE_LIMIT_JACOBS_CHAT=20
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from backend.rate_limit import DEFAULT_RATE_LIMITS, RateLimitConfig

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"

_SETTINGS_DEFAULTS: dict[str, Any] = {
    "data_dir": str(DEFAULT_DATA_DIR),
    "llm_provider_url": "https://generativelanguage.googleapis.com",
    "llm_api_key": "",
    "llm_format": "gemini",
    "llm_model": "gemini-2.0-flash",
    "llm_timeout": 60.0,
}

_FORMATS = ("gemini", "openai", "koboldcpp")


def get_settings(env: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Return defaults overridden by whatever is set in `env` (os.environ)."""
    env = os.environ if env is None else env
    settings = dict(_SETTINGS_DEFAULTS)

    for key in ("data_dir", "llm_provider_url", "llm_api_key", "llm_model"):
        value = env.get(key.upper())
        if value is not None:
            settings[key] = value

    fmt = env.get("LLM_FORMAT")
    if fmt:
        if fmt not in _FORMATS:
            raise ValueError(f"LLM_FORMAT must be one of {', '.join(_FORMATS)}, got {fmt!r}")
        settings["llm_format"] = fmt

    timeout = env.get("LLM_TIMEOUT")
    if timeout:
        settings["llm_timeout"] = float(timeout)

    limits = dict(DEFAULT_RATE_LIMITS)
    for name, default in DEFAULT_RATE_LIMITS.items():
        value = env.get(f"RATE_LIMIT_{name.upper()}")
        if value:
            limits[name] = RateLimitConfig(max_requests=int(value), window_ms=default.window_ms)
    settings["rate_limits"] = limits

    return settings
