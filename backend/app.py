import logging
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI

from backend.config import get_settings
from backend.llm import LLM, make_llm
from backend.rate_limit import RateLimiter
from backend.resolver import InteractionResolver
from backend.routes import router
from backend.storage import InteractionStore

load_dotenv(Path(__file__).parent.parent / ".env")

logger = logging.getLogger(__name__)


def create_app(
    data_dir: Path | None = None,
    llm: LLM | None = None,
    settings: dict[str, Any] | None = None,
) -> FastAPI:
    settings = dict(settings or get_settings())
    resolved = data_dir or Path(settings["data_dir"])
    settings["data_dir"] = str(resolved)

    app = FastAPI(title="Jacobs Office")
    app.state.settings = settings
    app.state.store = InteractionStore(resolved)
    app.state.llm = llm or make_llm(settings)
    app.state.limiter = RateLimiter()
    app.state.resolver = InteractionResolver(
        app.state.store,
        app.state.llm,
        app.state.limiter,
        settings["rate_limits"]["interact"],
    )
    app.include_router(router, prefix="/api")
    logger.info("jacobs service ready, data in %s, llm format %s", resolved, settings["llm_format"])
    return app


# Default app instance for uvicorn (uses DATA_DIR env var or default)
app = create_app()
