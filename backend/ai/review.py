import logging
from typing import Any

from backend.llm import LLM
from backend.prompts import REVIEW_PROMPT, build_review_context, render_prompt
from jacobs_office.models import GAME_ENDS, MOODS, GameplayEvent, Job, Review, SessionStats
from jacobs_office.mood import validate_transition

from .core import ask_json, enum_string

logger = logging.getLogger(__name__)

REVIEW_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "speech": {
            "type": "STRING",
            "description": "Performance review speech. 1-3 short uppercase sentences about the job.",
        },
        "score": {
            "type": "INTEGER",
            "description": "Bucks awarded for this phase, 0-10.",
        },
        "mood": enum_string(MOODS, "Mr. Jacobs' mood after the review."),
        "game_end": enum_string(GAME_ENDS, "NONE unless the game should end now."),
    },
    "required": ["speech", "score", "mood", "game_end"],
}


async def generate_review(
    llm: LLM,
    events: list[GameplayEvent],
    job: Job,
    current_mood: str,
    world_state: dict[str, Any],
    session_stats: SessionStats | None = None,
) -> Review:
    prompt = render_prompt(
        REVIEW_PROMPT,
        build_review_context(events, job, current_mood, world_state, session_stats),
    )
    review = await ask_json(llm, "review", prompt, REVIEW_SCHEMA, Review)
    logger.info("review of %r scored %d", job.title, review.score)
    return review.model_copy(update={"mood": validate_transition(current_mood, review.mood)})
