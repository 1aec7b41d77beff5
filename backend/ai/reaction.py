import logging
from typing import Any

from backend.llm import LLM
from backend.prompts import REACTION_PROMPT, build_reaction_context, render_prompt
from jacobs_office.models import GAME_ENDS, MOODS, STATES, GameplayEvent, Job, Reaction, SessionStats
from jacobs_office.mood import validate_transition

from .core import ask_json, enum_string

logger = logging.getLogger(__name__)

REACTION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "speech": {
            "type": "STRING",
            "description": "What Mr. Jacobs says. 1-2 short uppercase sentences about the events.",
        },
        "mood": enum_string(MOODS, "Mr. Jacobs' new mood, within one severity level of the current one."),
        "game_end": enum_string(GAME_ENDS, "NONE unless the game should end now."),
        "effects": {
            "type": "ARRAY",
            "description": "Optional world effects. Usually empty.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "type": enum_string(("CHANGE_STATE",), "Effect type."),
                    "targetName": {"type": "STRING", "description": "Name of the object to affect."},
                    "newState": enum_string(STATES, "State to put the object in."),
                },
                "required": ["type", "targetName", "newState"],
            },
        },
    },
    "required": ["speech", "mood", "effects", "game_end"],
}


async def generate_reaction(
    llm: LLM,
    events: list[GameplayEvent],
    current_mood: str,
    world_state: dict[str, Any],
    current_job: Job | None = None,
    session_stats: SessionStats | None = None,
) -> Reaction:
    prompt = render_prompt(
        REACTION_PROMPT,
        build_reaction_context(events, current_mood, world_state, current_job, session_stats),
    )
    reaction = await ask_json(llm, "reaction", prompt, REACTION_SCHEMA, Reaction)
    mood = validate_transition(current_mood, reaction.mood)
    if mood != reaction.mood:
        logger.info("reaction mood %s rejected from %s", reaction.mood, current_mood)
    return reaction.model_copy(update={"mood": mood})
