from backend.llm import LLM
from backend.prompts import CHAT_PROMPT, build_chat_context, render_prompt
from jacobs_office.models import GAME_ENDS, MOODS, ChatMessage, ChatReply, GameplayEvent, Job, SessionStats
from jacobs_office.mood import validate_transition

from .core import ask_json, enum_string

CHAT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "reply": {
            "type": "STRING",
            "description": "Mr. Jacobs' reply. 1-3 uppercase sentences answering the employee.",
        },
        "mood": enum_string(MOODS, "Mr. Jacobs' mood after this exchange."),
        "game_end": enum_string(GAME_ENDS, "NONE unless the game should end now."),
    },
    "required": ["reply", "mood", "game_end"],
}


async def generate_chat(
    llm: LLM,
    message: str,
    history: list[ChatMessage],
    current_mood: str,
    recent_events: list[GameplayEvent] | None = None,
    current_job: Job | None = None,
    session_stats: SessionStats | None = None,
) -> ChatReply:
    context = build_chat_context(
        message,
        [m.model_dump() for m in history],
        current_mood,
        recent_events or [],
        current_job,
        session_stats,
    )
    reply = await ask_json(llm, "chat", render_prompt(CHAT_PROMPT, context), CHAT_SCHEMA, ChatReply)
    return reply.model_copy(update={"mood": validate_transition(current_mood, reply.mood)})
