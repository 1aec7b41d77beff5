import logging

from backend.llm import LLM
from backend.prompts import INTERACTION_PROMPT, build_interaction_context, render_prompt
from jacobs_office.models import STATES, TAGS, InteractionResult

from .core import ask_json, enum_string

logger = logging.getLogger(__name__)

INTERACTION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "result_state": enum_string(STATES, "New object state, or null if no change.", nullable=True),
        "output_item": {
            "type": "STRING",
            "nullable": True,
            "description": "Simple 1-3 word name for the item produced, or null if none.",
        },
        "output_item_tags": {
            "type": "ARRAY",
            "nullable": True,
            "items": enum_string(TAGS, "Physical property of the output item."),
        },
        "description": {
            "type": "STRING",
            "description": "Short action result in 5-10 words. Plain English.",
        },
    },
    "required": ["result_state", "output_item", "output_item_tags", "description"],
}


async def generate_interaction(
    llm: LLM,
    *,
    item_name: str,
    object_name: str,
    item_tags: list[str],
    object_tags: list[str],
    object_state: str | None,
) -> InteractionResult:
    prompt = render_prompt(
        INTERACTION_PROMPT,
        build_interaction_context(item_name, object_name, item_tags, object_tags, object_state),
    )
    result = await ask_json(llm, "interaction", prompt, INTERACTION_SCHEMA, InteractionResult)

    # bare hands inspect, they never change state
    if not item_tags and result.result_state is not None:
        logger.debug("bare-hands result_state %s dropped", result.result_state)
        result = result.model_copy(update={"result_state": None})
    return result
