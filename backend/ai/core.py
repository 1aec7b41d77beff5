"""Shared JSON-call plumbing for the generators."""

import json
import logging
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from backend.llm import LLM, LLMError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def parse_json_output(text: str) -> dict | None:
    """Parse JSON from LLM output, stripping markdown fences."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [l for l in lines[1:] if not l.strip().startswith("```")]
        cleaned = "\n".join(lines)
    try:
        data = json.loads(cleaned)
        return data if isinstance(data, dict) else None
    except json.JSONDecodeError as e:
        logger.warning(f"LLM output is not valid JSON: {e}")
        return None


async def ask_json(llm: LLM, stage: str, prompt: str, schema: dict, model: type[M]) -> M:
    """Call the LLM and decode its answer into `model`.

    Raises LLMError when the answer is not a JSON object or fails validation.
    """
    text = await llm(stage, prompt, schema)
    data = parse_json_output(text)
    if data is None:
        raise LLMError(f"{stage}: model did not return a JSON object")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise LLMError(f"{stage}: model output failed validation: {e}") from e


def enum_string(values: tuple[str, ...], description: str, nullable: bool = False) -> dict:
    schema: dict = {"type": "STRING", "enum": list(values), "description": description}
    if nullable:
        schema["nullable"] = True
    return schema
