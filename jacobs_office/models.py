"""Core domain models and closed vocabularies.

Every value that crosses the AI boundary (LLM output on the service side,
HTTP responses on the game side) is decoded through one of these models.
Out-of-vocabulary values are coerced rather than rejected, so a sloppy
model answer degrades to "no change" instead of an error:

  InteractionResult  unknown result_state -> None, unknown tags dropped,
                     no output_item -> no output_item_tags
  Reaction           effects other than CHANGE_STATE to a known state dropped
  Review             score rounded and clamped to 0..10
  *.game_end         anything outside GAME_ENDS -> "NONE"

Structurally broken payloads still raise pydantic.ValidationError; callers
treat that the same as an unreachable model.
"""

from __future__ import annotations

import time
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Mood = Literal[
    "PLEASED", "PROUD", "IMPRESSED", "GENEROUS", "AMUSED",
    "NEUTRAL", "BORED",
    "SUSPICIOUS", "SMUG",
    "DISAPPOINTED", "SAD", "PARANOID", "FURIOUS",
    "UNHINGED", "MANIC", "GLITCHING",
]

ObjectStateName = Literal[
    "LOCKED",
    "UNLOCKED",
    "POWERED",
    "UNPOWERED",
    "BROKEN",
    "BURNING",
    "FLOODED",
    "JAMMED",
    "HACKED",
    "CONTAMINATED",
]

Tag = Literal[
    "METALLIC",
    "CONDUCTIVE",
    "WOODEN",
    "GLASS",
    "SHARP",
    "WET",
    "MAGNETIC",
    "HOT",
    "COLD",
    "STICKY",
    "FRAGILE",
    "CHEMICAL",
    "ORGANIC",
    "PAPER",
    "HEAVY",
    "ELECTRONIC",
]

GameEnd = Literal["NONE", "FIRED", "PROMOTED", "ESCAPED"]
SessionEndType = Literal["PROMOTED", "ESCAPED", "FIRED", "TIME_UP"]
SessionStatus = Literal["PLAYING", "WON", "LOST"]
PhaseStatus = Literal["IDLE", "WORKING", "REVIEWING"]
RuleSource = Literal["manual", "ai"]

EventType = Literal[
    "INTERACTION",
    "PICKUP",
    "DROP",
    "STATE_CHANGE",
    "TERMINAL_CHAT",
    "ROOM_CHANGE",
]

MOODS: tuple[str, ...] = get_args(Mood)
STATES: tuple[str, ...] = get_args(ObjectStateName)
TAGS: tuple[str, ...] = get_args(Tag)
GAME_ENDS: tuple[str, ...] = get_args(GameEnd)

DEFAULT_OBJECT_STATE = "UNLOCKED"
FALLBACK_DESCRIPTION = "That doesn't seem to work."


def _coerce_game_end(value: Any) -> str:
    return value if value in GAME_ENDS else "NONE"


# ---------------------------------------------------------------------------
# World and events
# ---------------------------------------------------------------------------

class GameplayEvent(BaseModel):
    """A single player-generated event. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    type: EventType
    timestamp: float = Field(default_factory=lambda: time.time() * 1000)
    actor_id: str = "PLAYER 1"
    details: dict[str, str | int | float | bool | list[str] | None] = Field(
        default_factory=dict
    )


class ObjectState(BaseModel):
    """Tags are permanent, states are mutable (single-valued in practice)."""

    tags: list[str] = Field(default_factory=list)
    states: list[str] = Field(default_factory=list)


class Job(BaseModel):
    id: str
    title: str
    description: str
    objectHints: list[str] = Field(default_factory=list)


class SessionStats(BaseModel):
    game_time_minutes: float = 540
    bucks: int = 0
    phases_completed: int = 0
    review_scores: list[int] = Field(default_factory=list)


class ChatMessage(BaseModel):
    role: Literal["player", "jacobs"]
    text: str


# ---------------------------------------------------------------------------
# Interaction cache
# ---------------------------------------------------------------------------

class InteractionRule(BaseModel):
    """A cached (item, object, state) -> outcome rule."""

    id: str = ""
    item_id: str | None = None
    object_id: str
    required_state: ObjectStateName | None = None
    item_tags: list[str] = Field(default_factory=list)
    object_tags: list[str] = Field(default_factory=list)
    result_state: ObjectStateName | None = None
    output_item: str | None = None
    output_item_tags: list[str] = Field(default_factory=list)
    description: str
    source: RuleSource = "ai"
    created_at: str = ""

    @field_validator("item_tags", "object_tags")
    @classmethod
    def _sorted(cls, value: list[str]) -> list[str]:
        return sorted(value)


class InteractionResult(BaseModel):
    result_state: str | None = None
    output_item: str | None = None
    output_item_tags: list[str] | None = None
    description: str = FALLBACK_DESCRIPTION
    cached: bool = False

    @field_validator("result_state", mode="before")
    @classmethod
    def _known_state(cls, value: Any) -> str | None:
        return value if value in STATES else None

    @field_validator("output_item", mode="before")
    @classmethod
    def _blank_item(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("output_item_tags", mode="before")
    @classmethod
    def _known_tags(cls, value: Any) -> list[str] | None:
        if not isinstance(value, list):
            return None
        tags = [t for t in value if t in TAGS]
        return tags or None

    @model_validator(mode="after")
    def _tags_need_item(self) -> InteractionResult:
        if not self.output_item:
            self.output_item_tags = None
        return self

    @classmethod
    def fallback(cls) -> InteractionResult:
        return cls(description=FALLBACK_DESCRIPTION)


# ---------------------------------------------------------------------------
# Jacobs responses
# ---------------------------------------------------------------------------

class Effect(BaseModel):
    type: Literal["CHANGE_STATE"] = "CHANGE_STATE"
    targetName: str
    newState: ObjectStateName


class Reaction(BaseModel):
    speech: str = "..."
    mood: str = "NEUTRAL"
    game_end: GameEnd = "NONE"
    effects: list[Effect] = Field(default_factory=list)

    @field_validator("game_end", mode="before")
    @classmethod
    def _game_end(cls, value: Any) -> str:
        return _coerce_game_end(value)

    @field_validator("effects", mode="before")
    @classmethod
    def _valid_effects(cls, value: Any) -> list[dict]:
        if not isinstance(value, list):
            return []
        return [
            e for e in value
            if isinstance(e, dict)
            and e.get("type") == "CHANGE_STATE"
            and e.get("newState") in STATES
            and isinstance(e.get("targetName"), str)
        ]


class Review(BaseModel):
    speech: str
    score: int = 0
    mood: str = "NEUTRAL"
    game_end: GameEnd = "NONE"

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0
        if number != number:  # NaN
            return 0
        number = max(0.0, min(10.0, number))
        # halves round up
        return int(number + 0.5)

    @field_validator("game_end", mode="before")
    @classmethod
    def _game_end(cls, value: Any) -> str:
        return _coerce_game_end(value)


class ChatReply(BaseModel):
    reply: str
    mood: str = "NEUTRAL"
    game_end: GameEnd = "NONE"

    @field_validator("game_end", mode="before")
    @classmethod
    def _game_end(cls, value: Any) -> str:
        return _coerce_game_end(value)
