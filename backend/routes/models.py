"""Pydantic request/response models for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from jacobs_office.models import ChatMessage, GameplayEvent, Job, ObjectStateName, SessionStats


class InteractBody(BaseModel):
    item_id: str | None = None
    object_id: str
    item_tags: list[str] = Field(default_factory=list)
    object_tags: list[str] = Field(default_factory=list)
    object_state: str | None = None
    item_name: str = "(bare hands)"
    object_name: str


class ReactBody(BaseModel):
    events: list[GameplayEvent]
    current_mood: str = "NEUTRAL"
    world_state: dict[str, Any] = Field(default_factory=dict)
    current_job: Job | None = None
    session_stats: SessionStats | None = None


class ReviewBody(BaseModel):
    events: list[GameplayEvent] = Field(default_factory=list)
    job: Job
    current_mood: str = "NEUTRAL"
    world_state: dict[str, Any] = Field(default_factory=dict)
    session_stats: SessionStats | None = None


class ChatBody(BaseModel):
    message: str = Field(min_length=1)
    history: list[ChatMessage] = Field(default_factory=list)
    current_mood: str = "NEUTRAL"
    recent_events: list[GameplayEvent] = Field(default_factory=list)
    current_job: Job | None = None
    session_stats: SessionStats | None = None


class CreateRule(BaseModel):
    item_id: str | None = None
    object_id: str
    required_state: ObjectStateName | None = None
    item_tags: list[str] = Field(default_factory=list)
    object_tags: list[str] = Field(default_factory=list)
    result_state: ObjectStateName | None = None
    output_item: str | None = None
    output_item_tags: list[str] = Field(default_factory=list)
    description: str


class UpdateRule(BaseModel):
    required_state: ObjectStateName | None = None
    item_tags: list[str] | None = None
    object_tags: list[str] | None = None
    result_state: ObjectStateName | None = None
    output_item: str | None = None
    output_item_tags: list[str] | None = None
    description: str | None = None


class CheckConnectionBody(BaseModel):
    provider_url: str
    api_key: str = ""
    provider_format: str = "gemini"
