"""Game-side loop constants."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GameConfig:
    # Reaction loop
    event_threshold: int = 5
    time_threshold_ms: int = 30_000
    poll_interval: float = 2.0

    # Phase lifecycle
    phase_duration: int = 120  # seconds
    first_phase_delay: float = 5.0
    review_speech_duration: float = 8.0
    tick_interval: float = 1.0
    game_start_minutes: float = 540  # 9:00 AM
    session_end_minutes: float = 1020  # 5:00 PM
    game_minutes_per_tick: float = 0.25

    # Speech display
    speech_duration: float = 6.0
    assignment_speech_duration: float = 8.0

    # Terminal chat
    chat_cost: int = 1
    chat_history_limit: int = 10
    chat_event_limit: int = 15

    # Inventory and vending machine
    inventory_slots: int = 5
    vend_cost: int = 5
