"""Mood model — 16 moods in 5 severity tiers.

  1 positive  PLEASED, PROUD, IMPRESSED, GENEROUS, AMUSED
  2 neutral   NEUTRAL, BORED
  3 uneasy    SUSPICIOUS, SMUG
  4 hostile   DISAPPOINTED, SAD, PARANOID, FURIOUS
  5 chaotic   UNHINGED, MANIC, GLITCHING

A transition is legal iff the severities differ by at most one. The LLM
proposes moods freely; validate_transition() is the only gate, and it fails
closed by returning the current mood.
"""

from __future__ import annotations

from jacobs_office.models import MOODS

MOOD_SEVERITY: dict[str, int] = {
    "PLEASED": 1, "PROUD": 1, "IMPRESSED": 1, "GENEROUS": 1, "AMUSED": 1,
    "NEUTRAL": 2, "BORED": 2,
    "SUSPICIOUS": 3, "SMUG": 3,
    "DISAPPOINTED": 4, "SAD": 4, "PARANOID": 4, "FURIOUS": 4,
    "UNHINGED": 5, "MANIC": 5, "GLITCHING": 5,
}

SEVERITY_LABELS = {
    1: "Positive",
    2: "Neutral",
    3: "Uneasy",
    4: "Hostile",
    5: "Chaotic",
}

MOODS_BY_SEVERITY: dict[int, list[str]] = {
    level: [m for m in MOODS if MOOD_SEVERITY[m] == level] for level in SEVERITY_LABELS
}

# Severity assumed for a current mood we don't recognise.
_DEFAULT_SEVERITY = 2


def severity_of(mood: str) -> int:
    """Return the 1..5 severity tier of a mood (unknown moods count as 2)."""
    return MOOD_SEVERITY.get(mood, _DEFAULT_SEVERITY)


def is_valid_mood(mood: object) -> bool:
    return isinstance(mood, str) and mood in MOOD_SEVERITY


def validate_transition(current: str, proposed: object) -> str:
    """Return `proposed` if it is a known mood within ±1 severity of `current`.

    Anything else returns `current` unchanged. Never raises.
    """
    if not is_valid_mood(proposed):
        return current
    if abs(severity_of(current) - severity_of(proposed)) <= 1:
        return proposed
    return current


def mood_prompt_section() -> str:
    """Describe the mood scale for inclusion in LLM prompts."""
    lines = [
        "MOOD SYSTEM:",
        "You have 16 moods grouped by severity (1-5). You may transition to "
        "any mood within ±1 severity of your current mood.",
    ]
    for level, label in SEVERITY_LABELS.items():
        lines.append(f"Level {level} ({label}): {', '.join(MOODS_BY_SEVERITY[level])}")
    lines.append("")
    lines.append("Choose the mood that best fits your emotional reaction:")
    lines.append(
        "- Proud of the employee → PROUD. Amused by something funny → AMUSED. "
        "Impressed by skill → IMPRESSED. Feeling generous → GENEROUS."
    )
    lines.append(
        "- Bored by inaction → BORED. Suspicious of behavior → SUSPICIOUS. "
        "Smugly caught them → SMUG."
    )
    lines.append(
        "- Sad about state of affairs → SAD. Paranoid about conspiracies → PARANOID. "
        "Furiously angry → FURIOUS."
    )
    lines.append(
        "- Totally unhinged → UNHINGED. Hyperactive/manic → MANIC. "
        "System instability → GLITCHING."
    )
    return "\n".join(lines)
