"""Tests for jacobs_office.mood — severity tiers and the transition gate."""

import pytest

from jacobs_office.models import MOODS
from jacobs_office.mood import (
    MOOD_SEVERITY,
    MOODS_BY_SEVERITY,
    is_valid_mood,
    mood_prompt_section,
    severity_of,
    validate_transition,
)


class TestSeverity:
    def test_every_mood_has_a_tier(self) -> None:
        assert set(MOOD_SEVERITY) == set(MOODS)
        assert len(MOODS) == 16

    @pytest.mark.parametrize("mood,level", [
        ("PLEASED", 1), ("AMUSED", 1),
        ("NEUTRAL", 2), ("BORED", 2),
        ("SMUG", 3),
        ("FURIOUS", 4), ("PARANOID", 4),
        ("GLITCHING", 5),
    ])
    def test_known_tiers(self, mood: str, level: int) -> None:
        assert severity_of(mood) == level

    def test_unknown_mood_counts_as_neutral(self) -> None:
        assert severity_of("CONFUSED") == 2

    def test_tiers_partition_moods(self) -> None:
        grouped = [m for moods in MOODS_BY_SEVERITY.values() for m in moods]
        assert sorted(grouped) == sorted(MOODS)


class TestValidateTransition:
    def test_all_pairs(self) -> None:
        """For all 16x16 pairs: accepted iff severities differ by at most one."""
        for current in MOODS:
            for proposed in MOODS:
                result = validate_transition(current, proposed)
                if abs(MOOD_SEVERITY[current] - MOOD_SEVERITY[proposed]) <= 1:
                    assert result == proposed, (current, proposed)
                else:
                    assert result == current, (current, proposed)

    def test_pleased_to_unhinged_rejected(self) -> None:
        assert validate_transition("PLEASED", "UNHINGED") == "PLEASED"

    def test_one_step_accepted(self) -> None:
        assert validate_transition("NEUTRAL", "SUSPICIOUS") == "SUSPICIOUS"

    @pytest.mark.parametrize("proposed", ["HAPPY", "", None, 3, "pleased"])
    def test_unknown_proposal_keeps_current(self, proposed) -> None:
        assert validate_transition("SMUG", proposed) == "SMUG"

    def test_unknown_current_treated_as_neutral(self) -> None:
        assert validate_transition("???", "SUSPICIOUS") == "SUSPICIOUS"
        assert validate_transition("???", "FURIOUS") == "???"

    def test_is_valid_mood(self) -> None:
        assert is_valid_mood("MANIC")
        assert not is_valid_mood("manic")
        assert not is_valid_mood(None)


def test_prompt_section_lists_every_mood() -> None:
    section = mood_prompt_section()
    assert section.startswith("MOOD SYSTEM:")
    for mood in MOODS:
        assert mood in section
    assert "Level 5 (Chaotic): UNHINGED, MANIC, GLITCHING" in section
