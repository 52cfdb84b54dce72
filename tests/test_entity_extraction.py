"""Tests for gazetteer-based entity extraction."""

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from scriptbreaker.services.entity_extraction import count_mentions, extract


class TestCharacters:
    def test_basketball_scene_finds_characters_in_gazetteer_order(self):
        text = "Ryu dunks the ball. Kaito walks onto the court. Coach watches from the sideline."
        result = extract(text)
        assert [c.name for c in result.characters] == ["Kaito", "Ryu", "Coach"]

    def test_mention_count_is_case_insensitive(self):
        result = extract("KAITO runs. kaito falls. Kaito gets back up.")
        kaito = result.characters[0]
        assert kaito.name == "Kaito"
        assert kaito.mention_count == 3

    def test_tags_come_from_gazetteer(self):
        result = extract("Kaito arrives early.")
        assert result.characters[0].tags == ("Main Character", "Male", "Student")

    def test_empty_text_yields_fallback_character(self):
        result = extract("")
        assert len(result.characters) == 1
        fallback = result.characters[0]
        assert fallback.name == "Character A"
        assert set(fallback.tags) == {"Auto-detected", "Lead"}
        assert fallback.mention_count == 0

    def test_none_is_treated_as_empty(self):
        assert extract(None).characters[0].name == "Character A"

    def test_substring_matches_are_counted(self):
        # Known limitation: no word-boundary check.
        result = extract("Ryuji met Ryu.")
        ryu = next(c for c in result.characters if c.name == "Ryu")
        assert ryu.mention_count == 2


class TestLocationsAndProps:
    def test_locations_and_props_have_no_fallback(self):
        result = extract("Nothing recognisable happens here.")
        assert result.locations == []
        assert result.props == []

    def test_full_name_is_required_for_presence(self):
        result = extract("They met at the basketball court with a water bottle.")
        assert [loc.name for loc in result.locations] == ["Basketball Court"]
        assert [p.name for p in result.props] == ["Basketball", "Water Bottle"]

    def test_basketball_prop_counts_every_occurrence(self):
        result = extract("Basketball Court. A basketball rolls by.")
        basketball = next(p for p in result.props if p.name == "Basketball")
        assert basketball.mention_count == 2


def test_count_mentions_non_overlapping():
    assert count_mentions("aaaa", "aa") == 2
    assert count_mentions("", "Kaito") == 0


@pytest.mark.property
@given(text=st.text(max_size=300))
@settings(max_examples=100, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
def test_characters_never_empty(text):
    result = extract(text)
    assert len(result.characters) >= 1
    assert all(c.mention_count >= 0 for c in result.characters)
