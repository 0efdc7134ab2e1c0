"""
Unit Tests for Value Extractors

Tests strategy order, confidence tiers and normalization of the
location, name, duration and onboarding extractors.
"""

import pytest

from calme.services.classification.extractors import (
    LOCATION_PROMPT,
    NAME_PROMPT,
    extract_accessibility_needs,
    extract_change_request,
    extract_communication_preference,
    extract_contact,
    extract_duration,
    extract_location,
    extract_name,
)


class TestExtractLocation:
    """Test suite for extract_location."""

    def test_prepositional_phrase(self) -> None:
        """The phrase after 'at' stops at the next preposition."""
        result = extract_location("I'm at the downtown shelter on 5th street")
        assert result.extracted_value == "the downtown shelter"
        assert result.extraction_method == "prepositional_phrase"
        assert result.confidence == 0.85
        assert result.information_type == "location"

    def test_named_place(self) -> None:
        result = extract_location("I'm at Central Station")
        assert result.extracted_value == "Central Station"
        assert result.extraction_method == "named_place"
        assert result.confidence == 0.9

    def test_location_noun(self) -> None:
        result = extract_location("home")
        assert result.extracted_value == "home"
        assert result.extraction_method == "location_noun"
        assert result.confidence == 0.8

    def test_address_pattern(self) -> None:
        result = extract_location("5 Herzl St")
        assert result.extraction_method == "address_pattern"
        assert result.confidence == 0.75

    def test_non_location_phrase_is_skipped(self) -> None:
        """'in a panic' is not a place."""
        result = extract_location("in a panic")
        assert result.extraction_method != "prepositional_phrase"

    def test_full_text_fallback(self) -> None:
        result = extract_location("somewhere quiet")
        assert result.extracted_value == "somewhere quiet"
        assert result.extraction_method == "full_text"
        assert result.confidence == 0.5
        assert not result.needs_clarification

    def test_filler_needs_clarification(self) -> None:
        result = extract_location("hmm")
        assert result.needs_clarification
        assert result.confidence == 0.2
        assert result.clarification_prompt == LOCATION_PROMPT

    def test_empty_input(self) -> None:
        result = extract_location("")
        assert result.needs_clarification
        assert result.confidence == 0.0
        assert result.extraction_method == "none"


class TestExtractName:
    """Test suite for extract_name."""

    @pytest.mark.parametrize(
        "utterance,expected",
        [
            ("My name is Dana", "Dana"),
            ("call me Avi.", "Avi"),
            ("I'm Yoni", "Yoni"),
        ],
    )
    def test_explicit_name(self, utterance: str, expected: str) -> None:
        result = extract_name(utterance)
        assert result.extracted_value == expected
        assert result.confidence == 0.9

    def test_capitalized_word(self) -> None:
        result = extract_name("hi, Maya here")
        assert result.extracted_value == "Maya"
        assert result.extraction_method == "capitalized_word"

    def test_short_answer_is_taken_as_name(self) -> None:
        result = extract_name("sam")
        assert result.extracted_value == "sam"
        assert result.confidence == 0.5

    @pytest.mark.parametrize("utterance", ["hmm", "i dont really want to say that right now"])
    def test_implausible_name_needs_clarification(self, utterance: str) -> None:
        result = extract_name(utterance)
        assert result.needs_clarification
        assert result.clarification_prompt == NAME_PROMPT


class TestExtractDuration:
    """Test suite for extract_duration."""

    @pytest.mark.parametrize(
        "utterance,expected",
        [
            ("about 2 minutes", "2 minutes"),
            ("1 minute", "1 minute"),
            ("45s", "45 seconds"),
            ("half a minute", "30 seconds"),
            ("a minute and a half", "90 seconds"),
            ("thirty seconds", "30 seconds"),
        ],
    )
    def test_normalized_durations(self, utterance: str, expected: str) -> None:
        result = extract_duration(utterance)
        assert result.extracted_value == expected
        assert result.extraction_method == "duration_pattern"
        assert result.confidence == 0.9

    def test_free_text(self) -> None:
        result = extract_duration("not far")
        assert result.extracted_value == "not far"
        assert result.confidence == 0.5


class TestOnboardingExtractors:
    """Tests for the remaining onboarding extractors."""

    def test_accessibility_is_multi_label(self) -> None:
        result = extract_accessibility_needs("I use a wheelchair and I'm hard of hearing")
        assert result.extracted_value == "mobility, hearing"
        assert result.extraction_method == "keyword_multi_label"

    def test_accessibility_none(self) -> None:
        result = extract_accessibility_needs("no")
        assert result.extracted_value == "none"
        assert not result.needs_clarification

    @pytest.mark.parametrize(
        "utterance,expected",
        [
            ("I can walk fine", "none"),
            ("I can see fine but I use a wheelchair", "mobility"),
            ("my hearing is fine, I'm not blind either", "none"),
        ],
    )
    def test_stated_capability_is_not_a_need(self, utterance: str, expected: str) -> None:
        assert extract_accessibility_needs(utterance).extracted_value == expected

    @pytest.mark.parametrize(
        "utterance,expected",
        [
            ("voice please", "audio"),
            ("text only", "visual"),
            ("both", "both"),
        ],
    )
    def test_communication_preference(self, utterance: str, expected: str) -> None:
        assert extract_communication_preference(utterance).extracted_value == expected

    def test_communication_defaults_to_both(self) -> None:
        result = extract_communication_preference("whatever")
        assert result.extracted_value == "both"
        assert result.confidence == 0.5
        assert not result.needs_clarification

    def test_contact_with_phone(self) -> None:
        result = extract_contact("Mom, 054-123-4567")
        assert result.extraction_method == "phone_pattern"
        assert result.confidence == 0.9

    def test_contact_without_phone(self) -> None:
        result = extract_contact("my sister Noa")
        assert result.extraction_method == "full_text"
        assert result.confidence == 0.7

    @pytest.mark.parametrize(
        "utterance,expected",
        [
            ("I want to change my name", "name"),
            ("the timing is wrong", "time"),
            ("a different calming activity", "calming"),
            ("hmm", "general"),
        ],
    )
    def test_change_request(self, utterance: str, expected: str) -> None:
        assert extract_change_request(utterance).extracted_value == expected
