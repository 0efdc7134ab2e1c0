"""
Unit Tests for Semantic Classifiers

Tests keyword priority, linguistic fallback and low-confidence
clarification for every classifier.
"""

import pytest

from calme.domain.enums.categories import (
    ActivityPreference,
    SafetyCategory,
    StressCategory,
    YesNoCategory,
)
from calme.services.classification.classifiers import (
    ACTIVITY_PROMPT,
    SAFETY_PROMPT,
    STRESS_PROMPT,
    YES_NO_PROMPT,
    classify_safety,
    classify_stress,
    parse_activity_preference,
    parse_yes_no,
)
from calme.services.classification.registry import (
    PARSERS,
    UNKNOWN_PARSER_PROMPT,
    result_tier,
    run_parser,
)


class TestClassifySafety:
    """Test suite for classify_safety."""

    def test_trapped_is_danger(self) -> None:
        """Trapped and calling for help is DANGER with high confidence."""
        result = classify_safety("I'm trapped, help!")
        assert result.category == SafetyCategory.DANGER
        assert result.confidence >= 0.8
        assert not result.needs_clarification
        assert result.reasoning.startswith("keyword:")

    def test_safe_at_home(self) -> None:
        """An affirmative safe answer is SAFE."""
        result = classify_safety("yes I'm safe at home")
        assert result.category == SafetyCategory.SAFE
        assert result.confidence == 0.9

    def test_danger_wins_over_safe(self) -> None:
        """Danger phrases are checked before safe phrases."""
        result = classify_safety("I'm in the shelter but someone is injured")
        assert result.category == SafetyCategory.DANGER

    def test_unsure(self) -> None:
        result = classify_safety("I'm not sure")
        assert result.category == SafetyCategory.UNSURE
        assert result.confidence == 0.7

    def test_negated_danger_is_not_danger(self) -> None:
        """Exclusions disqualify the danger group."""
        result = classify_safety("I'm not in danger")
        assert result.category != SafetyCategory.DANGER

    def test_keywords_match_whole_words(self) -> None:
        """'no' inside another word is not a danger hit."""
        result = classify_safety("nobody else is here")
        assert result.category != SafetyCategory.DANGER

    def test_plural_keyword(self) -> None:
        result = classify_safety("we are in one of the shelters")
        assert result.category == SafetyCategory.SAFE

    def test_linguistic_affirmative(self) -> None:
        """Affirmative cue without a keyword falls back to SAFE."""
        result = classify_safety("definitely")
        assert result.category == SafetyCategory.SAFE
        assert result.confidence == 0.8
        assert result.reasoning.startswith("linguistic:")

    def test_linguistic_negative_answer(self) -> None:
        result = classify_safety("nope")
        assert result.category == SafetyCategory.DANGER
        assert result.confidence == 0.8

    def test_linguistic_danger_indicator(self) -> None:
        result = classify_safety("there's a fire")
        assert result.category == SafetyCategory.DANGER
        assert result.confidence == 0.75

    def test_inflected_danger_keyword(self) -> None:
        result = classify_safety("it's dangerous here")
        assert result.category == SafetyCategory.DANGER
        assert result.confidence == 0.95
        assert result.reasoning == "keyword: danger"

    def test_bare_negation_is_danger(self) -> None:
        """'Not at all' answers 'are you safe?' with no."""
        result = classify_safety("Not at all")
        assert result.category == SafetyCategory.DANGER
        assert result.confidence == 0.8
        assert result.reasoning == "linguistic: negative answer"

    def test_negated_injury_is_unsure(self) -> None:
        result = classify_safety("I'm not hurt")
        assert result.category == SafetyCategory.UNSURE
        assert result.confidence == 0.6

    def test_strongly_negative_emotion_is_danger(self) -> None:
        result = classify_safety("I feel hopeless and terrible")
        assert result.category == SafetyCategory.DANGER
        assert result.confidence == 0.7
        assert result.reasoning == "linguistic: sentiment -6"

    @pytest.mark.parametrize("utterance", ["hmm", "", "   ", "banana"])
    def test_uninformative_input_needs_clarification(self, utterance: str) -> None:
        """Without evidence the user is re-asked."""
        result = classify_safety(utterance)
        assert result.needs_clarification
        assert result.clarification_prompt == SAFETY_PROMPT
        assert result.confidence == 0.0


class TestClassifyStress:
    """Test suite for classify_stress."""

    def test_panic_symptoms_are_high_stress(self) -> None:
        result = classify_stress("I can't breathe, my heart is racing")
        assert result.category == StressCategory.HIGH
        assert result.confidence == 0.95

    def test_moderate_stress(self) -> None:
        result = classify_stress("I'm a bit anxious")
        assert result.category == StressCategory.MODERATE
        assert result.confidence == 0.85

    def test_severity_before_context(self) -> None:
        """High stress outranks the in-transit context."""
        result = classify_stress("I'm panicking in the car")
        assert result.category == StressCategory.HIGH

    @pytest.mark.parametrize(
        "utterance,expected",
        [
            ("I'm driving home", StressCategory.IN_TRANSIT),
            ("working outside on a construction site", StressCategory.OUTDOOR_WORKER),
            ("I'm taking care of my kids", StressCategory.CAREGIVER),
            ("I'm fine, thanks", StressCategory.NONE),
        ],
    )
    def test_context_groups(self, utterance: str, expected: StressCategory) -> None:
        assert classify_stress(utterance).category == expected

    @pytest.mark.parametrize(
        "utterance,expected",
        [
            ("I'm panicked", StressCategory.HIGH),
            ("this is overwhelming", StressCategory.HIGH),
            ("I tensed up", StressCategory.MODERATE),
            ("taking trains home", StressCategory.IN_TRANSIT),
        ],
    )
    def test_inflected_keywords(self, utterance: str, expected: StressCategory) -> None:
        result = classify_stress(utterance)
        assert result.category == expected
        assert result.reasoning.startswith("keyword:")

    def test_negated_fear_is_not_high_stress(self) -> None:
        """'not scared' flips the valence and skips the high group."""
        result = classify_stress("not scared at all")
        assert result.category == StressCategory.NONE
        assert result.confidence == 0.6
        assert result.reasoning.startswith("linguistic:")

    def test_negative_emotion_is_high_stress(self) -> None:
        result = classify_stress("I feel sad")
        assert result.category == StressCategory.HIGH
        assert result.confidence == 0.7

    def test_mildly_negative_is_moderate(self) -> None:
        result = classify_stress("things are a little weird")
        assert result.category == StressCategory.MODERATE
        assert result.confidence == 0.6

    def test_no_evidence_needs_clarification(self) -> None:
        result = classify_stress("hmm")
        assert result.needs_clarification
        assert result.category == StressCategory.UNCERTAIN
        assert result.clarification_prompt == STRESS_PROMPT


class TestParseYesNo:
    """Test suite for parse_yes_no."""

    @pytest.mark.parametrize(
        "utterance,expected",
        [
            ("yes", YesNoCategory.YES),
            ("Sure!", YesNoCategory.YES),
            ("Nope.", YesNoCategory.NO),
            ("I don't think so", YesNoCategory.NO),
            ("maybe later", YesNoCategory.MAYBE),
        ],
    )
    def test_keywords(self, utterance: str, expected: YesNoCategory) -> None:
        assert parse_yes_no(utterance).category == expected

    def test_hedge_is_not_read_as_sure(self) -> None:
        """'not sure' is maybe even though it contains 'sure'."""
        assert parse_yes_no("not sure").category == YesNoCategory.MAYBE

    @pytest.mark.parametrize("utterance", ["not right now", "I'm not ready yet"])
    def test_negated_yes_word_is_no(self, utterance: str) -> None:
        """Exclusions keep 'right' and 'ready' from reading as yes."""
        result = parse_yes_no(utterance)
        assert result.category == YesNoCategory.NO
        assert result.confidence == 0.9

    def test_positive_sentiment_leans_yes(self) -> None:
        result = parse_yes_no("that sounds wonderful")
        assert result.category == YesNoCategory.YES
        assert result.confidence == 0.5

    def test_unclear_answer(self) -> None:
        result = parse_yes_no("hmm")
        assert result.needs_clarification
        assert result.category == YesNoCategory.UNCLEAR
        assert result.clarification_prompt == YES_NO_PROMPT


class TestParseActivityPreference:
    """Test suite for parse_activity_preference."""

    @pytest.mark.parametrize(
        "utterance,expected",
        [
            ("let's do some breathing", ActivityPreference.BREATHING),
            ("I want to play a game", ActivityPreference.MATCHING_CARDS),
            ("a jigsaw would be nice", ActivityPreference.PUZZLE),
            ("some music please", ActivityPreference.MUSIC),
            ("tell me a story", ActivityPreference.STORY),
        ],
    )
    def test_activity_keywords(self, utterance: str, expected: ActivityPreference) -> None:
        result = parse_activity_preference(utterance)
        assert result.category == expected
        assert result.confidence == 0.85

    @pytest.mark.parametrize(
        "utterance,expected",
        [
            ("some stretches", ActivityPreference.STRETCHING),
            ("painting sounds nice", ActivityPreference.PAINT),
            ("storytelling", ActivityPreference.STORY),
            ("listening to songs", ActivityPreference.MUSIC),
        ],
    )
    def test_inflected_activity_keywords(self, utterance: str, expected: ActivityPreference) -> None:
        assert parse_activity_preference(utterance).category == expected

    def test_decline(self) -> None:
        result = parse_activity_preference("nothing right now")
        assert result.category == ActivityPreference.NO_ACTIVITY
        assert result.confidence == 0.8

    def test_plain_no_declines(self) -> None:
        assert parse_activity_preference("no").category == ActivityPreference.NO_ACTIVITY

    def test_unclear(self) -> None:
        result = parse_activity_preference("hmm")
        assert result.needs_clarification
        assert result.category == ActivityPreference.UNCLEAR
        assert result.clarification_prompt == ACTIVITY_PROMPT


class TestDeterminism:
    """Classifiers keep no state between calls."""

    @pytest.mark.parametrize("parser_type", sorted(PARSERS))
    def test_identical_input_gives_equal_result(self, parser_type: str) -> None:
        utterance = "I'm at the downtown shelter, a bit anxious"
        first = run_parser(parser_type, utterance)
        second = run_parser(parser_type, utterance)
        assert first == second


class TestRegistry:
    """Test suite for the parser registry."""

    def test_registry_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            PARSERS["classifySafety"] = classify_stress  # type: ignore[index]

    def test_run_parser_dispatches(self) -> None:
        assert run_parser("classifySafety", "help") == classify_safety("help")

    def test_unknown_parser_asks_again(self) -> None:
        """An unknown key yields a clarification, not an exception."""
        result = run_parser("classifyWeather", "sunny")
        assert result.needs_clarification
        assert result.clarification_prompt == UNKNOWN_PARSER_PROMPT

    def test_result_tier(self) -> None:
        assert result_tier(classify_safety("help")) == "keyword"
        assert result_tier(classify_safety("definitely")) == "linguistic"
        assert result_tier(classify_safety("hmm")) == "fallback"
        assert result_tier(run_parser("extractDuration", "2 min")) == "duration_pattern"
