"""
Linguistic Analyzer

Second classification tier: a lexical sentiment score from a word
valence table (AFINN-style, -5..+5) plus a regex pattern tagger
that marks generic cues such as negation or emotion words.

Used only when no keyword group matched. Parsers map the score and
tags to coarse buckets with fixed confidences; the magnitude of the
score never feeds into the confidence.

CLINICAL_REVIEW_REQUIRED: Valences and tag patterns are heuristics
and require review before production use.
"""

import re
from dataclasses import dataclass, field
from enum import StrEnum

from calme.services.classification.keyword_rules import normalize


class LinguisticTag(StrEnum):
    """Generic cues detected by the pattern tagger."""

    NEGATION = "negation"
    INTENSIFIER = "intensifier"
    NEGATIVE_EMOTION = "negative_emotion"
    POSITIVE_EMOTION = "positive_emotion"
    AFFIRMATIVE = "affirmative"
    NEGATIVE_ANSWER = "negative_answer"
    UNCERTAIN = "uncertain"
    PANIC_SYMPTOM = "panic_symptom"
    DANGER_INDICATOR = "danger_indicator"
    SAFE_LOCATION = "safe_location"


@dataclass(frozen=True)
class LinguisticAnalysis:
    """
    Result of linguistic analysis.

    Attributes:
        score: Sum of word valences (negated words flipped)
        comparative: Score divided by token count
        scored_words: Words that carried a valence, in order
        tags: Cues detected by the tagger
        token_count: Number of word tokens
    """

    score: int = 0
    comparative: float = 0.0
    scored_words: tuple[str, ...] = ()
    tags: frozenset[LinguisticTag] = field(default_factory=frozenset)
    token_count: int = 0

    @property
    def has_evidence(self) -> bool:
        """Whether any word was scored or any cue was tagged."""
        return bool(self.scored_words) or bool(self.tags)

    def has(self, tag: LinguisticTag) -> bool:
        return tag in self.tags

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "score": self.score,
            "comparative": self.comparative,
            "scored_words": list(self.scored_words),
            "tags": sorted(tag.value for tag in self.tags),
            "token_count": self.token_count,
        }


class LinguisticAnalyzer:
    """
    Stateless sentiment scorer and cue tagger.

    Instances hold only immutable tables and may be shared freely.
    """

    # Word valences, AFINN scale
    # CLINICAL_REVIEW_REQUIRED: Validate valences for crisis vocabulary
    VALENCES: dict[str, int] = {
        # Strongly negative
        "terrified": -3, "horrified": -3, "horrible": -3, "terrible": -3,
        "awful": -3, "hopeless": -3, "miserable": -3, "devastated": -3,
        "panic": -3, "panicking": -3, "desperate": -3, "worst": -3,
        "dying": -3, "dead": -3, "killed": -3, "trapped": -3,
        # Negative
        "afraid": -2, "scared": -2, "fear": -2, "frightened": -2,
        "anxious": -2, "anxiety": -2, "worried": -2, "worry": -2,
        "stressed": -2, "stress": -2, "nervous": -2, "tense": -2,
        "sad": -2, "upset": -2, "angry": -2, "mad": -2, "frustrated": -2,
        "lonely": -2, "alone": -2, "hurt": -2, "pain": -2, "sick": -2,
        "danger": -2, "dangerous": -2, "threat": -2, "attack": -1,
        "crying": -2, "cry": -2, "lost": -2, "confused": -2, "bad": -3,
        "overwhelmed": -2, "exhausted": -2, "tired": -2, "shaking": -2,
        "dizzy": -2, "helpless": -2, "unsafe": -2, "broken": -1,
        # Mildly negative
        "uneasy": -1, "uncomfortable": -1, "weird": -1, "strange": -1,
        "loud": -1, "noise": -1, "hard": -1, "difficult": -1,
        "problem": -1, "unsure": -1, "meh": -1, "bored": -2,
        # Mildly positive
        "okay": 1, "ok": 1, "fine": 2, "alright": 1, "sure": 1,
        "yes": 1, "like": 2, "ready": 1, "steady": 1, "thanks": 2,
        "thank": 2, "please": 1,
        # Positive
        "good": 3, "better": 2, "calm": 2, "calmer": 2, "relaxed": 2,
        "relief": 2, "relieved": 2, "safe": 1, "secure": 2, "protected": 1,
        "comfortable": 2, "peaceful": 2, "glad": 3, "hopeful": 2,
        "happy": 3, "great": 3, "well": 2, "strong": 2, "nice": 3,
        "grateful": 3, "love": 3, "wonderful": 4, "amazing": 4,
        "fantastic": 4, "excellent": 3,
    }

    NEGATORS: frozenset[str] = frozenset({
        "not", "no", "never", "cant", "cannot", "dont", "doesnt",
        "didnt", "isnt", "arent", "wasnt", "wont", "hardly",
    })

    TAG_PATTERNS: tuple[tuple[LinguisticTag, re.Pattern], ...] = (
        (LinguisticTag.NEGATION, re.compile(
            r"\b(no|not|nope|nah|never|cant|cannot|dont|doesnt|wont|isnt|arent|nothing)\b")),
        (LinguisticTag.INTENSIFIER, re.compile(
            r"\b(very|extremely|really|so|too|totally|completely|super|incredibly)\b")),
        (LinguisticTag.NEGATIVE_EMOTION, re.compile(
            r"\b(sad|angry|frustrated|upset|miserable|depressed|hopeless|helpless|lonely|devastated)\b")),
        (LinguisticTag.POSITIVE_EMOTION, re.compile(
            r"\b(happy|calm|relaxed|peaceful|content|glad|relieved|hopeful)\b")),
        (LinguisticTag.AFFIRMATIVE, re.compile(
            r"\b(yes|yeah|yep|yup|sure|definitely|absolutely|correct|exactly|certainly)\b")),
        (LinguisticTag.NEGATIVE_ANSWER, re.compile(
            r"\b(no|not|nope|nah|negative)\b")),
        (LinguisticTag.UNCERTAIN, re.compile(
            r"\b(maybe|perhaps|possibly|unsure|might)\b|\bnot sure\b|\bdont know\b")),
        (LinguisticTag.PANIC_SYMPTOM, re.compile(
            r"\bheart\s+(is\s+)?(racing|pounding)\b|\bcant\s+breathe\b|\b(shaking|trembling|dizzy)\b"
            r"|\bchest\s+(is\s+)?(tight|hurts)\b")),
        (LinguisticTag.DANGER_INDICATOR, re.compile(
            r"\b(trapped|stuck|injured|bleeding|fire|collapsed|exposed|rubble)\b")),
        (LinguisticTag.SAFE_LOCATION, re.compile(
            r"\b(shelter|miklat|mamad|safe room|bunker|stairwell|protected space)\b")),
    )

    _TOKEN = re.compile(r"[a-z]+")

    def analyze(self, text: str) -> LinguisticAnalysis:
        """
        Score and tag an utterance.

        Args:
            text: Raw utterance

        Returns:
            LinguisticAnalysis (empty for blank input)
        """
        normalized = normalize(text)
        tokens = self._TOKEN.findall(normalized)
        if not tokens:
            return LinguisticAnalysis()

        score = 0
        scored: list[str] = []
        for index, token in enumerate(tokens):
            valence = self.VALENCES.get(token)
            if valence is None:
                continue
            # A negator directly before a word flips its valence
            if index > 0 and tokens[index - 1] in self.NEGATORS:
                valence = -valence
            score += valence
            scored.append(token)

        tags = frozenset(
            tag for tag, pattern in self.TAG_PATTERNS if pattern.search(normalized)
        )

        return LinguisticAnalysis(
            score=score,
            comparative=round(score / len(tokens), 4),
            scored_words=tuple(scored),
            tags=tags,
            token_count=len(tokens),
        )


DEFAULT_ANALYZER = LinguisticAnalyzer()


def analyze(text: str) -> LinguisticAnalysis:
    """Analyze text with the default analyzer."""
    return DEFAULT_ANALYZER.analyze(text)
