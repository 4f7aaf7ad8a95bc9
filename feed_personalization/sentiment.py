"""Sentiment normalization. Articles carry either a bare label or a {score, label} object."""

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Union

from .tables import SENTIMENT_SCORE_MAP

log = logging.getLogger(__name__)

NEUTRAL_LABEL = "neutral"

# Scores beyond this magnitude count as directional
_DIRECTIONAL_THRESHOLD = 0.1


@dataclass(frozen=True)
class StringSentiment:
    label: str
    kind: ClassVar[str] = "string"


@dataclass(frozen=True)
class ScoredSentiment:
    score: Optional[float] = None  # -1.0 .. 1.0
    label: Optional[str] = None
    kind: ClassVar[str] = "scored"


Sentiment = Union[StringSentiment, ScoredSentiment]


def parse_sentiment(raw: Any) -> Optional[Sentiment]:
    """Convert a raw API value into one of the two sentiment variants.

    Empty strings and unsupported types are treated as "no sentiment".
    """
    if isinstance(raw, (StringSentiment, ScoredSentiment)):
        return raw
    if isinstance(raw, str):
        return StringSentiment(raw) if raw.strip() else None
    if isinstance(raw, dict):
        score = raw.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            score = None
        label = raw.get("label")
        if not isinstance(label, str):
            label = None
        return ScoredSentiment(score=float(score) if score is not None else None, label=label)
    if raw is not None:
        log.debug("Ignoring unsupported sentiment value of type %s", type(raw).__name__)
    return None


def get_sentiment_label(sentiment: Optional[Sentiment]) -> str:
    if sentiment is None:
        return NEUTRAL_LABEL
    if sentiment.kind == ScoredSentiment.kind:
        return sentiment.label or NEUTRAL_LABEL
    return sentiment.label


def get_sentiment_score(sentiment: Optional[Sentiment]) -> float:
    """Numeric sentiment in [-1, 1]; bare labels map through SENTIMENT_SCORE_MAP."""
    if sentiment is None:
        return 0.0
    if sentiment.kind == ScoredSentiment.kind:
        return sentiment.score or 0.0
    return SENTIMENT_SCORE_MAP.get(sentiment.label.lower(), 0.0)


def is_positive_sentiment(sentiment: Optional[Sentiment]) -> bool:
    label = get_sentiment_label(sentiment).lower()
    return (
        "bullish" in label
        or label == "positive"
        or get_sentiment_score(sentiment) > _DIRECTIONAL_THRESHOLD
    )


def is_negative_sentiment(sentiment: Optional[Sentiment]) -> bool:
    label = get_sentiment_label(sentiment).lower()
    return (
        "bearish" in label
        or label == "negative"
        or get_sentiment_score(sentiment) < -_DIRECTIONAL_THRESHOLD
    )


def format_sentiment(sentiment: Optional[Sentiment]) -> str:
    """Display form, e.g. "very_bullish" → "VERY BULLISH"."""
    return get_sentiment_label(sentiment).replace("_", " ", 1).upper()


def sentiment_tone(sentiment: Optional[Sentiment]) -> str:
    """Coarse direction for display: "positive", "negative" or "neutral"."""
    if is_positive_sentiment(sentiment):
        return "positive"
    if is_negative_sentiment(sentiment):
        return "negative"
    return "neutral"
