"""Presentation helpers that turn factors and matches into readable text."""

from typing import List

from .models import MatchedInterests, ScoreFactors
from .tables import FALLBACK_REASON, LOWEST_BAND, REASON_THRESHOLDS, RELEVANCE_BANDS


def _above(factors: ScoreFactors, name: str) -> bool:
    return getattr(factors, name) > REASON_THRESHOLDS[name]


def generate_reason(factors: ScoreFactors, matched: MatchedInterests) -> str:
    """Compose a "; "-joined explanation from the factors that stand out.

    Deterministic given the same factors and matched interests.
    """
    reasons: List[str] = []

    if _above(factors, "interest_match"):
        if matched.tickers:
            reasons.append(f"Matches your interest in {', '.join(matched.tickers)}")
        if matched.sectors:
            reasons.append(f"Related to {', '.join(matched.sectors)} sector")
        if matched.topics:
            reasons.append(f"Covers topics: {', '.join(matched.topics)}")

    if _above(factors, "behavior_match"):
        reasons.append("Based on your reading history")
    if _above(factors, "sentiment_match"):
        reasons.append("Matches your sentiment preference")
    if _above(factors, "time_relevance"):
        reasons.append("Recent and timely")
    if _above(factors, "quality_score"):
        reasons.append("High-quality content")
    if _above(factors, "trending_boost"):
        reasons.append("Currently trending")

    return "; ".join(reasons) if reasons else FALLBACK_REASON


def relevance_label(score: int) -> str:
    for minimum, label in RELEVANCE_BANDS:
        if score >= minimum:
            return label
    return LOWEST_BAND
