"""Personalization engine. Scores one article for one user.

Pure and stateless: the only ambient input is the clock, which callers can pin
by passing ``now``.
"""

import math
from datetime import datetime
from typing import Iterable, Optional

from .explain import generate_reason
from .models import (
    Article,
    MatchedInterests,
    PersonalizationScore,
    ScoreFactors,
    UserBehavior,
    UserInterests,
    UserPreferences,
)
from .scorers import (
    clamp,
    calculate_behavior_match,
    calculate_interest_match,
    calculate_quality_score,
    calculate_sentiment_match,
    calculate_time_relevance,
    calculate_trending_boost,
    extract_sector,
    find_matched_topics,
    match_sectors,
    match_tickers,
)
from .tables import WEIGHTS


def combine_factors(factors: ScoreFactors) -> int:
    """Weighted sum of the factors, rounded half-up and clamped to 0-100."""
    total = sum(weight * getattr(factors, name) for name, weight in WEIGHTS.items())
    return int(clamp(math.floor(total + 0.5)))


def get_matched_interests(article: Article, interests: UserInterests) -> MatchedInterests:
    """The user's own tickers, sectors and topics that apply to this article."""
    return MatchedInterests(
        tickers=tuple(match_tickers(article, interests.tickers)),
        sectors=tuple(match_sectors(extract_sector(article), interests.sectors)),
        topics=tuple(find_matched_topics(article, interests.topics)),
    )


def calculate_score(
    article: Article,
    interests: UserInterests,
    preferences: UserPreferences,
    behavior: Optional[UserBehavior] = None,
    trending_tickers: Optional[Iterable[str]] = None,
    now: Optional[datetime] = None,
) -> PersonalizationScore:
    factors = ScoreFactors(
        interest_match=clamp(calculate_interest_match(article, interests)),
        behavior_match=clamp(calculate_behavior_match(article, behavior)),
        sentiment_match=clamp(calculate_sentiment_match(article, preferences)),
        time_relevance=clamp(calculate_time_relevance(article, preferences, now)),
        quality_score=clamp(calculate_quality_score(article)),
        trending_boost=calculate_trending_boost(article, trending_tickers),
    )
    matched = get_matched_interests(article, interests)

    return PersonalizationScore(
        score=combine_factors(factors),
        reason=generate_reason(factors, matched),
        matched_interests=matched,
        factors=factors,
    )
