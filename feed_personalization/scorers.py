"""The six independent sub-scorers combined by the engine. All return 0-100."""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from .models import Article, UserBehavior, UserInterests, UserPreferences, parse_timestamp
from .sentiment import get_sentiment_label
from .tables import (
    DEFAULT_INTEREST_WEIGHT,
    DEFAULT_TIME_HORIZON,
    LLM_ANALYSIS_BONUS,
    MARKET_TYPE_CAP,
    MIN_DESCRIPTION_LENGTH,
    MULTI_TICKER_BONUS,
    QUALITY_BASE,
    QUALITY_LABEL_SCORES,
    SECTOR_CAP,
    SECTOR_KEYWORDS,
    SENTIMENT_SCALE,
    SHORT_DESCRIPTION_PENALTY,
    TICKER_CAP,
    TIME_DECAY_STEPS,
    TOPIC_CAP,
    TRENDING_BOOST,
)

log = logging.getLogger(__name__)

NEUTRAL = 50.0


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


# ── Matching helpers ──


def extract_sector(article: Article) -> Optional[str]:
    """Infer the article's sector from keywords in its title and description."""
    text = article.text
    for sector, keywords in SECTOR_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return sector
    return None


def match_tickers(article: Article, user_tickers: Sequence[str]) -> List[str]:
    """User tickers that appear on the article, in the user's order and spelling."""
    article_tickers = {t.lower() for t in article.tickers}
    return [t for t in user_tickers if t.lower() in article_tickers]


def match_sectors(sector: Optional[str], user_sectors: Sequence[str]) -> List[str]:
    if not sector:
        return []
    sector = sector.lower()
    return [s for s in user_sectors if s and (s.lower() == sector or s.lower() in sector)]


def find_matched_topics(article: Article, user_topics: Sequence[str]) -> List[str]:
    text = article.text
    return [t for t in user_topics if t.strip() and t.lower() in text]


def _weighted_share(matched: Iterable[str], weights: Dict[str, int], cap: float) -> float:
    """Mean of (weight / 100) * cap across the matched names."""
    lowered = {name.lower(): value for name, value in weights.items()}
    shares = [
        clamp(lowered.get(name.lower(), DEFAULT_INTEREST_WEIGHT)) / 100.0 * cap
        for name in matched
    ]
    return sum(shares) / len(shares) if shares else 0.0


# ── Sub-scorers ──


def calculate_interest_match(article: Article, interests: UserInterests) -> float:
    """Weighted match over tickers, sector, topics and market type.

    Each dimension only adds to the denominator when the user declared interests
    in it, so an empty dimension never counts against the article. Returns 0
    when no dimension applies.
    """
    weights = interests.weights
    score = 0.0
    max_possible = 0.0

    if interests.tickers:
        max_possible += TICKER_CAP
        user_tickers = {t.lower() for t in interests.tickers}
        matched = [t for t in article.tickers if t.lower() in user_tickers]
        if matched:
            if weights is not None and weights.tickers:
                score += _weighted_share(matched, weights.tickers, TICKER_CAP)
            else:
                score += len(matched) / len(article.tickers) * TICKER_CAP

    if interests.sectors:
        max_possible += SECTOR_CAP
        matched = match_sectors(extract_sector(article), interests.sectors)
        if matched:
            if weights is not None and weights.sectors:
                score += _weighted_share(matched, weights.sectors, SECTOR_CAP)
            else:
                score += SECTOR_CAP

    if interests.topics:
        max_possible += TOPIC_CAP
        matched = find_matched_topics(article, interests.topics)
        if matched:
            if weights is not None and weights.topics:
                score += _weighted_share(matched, weights.topics, TOPIC_CAP)
            else:
                score += len(matched) / len(interests.topics) * TOPIC_CAP

    if interests.market_types:
        max_possible += MARKET_TYPE_CAP
        if article.market_type and article.market_type in interests.market_types:
            score += MARKET_TYPE_CAP

    if max_possible == 0:
        return 0.0
    return clamp(score / max_possible * 100)


def calculate_behavior_match(article: Article, behavior: Optional[UserBehavior]) -> float:
    """Average of the behavioral signals that fired; 50 for users without history."""
    if behavior is None:
        return NEUTRAL

    score = 0.0
    factors = 0

    clicks = sum(behavior.ticker_clicks.get(t, 0) for t in article.tickers)
    if clicks > 0:
        score += min(40, clicks * 5)
        factors += 1

    if article.market_type:
        views = behavior.category_views.get(article.market_type, 0)
        if views > 0:
            score += min(30, views * 3)
            factors += 1

    # Engagement-history boost. Known approximation: liked articles are not
    # compared with this one, any engagement history earns the flat bonus.
    if article.sentiment is not None and behavior.liked_articles:
        score += 20
        factors += 1

    if factors == 0:
        return NEUTRAL
    return clamp(score / factors)


def calculate_sentiment_match(article: Article, preferences: UserPreferences) -> float:
    if article.sentiment is None or preferences.sentiment_bias == "balanced":
        return NEUTRAL

    label = get_sentiment_label(article.sentiment).lower()
    value = SENTIMENT_SCALE.get(label)
    if value is None:
        log.debug("Unknown sentiment label %r, treating as neutral", label)
        value = int(NEUTRAL)

    if preferences.sentiment_bias == "bullish":
        return float(value)
    if preferences.sentiment_bias == "bearish":
        return float(100 - value)
    return NEUTRAL


def calculate_time_relevance(
    article: Article,
    preferences: UserPreferences,
    now: Optional[datetime] = None,
) -> float:
    """Stepped freshness score; the breakpoints depend on the user's time horizon."""
    if article.published_at is None:
        return NEUTRAL
    published = parse_timestamp(article.published_at)
    if published is None:
        log.debug("Unparseable publish timestamp %r on article %s", article.published_at, article.id)
        return NEUTRAL

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    age_hours = (now - published).total_seconds() / 3600

    steps, floor = TIME_DECAY_STEPS.get(
        preferences.time_horizon, TIME_DECAY_STEPS[DEFAULT_TIME_HORIZON]
    )
    for max_age, value in steps:
        if age_hours <= max_age:
            return float(value)
    return float(floor)


def calculate_quality_score(article: Article) -> float:
    score = float(QUALITY_BASE)
    if article.quality_label is not None:
        score = float(QUALITY_LABEL_SCORES.get(article.quality_label, QUALITY_BASE))

    if article.has_llm_analysis:
        score = clamp(score + LLM_ANALYSIS_BONUS)
    if len(article.tickers) > 1:
        score = clamp(score + MULTI_TICKER_BONUS)
    if len((article.description or "").strip()) < MIN_DESCRIPTION_LENGTH:
        score = clamp(score - SHORT_DESCRIPTION_PENALTY)
    return score


def calculate_trending_boost(article: Article, trending_tickers: Optional[Iterable[str]]) -> float:
    if not trending_tickers or not article.tickers:
        return 0.0
    trending = {t.lower() for t in trending_tickers}
    if any(t.lower() in trending for t in article.tickers):
        return float(TRENDING_BOOST)
    return 0.0
