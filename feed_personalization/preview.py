"""Settings preview: estimates how well a profile will be served before any articles are scored."""

from typing import List

from .models import UserInterests, UserPreferences
from .scorers import clamp


def estimate_relevance(interests: UserInterests, preferences: UserPreferences) -> int:
    """Rough 0-100 estimate of feed relevance for the given settings.

    Richer declared interests and sharper preferences raise the estimate.
    """
    score = 50.0

    if interests.tickers:
        score += 15
    if interests.sectors:
        score += 10
    if interests.topics:
        score += 10
    if len(interests.market_types) > 1:
        score += 5

    if interests.weights is not None and interests.weights.tickers:
        values = list(interests.weights.tickers.values())
        score += min(15, sum(values) / len(values) / 10)

    if preferences.sentiment_bias != "balanced":
        score += 5
    if preferences.news_frequency == "high":
        score += 5
    if preferences.time_horizon == "day_trading":
        score += 10

    return int(clamp(score))


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count > 1 else ''}"


def matching_factors(interests: UserInterests, preferences: UserPreferences) -> List[str]:
    factors: List[str] = []

    if interests.tickers:
        factors.append(f"Tracking {_plural(len(interests.tickers), 'specific stock')}")
    if interests.sectors:
        factors.append(f"Following {_plural(len(interests.sectors), 'sector')}")
    if interests.topics:
        factors.append(f"Interested in {_plural(len(interests.topics), 'topic')}")

    if preferences.sentiment_bias == "bullish":
        factors.append("Prefers positive market news")
    elif preferences.sentiment_bias == "bearish":
        factors.append("Prefers cautionary market analysis")

    if preferences.risk_tolerance == "high":
        factors.append("Comfortable with high-risk opportunities")
    elif preferences.risk_tolerance == "low":
        factors.append("Focuses on stable, low-risk investments")

    if preferences.time_horizon == "day_trading":
        factors.append("Prioritizes real-time market updates")
    elif preferences.time_horizon == "long_term":
        factors.append("Focuses on long-term trends and analysis")

    return factors or ["Using default recommendations"]
