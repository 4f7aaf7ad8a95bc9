from feed_personalization.models import InterestWeights, UserInterests, UserPreferences
from feed_personalization.preview import estimate_relevance, matching_factors


def test_estimate_default_profile():
    assert estimate_relevance(UserInterests(), UserPreferences()) == 50


def test_estimate_tickers_and_weights():
    interests = UserInterests(tickers=("AAPL",), weights=InterestWeights(tickers={"AAPL": 100}))
    assert estimate_relevance(interests, UserPreferences()) == 75


def test_estimate_caps_at_100():
    interests = UserInterests(
        tickers=("AAPL", "MSFT"),
        sectors=("technology",),
        topics=("earnings",),
        market_types=("stocks", "crypto"),
        weights=InterestWeights(tickers={"AAPL": 80, "MSFT": 60}),
    )
    prefs = UserPreferences(sentiment_bias="bullish", time_horizon="day_trading", news_frequency="high")
    assert estimate_relevance(interests, prefs) == 100


def test_matching_factors_default():
    assert matching_factors(UserInterests(), UserPreferences()) == ["Using default recommendations"]


def test_matching_factors_describe_profile():
    interests = UserInterests(tickers=("AAPL", "MSFT"), sectors=("energy",))
    prefs = UserPreferences(sentiment_bias="bearish", risk_tolerance="low", time_horizon="long_term")
    assert matching_factors(interests, prefs) == [
        "Tracking 2 specific stocks",
        "Following 1 sector",
        "Prefers cautionary market analysis",
        "Focuses on stable, low-risk investments",
        "Focuses on long-term trends and analysis",
    ]
