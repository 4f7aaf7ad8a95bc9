"""Constant tables consumed by the scorers. Changing any of them changes scores."""

from typing import Dict, List, Tuple


# Bump whenever WEIGHTS or any table below changes meaning
SCORING_VERSION = 1


# ── Combiner weights (must sum to 1.0) ──

WEIGHTS: Dict[str, float] = {
    "interest_match": 0.35,
    "behavior_match": 0.25,
    "sentiment_match": 0.15,
    "time_relevance": 0.10,
    "quality_score": 0.10,
    "trending_boost": 0.05,
}


# ── Interest-match caps ──

TICKER_CAP = 40.0
SECTOR_CAP = 25.0
TOPIC_CAP = 25.0
MARKET_TYPE_CAP = 10.0

# Weight assumed for a matched interest missing from the user's weight map
DEFAULT_INTEREST_WEIGHT = 50


# ── Sector inference ──
# Order matters: the first sector with a matching keyword wins.

SECTOR_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("technology", ("tech", "software", "ai", "artificial intelligence", "cloud", "cybersecurity")),
    ("healthcare", ("health", "pharma", "biotech", "medical", "drug")),
    ("finance", ("bank", "financial", "insurance", "credit", "lending")),
    ("energy", ("oil", "gas", "renewable", "solar", "energy", "electric")),
    ("retail", ("retail", "consumer", "shopping", "e-commerce")),
    ("automotive", ("car", "automotive", "vehicle", "electric vehicle", "ev")),
]


# ── Sentiment ──

# Label → 0-100 scale used by the sentiment-match scorer
SENTIMENT_SCALE: Dict[str, int] = {
    "very_bullish": 100,
    "bullish": 80,
    "positive": 70,
    "neutral": 50,
    "negative": 30,
    "bearish": 20,
    "very_bearish": 0,
}

# Label → approximate [-1, 1] score for bare-string sentiments
SENTIMENT_SCORE_MAP: Dict[str, float] = {
    "very_bullish": 0.9,
    "bullish": 0.6,
    "positive": 0.3,
    "neutral": 0.0,
    "negative": -0.3,
    "bearish": -0.6,
    "very_bearish": -0.9,
}


# ── Time decay ──
# Per horizon: (max age in hours, score) steps, then the score past the last step.

TIME_DECAY_STEPS: Dict[str, Tuple[Tuple[Tuple[float, int], ...], int]] = {
    "day_trading": (((1, 100), (4, 80), (12, 60), (24, 40)), 20),
    "short_term": (((4, 100), (12, 90), (48, 70), (168, 50)), 30),
    "medium_term": (((24, 100), (168, 90), (720, 70)), 50),
    "long_term": (((168, 100), (720, 90), (2160, 80)), 70),
}

# Unknown horizons decay like long-term investors
DEFAULT_TIME_HORIZON = "long_term"


# ── Quality ──

QUALITY_LABEL_SCORES: Dict[str, int] = {
    "HIGH_QUALITY": 90,
    "MEDIUM_QUALITY": 70,
    "LOW_QUALITY": 30,
    "SPAM_OR_JUNK": 10,
}

QUALITY_BASE = 50
LLM_ANALYSIS_BONUS = 10
MULTI_TICKER_BONUS = 5
SHORT_DESCRIPTION_PENALTY = 10
MIN_DESCRIPTION_LENGTH = 50


# ── Trending ──

TRENDING_BOOST = 20


# ── Reason generation ──
# A factor contributes a clause only when strictly above its threshold.

REASON_THRESHOLDS: Dict[str, float] = {
    "interest_match": 70,
    "behavior_match": 70,
    "sentiment_match": 70,
    "time_relevance": 80,
    "quality_score": 80,
    "trending_boost": 0,
}

FALLBACK_REASON = "General market relevance"


# ── Relevance bands ──

RELEVANCE_BANDS: List[Tuple[int, str]] = [
    (80, "Excellent"),
    (60, "Good"),
    (40, "Fair"),
]
LOWEST_BAND = "Poor"
