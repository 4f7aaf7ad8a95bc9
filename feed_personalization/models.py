import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union

from .sentiment import Sentiment, format_sentiment, parse_sentiment, sentiment_tone

# ISO string, {"_seconds": int} wrapper, or an already-parsed datetime
RawTimestamp = Union[str, Dict[str, Any], datetime]


# ── Parsing helpers ──


def _first(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is None or value == "":
            continue
        return value
    return None


def _str_tuple(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple, set, frozenset)):
        return ()
    return tuple(v for v in value if isinstance(v, str))


def _finite_int(value: Any) -> Optional[int]:
    """Integer form of a JSON number; None for bools, NaN, infinities and non-numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


def _int_map(value: Any) -> Dict[str, int]:
    if not isinstance(value, dict):
        return {}
    result: Dict[str, int] = {}
    for key, count in value.items():
        number = _finite_int(count)
        if number is not None:
            result[str(key)] = number
    return result


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def parse_timestamp(value: Optional[RawTimestamp]) -> Optional[datetime]:
    """Parse a publish timestamp into an aware UTC datetime, or None if unusable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, dict):
        seconds = value.get("_seconds")
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            return None
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("z", "Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ── Inputs ──


@dataclass(frozen=True)
class Article:
    id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    tickers: Tuple[str, ...] = ()
    market_type: Optional[str] = None
    sentiment: Optional[Sentiment] = None
    published_at: Optional[RawTimestamp] = None
    quality_label: Optional[str] = None  # quality_classification.label
    has_llm_analysis: bool = False

    @property
    def text(self) -> str:
        """Lower-cased title and description used for keyword matching."""
        return f"{self.title or ''} {self.description or ''}".lower()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Article":
        if not isinstance(data, dict):
            raise TypeError(f"Article record must be an object, got {type(data).__name__}")

        quality = data.get("quality_classification")
        quality_label = _opt_str(quality.get("label")) if isinstance(quality, dict) else None
        article_id = data.get("id")

        return cls(
            id=str(article_id) if article_id is not None else None,
            title=_opt_str(data.get("title")),
            description=_opt_str(data.get("description")),
            url=_opt_str(data.get("url")),
            tickers=_str_tuple(data.get("tickers")),
            market_type=_opt_str(data.get("market_type")),
            sentiment=parse_sentiment(data.get("sentiment")),
            published_at=_first(data, "publishedAt", "published_at"),
            quality_label=quality_label,
            has_llm_analysis=data.get("llm_analysis") is not None,
        )


@dataclass(frozen=True)
class InterestWeights:
    tickers: Dict[str, int] = field(default_factory=dict)
    sectors: Dict[str, int] = field(default_factory=dict)
    topics: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterestWeights":
        return cls(
            tickers=_int_map(data.get("tickers")),
            sectors=_int_map(data.get("sectors")),
            topics=_int_map(data.get("topics")),
        )


@dataclass(frozen=True)
class UserInterests:
    tickers: Tuple[str, ...] = ()
    sectors: Tuple[str, ...] = ()
    topics: Tuple[str, ...] = ()
    market_types: Tuple[str, ...] = ()
    weights: Optional[InterestWeights] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserInterests":
        if not isinstance(data, dict):
            raise TypeError(f"Interests record must be an object, got {type(data).__name__}")
        weights = data.get("weights")
        return cls(
            tickers=_str_tuple(data.get("tickers")),
            sectors=_str_tuple(data.get("sectors")),
            topics=_str_tuple(data.get("topics")),
            market_types=_str_tuple(_first(data, "marketTypes", "market_types")),
            weights=InterestWeights.from_dict(weights) if isinstance(weights, dict) else None,
        )


@dataclass(frozen=True)
class UserPreferences:
    sentiment_bias: str = "balanced"  # bullish | balanced | bearish
    time_horizon: str = "medium_term"  # day_trading | short_term | medium_term | long_term
    risk_tolerance: Optional[str] = None
    news_frequency: Optional[str] = None
    min_relevance_score: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserPreferences":
        if not isinstance(data, dict):
            raise TypeError(f"Preferences record must be an object, got {type(data).__name__}")
        min_score = _finite_int(_first(data, "minRelevanceScore", "min_relevance_score"))
        return cls(
            sentiment_bias=_opt_str(_first(data, "sentimentBias", "sentiment_bias")) or "balanced",
            time_horizon=_opt_str(_first(data, "timeHorizon", "time_horizon")) or "medium_term",
            risk_tolerance=_opt_str(_first(data, "riskTolerance", "risk_tolerance")),
            news_frequency=_opt_str(_first(data, "newsFrequency", "news_frequency")),
            min_relevance_score=min_score,
        )


@dataclass(frozen=True)
class UserBehavior:
    ticker_clicks: Dict[str, int] = field(default_factory=dict)
    category_views: Dict[str, int] = field(default_factory=dict)
    liked_articles: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserBehavior":
        if not isinstance(data, dict):
            raise TypeError(f"Behavior record must be an object, got {type(data).__name__}")
        liked = _first(data, "likedArticles", "liked_articles")
        return cls(
            ticker_clicks=_int_map(_first(data, "tickerClicks", "ticker_clicks")),
            category_views=_int_map(_first(data, "categoryViews", "category_views")),
            liked_articles=tuple(str(a) for a in liked) if isinstance(liked, list) else (),
        )


# ── Outputs ──


@dataclass(frozen=True)
class MatchedInterests:
    tickers: Tuple[str, ...] = ()
    sectors: Tuple[str, ...] = ()
    topics: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScoreFactors:
    interest_match: float
    behavior_match: float
    sentiment_match: float
    time_relevance: float
    quality_score: float
    trending_boost: float  # 0 or TRENDING_BOOST

    def as_dict(self) -> Dict[str, float]:
        return {
            "interest_match": self.interest_match,
            "behavior_match": self.behavior_match,
            "sentiment_match": self.sentiment_match,
            "time_relevance": self.time_relevance,
            "quality_score": self.quality_score,
            "trending_boost": self.trending_boost,
        }


@dataclass(frozen=True)
class PersonalizationScore:
    score: int  # 0-100
    reason: str
    matched_interests: MatchedInterests
    factors: ScoreFactors


@dataclass(frozen=True)
class ScoredArticle:
    article: Article
    personalization: PersonalizationScore


@dataclass(frozen=True)
class UserProfile:
    interests: UserInterests
    preferences: UserPreferences
    behavior: Optional[UserBehavior] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        if not isinstance(data, dict):
            raise TypeError(f"Profile record must be an object, got {type(data).__name__}")
        behavior = data.get("behavior")
        return cls(
            interests=UserInterests.from_dict(data.get("interests") or {}),
            preferences=UserPreferences.from_dict(data.get("preferences") or {}),
            behavior=UserBehavior.from_dict(behavior) if isinstance(behavior, dict) else None,
        )


def scored_to_dict(item: ScoredArticle) -> Dict[str, Any]:
    """JSON-ready view of a scored article."""
    p = item.personalization
    return {
        "id": item.article.id,
        "title": item.article.title,
        "url": item.article.url,
        "tickers": list(item.article.tickers),
        "sentiment": format_sentiment(item.article.sentiment),
        "tone": sentiment_tone(item.article.sentiment),
        "score": p.score,
        "reason": p.reason,
        "factors": p.factors.as_dict(),
        "matched_interests": {
            "tickers": list(p.matched_interests.tickers),
            "sectors": list(p.matched_interests.sectors),
            "topics": list(p.matched_interests.topics),
        },
    }
