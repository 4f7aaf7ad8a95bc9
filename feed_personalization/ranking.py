"""Ranking and filtering over the engine."""

import concurrent.futures
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from .engine import calculate_score
from .models import Article, ScoredArticle, UserBehavior, UserInterests, UserPreferences

log = logging.getLogger(__name__)

DEFAULT_MIN_SCORE = 30


def sort_articles_by_score(
    articles: Sequence[Article],
    interests: UserInterests,
    preferences: UserPreferences,
    behavior: Optional[UserBehavior] = None,
    trending_tickers: Optional[Iterable[str]] = None,
    now: Optional[datetime] = None,
    workers: int = 1,
) -> List[ScoredArticle]:
    """Score every article and return them best first.

    The sort is stable, so equal scores keep their input order. With
    ``workers > 1`` scoring runs on a thread pool; results are still collected
    in input order before sorting.
    """
    if not articles:
        return []

    # Pin the clock and trending set so every article sees the same inputs
    now = now or datetime.now(timezone.utc)
    trending = frozenset(trending_tickers) if trending_tickers else None

    def score(article: Article) -> ScoredArticle:
        return ScoredArticle(
            article=article,
            personalization=calculate_score(
                article, interests, preferences, behavior, trending, now
            ),
        )

    if workers > 1 and len(articles) > 1:
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            scored = list(executor.map(score, articles))
    else:
        scored = [score(a) for a in articles]

    scored.sort(key=lambda s: s.personalization.score, reverse=True)
    log.info(
        "Ranked %d articles (top=%d, workers=%d)",
        len(scored), scored[0].personalization.score, workers,
    )
    return scored


def filter_by_score(
    scored: Sequence[ScoredArticle],
    min_score: int = DEFAULT_MIN_SCORE,
) -> List[ScoredArticle]:
    """Keep articles scoring at least ``min_score``, preserving order."""
    result = [s for s in scored if s.personalization.score >= min_score]
    log.info("Filtered %d → %d articles (min_score=%d)", len(scored), len(result), min_score)
    return result
