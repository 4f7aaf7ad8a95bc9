import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

import click

from .assemble import render_digest
from .config import get_settings
from .explain import relevance_label
from .models import Article, ScoredArticle, UserProfile, parse_timestamp, scored_to_dict
from .preview import estimate_relevance, matching_factors
from .ranking import filter_by_score, sort_articles_by_score
from .sentiment import format_sentiment, sentiment_tone
from .tables import SCORING_VERSION

log = logging.getLogger(__name__)


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.UsageError(f"{path} is not valid JSON: {e}")


def load_articles(path: Path) -> List[Article]:
    """Read a list of article records, bare or wrapped in {"articles": [...]}."""
    data = _load_json(path)
    if isinstance(data, dict):
        data = data.get("articles")
    if not isinstance(data, list):
        raise click.UsageError(f"{path} must contain a list of articles")

    articles: List[Article] = []
    for i, record in enumerate(data):
        if not isinstance(record, dict):
            log.warning("Skipping article #%d in %s: not an object", i, path)
            continue
        articles.append(Article.from_dict(record))
    return articles


def load_profile(path: Path) -> UserProfile:
    data = _load_json(path)
    if not isinstance(data, dict):
        raise click.UsageError(f"{path} must contain a profile object")
    try:
        return UserProfile.from_dict(data)
    except (TypeError, ValueError) as e:
        raise click.UsageError(f"{path}: {e}")


def _parse_now(ctx, param, value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    parsed = parse_timestamp(value)
    if parsed is None:
        raise click.BadParameter(f"not an ISO-8601 timestamp: {value!r}")
    return parsed


def _format_text(scored: List[ScoredArticle]) -> str:
    lines = []
    for rank, item in enumerate(scored, start=1):
        p = item.personalization
        lines.append(
            f"{rank:>3}. [{p.score:>3} {relevance_label(p.score):<9}] "
            f"{item.article.title or '(untitled)'}"
        )
        sentiment = format_sentiment(item.article.sentiment)
        lines.append(f"     {p.reason} ({sentiment}, {sentiment_tone(item.article.sentiment)})")
    return "\n".join(lines)


def _format_preview(profile: UserProfile) -> str:
    estimate = estimate_relevance(profile.interests, profile.preferences)
    lines = [f"Estimated relevance: {estimate}% ({relevance_label(estimate)})"]
    lines.extend(f"  - {factor}" for factor in matching_factors(profile.interests, profile.preferences))
    return "\n".join(lines)


def _format_json(scored: List[ScoredArticle], generated_at: datetime) -> str:
    payload = {
        "scoring_version": SCORING_VERSION,
        "generated_at": generated_at.isoformat(),
        "articles": [
            dict(scored_to_dict(s), label=relevance_label(s.personalization.score))
            for s in scored
        ],
    }
    return json.dumps(payload, indent=2)


@click.command()
@click.option("--articles", "articles_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="JSON file of candidate articles.")
@click.option("--profile", "profile_path", required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="JSON file with interests, preferences and behavior.")
@click.option("--trending", default=None, help="Comma-separated trending tickers.")
@click.option("--min-score", default=None, type=click.IntRange(0, 100), help="Drop articles scoring below this.")
@click.option("--limit", default=None, type=click.IntRange(min=1), help="Keep only the top N articles.")
@click.option("--format", "fmt", default="text", type=click.Choice(["text", "json", "html"]), help="Output format.")
@click.option("--output", "output_path", default=None, type=click.Path(dir_okay=False, path_type=Path), help="Write output here instead of stdout.")
@click.option("--now", default=None, callback=_parse_now, help="Fixed ISO-8601 clock for reproducible runs.")
@click.option("--workers", default=None, type=click.IntRange(min=1), help="Number of scoring threads.")
@click.option("--preview", is_flag=True, default=False, help="Describe how well the profile will be served and exit.")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging.")
def main(articles_path, profile_path, trending, min_score, limit, fmt, output_path, now, workers, preview, verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = get_settings()
    except RuntimeError as e:
        raise click.UsageError(str(e))

    profile = load_profile(profile_path)
    if preview:
        click.echo(_format_preview(profile))
        return
    if articles_path is None:
        raise click.UsageError("Missing option '--articles'.")

    articles = load_articles(articles_path)

    if trending is not None:
        trending_tickers = frozenset(t.strip() for t in trending.split(",") if t.strip())
    else:
        trending_tickers = settings.trending_tickers

    # Explicit flag, then the user's own preference, then the configured default
    if min_score is None:
        min_score = profile.preferences.min_relevance_score
    if min_score is None:
        min_score = settings.min_score

    now = now or datetime.now(timezone.utc)

    scored = sort_articles_by_score(
        articles,
        profile.interests,
        profile.preferences,
        profile.behavior,
        trending_tickers,
        now=now,
        workers=workers or settings.workers,
    )
    scored = filter_by_score(scored, min_score)
    if limit:
        scored = scored[:limit]

    if fmt == "json":
        rendered = _format_json(scored, now)
    elif fmt == "html":
        rendered = render_digest(scored, run_date=now.date().isoformat())
    else:
        rendered = _format_text(scored)

    if output_path is None:
        click.echo(rendered)
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(rendered, encoding="utf-8")
    click.echo(f"Scored {len(articles)} articles, kept {len(scored)} -> {output_path}")


if __name__ == "__main__":
    main()
