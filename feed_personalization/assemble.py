from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .explain import relevance_label
from .models import ScoredArticle
from .sentiment import format_sentiment, sentiment_tone


PACKAGE_ROOT = Path(__file__).resolve().parent

DEFAULT_TITLE = "Your Market Briefing"


def _digest_item(item: ScoredArticle) -> Dict[str, Any]:
    p = item.personalization
    return {
        "title": item.article.title or "(untitled)",
        "url": item.article.url,
        "score": p.score,
        "label": relevance_label(p.score),
        "reason": p.reason,
        "sentiment": format_sentiment(item.article.sentiment),
        "tone": sentiment_tone(item.article.sentiment),
        # Highlight the user's own tickers; fall back to everything tagged
        "tickers": list(p.matched_interests.tickers or item.article.tickers),
    }


def _get_env() -> Environment:
    loader = FileSystemLoader(str(PACKAGE_ROOT / "template"))
    env = Environment(loader=loader, autoescape=select_autoescape(enabled_extensions=("html", "xml", "j2")))
    return env


def render_digest(
    scored: Sequence[ScoredArticle],
    run_date: Optional[str] = None,
    title: Optional[str] = None,
) -> str:
    env = _get_env()
    template = env.get_template("digest.html.j2")

    items: List[Dict[str, Any]] = [_digest_item(s) for s in scored]

    return template.render(
        title=title or DEFAULT_TITLE,
        run_date=run_date or date.today().isoformat(),
        items=items,
    )
