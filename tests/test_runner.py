import json

import pytest
from click.testing import CliRunner

from feed_personalization.runner import main
from feed_personalization.tables import SCORING_VERSION


NOW = "2026-02-19T12:00:00Z"

ARTICLES = [
    {
        "id": "miss",
        "title": "Utilities hold steady",
        "tickers": ["DUK"],
        "publishedAt": "2026-02-16T12:00:00Z",
    },
    {
        "id": "hit",
        "title": "Nvidia earnings smash estimates",
        "url": "https://example.com/nvda",
        "tickers": ["NVDA"],
        "sentiment": {"score": 0.9, "label": "very_bullish"},
        "publishedAt": "2026-02-19T11:40:00Z",
    },
]

PROFILE = {
    "interests": {"tickers": ["NVDA"], "topics": ["earnings"]},
    "preferences": {"sentimentBias": "bullish", "timeHorizon": "day_trading"},
}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("PERSONALIZATION_MIN_SCORE", "PERSONALIZATION_WORKERS", "TRENDING_TICKERS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def inputs(tmp_path):
    articles = tmp_path / "articles.json"
    profile = tmp_path / "profile.json"
    articles.write_text(json.dumps({"articles": ARTICLES}), encoding="utf-8")
    profile.write_text(json.dumps(PROFILE), encoding="utf-8")
    return articles, profile


def _run(args):
    return CliRunner().invoke(main, args)


def test_json_output_ranks_and_filters(inputs, tmp_path):
    articles, profile = inputs
    out = tmp_path / "out" / "ranked.json"
    result = _run([
        "--articles", str(articles), "--profile", str(profile),
        "--now", NOW, "--format", "json", "--output", str(out),
    ])
    assert result.exit_code == 0, result.output

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["scoring_version"] == SCORING_VERSION
    assert [a["id"] for a in payload["articles"]] == ["hit"]
    top = payload["articles"][0]
    assert top["score"] == 77
    assert top["label"] == "Good"
    assert top["matched_interests"]["tickers"] == ["NVDA"]


def test_min_score_flag_overrides(inputs, tmp_path):
    articles, profile = inputs
    out = tmp_path / "ranked.json"
    result = _run([
        "--articles", str(articles), "--profile", str(profile),
        "--now", NOW, "--format", "json", "--output", str(out), "--min-score", "0",
    ])
    assert result.exit_code == 0, result.output
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert [a["id"] for a in payload["articles"]] == ["hit", "miss"]


def test_profile_min_relevance_is_used(inputs, tmp_path):
    articles, profile = inputs
    strict = dict(PROFILE, preferences=dict(PROFILE["preferences"], minRelevanceScore=90))
    profile.write_text(json.dumps(strict), encoding="utf-8")
    out = tmp_path / "ranked.json"
    result = _run([
        "--articles", str(articles), "--profile", str(profile),
        "--now", NOW, "--format", "json", "--output", str(out),
    ])
    assert result.exit_code == 0, result.output
    assert json.loads(out.read_text(encoding="utf-8"))["articles"] == []


def test_trending_env_default(inputs, tmp_path, monkeypatch):
    monkeypatch.setenv("TRENDING_TICKERS", "nvda, tsla")
    articles, profile = inputs
    out = tmp_path / "ranked.json"
    result = _run([
        "--articles", str(articles), "--profile", str(profile),
        "--now", NOW, "--format", "json", "--output", str(out),
    ])
    assert result.exit_code == 0, result.output
    top = json.loads(out.read_text(encoding="utf-8"))["articles"][0]
    assert top["factors"]["trending_boost"] == 20
    assert top["reason"].endswith("Currently trending")


def test_text_output(inputs):
    articles, profile = inputs
    result = _run(["--articles", str(articles), "--profile", str(profile), "--now", NOW])
    assert result.exit_code == 0, result.output
    assert "Nvidia earnings smash estimates" in result.output
    assert "Utilities hold steady" not in result.output


def test_html_output(inputs, tmp_path):
    articles, profile = inputs
    out = tmp_path / "digest.html"
    result = _run([
        "--articles", str(articles), "--profile", str(profile),
        "--now", NOW, "--format", "html", "--output", str(out),
    ])
    assert result.exit_code == 0, result.output
    html = out.read_text(encoding="utf-8")
    assert "https://example.com/nvda" in html
    assert "2026-02-19" in html


def test_invalid_json_is_usage_error(inputs):
    articles, profile = inputs
    articles.write_text("{not json", encoding="utf-8")
    result = _run(["--articles", str(articles), "--profile", str(profile)])
    assert result.exit_code == 2
    assert "not valid JSON" in result.output


def test_bad_now_is_rejected(inputs):
    articles, profile = inputs
    result = _run(["--articles", str(articles), "--profile", str(profile), "--now", "tomorrow"])
    assert result.exit_code == 2


def test_malformed_profile_is_usage_error(inputs):
    articles, profile = inputs
    profile.write_text(json.dumps({"interests": ["NVDA"]}), encoding="utf-8")
    result = _run(["--articles", str(articles), "--profile", str(profile)])
    assert result.exit_code == 2


def test_non_finite_profile_numbers_are_ignored(inputs, tmp_path):
    articles, profile = inputs
    noisy = dict(
        PROFILE,
        preferences=dict(PROFILE["preferences"], minRelevanceScore=float("nan")),
        behavior={"tickerClicks": {"NVDA": float("nan")}},
    )
    profile.write_text(json.dumps(noisy), encoding="utf-8")
    out = tmp_path / "ranked.json"
    result = _run([
        "--articles", str(articles), "--profile", str(profile),
        "--now", NOW, "--format", "json", "--output", str(out),
    ])
    assert result.exit_code == 0, result.output
    assert [a["id"] for a in json.loads(out.read_text(encoding="utf-8"))["articles"]] == ["hit"]


# ── Sentiment display ──

def test_json_output_includes_sentiment(inputs, tmp_path):
    articles, profile = inputs
    out = tmp_path / "ranked.json"
    result = _run([
        "--articles", str(articles), "--profile", str(profile),
        "--now", NOW, "--format", "json", "--output", str(out), "--min-score", "0",
    ])
    assert result.exit_code == 0, result.output
    hit, miss = json.loads(out.read_text(encoding="utf-8"))["articles"]
    assert (hit["sentiment"], hit["tone"]) == ("VERY BULLISH", "positive")
    assert (miss["sentiment"], miss["tone"]) == ("NEUTRAL", "neutral")


def test_text_output_includes_sentiment(inputs):
    articles, profile = inputs
    result = _run(["--articles", str(articles), "--profile", str(profile), "--now", NOW])
    assert result.exit_code == 0, result.output
    assert "(VERY BULLISH, positive)" in result.output


def test_html_output_includes_sentiment(inputs, tmp_path):
    articles, profile = inputs
    out = tmp_path / "digest.html"
    result = _run([
        "--articles", str(articles), "--profile", str(profile),
        "--now", NOW, "--format", "html", "--output", str(out),
    ])
    assert result.exit_code == 0, result.output
    assert '<span class="sentiment tone-positive">VERY BULLISH</span>' in out.read_text(encoding="utf-8")


# ── Preview ──

def test_preview_describes_profile(inputs):
    _, profile = inputs
    result = _run(["--profile", str(profile), "--preview"])
    assert result.exit_code == 0, result.output
    assert "Estimated relevance: 90% (Excellent)" in result.output
    assert "  - Tracking 1 specific stock" in result.output
    assert "  - Prioritizes real-time market updates" in result.output


def test_articles_required_without_preview(inputs):
    _, profile = inputs
    result = _run(["--profile", str(profile)])
    assert result.exit_code == 2
    assert "--articles" in result.output
