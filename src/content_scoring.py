"""
Content scoring: quiz answers, content metadata and social buzz folded into
one relevance score per title, under algorithm variant A or B.
"""

import hashlib
import time
import streamlit as st
from datetime import datetime

from models import ScoredContent, SocialSignal
from forum_client import InputError
from quiz_catalog import extract_preferences
from social_signal import get_social_signal_or_default
from ranker import rank_content
from utils import (
    ALGORITHM_WEIGHTS, ALGORITHM_VARIANTS, BUZZ_LABEL_SCORES, FRESHNESS_WINDOWS,
    MOOD_GENRE_MAP, QUIZ_GENRE_MAP, RATING_CEILINGS, DEFAULT_TOP_K,
    DEFAULT_COMMENTS_LIMIT, TITLE_FETCH_DELAY,
    get_affinity_score, certification_level, critic_average
)

POSITIVE_BUZZ = {"Trending Positive", "Popular Discussion", "Trending Mixed"}


def assign_algorithm_variant(session_id):
    """Stable A/B assignment for a session id."""
    digest = hashlib.md5(str(session_id).encode("utf-8")).hexdigest()
    return ALGORITHM_VARIANTS[int(digest, 16) % len(ALGORITHM_VARIANTS)]


def get_size_score(content, size):
    """
    How well the content fits the 'how big of a watch' answer.

    Args:
        content: ContentItem
        size: One of movie, mini-series, season, multi-season, flexible

    Returns:
        Float between 0 and 1
    """
    if size == "flexible":
        return 1.0

    if content.type == "movie":
        if size != "movie":
            return 0.0
        runtime = content.runtime
        if not runtime or runtime <= 120:
            return 1.0
        elif runtime <= 150:
            return 0.8
        return 0.6

    if size == "movie":
        return 0.0
    seasons = content.seasons or 1
    if size == "mini-series":
        if seasons > 1:
            return 0.2
        if content.episodes is None:
            return 0.5
        if content.episodes <= 6:
            return 1.0
        elif content.episodes <= 10:
            return 0.5
        return 0.2
    if size == "season":
        return 1.0 if seasons == 1 else 0.6
    if size == "multi-season":
        return 1.0 if seasons >= 2 else 0.3
    return 0.0


def get_recency_score(release_year, freshness, current_year):
    """
    Graded fit of a release year to the freshness answer.

    Full credit inside the window, half credit inside twice the window.
    """
    if freshness not in FRESHNESS_WINDOWS:
        return 1.0
    if not release_year:
        return 0.0
    window = FRESHNESS_WINDOWS[freshness]
    age = current_year - release_year
    if age <= window:
        return 1.0
    elif age <= window * 2:
        return 0.5
    return 0.0


def get_critic_score(content):
    """Critic contribution in 0..1; titles without critic scores get 0."""
    average = critic_average(content)
    return 0.0 if average is None else average


def get_social_score(social):
    """
    Bounded bonus/penalty from buzz label and average comment sentiment.

    Unknown sentiment with Low Buzz contributes exactly 0.

    Returns:
        Float between -1 and 1
    """
    if social is None:
        return 0.0
    value = BUZZ_LABEL_SCORES.get(social.buzz, 0.0)
    if social.analysis.analyzed_comments > 0:
        sentiment = max(-1.0, min(1.0, social.analysis.average_sentiment))
        value += 0.5 * sentiment
    return max(-1.0, min(1.0, value))


def is_within_rating_ceiling(content, ceiling):
    """
    Whether content is allowed under the selected maturity ceiling.

    Content without a known certification is allowed.
    """
    limit = RATING_CEILINGS.get(ceiling)
    if limit is None:
        return True
    level = certification_level(content.certification)
    return level is None or level <= limit


def compute_factor_scores(content, answers, social, current_year=None):
    """
    Raw sub-score of every scoring factor.

    Args:
        content: ContentItem
        answers: Quiz answers, question id -> value(s)
        social: SocialSignal or None
        current_year: Year used for recency; defaults to this year

    Returns:
        Dictionary factor name -> sub-score
    """
    preferences = extract_preferences(answers)
    if current_year is None:
        current_year = datetime.now().year

    return {
        "genre_match": get_affinity_score(content.genres, preferences["genres"], QUIZ_GENRE_MAP),
        "vibe_match": get_affinity_score(content.genres, preferences["vibe"], MOOD_GENRE_MAP),
        "size_match": get_size_score(content, preferences["size"]),
        "recency_match": get_recency_score(content.release_year, preferences["freshness"], current_year),
        "critic_score": get_critic_score(content),
        "social_signal": get_social_score(social)
    }


def compute_score_breakdown(content, answers, social, variant, current_year=None):
    """Weighted contribution of each factor, on the 0-100 score scale."""
    if variant not in ALGORITHM_WEIGHTS:
        raise InputError(f"Unknown algorithm variant: {variant!r}")
    weights = ALGORITHM_WEIGHTS[variant]
    factors = compute_factor_scores(content, answers, social, current_year)
    return {name: weights[name] * value * 100 for name, value in factors.items()}


def compute_score(content, answers, social, variant, current_year=None):
    """
    Relevance score for one content item.

    Pure function of its arguments: inputs are not modified and identical
    inputs give an identical score.

    Args:
        content: ContentItem
        answers: Quiz answers, question id -> value(s)
        social: SocialSignal or None
        variant: 'A' or 'B'
        current_year: Year used for recency; defaults to this year

    Returns:
        Float score
    """
    breakdown = compute_score_breakdown(content, answers, social, variant, current_year)
    return sum(breakdown.values())


def explain_recommendation(content, breakdown, social):
    """
    Short human-readable reasons behind a score.

    Args:
        content: ContentItem
        breakdown: Output of compute_score_breakdown
        social: SocialSignal or None

    Returns:
        List of strings
    """
    reasons = []
    if breakdown.get("genre_match", 0) > 0:
        reasons.append(f"Matches your genre picks ({', '.join(content.genres)})")
    if breakdown.get("vibe_match", 0) > 0:
        reasons.append("Fits the vibe you asked for")
    if breakdown.get("size_match", 0) > 0:
        reasons.append(f"Right size for tonight ({'movie' if content.type == 'movie' else 'series'})")
    if content.imdb_rating is not None and content.imdb_rating >= 8:
        reasons.append(f"Critics love it (IMDb {content.imdb_rating:.1f})")
    if social is not None and social.analysis.analyzed_comments > 0:
        if social.buzz in POSITIVE_BUZZ:
            reasons.append(f"{social.buzz} on Reddit")
        elif social.buzz == "Trending Negative":
            reasons.append("Divisive chatter online")
        topics = [t.term for t in social.trending_topics[:3]]
        if topics:
            reasons.append(f"People are talking about: {', '.join(topics)}")
    return reasons


def score_candidates(candidates, answers, variant, signals=None, current_year=None):
    """
    Score every candidate allowed by the rating ceiling.

    Args:
        candidates: List of ContentItem
        answers: Quiz answers
        variant: 'A' or 'B'
        signals: Optional dict content id -> SocialSignal
        current_year: Year used for recency

    Returns:
        List of ScoredContent, unranked
    """
    signals = signals or {}
    ceiling = extract_preferences(answers)["rating_ceiling"]

    scored = []
    for content in candidates:
        if not is_within_rating_ceiling(content, ceiling):
            continue
        social = signals.get(content.id, content.social_signal)
        breakdown = compute_score_breakdown(content, answers, social, variant, current_year)
        scored.append(ScoredContent(
            content=content.model_copy(update={"social_signal": social}),
            score=sum(breakdown.values()),
            variant=variant,
            breakdown=breakdown,
            reasons=explain_recommendation(content, breakdown, social)
        ))
    return scored


def signal_cache_key(content_id, fetch_comments=True, comments_limit=DEFAULT_COMMENTS_LIMIT):
    """Session cache key for a title's signal under the given fetch settings."""
    return (content_id, bool(fetch_comments), comments_limit if fetch_comments else None)


def fetch_social_signals(candidates, signal_cache=None, fetch_comments=True,
                         comments_limit=DEFAULT_COMMENTS_LIMIT):
    """
    Social signal for every candidate, reusing cached ones.

    Uncached titles are fetched one at a time with TITLE_FETCH_DELAY between
    them; a failure only degrades that title's signal.

    Args:
        candidates: List of ContentItem
        signal_cache: Optional dict signal_cache_key -> SocialSignal, updated in place
        fetch_comments: Whether to mine comment threads
        comments_limit: Comments requested per post

    Returns:
        Dict content id -> SocialSignal
    """
    if signal_cache is None:
        signal_cache = {}

    signals = {}
    for content in candidates:
        key = signal_cache_key(content.id, fetch_comments, comments_limit)
        if key in signal_cache:
            signals[content.id] = signal_cache[key]
    missing = [c for c in candidates if c.id not in signals]

    for i, content in enumerate(missing):
        try:
            signal = get_social_signal_or_default(content, fetch_comments, comments_limit)
        except Exception as e:
            signal = SocialSignal.neutral(error=str(e))
        signals[content.id] = signal
        if not signal.degraded:
            signal_cache[signal_cache_key(content.id, fetch_comments, comments_limit)] = signal

        if i < len(missing) - 1:
            time.sleep(TITLE_FETCH_DELAY)

    degraded = [c.title for c in candidates if signals[c.id].degraded]
    if degraded:
        st.warning(f"Social buzz unavailable for {len(degraded)} title(s): {', '.join(degraded[:5])}")
    return signals


def recommend_content(answers, candidates, variant, top_k=DEFAULT_TOP_K, fetch_social=True,
                      signal_cache=None, comments_limit=DEFAULT_COMMENTS_LIMIT, current_year=None):
    """
    Full recommendation pass: social signals, scoring and ranking.

    Args:
        answers: Quiz answers, question id -> value(s)
        candidates: List of ContentItem from the catalog
        variant: 'A' or 'B'
        top_k: Number of results to keep, None for all
        fetch_social: Whether to query the forum at all
        signal_cache: Optional dict content id -> SocialSignal
        comments_limit: Comments requested per post
        current_year: Year used for recency

    Returns:
        Ranked list of ScoredContent
    """
    if variant not in ALGORITHM_WEIGHTS:
        raise InputError(f"Unknown algorithm variant: {variant!r}")
    ceiling = extract_preferences(answers)["rating_ceiling"]
    allowed = [c for c in candidates if is_within_rating_ceiling(c, ceiling)]

    signals = {}
    if fetch_social and allowed:
        signals = fetch_social_signals(allowed, signal_cache, comments_limit=comments_limit)

    scored = score_candidates(allowed, answers, variant, signals, current_year)
    return rank_content(scored, top_k)
