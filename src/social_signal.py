"""
Social signal assembly: forum search, comment mining, sentiment and buzz.
"""

import logging
from collections import Counter

from models import SocialSignal
from forum_client import (
    FetchError, build_search_query, search_discussions,
    fetch_comments_for_top_posts, comments_from_threads
)
from comment_sentiment import analyze_comments
from buzz_classifier import classify_buzz
from utils import DEFAULT_COMMENTS_LIMIT

logger = logging.getLogger(__name__)


def summarize_posts(posts):
    """
    Post-level engagement summary of a search result.

    Args:
        posts: List of ForumPost

    Returns:
        Dictionary with post_count, total_upvotes, comment_volume and the
        top five communities by post count
    """
    communities = Counter(p.subreddit for p in posts if p.subreddit)
    return {
        "post_count": len(posts),
        "total_upvotes": sum(p.ups for p in posts),
        "comment_volume": sum(p.num_comments for p in posts),
        "top_communities": [
            {"name": name, "count": count}
            for name, count in communities.most_common(5)
        ]
    }


def get_social_signal(title, year=None, content_type=None, fetch_comments=True,
                      comments_limit=DEFAULT_COMMENTS_LIMIT, thresholds=None):
    """
    Compute a fresh social signal for one title.

    A failed search propagates as FetchError; failures on individual comment
    threads only shrink the analyzed sample.

    Args:
        title: Content title
        year: Optional release year for the query
        content_type: Optional 'movie' or 'tv' for the query
        fetch_comments: Whether to mine comment threads of the top posts
        comments_limit: Comments requested per post
        thresholds: Optional buzz threshold override

    Returns:
        SocialSignal
    """
    query = build_search_query(title, year, content_type)
    result = search_discussions(query)
    summary = summarize_posts(result.posts)

    comments = []
    if fetch_comments and result.posts:
        threads = fetch_comments_for_top_posts(result.posts, comments_limit)
        comments = comments_from_threads(threads)

    analysis = analyze_comments(comments)
    buzz = classify_buzz(analysis, summary["comment_volume"], thresholds)

    return SocialSignal(
        buzz=buzz,
        analysis=analysis,
        trending_topics=analysis.trending_topics,
        **summary
    )


def get_social_signal_or_default(content, fetch_comments=True,
                                 comments_limit=DEFAULT_COMMENTS_LIMIT, thresholds=None):
    """
    Social signal for a content item, degraded to neutral on upstream failure.

    Args:
        content: ContentItem
        fetch_comments: Whether to mine comment threads
        comments_limit: Comments requested per post
        thresholds: Optional buzz threshold override

    Returns:
        SocialSignal, with degraded=True if the forum could not be reached
    """
    try:
        return get_social_signal(
            content.title, content.release_year, content.type,
            fetch_comments=fetch_comments, comments_limit=comments_limit,
            thresholds=thresholds
        )
    except FetchError as e:
        logger.warning("Social signal unavailable for %s: %s", content.title, e)
        return SocialSignal.neutral(error=str(e))
