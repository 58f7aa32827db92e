"""
social_signal_api.py - FastAPI proxy for forum discussions and buzz.

Endpoints:
  GET  /recommendations/social-signal
  GET  /recommendations/buzz
"""

import logging
from typing import Optional

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from forum_client import (
    FetchError, InputError, search_discussions, fetch_comments_for_top_posts
)
from social_signal import get_social_signal
from utils import DEFAULT_COMMENTS_LIMIT

logger = logging.getLogger(__name__)

app = FastAPI(title="What2Watch Social Signal API", version="1.0.0")

MISSING_QUERY = {"error": "Missing query parameter"}


def parse_comments_limit(raw):
    """Comments limit from a query string value; falls back to the default."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_COMMENTS_LIMIT
    return value if value > 0 else DEFAULT_COMMENTS_LIMIT


@app.get("/recommendations/social-signal")
def social_signal_proxy(
    title: Optional[str] = None,
    fetchComments: Optional[str] = None,
    commentsLimit: Optional[str] = None,
):
    if not title:
        return JSONResponse(MISSING_QUERY, status_code=400)

    fetch_comments = fetchComments == "true"
    limit = parse_comments_limit(commentsLimit)

    try:
        result = search_discussions(title)
        if not fetch_comments or not result.posts:
            return result.raw

        threads = fetch_comments_for_top_posts(result.posts, limit)
        return {**result.raw, "commentsData": [t.to_payload() for t in threads]}
    except InputError:
        return JSONResponse(MISSING_QUERY, status_code=400)
    except FetchError as e:
        logger.error("Error proxying forum request for %r: %s", title, e)
        return JSONResponse({"error": str(e)}, status_code=500)


@app.get("/recommendations/buzz")
def buzz(
    title: Optional[str] = None,
    year: Optional[int] = None,
    content_type: Optional[str] = Query(None, alias="type"),
):
    if not title:
        return JSONResponse(MISSING_QUERY, status_code=400)

    try:
        signal = get_social_signal(title, year, content_type)
    except InputError:
        return JSONResponse(MISSING_QUERY, status_code=400)
    except FetchError as e:
        logger.error("Buzz lookup failed for %r: %s", title, e)
        return JSONResponse({"error": str(e)}, status_code=500)
    return signal.model_dump()
