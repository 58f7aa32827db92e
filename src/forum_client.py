"""
Forum fetch client: search and comment-thread requests against the forum's
public JSON API, with fixed timeouts, request budget and rate-limit delay.
"""

import logging
import time
import requests
from pydantic import BaseModel, ValidationError

from models import CommentNode, CommentThread, ForumPost, RawComment, SearchResult
from utils import (
    FORUM_BASE_URL, FORUM_USER_AGENT, SEARCH_TIMEOUT, COMMENTS_TIMEOUT,
    SEARCH_RESULT_LIMIT, DEFAULT_COMMENTS_LIMIT, MAX_COMMENT_POSTS,
    COMMENT_FETCH_DELAY, MAX_COMMENT_DEPTH
)

logger = logging.getLogger(__name__)

REQUEST_HEADERS = {"User-Agent": FORUM_USER_AGENT}


class InputError(ValueError):
    """Missing or invalid caller input. Never retried."""


class FetchError(Exception):
    """A single upstream request failed."""

    kind = "Network"

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class UpstreamTimeout(FetchError):
    kind = "Timeout"


class UpstreamHttpError(FetchError):
    kind = "HttpError"


class UpstreamNetworkError(FetchError):
    kind = "Network"


class UpstreamPayloadError(FetchError):
    kind = "InvalidPayload"


class _ListingChild(BaseModel):
    kind: str = ""
    data: dict = {}


class _ListingData(BaseModel):
    children: list[_ListingChild] = []


class _Listing(BaseModel):
    data: _ListingData


def build_search_query(title, year=None, content_type=None):
    """
    Build a forum search query for a title.

    Args:
        title: Content title
        year: Optional release year
        content_type: Optional 'movie' or 'tv'

    Returns:
        String query
    """
    if not title or not title.strip():
        raise InputError("Missing query parameter")
    query = title.strip()
    if year:
        query += f" {year}"
    if content_type == "movie":
        query += " movie film"
    elif content_type == "tv":
        query += " tv series show"
    return query


def _request(url, params, timeout):
    """GET a forum URL, translating transport failures into FetchErrors."""
    try:
        response = requests.get(url, params=params, headers=REQUEST_HEADERS, timeout=timeout)
    except requests.exceptions.Timeout as e:
        raise UpstreamTimeout(f"Forum request timed out after {timeout}s") from e
    except requests.exceptions.RequestException as e:
        raise UpstreamNetworkError(f"Forum request failed: {e}") from e
    return response


def _decode(response):
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamPayloadError("Forum returned a non-JSON body") from e


def parse_search_posts(payload):
    """
    Validate a search listing and extract its posts.

    Args:
        payload: Decoded search JSON

    Returns:
        List of ForumPost
    """
    try:
        listing = _Listing.model_validate(payload)
        return [
            ForumPost.model_validate(child.data)
            for child in listing.data.children
            if child.kind == "t3"
        ]
    except ValidationError as e:
        raise UpstreamPayloadError(f"Unexpected search payload shape: {e.error_count()} errors") from e


def search_discussions(query):
    """
    Search the forum for discussions about a title.

    Args:
        query: Free-text query, must be non-empty

    Returns:
        SearchResult with the raw payload and validated posts
    """
    if not query or not str(query).strip():
        raise InputError("Missing query parameter")

    url = f"{FORUM_BASE_URL}/search.json"
    params = {"q": query, "sort": "relevance", "t": "all", "limit": SEARCH_RESULT_LIMIT}
    response = _request(url, params, SEARCH_TIMEOUT)
    if not 200 <= response.status_code < 300:
        raise UpstreamHttpError(f"Reddit API error: {response.status_code}", status=response.status_code)

    payload = _decode(response)
    posts = parse_search_posts(payload)
    return SearchResult(raw=payload, posts=posts)


def _listing_children(listing):
    if not isinstance(listing, dict):
        return []
    data = listing.get("data")
    if not isinstance(data, dict):
        return []
    return data.get("children") or []


def parse_comment_tree(children, depth=0, max_depth=MAX_COMMENT_DEPTH):
    """
    Convert a comment listing's children into CommentNode trees.

    "more" stubs are dropped and deleted or removed bodies are blanked.
    Replies below max_depth are not parsed.

    Args:
        children: List of raw listing children
        depth: Depth of these children in the thread
        max_depth: Deepest level to keep

    Returns:
        List of CommentNode
    """
    nodes = []
    if depth > max_depth:
        return nodes
    for child in children or []:
        if not isinstance(child, dict) or child.get("kind") != "t1":
            continue
        data = child.get("data") or {}
        body = data.get("body") or ""
        replies = data.get("replies")
        reply_children = _listing_children(replies)
        nodes.append(CommentNode(
            body="" if body in ("[deleted]", "[removed]") else body,
            depth=depth,
            replies=parse_comment_tree(reply_children, depth + 1, max_depth)
        ))
    return nodes


def flatten_comments(nodes, post_id=""):
    """
    Flatten comment trees into RawComments, parents before their replies.

    Args:
        nodes: List of CommentNode
        post_id: Post the comments belong to

    Returns:
        List of RawComment
    """
    flat = []
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        flat.append(RawComment(body=node.body, post_id=post_id))
        stack.extend(reversed(node.replies))
    return flat


def parse_comment_thread(permalink, payload):
    """
    Validate a [post listing, comment listing] pair and build its CommentThread.

    Args:
        permalink: Post path the thread was fetched from
        payload: Decoded comments JSON

    Returns:
        CommentThread
    """
    try:
        listings = [_Listing.model_validate(listing) for listing in payload[:2]]
        thread = CommentThread(post_url=permalink, comments_data=payload)
        if listings and listings[0].data.children:
            post_data = listings[0].data.children[0].data
            thread.post_id = str(post_data.get("id") or "")
            thread.post_title = str(post_data.get("title") or "")
        if len(listings) > 1:
            thread.comments = parse_comment_tree(_listing_children(payload[1]))
    except (ValidationError, AttributeError, TypeError) as e:
        raise UpstreamPayloadError(f"Unexpected comment payload shape for {permalink}") from e
    return thread


def fetch_comments(permalink, limit=DEFAULT_COMMENTS_LIMIT):
    """
    Fetch the comment thread behind a post permalink.

    Args:
        permalink: Post path from the search result, e.g. /r/movies/comments/abc/x/
        limit: Maximum number of comments requested

    Returns:
        CommentThread, or None when the forum answers with a non-2xx status
    """
    if not permalink:
        raise InputError("Missing post permalink")

    url = f"{FORUM_BASE_URL}{permalink.rstrip('/')}.json"
    response = _request(url, {"limit": limit}, COMMENTS_TIMEOUT)
    if not 200 <= response.status_code < 300:
        logger.info("No comments for %s (status %s)", permalink, response.status_code)
        return None

    payload = _decode(response)
    if not isinstance(payload, list):
        raise UpstreamPayloadError("Unexpected comment payload shape")

    return parse_comment_thread(permalink, payload)


def fetch_comments_for_top_posts(posts, limit=DEFAULT_COMMENTS_LIMIT):
    """
    Fetch comments for the first few posts, one at a time.

    At most MAX_COMMENT_POSTS posts are visited in the given order, with a
    COMMENT_FETCH_DELAY pause between visits. A failed post is logged and
    skipped.

    Args:
        posts: List of ForumPost in relevance order
        limit: Comments per post

    Returns:
        List of CommentThread for the posts that succeeded
    """
    threads = []
    to_visit = list(posts)[:MAX_COMMENT_POSTS]

    for i, post in enumerate(to_visit):
        if not post.permalink:
            logger.warning("Skipping post %s: no permalink", post.id)
            continue

        try:
            thread = fetch_comments(post.permalink, limit)
            if thread is not None:
                thread.post_id = thread.post_id or post.id
                thread.post_title = thread.post_title or post.title
                threads.append(thread)
        except FetchError as e:
            logger.warning("Skipping comments for post %s: %s", post.id or post.permalink, e)

        if i < len(to_visit) - 1:
            time.sleep(COMMENT_FETCH_DELAY)

    return threads


def comments_from_threads(threads):
    """All comments of the given threads as a flat RawComment list."""
    comments = []
    for thread in threads:
        comments.extend(flatten_comments(thread.comments, thread.post_id))
    return comments
