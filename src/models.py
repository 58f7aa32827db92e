"""
Typed data model for the social-signal recommendation pipeline.

Forum payloads are validated into these models once, at the fetch boundary,
so the rest of the pipeline never touches loosely typed JSON.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SentimentLabel = Literal["Positive", "Neutral", "Negative", "Unknown"]
Verdict = Literal["liked", "disliked"]


# -----------------------------------------------------------------------------
# Forum payloads
# -----------------------------------------------------------------------------

class ForumPost(BaseModel):
    """One post from a forum search listing."""
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    title: str = ""
    permalink: Optional[str] = None
    subreddit: Optional[str] = None
    ups: int = 0
    num_comments: int = 0
    selftext: str = ""


class SearchResult(BaseModel):
    """Validated search response; `raw` is the untouched upstream payload."""
    raw: Dict[str, Any]
    posts: List[ForumPost] = []


class CommentNode(BaseModel):
    body: str
    depth: int = 0
    replies: List["CommentNode"] = []


class CommentThread(BaseModel):
    """Comments fetched for a single post."""
    post_id: str = ""
    post_title: str = ""
    post_url: str = ""
    comments_data: Any = None
    comments: List[CommentNode] = []

    def to_payload(self):
        """Shape used by the HTTP proxy response."""
        return {
            "postId": self.post_id,
            "postTitle": self.post_title,
            "postUrl": self.post_url,
            "commentsData": self.comments_data,
        }


class RawComment(BaseModel):
    body: str
    post_id: str = ""


# -----------------------------------------------------------------------------
# Sentiment and buzz
# -----------------------------------------------------------------------------

class SentimentResult(BaseModel):
    score: float = 0.0
    comparative: float = 0.0
    label: SentimentLabel = "Unknown"


class TrendingTopic(BaseModel):
    term: str
    count: int
    sentiment: SentimentLabel = "Neutral"
    sentiment_score: float = 0.0


class CommentSentimentAnalysis(BaseModel):
    total_comments: int = 0
    analyzed_comments: int = 0
    average_sentiment: float = 0.0
    sentiment_type: SentimentLabel = "Unknown"
    positive_comments: int = 0
    negative_comments: int = 0
    neutral_comments: int = 0
    trending_topics: List[TrendingTopic] = []


class SocialSignal(BaseModel):
    """Buzz and sentiment attached to a content item for one request."""
    buzz: str = "Low Buzz"
    analysis: CommentSentimentAnalysis = Field(default_factory=CommentSentimentAnalysis)
    trending_topics: List[TrendingTopic] = []
    post_count: int = 0
    total_upvotes: int = 0
    comment_volume: int = 0
    top_communities: List[Dict[str, Any]] = []
    degraded: bool = False
    error: Optional[str] = None

    @property
    def sentiment(self):
        return self.analysis.sentiment_type

    @classmethod
    def neutral(cls, error=None):
        """Default signal used when nothing could be fetched or analyzed."""
        return cls(degraded=error is not None, error=error)


# -----------------------------------------------------------------------------
# Content and scoring
# -----------------------------------------------------------------------------

class ContentItem(BaseModel):
    id: str
    title: str
    type: Literal["movie", "tv"] = "movie"
    genres: List[str] = Field(min_length=1)
    release_year: Optional[int] = None
    runtime: Optional[int] = None
    seasons: Optional[int] = None
    episodes: Optional[int] = None
    imdb_rating: Optional[float] = Field(default=None, ge=0, le=10)
    rotten_tomatoes_score: Optional[int] = Field(default=None, ge=0, le=100)
    certification: Optional[str] = None
    platforms: List[str] = []
    overview: str = ""
    social_signal: Optional[SocialSignal] = None


class ScoredContent(BaseModel):
    content: ContentItem
    score: float
    variant: Literal["A", "B"]
    rank: Optional[int] = None
    breakdown: Dict[str, float] = {}
    reasons: List[str] = []


# -----------------------------------------------------------------------------
# Feedback
# -----------------------------------------------------------------------------

class FeedbackItem(BaseModel):
    """One accept/reject verdict; immutable once recorded."""
    model_config = ConfigDict(frozen=True)

    content_id: str
    title: str
    verdict: Verdict
    rank: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    genres: List[str] = []
    variant: Optional[Literal["A", "B"]] = None

    @property
    def liked(self):
        return self.verdict == "liked"


class AlgorithmStats(BaseModel):
    total: int = 0
    liked: int = 0
    disliked: int = 0
    accuracy: float = 0.0
    top_pick_total: int = 0
    top_pick_liked: int = 0
    top_pick_accuracy: float = 0.0


class GenreStats(BaseModel):
    total: int = 0
    liked: int = 0
    disliked: int = 0
    accuracy: float = 0.0


class AccuracyReport(BaseModel):
    overall: AlgorithmStats
    by_variant: Dict[str, AlgorithmStats]
    by_genre: Dict[str, GenreStats]
