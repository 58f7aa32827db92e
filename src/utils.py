"""
Utility functions and configuration constants for the recommendation system.
"""

import os
import streamlit as st

# Global configuration constants
ALGORITHM_WEIGHTS = {
    "A": {
        "genre_match": 0.30,
        "vibe_match": 0.20,
        "size_match": 0.15,
        "recency_match": 0.10,
        "critic_score": 0.15,
        "social_signal": 0.10
    },
    "B": {
        "genre_match": 0.25,
        "vibe_match": 0.15,
        "size_match": 0.10,
        "recency_match": 0.10,
        "critic_score": 0.10,
        "social_signal": 0.30
    }
}

ALGORITHM_VARIANTS = tuple(ALGORITHM_WEIGHTS)

# Years within which content fully satisfies each freshness answer
FRESHNESS_WINDOWS = {
    "newest": 2,
    "recent": 5,
    "modern-classic": 10
}

DEFAULT_TOP_K = 10

# Comparative-score cut-offs for Positive / Negative labels
SENTIMENT_THRESHOLDS = {
    "positive": 0.1,
    "negative": -0.1
}

BUZZ_THRESHOLDS = {
    "high_volume": 100,
    "medium_volume": 25,
    "trending_sentiment": 0.1,
    "balanced_ratio": 0.75,
    "min_side_share": 0.25,
    "one_sided_share": 0.6
}

# Sub-score in [-1, 1] for each buzz label
BUZZ_LABEL_SCORES = {
    "Trending Positive": 1.0,
    "Popular Discussion": 0.6,
    "Trending Mixed": 0.4,
    "Niche Interest": 0.3,
    "Controversial": 0.2,
    "Low Buzz": 0.0,
    "Trending Negative": -0.5
}

# Forum API
FORUM_BASE_URL = os.environ.get("FORUM_BASE_URL", "https://www.reddit.com")
FORUM_USER_AGENT = os.environ.get(
    "FORUM_USER_AGENT",
    "What2Watch/1.0 (recommendation service; +https://what2watch.example.com)"
)
SEARCH_TIMEOUT = 8
COMMENTS_TIMEOUT = 5
SEARCH_RESULT_LIMIT = 50
DEFAULT_COMMENTS_LIMIT = 50
MAX_COMMENT_POSTS = 3
COMMENT_FETCH_DELAY = 1.0
# Pause between titles in a batch buzz pass
TITLE_FETCH_DELAY = 1.0
MAX_COMMENT_DEPTH = 8

TRENDING_TOPIC_COUNT = 10
MIN_TOPIC_LENGTH = 3

STOP_WORDS = frozenset("""
a about above after again against all also am an and any are aren't as at be
because been before being below between both but by can can't cannot could
couldn't did didn't do does doesn't doing don't down during each even ever
few for from further get got had hadn't has hasn't have haven't having he
her here hers herself him himself his how i i'm if in into is isn't it it's
its itself just let's like lol me more most much my myself no nor not now of
off on once one only or other ought our ours ourselves out over own really
same she should shouldn't so some still such than that that's the their
theirs them themselves then there there's these they they're think this
those though through thing things to too under until up very was wasn't we
we're were weren't what what's when where which while who whom why will with
won't would wouldn't yeah yes you you're your yours yourself yourselves
deleted removed http https www com amp gt
""".split())

# Quiz vibe answers -> genres they pull towards
MOOD_GENRE_MAP = {
    "laugh": {"Comedy", "Animation", "Family"},
    "cry": {"Drama", "Romance"},
    "drama": {"Drama", "Crime", "Thriller"},
    "mind-blowing": {"Sci-Fi", "Mystery", "Fantasy"},
    "uplifting": {"Comedy", "Family", "Music", "Romance"},
    "plot-twists": {"Mystery", "Thriller", "Crime"},
    "cozy": {"Comedy", "Family", "Animation", "Romance"},
    "dark": {"Horror", "Crime", "Thriller", "War"},
    "educational": {"Documentary", "History"},
    "background": {"Comedy", "Reality", "Animation"}
}

# Quiz genre answers -> catalog genre names
QUIZ_GENRE_MAP = {
    "comedy": {"Comedy"},
    "action": {"Action", "Adventure"},
    "thriller": {"Thriller", "Mystery"},
    "scifi-fantasy": {"Sci-Fi", "Fantasy"},
    "romance": {"Romance"},
    "documentary": {"Documentary"},
    "true-crime": {"Crime", "Documentary"},
    "animated": {"Animation"},
    "supernatural": {"Horror", "Fantasy"},
    "historical": {"History", "War"}
}

TMDB_GENRE_NAMES = {
    28: "Action", 12: "Adventure", 16: "Animation", 35: "Comedy",
    80: "Crime", 99: "Documentary", 18: "Drama", 10751: "Family",
    14: "Fantasy", 36: "History", 27: "Horror", 10402: "Music",
    9648: "Mystery", 10749: "Romance", 878: "Sci-Fi", 10770: "TV Movie",
    53: "Thriller", 10752: "War", 37: "Western",
    10759: "Action", 10762: "Kids", 10763: "News", 10764: "Reality",
    10765: "Sci-Fi", 10766: "Soap", 10767: "Talk", 10768: "War & Politics"
}

# Maturity ladder, lowest first. TV ratings share the movie ladder position.
CERTIFICATION_LEVELS = {
    "G": 0, "TV-Y": 0, "TV-Y7": 0, "TV-G": 0,
    "PG": 1, "TV-PG": 1,
    "PG-13": 2, "TV-14": 2,
    "R": 3, "NC-17": 3, "TV-MA": 3
}

RATING_CEILINGS = {
    "any-rating": None,
    "family": 1,
    "pg13": 2,
    "mature": None
}

# Quiz platform answers -> TMDB watch provider ids (US region)
PLATFORM_PROVIDER_IDS = {
    "netflix": [8],
    "prime": [9],
    "hulu": [15],
    "hbo": [1899],
    "disney": [337],
    "apple": [350],
    "peacock": [386],
    "paramount": [531],
    "free": [73]
}

TMDB_BASE_URL = "https://api.themoviedb.org/3"
WATCH_REGION = "US"
CATALOG_RESULTS_PER_QUERY = 20


def get_affinity_score(genres, selected, affinity_map):
    """
    Share of selected quiz answers whose genre affinity overlaps the content.

    Args:
        genres: Iterable of content genre names
        selected: Iterable of quiz answer values
        affinity_map: Answer value -> set of genre names

    Returns:
        Float between 0 and 1
    """
    selected = [s for s in selected if s in affinity_map]
    if not selected:
        return 0.0
    genre_set = set(genres)
    matched = sum(1 for s in selected if affinity_map[s] & genre_set)
    return matched / len(selected)


def certification_level(certification):
    """Position of a certification on the maturity ladder, or None if unknown."""
    if not certification:
        return None
    return CERTIFICATION_LEVELS.get(certification.strip().upper())


def get_tmdb_api_key():
    """Read the TMDB key from Streamlit secrets, falling back to the environment."""
    try:
        if "tmdb_api_key" in st.secrets:
            return st.secrets["tmdb_api_key"]
    except FileNotFoundError:
        pass
    return os.environ.get("TMDB_API_KEY", "")


def critic_average(content):
    """Mean of the available critic scores scaled to 0..1, or None if there are none."""
    scores = []
    if content.imdb_rating is not None:
        scores.append(content.imdb_rating / 10)
    if content.rotten_tomatoes_score is not None:
        scores.append(content.rotten_tomatoes_score / 100)
    if not scores:
        return None
    return sum(scores) / len(scores)