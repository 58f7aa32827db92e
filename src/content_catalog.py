"""
Candidate catalog built from TMDB discover results for a set of quiz answers.
"""

import concurrent.futures
import requests
import streamlit as st
from pydantic import ValidationError

from models import ContentItem
from quiz_catalog import extract_preferences
from utils import (
    QUIZ_GENRE_MAP, TMDB_GENRE_NAMES, PLATFORM_PROVIDER_IDS, TMDB_BASE_URL,
    WATCH_REGION, CATALOG_RESULTS_PER_QUERY, get_tmdb_api_key
)

PROVIDER_NAMES = {
    8: "netflix", 9: "prime", 15: "hulu", 1899: "hbo", 337: "disney",
    350: "apple", 386: "peacock", 531: "paramount", 73: "free"
}
REQUEST_TIMEOUT = 10


def content_types_for_size(size):
    """TMDB media types worth discovering for the 'how big of a watch' answer."""
    if size == "movie":
        return ["movie"]
    if size == "flexible":
        return ["movie", "tv"]
    return ["tv"]


def quiz_genre_ids(genre_answers):
    """
    TMDB genre ids matching the quiz genre answers.

    Args:
        genre_answers: List of quiz genre values

    Returns:
        Sorted list of TMDB genre ids
    """
    wanted = set()
    for answer in genre_answers:
        wanted |= QUIZ_GENRE_MAP.get(answer, set())
    return sorted(gid for gid, name in TMDB_GENRE_NAMES.items() if name in wanted)


def provider_ids(platforms):
    """Watch provider ids for the platform answers; empty means no filter."""
    if not platforms or "all" in platforms:
        return []
    ids = []
    for platform in platforms:
        ids.extend(PLATFORM_PROVIDER_IDS.get(platform, []))
    return ids


def discover_titles(content_type, preferences, tmdb_api_key):
    """
    One page of popular titles of a media type matching the preferences.

    Returns:
        List of raw TMDB result dicts
    """
    params = {
        "api_key": tmdb_api_key,
        "sort_by": "popularity.desc",
        "vote_count.gte": 50,
        "page": 1
    }
    genre_ids = quiz_genre_ids(preferences["genres"])
    if genre_ids:
        params["with_genres"] = "|".join(str(g) for g in genre_ids)
    providers = provider_ids(preferences["platforms"])
    if providers:
        params["with_watch_providers"] = "|".join(str(p) for p in providers)
        params["watch_region"] = WATCH_REGION

    try:
        response = requests.get(f"{TMDB_BASE_URL}/discover/{content_type}", params=params,
                                timeout=REQUEST_TIMEOUT)
        if response.status_code == 200:
            return response.json().get("results", [])[:CATALOG_RESULTS_PER_QUERY]
        st.warning(f"TMDB discover failed for {content_type}: {response.status_code}")
    except (requests.RequestException, ValueError) as e:
        st.warning(f"Error discovering {content_type} titles: {e}")
    return []


def fetch_title_details(content_type, tmdb_id, tmdb_api_key, detail_cache=None):
    """
    Fetch details, certifications and watch providers for one title.

    Args:
        content_type: 'movie' or 'tv'
        tmdb_id: TMDB id
        tmdb_api_key: TMDB API key
        detail_cache: Optional dict (content_type, id) -> details

    Returns:
        Details dict or None
    """
    key = (content_type, tmdb_id)
    if detail_cache is not None and key in detail_cache:
        return detail_cache[key]

    ratings = "release_dates" if content_type == "movie" else "content_ratings"
    try:
        response = requests.get(
            f"{TMDB_BASE_URL}/{content_type}/{tmdb_id}",
            params={"api_key": tmdb_api_key, "append_to_response": f"{ratings},watch/providers"},
            timeout=REQUEST_TIMEOUT
        )
        if response.status_code != 200:
            return None
        details = response.json()
    except (requests.RequestException, ValueError):
        return None

    if detail_cache is not None:
        detail_cache[key] = details
    return details


def us_certification(details, content_type):
    """US certification from appended release dates / content ratings, if any."""
    if content_type == "movie":
        for country in details.get("release_dates", {}).get("results", []):
            if country.get("iso_3166_1") == WATCH_REGION:
                for release in country.get("release_dates", []):
                    if release.get("certification"):
                        return release["certification"]
        return None
    for rating in details.get("content_ratings", {}).get("results", []):
        if rating.get("iso_3166_1") == WATCH_REGION and rating.get("rating"):
            return rating["rating"]
    return None


def streaming_platforms(details):
    """Quiz platform values under which the title streams in the watch region."""
    region = details.get("watch/providers", {}).get("results", {}).get(WATCH_REGION, {})
    platforms = []
    for offer in region.get("flatrate", []) + region.get("free", []) + region.get("ads", []):
        name = PROVIDER_NAMES.get(offer.get("provider_id"))
        if name and name not in platforms:
            platforms.append(name)
    return platforms


def to_content_item(content_type, details):
    """
    Map TMDB details onto a ContentItem.

    Returns:
        ContentItem, or None when the title has no usable genres or title
    """
    genres = []
    for genre in details.get("genres", []):
        name = TMDB_GENRE_NAMES.get(genre.get("id"), genre.get("name"))
        if name and name not in genres:
            genres.append(name)

    if content_type == "movie":
        title = details.get("title")
        date = details.get("release_date") or ""
        runtime = details.get("runtime") or None
        seasons = episodes = None
    else:
        title = details.get("name")
        date = details.get("first_air_date") or ""
        run_times = details.get("episode_run_time") or []
        runtime = run_times[0] if run_times else None
        seasons = details.get("number_of_seasons")
        episodes = details.get("number_of_episodes")

    vote_average = details.get("vote_average")
    rating = vote_average if details.get("vote_count") and vote_average is not None else None

    try:
        return ContentItem(
            id=f"{content_type}-{details.get('id')}",
            title=title or "",
            type=content_type,
            genres=genres,
            release_year=int(date[:4]) if date[:4].isdigit() else None,
            runtime=runtime,
            seasons=seasons,
            episodes=episodes,
            imdb_rating=rating,
            certification=us_certification(details, content_type),
            platforms=streaming_platforms(details),
            overview=details.get("overview") or ""
        )
    except ValidationError:
        return None


def build_candidate_pool(answers, tmdb_api_key=None, detail_cache=None):
    """
    Candidate titles for a set of quiz answers.

    Discovers popular titles matching the genre and platform answers for
    each media type the size answer allows, then fetches their details in
    parallel.

    Args:
        answers: Quiz answers, question id -> value(s)
        tmdb_api_key: TMDB API key; read from secrets/env when omitted
        detail_cache: Optional dict reused across calls

    Returns:
        List of ContentItem
    """
    preferences = extract_preferences(answers)
    tmdb_api_key = tmdb_api_key or get_tmdb_api_key()
    if not tmdb_api_key:
        st.error("TMDB API key is not configured.")
        return []

    to_fetch = []
    for content_type in content_types_for_size(preferences["size"]):
        for result in discover_titles(content_type, preferences, tmdb_api_key):
            if result.get("id") is not None:
                to_fetch.append((content_type, result["id"]))

    candidates = []
    with concurrent.futures.ThreadPoolExecutor(max_workers=5) as executor:
        futures = {
            executor.submit(fetch_title_details, content_type, tmdb_id, tmdb_api_key, detail_cache): content_type
            for content_type, tmdb_id in to_fetch
        }
        for future in concurrent.futures.as_completed(futures):
            details = future.result()
            if details is None:
                continue
            item = to_content_item(futures[future], details)
            if item is not None and item.title:
                candidates.append(item)

    candidates.sort(key=lambda c: c.id)
    return candidates
