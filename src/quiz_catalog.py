"""
Static quiz catalog, answer validation and preference extraction.
"""

from forum_client import InputError

QUESTIONS = [
    {
        "id": 1,
        "key": "vibe",
        "text": "Set the vibe - how do you wanna feel while watching?",
        "options": [
            ("Make me laugh", "laugh"),
            ("I want to cry", "cry"),
            ("High-stakes drama", "drama"),
            ("Something mind-blowing", "mind-blowing"),
            ("Feel-good & uplifting", "uplifting"),
            ("Wild plot twists", "plot-twists"),
            ("Cozy & comforting", "cozy"),
            ("Dark and intense", "dark"),
            ("Educational or thought-provoking", "educational"),
            ("Background noise / easy watch", "background")
        ],
        "multi_select": True
    },
    {
        "id": 2,
        "key": "genres",
        "text": "Pick your flavor - what genres are calling your name?",
        "options": [
            ("Comedy", "comedy"),
            ("Action", "action"),
            ("Thriller / Mystery", "thriller"),
            ("Sci-Fi / Fantasy", "scifi-fantasy"),
            ("Romance", "romance"),
            ("Documentary", "documentary"),
            ("True Crime", "true-crime"),
            ("Animated", "animated"),
            ("Supernatural", "supernatural"),
            ("Historical", "historical")
        ],
        "multi_select": True
    },
    {
        "id": 3,
        "key": "size",
        "text": "How big of a watch are you in the mood for?",
        "options": [
            ("Just a quick movie", "movie"),
            ("A mini-series snack (under 6 episodes)", "mini-series"),
            ("A full season feast", "season"),
            ("A multi-season deep dive", "multi-season"),
            ("I'm flexible, bring it on", "flexible")
        ],
        "multi_select": False
    },
    {
        "id": 4,
        "key": "platforms",
        "text": "Where are you ready to stream from?",
        "options": [
            ("Netflix", "netflix"),
            ("Amazon Prime", "prime"),
            ("Hulu", "hulu"),
            ("HBO Max / Crave", "hbo"),
            ("Disney+", "disney"),
            ("Apple TV+", "apple"),
            ("Peacock", "peacock"),
            ("Paramount+", "paramount"),
            ("Tubi / Free services", "free"),
            ("All The Above", "all")
        ],
        "multi_select": True
    },
    {
        "id": 5,
        "key": "freshness",
        "text": "How fresh do you want it?",
        "options": [
            ("Doesn't matter - just make it good", "any"),
            ("Hot off the press (last 1-2 years)", "newest"),
            ("Pretty recent (last 5 years)", "recent"),
            ("I'm down for a modern classic (last 10 years)", "modern-classic")
        ],
        "multi_select": False
    },
    {
        "id": 6,
        "key": "rating_ceiling",
        "text": "How spicy can we get with the rating?",
        "options": [
            ("Anything goes!", "any-rating"),
            ("Keep it G/PG - family vibes only", "family"),
            ("PG-13 sounds perfect", "pg13"),
            ("R/Mature - bring it on", "mature")
        ],
        "multi_select": False
    },
    {
        "id": 7,
        "key": "company",
        "text": "Who's joining your movie mission tonight?",
        "options": [
            ("Just me, myself, and I", "solo"),
            ("Movie date vibes", "date"),
            ("Friends night", "friends"),
            ("Family movie night", "family")
        ],
        "multi_select": False
    }
]

QUESTIONS_BY_ID = {q["id"]: q for q in QUESTIONS}

DEFAULT_PREFERENCES = {
    "vibe": [],
    "genres": [],
    "size": "flexible",
    "platforms": [],
    "freshness": "any",
    "rating_ceiling": "any-rating",
    "company": "solo"
}


def _as_values(value):
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def validate_answers(answers):
    """
    Check quiz answers against the catalog.

    Args:
        answers: Dict of question id -> option value or list of values

    Returns:
        Dict of int question id -> list of values

    Raises:
        InputError: unknown question or option, or several values for a
            single-select question
    """
    normalized = {}
    for raw_id, value in (answers or {}).items():
        try:
            question_id = int(raw_id)
        except (TypeError, ValueError):
            raise InputError(f"Unknown question id: {raw_id!r}")
        question = QUESTIONS_BY_ID.get(question_id)
        if question is None:
            raise InputError(f"Unknown question id: {raw_id!r}")

        values = _as_values(value)
        if not question["multi_select"] and len(values) != 1:
            raise InputError(f"Question {question_id} takes exactly one answer")

        allowed = {v for _, v in question["options"]}
        unknown = [v for v in values if v not in allowed]
        if unknown:
            raise InputError(f"Unknown option(s) for question {question_id}: {unknown}")
        normalized[question_id] = values
    return normalized


def extract_preferences(answers):
    """
    Turn validated quiz answers into a preference dictionary.

    Args:
        answers: Dict of question id -> option value(s)

    Returns:
        Dictionary keyed by question key ('vibe', 'genres', 'size', ...)
    """
    preferences = {k: (list(v) if isinstance(v, list) else v) for k, v in DEFAULT_PREFERENCES.items()}
    for question_id, values in validate_answers(answers).items():
        question = QUESTIONS_BY_ID[question_id]
        if question["multi_select"]:
            preferences[question["key"]] = values
        else:
            preferences[question["key"]] = values[0]
    return preferences
