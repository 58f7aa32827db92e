"""
Deterministic ranking of scored content.
"""

from forum_client import InputError
from utils import critic_average


def critic_sort_value(content):
    """Critic score used to break score ties; missing scores sort last."""
    average = critic_average(content)
    return -1.0 if average is None else average


def rank_key(scored):
    content = scored.content
    return (-scored.score, -critic_sort_value(content), content.title.lower(), content.id)


def rank_content(scored, top_k=None):
    """
    Sort scored content and assign ranks 1..N.

    Ties on score are broken by higher critic score, then title, then id,
    so identical inputs always come back in the same order.

    Args:
        scored: List of ScoredContent
        top_k: Optional number of results to keep

    Returns:
        New list of ScoredContent with rank set
    """
    if top_k is not None and top_k < 0:
        raise InputError("top_k must not be negative")

    ordered = sorted(scored, key=rank_key)
    if top_k is not None:
        ordered = ordered[:top_k]
    return [item.model_copy(update={"rank": position}) for position, item in enumerate(ordered, start=1)]
