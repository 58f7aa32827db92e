"""
Buzz classification from comment volume and sentiment distribution.
"""

from utils import BUZZ_THRESHOLDS


def volume_level(comment_volume, thresholds=None):
    """
    Coarse High / Medium / Low level for a comment volume.

    Args:
        comment_volume: Number of comments across the title's discussions
        thresholds: Optional override of BUZZ_THRESHOLDS

    Returns:
        String: 'High', 'Medium' or 'Low'
    """
    thresholds = thresholds or BUZZ_THRESHOLDS
    if comment_volume >= thresholds["high_volume"]:
        return "High"
    elif comment_volume >= thresholds["medium_volume"]:
        return "Medium"
    return "Low"


def classify_buzz(analysis, comment_volume, thresholds=None):
    """
    Map a sentiment analysis and comment volume to a buzz label.

    Rules are checked in order and the first match wins:
    nothing analyzed -> Low Buzz; high volume with a clear average
    sentiment -> Trending Positive / Negative; high volume with a balanced
    positive/negative split -> Controversial when both sides hold at least
    min_side_share of the analyzed comments, Trending Mixed otherwise;
    any other high volume -> Popular Discussion; medium volume -> Popular
    Discussion when one-sided, Controversial when not; any other non-zero
    volume -> Niche Interest; otherwise Low Buzz.

    Args:
        analysis: CommentSentimentAnalysis
        comment_volume: Number of comments across the title's discussions
        thresholds: Optional override of BUZZ_THRESHOLDS

    Returns:
        String buzz label
    """
    thresholds = thresholds or BUZZ_THRESHOLDS
    analyzed = analysis.analyzed_comments
    if analyzed == 0:
        return "Low Buzz"

    positive = analysis.positive_comments
    negative = analysis.negative_comments
    average = analysis.average_sentiment
    level = volume_level(comment_volume, thresholds)

    if level == "High":
        if average >= thresholds["trending_sentiment"]:
            return "Trending Positive"
        if average <= -thresholds["trending_sentiment"]:
            return "Trending Negative"

        larger = max(positive, negative)
        if larger and min(positive, negative) / larger >= thresholds["balanced_ratio"]:
            min_side = thresholds["min_side_share"] * analyzed
            if positive >= min_side and negative >= min_side:
                return "Controversial"
            return "Trending Mixed"
        return "Popular Discussion"

    if level == "Medium":
        polar = positive + negative
        if polar == 0 or max(positive, negative) / polar >= thresholds["one_sided_share"]:
            return "Popular Discussion"
        return "Controversial"

    if comment_volume > 0:
        return "Niche Interest"
    return "Low Buzz"
