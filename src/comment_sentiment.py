"""
Comment sentiment analysis and trending-topic extraction.
"""

import nltk
from nltk.sentiment import SentimentIntensityAnalyzer
from nltk.tokenize import RegexpTokenizer
from collections import Counter

from models import CommentSentimentAnalysis, SentimentResult, TrendingTopic
from utils import SENTIMENT_THRESHOLDS, STOP_WORDS, TRENDING_TOPIC_COUNT, MIN_TOPIC_LENGTH

# Download required NLTK data
nltk.download('vader_lexicon', quiet=True)

# Initialize sentiment analyzer; its lexicon drives the per-token polarity
sia = SentimentIntensityAnalyzer()
LEXICON = sia.lexicon

word_tokenizer = RegexpTokenizer(r"[a-z0-9']+")


def tokenize(text):
    """Lower-cased word tokens of a comment body."""
    return word_tokenizer.tokenize(text.lower())


def label_for(value):
    """
    Map a comparative score to a sentiment label.

    Args:
        value: Comparative (length-normalized) score

    Returns:
        String: 'Positive', 'Negative' or 'Neutral'
    """
    if value >= SENTIMENT_THRESHOLDS["positive"]:
        return "Positive"
    elif value <= SENTIMENT_THRESHOLDS["negative"]:
        return "Negative"
    return "Neutral"


def score_text(text):
    """
    Lexicon polarity of a piece of text.

    The signed score is the sum of lexicon valences over all tokens; the
    comparative score divides it by the token count.

    Args:
        text: Comment body

    Returns:
        SentimentResult, labelled 'Unknown' when the text has no tokens
    """
    tokens = tokenize(text or "")
    if not tokens:
        return SentimentResult()
    score = sum(LEXICON.get(token, 0.0) for token in tokens)
    comparative = score / len(tokens)
    return SentimentResult(score=score, comparative=comparative, label=label_for(comparative))


def topic_terms(text):
    """Candidate topic terms of a comment: no stopwords, contractions or short tokens."""
    terms = []
    for token in tokenize(text):
        if token in STOP_WORDS:
            continue
        word = token.strip("'")
        if word.endswith("'s"):
            word = word[:-2]
        if "'" in word:
            continue
        if len(word) >= MIN_TOPIC_LENGTH and word not in STOP_WORDS:
            terms.append(word)
    return terms



def extract_trending_topics(bodies, scores, limit=TRENDING_TOPIC_COUNT):
    """
    Rank the most frequent terms across comments.

    Ties keep first-seen order. Each topic is scored by averaging the
    comparative score of the comments that mention it.

    Args:
        bodies: Analyzed comment bodies
        scores: SentimentResult per body, same order
        limit: Number of topics to return

    Returns:
        List of TrendingTopic
    """
    counts = Counter()
    mentions = {}
    for index, body in enumerate(bodies):
        terms = topic_terms(body)
        counts.update(terms)
        for term in set(terms):
            mentions.setdefault(term, []).append(index)

    ranked = sorted(counts.items(), key=lambda item: -item[1])[:limit]

    topics = []
    for term, count in ranked:
        related = [scores[i].comparative for i in mentions[term]]
        average = sum(related) / len(related)
        topics.append(TrendingTopic(
            term=term,
            count=count,
            sentiment=label_for(average),
            sentiment_score=average
        ))
    return topics


def analyze_comments(comments):
    """
    Aggregate sentiment over a title's comments.

    Empty or whitespace-only bodies count toward total_comments but are not
    analyzed. With nothing analyzed the result is 'Unknown' with an average
    of 0.

    Args:
        comments: List of RawComment

    Returns:
        CommentSentimentAnalysis
    """
    bodies = []
    results = []
    for comment in comments:
        body = comment.body or ""
        if not body.strip():
            continue
        result = score_text(body)
        if result.label == "Unknown":
            continue
        bodies.append(body)
        results.append(result)

    analysis = CommentSentimentAnalysis(total_comments=len(comments))
    if not results:
        return analysis

    analysis.analyzed_comments = len(results)
    analysis.positive_comments = sum(1 for r in results if r.score > 0)
    analysis.negative_comments = sum(1 for r in results if r.score < 0)
    analysis.neutral_comments = sum(1 for r in results if r.score == 0)
    analysis.average_sentiment = sum(r.comparative for r in results) / len(results)
    analysis.sentiment_type = label_for(analysis.average_sentiment)
    analysis.trending_topics = extract_trending_topics(bodies, results)
    return analysis
