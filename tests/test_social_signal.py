"""
Unit tests for social signal assembly.
"""

import unittest
from unittest.mock import patch
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from social_signal import summarize_posts, get_social_signal, get_social_signal_or_default
from forum_client import UpstreamTimeout, UpstreamHttpError
from models import (
    ForumPost, SearchResult, CommentThread, CommentNode, ContentItem
)


def posts():
    return [
        ForumPost(id="a", title="A", permalink="/r/movies/a/", subreddit="movies", ups=100, num_comments=80),
        ForumPost(id="b", title="B", permalink="/r/movies/b/", subreddit="movies", ups=50, num_comments=30),
        ForumPost(id="c", title="C", permalink="/r/TrueFilm/c/", subreddit="TrueFilm", ups=5, num_comments=10)
    ]


class TestSummarizePosts(unittest.TestCase):

    def test_summary(self):
        summary = summarize_posts(posts())

        self.assertEqual(summary["post_count"], 3)
        self.assertEqual(summary["total_upvotes"], 155)
        self.assertEqual(summary["comment_volume"], 120)
        self.assertEqual(summary["top_communities"][0], {"name": "movies", "count": 2})

    def test_empty(self):
        summary = summarize_posts([])

        self.assertEqual(summary["comment_volume"], 0)
        self.assertEqual(summary["top_communities"], [])


class TestGetSocialSignal(unittest.TestCase):

    @patch('social_signal.fetch_comments_for_top_posts')
    @patch('social_signal.search_discussions')
    def test_assembles_signal(self, mock_search, mock_fetch):
        mock_search.return_value = SearchResult(raw={}, posts=posts())
        mock_fetch.return_value = [
            CommentThread(post_id="a", comments=[
                CommentNode(body="I love this movie, it is wonderful and great"),
                CommentNode(body="Absolutely brilliant and beautiful")
            ])
        ]

        signal = get_social_signal("Oppenheimer", 2023, "movie")

        mock_search.assert_called_once_with("Oppenheimer 2023 movie film")
        self.assertEqual(signal.comment_volume, 120)
        self.assertEqual(signal.analysis.analyzed_comments, 2)
        self.assertEqual(signal.sentiment, "Positive")
        self.assertEqual(signal.buzz, "Trending Positive")
        self.assertFalse(signal.degraded)

    @patch('social_signal.fetch_comments_for_top_posts')
    @patch('social_signal.search_discussions')
    def test_comments_not_fetched_when_disabled(self, mock_search, mock_fetch):
        mock_search.return_value = SearchResult(raw={}, posts=posts())

        signal = get_social_signal("Oppenheimer", fetch_comments=False)

        mock_fetch.assert_not_called()
        self.assertEqual(signal.buzz, "Low Buzz")
        self.assertEqual(signal.sentiment, "Unknown")

    @patch('social_signal.search_discussions')
    def test_search_failure_propagates(self, mock_search):
        mock_search.side_effect = UpstreamHttpError("Reddit API error: 500", status=500)

        with self.assertRaises(UpstreamHttpError):
            get_social_signal("Oppenheimer")


class TestGetSocialSignalOrDefault(unittest.TestCase):

    def setUp(self):
        self.content = ContentItem(id="movie-1", title="Oppenheimer", type="movie",
                                   genres=["Drama"], release_year=2023)

    @patch('social_signal.search_discussions')
    def test_timeout_degrades_to_neutral(self, mock_search):
        mock_search.side_effect = UpstreamTimeout("Forum request timed out after 8s")

        signal = get_social_signal_or_default(self.content)

        self.assertTrue(signal.degraded)
        self.assertEqual(signal.buzz, "Low Buzz")
        self.assertEqual(signal.sentiment, "Unknown")
        self.assertIn("timed out", signal.error)

    @patch('social_signal.get_social_signal')
    def test_passes_content_fields(self, mock_get):
        get_social_signal_or_default(self.content, fetch_comments=False, comments_limit=10)

        mock_get.assert_called_once_with(
            "Oppenheimer", 2023, "movie",
            fetch_comments=False, comments_limit=10, thresholds=None
        )


if __name__ == '__main__':
    unittest.main()
