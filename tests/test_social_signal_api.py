"""
Unit tests for the social signal HTTP API.
"""

import unittest
from unittest.mock import patch, MagicMock
import sys
import os

from fastapi.testclient import TestClient

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from social_signal_api import app, parse_comments_limit
from forum_client import UpstreamTimeout
from utils import COMMENT_FETCH_DELAY


def make_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def search_payload(count):
    return {
        "kind": "Listing",
        "data": {
            "after": None,
            "children": [
                {"kind": "t3", "data": {
                    "id": f"p{i}", "title": f"Post {i}",
                    "permalink": f"/r/movies/comments/p{i}/x/",
                    "subreddit": "movies", "ups": 1, "num_comments": 2
                }}
                for i in range(count)
            ]
        }
    }


def comments_payload(post_id):
    return [
        {"kind": "Listing", "data": {"children": [{"kind": "t3", "data": {"id": post_id, "title": "t"}}]}},
        {"kind": "Listing", "data": {"children": [{"kind": "t1", "data": {"body": "Great movie", "replies": ""}}]}}
    ]


class TestSocialSignalProxy(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)

    def test_missing_title(self):
        response = self.client.get("/recommendations/social-signal")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Missing query parameter"})

    @patch('forum_client.requests.get')
    def test_search_only_returns_payload_unmodified(self, mock_get):
        payload = search_payload(3)
        mock_get.return_value = make_response(200, payload)

        response = self.client.get("/recommendations/social-signal",
                                   params={"title": "Oppenheimer", "fetchComments": "false"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), payload)
        self.assertNotIn("commentsData", response.json())
        mock_get.assert_called_once()
        self.assertEqual(mock_get.call_args.kwargs["params"]["q"], "Oppenheimer")

    @patch('forum_client.time.sleep')
    @patch('forum_client.requests.get')
    def test_comments_for_first_three_posts(self, mock_get, mock_sleep):
        def respond(url, params=None, headers=None, timeout=None):
            if url.endswith("/search.json"):
                return make_response(200, search_payload(5))
            if "/p1/" in url:
                return make_response(404, None)
            post_id = url.split("/comments/")[1].split("/")[0]
            return make_response(200, comments_payload(post_id))
        mock_get.side_effect = respond

        response = self.client.get("/recommendations/social-signal",
                                   params={"title": "Oppenheimer", "fetchComments": "true", "commentsLimit": "20"})

        body = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(mock_get.call_count, 4)
        self.assertEqual(mock_sleep.call_count, 2)
        mock_sleep.assert_called_with(COMMENT_FETCH_DELAY)
        self.assertEqual(len(body["commentsData"]), 2)
        self.assertEqual([c["postId"] for c in body["commentsData"]], ["p0", "p2"])
        self.assertEqual(body["commentsData"][0]["postUrl"], "/r/movies/comments/p0/x/")
        self.assertEqual(body["data"], search_payload(5)["data"])
        self.assertEqual(mock_get.call_args_list[1].kwargs["params"], {"limit": 20})

    @patch('forum_client.time.sleep')
    @patch('forum_client.requests.get')
    def test_no_posts_means_no_comments_data(self, mock_get, mock_sleep):
        mock_get.return_value = make_response(200, search_payload(0))

        response = self.client.get("/recommendations/social-signal",
                                   params={"title": "Obscure", "fetchComments": "true"})

        self.assertNotIn("commentsData", response.json())
        mock_sleep.assert_not_called()

    @patch('forum_client.requests.get')
    def test_upstream_failure_is_500(self, mock_get):
        mock_get.return_value = make_response(429, {})

        response = self.client.get("/recommendations/social-signal", params={"title": "Dune"})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Reddit API error: 429"})

    def test_comments_limit_parsing(self):
        self.assertEqual(parse_comments_limit("20"), 20)
        self.assertEqual(parse_comments_limit("abc"), 50)
        self.assertEqual(parse_comments_limit(None), 50)
        self.assertEqual(parse_comments_limit("0"), 50)


class TestBuzzEndpoint(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)

    def test_missing_title(self):
        self.assertEqual(self.client.get("/recommendations/buzz").status_code, 400)

    @patch('social_signal_api.get_social_signal')
    def test_timeout_is_500(self, mock_signal):
        mock_signal.side_effect = UpstreamTimeout("Forum request timed out after 8s")

        response = self.client.get("/recommendations/buzz", params={"title": "Dune"})

        self.assertEqual(response.status_code, 500)
        self.assertIn("timed out", response.json()["error"])

    @patch('forum_client.time.sleep')
    @patch('forum_client.requests.get')
    def test_signal_json(self, mock_get, mock_sleep):
        mock_get.return_value = make_response(200, search_payload(0))

        response = self.client.get("/recommendations/buzz",
                                   params={"title": "Dune", "year": 2021, "type": "movie"})

        body = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["buzz"], "Low Buzz")
        self.assertFalse(body["degraded"])
        self.assertEqual(mock_get.call_args.kwargs["params"]["q"], "Dune 2021 movie film")


if __name__ == '__main__':
    unittest.main()
