"""
Unit tests for the RatingsCollector class.
"""

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, call, patch

import requests

from ratings_pipeline.common.exceptions import FetchError
from ratings_pipeline.testing import make_player
from ratings_pipeline.player_ratings.collector import RatingsCollector
from ratings_pipeline.player_ratings.config import API_DELAY_SECONDS


def _page(items):
    response = Mock()
    response.json.return_value = {'items': items, 'totalItems': 3}
    return response


class TestRatingsCollector(unittest.TestCase):
    """Test cases for RatingsCollector."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.cache_dir = Path(self.temp_dir.name) / 'iterations'
        self.collector = RatingsCollector(cache_dir=self.cache_dir, page_size=2)

    def tearDown(self):
        """Clean up test fixtures."""
        self.temp_dir.cleanup()

    @patch('ratings_pipeline.player_ratings.collector.requests.get')
    def test_cache_hit_skips_provider(self, mock_get):
        """A cached snapshot is replayed without any request."""
        self.cache_dir.mkdir(parents=True)
        players = [make_player(), make_player(id=1002, firstName='Josh', lastName='Allen')]
        (self.cache_dir / '12-week-12.json').write_text(json.dumps(players))

        result = self.collector.fetch_snapshot('12-week-12')

        self.assertEqual(result, players)
        mock_get.assert_not_called()
        self.assertEqual(self.collector.stats['cache_hits'], 1)

    @patch('ratings_pipeline.player_ratings.collector.time.sleep')
    @patch('ratings_pipeline.player_ratings.collector.requests.get')
    def test_pages_until_empty(self, mock_get, mock_sleep):
        """Pages are requested by offset until an empty page, then cached."""
        players = [make_player(id=i) for i in range(1, 4)]
        mock_get.side_effect = [_page(players[:2]), _page(players[2:]), _page([])]

        result = self.collector.fetch_snapshot('12-week-12')

        self.assertEqual(result, players)
        self.assertEqual(mock_get.call_count, 3)
        offsets = [c.kwargs['params']['offset'] for c in mock_get.call_args_list]
        self.assertEqual(offsets, [0, 2, 4])

        params = mock_get.call_args_list[0].kwargs['params']
        self.assertEqual(params['iteration'], '12-week-12')
        self.assertEqual(params['limit'], 2)
        self.assertEqual(params['locale'], 'en')

        mock_sleep.assert_has_calls([call(API_DELAY_SECONDS), call(API_DELAY_SECONDS)])
        self.assertEqual(mock_sleep.call_count, 2)

        cache_file = self.cache_dir / '12-week-12.json'
        self.assertTrue(cache_file.exists())
        self.assertEqual(json.loads(cache_file.read_text()), players)
        self.assertEqual(self.collector.stats['players_fetched'], 3)

    @patch('ratings_pipeline.player_ratings.collector.time.sleep')
    @patch('ratings_pipeline.player_ratings.collector.requests.get')
    def test_second_fetch_uses_cache(self, mock_get, mock_sleep):
        """After a successful fetch the provider is not called again."""
        mock_get.side_effect = [_page([make_player()]), _page([])]

        first = self.collector.fetch_snapshot('12-week-12')
        second = self.collector.fetch_snapshot('12-week-12')

        self.assertEqual(first, second)
        self.assertEqual(mock_get.call_count, 2)

    @patch('ratings_pipeline.player_ratings.collector.time.sleep')
    @patch('ratings_pipeline.player_ratings.collector.requests.get')
    def test_missing_items_is_fetch_error(self, mock_get, mock_sleep):
        """A response without 'items' aborts and writes no cache."""
        response = Mock()
        response.json.return_value = {'error': 'bad iteration'}
        mock_get.return_value = response

        with self.assertRaises(FetchError):
            self.collector.fetch_snapshot('12-week-12')

        self.assertFalse((self.cache_dir / '12-week-12.json').exists())

    @patch('ratings_pipeline.player_ratings.collector.time.sleep')
    @patch('ratings_pipeline.player_ratings.collector.requests.get')
    def test_transport_error_propagates(self, mock_get, mock_sleep):
        """Transport failures surface unchanged and are not retried."""
        mock_get.side_effect = [_page([make_player()]),
                                requests.exceptions.ConnectionError('reset')]

        with self.assertRaises(requests.exceptions.ConnectionError):
            self.collector.fetch_snapshot('12-week-12')

        self.assertEqual(mock_get.call_count, 2)
        self.assertFalse((self.cache_dir / '12-week-12.json').exists())

    def test_load_cached_snapshot_missing(self):
        """No cache file means None."""
        self.assertIsNone(self.collector.load_cached_snapshot('12-week-1'))


if __name__ == '__main__':
    unittest.main()
