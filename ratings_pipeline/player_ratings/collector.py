"""
Player Ratings Collector Module

Retrieves the full player ratings snapshot for one iteration. Snapshots are
cached as one JSON file per iteration name; a cached file is always replayed
instead of calling the provider again.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests

from ratings_pipeline.common.exceptions import FetchError
from ratings_pipeline.config.database_config import get_ratings_cache_dir
from ratings_pipeline.player_ratings.config import (
    API_DELAY_SECONDS,
    PAGE_SIZE,
    RATINGS_API_URL,
    RATINGS_LOCALE,
    REQUEST_HEADERS,
    REQUEST_TIMEOUT,
)

logger = logging.getLogger(__name__)


class RatingsCollector:
    """Collects player rating snapshots from the ratings API."""

    def __init__(self, cache_dir: Optional[Union[str, Path]] = None,
                 base_url: str = RATINGS_API_URL, page_size: int = PAGE_SIZE):
        """
        Initialize the collector.

        Args:
            cache_dir: Directory for snapshot files (defaults to the configured cache)
            base_url: Ratings API endpoint
            page_size: Players requested per page
        """
        self.cache_dir = Path(cache_dir) if cache_dir else get_ratings_cache_dir()
        self.base_url = base_url
        self.page_size = page_size

        self.stats = {
            'requests_made': 0,
            'pages_fetched': 0,
            'players_fetched': 0,
            'cache_hits': 0,
        }

    def get_cache_path(self, iteration_name: str) -> Path:
        """Path of the snapshot file for an iteration."""
        return self.cache_dir / f"{iteration_name}.json"

    def load_cached_snapshot(self, iteration_name: str) -> Optional[List[Dict[str, Any]]]:
        """Read a cached snapshot, or return None if none exists."""
        cache_path = self.get_cache_path(iteration_name)
        if not cache_path.exists():
            return None

        with open(cache_path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def fetch_snapshot(self, iteration_name: str) -> List[Dict[str, Any]]:
        """
        Get every player for an iteration, from cache when available.

        Args:
            iteration_name: Iteration such as '12-week-12'

        Returns:
            List of raw player records

        Raises:
            FetchError: If a provider page has no 'items' collection
        """
        cached = self.load_cached_snapshot(iteration_name)
        if cached is not None:
            self.stats['cache_hits'] += 1
            logger.info(f"Loading iteration {iteration_name} from cache")
            return cached

        logger.info(f"Fetching iteration {iteration_name} from ratings API")
        players: List[Dict[str, Any]] = []
        offset = 0

        while True:
            page = self._fetch_page(iteration_name, offset)
            if not page:
                break

            players.extend(page)
            offset += self.page_size

            # Rate limiting
            time.sleep(API_DELAY_SECONDS)

        self._write_cache(iteration_name, players)
        logger.info(f"Fetched {len(players)} players for iteration {iteration_name}")
        return players

    def _fetch_page(self, iteration_name: str, offset: int) -> List[Dict[str, Any]]:
        """Request one page of players starting at offset."""
        logger.debug(f"Fetching players {offset} to {offset + self.page_size}")
        self.stats['requests_made'] += 1

        response = requests.get(
            self.base_url,
            params={
                'locale': RATINGS_LOCALE,
                'limit': self.page_size,
                'offset': offset,
                'iteration': iteration_name,
            },
            headers=REQUEST_HEADERS,
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()

        data = response.json()
        if not isinstance(data, dict) or not isinstance(data.get('items'), list):
            raise FetchError(
                f"Invalid response format from ratings API at offset {offset}: missing 'items'"
            )

        items = data['items']
        if items:
            self.stats['pages_fetched'] += 1
            self.stats['players_fetched'] += len(items)
        return items

    def _write_cache(self, iteration_name: str, players: List[Dict[str, Any]]):
        """Persist a snapshot; the file only appears once fully written."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        cache_path = self.get_cache_path(iteration_name)
        tmp_path = cache_path.with_suffix('.json.tmp')

        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(players, f, indent=2)
        tmp_path.replace(cache_path)

        logger.info(f"Saved iteration {iteration_name} to {cache_path}")
