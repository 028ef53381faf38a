"""
Secondary dataset collector.

Retrieves the weekly player list used for reconciliation. Files are cached per
week and a cached file is always used as-is.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests

from ratings_pipeline.common.exceptions import FetchError
from ratings_pipeline.config.database_config import get_secondary_cache_dir
from ratings_pipeline.development_traits.config import (
    REQUEST_HEADERS,
    REQUEST_TIMEOUT,
    SECONDARY_BASE_URL,
    get_cache_filename,
)

logger = logging.getLogger(__name__)


class TraitsCollector:
    """Cache-or-fetch access to the secondary player dataset."""

    def __init__(self, cache_dir: Optional[Union[str, Path]] = None,
                 base_url: str = SECONDARY_BASE_URL):
        self.cache_dir = Path(cache_dir) if cache_dir else get_secondary_cache_dir()
        self.base_url = base_url

    def get_cache_path(self, week_number: int) -> Path:
        return self.cache_dir / get_cache_filename(week_number)

    def fetch_players(self, week_number: int) -> List[Dict[str, Any]]:
        """
        Get the secondary player list for a week.

        Args:
            week_number: Week taken from the latest ratings iteration

        Returns:
            List of secondary player records

        Raises:
            FetchError: If the provider does not return a list
        """
        cache_path = self.get_cache_path(week_number)
        if cache_path.exists():
            logger.info(f"Loading secondary week {week_number} from cache")
            with open(cache_path, 'r', encoding='utf-8') as f:
                return json.load(f)

        url = f"{self.base_url}/{week_number}/players.json"
        logger.info(f"Fetching secondary week {week_number} from {url}")

        response = requests.get(url, headers=REQUEST_HEADERS, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()

        players = response.json()
        if not isinstance(players, list):
            raise FetchError(f"Invalid response format from {url}: expected a list of players")

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = cache_path.with_suffix('.json.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(players, f, indent=2)
        tmp_path.replace(cache_path)

        logger.info(f"Saved secondary week {week_number} to {cache_path}")
        return players
