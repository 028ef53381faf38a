"""
Iteration Manager - version handling for weekly ratings snapshots.

A rating iteration is named ``<season>-week-<week>`` (e.g. ``12-week-12``).
This module discovers the iteration currently published by the ratings site,
parses iteration names, and reads and creates ``rating_iteration`` rows.
"""

import logging
import re
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import requests

from ratings_pipeline.common.exceptions import InvalidFormatError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds

ITERATION_PATTERN = re.compile(r'(\d+)-week-(\d+)')
PAGE_ITERATION_PATTERN = re.compile(r'iteration=([^"&]+)')
CACHE_FILE_PATTERN = re.compile(r'^(\d+)-week-(\d+)\.json$')


def parse_iteration_id(iteration_name: str) -> Tuple[int, int]:
    """Split an iteration name into its season year and week number.

    Args:
        iteration_name: Name such as '12-week-11'

    Returns:
        Tuple of (season_year, week_number)

    Raises:
        InvalidFormatError: If the name is not <int>-week-<int>
    """
    match = ITERATION_PATTERN.fullmatch(iteration_name or '')
    if not match:
        raise InvalidFormatError(f"Invalid iteration ID format: {iteration_name}")
    return int(match.group(1)), int(match.group(2))


class IterationManager:
    """Resolves, reads and records rating iterations."""

    def __init__(self, page_url: Optional[str] = None,
                 fallback_iteration: Optional[str] = None,
                 headers: Optional[Dict[str, str]] = None,
                 timeout: float = REQUEST_TIMEOUT):
        """
        Initialize the manager.

        Args:
            page_url: Public page that links to the current iteration
            fallback_iteration: Iteration used when the page cannot be read
            headers: Request headers for the page scrape
            timeout: Request timeout in seconds

        Only get_current_iteration needs the page settings; the
        persistence methods work without them.
        """
        self.page_url = page_url
        self.fallback_iteration = fallback_iteration
        self.headers = headers or {}
        self.timeout = timeout

    def get_current_iteration(self) -> str:
        """Get the iteration currently published on the ratings page.

        Scraping is best effort. Any failure falls back to the configured
        default so that ingestion can still proceed.

        Returns:
            Iteration name

        Raises:
            ValueError: If no page_url was configured
        """
        if not self.page_url:
            raise ValueError("page_url is required to discover the current iteration")

        try:
            response = requests.get(
                self.page_url,
                headers=self.headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error getting current iteration, using {self.fallback_iteration}: {e}")
            return self.fallback_iteration

        match = PAGE_ITERATION_PATTERN.search(response.text)
        if match:
            logger.info(f"Current iteration from ratings page: {match.group(1)}")
            return match.group(1)

        logger.warning(f"No iteration found on ratings page, using {self.fallback_iteration}")
        return self.fallback_iteration

    def get_latest_persisted_iteration(self, conn: sqlite3.Connection) -> Optional[str]:
        """Get the name of the most recently created iteration, if any."""
        row = conn.execute('''
            SELECT iteration_name
            FROM rating_iteration
            ORDER BY iteration_date DESC, iteration_id DESC
            LIMIT 1
        ''').fetchone()
        return row[0] if row else None

    def get_iteration_id(self, conn: sqlite3.Connection, iteration_name: str) -> Optional[int]:
        """Look up the id of an iteration by name."""
        row = conn.execute(
            'SELECT iteration_id FROM rating_iteration WHERE iteration_name = ?',
            (iteration_name,)
        ).fetchone()
        return row[0] if row else None

    def create_iteration(self, conn: sqlite3.Connection, iteration_name: str) -> int:
        """Insert a new iteration row.

        Args:
            conn: Connection with an open transaction
            iteration_name: Name to record

        Returns:
            The new iteration_id

        Raises:
            InvalidFormatError: If the name cannot be parsed
        """
        season_year, week_number = parse_iteration_id(iteration_name)
        cursor = conn.execute('''
            INSERT INTO rating_iteration (
                iteration_name, iteration_date, season_year, week_number, is_regular_season
            )
            VALUES (?, CURRENT_TIMESTAMP, ?, ?, 1)
        ''', (iteration_name, season_year, week_number))

        logger.info(f"Created iteration {iteration_name} (season {season_year}, week {week_number})")
        return cursor.lastrowid


def list_cached_iterations(cache_dir: Union[str, Path]) -> List[str]:
    """List cached snapshot iteration names, newest first.

    Ordering is by season, then week, both descending.
    """
    cache_dir = Path(cache_dir)
    if not cache_dir.is_dir():
        return []

    found = []
    for path in cache_dir.iterdir():
        match = CACHE_FILE_PATTERN.match(path.name)
        if match:
            found.append((int(match.group(1)), int(match.group(2)), path.stem))

    found.sort(reverse=True)
    return [name for _, _, name in found]


def get_latest_cached_iteration(cache_dir: Union[str, Path]) -> str:
    """Get the newest iteration with a cached snapshot.

    Raises:
        FileNotFoundError: If no snapshot has been cached yet
    """
    cached = list_cached_iterations(cache_dir)
    if not cached:
        raise FileNotFoundError(f"No cached ratings snapshots found in {cache_dir}")
    return cached[0]
