#!/usr/bin/env python
"""
Update Ratings - Weekly Ratings Sync

Ingests the ratings snapshot for the iteration currently published by the
ratings site. Each iteration is ingested at most once; running the script
again for the same iteration is a no-op.

Usage:
    # Sync the current iteration into production
    python -m ratings_pipeline.player_ratings.update_ratings

    # Test environment
    python -m ratings_pipeline.player_ratings.update_ratings --environment test

Features:
    - Cache-first snapshot retrieval
    - Iteration-level idempotence
    - Whole-iteration rollback on any player failure
    - Job logging for audit trail
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ratings_pipeline.common.db_utils import ConnectionPool, apply_schema, transaction
from ratings_pipeline.common.iteration_manager import IterationManager
from ratings_pipeline.common.job_manager import JobManager, JobStatus
from ratings_pipeline.config.database_config import (
    get_database_path,
    get_environment,
    get_lookup_workers,
    get_pool_settings,
)
from ratings_pipeline.player_ratings.collector import RatingsCollector
from ratings_pipeline.player_ratings.config import (
    DEFAULT_ITERATION,
    JOB_TYPE,
    LOG_FORMAT,
    RATINGS_PAGE_URL,
    REQUEST_TIMEOUT,
    SCHEMA_PATH,
    USER_AGENT,
)
from ratings_pipeline.player_ratings.normalizer import DimensionNormalizer
from ratings_pipeline.player_ratings.repository import RatingsRepository

# Configure logging
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 250


class RatingsUpdater:
    """Runs one ratings sync: resolve, fetch, normalize and commit."""

    def __init__(self, environment: Optional[str] = None,
                 db_path: Optional[Union[str, Path]] = None,
                 cache_dir: Optional[Union[str, Path]] = None,
                 pool: Optional[ConnectionPool] = None):
        """
        Initialize the updater.

        Args:
            environment: 'production' or 'test' (defaults to DATA_ENV)
            db_path: Database file override
            cache_dir: Snapshot cache override
            pool: Existing pool to use; the updater closes only pools it creates
        """
        self.environment = get_environment(environment)
        self.db_path = Path(db_path) if db_path else get_database_path(self.environment)

        self._owns_pool = pool is None
        if pool is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            pool = ConnectionPool(self.db_path, **get_pool_settings())
        self.pool = pool

        lookup_workers = get_lookup_workers() if self.pool.max_size > 1 else 1
        self.iteration_manager = IterationManager(
            RATINGS_PAGE_URL, DEFAULT_ITERATION,
            headers={'user-agent': USER_AGENT}, timeout=REQUEST_TIMEOUT
        )
        self.collector = RatingsCollector(cache_dir=cache_dir)
        self.normalizer = DimensionNormalizer(pool=self.pool, max_workers=lookup_workers)
        self.repository = RatingsRepository()
        self.job_manager = JobManager(self.pool, self.environment)

        self.job_id = None
        self.stats = {
            'players_fetched': 0,
            'players_committed': 0,
        }

        self._ensure_database()
        logger.info(f"RatingsUpdater initialized for {self.environment} environment")

    def _ensure_database(self):
        """Create any missing tables."""
        with self.pool.connection() as conn:
            apply_schema(conn, SCHEMA_PATH)

    def close(self):
        if self._owns_pool:
            self.pool.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def run(self) -> Dict[str, Any]:
        """
        Sync the current iteration.

        Returns:
            Summary dict with 'status' of 'completed', 'no_data', 'up_to_date'
            or 'already_ingested'
        """
        iteration_name = self.iteration_manager.get_current_iteration()
        players = self.collector.fetch_snapshot(iteration_name)
        self.stats['players_fetched'] = len(players)

        if not players:
            logger.info(f"No data received for iteration {iteration_name}")
            return self._summary('no_data', iteration_name, 'No data received')

        with self.pool.connection() as conn:
            latest = self.iteration_manager.get_latest_persisted_iteration(conn)
            existing_id = self.iteration_manager.get_iteration_id(conn, iteration_name)

        if latest == iteration_name:
            logger.info(f"Ratings are already up to date ({iteration_name})")
            return self._summary('up_to_date', iteration_name, 'Ratings are already up to date')

        if existing_id is not None:
            logger.info(f"Iteration {iteration_name} was already ingested (latest is {latest})")
            return self._summary('already_ingested', iteration_name,
                                 f"Iteration {iteration_name} was already ingested")

        self._check_snapshot_iteration(players, iteration_name)
        self.job_id = self.job_manager.start_job(
            JOB_TYPE, iteration_name, metadata={'players': len(players)}
        )

        try:
            with self.pool.connection() as conn:
                iteration_id = self._ingest(conn, iteration_name, players)
        except Exception as e:
            self.job_manager.update_job(
                self.job_id, JobStatus.FAILED,
                records_processed=len(players), records_inserted=0,
                error_message=str(e)
            )
            raise

        self.job_manager.update_job(
            self.job_id, JobStatus.COMPLETED,
            records_processed=len(players),
            records_inserted=self.stats['players_committed']
        )

        summary = self._summary('completed', iteration_name,
                                f"Committed {self.stats['players_committed']} players")
        summary['iteration_id'] = iteration_id
        return summary

    def _ingest(self, conn, iteration_name: str, players: List[Dict[str, Any]]) -> int:
        """Record the iteration and every player in a single transaction."""
        committed = 0
        with transaction(conn):
            iteration_id = self.iteration_manager.create_iteration(conn, iteration_name)

            for index, raw_player in enumerate(players, 1):
                try:
                    normalized = self.normalizer.normalize(raw_player, conn)
                    self.repository.commit_player(conn, normalized, iteration_id)
                except Exception as e:
                    logger.error(
                        f"Failed to process player {raw_player.get('firstName')} "
                        f"{raw_player.get('lastName')} ({raw_player.get('id')}): {e}"
                    )
                    raise

                committed += 1
                if index % PROGRESS_INTERVAL == 0:
                    logger.info(f"Processed {index}/{len(players)} players")

        self.stats['players_committed'] = committed
        logger.info(f"Iteration {iteration_name} committed with {committed} players")
        return iteration_id

    def _check_snapshot_iteration(self, players: List[Dict[str, Any]], iteration_name: str):
        """Warn when the snapshot describes itself as a different iteration."""
        embedded = players[0].get('iteration')
        if isinstance(embedded, dict):
            embedded = embedded.get('id')
        if embedded and embedded != iteration_name:
            logger.warning(f"Snapshot reports iteration {embedded}, ingesting as {iteration_name}")

    def _summary(self, status: str, iteration_name: str, message: str) -> Dict[str, Any]:
        return {
            'status': status,
            'iteration': iteration_name,
            'message': message,
            'players_fetched': self.stats['players_fetched'],
            'players_committed': self.stats['players_committed'],
        }


def main():
    """Main entry point for the ratings sync."""
    parser = argparse.ArgumentParser(
        description='Sync the current ratings iteration into the database',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--environment', choices=['production', 'test'], default=None,
                        help='Database environment (default: DATA_ENV or production)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Suppress non-error output')

    args = parser.parse_args()

    if args.quiet:
        logging.getLogger().setLevel(logging.WARNING)
    elif args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    with RatingsUpdater(environment=args.environment) as updater:
        try:
            summary = updater.run()
        except Exception as e:
            logger.error(f"Ratings update failed: {e}")
            raise

    logger.info(summary['message'])


if __name__ == '__main__':
    main()
