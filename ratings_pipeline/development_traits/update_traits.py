#!/usr/bin/env python
"""
Update Development Traits - Cross-Source Reconciliation

Patches the most recently cached ratings iteration with data the ratings API
does not publish:

    - development trait, written onto the existing rating rows
    - canonical draft pick, written once per player

Players are paired with the secondary dataset by exact match only.

Usage:
    # Run both passes against production
    python -m ratings_pipeline.development_traits.update_traits

    # Only the draft pass, test environment
    python -m ratings_pipeline.development_traits.update_traits --pass draft --environment test
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ratings_pipeline.common.db_utils import ConnectionPool, apply_schema, transaction
from ratings_pipeline.common.exceptions import IterationNotFoundError
from ratings_pipeline.common.iteration_manager import (
    IterationManager,
    get_latest_cached_iteration,
    parse_iteration_id,
)
from ratings_pipeline.common.job_manager import JobManager, JobStatus
from ratings_pipeline.config.database_config import (
    get_database_path,
    get_environment,
    get_pool_settings,
)
from ratings_pipeline.development_traits.collector import TraitsCollector
from ratings_pipeline.development_traits.config import (
    ALL_PASSES,
    DEVELOPMENT_TRAIT_MAP,
    JOB_TYPE,
    LAST_PICK,
    LOG_FORMAT,
    PASS_DRAFT,
    PASS_TRAITS,
)
from ratings_pipeline.development_traits.matcher import (
    CrossSourceMatch,
    canonical_draft_pick,
    pair_players,
)
from ratings_pipeline.player_ratings.collector import RatingsCollector
from ratings_pipeline.player_ratings.config import SCHEMA_PATH

# Configure logging
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def _player_label(player: Dict[str, Any]) -> str:
    position = player.get('position')
    if isinstance(position, dict):
        position = position.get('id')
    return f"{player.get('firstName')} {player.get('lastName')} ({position})"


class DevelopmentTraitUpdater:
    """Reconciles the latest ingested iteration against the secondary dataset."""

    def __init__(self, environment: Optional[str] = None,
                 db_path: Optional[Union[str, Path]] = None,
                 ratings_cache_dir: Optional[Union[str, Path]] = None,
                 secondary_cache_dir: Optional[Union[str, Path]] = None,
                 pool: Optional[ConnectionPool] = None):
        self.environment = get_environment(environment)
        self.db_path = Path(db_path) if db_path else get_database_path(self.environment)

        self._owns_pool = pool is None
        if pool is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            pool = ConnectionPool(self.db_path, **get_pool_settings())
        self.pool = pool

        self.iteration_manager = IterationManager()
        self.ratings_collector = RatingsCollector(cache_dir=ratings_cache_dir)
        self.traits_collector = TraitsCollector(cache_dir=secondary_cache_dir)
        self.job_manager = JobManager(self.pool, self.environment)

        self.job_id = None
        self.stats = {
            'primary_players': 0,
            'matched': 0,
            'unmatched': 0,
            'traits_updated': 0,
            'traits_skipped': 0,
            'draft_actual': 0,
            'draft_default': 0,
            'draft_discarded': 0,
            'draft_inserted': 0,
            'draft_existing': 0,
        }

        with self.pool.connection() as conn:
            apply_schema(conn, SCHEMA_PATH)

    def close(self):
        if self._owns_pool:
            self.pool.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def run(self, passes: Iterable[str] = ALL_PASSES) -> Dict[str, Any]:
        """
        Run the reconciliation passes.

        Each pass commits or rolls back on its own.

        Args:
            passes: Any of 'traits' and 'draft'

        Returns:
            Summary dict with counters

        Raises:
            FileNotFoundError: If no ratings snapshot has been cached
            IterationNotFoundError: If the cached iteration was never ingested
        """
        passes = tuple(passes)
        iteration_name = get_latest_cached_iteration(self.ratings_collector.cache_dir)
        _, week_number = parse_iteration_id(iteration_name)

        with self.pool.connection() as conn:
            iteration_id = self.iteration_manager.get_iteration_id(conn, iteration_name)
        if iteration_id is None:
            raise IterationNotFoundError(f"Iteration {iteration_name} has not been ingested")

        primary = self.ratings_collector.load_cached_snapshot(iteration_name) or []
        secondary = self.traits_collector.fetch_players(week_number)
        logger.info(f"Reconciling iteration {iteration_name} (week {week_number}): "
                    f"{len(primary)} ratings players, {len(secondary)} secondary players")

        matches = pair_players(primary, secondary)
        self.stats['primary_players'] = len(matches)
        self.stats['matched'] = sum(1 for match in matches if match.secondary is not None)
        self.stats['unmatched'] = len(matches) - self.stats['matched']

        self.job_id = self.job_manager.start_job(
            JOB_TYPE, iteration_name, metadata={'passes': list(passes), 'week': week_number}
        )
        try:
            if PASS_TRAITS in passes:
                self.update_development_traits(iteration_id, matches)
            if PASS_DRAFT in passes:
                self.update_draft_positions(matches)
        except Exception as e:
            self.job_manager.update_job(self.job_id, JobStatus.FAILED,
                                        records_processed=len(matches), error_message=str(e))
            raise

        self.job_manager.update_job(
            self.job_id, JobStatus.COMPLETED,
            records_processed=len(matches),
            records_inserted=self.stats['traits_updated'] + self.stats['draft_inserted']
        )

        summary = dict(self.stats)
        summary.update({'status': 'completed', 'iteration': iteration_name,
                        'iteration_id': iteration_id})
        return summary

    def update_development_traits(self, iteration_id: int, matches: List[CrossSourceMatch]):
        """Write development traits for matched players onto their rating rows."""
        updates: List[Tuple[int, Any]] = []
        for match in matches:
            if match.secondary is None:
                logger.debug(f"No secondary match for {_player_label(match.primary)}")
                continue

            code = match.secondary.get('trait_development')
            trait_id = DEVELOPMENT_TRAIT_MAP.get(code)
            if trait_id is None:
                logger.warning(f"Unknown development trait value: {code} "
                               f"for player {_player_label(match.primary)}")
                self.stats['traits_skipped'] += 1
                continue
            updates.append((trait_id, match.primary.get('id')))

        updated = 0
        with self.pool.connection() as conn, transaction(conn):
            for trait_id, player_id in updates:
                cursor = conn.execute('''
                    UPDATE player_rating
                    SET development_trait_id = ?
                    WHERE player_id = ? AND iteration_id = ?
                ''', (trait_id, player_id, iteration_id))
                updated += cursor.rowcount

        self.stats['traits_updated'] = updated
        logger.info(f"Updated {updated} development traits "
                    f"({self.stats['unmatched']} unmatched, {self.stats['traits_skipped']} skipped)")

    def update_draft_positions(self, matches: List[CrossSourceMatch]):
        """Record each player's canonical draft pick unless one is already stored."""
        planned: List[Tuple[Any, int]] = []
        for match in matches:
            positions = match.secondary.get('draft_positions') if match.secondary else None
            if not positions:
                planned.append((match.primary.get('id'), LAST_PICK))
                self.stats['draft_default'] += 1
                continue

            pick = canonical_draft_pick(positions)
            if pick is None:
                logger.warning(f"Discarding out-of-range draft positions {positions} "
                               f"for player {_player_label(match.primary)}")
                self.stats['draft_discarded'] += 1
                continue
            planned.append((match.primary.get('id'), pick))
            self.stats['draft_actual'] += 1

        with self.pool.connection() as conn, transaction(conn):
            for player_id, overall_pick in planned:
                existing = conn.execute(
                    'SELECT draft_id FROM draft_data WHERE player_id = ?', (player_id,)
                ).fetchone()
                if existing:
                    self.stats['draft_existing'] += 1
                    continue

                pick_row = conn.execute(
                    'SELECT pick_id FROM draft_pick WHERE overall_pick = ?', (overall_pick,)
                ).fetchone()
                if pick_row is None:
                    logger.warning(f"No draft_pick row for overall pick {overall_pick}")
                    continue

                conn.execute('INSERT INTO draft_data (player_id, pick_id) VALUES (?, ?)',
                             (player_id, pick_row[0]))
                self.stats['draft_inserted'] += 1

        logger.info(f"Processed {len(planned)} draft positions "
                    f"({self.stats['draft_actual']} actual, {self.stats['draft_default']} default); "
                    f"{self.stats['draft_inserted']} inserted, {self.stats['draft_existing']} already set")


def main():
    """Main entry point for reconciliation."""
    parser = argparse.ArgumentParser(
        description='Reconcile development traits and draft positions',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--pass', dest='pass_name', choices=['all', PASS_TRAITS, PASS_DRAFT],
                        default='all', help='Which reconciliation pass to run (default: all)')
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

    passes = ALL_PASSES if args.pass_name == 'all' else (args.pass_name,)

    with DevelopmentTraitUpdater(environment=args.environment) as updater:
        try:
            summary = updater.run(passes)
        except Exception as e:
            logger.error(f"Development trait update failed: {e}")
            raise

    logger.info(f"Reconciliation complete for {summary['iteration']}: "
                f"{summary['matched']} matched, {summary['unmatched']} unmatched")


if __name__ == '__main__':
    main()
