"""
Ratings Repository

Writes one normalized player for one iteration: the player row, the rating
row, ability assignments and the archetype assignment. The writes for a
player are all-or-nothing.
"""

import logging
import sqlite3
from typing import Optional

from ratings_pipeline.common.db_utils import transaction
from ratings_pipeline.player_ratings.config import (
    DEFAULT_DEVELOPMENT_TRAIT_ID,
    DEFAULT_RUNNING_STYLE,
    RATING_COLUMNS,
)
from ratings_pipeline.player_ratings.normalizer import NormalizedPlayer

logger = logging.getLogger(__name__)

PLAYER_DIMENSION_COLUMNS = (
    'height_id', 'weight_id', 'age_id', 'college_id', 'handedness_id',
    'jersey_number_id', 'years_pro_id', 'position_id', 'team_id',
)


class RatingsRepository:
    """Persists normalized players and their per-iteration ratings."""

    def __init__(self):
        self.stats = {
            'players_committed': 0,
            'abilities_inserted': 0,
            'abilities_skipped': 0,
        }

    def commit_player(self, conn: sqlite3.Connection, player: NormalizedPlayer,
                      iteration_id: int):
        """
        Write a player and its ratings for an iteration.

        Runs inside transaction(): a transaction of its own when called
        standalone, or a savepoint when the caller already holds one.

        Args:
            conn: Connection to write on
            player: Normalized player
            iteration_id: Target iteration
        """
        with transaction(conn):
            style_id = self._resolve_style_id(conn, player.running_style)
            self._upsert_player(conn, player)
            self._insert_rating(conn, player, iteration_id, style_id)
            self._insert_abilities(conn, player, iteration_id)
            self._insert_archetype(conn, player, iteration_id)

        self.stats['players_committed'] += 1
        logger.debug(f"Committed {player.full_name} ({player.player_id}) for iteration {iteration_id}")

    def _resolve_style_id(self, conn, running_style: Optional[str]) -> Optional[int]:
        """Running style id, falling back to the 'None' style."""
        for style_name in (running_style, DEFAULT_RUNNING_STYLE):
            if not style_name:
                continue
            row = conn.execute(
                'SELECT style_id FROM running_style WHERE style_name = ?', (style_name,)
            ).fetchone()
            if row:
                return row[0]

        logger.warning(f"Running style not found: {running_style}")
        return None

    def _upsert_player(self, conn, player: NormalizedPlayer):
        columns = ('player_id', 'first_name', 'last_name') + PLAYER_DIMENSION_COLUMNS
        updates = ', '.join(f"{column} = excluded.{column}" for column in columns[1:])
        conn.execute(f'''
            INSERT INTO player ({', '.join(columns)})
            VALUES ({', '.join('?' for _ in columns)})
            ON CONFLICT(player_id) DO UPDATE SET
                {updates},
                updated_at = CURRENT_TIMESTAMP
        ''', tuple(getattr(player, column) for column in columns))

    def _insert_rating(self, conn, player: NormalizedPlayer, iteration_id: int,
                       style_id: Optional[int]):
        stat_columns = list(RATING_COLUMNS.values())
        columns = ['player_id', 'iteration_id', 'development_trait_id', 'style_id'] + stat_columns
        values = [player.player_id, iteration_id, DEFAULT_DEVELOPMENT_TRAIT_ID, style_id]
        values.extend(player.ratings.get(column, 0) for column in stat_columns)

        conn.execute(f'''
            INSERT INTO player_rating ({', '.join(columns)})
            VALUES ({', '.join('?' for _ in columns)})
        ''', values)

    def _insert_abilities(self, conn, player: NormalizedPlayer, iteration_id: int):
        for ability in player.abilities:
            cursor = conn.execute('''
                INSERT OR IGNORE INTO player_ability (player_id, ability_id, iteration_id)
                SELECT ?, ability_id, ? FROM ability WHERE ability = ?
            ''', (player.player_id, iteration_id, ability))

            if cursor.rowcount:
                self.stats['abilities_inserted'] += 1
            else:
                self.stats['abilities_skipped'] += 1
                logger.debug(f"Ability not found, skipping: {ability} ({player.full_name})")

    def _insert_archetype(self, conn, player: NormalizedPlayer, iteration_id: int):
        conn.execute('''
            INSERT INTO player_archetype (player_id, archetype_id, iteration_id)
            VALUES (?, ?, ?)
        ''', (player.player_id, player.archetype_id, iteration_id))
