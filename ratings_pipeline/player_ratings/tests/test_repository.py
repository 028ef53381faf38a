"""
Unit tests for the RatingsRepository class.
"""

import sqlite3
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from ratings_pipeline.common.db_utils import transaction
from ratings_pipeline.common.iteration_manager import IterationManager
from ratings_pipeline.testing import build_test_database, make_player
from ratings_pipeline.player_ratings.normalizer import DimensionNormalizer
from ratings_pipeline.player_ratings.repository import RatingsRepository


class TestRatingsRepository(unittest.TestCase):
    """Test cases for RatingsRepository."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.pool = build_test_database(Path(self.temp_dir.name) / 'ratings.db')
        self.normalizer = DimensionNormalizer()
        self.repository = RatingsRepository()
        self.iterations = IterationManager()

        with self.pool.connection() as conn:
            with transaction(conn):
                self.iteration_id = self.iterations.create_iteration(conn, '12-week-12')

    def tearDown(self):
        """Clean up test fixtures."""
        self.pool.close()
        self.temp_dir.cleanup()

    def _commit(self, conn, raw_player, iteration_id=None):
        player = self.normalizer.normalize(raw_player, conn)
        self.repository.commit_player(conn, player, iteration_id or self.iteration_id)
        return player

    def _count(self, conn, table):
        return conn.execute(f'SELECT COUNT(*) FROM {table}').fetchone()[0]

    def test_commit_player_with_defaults(self):
        """Missing stats store 0 with the default trait and running style."""
        with self.pool.connection() as conn:
            self._commit(conn, make_player())

            rating = conn.execute('''
                SELECT r.overall, r.speed, r.throw_power, r.development_trait_id, s.style_name
                FROM player_rating r
                LEFT JOIN running_style s ON r.style_id = s.style_id
                WHERE r.player_id = 1001 AND r.iteration_id = ?
            ''', (self.iteration_id,)).fetchone()
            self.assertEqual(tuple(rating), (88, 0, 0, 1, 'None'))

            player = conn.execute(
                'SELECT first_name, last_name FROM player WHERE player_id = 1001'
            ).fetchone()
            self.assertEqual(tuple(player), ('Patrick', 'Mahomes'))

            archetype = conn.execute('''
                SELECT a.archetype FROM player_archetype pa
                JOIN archetype a ON pa.archetype_id = a.archetype_id
                WHERE pa.player_id = 1001 AND pa.iteration_id = ?
            ''', (self.iteration_id,)).fetchone()
            self.assertEqual(archetype[0], 'Field General - QB')

    def test_unknown_ability_is_skipped(self):
        """Known abilities are stored and unknown labels are dropped."""
        raw = make_player(playerAbilities=[{'label': 'Bazooka'}, {'label': 'Laser Eyes'}])

        with self.pool.connection() as conn:
            self._commit(conn, raw)

            abilities = [row[0] for row in conn.execute('''
                SELECT a.ability FROM player_ability pa
                JOIN ability a ON pa.ability_id = a.ability_id
                WHERE pa.player_id = 1001
            ''')]

        self.assertEqual(abilities, ['Bazooka'])
        self.assertEqual(self.repository.stats['abilities_inserted'], 1)
        self.assertEqual(self.repository.stats['abilities_skipped'], 1)

    def test_running_style(self):
        """A known running style is linked; an unknown one falls back to 'None'."""
        fast = make_player(stats={'runningStyle': {'value': 'Short Strider'}})
        odd = make_player(id=1002, stats={'runningStyle': {'value': 'Moonwalk'}})

        with self.pool.connection() as conn:
            self._commit(conn, fast)
            self._commit(conn, odd)

            styles = dict(conn.execute('''
                SELECT r.player_id, s.style_name FROM player_rating r
                JOIN running_style s ON r.style_id = s.style_id
            ''').fetchall())

        self.assertEqual(styles, {1001: 'Short Strider', 1002: 'None'})

    def test_player_upsert_last_write_wins(self):
        """The player row reflects the latest iteration while ratings accumulate."""
        with self.pool.connection() as conn:
            self._commit(conn, make_player())
            with transaction(conn):
                next_id = self.iterations.create_iteration(conn, '12-week-13')
            self._commit(conn, make_player(team={'label': 'Buffalo Bills'}, jerseyNum=15),
                         iteration_id=next_id)

            team = conn.execute('''
                SELECT t.team_label, j.number FROM player p
                JOIN team t ON p.team_id = t.team_id
                JOIN jersey_number j ON p.jersey_number_id = j.jersey_number_id
                WHERE p.player_id = 1001
            ''').fetchone()
            self.assertEqual(tuple(team), ('Buffalo Bills', 15))
            self.assertEqual(self._count(conn, 'player'), 1)
            self.assertEqual(self._count(conn, 'player_rating'), 2)

    def test_failed_write_leaves_nothing(self):
        """A failure part-way through a player undoes every row for that player."""
        raw = make_player(playerAbilities=[{'label': 'Bazooka'}])

        with self.pool.connection() as conn:
            player = self.normalizer.normalize(raw, conn)
            with patch.object(self.repository, '_insert_archetype',
                              side_effect=sqlite3.IntegrityError('constraint failed')):
                with self.assertRaises(sqlite3.IntegrityError):
                    self.repository.commit_player(conn, player, self.iteration_id)

            self.assertEqual(self._count(conn, 'player'), 0)
            self.assertEqual(self._count(conn, 'player_rating'), 0)
            self.assertEqual(self._count(conn, 'player_ability'), 0)
            self.assertEqual(self.repository.stats['players_committed'], 0)

    def test_duplicate_rating_is_rejected(self):
        """A second rating for the same player and iteration is an integrity error."""
        with self.pool.connection() as conn:
            self._commit(conn, make_player())
            with self.assertRaises(sqlite3.IntegrityError):
                self._commit(conn, make_player())

            self.assertEqual(self._count(conn, 'player_rating'), 1)

    def test_nested_commit_uses_savepoint(self):
        """Inside an open transaction a failed player does not discard earlier players."""
        with self.pool.connection() as conn:
            with transaction(conn):
                self._commit(conn, make_player())
                broken = self.normalizer.normalize(make_player(id=1002), conn)
                with patch.object(self.repository, '_insert_archetype',
                                  side_effect=sqlite3.IntegrityError('constraint failed')):
                    with self.assertRaises(sqlite3.IntegrityError):
                        self.repository.commit_player(conn, broken, self.iteration_id)

            players = [row[0] for row in conn.execute('SELECT player_id FROM player')]
            self.assertEqual(players, [1001])


if __name__ == '__main__':
    unittest.main()
