"""
Helpers for building throwaway ratings databases in tests.

Creates the schema and a small set of static lookup rows (handedness,
positions, teams, colleges, archetypes, abilities, running styles,
development traits and the full draft board).
"""

import copy
from pathlib import Path
from typing import Any, Dict, Union

from ratings_pipeline.common.db_utils import ConnectionPool, apply_schema, transaction
from ratings_pipeline.development_traits.config import DRAFT_ROUNDS, PICKS_PER_ROUND
from ratings_pipeline.player_ratings.config import SCHEMA_PATH

HANDEDNESS = ['Left', 'Right']
POSITIONS = [('QB', 'Quarterback'), ('HB', 'Halfback'), ('WR', 'Wide Receiver'), ('MLB', 'Middle Linebacker')]
TEAMS = ['Kansas City Chiefs', 'Buffalo Bills', 'New York Giants', 'Green Bay Packers']
COLLEGES = ['Texas A&M', 'Michigan', 'Albany State', 'Mississippi', 'No College', 'Alabama']
ARCHETYPES = ['None', 'Field General - QB', 'Scrambler - QB', 'Elusive Back - HB']
ABILITIES = ['Bazooka', 'Set Feet Lead', 'Red Zone Deadeye']
RUNNING_STYLES = ['None', 'Default Long', 'Short Strider']
DEVELOPMENT_TRAITS = [(1, 'Normal'), (2, 'Star'), (3, 'Superstar'), (4, 'X-Factor')]


def seed_static_dimensions(conn):
    """Insert the fixture lookup rows."""
    with transaction(conn):
        conn.executemany('INSERT OR IGNORE INTO handedness (handedness) VALUES (?)',
                         [(label,) for label in HANDEDNESS])
        conn.executemany('INSERT OR IGNORE INTO position (position, position_name) VALUES (?, ?)',
                         POSITIONS)
        conn.executemany('INSERT OR IGNORE INTO team (team_label) VALUES (?)',
                         [(team,) for team in TEAMS])
        conn.executemany('INSERT OR IGNORE INTO college (college_name) VALUES (?)',
                         [(college,) for college in COLLEGES])
        conn.executemany('INSERT OR IGNORE INTO archetype (archetype) VALUES (?)',
                         [(archetype,) for archetype in ARCHETYPES])
        conn.executemany('INSERT OR IGNORE INTO ability (ability) VALUES (?)',
                         [(ability,) for ability in ABILITIES])
        conn.executemany('INSERT OR IGNORE INTO running_style (style_name) VALUES (?)',
                         [(style,) for style in RUNNING_STYLES])
        conn.executemany(
            'INSERT OR IGNORE INTO development_trait (development_trait_id, trait_name) VALUES (?, ?)',
            DEVELOPMENT_TRAITS
        )
        conn.executemany('''
            INSERT OR IGNORE INTO draft_pick (round_number, pick_in_round, overall_pick, display_pick)
            VALUES (?, ?, ?, ?)
        ''', [
            (round_number, pick, (round_number - 1) * PICKS_PER_ROUND + pick,
             f"Round {round_number}, Pick {pick}")
            for round_number in range(1, DRAFT_ROUNDS + 1)
            for pick in range(1, PICKS_PER_ROUND + 1)
        ])


def build_test_database(db_path: Union[str, Path], **pool_kwargs) -> ConnectionPool:
    """
    Create a seeded database and return a pool for it.

    Args:
        db_path: Database file to create
        **pool_kwargs: Passed to ConnectionPool

    Returns:
        Open ConnectionPool; callers close it
    """
    pool = ConnectionPool(db_path, **pool_kwargs)
    with pool.connection() as conn:
        apply_schema(conn, SCHEMA_PATH)
        seed_static_dimensions(conn)
    return pool


SAMPLE_PLAYER: Dict[str, Any] = {
    'id': 1001,
    'overallRating': 88,
    'firstName': 'Patrick',
    'lastName': 'Mahomes',
    'height': 73,
    'weight': 215,
    'age': 24,
    'jerseyNum': 7,
    'yearsPro': 2,
    'handedness': 1,
    'college': 'Texas AM',
    'position': {'id': 'QB', 'label': 'Quarterback'},
    'team': {'id': 12, 'label': 'KC Chiefs'},
    'archetype': {'id': 'QB_FieldGeneral', 'label': 'Field General - QB'},
    'playerAbilities': [],
    'iteration': {'id': '12-week-12', 'label': 'Week 12'},
    'stats': {},
}


def make_player(**overrides) -> Dict[str, Any]:
    """Copy of SAMPLE_PLAYER with fields replaced."""
    player = copy.deepcopy(SAMPLE_PLAYER)
    player.update(overrides)
    return player


def make_secondary_player(**overrides) -> Dict[str, Any]:
    """Secondary dataset record that exactly matches SAMPLE_PLAYER."""
    player = {
        'roster_id': '5001',
        'first_name': 'patrick',
        'last_name': 'MAHOMES',
        'position': 'QB',
        'height': 73,
        'weight': 215,
        'age': 24,
        'years_pro': 2,
        'trait_development': 2,
        'draft_positions': [45, 12, 99],
    }
    player.update(overrides)
    return player
