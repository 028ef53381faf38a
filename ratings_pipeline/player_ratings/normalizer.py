"""
Dimension Normalizer

Resolves the raw attributes of one player record to dimension ids.

Numeric attributes (height, weight, age, jersey number, years pro) are
lookup-or-create: a missing value gets a new row with a display string.
Labelled attributes (handedness, position, team, college, archetype) must
already exist, possibly after applying the static name tables.

When built with a connection pool, the lookups run concurrently on pooled
reader connections. Anything a reader cannot see, such as a row created
earlier in the same uncommitted run, is resolved again on the caller's
connection before any row is created.
"""

import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple

from ratings_pipeline.common.db_utils import ConnectionPool
from ratings_pipeline.common.exceptions import DimensionNotFoundError, InvalidAttributeError
from ratings_pipeline.player_ratings.config import (
    DEFAULT_ARCHETYPE,
    RATING_COLUMNS,
    RUNNING_STYLE_STAT,
)
from ratings_pipeline.player_ratings.mappings import (
    COLLEGE_NAME_MAPPING,
    HANDEDNESS_LABELS,
    PLAYER_COLLEGE_OVERRIDES,
    TEAM_NAME_MAPPING,
)

logger = logging.getLogger(__name__)


def display_height(inches: int) -> str:
    return f"{inches // 12}'{inches % 12}\""


def display_weight(lbs: int) -> str:
    return f"{lbs} lbs"


def display_age(years: int) -> str:
    return f"{years} yrs"


def display_jersey_number(number: int) -> str:
    return f"{number:02d}"


def display_years_pro(years: int) -> str:
    return 'Rookie' if years == 0 else f"{years} years"


@dataclass(frozen=True)
class NumericDimension:
    """A lookup-or-create dimension keyed by an integer."""
    attribute: str
    table: str
    id_column: str
    key_column: str
    display_column: str
    formatter: Callable[[int], str]


HEIGHT = NumericDimension('height', 'player_height', 'height_id',
                          'height_inches', 'display_height', display_height)
WEIGHT = NumericDimension('weight', 'player_weight', 'weight_id',
                          'weight_lbs', 'display_weight', display_weight)
AGE = NumericDimension('age', 'player_age', 'age_id',
                       'age_years', 'display_age', display_age)
JERSEY_NUMBER = NumericDimension('jerseyNum', 'jersey_number', 'jersey_number_id',
                                 'number', 'display_number', display_jersey_number)
YEARS_PRO = NumericDimension('yearsPro', 'years_pro', 'years_pro_id',
                             'years', 'display_years', display_years_pro)

NUMERIC_DIMENSIONS = (HEIGHT, WEIGHT, AGE, JERSEY_NUMBER, YEARS_PRO)


@dataclass
class NormalizedPlayer:
    """A player record with every attribute resolved to a dimension id."""
    player_id: int
    first_name: str
    last_name: str
    height_id: int
    weight_id: int
    age_id: int
    jersey_number_id: int
    years_pro_id: int
    handedness_id: int
    position_id: int
    team_id: int
    college_id: int
    archetype_id: int
    ratings: Dict[str, int] = field(default_factory=dict)
    abilities: List[str] = field(default_factory=list)
    running_style: Optional[str] = None
    iteration_name: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


def parse_numeric(value: Any, attribute: str) -> int:
    """
    Parse an integer attribute from the provider payload.

    Args:
        value: Raw value (int, integral float or digit string)
        attribute: Attribute name used in the error message

    Returns:
        The integer value

    Raises:
        InvalidAttributeError: If the value is not an integer
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAttributeError(attribute, value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise InvalidAttributeError(attribute, value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise InvalidAttributeError(attribute, value) from None
    raise InvalidAttributeError(attribute, value)


def _label(value: Any, key: str) -> Any:
    """Provider objects such as position or team come as {id, label} dicts."""
    if isinstance(value, dict):
        return value.get(key)
    return value


def _stat_value(stats: Dict[str, Any], key: str) -> Any:
    entry = stats.get(key)
    if isinstance(entry, dict):
        return entry.get('value')
    return entry


def extract_ratings(player: Dict[str, Any]) -> Dict[str, int]:
    """Map the provider stat block to rating columns, defaulting missing stats to 0."""
    stats = player.get('stats') or {}
    ratings = {}
    for stat_key, column in RATING_COLUMNS.items():
        value = _stat_value(stats, stat_key)
        if stat_key == 'overall' and value in (None, ''):
            value = player.get('overallRating')
        ratings[column] = 0 if value in (None, '') else parse_numeric(value, stat_key)
    return ratings


def extract_abilities(player: Dict[str, Any]) -> List[str]:
    """Ability labels in provider order."""
    labels = []
    for ability in player.get('playerAbilities') or []:
        label = _label(ability, 'label')
        if label:
            labels.append(label)
    return labels


def extract_running_style(player: Dict[str, Any]) -> Optional[str]:
    stats = player.get('stats') or {}
    return _stat_value(stats, RUNNING_STYLE_STAT) or None


def _find(conn: sqlite3.Connection, table: str, id_column: str,
          key_column: str, value: Any) -> Optional[int]:
    row = conn.execute(
        f"SELECT {id_column} FROM {table} WHERE {key_column} = ?", (value,)
    ).fetchone()
    return row[0] if row else None


class DimensionNormalizer:
    """Resolves raw player attributes to dimension ids."""

    def __init__(self, pool: Optional[ConnectionPool] = None, max_workers: int = 1):
        """
        Initialize the normalizer.

        Args:
            pool: Pool used for concurrent read-only lookups; None keeps
                every lookup on the caller's connection
            max_workers: Lookup threads per player
        """
        self.pool = pool
        self.max_workers = max_workers

    # Numeric dimensions

    def _find_numeric(self, conn, dimension: NumericDimension, value: int) -> Optional[int]:
        return _find(conn, dimension.table, dimension.id_column, dimension.key_column, value)

    def get_dimension_id(self, conn: sqlite3.Connection,
                         dimension: NumericDimension, value: int) -> int:
        """
        Look up a numeric dimension row, creating it if missing.

        Args:
            conn: Connection used for the lookup and any insert
            dimension: Which dimension to resolve
            value: Natural key

        Returns:
            The row id for value
        """
        dimension_id = self._find_numeric(conn, dimension, value)
        if dimension_id is not None:
            return dimension_id

        conn.execute(
            f"INSERT OR IGNORE INTO {dimension.table} "
            f"({dimension.key_column}, {dimension.display_column}) VALUES (?, ?)",
            (value, dimension.formatter(value))
        )
        logger.debug(f"Created {dimension.table} row for {value}")
        return self._find_numeric(conn, dimension, value)

    # Labelled dimensions

    def _find_handedness(self, conn, code: int) -> Optional[int]:
        label = HANDEDNESS_LABELS.get(code)
        if label is None:
            return None
        return _find(conn, 'handedness', 'handedness_id', 'handedness', label)

    def resolve_handedness(self, conn, code: int) -> int:
        handedness_id = self._find_handedness(conn, code)
        if handedness_id is None:
            raise DimensionNotFoundError(
                f"Handedness not found: {HANDEDNESS_LABELS.get(code)} (value: {code})"
            )
        return handedness_id

    def _find_position(self, conn, code: str) -> Optional[int]:
        return _find(conn, 'position', 'position_id', 'position', code)

    def resolve_position(self, conn, code: str) -> int:
        position_id = self._find_position(conn, code)
        if position_id is None:
            raise DimensionNotFoundError(f"Position not found: {code}")
        return position_id

    def _find_team(self, conn, label: str) -> Optional[int]:
        return _find(conn, 'team', 'team_id', 'team_label', TEAM_NAME_MAPPING.get(label, label))

    def resolve_team(self, conn, label: str) -> int:
        team_id = self._find_team(conn, label)
        if team_id is None:
            mapped = TEAM_NAME_MAPPING.get(label, label)
            raise DimensionNotFoundError(f"Team not found: {label} (mapped to: {mapped})")
        return team_id

    def _find_college(self, conn, college: str, player_name: Optional[str] = None) -> Optional[int]:
        override = PLAYER_COLLEGE_OVERRIDES.get(player_name) if player_name else None
        if override:
            college_id = _find(conn, 'college', 'college_id', 'college_name', override)
            if college_id is not None:
                return college_id

        college_id = _find(conn, 'college', 'college_id', 'college_name', college)
        if college_id is not None:
            return college_id

        mapped = COLLEGE_NAME_MAPPING.get(college)
        if mapped:
            return _find(conn, 'college', 'college_id', 'college_name', mapped)
        return None

    def resolve_college(self, conn, college: str, player_name: Optional[str] = None) -> int:
        """
        Resolve a college name.

        Order: player-specific override, the raw name, then the alias table.

        Raises:
            DimensionNotFoundError: If none of them exist
        """
        college_id = self._find_college(conn, college, player_name)
        if college_id is None:
            mapped = COLLEGE_NAME_MAPPING.get(college) or 'no mapping found'
            raise DimensionNotFoundError(f"College not found: {college} (mapped to: {mapped})")
        return college_id

    def _find_archetype(self, conn, label: Optional[str]) -> Optional[int]:
        return _find(conn, 'archetype', 'archetype_id', 'archetype', label or DEFAULT_ARCHETYPE)

    def resolve_archetype(self, conn, label: Optional[str]) -> int:
        archetype_id = self._find_archetype(conn, label)
        if archetype_id is None:
            raise DimensionNotFoundError(f"Archetype not found: {label or DEFAULT_ARCHETYPE}")
        return archetype_id

    # Player

    def normalize(self, player: Dict[str, Any], conn: sqlite3.Connection) -> NormalizedPlayer:
        """
        Resolve every dimension of one raw player record.

        Args:
            player: Raw record from the ratings snapshot
            conn: Connection that receives any dimension inserts

        Returns:
            NormalizedPlayer

        Raises:
            InvalidAttributeError: If a numeric attribute is unparsable
            DimensionNotFoundError: If a labelled dimension is unresolved
        """
        player_id = parse_numeric(player.get('id'), 'id')
        first_name = player.get('firstName') or ''
        last_name = player.get('lastName') or ''
        ratings = extract_ratings(player)

        plan = self._plan_lookups(player, f"{first_name} {last_name}")
        found = self._run_lookups({name: finder for name, (finder, _) in plan.items()}, conn)

        ids = {}
        for name, (_, resolver) in plan.items():
            ids[name] = found[name] if found[name] is not None else resolver(conn)

        return NormalizedPlayer(
            player_id=player_id,
            first_name=first_name,
            last_name=last_name,
            ratings=ratings,
            abilities=extract_abilities(player),
            running_style=extract_running_style(player),
            iteration_name=_label(player.get('iteration'), 'id'),
            **ids,
        )

    def _plan_lookups(self, player: Dict[str, Any],
                      player_name: str) -> Dict[str, Tuple[Callable, Callable]]:
        """Build (read-only finder, resolver) pairs keyed by NormalizedPlayer field."""
        plan = {}
        for dimension in NUMERIC_DIMENSIONS:
            value = parse_numeric(player.get(dimension.attribute), dimension.attribute)
            plan[dimension.id_column] = (
                partial(self._find_numeric, dimension=dimension, value=value),
                partial(self.get_dimension_id, dimension=dimension, value=value),
            )

        handedness = parse_numeric(player.get('handedness'), 'handedness')
        position = _label(player.get('position'), 'id')
        team = _label(player.get('team'), 'label')
        college = player.get('college') or 'None'
        archetype = _label(player.get('archetype'), 'label')

        plan['handedness_id'] = (partial(self._find_handedness, code=handedness),
                                 partial(self.resolve_handedness, code=handedness))
        plan['position_id'] = (partial(self._find_position, code=position),
                               partial(self.resolve_position, code=position))
        plan['team_id'] = (partial(self._find_team, label=team),
                           partial(self.resolve_team, label=team))
        plan['college_id'] = (partial(self._find_college, college=college, player_name=player_name),
                              partial(self.resolve_college, college=college, player_name=player_name))
        plan['archetype_id'] = (partial(self._find_archetype, label=archetype),
                                partial(self.resolve_archetype, label=archetype))
        return plan

    def _run_lookups(self, finders: Dict[str, Callable], conn) -> Dict[str, Optional[int]]:
        if self.pool is None or self.max_workers < 2:
            return {name: finder(conn) for name, finder in finders.items()}

        results = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_name = {
                executor.submit(self._pooled_lookup, finder): name
                for name, finder in finders.items()
            }
            for future in as_completed(future_to_name):
                results[future_to_name[future]] = future.result()
        return results

    def _pooled_lookup(self, finder: Callable) -> Optional[int]:
        with self.pool.connection() as reader:
            return finder(reader)
