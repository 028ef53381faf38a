"""
Exact matching between ratings snapshot players and secondary dataset players.

Two descriptions match only when first name, last name (both case-insensitive),
position code, height, weight, age and years pro are all equal. There is no
partial credit; the first matching secondary player wins.
"""

from typing import Any, Dict, Hashable, Iterable, List, NamedTuple, Optional, Tuple

from ratings_pipeline.development_traits.config import FIRST_PICK, LAST_PICK


class CrossSourceMatch(NamedTuple):
    """A ratings player paired with its secondary record, if one matched."""
    primary: Dict[str, Any]
    secondary: Optional[Dict[str, Any]]


def _fold(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def primary_match_key(player: Dict[str, Any]) -> Tuple[Hashable, ...]:
    """Match key for a ratings snapshot player."""
    position = player.get('position')
    if isinstance(position, dict):
        position = position.get('id')
    return (
        _fold(player.get('firstName')),
        _fold(player.get('lastName')),
        position,
        player.get('height'),
        player.get('weight'),
        player.get('age'),
        player.get('yearsPro'),
    )


def secondary_match_key(player: Dict[str, Any]) -> Tuple[Hashable, ...]:
    """Match key for a secondary dataset player."""
    return (
        _fold(player.get('first_name')),
        _fold(player.get('last_name')),
        player.get('position'),
        player.get('height'),
        player.get('weight'),
        player.get('age'),
        player.get('years_pro'),
    )


def is_exact_match(primary: Dict[str, Any], secondary: Dict[str, Any]) -> bool:
    return primary_match_key(primary) == secondary_match_key(secondary)


def build_match_index(secondary_players: Iterable[Dict[str, Any]]) -> Dict[Tuple, Dict[str, Any]]:
    """Index secondary players by match key, keeping the first of any duplicates."""
    index: Dict[Tuple, Dict[str, Any]] = {}
    for player in secondary_players:
        index.setdefault(secondary_match_key(player), player)
    return index


def pair_players(primary_players: Iterable[Dict[str, Any]],
                 secondary_players: Iterable[Dict[str, Any]]) -> List[CrossSourceMatch]:
    """
    Pair every ratings player with its exact secondary match.

    Args:
        primary_players: Ratings snapshot players
        secondary_players: Secondary dataset players

    Returns:
        One CrossSourceMatch per primary player, in snapshot order
    """
    index = build_match_index(secondary_players)
    return [
        CrossSourceMatch(player, index.get(primary_match_key(player)))
        for player in primary_players
    ]


def _as_pick(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def canonical_draft_pick(draft_positions: Optional[Iterable[Any]]) -> Optional[int]:
    """
    Earliest valid overall pick among the candidates.

    Values outside 1..1728 or not integral are discarded.

    Returns:
        The minimum valid pick, or None if no candidate is valid
    """
    valid = [
        pick for pick in (_as_pick(value) for value in draft_positions or [])
        if pick is not None and FIRST_PICK <= pick <= LAST_PICK
    ]
    return min(valid) if valid else None
