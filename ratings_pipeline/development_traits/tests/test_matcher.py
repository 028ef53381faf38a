"""
Unit tests for cross-source matching and draft pick selection.
"""

import unittest

from ratings_pipeline.testing import make_player, make_secondary_player
from ratings_pipeline.development_traits.matcher import (
    CrossSourceMatch,
    build_match_index,
    canonical_draft_pick,
    is_exact_match,
    pair_players,
)


class TestExactMatch(unittest.TestCase):
    """Test cases for is_exact_match."""

    def test_identical_description_matches(self):
        self.assertTrue(is_exact_match(make_player(), make_secondary_player()))

    def test_names_are_case_insensitive(self):
        secondary = make_secondary_player(first_name='PATRICK', last_name='mahomes')
        self.assertTrue(is_exact_match(make_player(), secondary))

    def test_any_field_difference_rejects(self):
        """There is no partial credit: one differing field means no match."""
        changes = {
            'first_name': 'Pat',
            'last_name': 'Mahome',
            'position': 'HB',
            'height': 74,
            'weight': 216,
            'age': 25,
            'years_pro': 3,
        }
        for field, value in changes.items():
            with self.subTest(field=field):
                secondary = make_secondary_player(**{field: value})
                self.assertFalse(is_exact_match(make_player(), secondary))


class TestPairPlayers(unittest.TestCase):
    """Test cases for build_match_index and pair_players."""

    def test_first_duplicate_wins(self):
        first = make_secondary_player(roster_id='first')
        second = make_secondary_player(roster_id='second')

        index = build_match_index([first, second])

        self.assertEqual(len(index), 1)
        self.assertEqual(next(iter(index.values()))['roster_id'], 'first')

    def test_pairs_in_primary_order(self):
        mahomes = make_player()
        allen = make_player(id=1002, firstName='Josh', lastName='Allen', height=77, weight=237)
        secondary = [make_secondary_player(roster_id='x', first_name='Someone')]
        secondary.append(make_secondary_player())

        matches = pair_players([mahomes, allen], secondary)

        self.assertEqual(len(matches), 2)
        self.assertIsInstance(matches[0], CrossSourceMatch)
        self.assertIs(matches[0].primary, mahomes)
        self.assertEqual(matches[0].secondary['roster_id'], '5001')
        self.assertIs(matches[1].primary, allen)
        self.assertIsNone(matches[1].secondary)


class TestCanonicalDraftPick(unittest.TestCase):
    """Test cases for canonical_draft_pick."""

    def test_earliest_pick(self):
        self.assertEqual(canonical_draft_pick([45, 12, 99]), 12)

    def test_out_of_range_values_are_ignored(self):
        self.assertEqual(canonical_draft_pick([0, 2000, 30]), 30)
        self.assertEqual(canonical_draft_pick([1, 1728]), 1)

    def test_no_valid_pick(self):
        self.assertIsNone(canonical_draft_pick([0, 1729]))
        self.assertIsNone(canonical_draft_pick([-5, 'first']))
        self.assertIsNone(canonical_draft_pick([]))
        self.assertIsNone(canonical_draft_pick(None))

    def test_integral_strings_and_floats(self):
        self.assertEqual(canonical_draft_pick(['40', 33.0]), 33)


if __name__ == '__main__':
    unittest.main()
