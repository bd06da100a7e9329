# SPDX-License-Identifier: MIT
"""Tests for pairwise duplicate decisions."""

from itertools import combinations

import pytest

from soakmap.deduplication.matching import are_likely_duplicates, are_names_similar


class TestAreNamesSimilar:
    """Test word-overlap name similarity."""

    def test_majority_overlap_multi_word(self):
        assert are_names_similar("upper boiling river", "boiling river pools")

    def test_half_overlap_is_enough(self):
        """ceil(2 * 0.5) = 1 shared word for two-word names."""
        assert are_names_similar("warm river", "river bend")

    def test_minority_overlap_multi_word(self):
        """ceil(4 * 0.5) = 2 shared words needed; one is not enough."""
        assert not are_names_similar("big warm creek pool", "little cold creek bath")

    def test_single_words_must_be_equal(self):
        assert are_names_similar("goldbug", "goldbug")
        assert not are_names_similar("goldbug", "stanley")

    def test_single_word_against_multi_word(self):
        """A single generic word does not match a longer name containing it."""
        assert not are_names_similar("river", "boiling river")

    def test_no_significant_words(self):
        assert not are_names_similar("", "")
        assert not are_names_similar("el", "el")
        assert not are_names_similar("", "goldbug")

    def test_short_words_ignored(self):
        assert are_names_similar("de anza", "anza")


class TestAreLikelyDuplicates:
    """Test the full duplicate decision."""

    def test_same_key_same_state(self, make_spring):
        a = make_spring("Baumgartner Hot Springs", lat=45.10, lng=-115.20)
        b = make_spring("Baumgartner Spring", lat=45.1003, lng=-115.2001)
        assert are_likely_duplicates(a, b)

    def test_same_key_same_state_far_apart(self, make_spring):
        """Exact name matches ignore distance."""
        a = make_spring("Sunbeam Hot Springs", lat=44.26, lng=-114.74)
        b = make_spring("Sunbeam Springs", lat=43.00, lng=-116.00)
        assert are_likely_duplicates(a, b)

    def test_same_key_different_state_far_apart(self, make_spring):
        """Identical names in different states are different springs."""
        a = make_spring("Warm Springs", state="ID", lat=44.0, lng=-114.0)
        b = make_spring("Warm Springs", state="MT", lat=46.0, lng=-112.0)
        assert not are_likely_duplicates(a, b)

    def test_nearby_distinct_names(self, make_spring):
        """Generic words are stripped, leaving no overlap."""
        a = make_spring("Jerry Johnson Hot Springs", lat=46.30, lng=-114.90)
        b = make_spring("Stanley Hot Springs", lat=46.301, lng=-114.901)
        assert not are_likely_duplicates(a, b)

    def test_nearby_similar_names(self, make_spring):
        a = make_spring("Upper Boiling River", state="WY", lat=44.99, lng=-110.69)
        b = make_spring("Boiling River Pools", state="MT", lat=44.992, lng=-110.691)
        assert are_likely_duplicates(a, b)

    def test_similar_names_too_far(self, make_spring):
        a = make_spring("Upper Boiling River", lat=44.99, lng=-110.69)
        b = make_spring("Boiling River Pools", lat=44.999, lng=-110.69)
        assert not are_likely_duplicates(a, b)

    def test_threshold_is_exclusive_per_axis(self, make_spring):
        a = make_spring("Upper Boiling River", lat=44.0, lng=-110.0)
        b = make_spring("Boiling River Pools", lat=44.0, lng=-110.006)
        assert not are_likely_duplicates(a, b)
        assert are_likely_duplicates(a, b, threshold=0.01)

    def test_missing_coordinates_still_match_by_name(self, make_spring):
        a = make_spring("Goldbug Hot Springs")
        b = make_spring("Goldbug Hot Spring", lat=45.83, lng=-114.75)
        assert are_likely_duplicates(a, b)

    def test_missing_coordinates_excluded_from_proximity(self, make_spring):
        a = make_spring("Upper Boiling River")
        b = make_spring("Boiling River Pools", lat=44.99, lng=-110.69)
        assert not are_likely_duplicates(a, b)

    def test_empty_names_never_match(self, make_spring):
        """Two nameless springs at the same spot are not assumed identical."""
        a = make_spring("???", lat=44.0, lng=-110.0)
        b = make_spring("!!!", lat=44.0, lng=-110.0)
        assert not are_likely_duplicates(a, b)


class TestSymmetry:
    """The decision never depends on argument order."""

    @pytest.fixture
    def mixed_springs(self, make_spring, idaho_springs):
        return idaho_springs + [
            make_spring("Upper Boiling River", lat=45.10, lng=-115.20),
            make_spring("Boiling River Pools", lat=45.102, lng=-115.201),
            make_spring("Goldbug Hot Spring"),
            make_spring("Warm Springs", state="MT", lat=45.10, lng=-115.20),
            make_spring("???", lat=45.10, lng=-115.20),
        ]

    def test_symmetric(self, mixed_springs):
        for a, b in combinations(mixed_springs, 2):
            assert are_likely_duplicates(a, b) == are_likely_duplicates(b, a)
