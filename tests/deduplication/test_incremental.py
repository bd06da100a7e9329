# SPDX-License-Identifier: MIT
"""Tests for the pre-insert duplicate filter."""

from soakmap.deduplication.incremental import IncrementalFilter
from soakmap.deduplication.types import SpringRecord


def draft(name, state="ID", lat=None, lng=None, **fields):
    return SpringRecord(name=name, state=state, lat=lat, lng=lng, **fields)


class TestIncrementalFilter:
    """Test classification of new candidates."""

    def test_goldbug_is_duplicate_of_existing(self, make_spring):
        existing = make_spring("Goldbug Hot Springs", lat=45.8301, lng=-114.7498)
        candidate = draft("Goldbug Hot Spring", lat=45.83, lng=-114.75)

        result = IncrementalFilter([existing], threshold=0.005).classify([candidate])

        assert result.new == []
        assert len(result.duplicates) == 1
        assert result.duplicates[0].draft is candidate
        assert result.duplicates[0].existing_id == existing.id

    def test_unrelated_candidate_is_new(self, idaho_springs):
        candidate = draft("Sunbeam Hot Springs", lat=44.26, lng=-114.74)

        result = IncrementalFilter(idaho_springs, threshold=0.005).classify([candidate])

        assert result.new == [candidate]
        assert result.duplicates == []

    def test_name_index_ignores_distance(self, make_spring):
        existing = make_spring("Sunbeam Hot Springs", lat=44.26, lng=-114.74)
        candidate = draft("Sunbeam Springs", lat=43.0, lng=-116.0)

        result = IncrementalFilter([existing], threshold=0.005).classify([candidate])
        assert result.duplicates[0].existing_id == existing.id

    def test_name_index_respects_state(self, make_spring):
        existing = make_spring("Warm Springs", state="MT", lat=46.0, lng=-112.0)
        candidate = draft("Warm Springs", state="ID", lat=44.0, lng=-114.0)

        result = IncrementalFilter([existing], threshold=0.005).classify([candidate])
        assert result.new == [candidate]

    def test_proximity_match_in_same_cell(self, make_spring):
        existing = make_spring("Upper Boiling River", lat=45.0021, lng=-115.2002)
        candidate = draft("Boiling River Pools", lat=45.0022, lng=-115.2003)

        result = IncrementalFilter([existing], threshold=0.005).classify([candidate])
        assert result.duplicates[0].existing_id == existing.id

    def test_proximity_checks_own_cell_only(self, make_spring):
        """A near-duplicate across a cell edge is let through; cleanup catches it later."""
        existing = make_spring("Upper Boiling River", lat=45.0049, lng=-115.20)
        candidate = draft("Boiling River Pools", lat=45.0051, lng=-115.20)

        result = IncrementalFilter([existing], threshold=0.005).classify([candidate])
        assert result.new == [candidate]

    def test_candidate_without_coordinates(self, make_spring):
        existing = make_spring("Goldbug Hot Springs", lat=45.8301, lng=-114.7498)
        by_name = draft("Goldbug Spring")
        unnamed_match = draft("Goldbug Creek Pools")

        result = IncrementalFilter([existing], threshold=0.005).classify([by_name, unnamed_match])

        assert [d.draft for d in result.duplicates] == [by_name]
        assert result.new == [unnamed_match]

    def test_empty_names_not_matched_by_name_index(self, make_spring):
        existing = make_spring("???", lat=45.0, lng=-115.0)

        result = IncrementalFilter([existing], threshold=0.005).classify([draft("!!!")])

        assert result.duplicates == []

    def test_empty_names_not_matched_nearby(self, make_spring):
        existing = make_spring("???", lat=45.0001, lng=-115.0001)
        candidate = draft("!!!", lat=45.0002, lng=-115.0002)

        result = IncrementalFilter([existing], threshold=0.005).classify([candidate])

        assert result.new == [candidate]

    def test_first_existing_match_wins(self, make_spring):
        first = make_spring("Goldbug Hot Springs", lat=45.8301, lng=-114.7498)
        second = make_spring("Goldbug Springs", lat=45.8302, lng=-114.7499)

        result = IncrementalFilter([first, second], threshold=0.005).classify([draft("Goldbug")])
        assert result.duplicates[0].existing_id == first.id

    def test_candidates_not_compared_to_each_other(self):
        batch = [
            draft("Goldbug Hot Springs", lat=45.83, lng=-114.75),
            draft("Goldbug Spring", lat=45.83, lng=-114.75),
        ]
        result = IncrementalFilter([], threshold=0.005).classify(batch)
        assert result.new == batch

    def test_preserves_candidate_order(self, idaho_springs):
        batch = [draft(f"New Spring {i}", lat=40.0 + i, lng=-110.0) for i in range(5)]

        result = IncrementalFilter(idaho_springs, threshold=0.005).classify(batch)
        assert result.new == batch
