"""
Whole-corpus duplicate detection.

Candidate pairs come from each spring's 3x3 grid neighbourhood and are
merged into groups with a disjoint-set. Springs without coordinates join
one same-named spring in their state. Groups are transitively closed: A-B-C
is one group when A matches B and B matches C, even if A and C do not match
directly.
"""

from collections.abc import Sequence
from itertools import combinations

from loguru import logger

from soakmap.config import settings
from soakmap.deduplication.matching import keys_match
from soakmap.deduplication.scoring import calculate_richness_score
from soakmap.deduplication.spatial import SpatialIndex
from soakmap.deduplication.types import DuplicateGroup, ScoredSpring, SpringRecord
from soakmap.utils.text import normalize_spring_name


class DisjointSet:
    """Union-find over positions 0..n-1; each root is its set's smallest position."""

    def __init__(self, size: int):
        self.parent = list(range(size))

    def find(self, x: int) -> int:
        root = x
        while self.parent[root] != root:
            root = self.parent[root]

        # Path compression
        while self.parent[x] != root:
            self.parent[x], x = root, self.parent[x]

        return root

    def union(self, a: int, b: int) -> bool:
        """Merge the sets holding a and b. Returns False if already merged."""
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return False

        if root_b < root_a:
            root_a, root_b = root_b, root_a
        self.parent[root_b] = root_a
        return True


class DuplicateResolver:
    """
    Partition a set of springs into duplicate groups.

    Output is deterministic for a given input order: groups are ordered by
    their first-seen member, and score ties keep first-seen order.
    """

    def __init__(self, threshold: float | None = None, authoritative_source: str | None = None):
        self.threshold = threshold or settings.dedup.proximity_threshold
        self.authoritative_source = authoritative_source or settings.dedup.authoritative_source

    def find_groups(self, records: Sequence[SpringRecord]) -> list[DuplicateGroup]:
        """
        Find all duplicate groups among records.

        Args:
            records: Full set of springs to scan

        Returns:
            Groups with two or more members, best spring first
        """
        keys = [normalize_spring_name(r.name) for r in records]
        position = {id(r): i for i, r in enumerate(records)}
        sets = DisjointSet(len(records))

        index = SpatialIndex(records, cell_size=self.threshold)
        if index.skipped:
            logger.debug(f"{index.skipped} springs without coordinates; matching them by name only")

        # Springs without coordinates can only match by name; each joins one
        # same-named spring so that far-apart namesakes stay separate
        with_key: dict[tuple[str, str], list[int]] = {}
        for i, record in enumerate(records):
            if keys[i]:
                with_key.setdefault((keys[i], record.state), []).append(i)

        for members in with_key.values():
            located = [i for i in members if records[i].has_coordinates]
            anchor = located[0] if located else members[0]
            for i in members:
                if i != anchor and not records[i].has_coordinates:
                    sets.union(anchor, i)

        # Proximity + similar names, including across cell boundaries
        for i, record in enumerate(records):
            if not record.has_coordinates:
                continue

            for neighbor in index.neighbors(record.lat, record.lng):
                j = position[id(neighbor)]
                if j <= i:
                    continue
                if keys_match(record, keys[i], neighbor, keys[j], self.threshold):
                    sets.union(i, j)

        members_by_root: dict[int, list[int]] = {}
        for i in range(len(records)):
            members_by_root.setdefault(sets.find(i), []).append(i)

        groups = []
        for members in members_by_root.values():
            if len(members) < 2:
                continue
            groups.append(self._build_group(records, keys, members))

        logger.info(
            f"Found {len(groups)} duplicate groups "
            f"({sum(len(g) - 1 for g in groups)} springs to merge) in {len(records)} springs"
        )
        return groups

    def _build_group(
        self,
        records: Sequence[SpringRecord],
        keys: list[str],
        members: list[int],
    ) -> DuplicateGroup:
        scored = [
            ScoredSpring(
                record=records[i],
                score=calculate_richness_score(records[i], self.authoritative_source),
            )
            for i in members
        ]
        # sorted() is stable, so ties stay in first-seen order
        scored.sort(key=lambda s: s.score, reverse=True)

        chained = any(
            not keys_match(records[a], keys[a], records[b], keys[b], self.threshold)
            for a, b in combinations(members, 2)
        )
        if chained:
            logger.debug(f"Group around '{scored[0].name}' is linked through a shared neighbour")

        return DuplicateGroup(springs=scored, chained=chained)
