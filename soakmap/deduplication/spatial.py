"""
Uniform grid index for proximity lookups.

Cells are as wide as the proximity threshold, so any spring within the
threshold of a point lies in the point's cell or one of its 8 neighbours.
"""

import math
from collections import defaultdict
from collections.abc import Iterable, Iterator

from soakmap.config import settings
from soakmap.deduplication.types import SpringRecord

Cell = tuple[int, int]


def grid_cell(lat: float, lng: float, cell_size: float) -> Cell:
    """Grid cell key for a point."""
    return math.floor(lat / cell_size), math.floor(lng / cell_size)


class SpatialIndex:
    """
    Buckets springs into grid cells.

    Springs without coordinates are not indexed. Members of a cell keep
    the order they were added in.
    """

    def __init__(self, records: Iterable[SpringRecord] = (), cell_size: float | None = None):
        self.cell_size = cell_size or settings.dedup.proximity_threshold
        self._cells: dict[Cell, list[SpringRecord]] = defaultdict(list)
        self.skipped = 0

        for record in records:
            self.add(record)

    def add(self, record: SpringRecord) -> bool:
        """Index a spring. Returns False if it has no coordinates."""
        if not record.has_coordinates:
            self.skipped += 1
            return False

        self._cells[self.cell_of(record.lat, record.lng)].append(record)
        return True

    def cell_of(self, lat: float, lng: float) -> Cell:
        return grid_cell(lat, lng, self.cell_size)

    def cell_members(self, lat: float, lng: float) -> list[SpringRecord]:
        """Springs in the point's own cell only."""
        return list(self._cells.get(self.cell_of(lat, lng), ()))

    def neighbors(self, lat: float, lng: float) -> Iterator[SpringRecord]:
        """Springs in the 3x3 block of cells around a point."""
        cell_x, cell_y = self.cell_of(lat, lng)

        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                yield from self._cells.get((cell_x + dx, cell_y + dy), ())

    def __len__(self) -> int:
        return sum(len(members) for members in self._cells.values())

    @property
    def cell_count(self) -> int:
        return len(self._cells)
