from dataclasses import dataclass, field
from typing import Iterator, Optional

from spendcity.domain import EMPTY, ROAD, HOUSE, MAP_SIZE, RESERVED_MARKERS, BuildingLocation
from spendcity.errors import OutOfBounds


@dataclass
class GridState:
    """Square map of cell markers plus the house and building bookkeeping.

    Cells hold EMPTY, ROAD, HOUSE or a building marker. Odd rows are roads.
    Callers mutate the grid only through set_cell, which never clears a cell
    and never touches a road.
    """

    map_data: list[list[str]]
    house_placed: bool = False
    house_location: Optional[tuple[int, int]] = None
    buildings_placed: bool = False
    building_locations: list[BuildingLocation] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.map_data)

    def _check(self, row: int, col: int) -> None:
        if not (0 <= row < self.size and 0 <= col < self.size):
            raise OutOfBounds(row, col, self.size)

    def get(self, row: int, col: int) -> str:
        self._check(row, col)
        return self.map_data[row][col]

    def is_empty(self, row: int, col: int) -> bool:
        return self.get(row, col) == EMPTY

    def set_cell(self, row: int, col: int, marker: str) -> None:
        self._check(row, col)
        if marker in (EMPTY, ROAD):
            raise ValueError(f"Cannot write {marker!r} into [{row}, {col}]: placement is monotonic")
        current = self.map_data[row][col]
        if current != EMPTY:
            raise ValueError(f"Cell [{row}, {col}] already holds {current!r}")
        self.map_data[row][col] = marker

    def cells(self) -> Iterator[tuple[int, int, str]]:
        for r, row in enumerate(self.map_data):
            for c, marker in enumerate(row):
                yield r, c, marker

    def occupied(self) -> Iterator[tuple[int, int, str]]:
        """Cells holding the house or a building, row-major."""
        for r, c, marker in self.cells():
            if marker not in (EMPTY, ROAD):
                yield r, c, marker

    def problems(self) -> list[str]:
        """Return every broken invariant as a message; an empty list means consistent."""
        msgs: list[str] = []
        size = self.size
        if size == 0:
            return ["grid has no rows"]

        for r, row in enumerate(self.map_data):
            if len(row) != size:
                msgs.append(f"row {r} has {len(row)} cells, expected {size}")
                continue
            for c, marker in enumerate(row):
                if not isinstance(marker, str) or not marker:
                    msgs.append(f"cell [{r}, {c}] is not a marker: {marker!r}")
                elif (marker == ROAD) != (r % 2 == 1):
                    msgs.append(f"cell [{r}, {c}] breaks the road pattern: {marker!r}")
        if msgs:
            return msgs

        if self.house_placed:
            if self.house_location is None:
                msgs.append("house_placed is set but house_location is missing")
            else:
                hr, hc = self.house_location
                if not (0 <= hr < size and 0 <= hc < size) or self.map_data[hr][hc] != HOUSE:
                    msgs.append(f"house_location [{hr}, {hc}] does not hold the house")
        elif self.house_location is not None:
            msgs.append("house_location is set but house_placed is false")

        seen: set[tuple[int, int]] = set()
        for loc in self.building_locations:
            key = (loc.row, loc.col)
            if key in seen:
                msgs.append(f"building location [{loc.row}, {loc.col}] is listed twice")
                continue
            seen.add(key)
            if loc.building_type in RESERVED_MARKERS:
                msgs.append(f"building location [{loc.row}, {loc.col}] uses reserved marker {loc.building_type!r}")
            elif not (0 <= loc.row < size and 0 <= loc.col < size):
                msgs.append(f"building location [{loc.row}, {loc.col}] is off the grid")
            elif self.map_data[loc.row][loc.col] != loc.building_type:
                msgs.append(
                    f"building location [{loc.row}, {loc.col}] expects {loc.building_type!r}, "
                    f"grid holds {self.map_data[loc.row][loc.col]!r}"
                )

        for r, c, marker in self.occupied():
            if marker == HOUSE:
                if self.house_location != (r, c):
                    msgs.append(f"stray house marker at [{r}, {c}]")
            elif (r, c) not in seen:
                msgs.append(f"building {marker!r} at [{r}, {c}] is missing from building_locations")
        return msgs


def stamp_roads(map_data: list[list[str]]) -> list[list[str]]:
    for r in range(1, len(map_data), 2):
        map_data[r] = [ROAD] * len(map_data[r])
    return map_data


def new_state(size: int = MAP_SIZE) -> GridState:
    """Fresh map: every even row empty, every odd row road, no house, no buildings."""
    if size <= 0:
        raise ValueError(f"Map size must be positive, got {size}")
    map_data = [[EMPTY] * size for _ in range(size)]
    return GridState(map_data=stamp_roads(map_data))
