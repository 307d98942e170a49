import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from spendcity.domain import EMPTY, HOUSE, MAX_ATTEMPTS, RESERVED_MARKERS, BuildingLocation, building_type_for
from spendcity.errors import HouseSiteOccupied, PlacementExhausted
from spendcity.functional import Either, Left, Right
from spendcity.grid import GridState

logger = logging.getLogger(__name__)


@dataclass
class PlacementReport:
    """Per-category outcome of a placement run."""

    requested: dict[str, int] = field(default_factory=dict)
    placed: dict[str, int] = field(default_factory=dict)
    shortfall: dict[str, int] = field(default_factory=dict)

    @property
    def failed(self) -> int:
        return sum(self.shortfall.values())

    @property
    def total_placed(self) -> int:
        return sum(self.placed.values())


class PlacementEngine:
    """Puts the house and the buildings onto a GridState.

    rng: source of random coordinates. Pass a seeded random.Random to get
    the same layout for the same input.
    max_attempts: random draws allowed per building before giving up.
    """

    def __init__(self, rng: Optional[random.Random] = None, max_attempts: int = MAX_ATTEMPTS):
        if max_attempts <= 0:
            raise ValueError(f"max_attempts must be positive, got {max_attempts}")
        self.rng = rng if rng is not None else random.Random()
        self.max_attempts = max_attempts

    def place_house(self, state: GridState) -> GridState:
        if state.house_placed:
            if state.house_location is None:
                raise ValueError("house_placed is set but house_location is missing")
            row, col = state.house_location
            logger.info("House already placed at [%d, %d]. Skipping placement.", row, col)
            return state

        row = col = state.size // 2
        current = state.get(row, col)
        if current != EMPTY:
            raise HouseSiteOccupied(row, col, current)

        state.set_cell(row, col, HOUSE)
        state.house_placed = True
        state.house_location = (row, col)
        logger.info("House placed at center: Row: %d, Col: %d", row, col)
        return state

    def place_random(
        self, state: GridState, building_type: str
    ) -> tuple[GridState, Either[PlacementExhausted, BuildingLocation]]:
        if building_type in RESERVED_MARKERS:
            raise ValueError(f"{building_type!r} is reserved and cannot be used as a building marker")

        size = state.size
        for _ in range(self.max_attempts):
            row = self.rng.randrange(size)
            col = self.rng.randrange(size)
            if state.is_empty(row, col):
                state.set_cell(row, col, building_type)
                location = BuildingLocation(row, col, building_type)
                state.building_locations.append(location)
                logger.debug("Building %s placed at Row: %d, Col: %d", building_type, row, col)
                return state, Right(location)

        return state, Left(PlacementExhausted(building_type, self.max_attempts))

    def add_building(
        self, building_type: str, state: GridState
    ) -> Either[PlacementExhausted, BuildingLocation]:
        _, result = self.place_random(state, building_type)
        if result.is_right():
            state.buildings_placed = True
        else:
            logger.warning("%s", result.get_error())
        return result

    def populate(self, state: GridState, counts: dict[str, int]) -> PlacementReport:
        """Place counts[category] buildings for every category, in the order given.

        Exhausted placements are tallied per category and never stop the run.
        """
        report = PlacementReport()
        for category, count in counts.items():
            building_type = building_type_for(category)
            placed = 0
            for _ in range(count):
                if self.add_building(building_type, state).is_right():
                    placed += 1
            report.requested[category] = count
            report.placed[category] = placed
            if placed < count:
                report.shortfall[category] = count - placed
                logger.warning(
                    "Category %s: placed %d of %d %s buildings", category, placed, count, building_type
                )
        return report
