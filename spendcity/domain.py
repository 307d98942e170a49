from dataclasses import dataclass
from typing import Final

MAP_SIZE: Final[int] = 20
MAX_ATTEMPTS: Final[int] = 1000

# cell markers
EMPTY: Final[str] = "0"
ROAD: Final[str] = "1"
HOUSE: Final[str] = "H"

RESERVED_MARKERS: Final[frozenset[str]] = frozenset({EMPTY, ROAD, HOUSE})

# spending category code -> building marker
CATEGORY_BUILDINGS: Final[dict[str, str]] = {
    "EO": "M",  # eating out -> burger joint
    "OS": "W",  # online shopping -> warehouse
    "SH": "F",  # shein -> factory
    "NI": "N",  # nightlife -> nightclub
    "GR": "T",  # groceries -> tree
}


@dataclass(frozen=True)
class SpendingEntry:
    date: str        # e.g. "2025-03-14"
    category: str    # category code, e.g. "EO"
    amount: float


@dataclass(frozen=True)
class BuildingLocation:
    row: int
    col: int
    building_type: str


def building_type_for(category: str) -> str:
    """Map a spending category code to its building marker.

    Codes missing from the table are used as their own marker.
    """
    return CATEGORY_BUILDINGS.get(category, category)
