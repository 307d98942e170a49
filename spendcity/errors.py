from pathlib import Path
from typing import Optional, Sequence


class SpendCityError(Exception):
    """Base class for every failure raised by the map pipeline."""


class MissingUserContext(SpendCityError):
    def __init__(self, message: str = "No current user. User must log in first."):
        super().__init__(message)


class SpendingFileNotFound(SpendCityError):
    def __init__(self, user_id: str, searched: Sequence[Path]):
        self.user_id = user_id
        self.searched = tuple(searched)
        locations = " or ".join(str(p) for p in self.searched)
        super().__init__(f"Spending data file for {user_id} not found at {locations}")


class SpendingParseError(SpendCityError):
    def __init__(self, path: Optional[Path], reason: str):
        self.path = path
        self.reason = reason
        where = f" in {path}" if path is not None else ""
        super().__init__(f"Invalid spending data{where}: {reason}")


class EmptyInput(SpendCityError):
    def __init__(self, message: str = "No spending data available. Cannot generate map."):
        super().__init__(message)


class ZeroTotalSpending(SpendCityError):
    def __init__(self, total: float):
        self.total = total
        super().__init__(f"Total spending must be positive to allocate buildings, got {total}")


class HouseSiteOccupied(SpendCityError):
    def __init__(self, row: int, col: int, marker: str):
        self.row = row
        self.col = col
        self.marker = marker
        super().__init__(f"House site [{row}, {col}] is already occupied by {marker!r}")


class PlacementExhausted(SpendCityError):
    """Returned (not raised) when no empty cell turned up within the attempt budget."""

    def __init__(self, building_type: str, attempts: int):
        self.building_type = building_type
        self.attempts = attempts
        super().__init__(
            f"Could not find empty spot for {building_type} after {attempts} attempts"
        )

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, PlacementExhausted)
            and self.building_type == other.building_type
            and self.attempts == other.attempts
        )

    def __hash__(self) -> int:
        return hash((self.building_type, self.attempts))


class PersistedStateCorrupt(SpendCityError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Persisted map state at {path} is corrupt: {reason}")


class PersistenceWriteFailure(SpendCityError):
    def __init__(self, path: Path, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not save map state to {path}: {cause}")


class OutOfBounds(SpendCityError, IndexError):
    def __init__(self, row: int, col: int, size: int):
        self.row = row
        self.col = col
        self.size = size
        super().__init__(f"Cell [{row}, {col}] is outside the {size}x{size} grid")
