"""
Load and save the generated map.

The state file is a JSON object:

    {
      "map_data": [["0", "1", ...], ...],
      "house_placed": true,
      "house_location": [10, 10],
      "buildings_placed": true,
      "building_locations": [[0, 3, "M"], ...]
    }

Guarantees
----------
* A missing or blank file loads as a fresh map (roads only).
* A file whose map_data is absent or empty also loads as a fresh map, with a warning.
* Anything else that does not describe a consistent map raises PersistedStateCorrupt.
* Saves go through a temp file in the same directory and os.replace, so the
  previous file stays intact if the write dies half way.
"""
import json
import logging
import os
import tempfile
from pathlib import Path

from spendcity.domain import MAP_SIZE, BuildingLocation
from spendcity.errors import PersistedStateCorrupt, PersistenceWriteFailure
from spendcity.grid import GridState, new_state

logger = logging.getLogger(__name__)


def state_to_dict(state: GridState) -> dict:
    return {
        "map_data": [list(row) for row in state.map_data],
        "house_placed": state.house_placed,
        "house_location": list(state.house_location) if state.house_location is not None else None,
        "buildings_placed": state.buildings_placed,
        "building_locations": [[b.row, b.col, b.building_type] for b in state.building_locations],
    }


def _is_int(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def state_from_dict(data: dict, path: Path) -> GridState:
    map_data = data["map_data"]
    if not isinstance(map_data, list) or not all(isinstance(row, list) for row in map_data):
        raise PersistedStateCorrupt(path, "map_data must be a list of rows")

    house_placed = data.get("house_placed", False)
    buildings_placed = data.get("buildings_placed", False)
    if not isinstance(house_placed, bool) or not isinstance(buildings_placed, bool):
        raise PersistedStateCorrupt(path, "house_placed and buildings_placed must be booleans")

    raw_house = data.get("house_location")
    if raw_house is None:
        house_location = None
    elif isinstance(raw_house, list) and len(raw_house) == 2 and all(_is_int(v) for v in raw_house):
        house_location = (raw_house[0], raw_house[1])
    else:
        raise PersistedStateCorrupt(path, f"house_location must be [row, col] or null, got {raw_house!r}")

    raw_buildings = data.get("building_locations") or []
    if not isinstance(raw_buildings, list):
        raise PersistedStateCorrupt(path, "building_locations must be a list")
    locations: list[BuildingLocation] = []
    for i, item in enumerate(raw_buildings):
        if (
            not isinstance(item, list)
            or len(item) != 3
            or not _is_int(item[0])
            or not _is_int(item[1])
            or not isinstance(item[2], str)
        ):
            raise PersistedStateCorrupt(path, f"building_locations[{i}] must be [row, col, type], got {item!r}")
        locations.append(BuildingLocation(item[0], item[1], item[2]))

    state = GridState(
        map_data=[list(row) for row in map_data],
        house_placed=house_placed,
        house_location=house_location,
        buildings_placed=buildings_placed,
        building_locations=locations,
    )
    problems = state.problems()
    if problems:
        raise PersistedStateCorrupt(path, "; ".join(problems[:5]))
    return state


def load_state(path: str | Path, size: int = MAP_SIZE) -> GridState:
    path = Path(path)
    if not path.exists():
        logger.info("No existing state found at %s. Initializing new map...", path)
        return new_state(size)

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PersistedStateCorrupt(path, f"unreadable ({e})") from e

    if not raw.strip():
        logger.warning("Existing state file %s is empty, reinitialising new state...", path)
        return new_state(size)

    logger.info("Loading existing state from %s...", path)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PersistedStateCorrupt(path, f"not valid JSON ({e})") from e

    if not isinstance(data, dict):
        raise PersistedStateCorrupt(path, "top level must be a JSON object")

    if not data.get("map_data"):
        logger.warning("State file %s has no map data, regenerating default map...", path)
        return new_state(size)

    state = state_from_dict(data, path)
    if state.size != size:
        raise PersistedStateCorrupt(path, f"map is {state.size}x{state.size}, expected {size}x{size}")
    return state


def save_state(state: GridState, path: str | Path) -> Path:
    path = Path(path)
    payload = json.dumps(state_to_dict(state), indent=2)

    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        raise PersistenceWriteFailure(path, e) from e

    logger.info("State successfully saved to %s", path)
    return path
