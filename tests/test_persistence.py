import json
import logging
import os
import random

import pytest

from spendcity.errors import PersistedStateCorrupt, PersistenceWriteFailure
from spendcity.grid import new_state
from spendcity.persistence import load_state, save_state, state_to_dict
from spendcity.placement import PlacementEngine


def make_map(seed=11, size=20):
    engine = PlacementEngine(rng=random.Random(seed))
    state = engine.place_house(new_state(size))
    engine.populate(state, {"EO": 12, "OS": 20, "XYZ": 3})
    return state


def write_state(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_missing_file_gives_default(tmp_path):
    state = load_state(tmp_path / "map_state.json")
    assert state == new_state(20)


@pytest.mark.parametrize("content", ["", "   \n\t  "])
def test_blank_file_gives_same_default(tmp_path, caplog, content):
    path = tmp_path / "map_state.json"
    path.write_text(content, encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        state = load_state(path)

    assert state == load_state(tmp_path / "missing.json")
    assert "empty" in caplog.text


@pytest.mark.parametrize("payload", [
    {"house_placed": False},
    {"map_data": [], "house_placed": False},
    {"map_data": None},
])
def test_no_map_data_gives_default_with_warning(tmp_path, caplog, payload):
    path = tmp_path / "map_state.json"
    write_state(path, payload)

    with caplog.at_level(logging.WARNING):
        state = load_state(path)

    assert state == new_state(20)
    assert "no map data" in caplog.text


def test_malformed_json_is_corrupt(tmp_path):
    path = tmp_path / "map_state.json"
    path.write_text('{"map_data": [["0", ', encoding="utf-8")

    with pytest.raises(PersistedStateCorrupt) as exc:
        load_state(path)
    assert exc.value.path == path


def test_non_object_is_corrupt(tmp_path):
    path = tmp_path / "map_state.json"
    write_state(path, [["0"]])
    with pytest.raises(PersistedStateCorrupt):
        load_state(path)


def test_broken_road_pattern_is_corrupt(tmp_path):
    data = state_to_dict(new_state(20))
    data["map_data"][1][4] = "0"
    path = tmp_path / "map_state.json"
    write_state(path, data)

    with pytest.raises(PersistedStateCorrupt) as exc:
        load_state(path)
    assert "road pattern" in str(exc.value)


@pytest.mark.parametrize("bad", [[0, 2], [0, "2", "M"], {"row": 0, "col": 2, "type": "M"}, [0, True, "M"]])
def test_bad_building_location_is_corrupt(tmp_path, bad):
    data = state_to_dict(new_state(20))
    data["building_locations"] = [bad]
    path = tmp_path / "map_state.json"
    write_state(path, data)

    with pytest.raises(PersistedStateCorrupt):
        load_state(path)


def test_building_without_cell_is_corrupt(tmp_path):
    data = state_to_dict(new_state(20))
    data["building_locations"] = [[0, 2, "M"]]
    data["buildings_placed"] = True
    path = tmp_path / "map_state.json"
    write_state(path, data)

    with pytest.raises(PersistedStateCorrupt):
        load_state(path)


def test_house_listed_as_building_is_corrupt(tmp_path):
    engine = PlacementEngine(rng=random.Random(1))
    data = state_to_dict(engine.place_house(new_state(20)))
    data["building_locations"] = [[10, 10, "H"]]
    path = tmp_path / "map_state.json"
    write_state(path, data)

    with pytest.raises(PersistedStateCorrupt) as exc:
        load_state(path)
    assert "reserved marker 'H'" in str(exc.value)


def test_road_listed_as_building_is_corrupt(tmp_path):
    data = state_to_dict(new_state(20))
    data["building_locations"] = [[1, 0, "1"]]
    path = tmp_path / "map_state.json"
    write_state(path, data)

    with pytest.raises(PersistedStateCorrupt) as exc:
        load_state(path)
    assert "reserved marker '1'" in str(exc.value)


def test_wrong_size_is_corrupt(tmp_path):
    path = tmp_path / "map_state.json"
    save_state(new_state(10), path)

    with pytest.raises(PersistedStateCorrupt):
        load_state(path, size=20)
    assert load_state(path, size=10) == new_state(10)


def test_save_then_load_round_trip(tmp_path):
    state = make_map()
    path = tmp_path / "map_state.json"

    save_state(state, path)
    loaded = load_state(path)

    assert loaded.map_data == state.map_data
    assert loaded.house_placed and loaded.house_location == (10, 10)
    assert loaded.buildings_placed == state.buildings_placed
    assert loaded.building_locations == state.building_locations
    assert loaded == state


def test_saved_file_format(tmp_path):
    state = make_map()
    path = tmp_path / "map_state.json"
    save_state(state, path)

    data = json.loads(path.read_text(encoding="utf-8"))

    assert set(data) == {"map_data", "house_placed", "house_location", "buildings_placed", "building_locations"}
    assert len(data["map_data"]) == 20 and all(len(row) == 20 for row in data["map_data"])
    assert data["house_location"] == [10, 10]
    first = data["building_locations"][0]
    assert isinstance(first[0], int) and isinstance(first[1], int) and isinstance(first[2], str)


def test_save_leaves_no_temp_files(tmp_path):
    save_state(make_map(), tmp_path / "map_state.json")
    save_state(make_map(seed=12), tmp_path / "map_state.json")

    assert [p.name for p in tmp_path.iterdir()] == ["map_state.json"]


def test_save_creates_parent_folder(tmp_path):
    path = tmp_path / "nested" / "dir" / "map_state.json"
    save_state(new_state(20), path)
    assert path.exists()


def test_failed_replace_keeps_previous_file(tmp_path, monkeypatch):
    path = tmp_path / "map_state.json"
    save_state(new_state(20), path)
    before = path.read_text(encoding="utf-8")

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", boom)
    with pytest.raises(PersistenceWriteFailure) as exc:
        save_state(make_map(), path)

    assert exc.value.path == path
    assert path.read_text(encoding="utf-8") == before
    assert [p.name for p in tmp_path.iterdir()] == ["map_state.json"]


def test_unwritable_target_is_fatal(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a folder", encoding="utf-8")

    with pytest.raises(PersistenceWriteFailure):
        save_state(new_state(20), blocker / "map_state.json")
