from pathlib import Path

import pytest

from spendcity.config import Config, MapConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr(Config, "DATA_DIR", Path("data"))
    monkeypatch.setattr(Config, "STATE_FILE", "")
    monkeypatch.setattr(Config, "MAP_SIZE", "20")
    monkeypatch.setattr(Config, "MAX_ATTEMPTS", "1000")
    monkeypatch.setattr(Config, "SEED", "")


def test_from_env_parses_numbers(monkeypatch):
    monkeypatch.setattr(Config, "MAP_SIZE", " 12 ")
    monkeypatch.setattr(Config, "SEED", "42")

    config = MapConfig.from_env()

    assert config.map_size == 12
    assert config.max_attempts == 1000
    assert config.seed == 42
    assert config.state_file == Path("data") / "map_state.json"


def test_blank_seed_means_unseeded():
    assert MapConfig.from_env().seed is None


@pytest.mark.parametrize("attr, raw", [
    ("MAP_SIZE", "abc"),
    ("MAP_SIZE", "0"),
    ("MAP_SIZE", ""),
    ("MAX_ATTEMPTS", "-3"),
    ("MAX_ATTEMPTS", "1.5"),
    ("SEED", "lucky"),
])
def test_bad_numbers_raise_value_error(monkeypatch, attr, raw):
    monkeypatch.setattr(Config, attr, raw)

    with pytest.raises(ValueError) as exc:
        Config.validate()
    assert f"SPENDCITY_{attr}" in str(exc.value)
