"""
Settings read from the environment (and a local .env file).

Only the outer layers (CLI, dashboard) read Config; the pipeline itself is
handed a MapConfig.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Optional

from dotenv import load_dotenv

from spendcity.domain import MAP_SIZE, MAX_ATTEMPTS

load_dotenv()


def _parse_int(name: str, value) -> Optional[int]:
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"{name} must be a whole number, got {value!r}") from None


class Config:
    USER_EMAIL: Final[str] = os.getenv("SPENDCITY_USER_EMAIL", "")
    DATA_DIR: Final[Path] = Path(os.getenv("SPENDCITY_DATA_DIR", "data"))
    STATE_FILE: Final[str] = os.getenv("SPENDCITY_STATE_FILE", "")
    MAP_SIZE: Final[str] = os.getenv("SPENDCITY_MAP_SIZE", str(MAP_SIZE))
    MAX_ATTEMPTS: Final[str] = os.getenv("SPENDCITY_MAX_ATTEMPTS", str(MAX_ATTEMPTS))
    SEED: Final[str] = os.getenv("SPENDCITY_SEED", "")
    LOG_LEVEL: Final[str] = os.getenv("SPENDCITY_LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        for name, raw in (("SPENDCITY_MAP_SIZE", cls.MAP_SIZE), ("SPENDCITY_MAX_ATTEMPTS", cls.MAX_ATTEMPTS)):
            value = _parse_int(name, raw)
            if value is None or value <= 0:
                raise ValueError(f"{name} must be positive, got {raw!r}")
        _parse_int("SPENDCITY_SEED", cls.SEED)


@dataclass(frozen=True)
class MapConfig:
    data_dir: Path = Path("data")
    state_path: Optional[Path] = None
    map_size: int = MAP_SIZE
    max_attempts: int = MAX_ATTEMPTS
    seed: Optional[int] = None

    @property
    def state_file(self) -> Path:
        return self.state_path if self.state_path is not None else self.data_dir / "map_state.json"

    @property
    def search_dirs(self) -> tuple[Path, ...]:
        return (self.data_dir / "UserData", self.data_dir)

    @classmethod
    def from_env(cls) -> "MapConfig":
        Config.validate()
        return cls(
            data_dir=Config.DATA_DIR,
            state_path=Path(Config.STATE_FILE) if Config.STATE_FILE else None,
            map_size=_parse_int("SPENDCITY_MAP_SIZE", Config.MAP_SIZE),
            max_attempts=_parse_int("SPENDCITY_MAX_ATTEMPTS", Config.MAX_ATTEMPTS),
            seed=_parse_int("SPENDCITY_SEED", Config.SEED),
        )
