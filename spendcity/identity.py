import logging
from pathlib import Path
from typing import Iterable, Protocol

from spendcity.config import Config
from spendcity.errors import MissingUserContext, SpendingFileNotFound

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    def current_user(self) -> str: ...


class StaticIdentity:
    def __init__(self, email: str) -> None:
        self._email = email

    def current_user(self) -> str:
        if not self._email:
            raise MissingUserContext()
        return self._email


class EnvIdentity:
    """Reads the logged-in user from SPENDCITY_USER_EMAIL."""

    def current_user(self) -> str:
        if not Config.USER_EMAIL:
            raise MissingUserContext("SPENDCITY_USER_EMAIL is not set. User must log in first.")
        return Config.USER_EMAIL


def sanitize_email(email: str) -> str:
    return email.replace("@", "_at_").replace(".", "_")


def spending_file_name(email: str) -> str:
    return f"{sanitize_email(email)}_data.json"


class SpendingFileResolver:
    """Finds a user's spending file in the first search directory that has it."""

    def __init__(self, search_dirs: Iterable[Path]) -> None:
        self.search_dirs = tuple(Path(d) for d in search_dirs)

    def candidates(self, user_id: str) -> list[Path]:
        name = spending_file_name(user_id)
        return [d / name for d in self.search_dirs]

    def resolve(self, user_id: str) -> Path:
        candidates = self.candidates(user_id)
        for path in candidates:
            if path.is_file():
                logger.info("Using spending data file %s", path)
                return path
        raise SpendingFileNotFound(user_id, candidates)
