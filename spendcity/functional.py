from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar('T')
E = TypeVar('E')


@dataclass(frozen=True)
class Right(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    def is_right(self) -> bool:
        return True

    def is_left(self) -> bool:
        return False

    def get_or_else(self, default):
        return self.value

    def get_error(self):
        raise ValueError(f"{self!r} holds a value, not an error")


@dataclass(frozen=True)
class Left(Generic[E]):
    """Failed outcome carrying the error that would otherwise be raised."""

    error: E

    def is_right(self) -> bool:
        return False

    def is_left(self) -> bool:
        return True

    def get_or_else(self, default):
        return default

    def get_error(self) -> E:
        return self.error


Either = Union[Left[E], Right[T]]
