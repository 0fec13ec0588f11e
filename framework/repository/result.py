"""
Lookup outcomes that keep "not found" apart from "failed".

Repositories return a Result from their lookup methods; each layer then
decides which variants it raises and which it collapses into a default.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

from framework.exceptions.handler import EntityNotFoundException

T = TypeVar("T")


@dataclass(frozen=True)
class Found(Generic[T]):
    value: T

    def unwrap(self) -> T:
        return self.value

    def value_or(self, default: Optional[T] = None) -> T:
        return self.value


@dataclass(frozen=True)
class NotFound:
    entity: str
    key: Any

    def unwrap(self):
        raise EntityNotFoundException(self.entity, self.key)

    def value_or(self, default=None):
        return default


@dataclass(frozen=True)
class Failed:
    error: BaseException

    @property
    def reason(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"

    def unwrap(self):
        raise self.error

    def value_or(self, default=None):
        return default


Result = Union[Found[T], NotFound, Failed]
