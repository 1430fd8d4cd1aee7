"""Error taxonomy and the result wrapper used by fallible operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


class KassaError(Exception):
    """Base for kassa domain errors."""


class ShapeValidationError(KassaError):
    """Payload does not look like a menu or a check collection."""


class NetworkFailure(KassaError):
    """Remote store unreachable, non-2xx, timed out or aborted."""


class PersistenceFailure(KassaError):
    """Local store unavailable, full or holding corrupt data."""


class ItemValidationError(KassaError):
    """Menu item rejected: empty name or negative/non-numeric price."""


class ItemNotFoundError(KassaError):
    """Admin edit targeted an id that is not in the catalog."""


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or the error explaining why there is none."""

    value: T | None = None
    error: KassaError | None = None

    @property
    def is_ok(self) -> bool:
        return self.error is None

    @staticmethod
    def ok(value: T) -> "Result[T]":
        return Result(value=value)

    @staticmethod
    def fail(error: KassaError) -> "Result[T]":
        return Result(error=error)
