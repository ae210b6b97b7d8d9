"""Result Type — explicit success/failure values returned by storage mutations.

Invariants:
    - Storage mutations return Ok | Err, they never raise for a state mismatch
    - Infrastructure failures still raise (StorageUnavailableError), they are not Err values

Design Decisions:
    - StateConflict carries the record as it exists after the failed condition, so the
      service maps it to a FailureKind through the pure state machine
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from maintainership.core.domain_types import MaintainershipRecord

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


Result = Ok[T] | Err[E]


@dataclass(frozen=True)
class StateConflict:
    """A conditional write lost: the pair is not in the expected state."""
    current: MaintainershipRecord | None
