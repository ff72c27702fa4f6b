"""
Solver Results

Every TVM solver returns either Ok(value) or Err(kind, message) so callers
can tell a failure from a number without sentinel values.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Union


class ErrorKind(str, enum.Enum):
    """Classification of solver failures."""

    INVALID_INPUT = "invalid_input"
    UNDEFINED_RESULT = "undefined_result"
    NON_CONVERGENCE = "non_convergence"
    NUMERIC_OVERFLOW = "numeric_overflow"


class TVMError(ValueError):
    """Raised when an Err result is unwrapped."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(frozen=True)
class Ok:
    """Successful solve."""

    value: float

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> float:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed solve with its classification."""

    kind: ErrorKind
    message: str

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> float:
        raise TVMError(self.kind, self.message)


Result = Union[Ok, Err]


def first_error(*results: Optional[Err]) -> Optional[Err]:
    """Return the first non-None error, if any."""
    for result in results:
        if result is not None:
            return result
    return None
