"""
Result<T> for per-item outcomes in batch operations.

Batch operations (such as registering one reminder per lesson) must not
abort when a single item fails. Each item produces a Result instead, and
the caller sorts successes from failures afterwards.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar


T = TypeVar('T')


class ResultStatus(Enum):
    """Status of a Result."""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class Result(Generic[T]):
    """
    Outcome of a single operation inside a batch.

    Attributes:
        status: SUCCESS or FAILURE
        value: Produced value (None on failure)
        error: Exception that caused the failure (None on success)
        message: Optional human-readable description

    Examples:
        >>> outcome = Result.success(record, "Reminder registered")
        >>> if outcome.is_failure:
        ...     skipped.append(lesson.id)
    """

    status: ResultStatus
    value: Optional[T] = None
    error: Optional[Exception] = None
    message: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status == ResultStatus.FAILURE

    @classmethod
    def success(cls, value: T, message: Optional[str] = None) -> 'Result[T]':
        """Create a successful result carrying ``value``."""
        return cls(status=ResultStatus.SUCCESS, value=value, message=message)

    @classmethod
    def failure(
        cls,
        message: str,
        error: Optional[Exception] = None
    ) -> 'Result[T]':
        """Create a failed result with a message and the causing error."""
        return cls(status=ResultStatus.FAILURE, message=message, error=error)

    def unwrap(self) -> T:
        """
        Return the value of a successful result.

        Raises:
            ValueError: If the result is a failure
        """
        if self.is_failure:
            raise ValueError(f"Cannot unwrap failure result: {self.message}")
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return the value on success, ``default`` otherwise."""
        return self.value if self.is_success else default
