"""Explicit success/failure values for storage interactions."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar, Union

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap_or(self, default: Any) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    reason: str
    exc: Optional[BaseException] = None

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap_or(self, default: Any) -> Any:
        return default


Result = Union[Ok[T], Err]


def capture(fn: Callable[..., T], *args: Any, reason: str) -> Result:
    """Run a storage interaction, turning any exception into an Err."""
    try:
        return Ok(fn(*args))
    except Exception as exc:
        logger.warning("%s: %s", reason, exc, exc_info=exc)
        return Err(reason, exc)
