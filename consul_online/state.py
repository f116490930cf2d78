"""
Per-run state of the poll loop: the deadline, attempt outcomes and decisions.

Only DeadlineState.start survives between attempts; everything else is
derived again on each iteration.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from .constants import STATUS_ONLINE, STATUS_NOT_READY


@dataclass(frozen=True)
class DeadlineState:
    start: float                       # Monotonic timestamp, captured once
    global_timeout: Optional[float] = None

    def elapsed(self, now: float) -> float:
        return max(0.0, now - self.start)

    def remaining(self, now: float) -> Optional[float]:
        """Seconds left in the budget, clamped at 0. None when unbounded."""
        if self.global_timeout is None:
            return None
        return max(0.0, self.global_timeout - self.elapsed(now))

    def expired(self, now: float) -> bool:
        return self.global_timeout is not None and self.elapsed(now) > self.global_timeout


class OutcomeKind(enum.Enum):
    SUCCESS = "success"
    NOT_READY = "not_ready"
    OTHER_STATUS = "other_status"
    TRANSPORT_FAILURE = "transport_failure"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    status: Optional[int] = None
    cause: Optional[BaseException] = None

    @classmethod
    def from_status(cls, status):
        if status == STATUS_ONLINE:
            return cls(OutcomeKind.SUCCESS, status=status)
        if status == STATUS_NOT_READY:
            return cls(OutcomeKind.NOT_READY, status=status)
        return cls(OutcomeKind.OTHER_STATUS, status=status)

    @classmethod
    def transport_failure(cls, cause):
        return cls(OutcomeKind.TRANSPORT_FAILURE, cause=cause)

    def describe(self):
        if self.kind is OutcomeKind.TRANSPORT_FAILURE:
            return str(self.cause)
        return f"HTTP {self.status}"


class Decision(enum.Enum):
    CONTINUE = "continue"
    TERMINATE_SUCCESS = "terminate_success"
    TERMINATE_FATAL = "terminate_fatal"
    TERMINATE_TIMED_OUT = "terminate_timed_out"
