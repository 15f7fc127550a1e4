"""Reconcile outcomes and their precedence."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Outcome(enum.IntEnum):
    """What the caller should do after a reconcile step.

    Values are ordered by urgency so that merging keeps the highest.
    """

    DONE = 0
    REQUEUE_AFTER = 1
    REQUEUE = 2
    ERROR = 3


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a reconcile step: no-op, requeue now, requeue later or failure."""

    outcome: Outcome = Outcome.DONE
    delay: float | None = None
    error: Exception | None = None

    @classmethod
    def done(cls) -> ReconcileResult:
        return cls()

    @classmethod
    def requeue(cls) -> ReconcileResult:
        return cls(Outcome.REQUEUE)

    @classmethod
    def requeue_after(cls, delay: float) -> ReconcileResult:
        return cls(Outcome.REQUEUE_AFTER, delay=delay)

    @classmethod
    def failed(cls, error: Exception) -> ReconcileResult:
        return cls(Outcome.ERROR, error=error)

    @property
    def is_zero(self) -> bool:
        """True when nothing further needs to happen."""
        return self.outcome is Outcome.DONE

    def merge(self, other: ReconcileResult) -> ReconcileResult:
        """Combine two results; the most urgent one wins.

        Two delayed requeues collapse to the shorter delay.
        """
        if self.outcome is Outcome.REQUEUE_AFTER and other.outcome is Outcome.REQUEUE_AFTER:
            return self if (self.delay or 0) <= (other.delay or 0) else other
        return self if self.outcome >= other.outcome else other
