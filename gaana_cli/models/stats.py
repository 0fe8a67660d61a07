"""
Dataclass for tracking resolve session statistics.
"""

from collections import Counter
from dataclasses import dataclass, field


@dataclass
class ResolveStats:
    """Counts the outcome of every quality attempt made in a session."""

    resolved: int = 0
    unavailable: int = 0
    transport_failures: int = 0
    decode_failures: Counter = field(default_factory=Counter)
    tracks_requested: set[str] = field(default_factory=set)

    @property
    def attempts(self) -> int:
        return (
            self.resolved
            + self.unavailable
            + self.transport_failures
            + sum(self.decode_failures.values())
        )

    def record_decode_failure(self, failure) -> None:
        """Counts a decode failure under its ``DecodeFailure`` value."""
        self.decode_failures[failure.value] += 1
