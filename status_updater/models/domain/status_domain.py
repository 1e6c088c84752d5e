# status_updater/models/domain/status_domain.py
"""
Status Domain Models
Values produced by the decision engine and consumed by dispatch and scheduling.
"""

from dataclasses import dataclass
from datetime import datetime, time
from enum import Enum

from status_updater.models.domain.rules_domain import StatusKind, Weekday


class Presence(str, Enum):
    """Presence flag; values are what the presence endpoint expects."""

    ACTIVE = "auto"
    AWAY = "away"


@dataclass(frozen=True, slots=True)
class StatusDecision:
    """The status that should be active at one evaluated instant."""

    kind: StatusKind
    text: str
    emoji: str
    presence: Presence
    expires_at: datetime | None = None

    @property
    def is_away(self) -> bool:
        return self.presence is Presence.AWAY

    def expiration_epoch(self) -> int:
        """Expiration as epoch seconds; 0 means the status never expires."""
        if self.expires_at is None:
            return 0
        return int(self.expires_at.timestamp())

    def expires_in_minutes(self, now: datetime) -> int | None:
        if self.expires_at is None:
            return None
        return max(0, round((self.expires_at - now).total_seconds() / 60))


@dataclass(frozen=True, slots=True)
class TriggerSpec:
    """Recurring wall-clock instant at which the status must be re-evaluated."""

    days: frozenset[Weekday]
    at: time
    reason: str

    def matches(self, moment: datetime) -> bool:
        return (
            Weekday.of(moment) in self.days
            and moment.hour == self.at.hour
            and moment.minute == self.at.minute
        )

    def to_cron(self) -> str:
        """Five-field cron rendering, for logs."""
        if len(self.days) == len(Weekday):
            day_field = "*"
        else:
            day_field = ",".join(str(n) for n in sorted(day.cron_number for day in self.days))
        return f"{self.at.minute} {self.at.hour} * * {day_field}"
