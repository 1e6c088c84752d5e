"""
Status resolution.

Turns a point in time into exactly one StatusDecision. Guards are evaluated
in a fixed order and the first match wins:

    out-of-office > holiday > vacation > weekend > lunch > short break > active > away

The last three only apply inside work hours; away covers the remainder of a
work day.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

from status_updater.infrastructure.observability.logging import get_logger
from status_updater.models.domain.rules_domain import RuleConfig, StatusKind, minute_of_day
from status_updater.models.domain.status_domain import Presence, StatusDecision
from status_updater.services import time_rules
from status_updater.services.emoji_selector import EmojiSelector, RandomEmojiSelector

logger = get_logger(__name__)

LUNCH_EXPIRATION = timedelta(minutes=60)

# (kind, message override, presence, expiration)
Match = tuple[StatusKind, str | None, Presence, datetime | None]
Guard = Callable[[datetime], Match | None]


class StatusResolver:
    """Precedence engine mapping an instant to a StatusDecision."""

    def __init__(self, config: RuleConfig, emoji_selector: EmojiSelector | None = None):
        self.config = config
        self.emoji_selector = emoji_selector or RandomEmojiSelector(config)
        self._guards: tuple[Guard, ...] = (
            self._out_of_office,
            self._holiday,
            self._vacation,
            self._weekend,
            self._lunch,
            self._short_break,
            self._active,
        )

    def resolve(self, instant: datetime) -> StatusDecision:
        """
        Decide the status for an instant.

        Args:
            instant: Wall-clock time to evaluate (aware or naive)

        Returns:
            StatusDecision: The single decision for this instant
        """
        match = self._first_match(instant)
        kind, message, presence, expires_at = match

        decision = StatusDecision(
            kind=kind,
            text=message or self.config.message_for(kind),
            emoji=self.emoji_selector.pick(kind, instant.date()),
            presence=presence,
            expires_at=expires_at,
        )

        logger.debug(
            "Status resolved",
            instant=instant.isoformat(),
            kind=kind.value,
            status_text=decision.text,
            presence=presence.value,
        )
        return decision

    def _first_match(self, instant: datetime) -> Match:
        for guard in self._guards:
            match = guard(instant)
            if match is not None:
                return match
        return StatusKind.AWAY, None, Presence.AWAY, None

    def _out_of_office(self, instant: datetime) -> Match | None:
        rule = time_rules.find_out_of_office(instant, self.config)
        if rule is None:
            return None
        return StatusKind.OUT_OF_OFFICE, rule.message, Presence.AWAY, None

    def _holiday(self, instant: datetime) -> Match | None:
        holiday = time_rules.find_holiday(instant, self.config)
        if holiday is None:
            return None
        return StatusKind.HOLIDAY, holiday.message, Presence.AWAY, None

    def _vacation(self, instant: datetime) -> Match | None:
        if not time_rules.is_vacation(instant, self.config):
            return None
        return StatusKind.VACATION, None, Presence.AWAY, None

    def _weekend(self, instant: datetime) -> Match | None:
        if not time_rules.is_weekend(instant, self.config):
            return None
        return StatusKind.WEEKEND, None, Presence.AWAY, None

    def _lunch(self, instant: datetime) -> Match | None:
        if not (time_rules.is_work_hours(instant, self.config) and time_rules.is_lunch(instant, self.config)):
            return None
        return StatusKind.LUNCH, None, Presence.ACTIVE, instant + LUNCH_EXPIRATION

    def _short_break(self, instant: datetime) -> Match | None:
        if not time_rules.is_work_hours(instant, self.config):
            return None
        short_break = time_rules.find_short_break(instant, self.config)
        if short_break is None:
            return None
        # Expire when the break ends; at the break's own trigger this is the full duration
        remaining = short_break.end_minute - minute_of_day(instant)
        expires_at = instant + timedelta(minutes=remaining)
        return StatusKind.SHORT_BREAK, None, Presence.ACTIVE, expires_at

    def _active(self, instant: datetime) -> Match | None:
        if not time_rules.is_work_hours(instant, self.config):
            return None
        return StatusKind.ACTIVE, None, Presence.ACTIVE, None
