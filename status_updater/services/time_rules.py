"""
Time rule predicates.

Stateless checks of a point in time against a RuleConfig. Every check reads
only the wall-clock fields of the instant it is given, so callers control
the timezone by the datetime they pass in.
"""

from datetime import date, datetime, time

from status_updater.models.domain.rules_domain import (
    Holiday,
    OutOfOfficeRule,
    RuleConfig,
    ShortBreak,
    Weekday,
    minute_of_day,
)

LEGACY_WEEKEND = frozenset({Weekday.SATURDAY, Weekday.SUNDAY})


def is_work_hours(instant: datetime, config: RuleConfig) -> bool:
    minute = minute_of_day(instant)
    return config.work_hours.start_minute <= minute < config.work_hours.end_minute


def is_lunch(instant: datetime, config: RuleConfig) -> bool:
    minute = minute_of_day(instant)
    return config.lunch_break.start_minute <= minute < config.lunch_break.end_minute


def find_short_break(instant: datetime, config: RuleConfig) -> ShortBreak | None:
    """Short break whose [start, start + duration) window contains the instant."""
    minute = minute_of_day(instant)
    for short_break in config.short_breaks:
        if short_break.start_minute <= minute < short_break.end_minute:
            return short_break
    return None


def find_holiday(instant: date, config: RuleConfig) -> Holiday | None:
    """Holiday entry for the instant's calendar date, if any."""
    day = _calendar_date(instant)
    for holiday in config.holidays:
        if holiday.day == day:
            return holiday
    return None


def is_holiday(instant: date, config: RuleConfig) -> bool:
    return find_holiday(instant, config) is not None


def is_vacation(instant: date, config: RuleConfig) -> bool:
    """True when the calendar date lies in any vacation period, both ends inclusive."""
    day = _calendar_date(instant)
    return any(period.start <= day <= period.end for period in config.vacation_periods)


def find_out_of_office(
    instant: datetime,
    config: RuleConfig,
    day: Weekday | None = None,
    at: time | None = None,
) -> OutOfOfficeRule | None:
    """
    First out-of-office rule matching the instant.

    Args:
        instant: Point in time being evaluated
        config: Rule configuration
        day: Evaluate day rules against this weekday instead of the instant's
        at: Evaluate time and hour-range rules against this time of day instead of the instant's

    Returns:
        OutOfOfficeRule | None: The matching rule, in configuration order
    """
    weekday = day if day is not None else Weekday.of(instant)
    minute = minute_of_day(at if at is not None else instant)

    for rule in config.out_of_office:
        if rule.day is not None:
            if rule.day == weekday:
                return rule
            continue
        start, end = rule.window
        if start <= minute < end:
            return rule
    return None


def is_out_of_office(
    instant: datetime,
    config: RuleConfig,
    day: Weekday | None = None,
    at: time | None = None,
) -> bool:
    return find_out_of_office(instant, config, day=day, at=at) is not None


def is_weekend(instant: date, config: RuleConfig) -> bool:
    """True when the instant's weekday is not a configured work day."""
    return Weekday.of(instant) not in config.work_days


def is_legacy_weekend(instant: date) -> bool:
    """Fixed Saturday/Sunday check. Not used for decisions; see is_weekend."""
    return Weekday.of(instant) in LEGACY_WEEKEND


def _calendar_date(instant: date) -> date:
    if isinstance(instant, datetime):
        return instant.date()
    return instant
