"""
Tests for status precedence and decision contents.
"""

import datetime as dt
import random

import pytest

from status_updater.models.domain.rules_domain import RuleConfig, StatusKind, parse_rule_config
from status_updater.models.domain.status_domain import Presence
from status_updater.services.emoji_selector import RandomEmojiSelector
from status_updater.services.status_resolver import StatusResolver

WEDNESDAY = dt.date(2025, 1, 8)
FRIDAY = dt.date(2025, 1, 10)
SATURDAY = dt.date(2025, 1, 11)


def at(day: dt.date, hour: int, minute: int = 0) -> dt.datetime:
    return dt.datetime.combine(day, dt.time(hour, minute))


@pytest.fixture
def resolver(rule_config):
    return StatusResolver(rule_config)


def test_wednesday_lunch(resolver):
    instant = at(WEDNESDAY, 12, 30)

    decision = resolver.resolve(instant)

    assert decision.kind is StatusKind.LUNCH
    assert decision.text == "Lunch Time"
    assert decision.emoji == ":sandwich:"
    assert decision.presence is Presence.ACTIVE
    assert decision.expires_at == instant + dt.timedelta(minutes=60)


def test_lunch_expires_exactly_one_hour_later(resolver):
    instant = dt.datetime(2025, 1, 8, 12, 0, tzinfo=dt.UTC)

    decision = resolver.resolve(instant)

    assert decision.expiration_epoch() == int(instant.timestamp()) + 3600


def test_wednesday_morning_is_active(resolver):
    decision = resolver.resolve(at(WEDNESDAY, 9))

    assert decision.kind is StatusKind.ACTIVE
    assert decision.text == "Active"
    assert decision.emoji == ":computer:"
    assert decision.presence is Presence.ACTIVE
    assert decision.expires_at is None
    assert decision.expiration_epoch() == 0


def test_wednesday_evening_is_away(resolver):
    decision = resolver.resolve(at(WEDNESDAY, 18))

    assert decision.kind is StatusKind.AWAY
    assert decision.text == "Away"
    assert decision.presence is Presence.AWAY


@pytest.mark.parametrize("hour", [0, 9, 12, 15, 23])
def test_saturday_is_weekend_all_day(resolver, hour):
    decision = resolver.resolve(at(SATURDAY, hour))

    assert decision.kind is StatusKind.WEEKEND
    assert decision.text == "Weekend Mode"
    assert decision.emoji == ":x:"
    assert decision.is_away


def test_short_break(resolver):
    instant = at(WEDNESDAY, 10, 30)

    decision = resolver.resolve(instant)

    assert decision.kind is StatusKind.SHORT_BREAK
    assert decision.text == "Taking a Break"
    assert decision.emoji == ":coffee:"
    assert decision.presence is Presence.ACTIVE
    assert decision.expires_at == instant + dt.timedelta(minutes=15)


def test_short_break_expires_when_break_ends(resolver):
    decision = resolver.resolve(at(WEDNESDAY, 10, 40))

    assert decision.expires_at == at(WEDNESDAY, 10, 45)


def test_short_break_outside_work_hours_is_ignored(rules_data):
    rules_data["shortBreaks"] = [{"time": "17:00", "duration": 15}]
    resolver = StatusResolver(parse_rule_config(rules_data))

    assert resolver.resolve(at(WEDNESDAY, 17, 5)).kind is StatusKind.AWAY


def test_holiday_beats_work_hours(rules_data):
    rules_data["holidays"] = [{"day": "2025-12-25", "message": "Christmas Day"}]
    resolver = StatusResolver(parse_rule_config(rules_data))

    # A Thursday, inside work hours
    decision = resolver.resolve(dt.datetime(2025, 12, 25, 10, 0))

    assert decision.kind is StatusKind.HOLIDAY
    assert decision.text == "Christmas Day"
    assert decision.presence is Presence.AWAY


def test_holiday_without_message_uses_configured_text(rules_data):
    rules_data["holidays"] = ["2025-01-08"]
    rules_data["statusMessages"]["holiday"] = "Day off"
    resolver = StatusResolver(parse_rule_config(rules_data))

    decision = resolver.resolve(at(WEDNESDAY, 12, 30))

    assert decision.kind is StatusKind.HOLIDAY
    assert decision.text == "Day off"


def test_vacation(rules_data):
    rules_data["vacationPeriods"] = [{"start": "2025-01-06", "end": "2025-01-08"}]
    resolver = StatusResolver(parse_rule_config(rules_data))

    decision = resolver.resolve(at(WEDNESDAY, 9))

    assert decision.kind is StatusKind.VACATION
    assert decision.text == "On Vacation"
    assert decision.is_away


def test_holiday_beats_vacation(rules_data):
    rules_data["holidays"] = ["2025-01-08"]
    rules_data["vacationPeriods"] = [{"start": "2025-01-06", "end": "2025-01-10"}]
    resolver = StatusResolver(parse_rule_config(rules_data))

    assert resolver.resolve(at(WEDNESDAY, 9)).kind is StatusKind.HOLIDAY


def test_vacation_beats_weekend(rules_data):
    rules_data["vacationPeriods"] = [{"start": "2025-01-10", "end": "2025-01-12"}]
    resolver = StatusResolver(parse_rule_config(rules_data))

    assert resolver.resolve(at(SATURDAY, 9)).kind is StatusKind.VACATION


@pytest.mark.parametrize("hour, minute", [(0, 0), (9, 0), (12, 30), (10, 35), (18, 0)])
def test_out_of_office_day_overrides_everything(rules_data, hour, minute):
    rules_data["outOfOffice"] = [{"day": "Friday", "message": "Half day"}]
    rules_data["holidays"] = ["2025-01-10"]
    resolver = StatusResolver(parse_rule_config(rules_data))

    decision = resolver.resolve(at(FRIDAY, hour, minute))

    assert decision.kind is StatusKind.OUT_OF_OFFICE
    assert decision.text == "Half day"
    assert decision.presence is Presence.AWAY
    assert decision.expires_at is None


def test_out_of_office_without_message_uses_fallback(rules_data):
    rules_data["outOfOffice"] = [{"hour": {"start": "14:00", "end": "16:00"}}]
    resolver = StatusResolver(parse_rule_config(rules_data))

    decision = resolver.resolve(at(WEDNESDAY, 14, 30))

    assert decision.kind is StatusKind.OUT_OF_OFFICE
    assert decision.text == "Out of Office"
    assert decision.emoji == ":x:"


def test_missing_messages_fall_back_to_defaults():
    resolver = StatusResolver(RuleConfig())

    assert resolver.resolve(at(WEDNESDAY, 12, 15)).text == "Lunch Break"
    assert resolver.resolve(at(SATURDAY, 12, 15)).text == "Weekend Mode"


def test_every_instant_resolves_to_one_kind(rule_config):
    resolver = StatusResolver(rule_config)
    start = dt.datetime(2025, 1, 6)

    seen = set()
    for step in range(7 * 24 * 4):
        decision = resolver.resolve(start + dt.timedelta(minutes=15 * step))
        assert isinstance(decision.kind, StatusKind)
        seen.add(decision.kind)

    assert seen == {
        StatusKind.ACTIVE,
        StatusKind.AWAY,
        StatusKind.LUNCH,
        StatusKind.SHORT_BREAK,
        StatusKind.WEEKEND,
    }


def test_seeded_selector_makes_decisions_deterministic():
    config = RuleConfig()
    first = StatusResolver(config, RandomEmojiSelector(config, rng=random.Random(7)))
    second = StatusResolver(config, RandomEmojiSelector(config, rng=random.Random(7)))

    instants = [at(WEDNESDAY, hour) for hour in range(24)]

    assert [first.resolve(i) for i in instants] == [second.resolve(i) for i in instants]
