"""
Trigger derivation.

Expands a RuleConfig into the recurring wall-clock instants at which the
status has to be re-evaluated. Triggers only say *when* to look again; the
decision itself is always recomputed at fire time.
"""

from datetime import time

from status_updater.models.domain.rules_domain import ALL_DAYS, MINUTES_PER_DAY, RuleConfig
from status_updater.models.domain.status_domain import TriggerSpec

MIDNIGHT = time(0, 0)


def derive_triggers(config: RuleConfig) -> list[TriggerSpec]:
    """
    Build the ordered trigger list for a rule set.

    Order: work start/end, lunch start/end, each short break's start/end,
    non-work-day midnight, daily midnight, then out-of-office boundaries.
    Work-day triggers are left out when no work days are configured, and
    windows ending at midnight get no end trigger since daily_midnight
    already fires then.
    """
    work_days = config.work_days
    triggers = []

    if work_days:
        triggers.extend(
            [
                TriggerSpec(work_days, config.work_hours.start, "work_start"),
                TriggerSpec(work_days, config.work_hours.end, "work_end"),
                TriggerSpec(work_days, config.lunch_break.start, "lunch_start"),
                TriggerSpec(work_days, config.lunch_break.end, "lunch_end"),
            ]
        )
        for index, short_break in enumerate(config.short_breaks):
            triggers.append(TriggerSpec(work_days, short_break.time, f"short_break_start:{index}"))
            if short_break.end_minute < MINUTES_PER_DAY:
                triggers.append(TriggerSpec(work_days, short_break.end_time, f"short_break_end:{index}"))

    # Nothing to schedule when every day is a work day
    if config.non_work_days:
        triggers.append(TriggerSpec(config.non_work_days, MIDNIGHT, "non_work_day_midnight"))
    triggers.append(TriggerSpec(ALL_DAYS, MIDNIGHT, "daily_midnight"))

    triggers.extend(_out_of_office_triggers(config))
    return triggers


def _out_of_office_triggers(config: RuleConfig) -> list[TriggerSpec]:
    triggers = []
    for index, rule in enumerate(config.out_of_office):
        if rule.day is not None:
            triggers.append(TriggerSpec(frozenset({rule.day}), MIDNIGHT, f"ooo_day:{index}"))
            continue
        start, end = rule.window
        triggers.append(TriggerSpec(ALL_DAYS, _time_of(start), f"ooo_start:{index}"))
        if end < MINUTES_PER_DAY:
            triggers.append(TriggerSpec(ALL_DAYS, _time_of(end), f"ooo_end:{index}"))
    return triggers


def _time_of(minute: int) -> time:
    return time(minute // 60, minute % 60)


def describe_triggers(triggers: list[TriggerSpec]) -> list[dict]:
    """Log-friendly rendering of a trigger list."""
    return [{"reason": trigger.reason, "cron": trigger.to_cron()} for trigger in triggers]
