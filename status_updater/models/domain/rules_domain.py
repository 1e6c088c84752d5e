# status_updater/models/domain/rules_domain.py
"""
Rule configuration domain models.
Declarative description of the working week, breaks, days off and
per-status messages/emojis. Validated once at load time and treated as
immutable afterwards.
"""

import datetime as dt
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

MINUTES_PER_DAY = 24 * 60


class RuleConfigError(Exception):
    """Raised when the rule configuration is malformed."""

    def __init__(self, message: str, source: str | None = None, errors: list[dict] | None = None):
        super().__init__(message)
        self.source = source
        self.errors = errors or []


class Weekday(str, Enum):
    """Day of the week, named as in configuration files."""

    SUNDAY = "Sunday"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"

    @classmethod
    def of(cls, moment: dt.date) -> "Weekday":
        """Weekday of a date or datetime."""
        return _ISO_ORDER[moment.weekday()]

    @property
    def cron_number(self) -> int:
        """Cron day-of-week number (Sunday=0)."""
        return _CRON_ORDER.index(self)


_ISO_ORDER = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
)
_CRON_ORDER = (Weekday.SUNDAY,) + _ISO_ORDER[:6]

ALL_DAYS = frozenset(Weekday)
DEFAULT_WORK_DAYS = frozenset(_ISO_ORDER[:5])


class StatusKind(str, Enum):
    """Classification of a decided status. Values are the configuration keys."""

    ACTIVE = "active"
    AWAY = "away"
    LUNCH = "lunch"
    SHORT_BREAK = "shortBreak"
    HOLIDAY = "holiday"
    VACATION = "vacation"
    WEEKEND = "weekend"
    OUT_OF_OFFICE = "outOfOffice"


DEFAULT_STATUS_MESSAGES: dict[StatusKind, str] = {
    StatusKind.ACTIVE: "Active",
    StatusKind.AWAY: "Away",
    StatusKind.LUNCH: "Lunch Break",
    StatusKind.SHORT_BREAK: "Short Break",
    StatusKind.HOLIDAY: "On Holiday",
    StatusKind.VACATION: "On Vacation",
    StatusKind.WEEKEND: "Weekend Mode",
    StatusKind.OUT_OF_OFFICE: "Out of Office",
}

DEFAULT_EMOJIS: dict[StatusKind, tuple[str, ...]] = {
    StatusKind.ACTIVE: (
        ":working-from-home:",
        ":computer:",
        ":desktop_computer:",
        ":technologist:",
        ":workinprogress:",
        ":nerd_face:",
    ),
    StatusKind.AWAY: (":x:", ":door:"),
    StatusKind.LUNCH: (
        ":sandwich:",
        ":pizza:",
        ":hamburger:",
        ":ramen:",
        ":bento:",
        ":curry:",
        ":sushi:",
    ),
    StatusKind.SHORT_BREAK: (":coffee:", ":tea:", ":walking:", ":brain:"),
}

# Kinds that borrow the away emojis unless given their own list
AWAY_EMOJI_FALLBACK = (
    StatusKind.HOLIDAY,
    StatusKind.VACATION,
    StatusKind.WEEKEND,
    StatusKind.OUT_OF_OFFICE,
)


def minute_of_day(moment: dt.time | dt.datetime) -> int:
    """Minutes since midnight, ignoring seconds."""
    return moment.hour * 60 + moment.minute


def _normalize_weekday(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().capitalize()
    return value


def _merge_emojis(configured: dict[StatusKind, tuple[str, ...]]) -> dict[StatusKind, tuple[str, ...]]:
    merged = {**DEFAULT_EMOJIS, **configured}
    for kind in AWAY_EMOJI_FALLBACK:
        if kind not in configured:
            merged[kind] = merged[StatusKind.AWAY]
    return merged


class _RuleModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class TimeRange(_RuleModel):
    """Half-open [start, end) time-of-day window."""

    start: dt.time
    end: dt.time

    @model_validator(mode="after")
    def _check_order(self) -> "TimeRange":
        if minute_of_day(self.end) <= minute_of_day(self.start):
            raise ValueError(f"range end {self.end:%H:%M} must be after start {self.start:%H:%M}")
        return self

    @property
    def start_minute(self) -> int:
        return minute_of_day(self.start)

    @property
    def end_minute(self) -> int:
        return minute_of_day(self.end)


class ShortBreak(_RuleModel):
    """A short break starting at a time of day and lasting a number of minutes."""

    time: dt.time
    duration_minutes: int = Field(
        validation_alias=AliasChoices("duration", "durationMinutes", "duration_minutes"),
        gt=0,
    )

    @model_validator(mode="after")
    def _check_same_day(self) -> "ShortBreak":
        if self.end_minute > MINUTES_PER_DAY:
            raise ValueError(f"short break at {self.time:%H:%M} must end before midnight")
        return self

    @property
    def start_minute(self) -> int:
        return minute_of_day(self.time)

    @property
    def end_minute(self) -> int:
        return self.start_minute + self.duration_minutes

    @property
    def end_time(self) -> dt.time:
        """End time of day; midnight when the break runs to the end of the day."""
        end = self.end_minute % MINUTES_PER_DAY
        return dt.time(end // 60, end % 60)


class Holiday(_RuleModel):
    """A single day off, optionally with its own status message."""

    day: dt.date = Field(validation_alias=AliasChoices("day", "date"))
    message: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_date(cls, data: Any) -> Any:
        # Legacy configs list holidays as plain "YYYY-MM-DD" strings
        if isinstance(data, (str, dt.date)):
            return {"day": data}
        return data


class VacationPeriod(_RuleModel):
    """Inclusive [start, end] date range."""

    start: dt.date
    end: dt.date

    @model_validator(mode="after")
    def _check_order(self) -> "VacationPeriod":
        if self.end < self.start:
            raise ValueError(f"vacation end {self.end} is before start {self.start}")
        return self


class OutOfOfficeRule(_RuleModel):
    """
    Out-of-office exception. Exactly one of the three forms:

    - ``{"day": "Friday"}``: the whole weekday
    - ``{"time": "09:00", "duration": 60}``: a window of minutes
    - ``{"hour": {"start": "15:00", "end": "18:00"}}``: a time-of-day range
    """

    day: Weekday | None = None
    time: dt.time | None = None
    duration_minutes: int | None = Field(
        default=None,
        validation_alias=AliasChoices("duration", "durationMinutes", "duration_minutes"),
        gt=0,
    )
    hour_range: TimeRange | None = Field(
        default=None,
        validation_alias=AliasChoices("hour", "hourRange", "hour_range"),
    )
    message: str | None = None

    @field_validator("day", mode="before")
    @classmethod
    def _normalize_day(cls, value: Any) -> Any:
        return _normalize_weekday(value)

    @model_validator(mode="after")
    def _check_single_form(self) -> "OutOfOfficeRule":
        forms = [self.day is not None, self.time is not None, self.hour_range is not None]
        if sum(forms) != 1:
            raise ValueError("out-of-office rule needs exactly one of 'day', 'time' or 'hour'")
        if self.time is not None:
            if self.duration_minutes is None:
                raise ValueError("out-of-office 'time' rule needs a 'duration'")
            if minute_of_day(self.time) + self.duration_minutes > MINUTES_PER_DAY:
                raise ValueError(f"out-of-office window at {self.time:%H:%M} must end before midnight")
        elif self.duration_minutes is not None:
            raise ValueError("'duration' only applies to out-of-office 'time' rules")
        return self

    @property
    def form(self) -> str:
        if self.day is not None:
            return "day"
        if self.time is not None:
            return "time"
        return "hour_range"

    @property
    def window(self) -> tuple[int, int] | None:
        """[start, end) minute window for time and hour-range rules."""
        if self.time is not None:
            start = minute_of_day(self.time)
            return start, start + self.duration_minutes
        if self.hour_range is not None:
            return self.hour_range.start_minute, self.hour_range.end_minute
        return None


class Account(_RuleModel):
    """A connected workspace; the token lives in the named environment variable."""

    name: str = Field(min_length=1)
    token_env_key: str = Field(
        min_length=1,
        validation_alias=AliasChoices("tokenEnvKey", "token_env_key", "credentialRef", "credential_ref"),
    )


class RuleConfig(_RuleModel):
    """Complete rule set. Absent fields take the built-in defaults."""

    work_days: frozenset[Weekday] = DEFAULT_WORK_DAYS
    work_hours: TimeRange = TimeRange(start=dt.time(8, 0), end=dt.time(16, 0))
    lunch_break: TimeRange = TimeRange(start=dt.time(12, 0), end=dt.time(13, 0))
    short_breaks: tuple[ShortBreak, ...] = (
        ShortBreak(time=dt.time(10, 30), duration_minutes=15),
        ShortBreak(time=dt.time(15, 0), duration_minutes=15),
    )
    holidays: tuple[Holiday, ...] = ()
    vacation_periods: tuple[VacationPeriod, ...] = ()
    out_of_office: tuple[OutOfOfficeRule, ...] = ()
    status_messages: dict[StatusKind, str] = Field(default_factory=lambda: dict(DEFAULT_STATUS_MESSAGES))
    emojis: dict[StatusKind, tuple[str, ...]] = Field(default_factory=lambda: _merge_emojis({}))
    accounts: tuple[Account, ...] = Field(
        default=(Account(name="Default Workspace", token_env_key="SLACK_TOKEN"),),
        validation_alias=AliasChoices("workspaces", "accounts"),
    )

    @field_validator("work_days", mode="before")
    @classmethod
    def _normalize_work_days(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple, set, frozenset)):
            return [_normalize_weekday(day) for day in value]
        return value

    @field_validator("status_messages", mode="after")
    @classmethod
    def _fill_messages(cls, value: dict[StatusKind, str]) -> dict[StatusKind, str]:
        return {**DEFAULT_STATUS_MESSAGES, **value}

    @field_validator("emojis", mode="after")
    @classmethod
    def _fill_emojis(cls, value: dict[StatusKind, tuple[str, ...]]) -> dict[StatusKind, tuple[str, ...]]:
        for kind, candidates in value.items():
            if not candidates:
                raise ValueError(f"emoji list for '{kind.value}' must not be empty")
        return _merge_emojis(value)

    def message_for(self, kind: StatusKind) -> str:
        return self.status_messages.get(kind) or DEFAULT_STATUS_MESSAGES[kind]

    def emojis_for(self, kind: StatusKind) -> tuple[str, ...]:
        return self.emojis[kind]

    @property
    def non_work_days(self) -> frozenset[Weekday]:
        return ALL_DAYS - self.work_days

    def summary(self) -> dict:
        """Compact description for startup logging."""
        return {
            "work_days": sorted(day.value for day in self.work_days),
            "work_hours": f"{self.work_hours.start:%H:%M}-{self.work_hours.end:%H:%M}",
            "lunch_break": f"{self.lunch_break.start:%H:%M}-{self.lunch_break.end:%H:%M}",
            "short_breaks": [f"{b.time:%H:%M}+{b.duration_minutes}m" for b in self.short_breaks],
            "holidays": len(self.holidays),
            "vacation_periods": len(self.vacation_periods),
            "out_of_office_rules": len(self.out_of_office),
            "accounts": [account.name for account in self.accounts],
        }


def parse_rule_config(raw: str | bytes | dict, source: str | None = None) -> RuleConfig:
    """
    Validate a rule document.

    Raises:
        RuleConfigError: If any field is missing, malformed or inconsistent
    """
    try:
        if isinstance(raw, dict):
            return RuleConfig.model_validate(raw)
        return RuleConfig.model_validate_json(raw)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors()
        )
        raise RuleConfigError(
            f"Invalid rule configuration{f' in {source}' if source else ''}: {details}",
            source=source,
            errors=e.errors(include_url=False),
        ) from e


def load_rule_config(path: Path) -> RuleConfig:
    """Load rules from a JSON file, or the built-in defaults when the file does not exist."""
    if not path.exists():
        return RuleConfig()
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise RuleConfigError(f"Could not read rule configuration {path}: {e}", source=str(path)) from e
    return parse_rule_config(raw, source=str(path))
