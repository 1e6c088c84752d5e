import pytest

from status_updater.models.domain.rules_domain import parse_rule_config
from status_updater.services.accounts import ConnectedAccount


class FakeStatusClient:
    def __init__(self, fail_with: Exception | None = None):
        self.fail_with = fail_with
        self.profile_calls: list[tuple[str, str, int]] = []
        self.presence_calls: list[str] = []

    async def set_profile(self, text: str, emoji: str, expiration: int = 0) -> dict:
        self.profile_calls.append((text, emoji, expiration))
        if self.fail_with is not None:
            raise self.fail_with
        return {"ok": True}

    async def set_presence(self, state: str) -> dict:
        self.presence_calls.append(state)
        return {"ok": True}

    @property
    def attempts(self) -> int:
        return len(self.profile_calls)


@pytest.fixture
def rules_data():
    return {
        "workspaces": [
            {"name": "Test Workspace", "tokenEnvKey": "TEST_SLACK_TOKEN"},
            {"name": "Second Workspace", "tokenEnvKey": "SECOND_SLACK_TOKEN"},
        ],
        "workDays": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
        "workHours": {"start": "08:00", "end": "16:00"},
        "lunchBreak": {"start": "12:00", "end": "13:00"},
        "shortBreaks": [
            {"time": "10:30", "duration": 15},
            {"time": "15:00", "duration": 15},
        ],
        "holidays": [],
        "vacationPeriods": [],
        "outOfOffice": [],
        "statusMessages": {
            "active": "Active",
            "away": "Away",
            "lunch": "Lunch Time",
            "shortBreak": "Taking a Break",
        },
        "emojis": {
            "active": [":computer:"],
            "away": [":x:"],
            "lunch": [":sandwich:"],
            "shortBreak": [":coffee:"],
        },
    }


@pytest.fixture
def rule_config(rules_data):
    return parse_rule_config(rules_data)


@pytest.fixture
def fake_client():
    return FakeStatusClient()


@pytest.fixture
def make_account():
    def _make(name: str, fail_with: Exception | None = None) -> ConnectedAccount:
        return ConnectedAccount(name=name, client=FakeStatusClient(fail_with=fail_with))

    return _make
