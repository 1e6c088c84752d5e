import json

import pytest

from status_updater.jobs import status_update_job, worker
from status_updater.services.accounts import NoUsableAccountsError


@pytest.mark.asyncio
async def test_run_worker_runs_job(monkeypatch):
    called = {"ok": False}

    async def dummy_job():
        called["ok"] = True

    monkeypatch.setitem(worker.JOB_REGISTRY, "dummy", dummy_job)

    await worker.run_worker("dummy")

    assert called["ok"] is True


@pytest.mark.asyncio
async def test_run_worker_unknown_job():
    with pytest.raises(ValueError):
        await worker.run_worker("missing")


def test_registry_has_status_jobs():
    assert set(worker.JOB_REGISTRY) == {"scheduler", "once", "triggers"}


def test_resolve_job_name_from_env(monkeypatch):
    monkeypatch.setattr(worker.sys, "argv", ["status-updater"])
    monkeypatch.setenv("STATUS_UPDATER_JOB", " Once ")

    assert worker._resolve_job_name() == "once"


@pytest.fixture
def run_main(monkeypatch):
    # setup_logging would reconfigure structlog for the rest of the session
    monkeypatch.setattr(worker, "setup_logging", lambda **kwargs: None)

    def _run(job_name: str) -> None:
        monkeypatch.setattr(worker.sys, "argv", ["status-updater", job_name])
        worker.main()

    return _run


def test_main_exits_1_when_no_account_is_usable(run_main, monkeypatch):
    async def no_accounts():
        raise NoUsableAccountsError("No usable Slack account configured")

    monkeypatch.setitem(worker.JOB_REGISTRY, "once", no_accounts)

    with pytest.raises(SystemExit) as exc:
        run_main("once")

    assert exc.value.code == 1


def test_main_exits_1_when_tokens_are_missing(run_main, monkeypatch, tmp_path, rules_data):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(rules_data), encoding="utf-8")
    monkeypatch.setattr(status_update_job.settings, "rules_path", path)
    monkeypatch.delenv("TEST_SLACK_TOKEN", raising=False)
    monkeypatch.delenv("SECOND_SLACK_TOKEN", raising=False)

    with pytest.raises(SystemExit) as exc:
        run_main("once")

    assert exc.value.code == 1


def test_main_exits_1_on_malformed_rule_file(run_main, monkeypatch, tmp_path):
    path = tmp_path / "rules.json"
    path.write_text('{"workHours": {"start": "17:00", "end": "09:00"', encoding="utf-8")
    monkeypatch.setattr(status_update_job.settings, "rules_path", path)

    with pytest.raises(SystemExit) as exc:
        run_main("triggers")

    assert exc.value.code == 1


def test_main_exits_1_on_invalid_rules(run_main, monkeypatch, tmp_path, rules_data):
    rules_data["workHours"] = {"start": "17:00", "end": "09:00"}
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(rules_data), encoding="utf-8")
    monkeypatch.setattr(status_update_job.settings, "rules_path", path)

    with pytest.raises(SystemExit) as exc:
        run_main("once")

    assert exc.value.code == 1
