"""
Status update job.

Wires the decision engine to the connected accounts: one evaluation at
startup, then one fresh evaluation at every derived trigger.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, tzinfo

from status_updater.config import Settings, settings
from status_updater.infrastructure.observability.logging import get_logger
from status_updater.jobs.scheduler import AsyncCronScheduler
from status_updater.models.domain.rules_domain import RuleConfig, load_rule_config
from status_updater.models.domain.status_domain import TriggerSpec
from status_updater.services.account_dispatcher import AccountDispatcher, DispatchResult
from status_updater.services.accounts import ConnectedAccount, build_accounts
from status_updater.services.emoji_selector import create_emoji_selector
from status_updater.services.schedule_deriver import derive_triggers, describe_triggers
from status_updater.services.slack.status_client import SlackStatusClient
from status_updater.services.status_resolver import StatusResolver

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class StatusContext:
    """Everything a trigger needs; built once at startup and never mutated."""

    config: RuleConfig
    accounts: tuple[ConnectedAccount, ...]
    resolver: StatusResolver
    dispatcher: AccountDispatcher
    tz: tzinfo | None = None
    clock: Callable[[], datetime] | None = None

    def now(self) -> datetime:
        if self.clock is not None:
            return self.clock()
        return datetime.now(self.tz)


class StatusUpdateJob:
    """Evaluates the current status and pushes it to every account."""

    def __init__(self, context: StatusContext):
        self.context = context
        self.last_run_time: datetime | None = None
        self.last_result: DispatchResult | None = None

    async def run_once(self, trigger: TriggerSpec | None = None) -> DispatchResult:
        """
        Resolve the status for the current instant and dispatch it.

        The decision is always recomputed here, so a work-day trigger on a
        holiday still yields the holiday status.
        """
        now = self.context.now()
        decision = self.context.resolver.resolve(now)

        logger.info(
            "Evaluating status",
            trigger=trigger.reason if trigger else "startup",
            kind=decision.kind.value,
            status_text=decision.text,
            emoji=decision.emoji,
            presence=decision.presence.value,
        )

        result = await self.context.dispatcher.dispatch(decision, self.context.accounts, now=now)
        self.last_run_time = now
        self.last_result = result
        return result

    async def on_trigger(self, trigger: TriggerSpec) -> None:
        try:
            await self.run_once(trigger)
        except Exception as e:
            logger.error(
                "Status update failed",
                trigger=trigger.reason,
                error=str(e),
                error_type=type(e).__name__,
            )

    def schedule(self, scheduler: AsyncCronScheduler) -> list[TriggerSpec]:
        """Register one callback per derived trigger."""
        triggers = derive_triggers(self.context.config)
        for trigger in triggers:
            scheduler.run_at(trigger, self.on_trigger)
        return triggers

    def get_job_status(self) -> dict:
        return {
            "job_name": "status_update",
            "accounts": [account.name for account in self.context.accounts],
            "debug": self.context.dispatcher.debug,
            "last_run_time": self.last_run_time.isoformat() if self.last_run_time else None,
            "last_result": self.last_result.to_dict() if self.last_result else None,
        }


def build_context(app_settings: Settings = settings) -> StatusContext:
    """
    Load rules, connect accounts and assemble the runtime context.

    Raises:
        RuleConfigError: If the rule file is malformed
        NoUsableAccountsError: If no workspace has a token
    """
    config = load_rule_config(app_settings.rules_path)
    if not app_settings.rules_path.exists():
        logger.warning("Rule file not found, using defaults", rules_path=str(app_settings.rules_path))

    def client_factory(token: str) -> SlackStatusClient:
        return SlackStatusClient(
            token,
            base_url=app_settings.slack_api_base_url,
            timeout=app_settings.slack_request_timeout,
        )

    accounts = build_accounts(config, client_factory)
    selector = create_emoji_selector(config, app_settings.emoji_policy)

    return StatusContext(
        config=config,
        accounts=accounts,
        resolver=StatusResolver(config, selector),
        dispatcher=AccountDispatcher(debug=app_settings.debug),
        tz=app_settings.tzinfo(),
    )


async def close_accounts(accounts: tuple[ConnectedAccount, ...]) -> None:
    for account in accounts:
        close = getattr(account.client, "close", None)
        if close is None:
            continue
        try:
            await close()
        except Exception as e:
            logger.error("Error closing account client", account=account.name, error=str(e))


# Background job entry points
async def start_status_scheduler(stop: asyncio.Event | None = None) -> None:
    """Initial status check, then run the trigger schedule until stopped."""
    context = build_context()
    job = StatusUpdateJob(context)
    scheduler = AsyncCronScheduler(tz=context.tz)

    triggers = job.schedule(scheduler)
    logger.info(
        "Status updater started",
        debug=context.dispatcher.debug,
        triggers=describe_triggers(triggers),
        **context.config.summary(),
    )

    try:
        await job.run_once()
        await scheduler.run_forever(stop)
    finally:
        await close_accounts(context.accounts)


async def run_status_once() -> None:
    """Single evaluation and dispatch."""
    context = build_context()
    try:
        await StatusUpdateJob(context).run_once()
    finally:
        await close_accounts(context.accounts)


async def log_triggers() -> None:
    """Log the derived trigger list without connecting any account."""
    config = load_rule_config(settings.rules_path)
    logger.info("Derived triggers", triggers=describe_triggers(derive_triggers(config)))
