"""
Fan-out of a StatusDecision to every connected account.

Each account is attempted exactly once per dispatch. A failing account is
recorded and logged; it never stops the others.
"""

import asyncio
import time
from collections.abc import Sequence
from datetime import datetime

from status_updater.infrastructure.observability.logging import get_logger, log_status_update
from status_updater.models.domain.status_domain import StatusDecision
from status_updater.services.accounts import ConnectedAccount

logger = get_logger(__name__)


class DispatchResult:
    """Per-account outcome of one dispatch."""

    def __init__(self, decision: StatusDecision, debug: bool = False):
        self.decision = decision
        self.debug = debug
        self.started_at = datetime.now()
        self.attempted: list[str] = []
        self.succeeded: list[str] = []
        self.errors: dict[str, str] = {}

    def record_success(self, account: str, duration_ms: float):
        self.attempted.append(account)
        self.succeeded.append(account)

        logger.debug("Account updated", account=account, duration_ms=round(duration_ms, 1))

    def record_failure(self, account: str, error: str):
        self.attempted.append(account)
        self.errors[account] = error

        logger.error(
            "Error updating status",
            account=account,
            error=error,
            kind=self.decision.kind.value,
        )

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "kind": self.decision.kind.value,
            "status_text": self.decision.text,
            "debug": self.debug,
            "accounts_attempted": len(self.attempted),
            "accounts_updated": len(self.succeeded),
            "accounts_failed": len(self.errors),
            "errors": dict(self.errors),
        }


class AccountDispatcher:
    """
    Pushes decisions to accounts.

    In debug mode the remote calls are skipped but every account still goes
    through the logging path.
    """

    def __init__(self, debug: bool = False):
        self.debug = debug

    async def dispatch(
        self,
        decision: StatusDecision,
        accounts: Sequence[ConnectedAccount],
        now: datetime | None = None,
    ) -> DispatchResult:
        """
        Send a decision to every account concurrently.

        Args:
            decision: Status to apply
            accounts: Connected accounts
            now: Reference time for the logged expiry (defaults to the current time)

        Returns:
            DispatchResult: Which accounts succeeded and which failed
        """
        result = DispatchResult(decision, debug=self.debug)
        now = now or datetime.now(decision.expires_at.tzinfo if decision.expires_at else None)
        expires_in = decision.expires_in_minutes(now)

        await asyncio.gather(
            *(self._push(account, decision, expires_in, result) for account in accounts)
        )

        logger.info("Status dispatch completed", **result.to_dict())
        return result

    async def _push(
        self,
        account: ConnectedAccount,
        decision: StatusDecision,
        expires_in: int | None,
        result: DispatchResult,
    ) -> None:
        start_time = time.time()

        if self.debug:
            log_status_update(account.name, decision.text, decision.emoji, expires_in, sent=False)
            result.record_success(account.name, (time.time() - start_time) * 1000)
            return

        try:
            await account.client.set_profile(decision.text, decision.emoji, decision.expiration_epoch())
            await account.client.set_presence(decision.presence.value)
        except Exception as e:
            result.record_failure(account.name, f"{type(e).__name__}: {e}")
            return

        log_status_update(account.name, decision.text, decision.emoji, expires_in, sent=True)
        result.record_success(account.name, (time.time() - start_time) * 1000)
