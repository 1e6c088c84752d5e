"""
In-process cron-style scheduler.

Runs async callbacks at recurring wall-clock instants described by
TriggerSpec values. Callbacks due at the same minute run one after the other;
a failing callback is logged and the loop keeps going.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, tzinfo

from status_updater.infrastructure.observability.logging import get_logger
from status_updater.models.domain.rules_domain import Weekday
from status_updater.models.domain.status_domain import TriggerSpec

logger = get_logger(__name__)

TriggerCallback = Callable[[TriggerSpec], Awaitable[None]]
Clock = Callable[[], datetime]
Sleeper = Callable[[float], Awaitable[None]]


def next_fire_time(spec: TriggerSpec, after: datetime) -> datetime:
    """
    First instant strictly after ``after`` matching the trigger.

    Raises:
        ValueError: If the trigger has no days
    """
    if not spec.days:
        raise ValueError(f"Trigger '{spec.reason}' has no days")

    start = after.replace(second=0, microsecond=0)
    for offset in range(8):
        day = start.date() + timedelta(days=offset)
        if Weekday.of(day) not in spec.days:
            continue
        candidate = datetime.combine(day, spec.at, tzinfo=after.tzinfo)
        if candidate > after:
            return candidate
    raise ValueError(f"Trigger '{spec.reason}' never fires")


class AsyncCronScheduler:
    """Recurring trigger runner on top of asyncio.sleep."""

    def __init__(
        self,
        tz: tzinfo | None = None,
        clock: Clock | None = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.tz = tz
        self._clock = clock or (lambda: datetime.now(self.tz))
        self._sleep = sleep
        self._jobs: list[tuple[TriggerSpec, TriggerCallback]] = []

    def now(self) -> datetime:
        return self._clock()

    def run_at(self, spec: TriggerSpec, callback: TriggerCallback) -> None:
        """Register a callback for every instant matching the trigger."""
        if not spec.days:
            raise ValueError(f"Trigger '{spec.reason}' has no days")
        self._jobs.append((spec, callback))
        logger.debug("Trigger registered", reason=spec.reason, cron=spec.to_cron())

    @property
    def triggers(self) -> list[TriggerSpec]:
        return [spec for spec, _ in self._jobs]

    def next_run(self, after: datetime | None = None) -> datetime | None:
        """Earliest upcoming fire time across all registered triggers."""
        if not self._jobs:
            return None
        after = after or self.now()
        return min(next_fire_time(spec, after) for spec, _ in self._jobs)

    async def run_due(self, moment: datetime) -> int:
        """
        Fire every callback whose trigger matches ``moment``.

        Returns:
            int: Number of callbacks fired
        """
        fired = 0
        for spec, callback in self._jobs:
            if not spec.matches(moment):
                continue
            fired += 1
            try:
                await callback(spec)
            except Exception as e:
                logger.error(
                    "Scheduled callback failed",
                    reason=spec.reason,
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return fired

    async def run_forever(self, stop: asyncio.Event | None = None) -> None:
        """Sleep until the next trigger, fire it, repeat until ``stop`` is set."""
        if not self._jobs:
            logger.warning("Scheduler started without triggers")
            return

        logger.info("Scheduler started", trigger_count=len(self._jobs))

        while stop is None or not stop.is_set():
            fire_at = self.next_run()
            await self._sleep_until(fire_at)
            logger.debug("Scheduler tick", fire_at=fire_at.isoformat())
            await self.run_due(fire_at)

        logger.info("Scheduler stopped")

    async def _sleep_until(self, moment: datetime) -> None:
        # Timestamps keep the delay right across DST changes
        while (remaining := moment.timestamp() - self.now().timestamp()) > 0:
            await self._sleep(remaining)
