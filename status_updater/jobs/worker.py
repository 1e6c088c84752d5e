"""
Generic background worker runner.

Reads the desired job name from CLI args or the STATUS_UPDATER_JOB
environment variable and delegates to the matching entry point.
"""

import asyncio
import os
import sys
from collections.abc import Awaitable, Callable

from status_updater.config import settings
from status_updater.infrastructure.observability.logging import get_logger, setup_logging
from status_updater.jobs.status_update_job import log_triggers, run_status_once, start_status_scheduler
from status_updater.models.domain.rules_domain import RuleConfigError
from status_updater.services.accounts import NoUsableAccountsError

logger = get_logger(__name__)

JobCoroutine = Callable[[], Awaitable[None]]

JOB_REGISTRY: dict[str, JobCoroutine] = {
    "scheduler": start_status_scheduler,
    "once": run_status_once,
    "triggers": log_triggers,
}


def _resolve_job_name() -> str:
    """Pick the target job from CLI args or STATUS_UPDATER_JOB env variable."""
    if len(sys.argv) > 1:
        return sys.argv[1].strip().lower()
    return os.getenv("STATUS_UPDATER_JOB", "scheduler").strip().lower()


async def run_worker(job_name: str | None = None) -> None:
    """Run the requested background job."""
    name = (job_name or _resolve_job_name()).strip().lower()
    if name not in JOB_REGISTRY:
        raise ValueError(
            f"Unknown worker job '{name}'. "
            f"Available jobs: {', '.join(sorted(JOB_REGISTRY.keys()))}"
        )

    logger.info("Starting background worker", job=name, environment=settings.environment)
    await JOB_REGISTRY[name]()


def main() -> None:
    """CLI entrypoint."""
    setup_logging(log_level=settings.log_level, log_format=settings.log_format)
    job_name = _resolve_job_name()
    try:
        asyncio.run(run_worker(job_name))
    except (RuleConfigError, NoUsableAccountsError) as e:
        logger.error("Startup failed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Status updater stopped by user")


if __name__ == "__main__":
    main()
