"""
Connected account setup.

Accounts are built once at startup from the configured workspaces. An
account whose token cannot be resolved is skipped with a warning; startup
fails only when no account is left.
"""

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Protocol

from status_updater.infrastructure.observability.logging import get_logger
from status_updater.models.domain.rules_domain import Account, RuleConfig

logger = get_logger(__name__)


class StatusClient(Protocol):
    """Remote status capability for one account."""

    async def set_profile(self, text: str, emoji: str, expiration: int = 0) -> dict: ...

    async def set_presence(self, state: str) -> dict: ...


class AccountConfigurationError(Exception):
    """Raised when an account cannot be set up from configuration."""

    def __init__(self, message: str, account: str | None = None):
        super().__init__(message)
        self.account = account


class NoUsableAccountsError(Exception):
    """Raised when no configured account has a usable credential."""


@dataclass(frozen=True, slots=True)
class ConnectedAccount:
    name: str
    client: StatusClient


ClientFactory = Callable[[str], StatusClient]


def resolve_token(account: Account, environ: Mapping[str, str] | None = None) -> str:
    """
    Look up an account's token by its environment variable name.

    Raises:
        AccountConfigurationError: If the variable is unset or blank
    """
    environ = os.environ if environ is None else environ
    token = (environ.get(account.token_env_key) or "").strip()
    if not token:
        raise AccountConfigurationError(
            f"No token found for workspace '{account.name}' in ${account.token_env_key}",
            account=account.name,
        )
    return token


def build_accounts(
    config: RuleConfig,
    client_factory: ClientFactory,
    environ: Mapping[str, str] | None = None,
) -> tuple[ConnectedAccount, ...]:
    """
    Create a client for every configured account with a resolvable token.

    Args:
        config: Rule configuration holding the workspace list
        client_factory: Builds a status client from a token
        environ: Variables to resolve tokens from (defaults to os.environ)

    Returns:
        tuple[ConnectedAccount, ...]: Usable accounts, in configuration order

    Raises:
        NoUsableAccountsError: If no account could be set up
    """
    accounts = []
    for account in config.accounts:
        try:
            token = resolve_token(account, environ)
        except AccountConfigurationError as e:
            logger.warning("Skipping workspace", account=e.account, error=str(e))
            continue
        accounts.append(ConnectedAccount(name=account.name, client=client_factory(token)))

    if not accounts:
        configured = [account.name for account in config.accounts]
        raise NoUsableAccountsError(
            f"No usable workspaces: none of {configured or 'the configured accounts'} has a token"
        )

    logger.info("Workspaces connected", accounts=[account.name for account in accounts])
    return tuple(accounts)
