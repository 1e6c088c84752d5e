"""
Slack Web API client for status and presence updates.
One attempt per call; failures surface as SlackStatusError.
"""

import httpx

from status_updater.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

# Slack Web API configuration
SLACK_API_BASE_URL = "https://slack.com/api"
REQUEST_TIMEOUT = 10  # seconds


class SlackStatusError(Exception):
    """Custom exception for Slack status API errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.status_code = status_code
        self.response_data = response_data or {}


class SlackStatusClient:
    """
    Client for the two Slack endpoints the updater needs.

    Implements the status capability used by the dispatcher:
    ``set_profile(text, emoji, expiration)`` and ``set_presence(state)``.
    """

    def __init__(
        self,
        token: str,
        base_url: str = SLACK_API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._client = self._create_client(timeout)

    def _create_client(self, timeout: float) -> httpx.AsyncClient:
        """Create async HTTP client for the Slack API."""
        return httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def _get_auth_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json; charset=utf-8",
        }

    async def set_profile(self, text: str, emoji: str, expiration: int = 0) -> dict:
        """
        Set the custom status.

        Args:
            text: Status text
            emoji: Status emoji, e.g. ":coffee:"
            expiration: Epoch seconds when Slack clears the status; 0 never expires

        Returns:
            dict: Slack response payload

        Raises:
            SlackStatusError: If the request fails or Slack rejects it
        """
        payload = {
            "profile": {
                "status_text": text,
                "status_emoji": emoji,
                "status_expiration": expiration,
            }
        }
        return await self._post("users.profile.set", payload)

    async def set_presence(self, state: str) -> dict:
        """
        Set presence to "auto" or "away".

        Raises:
            SlackStatusError: If the request fails or Slack rejects it
        """
        if state not in ("auto", "away"):
            raise ValueError(f"Invalid presence '{state}', expected 'auto' or 'away'")
        return await self._post("users.setPresence", {"presence": state})

    async def _post(self, method: str, payload: dict) -> dict:
        url = f"{self._base_url}/{method}"
        try:
            response = await self._client.post(url, json=payload, headers=self._get_auth_headers())
        except httpx.RequestError as e:
            logger.error(f"Slack {method} request error", error=str(e))
            raise SlackStatusError(f"Slack request failed: {e}", error_code="request_error") from e
        return self._handle_api_response(response, method)

    def _handle_api_response(self, response: httpx.Response, method: str) -> dict:
        """
        Validate a Slack Web API response.

        Slack answers most errors with HTTP 200 and ``{"ok": false, "error": ...}``,
        so both the status code and the ``ok`` flag are checked.
        """
        logger.debug(f"Slack {method} response", status_code=response.status_code)

        try:
            data = response.json() if response.text else {}
        except ValueError:
            logger.error(
                f"Slack {method} failed with non-JSON response",
                status_code=response.status_code,
                response_text=response.text[:200] if response.text else "",
            )
            raise SlackStatusError(
                f"Slack API error (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from None

        if response.is_success and data.get("ok"):
            return data

        error_code = data.get("error", "unknown_error")
        logger.error(
            f"Slack {method} failed",
            status_code=response.status_code,
            error_code=error_code,
        )
        raise SlackStatusError(
            self._map_slack_error(error_code),
            error_code=error_code,
            status_code=response.status_code,
            response_data=data,
        )

    def _map_slack_error(self, error_code: str) -> str:
        """Map Slack error codes to readable messages."""
        error_mappings = {
            "invalid_auth": "Slack token is invalid.",
            "not_authed": "No Slack token provided.",
            "token_revoked": "Slack token has been revoked.",
            "account_inactive": "Slack account is inactive.",
            "missing_scope": "Slack token lacks the users.profile:write or users:write scope.",
            "ratelimited": "Too many Slack requests. Please try again later.",
            "profile_set_failed": "Slack could not update the profile.",
        }

        return error_mappings.get(error_code, f"Slack error: {error_code}")
