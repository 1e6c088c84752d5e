from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent
ENV_PATH = PROJECT_ROOT / ".env.local"

# Account tokens are looked up by name in os.environ, so merge .env files first
load_dotenv(PROJECT_ROOT / ".env")
load_dotenv(ENV_PATH)


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Rules
    rules_path: Path = PROJECT_ROOT / "config" / "rules.json"
    timezone: str = ""
    emoji_policy: str = "random"

    # Slack settings
    slack_api_base_url: str = "https://slack.com/api"
    slack_request_timeout: float = 10.0

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def tzinfo(self) -> ZoneInfo | None:
        """Configured zone, or None to use the host's local time."""
        if not self.timezone:
            return None
        return ZoneInfo(self.timezone)


settings = Settings()
