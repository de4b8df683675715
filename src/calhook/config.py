from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_ENV: str = "development"
    APP_PORT: int = Field(default=3000, validation_alias=AliasChoices("APP_PORT", "PORT"))

    # Google OAuth client
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = "http://localhost:3000/callback"

    # Calendar behaviour
    CALENDAR_TIMEZONE: str = "America/Los_Angeles"
    ENFORCE_EVENT_ORDERING: bool = True

    # LLM Configuration (can be changed easily)
    LLM_API_KEY: str = ""  # Optional, enables natural-language requests
    LLM_PROVIDER: str = "openai"  # openai, anthropic, google, etc.
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_TEMPERATURE: float = 0.0
    LLM_TIMEOUT_SECONDS: float = 25.0

    # Slack
    SLACK_BOT_TOKEN: str = ""  # Optional, enables /slack-events replies
    SLACK_SIGNING_SECRET: str = ""  # Optional, enables request verification
    SLACK_REPLY_DELAY_SECONDS: float = 0.5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def google_oauth_configured(self) -> bool:
        return bool(self.GOOGLE_CLIENT_ID.strip() and self.GOOGLE_CLIENT_SECRET.strip())

    @property
    def llm_configured(self) -> bool:
        return bool(self.LLM_API_KEY.strip())

    @property
    def slack_configured(self) -> bool:
        return bool(self.SLACK_BOT_TOKEN.strip())


settings = Settings()


def missing_integrations(current: Settings = None) -> list:
    """Report which optional integrations are unconfigured.

    Nothing here is fatal: each missing integration only degrades the entry
    point that depends on it to a "not configured" response.
    """
    current = current or settings
    optional_keys = [
        ("GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET", current.google_oauth_configured),
        ("LLM_API_KEY", current.llm_configured),
        ("SLACK_BOT_TOKEN", current.slack_configured),
    ]

    return [key_name for key_name, present in optional_keys if not present]


def secrets_report(current: Settings = None) -> dict:
    """Presence-only view of every secret; values are never included."""
    current = current or settings
    secret_keys = [
        "GOOGLE_CLIENT_ID",
        "GOOGLE_CLIENT_SECRET",
        "GOOGLE_REDIRECT_URI",
        "LLM_API_KEY",
        "SLACK_BOT_TOKEN",
        "SLACK_SIGNING_SECRET",
    ]
    return {
        key_name: "configured" if str(getattr(current, key_name) or "").strip() else "missing"
        for key_name in secret_keys
    }
