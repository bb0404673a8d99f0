from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Timesheet line item source
    TIMESHEET_API_BASE_URL: str = "http://localhost:8080/api"
    TIMESHEET_API_TOKEN: str | None = None
    TIMESHEET_REQUEST_TIMEOUT: float = 30.0
    TIMESHEET_MAX_RETRIES: int = 3

    # =================================================================
    # DASHBOARD GOALS - hours per period
    # =================================================================
    GOAL_HOURS_YEAR: float = 1920.0
    GOAL_HOURS_MONTH: float = 160.0
    GOAL_HOURS_WEEK: float = 40.0
    GOAL_HOURS_DAY: float = 8.0
    DAILY_TARGET_HOURS: float = 8.0  # target line on the weekly breakdown

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def timesheet_base_url(self) -> str:
        """Base URL without a trailing slash."""
        return self.TIMESHEET_API_BASE_URL.rstrip("/")

    def goal_hours(self) -> dict[str, float]:
        """Goal hours keyed by dashboard level."""
        return {
            "year": self.GOAL_HOURS_YEAR,
            "month": self.GOAL_HOURS_MONTH,
            "week": self.GOAL_HOURS_WEEK,
            "day": self.GOAL_HOURS_DAY,
        }

    def get_http_client_config(self) -> dict:
        """
        Get HTTP client configuration for the timesheet source.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "timeout": self.TIMESHEET_REQUEST_TIMEOUT,
            "max_retries": self.TIMESHEET_MAX_RETRIES,
        }

        if self.environment == "development":
            # Fail faster locally
            config.update({"timeout": min(self.TIMESHEET_REQUEST_TIMEOUT, 10.0)})

        return config


settings = Settings()
