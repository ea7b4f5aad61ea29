"""
Configuration management for the Word Chain League
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Telegram Bot Configuration
    telegram_bot_token: str = Field(default="")
    telegram_webhook_url: str | None = Field(default=None)
    allowed_users: str = Field(default="")

    # Database Configuration
    database_url: str = Field(default="sqlite:///data/wordchain.db")

    # Application Configuration
    log_level: str = Field(default="INFO")
    debug: bool = Field(default=False)
    polling_interval: float = Field(default=1.0)

    # Dictionary Configuration
    words_file: str | None = Field(default=None)

    # Game Configuration
    turn_time_limit: float = Field(default=15.0, gt=0)
    timer_tick_interval: float = Field(default=0.1, gt=0)
    ai_min_delay: float = Field(default=1.0, ge=0)
    ai_max_delay: float = Field(default=3.0, ge=0)
    ai_difficulty: str = Field(default="medium")

    # Progression Configuration
    # timeout: losers of a time-up or AI-failed game; min_words: losers with enough words
    close_defeat_rule: str = Field(default="timeout", pattern="^(timeout|min_words|none)$")
    close_defeat_min_words: int = Field(default=0, ge=0)
    timezone: str = Field(default="Asia/Seoul")

    @property
    def allowed_users_list(self) -> list[int]:
        """Convert allowed_users string to list of integers"""
        if not self.allowed_users.strip():
            return []
        # Parse comma-separated string of user IDs
        return [
            int(user_id.strip())
            for user_id in self.allowed_users.split(",")
            if user_id.strip()
        ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def get_database_path() -> str:
    """Get the database file path from URL"""
    settings = get_settings()
    if settings.database_url.startswith("sqlite:///"):
        return settings.database_url.replace("sqlite:///", "")
    return "data/wordchain.db"
