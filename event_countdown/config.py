"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "event-countdown"
    debug: bool = False
    log_level: str = "INFO"

    # Tick discipline
    tick_interval_seconds: float = 1.0
    just_finished_window_seconds: float = 3.0

    # Phase thresholds (seconds remaining until start)
    final_minute_threshold_seconds: int = 60
    final_ten_threshold_seconds: int = 10

    # Registry
    max_sessions: int = 1000

    model_config = {"env_prefix": "COUNTDOWN_"}


settings = Settings()
