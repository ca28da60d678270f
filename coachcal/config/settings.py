"""Engine configuration settings."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # Application
    app_name: str = "Coach Calendar Engine"
    debug: bool = False
    log_json: bool = True  # JSON lines; False renders a console layout

    # Lesson defaults (minutes)
    default_lesson_duration_minutes: int = 60
    min_lesson_duration_minutes: int = 15
    max_lesson_duration_minutes: int = 480  # 8 hours

    # Calendar views
    calendar_range_max_days: int = 42  # six-week month grid

    # Compliance tracking
    compliance_window_weeks: list[int] = [4, 6, 8]
    compliance_good_threshold: float = 80.0
    compliance_fair_threshold: float = 60.0

    # DST advisories attached to lesson drafts
    dst_warnings_enabled: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
