from datetime import time
from functools import lru_cache
from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SlotGrid(BaseModel):
    """Fixed grid used to offer candidate slots, independent of backend availability."""

    day_start: time = time(9, 0)
    day_end: time = time(18, 0)
    slot_minutes: int = 60

    @model_validator(mode="after")
    def check_range(self):
        if self.slot_minutes <= 0:
            raise ValueError("slot_minutes must be positive")
        if self.day_start >= self.day_end:
            raise ValueError("day_start must be before day_end")
        return self


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CLASSBOOK_")

    # Client
    api_base_url: str = "http://localhost:4000"
    request_timeout: float = 10.0
    quota_limit: int = 3
    slot_day_start: time = time(9, 0)
    slot_day_end: time = time(18, 0)
    slot_minutes: int = 60
    timeline_window_days: int = 7
    log_level: str = "INFO"

    # Reference server
    database_url: str = "sqlite:///./data/classbook.db"
    secret_key: str = "secure-secret-key-1234567890"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    reminder_lead_minutes: int = 30
    # Seconds between reminder passes; 0 turns the background task off.
    reminder_interval_seconds: int = 60

    def slot_grid(self) -> SlotGrid:
        return SlotGrid(
            day_start=self.slot_day_start,
            day_end=self.slot_day_end,
            slot_minutes=self.slot_minutes,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
