"""Centralised application settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database (snapshot store)
    database_url: str = "sqlite+aiosqlite:///./todadispatch.db"

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # Autosave worker
    autosave_interval_seconds: int = 60  # 0 disables the worker

    # Dispatch
    default_fare_per_passenger: float = 20.0
    currency_symbol: str = "₱"
    no_announcement_message: str = "No announcements at this time."
    strict_queue_membership: bool = False  # reject trips for unqueued vehicles

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "TODA_", "extra": "ignore"}


settings = Settings()
