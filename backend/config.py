from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # Economy
    initial_balance: float = 10000.0
    max_leverage: int = 5
    liquidation_threshold_pct: float = -80.0

    # Simulation clock
    tick_interval_seconds: float = 2.0
    history_capacity: int = 50
    ticker_enabled: bool = True
    random_seed: Optional[int] = None  # None = nondeterministic

    # Biome placement (cosmetic)
    ground_size: float = 30.0
    placement_margin: float = 4.0

    # Streaming
    stream_poll_seconds: float = 0.5

    # Rate limiting
    rate_limit_enabled: bool = True
    open_position_rate_limit: str = "30/minute"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = True
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
