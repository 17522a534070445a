"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Baseline generation
    target_cell_count: int = 50_000
    target_hotspot_count: int = 5_000
    simulation_seed: int | None = None  # None → derived from the wall clock at start-up

    # H3
    h3_resolution: int = 11

    # Background activities
    snapshot_interval_seconds: float = 900.0  # 15 min flush cycle
    ingest_interval_seconds: float = 0.2
    simulation_enabled: bool = True

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
