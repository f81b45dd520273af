from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RPG_", env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./rpg_engine.db"
    log_level: str = "INFO"

    # Dice expression used when a random table is created without one
    default_table_roll: str = "1d100"

    # Per-subscriber buffer for the server-sent event stream; events beyond it are dropped
    event_queue_size: int = 100
    sse_keepalive_seconds: float = 30.0

    cors_origins: list[str] = ["http://localhost:8000", "http://127.0.0.1:8000"]


settings = Settings()
