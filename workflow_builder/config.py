from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WORKFLOW_BUILDER_",
        env_file=".env",
        extra="ignore",
    )

    app_env: str = "dev"
    log_level: str = "INFO"

    # Persistence backend: sql | file | redis | memory
    store_backend: Literal["sql", "file", "redis", "memory"] = "sql"
    database_url: str = "sqlite:///./data/workflows.db"
    data_file: str = "./data/workflows.json"
    redis_url: str = "redis://localhost:6379/0"
    redis_key: str = "workflows"

    # Editor behaviour
    autosave_delay_seconds: float = 2.0
    seed_default_task: bool = False

    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:3000"]


settings = Settings()  # reads from env


def get_settings() -> Settings:
    return settings
