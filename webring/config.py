from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Member list (YAML, `users:` list)
    members_file: str = "members.yaml"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Ring identity, used by ring.js and the site classifier
    ring_domain: str = "umaring.mkr.cx"
    ring_name: str = "umaring"

    # Health scanning
    request_timeout: float = 15.0  # seconds per fetch
    check_interval: float = 60.0  # one member per tick

    # Ring order: reshuffled hourly, seed changes weekly
    reshuffle_interval: float = 3600.0
    epoch_seconds: int = 60 * 60 * 24 * 7

    # Deployed commit, reported by /health
    commit: str = Field(default="unknown", validation_alias="COMMIT")

    # Logging
    log_level: str = "INFO"


settings = Settings()
