"""Application configuration."""

import logging
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Popup Translator"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    frontend_port: int = 1420

    # CORS - dynamically built based on frontend_port
    cors_origins: list[str] = []

    # Authentication (optional - for network-exposed deployments)
    # Set API_AUTH_TOKEN together with REQUIRE_AUTH_ALL to protect the API
    api_auth_token: Optional[str] = None
    # If True, every /api/v1 route requires the token
    require_auth_all: bool = False

    # Ollama runtime defaults (used when a request does not name its own)
    ollama_endpoint: str = "http://localhost:11434"
    ollama_model: str = "qwen2.5:3b"

    # Transport
    request_timeout: float = 60.0  # seconds, non-streaming calls
    health_check_timeout: float = 5.0
    pool_max_idle_per_host: int = 5  # applied pool-wide; the pool serves one endpoint
    keep_alive: str = "10m"  # how long Ollama keeps the model loaded

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Build CORS origins based on frontend port
        if not self.cors_origins:
            self.cors_origins = [
                f"http://localhost:{self.frontend_port}",
                f"http://127.0.0.1:{self.frontend_port}",
                "tauri://localhost",
            ]


settings = Settings()


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging from settings.

    Args:
        level: Optional level name overriding ``settings.log_level``
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
