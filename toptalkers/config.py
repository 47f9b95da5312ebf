"""
Configuration management for Top Talkers
"""
from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Top Talkers"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Ranking
    TOP_N: int = 100  # addresses kept in the ranking

    # Epoch reset
    RESET_WINDOW: str = "1d"  # one of 1m, 5m, 15m, 1h, 1d, 1w, 1M
    RESET_SCHEDULER_ENABLED: bool = True
    RESET_POLL_INTERVAL: float = 30.0  # seconds

    # Request recording
    TRUST_PROXY_HEADERS: bool = False  # use first X-Forwarded-For hop
    RECORD_EXCLUDE_PREFIXES: List[str] = ["/api/v1/ranking"]

    # API Settings
    API_PREFIX: str = "/api/v1"
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()
