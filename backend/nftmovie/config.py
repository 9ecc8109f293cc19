"""Application configuration using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """nftmovie application settings.

    Loaded from environment variables or .env file.
    """

    # --- Application ---
    APP_NAME: str = "nftmovie"
    DEBUG: bool = False
    USE_MOCK_API: bool = False

    # --- Server ---
    HOST: str = "0.0.0.0"
    PORT: int = 23423
    CORS_ORIGINS: str = "*"  # comma-separated

    # --- RunwayML (image-to-video) ---
    RUNWAYML_API_SECRET: str = ""
    RUNWAYML_BASE_URL: str = "https://api.dev.runwayml.com/v1"
    RUNWAYML_API_VERSION: str = "2024-11-06"
    RUNWAYML_TIMEOUT: float = 30.0

    # --- Conversion polling ---
    POLL_INTERVAL: float = 5.0
    POLL_TIMEOUT: float = 600.0
    MAX_CONCURRENT_JOBS: int = 4
    MOCK_POLLS_UNTIL_DONE: int = 2

    # --- Helius (NFT indexing) ---
    HELIUS_API_KEY: str = ""
    HELIUS_RPC_URL: str = "https://mainnet.helius-rpc.com/"
    HELIUS_TIMEOUT: float = 30.0
    NFT_PAGE_LIMIT: int = 100

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton."""
    return Settings()
