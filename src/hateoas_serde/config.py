"""
Environment-driven settings, read with pydantic-settings from ``API_*``
variables or a ``.env`` file.
"""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_", env_file=".env", case_sensitive=False)

    env: str = "production"
    """
    ``dev`` disables the response cache.
    """

    base_uri: str = ""
    """
    The URI relative link hrefs are joined onto, e.g. ``https://api.totsy.com/v1``.
    """

    web_base_url: str = "https://www.totsy.com/"
    media_base_url: str = "https://www.totsy.com/media"

    provisional_order_lifetime: int = 900
    """
    Seconds a provisional order stays claimable after its last update.
    """

    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def cache_enabled(self) -> bool:
        return self.env != "dev"


@lru_cache
def get_settings() -> Settings:
    return Settings()
