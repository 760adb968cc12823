from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class TrackerSettings(BaseSettings):
    """Transport settings for the issue tracker; credentials live in the local config record."""
    TRACKER_API_PREFIX: str = "/rest/api/3"
    TRACKER_TIMEOUT_SECONDS: float = 10.0

    model_config = ConfigDict(env_file=".env", extra="ignore")


def get_tracker_settings() -> TrackerSettings:
    """Return a fresh tracker settings instance."""
    return TrackerSettings()
