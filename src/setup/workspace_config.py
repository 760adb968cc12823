from pathlib import Path

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class WorkspaceSettings(BaseSettings):
    """Configuration for the remote workspace backend and local config records."""
    WORKSPACE_API_URL: str = "https://usable.dev/api"
    WORKSPACE_API_TOKEN: str = ""
    WORKSPACE_TIMEOUT_SECONDS: float = 15.0
    CONFIG_DIR: Path = Path.home() / ".my-tasks-planner"

    model_config = ConfigDict(env_file=".env", extra="ignore")


def get_workspace_settings() -> WorkspaceSettings:
    """Return a fresh workspace settings instance."""
    return WorkspaceSettings()
