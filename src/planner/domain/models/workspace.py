from pydantic import BaseModel, Field


class WorkspaceConfig(BaseModel):
    workspace_id: str = Field(description="Active workspace identifier.")
    workspace_name: str = Field(default="", description="Display name of the workspace.")
    task_fragment_type_id: str | None = Field(
        default=None, description="Fragment type used for tasks."
    )


class WorkspaceMember(BaseModel):
    user_id: str
    email: str
    name: str | None = None


class TrackerConfig(BaseModel):
    """Tracker credentials: site name plus Basic auth account and token."""

    domain: str = Field(min_length=1, description="Site name, e.g. 'mycompany'.")
    email: str = Field(min_length=1, description="Account email.")
    api_token: str = Field(min_length=1, description="Secret API token.")
