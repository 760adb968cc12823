from pydantic import BaseModel, Field


class TrackerIssue(BaseModel):
    """Normalized view of a tracker issue; lives only for one import."""

    key: str = Field(description="Issue key, e.g. PROJ-123.")
    summary: str = Field(description="Issue summary.")
    description: str = Field(default="", description="Plain-text description.")
    status_name: str = Field(description="Tracker status name.")
    priority_name: str | None = None
    issue_type: str | None = None
    browse_url: str = Field(description="Link to the issue in the tracker UI.")
    project_key: str | None = None
    project_name: str | None = None
    assignee_email: str | None = None
    assignee_name: str | None = None
    epic_key: str | None = None
    epic_name: str | None = None


class TrackerTransitionTarget(BaseModel):
    id: str
    name: str


class TrackerTransition(BaseModel):
    id: str
    name: str
    to: TrackerTransitionTarget | None = None


class TransitionResult(BaseModel):
    issue_key: str
    transition_id: str
    status_code: int
