from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TaskComment(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="Comment identifier.")
    text: str = Field(description="Comment body.")
    author: str = Field(description="Display name of the author.")
    author_email: str = Field(description="Email of the author.")
    author_id: str | None = Field(default=None, description="Workspace user id of the author.")
    created_at: str = Field(description="ISO-8601 creation timestamp.")
