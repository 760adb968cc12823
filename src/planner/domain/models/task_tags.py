SOURCE_TAG = "source:my-tasks-plan"
PROJECT_TAG_PREFIX = "project:"


def check_user_tags(tags: list[str] | None) -> list[str] | None:
    """Reject user tags that would be read back as the task marker or as a project."""
    if tags is None:
        return tags
    for tag in tags:
        if tag == SOURCE_TAG:
            raise ValueError(f"'{SOURCE_TAG}' is reserved")
        if tag.startswith(PROJECT_TAG_PREFIX):
            raise ValueError(
                f"tag '{tag}' uses the reserved '{PROJECT_TAG_PREFIX}' prefix, use projects instead"
            )
    return tags
