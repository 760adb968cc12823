class NotConfiguredError(Exception):
    """Raised when the workspace or the tracker credentials are not set up."""

    def __init__(self, what: str) -> None:
        super().__init__(f"{what} is not configured.")
        self.what = what


class TaskNotFoundError(Exception):
    """Raised when a task identifier does not exist in the workspace."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id '{task_id}' was not found.")
        self.task_id = task_id


class MalformedFragmentError(Exception):
    """Raised when a fragment cannot be decoded into a task."""

    def __init__(self, reason: str, fragment_id: object = None) -> None:
        prefix = f"Fragment '{fragment_id}'" if fragment_id is not None else "Fragment"
        super().__init__(f"{prefix} is malformed: {reason}")
        self.fragment_id = fragment_id
        self.reason = reason


class WorkspaceBackendError(Exception):
    """Raised when the workspace backend cannot be reached or refuses a call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TrackerError(Exception):
    """Base class for issue tracker failures."""

    def __init__(self, issue_key: str, message: str) -> None:
        super().__init__(message)
        self.issue_key = issue_key


class TrackerUnreachableError(TrackerError):
    def __init__(self, issue_key: str, reason: str) -> None:
        super().__init__(issue_key, f"Tracker unreachable for '{issue_key}': {reason}")


class TrackerNotFoundError(TrackerError):
    def __init__(self, issue_key: str) -> None:
        super().__init__(issue_key, f"Tracker issue '{issue_key}' was not found.")


class TrackerRejectedError(TrackerError):
    def __init__(self, issue_key: str, status_code: int, body: str) -> None:
        super().__init__(
            issue_key,
            f"Tracker rejected request for '{issue_key}' ({status_code}): {body or 'no body'}",
        )
        self.status_code = status_code
        self.body = body


class NoMatchingTransitionError(TrackerError):
    """A status change the tracker offers no transition for. Logged, never raised to callers."""

    def __init__(self, issue_key: str, target_names: list[str], available: list[str]) -> None:
        wanted = target_names[0] if target_names else "?"
        super().__init__(
            issue_key,
            f"No transition to \"{wanted}\" for {issue_key}. "
            f"Available: {', '.join(available) or 'none'}",
        )
        self.target_names = target_names
        self.available = available
