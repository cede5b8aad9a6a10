"""Error kinds raised by the sync core and its collaborators."""


class IssueSyncError(Exception):
    """Base exception for all issue-sync errors."""


class ConfigNotFound(IssueSyncError):
    """No integration is configured for the project."""

    def __init__(self, project_id: str) -> None:
        super().__init__(f"No Jira integration configured for project '{project_id}'")
        self.project_id = project_id


class InvalidArgument(IssueSyncError, ValueError):
    """A required identifier was missing."""


class RemoteFetchError(IssueSyncError):
    """Network, HTTP or parse failure talking to the remote tracker."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
