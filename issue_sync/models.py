"""Shared pydantic models: the contract between the gateway, the service and callers."""

from pydantic import BaseModel, ConfigDict, SecretStr

DEFAULT_AUTO_IMPORT_JQL = "assignee = currentUser() AND resolution = Unresolved ORDER BY updatedDate DESC"


class IntegrationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_id: str
    is_enabled: bool = False
    host: str  # https://example.atlassian.net
    email: str | None = None
    api_token: SecretStr | None = None
    story_points_field: str | None = None  # e.g. customfield_10004
    auto_import_jql: str = DEFAULT_AUTO_IMPORT_JQL


class IssueRef(BaseModel):
    """Reference to a remote issue by its human-readable key (KEY-1), never its numeric id."""

    model_config = ConfigDict(frozen=True)

    issue_id: str
    project_id: str


class AttachmentSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    filename: str
    mime_type: str | None = None
    content: str  # download URL
    thumbnail: str | None = None


class IssueSnapshot(BaseModel):
    """Point-in-time view of a Jira issue.

    The reduced form (search, import listing) leaves description unset; attachments
    stay None when the remote payload did not carry the field at all.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    summary: str
    updated: str | int  # ISO-8601 from Jira, or epoch milliseconds
    id: str | None = None  # Jira internal id, informational only
    story_points: float | None = None
    description: str | None = None
    attachments: list[AttachmentSnapshot] | None = None


class LocalAttachment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str | None = None  # assigned by the task store
    title: str
    path: str
    original_img_path: str
    type: str  # "IMG" | "LINK"
    icon: str


class LocalTaskSyncState(BaseModel):
    """The slice of a local task this package reads. Owned by the task store."""

    model_config = ConfigDict(frozen=True)

    project_id: str | None = None
    issue_id: str | None = None
    issue_last_updated: int | None = None  # epoch milliseconds
    issue_was_updated: bool = False


class TaskFieldChanges(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    issue_points: float | None = None
    issue_attachment_nr: int = 0
    issue_was_updated: bool
    issue_last_updated: int  # epoch milliseconds


class SearchResultItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    title_highlighted: str  # may contain the remote's <b> markup
    issue_type: str = "JIRA"
    issue_ref: IssueRef
    summary: str


class RefreshResult(BaseModel):
    """Returned by refresh_task. The caller persists `changes` itself."""

    model_config = ConfigDict(frozen=True)

    changes: TaskFieldChanges
    snapshot: IssueSnapshot
    display_title: str
