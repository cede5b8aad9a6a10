"""Decide whether a remote issue changed and compute the task fields to merge.

Everything here is pure: no I/O, no clock reads. Timestamps are compared as
epoch milliseconds, the unit the task store persists.
"""

from datetime import UTC, datetime

from issue_sync.errors import RemoteFetchError
from issue_sync.models import IssueSnapshot, TaskFieldChanges

# Jira renders offsets without a colon (2024-01-02T10:00:00.000+0000)
_JIRA_FORMATS = ("%Y-%m-%dT%H:%M:%S.%f%z", "%Y-%m-%dT%H:%M:%S%z")


def parse_updated(value: str | int) -> int:
    """Convert a remote ``updated`` value to epoch milliseconds.

    Integers are taken to already be epoch milliseconds. Naive timestamps are
    read as UTC.
    """
    if isinstance(value, int):
        return value
    parsed: datetime | None = None
    for fmt in _JIRA_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
            break
        except ValueError:
            continue
    if parsed is None:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as exc:
            raise RemoteFetchError(f"Unparsable issue timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return int(parsed.timestamp() * 1000)


def add_task_data(snapshot: IssueSnapshot) -> TaskFieldChanges:
    """Field values for a task created from this issue (e.g. on import)."""
    return TaskFieldChanges(
        title=f"{snapshot.key} {snapshot.summary}",
        issue_points=snapshot.story_points,
        issue_attachment_nr=len(snapshot.attachments) if snapshot.attachments else 0,
        issue_was_updated=False,
        issue_last_updated=parse_updated(snapshot.updated),
    )


def detect(last_known_updated_at: int | None, snapshot: IssueSnapshot) -> TaskFieldChanges | None:
    """Return the changes to merge if snapshot is strictly newer, else None.

    A task never synced before (no last known timestamp) always counts as updated.
    """
    data = add_task_data(snapshot)
    if last_known_updated_at is not None and data.issue_last_updated <= last_known_updated_at:
        return None
    return data.model_copy(update={"issue_was_updated": True})
