"""Map Jira attachments onto the local attachment shape."""

from issue_sync.models import AttachmentSnapshot, IssueSnapshot, LocalAttachment

IMAGE_MIME_TYPES = frozenset({"image/gif", "image/jpeg", "image/png"})

_ICON = {"IMG": "image", "LINK": "link"}


def map_attachment_type(mime_type: str | None) -> str:
    return "IMG" if mime_type in IMAGE_MIME_TYPES else "LINK"


def map_attachment(attachment: AttachmentSnapshot) -> LocalAttachment:
    attachment_type = map_attachment_type(attachment.mime_type)
    return LocalAttachment(
        title=attachment.filename,
        path=attachment.thumbnail or attachment.content,
        original_img_path=attachment.content,
        type=attachment_type,
        icon=_ICON[attachment_type],
    )


def map_all(snapshot: IssueSnapshot | None) -> list[LocalAttachment]:
    # Older Jira versions omit the attachment field entirely.
    if snapshot is None or not snapshot.attachments:
        return []
    return [map_attachment(a) for a in snapshot.attachments]
