"""Typed issue operations over a remote client, normalizing Jira payloads into snapshots."""

import logging
from collections.abc import Iterable

from pydantic import ValidationError

from issue_sync.errors import RemoteFetchError
from issue_sync.models import AttachmentSnapshot, IntegrationConfig, IssueRef, IssueSnapshot, SearchResultItem
from issue_sync.providers.base import RemoteIssueClient

logger = logging.getLogger(__name__)


def _require_enabled(config: IntegrationConfig) -> None:
    if not config.is_enabled:
        raise RemoteFetchError(f"Jira integration is disabled for project '{config.project_id}'")


def _attachment_from_node(node: dict) -> AttachmentSnapshot:
    return AttachmentSnapshot(
        id=str(node["id"]),
        filename=node["filename"],
        mime_type=node.get("mimeType"),
        content=node["content"],
        thumbnail=node.get("thumbnail"),
    )


def snapshot_from_payload(node: dict, config: IntegrationConfig) -> IssueSnapshot:
    """Build a snapshot from a Jira issue payload.

    Raises RemoteFetchError if required fields are missing or malformed.
    """
    try:
        fields = node["fields"]
        raw_attachments = fields.get("attachment")
        story_points = fields.get(config.story_points_field) if config.story_points_field else None
        return IssueSnapshot(
            id=str(node["id"]) if node.get("id") is not None else None,
            key=node["key"],
            summary=fields["summary"],
            updated=fields["updated"],
            story_points=story_points,
            description=fields.get("description"),
            attachments=None if raw_attachments is None else [_attachment_from_node(a) for a in raw_attachments],
        )
    except (KeyError, TypeError, ValidationError) as exc:
        raise RemoteFetchError(f"Malformed Jira issue payload: {exc}") from exc


class IssueGateway:
    def __init__(self, client: RemoteIssueClient) -> None:
        self._client = client

    async def fetch_by_id(self, issue_ref: IssueRef, config: IntegrationConfig) -> IssueSnapshot:
        _require_enabled(config)
        payload = await self._client.fetch_issue(issue_ref.issue_id, config)
        return snapshot_from_payload(payload, config)

    async def search(self, term: str, config: IntegrationConfig) -> list[SearchResultItem]:
        """Best-effort issue picker lookup; never raises for remote or parse failures."""
        if not config.is_enabled:
            return []
        try:
            payload = await self._client.search_issues(term, config)
            return self._search_items(payload, config)
        except Exception:
            logger.debug("Jira search for %r failed, returning no suggestions", term, exc_info=True)
            return []

    async def list_new_for_import(
        self,
        config: IntegrationConfig,
        exclude_keys: Iterable[str] = (),
    ) -> list[IssueSnapshot]:
        _require_enabled(config)
        payload = await self._client.list_import_candidates(config, exclude_keys)
        try:
            nodes = payload["issues"]
        except (KeyError, TypeError) as exc:
            raise RemoteFetchError(f"Malformed Jira search payload: {exc}") from exc
        return [snapshot_from_payload(n, config) for n in nodes]

    def _search_items(self, payload: dict, config: IntegrationConfig) -> list[SearchResultItem]:
        # The picker returns history and current-search sections that can overlap.
        seen: set[str] = set()
        items = []
        for section in payload.get("sections", []):
            for issue in section.get("issues", []):
                key = issue["key"]
                if key in seen:
                    continue
                seen.add(key)
                plain = issue.get("summaryText") or issue.get("summary", "")
                items.append(
                    SearchResultItem(
                        title=f"{key} {plain}",
                        title_highlighted=f"{key} {issue.get('summary', plain)}",
                        issue_ref=IssueRef(issue_id=key, project_id=config.project_id),
                        summary=plain,
                    )
                )
        return items
