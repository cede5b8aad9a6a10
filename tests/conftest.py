"""Shared test fixtures."""

from collections.abc import AsyncIterator, Iterable

import pytest

from issue_sync.config import ConfigResolver
from issue_sync.gateway import IssueGateway
from issue_sync.models import AttachmentSnapshot, IntegrationConfig, IssueSnapshot
from issue_sync.providers.base import RemoteIssueClient
from issue_sync.service import IssueSyncService


class FakeConfigStore:
    """In-memory config store. Emits each project's configs in order, like a live stream."""

    def __init__(self, configs: dict[str, list[IntegrationConfig | None]]) -> None:
        self._configs = configs
        self.closed = 0

    async def observe_config_for_project(self, project_id: str) -> AsyncIterator[IntegrationConfig | None]:
        try:
            for config in self._configs.get(project_id, []):
                yield config
        finally:
            self.closed += 1


class FakeJiraClient(RemoteIssueClient):
    """Returns canned payloads, or raises the configured exception for every call."""

    def __init__(
        self,
        issue: dict | None = None,
        picker: dict | None = None,
        search: dict | None = None,
        error: BaseException | None = None,
    ) -> None:
        self.issue = issue
        self.picker = picker
        self.search = search
        self.error = error
        self.calls: list[tuple] = []

    async def fetch_issue(self, issue_id: str, config: IntegrationConfig) -> dict:
        self.calls.append(("fetch_issue", issue_id))
        if self.error:
            raise self.error
        return self.issue  # type: ignore[return-value]

    async def search_issues(self, term: str, config: IntegrationConfig) -> dict:
        self.calls.append(("search_issues", term))
        if self.error:
            raise self.error
        return self.picker  # type: ignore[return-value]

    async def list_import_candidates(self, config: IntegrationConfig, exclude_keys: Iterable[str] = ()) -> dict:
        self.calls.append(("list_import_candidates", list(exclude_keys)))
        if self.error:
            raise self.error
        return self.search  # type: ignore[return-value]


def issue_payload(
    key: str = "KEY-1",
    summary: str = "Fix bug",
    updated: str | int = "2024-01-02T10:00:00.000+0000",
    points: float | None = 3,
    attachments: list[dict] | None = None,
) -> dict:
    fields: dict = {"summary": summary, "updated": updated, "description": "Steps to reproduce"}
    if points is not None:
        fields["customfield_10004"] = points
    if attachments is not None:
        fields["attachment"] = attachments
    return {"id": "10001", "key": key, "fields": fields}


def attachment_payload(attachment_id: str = "1", filename: str = "shot.png", mime_type: str = "image/png") -> dict:
    return {
        "id": attachment_id,
        "filename": filename,
        "mimeType": mime_type,
        "content": f"https://jira.example.com/secure/attachment/{attachment_id}/{filename}",
        "thumbnail": f"https://jira.example.com/secure/thumbnail/{attachment_id}/{filename}",
    }


@pytest.fixture
def jira_config() -> IntegrationConfig:
    return IntegrationConfig(
        project_id="P1",
        is_enabled=True,
        host="https://jira.example.com",
        email="dev@example.com",
        api_token="secret-token",
        story_points_field="customfield_10004",
    )


@pytest.fixture
def disabled_config() -> IntegrationConfig:
    return IntegrationConfig(project_id="P2", is_enabled=False, host="https://jira.example.com")


@pytest.fixture
def snapshot() -> IssueSnapshot:
    return IssueSnapshot(
        key="KEY-1",
        summary="Fix bug",
        updated=2000,
        story_points=3,
        attachments=[
            AttachmentSnapshot(id="a", filename="a.png", mime_type="image/png", content="https://j/a.png"),
            AttachmentSnapshot(id="b", filename="b.txt", mime_type="text/plain", content="https://j/b.txt"),
        ],
    )


@pytest.fixture
def config_store(jira_config: IntegrationConfig, disabled_config: IntegrationConfig) -> FakeConfigStore:
    return FakeConfigStore({"P1": [jira_config], "P2": [disabled_config]})


@pytest.fixture
def make_service(config_store: FakeConfigStore):
    def _make(client: RemoteIssueClient) -> IssueSyncService:
        return IssueSyncService(ConfigResolver(config_store), IssueGateway(client))

    return _make
