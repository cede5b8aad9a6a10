"""IssueSyncService, the only entry point callers use.

Each operation is a short resolve → fetch → compute pipeline. Nothing is cached
between calls and nothing is written to the task store; callers persist the
returned changes themselves.
"""

from collections.abc import Iterable

from issue_sync import attachments, change_detector
from issue_sync.config import ConfigResolver
from issue_sync.errors import InvalidArgument
from issue_sync.gateway import IssueGateway
from issue_sync.models import (
    IssueRef,
    IssueSnapshot,
    LocalAttachment,
    LocalTaskSyncState,
    RefreshResult,
    SearchResultItem,
    TaskFieldChanges,
)


class IssueSyncService:
    def __init__(self, resolver: ConfigResolver, gateway: IssueGateway) -> None:
        self._resolver = resolver
        self._gateway = gateway

    # NOTE: issue_id is the Jira issue key (KEY-1), not the numeric id
    async def get_by_id(self, issue_id: str, project_id: str) -> IssueSnapshot:
        config = await self._resolver.resolve(project_id)
        return await self._gateway.fetch_by_id(IssueRef(issue_id=issue_id, project_id=project_id), config)

    async def search(self, term: str, project_id: str) -> list[SearchResultItem]:
        config = await self._resolver.resolve(project_id)
        return await self._gateway.search(term, config)

    async def refresh_task(self, task: LocalTaskSyncState) -> RefreshResult | None:
        """Fetch the task's issue and return the changes to merge, or None if unchanged."""
        if not task.project_id:
            raise InvalidArgument("No projectId")
        if not task.issue_id:
            raise InvalidArgument("No issueId")

        config = await self._resolver.resolve(task.project_id)
        snapshot = await self._gateway.fetch_by_id(
            IssueRef(issue_id=task.issue_id, project_id=task.project_id),
            config,
        )
        changes = change_detector.detect(task.issue_last_updated, snapshot)
        if changes is None:
            return None
        return RefreshResult(changes=changes, snapshot=snapshot, display_title=snapshot.key)

    async def issue_link(self, issue_id: str | None, project_id: str | None) -> str:
        if not issue_id or not project_id:
            raise InvalidArgument("No issueId or no projectId")
        config = await self._resolver.resolve(project_id)
        return f"{config.host.rstrip('/')}/browse/{issue_id}"

    async def list_new_issues_for_import(
        self,
        project_id: str,
        existing_issue_ids: Iterable[str | int] = (),
    ) -> list[IssueSnapshot]:
        config = await self._resolver.resolve(project_id)
        return await self._gateway.list_new_for_import(config, [str(i) for i in existing_issue_ids])

    def get_add_task_data(self, snapshot: IssueSnapshot) -> TaskFieldChanges:
        return change_detector.add_task_data(snapshot)

    def map_attachments(self, snapshot: IssueSnapshot | None) -> list[LocalAttachment]:
        return attachments.map_all(snapshot)
