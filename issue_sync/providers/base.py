"""Abstract base class for remote issue API clients."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from issue_sync.models import IntegrationConfig


class RemoteIssueClient(ABC):
    """Raw remote access. Every failure surfaces as RemoteFetchError."""

    @abstractmethod
    async def fetch_issue(self, issue_id: str, config: IntegrationConfig) -> dict: ...

    @abstractmethod
    async def search_issues(self, term: str, config: IntegrationConfig) -> dict: ...

    @abstractmethod
    async def list_import_candidates(
        self,
        config: IntegrationConfig,
        exclude_keys: Iterable[str] = (),
    ) -> dict: ...
