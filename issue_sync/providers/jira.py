"""Jira REST API v2 client."""

import logging
import re
from collections.abc import Iterable

import httpx

from issue_sync.errors import RemoteFetchError
from issue_sync.models import IntegrationConfig
from issue_sync.providers.base import RemoteIssueClient
from issue_sync.settings import IssueSyncSettings

logger = logging.getLogger(__name__)

API_PATH = "/rest/api/2"

BASE_FIELDS = ["summary", "updated", "attachment", "description"]

MAX_IMPORT_RESULTS = 100

_ORDER_BY = re.compile(r"\s*\bORDER\s+BY\b", re.IGNORECASE)


def _fields_for(config: IntegrationConfig) -> list[str]:
    if config.story_points_field:
        return [*BASE_FIELDS, config.story_points_field]
    return list(BASE_FIELDS)


def exclude_keys_from_jql(jql: str, keys: Iterable[str]) -> str:
    """Return jql narrowed with ``key NOT IN (...)``, keeping any ORDER BY clause last."""
    quoted = ", ".join(f'"{k}"' for k in keys)
    if not quoted:
        return jql
    match = _ORDER_BY.search(jql)
    where, order = (jql[: match.start()], jql[match.start() :]) if match else (jql, "")
    where, order = where.strip(), order.strip()
    clause = f"key NOT IN ({quoted})"
    narrowed = f"({where}) AND {clause}" if where else clause
    return f"{narrowed} {order}" if order else narrowed


class JiraClient(RemoteIssueClient):
    def __init__(self, settings: IssueSyncSettings | None = None) -> None:
        self._timeout = (settings or IssueSyncSettings()).request_timeout

    def _auth(self, config: IntegrationConfig) -> httpx.BasicAuth | None:
        if config.email and config.api_token:
            return httpx.BasicAuth(config.email, config.api_token.get_secret_value())
        return None

    async def _request(
        self,
        method: str,
        path: str,
        config: IntegrationConfig,
        params: dict | None = None,
        body: dict | None = None,
    ) -> dict:
        url = f"{config.host.rstrip('/')}{API_PATH}{path}"
        logger.debug("Jira %s %s", method, url)
        try:
            async with httpx.AsyncClient(auth=self._auth(config), timeout=self._timeout) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=body,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise RemoteFetchError(f"Jira request failed: {exc}") from exc

        if response.status_code == 401:
            raise RemoteFetchError(
                f"Jira API returned 401. Check email and api_token for project '{config.project_id}'.",
                status_code=401,
            )
        if response.is_error:
            raise RemoteFetchError(
                f"Jira API returned {response.status_code} for {method} {path}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteFetchError(f"Jira returned invalid JSON for {method} {path}") from exc

    async def fetch_issue(self, issue_id: str, config: IntegrationConfig) -> dict:
        return await self._request(
            "GET",
            f"/issue/{issue_id}",
            config,
            params={"fields": ",".join(_fields_for(config))},
        )

    async def search_issues(self, term: str, config: IntegrationConfig) -> dict:
        return await self._request(
            "GET",
            "/issue/picker",
            config,
            params={"query": term, "showSubTasks": "true", "showSubTaskParent": "true"},
        )

    async def list_import_candidates(
        self,
        config: IntegrationConfig,
        exclude_keys: Iterable[str] = (),
    ) -> dict:
        return await self._request(
            "POST",
            "/search",
            config,
            body={
                "jql": exclude_keys_from_jql(config.auto_import_jql, exclude_keys),
                "fields": _fields_for(config),
                "maxResults": MAX_IMPORT_RESULTS,
                # stale or deleted keys in the exclusion list must not fail the query
                "validateQuery": "warn",
            },
        )
