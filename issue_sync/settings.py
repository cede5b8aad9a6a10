"""Settings and the TOML-backed per-project configuration store."""

import asyncio
from collections.abc import AsyncIterator, Mapping
from pathlib import Path
from typing import Protocol

import tomlkit
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from tomlkit.exceptions import TOMLKitError

from issue_sync.errors import IssueSyncError
from issue_sync.models import IntegrationConfig

CONFIG_PATH = Path.home() / ".config" / "issue-sync" / "config.toml"


class IssueSyncSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ISSUE_SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_path: Path = CONFIG_PATH
    request_timeout: float = 30.0  # seconds, applied by the Jira client
    log_level: str = "WARNING"


class ConfigStore(Protocol):
    def observe_config_for_project(self, project_id: str) -> AsyncIterator[IntegrationConfig | None]: ...


def _load_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load the config file, returning an empty document if missing."""
    if not path.exists():
        return tomlkit.document()
    try:
        with path.open() as fh:
            return tomlkit.load(fh)
    except TOMLKitError as exc:
        raise IssueSyncError(f"Invalid config file {path}: {exc}") from exc


def _project_tables(doc: Mapping) -> Mapping:
    projects = doc.get("projects", {})
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return projects if isinstance(projects, Mapping) else {}


def list_projects(path: Path) -> list[str]:
    return [k for k, v in _project_tables(_load_toml(path)).items() if isinstance(v, Mapping)]


class TomlConfigStore:
    """Config store reading ``[projects."<project_id>"]`` tables from a TOML file.

    The file is read again on every observation, so edits are picked up by the
    next resolution without a restart.
    """

    def __init__(self, path: Path = CONFIG_PATH) -> None:
        self._path = path

    async def observe_config_for_project(self, project_id: str) -> AsyncIterator[IntegrationConfig | None]:
        doc = await asyncio.to_thread(_load_toml, self._path)
        table = _project_tables(doc).get(project_id)
        if not isinstance(table, Mapping):
            yield None
            return
        values = table.unwrap() if isinstance(table, tomlkit.items.AbstractTable) else dict(table)
        values.pop("project_id", None)  # the table name wins
        try:
            config = IntegrationConfig(project_id=project_id, **values)
        except ValidationError as exc:
            raise IssueSyncError(f"Invalid config for project '{project_id}' in {self._path}: {exc}") from exc
        yield config
