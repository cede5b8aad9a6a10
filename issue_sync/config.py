"""Resolve the integration config governing a local project."""

from issue_sync.errors import ConfigNotFound
from issue_sync.models import IntegrationConfig
from issue_sync.settings import ConfigStore


class ConfigResolver:
    def __init__(self, store: ConfigStore) -> None:
        self._store = store

    async def resolve(self, project_id: str) -> IntegrationConfig:
        """Return the first config the store emits for project_id, ignoring later updates."""
        stream = self._store.observe_config_for_project(project_id)
        try:
            config = await anext(stream, None)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
        if config is None:
            raise ConfigNotFound(project_id)
        return config
