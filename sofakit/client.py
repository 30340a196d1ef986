"""Server-level operations: cluster setup and node configuration."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sofakit.common import CouchError, merge_options

_CLUSTER_METHODS = ("cluster_status", "cluster_setup")
_CONFIG_METHODS = (
    "config",
    "config_section",
    "config_value",
    "set_config_value",
    "delete_config_key",
)


def _supports(driver: Any, names: Iterable[str]) -> bool:
    return all(callable(getattr(driver, name, None)) for name in names)


class Client:
    """A handle to a CouchDB-like server, backed by a driver client."""

    def __init__(self, driver_client: Any) -> None:
        self.driver_client = driver_client

    def _cluster(self) -> Any:
        if not _supports(self.driver_client, _CLUSTER_METHODS):
            raise CouchError("sofakit: driver does not support cluster operations", 501)
        return self.driver_client

    def _configer(self) -> Any:
        if not _supports(self.driver_client, _CONFIG_METHODS):
            raise CouchError("sofakit: driver does not support Config interface", 501)
        return self.driver_client

    def cluster_status(self, *args: Any) -> str:
        """Return the current cluster status."""
        return self._cluster().cluster_status(merge_options(*args))

    def cluster_setup(self, action: Any) -> None:
        """Perform a cluster setup action understood by the driver."""
        self._cluster().cluster_setup(action)

    def config(self, node: str) -> dict[str, dict[str, str]]:
        """Return the whole configuration of ``node``, section by section."""
        sections = self._configer().config(node)
        return {name: dict(values) for name, values in sections.items()}

    def config_section(self, node: str, section: str) -> dict[str, str]:
        """Return one section of the configuration of ``node``."""
        return dict(self._configer().config_section(node, section))

    def config_value(self, node: str, section: str, key: str) -> str:
        """Return a single configuration value of ``node``."""
        return self._configer().config_value(node, section, key)

    def set_config_value(self, node: str, section: str, key: str, value: str) -> str:
        """Set a configuration value on ``node``, returning the old value."""
        return self._configer().set_config_value(node, section, key, value)

    def delete_config_key(self, node: str, section: str, key: str) -> str:
        """Delete a configuration key on ``node``, returning the old value."""
        return self._configer().delete_config_key(node, section, key)