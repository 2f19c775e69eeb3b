"""Configuration dependency."""

from __future__ import annotations

import os
from pathlib import Path

from ..config import Config
from ..constants import CONFIG_PATH

__all__ = ["ConfigDependency", "config_dependency"]


class ConfigDependency:
    """Load the adquery configuration on first use.

    The path is resolved when the configuration is first loaded rather than
    at import time, so ``ADQUERY_CONFIG_PATH`` may be set by the command-line
    layer after this module is imported. An explicit path from
    `set_config_path` takes precedence over the environment.
    """

    def __init__(self) -> None:
        self._config_path: Path | None = None
        self._config: Config | None = None

    async def __call__(self) -> Config:
        """Load the configuration if necessary and return it."""
        return self.config()

    @property
    def config_path(self) -> Path:
        """Path from which the configuration is (or will be) loaded."""
        if self._config_path:
            return self._config_path
        return Path(os.getenv("ADQUERY_CONFIG_PATH", CONFIG_PATH))

    def config(self) -> Config:
        """Load the configuration if necessary and return it.

        Loading the configuration also configures logging. This is the
        non-async equivalent of calling the dependency.
        """
        if not self._config:
            self._config = self._load(self.config_path)
        return self._config

    def set_config_path(self, path: Path) -> None:
        """Load the configuration from a new path.

        Parameters
        ----------
        path
            The new configuration path.
        """
        self._config_path = path
        self._config = self._load(path)

    def _load(self, path: Path) -> Config:
        config = Config.from_file(path)
        config.configure_logging()
        return config


config_dependency = ConfigDependency()
"""The dependency that will return the current configuration."""
