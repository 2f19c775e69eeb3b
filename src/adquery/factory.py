"""Create adquery components."""

from __future__ import annotations

import structlog
from structlog.stdlib import BoundLogger

from .config import Config
from .services.filters import FilterBuilder
from .services.login import LoginValidator
from .services.normalizer import EntryNormalizer
from .services.search import SearchEngine
from .storage.directory import DirectoryClient

__all__ = ["Factory"]


class Factory:
    """Build adquery components.

    Nothing created here holds state between calls other than the frozen
    configuration, so components may be created once and shared by
    concurrent callers.

    Parameters
    ----------
    config
        adquery configuration.
    logger
        Logger to use. If not given, the ``adquery`` logger is used.
    """

    def __init__(
        self, config: Config, logger: BoundLogger | None = None
    ) -> None:
        self._config = config
        self._logger = logger or structlog.get_logger("adquery")

    def create_directory_client(self) -> DirectoryClient:
        """Create the client for talking to the directory server.

        Returns
        -------
        DirectoryClient
            Newly-created directory client.
        """
        return DirectoryClient(self._config.directory, self._logger)

    def create_filter_builder(self) -> FilterBuilder:
        """Create a search filter builder.

        Returns
        -------
        FilterBuilder
            Newly-created filter builder.
        """
        return FilterBuilder(self._config.directory)

    def create_login_validator(self) -> LoginValidator:
        """Create a login validator.

        Returns
        -------
        LoginValidator
            Newly-created login validator.
        """
        return LoginValidator(
            search=self.create_search_engine(),
            client=self.create_directory_client(),
            logger=self._logger,
        )

    def create_normalizer(self) -> EntryNormalizer:
        """Create a directory entry normalizer.

        Returns
        -------
        EntryNormalizer
            Newly-created normalizer.
        """
        return EntryNormalizer(self._config.directory, self._logger)

    def create_search_engine(self) -> SearchEngine:
        """Create a search engine.

        Returns
        -------
        SearchEngine
            Newly-created search engine.
        """
        return SearchEngine(
            config=self._config.directory,
            client=self.create_directory_client(),
            filters=self.create_filter_builder(),
            normalizer=self.create_normalizer(),
            logger=self._logger,
        )
