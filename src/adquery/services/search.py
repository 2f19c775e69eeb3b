"""Directory searches for accounts and people."""

from __future__ import annotations

from structlog.stdlib import BoundLogger

from ..config import DirectoryConfig
from ..exceptions import AuthError, DirectoryConnectionError, NotFoundError
from ..models.directory import Entry, SearchQuery
from ..storage.directory import DirectoryClient
from ..util import validate_filter
from .filters import FilterBuilder, clean_search_text
from .normalizer import EntryNormalizer

__all__ = ["SearchEngine"]


class SearchEngine:
    """Run directory searches and normalize the results.

    Every search opens its own connection, bound as the configured service
    account, and closes it when done.

    Parameters
    ----------
    config
        Directory configuration.
    client
        Directory client used to connect and search.
    filters
        Builder for search filters.
    normalizer
        Normalizer for the returned entries.
    logger
        Logger to use.
    """

    def __init__(
        self,
        *,
        config: DirectoryConfig,
        client: DirectoryClient,
        filters: FilterBuilder,
        normalizer: EntryNormalizer,
        logger: BoundLogger,
    ) -> None:
        self._config = config
        self._client = client
        self._filters = filters
        self._normalizer = normalizer
        self._logger = logger

    def build_query(
        self, filter_exp: str, fields: list[str] | None = None
    ) -> SearchQuery:
        """Build a search using the configured base DN and size limit.

        Parameters
        ----------
        filter_exp
            Search filter.
        fields
            Attributes to retrieve. If empty or not given, use the configured
            default attributes.

        Returns
        -------
        SearchQuery
            The corresponding search.
        """
        return SearchQuery(
            filter_exp=filter_exp,
            base_dn=self._config.base_dn,
            size_limit=self._config.size_limit,
            attributes=list(fields or self._config.default_fields),
            exclude=list(self._config.excluded_ous),
        )

    async def search(self, query: SearchQuery) -> list[Entry]:
        """Run a search and return the normalized entries.

        Parameters
        ----------
        query
            Search to run.

        Returns
        -------
        list of Entry
            Normalized entries in the order returned by the server, minus any
            entries in excluded organizational units.

        Raises
        ------
        DirectoryConnectionError
            Raised if the directory could not be reached or the service
            account bind failed.
        InvalidQueryError
            Raised if the filter is not structurally valid.
        SearchError
            Raised if the search failed. Partial results are discarded.
        """
        validate_filter(query.filter_exp)
        user_dn = self._config.user_dn
        password = None
        if self._config.password:
            password = self._config.password.get_secret_value()
        try:
            conn = await self._client.connect(user_dn, password)
        except AuthError as e:
            msg = "Service account bind to directory failed"
            self._logger.error(msg, bind_dn=user_dn, error=str(e))
            raise DirectoryConnectionError(msg, user_dn) from e
        try:
            results = await self._client.search(conn, query)
        finally:
            conn.close()

        entries = []
        for raw in results:
            entry = self._normalizer.normalize(raw, query.exclude)
            if entry is not None:
                entries.append(entry)
        self._logger.debug(
            "Directory search complete",
            ldap_search=query.filter_exp,
            count=len(results),
            returned=len(entries),
        )
        return entries

    async def find_user(
        self, account_name: str, fields: list[str] | None = None
    ) -> list[Entry]:
        """Find a user by account name.

        Parameters
        ----------
        account_name
            Account name to look up. An empty name returns no results
            without contacting the directory.
        fields
            Attributes to retrieve, or `None` for the default attributes.

        Returns
        -------
        list of Entry
            Matching entries, normally at most one.
        """
        account_name = account_name.strip()
        if not account_name:
            return []
        filter_exp = self._filters.account_filter(account_name)
        return await self.search(self.build_query(filter_exp, fields))

    async def find_matching_users(
        self, text: str, fields: list[str] | None = None
    ) -> list[Entry]:
        """Find all users matching a name, phone number, or email prefix.

        Parameters
        ----------
        text
            Search text, possibly with URL-encoded spaces. Empty text returns
            no results without contacting the directory.
        fields
            Attributes to retrieve, or `None` for the default attributes.

        Returns
        -------
        list of Entry
            Matching entries.
        """
        if not clean_search_text(text):
            return []
        filter_exp = self._filters.person_filter(text)
        return await self.search(self.build_query(filter_exp, fields))

    async def get_user(
        self, account_name: str, fields: list[str] | None = None
    ) -> Entry:
        """Retrieve exactly one user by account name.

        Parameters
        ----------
        account_name
            Account name to look up.
        fields
            Attributes to retrieve, or `None` for the default attributes.

        Returns
        -------
        Entry
            The user's entry.

        Raises
        ------
        NotFoundError
            Raised if no entry matched.
        """
        entries = await self.find_user(account_name, fields)
        if not entries:
            msg = f"Account {account_name} not found"
            raise NotFoundError(msg, account_name or None)
        if len(entries) > 1:
            self._logger.warning(
                "Multiple entries for account, using first",
                user=account_name,
                count=len(entries),
            )
        return entries[0]
