"""Directory client layer for adquery."""

from __future__ import annotations

import asyncio
from typing import Any

import bonsai
from bonsai import LDAPClient, LDAPEntry, LDAPSearchScope
from bonsai.asyncio import AIOLDAPConnection
from structlog.stdlib import BoundLogger

from ..config import DirectoryConfig
from ..exceptions import AuthError, DirectoryConnectionError, SearchError
from ..models.directory import Field, RawAttribute, RawEntry, SearchQuery

__all__ = ["DirectoryClient"]


class DirectoryClient:
    """Thin layer over bonsai for connecting, binding, and searching.

    bonsai binds while connecting, so `connect` takes the bind identity.
    Connections are not pooled: every caller opens its own connection and is
    responsible for closing it.

    bonsai does not expose response controls on individual search results,
    so the entries returned by `search` always have ``controls`` set to
    `None`.

    Parameters
    ----------
    config
        Configuration for the directory server.
    logger
        Logger for debug messages and errors.
    """

    def __init__(self, config: DirectoryConfig, logger: BoundLogger) -> None:
        self._config = config
        self._url = str(config.url)
        self._logger = logger.bind(ldap_url=self._url)

    async def connect(
        self, identity: str | None = None, credential: str | None = None
    ) -> AIOLDAPConnection:
        """Open a connection to the directory, bound as the given identity.

        Parameters
        ----------
        identity
            DN to bind as, or `None` for an anonymous bind.
        credential
            Password for ``identity``.

        Returns
        -------
        AIOLDAPConnection
            Open connection. The caller must close it.

        Raises
        ------
        AuthError
            Raised if the server rejected the bind.
        DirectoryConnectionError
            Raised if the server could not be reached.
        """
        client = LDAPClient(self._url)
        client.set_raw_attributes([Field.PHOTO.value])
        if identity:
            client.set_credentials(
                "SIMPLE", user=identity, password=credential
            )
        logger = self._logger.bind(bind_dn=identity)
        try:
            logger.debug("Connecting to directory")
            return await client.connect(
                is_async=True, timeout=self._config.timeout
            )
        except bonsai.AuthenticationError as e:
            logger.info("Directory bind rejected", error=str(e))
            raise AuthError("Directory bind rejected", identity) from e
        except (bonsai.LDAPError, asyncio.TimeoutError) as e:
            logger.exception("Cannot connect to directory", error=str(e))
            msg = f"Cannot connect to directory: {type(e).__name__}: {e!s}"
            raise DirectoryConnectionError(msg, identity) from e

    async def bind(self, identity: str, credential: str) -> None:
        """Check a credential by binding with it.

        The connection is closed again immediately.

        Parameters
        ----------
        identity
            DN to bind as.
        credential
            Password to check.

        Raises
        ------
        AuthError
            Raised if the server rejected the bind.
        DirectoryConnectionError
            Raised if the server could not be reached.
        """
        conn = await self.connect(identity, credential)
        conn.close()

    async def search(
        self, conn: AIOLDAPConnection, query: SearchQuery
    ) -> list[RawEntry]:
        """Run a subtree search.

        Parameters
        ----------
        conn
            Open connection from `connect`.
        query
            Search to perform.

        Returns
        -------
        list of RawEntry
            Entries in the order the server returned them.

        Raises
        ------
        SearchError
            Raised if the search failed, including if more entries matched
            than the size limit allows.
        """
        logger = self._logger.bind(
            ldap_attrs=query.attributes,
            ldap_base=query.base_dn,
            ldap_search=query.filter_exp,
        )
        try:
            logger.debug("Querying directory")
            results = await conn.search(
                base=query.base_dn,
                scope=LDAPSearchScope.SUBTREE,
                filter_exp=query.filter_exp,
                attrlist=query.attributes,
                timeout=self._config.timeout,
                sizelimit=query.size_limit,
            )
        except bonsai.SizeLimitError as e:
            msg = f"More than {query.size_limit} entries matched"
            logger.warning("Directory search too broad", error=str(e))
            raise SearchError(msg) from e
        except (bonsai.LDAPError, asyncio.TimeoutError) as e:
            logger.exception("Cannot query directory", error=str(e))
            msg = f"Error querying directory: {type(e).__name__}: {e!s}"
            raise SearchError(msg) from e
        return [_to_raw_entry(r) for r in results]


def _to_raw_entry(entry: LDAPEntry) -> RawEntry:
    """Convert a bonsai entry into a `RawEntry`."""
    attributes = []
    object_class: list[str] = []
    for name, values in entry.items():
        if name.lower() == "dn":
            continue
        attribute = RawAttribute(name=name)
        for value in values:
            attribute.values.append(_to_text(value))
            attribute.buffers.append(_to_bytes(value))
        if name.lower() == Field.TYPE.lower():
            object_class = list(attribute.values)
        attributes.append(attribute)
    return RawEntry(
        dn=str(entry.dn), object_class=object_class, attributes=attributes
    )


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    return str(value).encode()


def _to_text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode(errors="replace")
    return str(value)
