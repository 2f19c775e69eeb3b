"""Password validation against the directory."""

from __future__ import annotations

from typing import Any

from safir.datetime import current_datetime
from structlog.stdlib import BoundLogger

from ..exceptions import AuthError, DirectoryConnectionError
from ..models.directory import Entry, Field
from ..storage.directory import DirectoryClient
from .search import SearchEngine

__all__ = ["LOGIN_FIELDS", "LoginValidator"]

LOGIN_FIELDS = (
    Field.NAME,
    Field.ACCOUNT_NAME,
    Field.DIRECTORY_PATH,
    Field.ACCOUNT_EXPIRES,
    Field.ENABLED,
)
"""Attributes always retrieved for login, in addition to requested ones."""


class LoginValidator:
    """Check a user's password by binding to the directory as them.

    Expired and disabled accounts cannot bind, so their state is checked
    first from the account entry. For those accounts, the entry is returned
    with ``expired`` or ``disabled`` set and no bind is attempted. Deciding
    what to do with such an account is left to the caller.

    Parameters
    ----------
    search
        Search engine used to look up the account.
    client
        Directory client used for the verification bind.
    logger
        Logger to use.
    """

    def __init__(
        self,
        *,
        search: SearchEngine,
        client: DirectoryClient,
        logger: BoundLogger,
    ) -> None:
        self._search = search
        self._client = client
        self._logger = logger

    async def login(
        self,
        account_name: str,
        password: str,
        fields: list[str] | None = None,
    ) -> Entry:
        """Look up an account and verify its password.

        Parameters
        ----------
        account_name
            Account name of the user.
        password
            Password to verify.
        fields
            Additional attributes to retrieve for the account.

        Returns
        -------
        Entry
            The account entry with ``expired`` and ``disabled`` set. If either
            is true, the password was not checked.

        Raises
        ------
        AuthError
            Raised if the password could not be verified, either because it
            was wrong or because the directory could not be reached.
        NotFoundError
            Raised if the account does not exist.
        """
        logger = self._logger.bind(user=account_name)
        attributes = list(fields or [])
        attributes.extend(f for f in LOGIN_FIELDS if f not in attributes)
        entry = await self._search.get_user(account_name, attributes)

        expires = entry.expires
        entry.expired = expires is not None and expires < current_datetime()
        entry.disabled = Field.ENABLED in entry and not _is_true(entry.enabled)
        if entry.expired or entry.disabled:
            logger.info(
                "Account is not eligible for login",
                expired=entry.expired,
                disabled=entry.disabled,
            )
            return entry

        # A simple bind with an empty password is an anonymous bind, which
        # would succeed regardless of the account.
        if not password:
            logger.info("Rejecting login with empty password")
            raise AuthError("Invalid credentials", account_name)
        try:
            await self._client.bind(entry.directory_path, password)
        except (AuthError, DirectoryConnectionError) as e:
            logger.info("Password verification failed", error=str(e))
            raise AuthError("Invalid credentials", account_name) from e
        logger.info("Password verified")
        return entry


def _is_true(value: Any) -> bool:
    """Interpret a directory Boolean, sent as ``TRUE`` or ``FALSE``."""
    if isinstance(value, str):
        return value.strip().upper() not in ("", "FALSE", "0")
    return bool(value)
