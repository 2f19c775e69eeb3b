"""Construction of directory search filters from user input."""

from __future__ import annotations

import re

from bonsai.utils import escape_filter_exp

from ..config import DirectoryConfig
from ..exceptions import InvalidQueryError
from ..models.directory import Field
from ..util import format_phone_search, validate_filter

__all__ = ["FilterBuilder", "clean_search_text"]

_FILTER_SPECIALS = frozenset("()*\\\x00")
"""Characters that can never appear in an account name."""


def clean_search_text(text: str) -> str:
    """Undo URL encoding of spaces and trim.

    Search text often arrives straight from a query string, where spaces may
    be encoded as ``%20`` or ``+``.
    """
    return re.sub(r"%20|\+", " ", text).strip()


class FilterBuilder:
    """Build search filters for account lookups and person searches.

    Parameters
    ----------
    config
        Directory configuration, used for the minimum search length and the
        excluded account filter.
    """

    def __init__(self, config: DirectoryConfig) -> None:
        self._config = config

    def account_filter(self, account_name: str) -> str:
        """Build an exact-match filter for an account name.

        Parameters
        ----------
        account_name
            Account name (``sAMAccountName``). Must not be empty.

        Returns
        -------
        str
            Equality filter on the account name.

        Raises
        ------
        InvalidQueryError
            Raised if the account name contains filter metacharacters, which
            are never valid in account names.
        """
        if _FILTER_SPECIALS.intersection(account_name):
            msg = f"Invalid character in account name {account_name!r}"
            raise InvalidQueryError(msg, account_name)
        return validate_filter(f"({Field.ACCOUNT_NAME}={account_name})")

    def person_filter(self, query: str) -> str:
        """Build a filter for a free-text person search.

        The search text is tried, in order, as a first and last name pair, a
        partial phone number, and finally a prefix of a first name, display
        name, or email address. Input that contains both a space and a run of
        digits is therefore treated as a name if both words are long enough.

        Parameters
        ----------
        query
            Search text. Must not be empty after cleanup.

        Returns
        -------
        str
            Filter restricted to user objects that don't match the excluded
            account filter, if one is configured.

        Raises
        ------
        InvalidQueryError
            Raised if the search text contains a NUL character.
        """
        text = clean_search_text(query)
        if "\x00" in text:
            raise InvalidQueryError("Search text contains NUL character")

        if parts := self._split_name(text):
            first, last = (escape_filter_exp(p) for p in parts)
            first_last = _name_filter(first, last)
            last_first = _name_filter(last, first)
            search = f"(|{first_last}{last_first})"
        elif re.search(r"\d{3}", text):
            phone = format_phone_search(text)
            search = f"({Field.PHONE}=*{phone}*)"
        else:
            value = escape_filter_exp(text)
            search = (
                f"(|({Field.FIRST_NAME}={value}*)"
                f"({Field.LAST_FIRST}={value}*)"
                f"({Field.EMAIL}={value}*))"
            )

        # Test accounts for otherwise high-security users are excluded.
        exclude = self._config.exclude_user_query
        exclusion = f"(!{exclude})" if exclude else ""
        return validate_filter(f"(&({Field.TYPE}=user){exclusion}{search})")

    def _split_name(self, text: str) -> tuple[str, str] | None:
        """Split text into first and last name if it looks like one."""
        parts = text.split()
        if len(parts) != 2:
            return None
        minimum = self._config.min_search_length
        if len(parts[0]) < minimum or len(parts[1]) < minimum:
            return None
        return parts[0], parts[1]


def _name_filter(first: str, last: str) -> str:
    """Match a first name prefix and a ``Last, First`` display name prefix."""
    return f"(&({Field.FIRST_NAME}={first}*)({Field.LAST_FIRST}={last}*))"
