"""General utility functions."""

from __future__ import annotations

import re
from datetime import UTC, datetime

from bonsai import LDAPDN, InvalidDN

from .constants import (
    ACCOUNT_NEVER_EXPIRES,
    FILETIME_EPOCH_OFFSET,
    FILETIME_TICKS_PER_SECOND,
    PHONE_DIGITS,
)
from .exceptions import InvalidQueryError

__all__ = [
    "format_phone_search",
    "organizational_units",
    "parse_timestamp",
    "validate_filter",
]

_MAX_TIMESTAMP = datetime.max.replace(tzinfo=UTC).timestamp()
"""Largest UNIX timestamp that can be represented as a datetime."""


def format_phone_search(text: str) -> str:
    """Format a partial phone number the way the directory stores it.

    Numbers are stored as ``xxx-xxx-xxxx``, so a substring search only
    succeeds if the search text uses the same punctuation.

    Parameters
    ----------
    text
        Search text containing digits and possibly other characters.

    Returns
    -------
    str
        Canonical form: ``<head>-xxx-xxxx`` for more than seven digits,
        ``<head>-xxxx`` for five to seven digits, and bare digits otherwise.
        Only the last ten digits are kept, so a leading country code is
        dropped.
    """
    digits = re.sub(r"\D", "", text)
    if len(digits) > PHONE_DIGITS:
        digits = digits[-PHONE_DIGITS:]
    if len(digits) > 7:
        return f"{digits[:-7]}-{digits[-7:-4]}-{digits[-4:]}"
    elif len(digits) > 4:
        return f"{digits[:-4]}-{digits[-4:]}"
    else:
        return digits


def organizational_units(dn: str) -> list[str]:
    """Return the values of all ``OU`` components of a DN.

    Parameters
    ----------
    dn
        Distinguished name of a directory entry.

    Returns
    -------
    list of str
        Organizational unit names, innermost first. A DN that cannot be
        parsed has no organizational units.
    """
    try:
        rdns = LDAPDN(dn).rdns
    except InvalidDN:
        return []
    return [v for rdn in rdns for a, v in rdn if a.upper() == "OU"]


def parse_timestamp(ticks: int | str) -> datetime | None:
    """Convert a directory tick timestamp to a datetime.

    Parameters
    ----------
    ticks
        Number of 100-nanosecond intervals since the directory epoch, as an
        integer or the string form returned by the server.

    Returns
    -------
    datetime or None
        Corresponding time in UTC, or `None` for the two values the
        directory uses to mean "never" and for any time too far in the
        future to represent.

    Raises
    ------
    ValueError
        Raised if the value is not an integer.
    """
    value = int(ticks)
    if value in (0, ACCOUNT_NEVER_EXPIRES):
        return None
    seconds = value / FILETIME_TICKS_PER_SECOND - FILETIME_EPOCH_OFFSET
    if seconds >= _MAX_TIMESTAMP:
        return None
    return datetime.fromtimestamp(seconds, tz=UTC)


def validate_filter(filter_exp: str) -> str:
    """Check that a search filter is structurally valid.

    This only checks what can be checked without a schema: the filter must
    be parenthesized, its parentheses must balance, and it must not contain
    NUL characters. Literal parentheses in values must be escaped.

    Parameters
    ----------
    filter_exp
        Search filter.

    Returns
    -------
    str
        The same filter, for convenience.

    Raises
    ------
    InvalidQueryError
        Raised if the filter is not valid.
    """
    if not filter_exp.startswith("(") or not filter_exp.endswith(")"):
        msg = f"Search filter {filter_exp!r} is not parenthesized"
        raise InvalidQueryError(msg)
    if "\x00" in filter_exp:
        raise InvalidQueryError("Search filter contains NUL character")
    depth = 0
    for i, char in enumerate(filter_exp):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if depth < 0 or (depth == 0 and i < len(filter_exp) - 1):
            msg = f"Search filter {filter_exp!r} has unbalanced parentheses"
            raise InvalidQueryError(msg)
    if depth != 0:
        msg = f"Search filter {filter_exp!r} has unbalanced parentheses"
        raise InvalidQueryError(msg)
    return filter_exp
