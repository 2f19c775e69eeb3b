"""Exceptions for adquery."""

from __future__ import annotations

from safir.slack.blockkit import SlackException

__all__ = [
    "AuthError",
    "DirectoryConnectionError",
    "DirectoryError",
    "InvalidQueryError",
    "NotFoundError",
    "SearchError",
]


class DirectoryError(SlackException):
    """Base class for failures talking to the directory.

    The directory may be affected by an outage that is indistinguishable from
    a permanent failure, so none of these exceptions are retried internally.
    Callers that want retries have to add them.
    """


class DirectoryConnectionError(DirectoryError):
    """Unable to connect to the directory or bind as the service account."""


class SearchError(DirectoryError):
    """A directory search failed.

    Raised for malformed filters rejected by the server, searches that exceed
    the size limit, and any other server-side failure. No partial results are
    returned when this is raised.
    """


class AuthError(DirectoryError):
    """Verification bind as a user failed.

    Wrong passwords and unreachable directory servers are deliberately not
    distinguished. The underlying cause is chained and logged.
    """


class NotFoundError(DirectoryError):
    """The lookup returned no entry where exactly one was expected."""


class InvalidQueryError(DirectoryError):
    """Caller input cannot be turned into a valid search filter."""
