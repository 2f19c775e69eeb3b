"""Constants for adquery."""

__all__ = [
    "ACCOUNT_NEVER_EXPIRES",
    "CONFIG_PATH",
    "DEFAULT_MIN_SEARCH_LENGTH",
    "DEFAULT_SIZE_LIMIT",
    "FILETIME_EPOCH_OFFSET",
    "FILETIME_TICKS_PER_SECOND",
    "PHONE_DIGITS",
]

ACCOUNT_NEVER_EXPIRES = 0x7FFFFFFFFFFFFFFF
"""Value of ``accountExpires`` used for accounts that never expire.

Active Directory also uses ``0`` with the same meaning.
"""

CONFIG_PATH = "/etc/adquery/adquery.yaml"
"""Default configuration path."""

DEFAULT_MIN_SEARCH_LENGTH = 2
"""Minimum length of each half of a two-part name search."""

DEFAULT_SIZE_LIMIT = 400
"""Maximum number of entries requested from the directory in one search."""

FILETIME_EPOCH_OFFSET = 11644473600
"""Seconds between the directory tick epoch and the UNIX epoch.

This is the offset between 1601-01-01 and 1970-01-01. Some references give
11676009600, which produces dates a year off from those shown by directory
administration tools.
"""

FILETIME_TICKS_PER_SECOND = 10_000_000
"""Directory timestamps count 100-nanosecond intervals."""

PHONE_DIGITS = 10
"""Number of significant digits in a stored telephone number."""
