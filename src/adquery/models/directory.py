"""Data models for directory entries and searches."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum, StrEnum
from typing import Any, Self

__all__ = [
    "DEFAULT_FIELDS",
    "MULTI_VALUED_FIELDS",
    "TIMESTAMP_FIELDS",
    "AccountType",
    "Entry",
    "Field",
    "RawAttribute",
    "RawControl",
    "RawEntry",
    "SearchQuery",
]


class Field(StrEnum):
    """Names of well-known directory attributes."""

    ACCOUNT_EXPIRES = "accountExpires"
    ACCOUNT_NAME = "sAMAccountName"
    ACCOUNT_TYPE = "sAMAccountType"
    COMMON_NAME = "cn"
    DEPARTMENT = "department"
    DIRECTORY_ID = "objectGUID"
    DIRECTORY_PATH = "distinguishedName"
    EMAIL = "mail"
    EMPLOYEE_ID = "employeeID"
    ENABLED = "enabled"
    FIRST_NAME = "givenName"
    GROUPS = "memberOf"
    LAST_FIRST = "displayName"
    LAST_LOGON = "lastLogon"
    LOCATION = "physicalDeliveryOfficeName"
    LOGON_COUNT = "logonCount"
    MOBILE = "mobile"
    NAME = "name"
    PASSWORD_LAST_SET = "pwdLastSet"
    PHONE = "telephoneNumber"
    PHOTO = "thumbnailPhoto"
    TITLE = "title"
    TYPE = "objectClass"


DEFAULT_FIELDS = (
    Field.ACCOUNT_NAME,
    Field.NAME,
    Field.TITLE,
    Field.DEPARTMENT,
    Field.EMAIL,
    Field.LOCATION,
    Field.PHONE,
    Field.MOBILE,
)
"""Attributes retrieved when the caller doesn't ask for specific ones."""

MULTI_VALUED_FIELDS = frozenset({Field.GROUPS, Field.TYPE})
"""Attributes that are always lists, even with a single value."""

TIMESTAMP_FIELDS = frozenset(
    {Field.ACCOUNT_EXPIRES, Field.LAST_LOGON, Field.PASSWORD_LAST_SET}
)
"""Attributes holding directory tick timestamps."""


class AccountType(IntEnum):
    """Values of ``sAMAccountType``.

    See https://learn.microsoft.com/windows/win32/adschema/a-samaccounttype
    """

    DOMAIN_OBJECT = 0x0
    GROUP_OBJECT = 0x10000000
    NON_SECURITY_GROUP_OBJECT = 0x10000001
    ALIAS_OBJECT = 0x20000000
    NON_SECURITY_ALIAS_OBJECT = 0x20000001
    USER_ACCOUNT = 0x30000000
    USER_OBJECT = 0x30000000
    MACHINE_ACCOUNT = 0x30000001
    TRUST_ACCOUNT = 0x30000002
    APP_BASIC_GROUP = 0x40000000
    APP_QUERY_GROUP = 0x40000001
    ACCOUNT_MAX = 0x7FFFFFFF

    @classmethod
    def from_code(cls, code: int | str | None) -> Self | None:
        """Convert a raw ``sAMAccountType`` value.

        Parameters
        ----------
        code
            Numeric code as an integer or the decimal string returned by the
            directory.

        Returns
        -------
        AccountType or None
            Matching account type, or `None` if the code is missing or not a
            known account type.
        """
        if code is None:
            return None
        try:
            return cls(int(code))
        except ValueError:
            return None


@dataclass
class RawControl:
    """Response control returned by the directory server."""

    oid: str
    """Object identifier of the control."""

    criticality: bool = False
    """Whether the control was marked critical."""

    value: str | None = None
    """Control value, if any, in printable form."""

    def to_display(self) -> str:
        """Serialize the control for display to callers."""
        return json.dumps(
            {
                "controlType": self.oid,
                "criticality": self.criticality,
                "controlValue": self.value,
            }
        )


@dataclass
class RawAttribute:
    """One attribute of a raw directory entry.

    Every value is available both as text and as bytes. Binary attributes
    must be read from ``buffers`` since their text form is lossy.
    """

    name: str
    """Attribute name as returned by the server."""

    values: list[str] = field(default_factory=list)
    """Values as text."""

    buffers: list[bytes] = field(default_factory=list)
    """Values as bytes."""


@dataclass
class RawEntry:
    """A directory entry as returned by the directory client."""

    dn: str
    """Distinguished name of the entry."""

    object_class: list[str] = field(default_factory=list)
    """Object classes of the entry."""

    attributes: list[RawAttribute] = field(default_factory=list)
    """Attributes in the order returned by the server."""

    controls: list[RawControl] | None = None
    """Response controls attached to the entry, if any."""


@dataclass(frozen=True)
class SearchQuery:
    """A fully-constructed directory search."""

    filter_exp: str
    """Search filter."""

    base_dn: str
    """Base DN of the search. Searches are always subtree searches."""

    size_limit: int
    """Maximum number of entries the server should return."""

    attributes: list[str]
    """Attributes to retrieve."""

    exclude: list[str] = field(default_factory=list)
    """Organizational units whose entries are dropped from the results."""


@dataclass
class Entry:
    """Normalized directory entry.

    Single-valued attributes are flattened to scalars and multi-valued ones
    kept as lists. Photos are `bytes` and timestamps are `datetime`. Nothing
    in here is a directory client type.
    """

    dn: str
    """Distinguished name of the entry."""

    attributes: dict[str, Any] = field(default_factory=dict)
    """Retrieved attributes by name."""

    expired: bool | None = None
    """Whether the account has expired. Only set by login."""

    disabled: bool | None = None
    """Whether the account is disabled. Only set by login."""

    contractor: bool | None = None
    """Whether the entry is a contractor, or `None` if not classified."""

    controls: list[str] | None = None
    """Response controls from the server in display form, if any."""

    def __contains__(self, name: str) -> bool:
        return name in self.attributes

    def __getitem__(self, name: str) -> Any:
        return self.attributes[name]

    def get(self, name: str, default: Any = None) -> Any:
        """Return an attribute value, or the default if it's not present."""
        return self.attributes.get(name, default)

    @property
    def account_name(self) -> str | None:
        """Account name (``sAMAccountName``)."""
        return self.attributes.get(Field.ACCOUNT_NAME)

    @property
    def account_type(self) -> AccountType | None:
        """Account type decoded from ``sAMAccountType``."""
        return AccountType.from_code(self.attributes.get(Field.ACCOUNT_TYPE))

    @property
    def directory_path(self) -> str:
        """Full DN, preferring the ``distinguishedName`` attribute."""
        return self.attributes.get(Field.DIRECTORY_PATH) or self.dn

    @property
    def display_name(self) -> str | None:
        """Display name, usually in ``Last, First`` form."""
        return self.attributes.get(Field.LAST_FIRST)

    @property
    def enabled(self) -> Any:
        """Raw value of the ``enabled`` attribute, `None` if absent."""
        return self.attributes.get(Field.ENABLED)

    @property
    def expires(self) -> datetime | None:
        """When the account expires, or `None` if it never does.

        An ``accountExpires`` value that could not be converted to a time is
        treated as never expiring.
        """
        expires = self.attributes.get(Field.ACCOUNT_EXPIRES)
        return expires if isinstance(expires, datetime) else None

    @property
    def photo(self) -> bytes | None:
        """First thumbnail photo, if any."""
        photo = self.attributes.get(Field.PHOTO)
        if isinstance(photo, list):
            return photo[0] if photo else None
        return photo

    def to_dict(self) -> dict[str, Any]:
        """Flatten the entry into a single mapping.

        Flags that were never set are omitted, so a missing ``contractor``
        key means contractors are not being classified rather than that the
        entry isn't one.
        """
        result = dict(self.attributes)
        for key in ("expired", "disabled", "contractor", "controls"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result
