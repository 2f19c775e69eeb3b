"""Tests for directory entry normalization."""

from __future__ import annotations

import json
from datetime import UTC, datetime

from adquery.factory import Factory
from adquery.models.directory import AccountType, RawControl

from ..support.config import configure
from ..support.directory import build_raw_entry

_PHOTO = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01"


def test_normalize(factory: Factory) -> None:
    normalizer = factory.create_normalizer()
    raw = build_raw_entry(
        "CN=Jane Doe,OU=Staff,DC=example,DC=com",
        {
            "sAMAccountName": ["jdoe"],
            "displayName": ["Doe, Jane"],
            "memberOf": ["CN=Staff,OU=Groups,DC=example,DC=com"],
            "objectClass": ["top", "person", "user"],
            "proxyAddresses": ["smtp:jane@example.com", "SMTP:jd@example.com"],
            "accountExpires": ["130000000000000000"],
            "pwdLastSet": ["0"],
            "sAMAccountType": ["805306368"],
            "thumbnailPhoto": [_PHOTO],
        },
    )
    entry = normalizer.normalize(raw)
    assert entry
    assert entry.dn == raw.dn
    assert entry.attributes == {
        "sAMAccountName": "jdoe",
        "displayName": "Doe, Jane",
        "memberOf": ["CN=Staff,OU=Groups,DC=example,DC=com"],
        "objectClass": ["top", "person", "user"],
        "proxyAddresses": ["smtp:jane@example.com", "SMTP:jd@example.com"],
        "accountExpires": datetime(2012, 12, 14, 23, 6, 40, tzinfo=UTC),
        "pwdLastSet": None,
        "sAMAccountType": "805306368",
        "thumbnailPhoto": _PHOTO,
    }
    assert entry.account_name == "jdoe"
    assert entry.display_name == "Doe, Jane"
    assert entry.account_type == AccountType.USER_ACCOUNT
    assert entry.photo == _PHOTO
    assert entry.directory_path == raw.dn
    assert entry.contractor is False
    assert entry.controls is None
    assert entry.expired is None
    assert entry.disabled is None


def test_photo_is_binary(factory: Factory) -> None:
    normalizer = factory.create_normalizer()

    # The text form of the photo is lossy and must never be used.
    raw = build_raw_entry(
        "CN=Jane Doe,OU=Staff,DC=example,DC=com",
        {"thumbnailPhoto": [_PHOTO, b"\x89PNG\r\n"]},
    )
    assert raw.attributes[0].values[0].encode() != _PHOTO
    entry = normalizer.normalize(raw)
    assert entry
    assert entry["thumbnailPhoto"] == [_PHOTO, b"\x89PNG\r\n"]
    assert entry.photo == _PHOTO


def test_excluded_ou(factory: Factory) -> None:
    normalizer = factory.create_normalizer()
    raw = build_raw_entry(
        "CN=Test User,OU=excluded,OU=Staff,DC=example,DC=com",
        {"sAMAccountName": ["test"], "displayName": ["User, Test"]},
    )
    assert normalizer.normalize(raw) is None

    # An explicit exclusion list replaces the configured one.
    entry = normalizer.normalize(raw, exclude=[])
    assert entry
    assert entry.account_name == "test"
    raw = build_raw_entry(
        "CN=Jane Doe,OU=Staff,DC=example,DC=com", {"sAMAccountName": ["jdoe"]}
    )
    assert normalizer.normalize(raw, exclude=["Staff"]) is None

    # Only organizational units count, not other components of the DN.
    raw = build_raw_entry(
        "CN=Excluded,OU=Staff,DC=example,DC=com", {"sAMAccountName": ["ex"]}
    )
    assert normalizer.normalize(raw)


def test_contractor(factory: Factory) -> None:
    normalizer = factory.create_normalizer()
    raw = build_raw_entry(
        "CN=Jane Doe,OU=Contractors,OU=Staff,DC=example,DC=com",
        {"sAMAccountName": ["jdoe"]},
    )
    entry = normalizer.normalize(raw)
    assert entry
    assert entry.contractor is True
    assert entry.to_dict() == {"sAMAccountName": "jdoe", "contractor": True}

    # Without a configured contractor OU, the flag is omitted entirely.
    config = configure("minimal")
    normalizer = Factory(config).create_normalizer()
    entry = normalizer.normalize(raw)
    assert entry
    assert entry.contractor is None
    assert entry.to_dict() == {"sAMAccountName": "jdoe"}


def test_controls(factory: Factory) -> None:
    normalizer = factory.create_normalizer()
    control = RawControl(oid="1.2.840.113556.1.4.319", value="cookie")
    raw = build_raw_entry(
        "CN=Jane Doe,OU=Staff,DC=example,DC=com",
        {"sAMAccountName": ["jdoe"]},
        controls=[control],
    )
    entry = normalizer.normalize(raw)
    assert entry
    assert entry.controls
    assert json.loads(entry.controls[0]) == {
        "controlType": "1.2.840.113556.1.4.319",
        "criticality": False,
        "controlValue": "cookie",
    }
    assert entry.to_dict()["controls"] == entry.controls


def test_invalid_timestamp(factory: Factory) -> None:
    normalizer = factory.create_normalizer()
    raw = build_raw_entry(
        "CN=Jane Doe,OU=Staff,DC=example,DC=com",
        {"lastLogon": ["never"]},
    )
    entry = normalizer.normalize(raw)
    assert entry
    assert entry["lastLogon"] == "never"
