"""Tests for search filter construction."""

from __future__ import annotations

import pytest

from adquery.exceptions import InvalidQueryError
from adquery.factory import Factory

from ..support.config import configure

_PREFIX = "(&(objectClass=user)(!(sAMAccountName=999*))"


def test_account_filter(factory: Factory) -> None:
    filters = factory.create_filter_builder()
    assert filters.account_filter("jdoe") == "(sAMAccountName=jdoe)"

    for name in ("j*", "jdoe)(cn=*", "a\\b", "nul\x00"):
        with pytest.raises(InvalidQueryError):
            filters.account_filter(name)


def test_name_search(factory: Factory) -> None:
    filters = factory.create_filter_builder()
    expected = (
        _PREFIX + "(|(&(givenName=Jane*)(displayName=Doe*))"
        "(&(givenName=Doe*)(displayName=Jane*))))"
    )
    assert filters.person_filter("Jane Doe") == expected
    assert filters.person_filter("  Jane%20Doe ") == expected
    assert filters.person_filter("Jane+Doe") == expected
    assert filters.person_filter("Jane   Doe") == expected


def test_short_name_search(factory: Factory) -> None:
    filters = factory.create_filter_builder()

    # One half is shorter than the minimum, so the whole text is a prefix.
    expected = (
        _PREFIX + "(|(givenName=Jane D*)(displayName=Jane D*)(mail=Jane D*)))"
    )
    assert filters.person_filter("Jane D") == expected

    # Three words are never split.
    expected = (
        _PREFIX + "(|(givenName=Mary Ann Smith*)(displayName=Mary Ann Smith*)"
        "(mail=Mary Ann Smith*)))"
    )
    assert filters.person_filter("Mary Ann Smith") == expected


def test_phone_search(factory: Factory) -> None:
    filters = factory.create_filter_builder()
    expected = _PREFIX + "(telephoneNumber=*555-123-4567*))"
    assert filters.person_filter("555.123.4567") == expected
    assert filters.person_filter("1-555-123-4567") == expected
    assert filters.person_filter("+15551234567") == expected
    expected = _PREFIX + "(telephoneNumber=*123-4567*))"
    assert filters.person_filter("1234567") == expected
    expected = _PREFIX + "(telephoneNumber=*4567*))"
    assert filters.person_filter("x4567") == expected


def test_name_takes_precedence(factory: Factory) -> None:
    filters = factory.create_filter_builder()
    expected = (
        _PREFIX + "(|(&(givenName=555*)(displayName=1234*))"
        "(&(givenName=1234*)(displayName=555*))))"
    )
    assert filters.person_filter("555 1234") == expected


def test_prefix_search(factory: Factory) -> None:
    filters = factory.create_filter_builder()
    expected = _PREFIX + "(|(givenName=jd*)(displayName=jd*)(mail=jd*)))"
    assert filters.person_filter("jd") == expected

    # Filter metacharacters in the search text are escaped.
    expected = (
        _PREFIX + "(|(givenName=a\\28b\\29*)(displayName=a\\28b\\29*)"
        "(mail=a\\28b\\29*)))"
    )
    assert filters.person_filter("a(b)") == expected

    with pytest.raises(InvalidQueryError):
        filters.person_filter("jd\x00")


def test_no_exclusion() -> None:
    config = configure("minimal")
    filters = Factory(config).create_filter_builder()
    expected = (
        "(&(objectClass=user)(|(givenName=jd*)(displayName=jd*)(mail=jd*)))"
    )
    assert filters.person_filter("jd") == expected
