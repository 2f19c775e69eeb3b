"""Normalization of raw directory entries."""

from __future__ import annotations

from typing import Any

from structlog.stdlib import BoundLogger

from ..config import DirectoryConfig
from ..models.directory import (
    MULTI_VALUED_FIELDS,
    TIMESTAMP_FIELDS,
    Entry,
    Field,
    RawAttribute,
    RawEntry,
)
from ..util import organizational_units, parse_timestamp

__all__ = ["EntryNormalizer"]


class EntryNormalizer:
    """Convert raw directory entries into `Entry` objects.

    Parameters
    ----------
    config
        Directory configuration, used for the excluded and contractor
        organizational units.
    logger
        Logger for warnings about malformed attributes.
    """

    def __init__(self, config: DirectoryConfig, logger: BoundLogger) -> None:
        self._config = config
        self._logger = logger
        self._multi_valued = {f.lower() for f in MULTI_VALUED_FIELDS}
        self._timestamps = {f.lower() for f in TIMESTAMP_FIELDS}

    def normalize(
        self, raw: RawEntry, exclude: list[str] | None = None
    ) -> Entry | None:
        """Normalize one entry.

        Parameters
        ----------
        raw
            Entry as returned by the directory client.
        exclude
            Organizational units whose entries should be dropped. Defaults to
            the configured excluded OUs.

        Returns
        -------
        Entry or None
            Normalized entry, or `None` if the entry is in an excluded
            organizational unit.

        Notes
        -----
        The server has already counted excluded entries against the size
        limit, so a search can return fewer entries than the limit even when
        more matching entries exist.
        """
        if exclude is None:
            exclude = self._config.excluded_ous
        units = {ou.lower() for ou in organizational_units(raw.dn)}
        if any(ou.lower() in units for ou in exclude):
            self._logger.debug("Dropping entry in excluded OU", dn=raw.dn)
            return None

        entry = Entry(dn=raw.dn)
        for attribute in raw.attributes:
            value = self._convert(raw.dn, attribute)
            entry.attributes[attribute.name] = value

        if self._config.contractor_ou is not None:
            entry.contractor = self._config.contractor_ou.lower() in units
        if raw.controls:
            entry.controls = [c.to_display() for c in raw.controls]
        return entry

    def _convert(self, dn: str, attribute: RawAttribute) -> Any:
        """Convert the values of one attribute."""
        name = attribute.name.lower()
        values: list[Any]
        if name == Field.PHOTO.lower():
            values = list(attribute.buffers)
        elif name in self._timestamps:
            values = [
                self._parse_timestamp(dn, attribute.name, v)
                for v in attribute.values
            ]
        else:
            values = list(attribute.values)
        if name in self._multi_valued or len(values) != 1:
            return values
        return values[0]

    def _parse_timestamp(self, dn: str, name: str, value: str) -> Any:
        try:
            return parse_timestamp(value)
        except (ValueError, OverflowError, OSError):
            msg = "Invalid timestamp attribute, leaving unconverted"
            self._logger.warning(msg, dn=dn, attribute=name, value=value)
            return value
