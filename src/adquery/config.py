"""Configuration for adquery.

adquery is configured by a YAML file. Secrets, and any other setting with an
explicit ``validation_alias``, may instead be injected via environment
variables, which take precedence over the file. The resulting configuration
is frozen and is passed explicitly to every component that needs it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Self, override

import yaml
from pydantic import (
    Field,
    SecretStr,
    UrlConstraints,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import Url
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from safir.logging import LogLevel, Profile, configure_logging

from .constants import DEFAULT_MIN_SEARCH_LENGTH, DEFAULT_SIZE_LIMIT
from .exceptions import InvalidQueryError
from .models.directory import DEFAULT_FIELDS
from .util import validate_filter

LdapDsn = Annotated[
    Url, UrlConstraints(allowed_schemes=["ldap", "ldaps"], host_required=True)
]
"""DSN for connecting to a directory server."""

__all__ = [
    "CamelCaseSettings",
    "Config",
    "DirectoryConfig",
    "EnvFirstSettings",
    "LdapDsn",
]


class CamelCaseSettings(BaseSettings):
    """Base class for Pydantic settings supporting camel-case.

    This base class also forbids all extra attributes and freezes the model
    once it has been validated.
    """

    model_config = SettingsConfigDict(
        alias_generator=to_camel,
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )


class EnvFirstSettings(CamelCaseSettings):
    """Base class for Pydantic settings with environment overrides.

    Classes that inherit from this base class will prioritize environment
    variables over arguments to the class constructor.
    """

    @override
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Override the sources of settings.

        Deactivate :file:`.env` and secret file support. Allow environment
        variables to override init parameters, since init parameters come
        from the YAML configuration file.
        """
        return (env_settings, init_settings)


class DirectoryConfig(EnvFirstSettings):
    """Configuration for the directory server and searches against it."""

    # Without a prefix, populate_by_name would also read a bare PASSWORD
    # variable from the environment.
    model_config = SettingsConfigDict(env_prefix="ADQUERY_DIRECTORY_")

    url: LdapDsn = Field(
        ...,
        title="Directory server URL",
        description="URL of the directory server, ``ldap`` or ``ldaps``",
    )

    user_dn: str | None = Field(
        None,
        title="Service account bind DN",
        description=(
            "Identity of the service account used for searches. If not set,"
            " searches use an anonymous bind, which most Active Directory"
            " servers reject."
        ),
    )

    password: SecretStr | None = Field(
        None,
        title="Service account password",
        description="Password for the service account. Only used with userDn",
        validation_alias="ADQUERY_DIRECTORY_PASSWORD",
    )

    base_dn: str = Field(
        ...,
        title="Base DN for searches",
        description="Base DN under which all account searches are run",
    )

    min_search_length: int = Field(
        DEFAULT_MIN_SEARCH_LENGTH,
        title="Minimum name part length",
        description=(
            "Both halves of a two-word search must be at least this long to"
            " be searched as first and last name"
        ),
        ge=1,
    )

    exclude_user_query: str | None = Field(
        None,
        title="Excluded account filter",
        description=(
            "Filter fragment matching accounts that should never be returned"
            " from free-text searches, such as ``sAMAccountName=999*`` for"
            " test accounts. Outer parentheses are optional."
        ),
    )

    excluded_ous: list[str] = Field(
        [],
        title="Excluded organizational units",
        description="Entries under any of these OUs are dropped from results",
    )

    contractor_ou: str | None = Field(
        None,
        title="Contractor organizational unit",
        description=(
            "Entries under this OU are flagged as contractors. If not set,"
            " entries are not classified at all."
        ),
    )

    size_limit: int = Field(
        DEFAULT_SIZE_LIMIT,
        title="Search size limit",
        description="Maximum number of entries returned by one search",
        ge=1,
    )

    default_fields: list[str] = Field(
        list(DEFAULT_FIELDS),
        title="Default attributes",
        description="Attributes requested when the caller does not name any",
    )

    timeout: float | None = Field(
        None,
        title="Operation timeout",
        description=(
            "Timeout in seconds passed to the directory client for connects"
            " and searches. If not set, operations wait indefinitely."
        ),
        gt=0,
    )

    @field_validator("exclude_user_query")
    @classmethod
    def _validate_exclude_user_query(cls, v: str | None) -> str | None:
        """Parenthesize the exclusion fragment and check its syntax."""
        if not v or not v.strip():
            return None
        v = v.strip()
        if not v.startswith("("):
            v = f"({v})"
        try:
            return validate_filter(v)
        except InvalidQueryError as e:
            raise ValueError(str(e)) from e

    @model_validator(mode="after")
    def _validate_password(self) -> Self:
        """Ensure the password is set if the bind DN is set."""
        if self.user_dn and not self.password:
            raise ValueError("password required if userDn is set")
        return self


class Config(EnvFirstSettings):
    """Configuration for adquery."""

    directory: DirectoryConfig = Field(
        ...,
        title="Directory configuration",
        description="Configuration for the directory server",
    )

    log_level: LogLevel = Field(
        LogLevel.INFO,
        title="Logging level",
        description="Python logging level",
    )

    log_profile: Profile = Field(
        Profile.development,
        title="Logging profile",
        description=(
            "Logging profile: ``production`` for JSON logs or"
            " ``development`` for human-readable logs"
        ),
    )

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Construct a Config object from a configuration file.

        Parameters
        ----------
        path
            Path to the configuration file in YAML.

        Returns
        -------
        Config
            The corresponding `Config` object.
        """
        with path.open("r") as f:
            return cls.model_validate(yaml.safe_load(f))

    def configure_logging(self) -> None:
        """Configure logging based on the adquery configuration."""
        configure_logging(
            name="adquery", log_level=self.log_level, profile=self.log_profile
        )
