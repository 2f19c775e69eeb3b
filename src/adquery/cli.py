"""Administrative command-line interface."""

from __future__ import annotations

import base64
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

import click
from safir.asyncio import run_with_asyncio
from safir.click import display_help

from .dependencies.config import config_dependency
from .exceptions import DirectoryError
from .factory import Factory
from .models.directory import Entry

__all__ = [
    "help",
    "login",
    "main",
    "search",
    "user",
]


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s")
def main() -> None:
    """Administrative command-line interface for adquery."""


@main.command()
@click.argument("topic", default=None, required=False, nargs=1)
@click.pass_context
def help(ctx: click.Context, topic: str | None) -> None:
    """Show help for any command."""
    display_help(main, ctx, topic)


@main.command()
@click.argument("account_name")
@click.option(
    "--config-path",
    envvar="ADQUERY_CONFIG_PATH",
    type=click.Path(path_type=Path),
    default=None,
    help="Application configuration file.",
)
@click.password_option(
    "--password",
    confirmation_prompt=False,
    help="Password to verify (prompted for if not given).",
)
@click.option(
    "--field", "fields", multiple=True, help="Additional attribute to show."
)
@run_with_asyncio
async def login(
    *,
    account_name: str,
    config_path: Path | None,
    password: str,
    fields: tuple[str, ...],
) -> None:
    """Verify the password of an account."""
    if config_path:
        config_dependency.set_config_path(config_path)
    config = await config_dependency()
    validator = Factory(config).create_login_validator()
    try:
        entry = await validator.login(account_name, password, list(fields))
    except DirectoryError as e:
        raise click.ClickException(str(e)) from e
    _write_entries([entry])


@main.command()
@click.argument("text")
@click.option(
    "--config-path",
    envvar="ADQUERY_CONFIG_PATH",
    type=click.Path(path_type=Path),
    default=None,
    help="Application configuration file.",
)
@click.option("--field", "fields", multiple=True, help="Attribute to show.")
@run_with_asyncio
async def search(
    *, text: str, config_path: Path | None, fields: tuple[str, ...]
) -> None:
    """Search for people by name, phone number, or email address."""
    if config_path:
        config_dependency.set_config_path(config_path)
    config = await config_dependency()
    engine = Factory(config).create_search_engine()
    try:
        entries = await engine.find_matching_users(text, list(fields))
    except DirectoryError as e:
        raise click.ClickException(str(e)) from e
    _write_entries(entries)


@main.command()
@click.argument("account_name")
@click.option(
    "--config-path",
    envvar="ADQUERY_CONFIG_PATH",
    type=click.Path(path_type=Path),
    default=None,
    help="Application configuration file.",
)
@click.option("--field", "fields", multiple=True, help="Attribute to show.")
@run_with_asyncio
async def user(
    *, account_name: str, config_path: Path | None, fields: tuple[str, ...]
) -> None:
    """Look up an account by account name."""
    if config_path:
        config_dependency.set_config_path(config_path)
    config = await config_dependency()
    engine = Factory(config).create_search_engine()
    try:
        entries = await engine.find_user(account_name, list(fields))
    except DirectoryError as e:
        raise click.ClickException(str(e)) from e
    _write_entries(entries)


def _json_default(value: Any) -> Any:
    if isinstance(value, bytes):
        return base64.b64encode(value).decode()
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def _write_entries(entries: list[Entry]) -> None:
    data = [e.to_dict() for e in entries]
    sys.stdout.write(json.dumps(data, default=_json_default, indent=2))
    sys.stdout.write("\n")
