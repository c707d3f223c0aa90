# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Configuration for the helpers.

Configuration is loaded from a YAML file that follows the XDG Base
Directory Specification:

    ``$XDG_CONFIG_HOME/devhelpers/config.yaml``
    (typically ``~/.config/devhelpers/config.yaml``)

``$DEVHELPERS_CONFIG`` overrides the location.  A missing file is not an
error; every value has a default.  ``!env VAR_NAME`` tags resolve values
from the environment, after ``.env`` files have been loaded once.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from platformdirs import user_config_path

from devhelpers.logging import SecretFilter


logger = logging.getLogger(__name__)

_APP_NAME = "devhelpers"
_CONFIG_ENV_VAR = "DEVHELPERS_CONFIG"

DEFAULT_PRIMARY_BRANCHES = ("main", "master", "staging")

_dotenv_loaded = False


class ConfigError(Exception):
    """Invalid or unreadable configuration."""

    exit_code = 1


def get_config_path() -> Path:
    """Return the config file path, honouring ``$DEVHELPERS_CONFIG``."""
    override = os.environ.get(_CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return user_config_path(_APP_NAME) / "config.yaml"


def get_dotenv_path() -> Path:
    """Return the ``.env`` path inside the XDG config directory."""
    return user_config_path(_APP_NAME) / ".env"


def load_dotenv_once() -> None:
    """Load the XDG ``.env``, then the nearest one above the current directory.

    Existing environment variables are never overridden.  Subsequent
    calls do nothing.
    """
    global _dotenv_loaded
    if _dotenv_loaded:
        return
    xdg_env = get_dotenv_path()
    if xdg_env.exists():
        load_dotenv(xdg_env)
        logger.debug("Loaded .env from %s", xdg_env)
    cwd_env = find_dotenv(usecwd=True)
    if cwd_env:
        load_dotenv(cwd_env)
        logger.debug("Loaded .env from %s", cwd_env)
    _dotenv_loaded = True


def reset_dotenv_state() -> None:
    """Allow ``load_dotenv_once`` to run again. For tests."""
    global _dotenv_loaded
    _dotenv_loaded = False


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------


class _EnvVar:
    """Placeholder for an unresolved ``!env VAR_NAME`` tag."""

    def __init__(self, var_name: str) -> None:
        self.var_name = var_name


def _env_constructor(loader: yaml.SafeLoader, node: yaml.Node) -> _EnvVar:
    """Handle ``!env VAR_NAME`` in YAML."""
    return _EnvVar(str(loader.construct_scalar(node)))


def _make_loader() -> type[yaml.SafeLoader]:
    """Create a YAML loader that understands ``!env``."""

    class EnvLoader(yaml.SafeLoader):
        pass

    EnvLoader.add_constructor("!env", _env_constructor)
    return EnvLoader


def _raw_resolve(value: object) -> str | None:
    """Resolve ``!env`` placeholders; None when unset or empty."""
    if isinstance(value, _EnvVar):
        return os.environ.get(value.var_name) or None
    if value is None:
        return None
    return str(value)


def _resolve(value: object, coerce: type, name: str, default: Any) -> Any:
    """Resolve one scalar config value to ``coerce``.

    Args:
        value: Raw YAML value (literal, ``_EnvVar`` or None).
        coerce: Target type (``str`` or ``int``).
        name: Dotted field name for error messages.
        default: Returned when the value is absent.

    Raises:
        ConfigError: If the value cannot be converted.
    """
    if not isinstance(value, _EnvVar) and isinstance(value, coerce):
        return value
    resolved = _raw_resolve(value)
    if resolved is None:
        return default
    try:
        return coerce(resolved)
    except ValueError as e:
        raise ConfigError(
            f"Config '{name}': expected {coerce.__name__}, got {resolved!r}"
        ) from e


def _resolve_string_list(
    value: object, name: str, default: tuple[str, ...]
) -> tuple[str, ...]:
    """Resolve a list of strings, dropping empty entries."""
    if value is None:
        return default
    if not isinstance(value, list):
        raise ConfigError(
            f"Config '{name}' must be a list, got {type(value).__name__}"
        )
    items = tuple(r for r in (_raw_resolve(v) for v in value) if r)
    if not items:
        raise ConfigError(f"Config '{name}' is empty")
    return items


def _section(raw: dict, key: str) -> dict:
    section = raw.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{key}' must be a mapping")
    return section


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GitSettings:
    """Git-related settings.

    Attributes:
        remote: Remote used for pulls and pushes.
        primary_branches: Primary branch candidates in priority order.
    """

    remote: str = "origin"
    primary_branches: tuple[str, ...] = DEFAULT_PRIMARY_BRANCHES


@dataclass(frozen=True)
class GhSettings:
    """GitHub CLI settings."""

    command: str = "gh"


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection parameters for the MySQL client.

    Attributes:
        client: Client executable.
        host: Server host.
        port: Server port.
        user: Login user.
        password: Login password, passed to the client via ``MYSQL_PWD``.
    """

    client: str = "mysql"
    host: str = "127.0.0.1"
    port: int = 3306
    user: str = "root"
    password: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise ConfigError(
                f"Config 'database.port' out of range: {self.port}"
            )


@dataclass(frozen=True)
class Config:
    """Top-level helper configuration."""

    git: GitSettings = field(default_factory=GitSettings)
    gh: GhSettings = field(default_factory=GhSettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)

    @classmethod
    def from_dict(cls, raw: dict) -> "Config":
        """Build a Config from a parsed YAML mapping.

        Raises:
            ConfigError: If a value has the wrong type.
        """
        git_raw = _section(raw, "git")
        gh_raw = _section(raw, "gh")
        db_raw = _section(raw, "database")

        git = GitSettings(
            remote=_resolve(git_raw.get("remote"), str, "git.remote", "origin"),
            primary_branches=_resolve_string_list(
                git_raw.get("primary_branches"),
                "git.primary_branches",
                DEFAULT_PRIMARY_BRANCHES,
            ),
        )
        gh = GhSettings(
            command=_resolve(gh_raw.get("command"), str, "gh.command", "gh"),
        )
        database = DatabaseSettings(
            client=_resolve(
                db_raw.get("client"), str, "database.client", "mysql"
            ),
            host=_resolve(
                db_raw.get("host"), str, "database.host", "127.0.0.1"
            ),
            port=_resolve(db_raw.get("port"), int, "database.port", 3306),
            user=_resolve(db_raw.get("user"), str, "database.user", "root"),
            password=_resolve(
                db_raw.get("password"), str, "database.password", None
            ),
        )
        SecretFilter.register_secret(database.password)
        return cls(git=git, gh=gh, database=database)

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration, falling back to defaults.

        Args:
            config_path: Explicit file. Defaults to ``get_config_path()``.

        Raises:
            ConfigError: If the file exists but cannot be parsed.
        """
        load_dotenv_once()
        if config_path is None:
            config_path = get_config_path()

        if not config_path.exists():
            logger.debug("No config at %s, using defaults", config_path)
            return cls.from_dict({})

        try:
            with open(config_path) as f:
                raw = yaml.load(f, Loader=_make_loader())
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read {config_path}: {e}") from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(
                f"Config file must be a YAML mapping: {config_path}"
            )
        logger.debug("Loaded config from %s", config_path)
        return cls.from_dict(raw)


#: Template written by ``devhelpers init``.
STUB_CONFIG = """\
# devhelpers configuration

# git:
#   remote: origin
#   primary_branches: [main, master, staging]

# gh:
#   command: gh

# database:
#   client: mysql
#   host: 127.0.0.1
#   port: 3306
#   user: root
#   password: !env MYSQL_PASSWORD
"""
