"""Config loading for the git-sync reloader adapter.

Reads an optional YAML config file. Raises SystemExit on parse errors,
a missing ``version`` field or a malformed allowlist entry. If no config
file is found, returns default values; the allowlist can then come
entirely from the environment or the command line.

Config search order:
  1. ``config_path`` argument (``--config`` on the command line)
  2. GITSYNC_ADAPTER_CONFIG environment variable (if set)
  3. ``./gitsync-adapter.yaml`` (working directory)
  4. ``~/.config/gitsync-adapter/config.yaml``

Environment variable overrides (applied after the file):
  GITSYNC_ADAPTER_HOST       — overrides server.host
  GITSYNC_ADAPTER_PORT       — overrides server.port
  GITSYNC_ADAPTER_ALLOWLIST  — comma-separated ``namespace/name`` entries,
                               appended to the file's allowlist

Command-line arguments (run.py) are applied last via apply_cli_overrides().
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Any, NoReturn, Optional, Sequence

import yaml

from gitsync_adapter.allowlist import Allowlist, build_allowlist
from gitsync_adapter.constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_REQUEST_TIMEOUT_S,
    FIELD_MANAGER,
)
from gitsync_adapter.errors import AllowlistParseError, ConfigError
from gitsync_adapter.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

DEFAULT_CONFIG_PATHS = [
    "gitsync-adapter.yaml",
    os.path.expanduser("~/.config/gitsync-adapter/config.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class ServerConfig:
    """HTTP binding configuration."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


@dataclass
class KubernetesConfig:
    """Cluster access configuration.

    in_cluster: None = auto (service account if present, else kubeconfig),
                True = service account only, False = kubeconfig only.
    kubeconfig: Explicit kubeconfig path (default: $KUBECONFIG / ~/.kube/config).
    context:    kubeconfig context to use (default: current-context).
    """

    in_cluster: Optional[bool] = None
    kubeconfig: Optional[str] = None
    context: Optional[str] = None
    request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S
    field_manager: str = FIELD_MANAGER


@dataclass
class Config:
    """Root configuration object.

    ``allowlist`` keeps the raw ``namespace/name`` strings in the order they
    were given; the immutable Allowlist is built from them at startup.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    server: ServerConfig = field(default_factory=ServerConfig)
    kubernetes: KubernetesConfig = field(default_factory=KubernetesConfig)
    allowlist: list[str] = field(default_factory=list)
    path: Optional[str] = None  # Path to the loaded config file, if any

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are ignored.

        Raises:
            SystemExit(1): On an invalid server.port, kubernetes.in_cluster or
                           kubernetes.request_timeout_s value, or a non-list
                           allowlist.
        """
        # ── Server ────────────────────────────────────────────────────────────
        server_raw = raw.get("server") or {}
        server = ServerConfig(
            host=server_raw.get("host", DEFAULT_HOST),
            port=_parse_port(server_raw.get("port", DEFAULT_PORT), "server.port"),
        )

        # ── Kubernetes ────────────────────────────────────────────────────────
        kube_raw = raw.get("kubernetes") or {}
        kubernetes = KubernetesConfig(
            in_cluster=_parse_in_cluster(kube_raw.get("in_cluster", "auto")),
            kubeconfig=kube_raw.get("kubeconfig"),
            context=kube_raw.get("context"),
            request_timeout_s=_parse_timeout(
                kube_raw.get("request_timeout_s", DEFAULT_REQUEST_TIMEOUT_S)
            ),
            field_manager=kube_raw.get("field_manager", FIELD_MANAGER),
        )

        # ── Allowlist ─────────────────────────────────────────────────────────
        allowlist_raw = raw.get("allowlist") or []
        if not isinstance(allowlist_raw, list):
            _fail(
                f"CONFIG ERROR: 'allowlist' in {path} must be a list of "
                "namespace/name strings."
            )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            server=server,
            kubernetes=kubernetes,
            allowlist=[str(entry) for entry in allowlist_raw],
            path=path,
        )


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate adapter configuration.

    If no file is found at any search path, returns default Config (not an
    error). If a file is found but invalid, writes the error to stderr and
    raises SystemExit(1).

    Environment overrides are applied whether or not a file was found, and
    every allowlist entry is parsed so a typo fails here rather than at the
    first webhook call.

    Raises:
        SystemExit(1): On YAML parse error, missing ``version`` field,
                       unsupported version, malformed allowlist entry, or an
                       invalid environment override.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("GITSYNC_ADAPTER_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.debug("No config file found, using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        _validate_allowlist_entries(config)
        return config

    # ── Parse config file ─────────────────────────────────────────────────────
    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "The adapter refuses to start with an invalid config."
        )
    except OSError as exc:
        _fail(f"CONFIG ERROR: Could not read {found_path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            _fail(
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        _fail(
            f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version")
    if version is None:
        _fail(
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
    if version not in SUPPORTED_VERSIONS:
        _fail(
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)
    _validate_allowlist_entries(config)

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        allowlist_entries=len(config.allowlist),
    )
    return config


def apply_cli_overrides(
    config: Config,
    configmaps: Sequence[str] = (),
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> Config:
    """Apply command-line values onto a loaded Config in-place.

    Positional ConfigMap entries are appended to the allowlist; ``host`` and
    ``port`` replace the configured binding when given.

    Raises:
        SystemExit(1): If a ConfigMap entry is malformed or the port is out
                       of range.
    """
    config.allowlist.extend(configmaps)
    if host is not None:
        config.server.host = host
    if port is not None:
        config.server.port = _parse_port(port, "--port")
    _validate_allowlist_entries(config)
    return config


def startup_allowlist(config: Config) -> Allowlist:
    """Build the process-wide Allowlist from a loaded Config.

    Raises:
        AllowlistParseError: If an entry is malformed.
        ConfigError: If no ConfigMap is allowlisted at all.
    """
    allowlist = build_allowlist(config.allowlist)
    if not allowlist:
        raise ConfigError(
            "No ConfigMaps allowlisted. Pass namespace/name arguments, set "
            "GITSYNC_ADAPTER_ALLOWLIST, or add an 'allowlist' to the config file."
        )
    return allowlist


# ─── Helpers ──────────────────────────────────────────────────────────────────


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Raises:
        SystemExit(1): If GITSYNC_ADAPTER_PORT is set but not a valid port.
    """
    env_host = os.environ.get("GITSYNC_ADAPTER_HOST")
    if env_host:
        config.server.host = env_host

    env_port = os.environ.get("GITSYNC_ADAPTER_PORT")
    if env_port is not None:
        try:
            port = int(env_port)
        except ValueError:
            _fail(
                "CONFIG ERROR: GITSYNC_ADAPTER_PORT environment variable is not a "
                f"valid integer: '{env_port}'"
            )
        config.server.port = _parse_port(port, "GITSYNC_ADAPTER_PORT")

    env_allowlist = os.environ.get("GITSYNC_ADAPTER_ALLOWLIST")
    if env_allowlist:
        # Separator whitespace is dropped; entries are otherwise verbatim.
        config.allowlist.extend(
            entry.strip() for entry in env_allowlist.split(",") if entry.strip()
        )


def _validate_allowlist_entries(config: Config) -> None:
    """Parse every allowlist entry; SystemExit(1) on the first bad one."""
    try:
        build_allowlist(config.allowlist)
    except AllowlistParseError as exc:
        _fail(f"CONFIG ERROR: {exc}")


def _parse_port(value: Any, source: str) -> int:
    # bool is an int subclass.
    if isinstance(value, bool) or not isinstance(value, int) or not 0 < value < 65536:
        _fail(
            f"CONFIG ERROR: Invalid {source}: '{value}'. "
            "Expected an integer between 1 and 65535."
        )
    return value


def _parse_timeout(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        _fail(
            f"CONFIG ERROR: Invalid kubernetes.request_timeout_s: '{value}'. "
            "Expected a positive number of seconds."
        )
    return float(value)


def _parse_in_cluster(value: Any) -> Optional[bool]:
    if value is None or value == "auto":
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    _fail(
        f"CONFIG ERROR: Invalid kubernetes.in_cluster: '{value}'. "
        "Supported values: auto, true, false."
    )


def _fail(msg: str) -> NoReturn:
    print(msg, file=sys.stderr)
    raise SystemExit(1)
