"""Command-line entry point for the git-sync reloader adapter.

Usage:
    gitsync-adapter prod/app-config prod/other-config
    gitsync-adapter --port 9000 --addr 127.0.0.1 prod/app-config
    gitsync-adapter --config /etc/gitsync-adapter/config.yaml
    python -m gitsync_adapter.run ...

Positional arguments are allowlisted ConfigMaps in ``namespace/name`` form.
They are appended to any allowlist from the config file or
GITSYNC_ADAPTER_ALLOWLIST; ``--port`` / ``--addr`` win over both.

The allowlist is validated before uvicorn binds the port, so a typo exits
non-zero immediately.
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

import uvicorn

from gitsync_adapter.config import apply_cli_overrides, load_config, startup_allowlist
from gitsync_adapter.constants import (
    UVICORN_BACKLOG,
    UVICORN_LIMIT_CONCURRENCY,
    UVICORN_TIMEOUT_KEEP_ALIVE,
)
from gitsync_adapter.errors import ConfigError
from gitsync_adapter.utils.logger import configure_from_env, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitsync-adapter",
        description="Webhook adapter to connect git-sync with Stakater Reloader",
    )
    parser.add_argument(
        "configmaps",
        nargs="*",
        metavar="NAMESPACE/NAME",
        help="ConfigMaps to allow updates for in namespace/name format",
    )
    parser.add_argument("-p", "--port", type=int, default=None, help="Port to listen on (default: 8080)")
    parser.add_argument("-a", "--addr", default=None, help="Address to bind to (default: 0.0.0.0)")
    parser.add_argument("-c", "--config", default=None, help="Path to a YAML config file")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Parse arguments, validate the allowlist, and serve.

    Raises:
        SystemExit: On config errors (malformed or empty allowlist, bad
                    config file) before the port is bound.
    """
    args = build_parser().parse_args(argv)
    configure_from_env()

    config = load_config(args.config)
    apply_cli_overrides(config, args.configmaps, host=args.addr, port=args.port)

    try:
        startup_allowlist(config)
    except ConfigError as exc:
        print(f"CONFIG ERROR: {exc}", file=sys.stderr)
        raise SystemExit(1)

    from gitsync_adapter.main import create_app

    logger.info(
        "Webhook adapter listening",
        bind=f"{config.server.host}:{config.server.port}",
    )
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        limit_concurrency=UVICORN_LIMIT_CONCURRENCY,
        backlog=UVICORN_BACKLOG,
        timeout_keep_alive=UVICORN_TIMEOUT_KEEP_ALIVE,
    )


if __name__ == "__main__":
    main()
