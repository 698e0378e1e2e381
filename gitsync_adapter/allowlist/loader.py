"""Allowlist parsing for the git-sync reloader adapter.

Operators name the ConfigMaps the adapter may touch as ``namespace/name``
strings, on the command line, in the config file or in
GITSYNC_ADAPTER_ALLOWLIST.

Parsing rule:
  - split on the FIRST ``/``; both segments must be non-empty
  - ``"a/b/c"`` is accepted as namespace ``a``, name ``b/c``
  - no trimming, no case folding

``build_allowlist()`` is all-or-nothing: one malformed entry raises
AllowlistParseError and no allowlist is produced. The error is fatal at
startup (AllowlistParseError is a ConfigError).
"""

from __future__ import annotations

from typing import Iterable

from gitsync_adapter.allowlist.matcher import Allowlist
from gitsync_adapter.errors import AllowlistParseError
from gitsync_adapter.models.resource import ResourceRef
from gitsync_adapter.utils.logger import get_logger

logger = get_logger(__name__)


def parse_entry(entry: str) -> ResourceRef:
    """Parse one ``namespace/name`` entry.

    Raises:
        AllowlistParseError: no ``/``, or an empty namespace or name.
    """
    if not isinstance(entry, str):
        raise AllowlistParseError(repr(entry))
    namespace, sep, name = entry.partition("/")
    if not sep or not namespace or not name:
        raise AllowlistParseError(entry)
    return ResourceRef(namespace=namespace, name=name)


def build_allowlist(entries: Iterable[str]) -> Allowlist:
    """Build the immutable Allowlist from operator-supplied entries.

    Raises:
        AllowlistParseError: on the first malformed entry.
    """
    refs = [parse_entry(entry) for entry in entries]
    allowlist = Allowlist(refs)
    if len(allowlist) != len(refs):
        logger.debug(
            "Duplicate allowlist entries collapsed",
            given=len(refs),
            unique=len(allowlist),
        )
    return allowlist
