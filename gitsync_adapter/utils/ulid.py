"""ULID generation for request correlation.

``generate_ulid()`` returns a 26-character ULID used as:
  - the ``X-Request-ID`` response header on every webhook call
  - the ``request_id`` field bound into structured log entries

Uses the ``python-ulid`` library; ULIDs sort by creation time, which keeps
log lines from a burst of git-sync calls in order when grepped by id.
"""

from __future__ import annotations

from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID as a 26-character uppercase string.

    Returns:
        str: Crockford Base32 ULID, e.g. ``"01KJ0JRVHYA7KX32VPN5ZSCTMV"``.
    """
    return str(ULID())
