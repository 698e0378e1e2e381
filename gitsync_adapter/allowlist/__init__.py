"""ConfigMap allowlist.

Public API:
    Allowlist        — immutable set of ResourceRef with membership checks
    build_allowlist  — parse ``namespace/name`` entries into an Allowlist
    parse_entry      — parse a single entry
"""
from gitsync_adapter.allowlist.loader import build_allowlist, parse_entry
from gitsync_adapter.allowlist.matcher import Allowlist

__all__ = ["Allowlist", "build_allowlist", "parse_entry"]
