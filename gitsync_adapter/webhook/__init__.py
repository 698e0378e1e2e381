"""git-sync webhook: handler (conditional patch), router, request-id middleware."""
from gitsync_adapter.webhook.handler import WebhookHandler, extract_sync_hash

__all__ = ["WebhookHandler", "extract_sync_hash"]
