"""git-sync reloader adapter models package.

Defines the shared data contracts used by the allowlist, the webhook handler
and the HTTP router:

  - resource.py  — ResourceRef (namespace/name value type)
  - outcome.py   — OutcomeKind + WebhookOutcome (handler result)
  - responses.py — WebhookOutcome → HTTP response projection
"""
