"""Observability helpers (structured logs and metrics)."""
