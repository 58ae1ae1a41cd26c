"""Freshness tracking: deciding when a working copy is due for an update."""

from ensure_update.freshness.policy import decide

__all__ = ["decide"]
