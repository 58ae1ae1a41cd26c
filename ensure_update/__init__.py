"""ensure-update: refresh a git working copy at most once per interval."""

__version__ = "0.1.0"
