from __future__ import annotations


class NodeGridError(Exception):
    """Base class for errors raised by nodegrid."""


class ConfigError(NodeGridError, ValueError):
    """Raised when a caller hands the simulation an unusable configuration."""
