"""Exceptions raised for caller contract violations.

The generation pipeline itself never raises: stages degrade and log a
warning instead. These are reserved for bad inputs handed to the public API
(unknown room ids, malformed configuration or layout files).
"""


class GenerationError(Exception):
    """Base class for room and level generation errors."""


class ConfigError(GenerationError):
    """Raised when a configuration or layout file cannot be parsed."""
