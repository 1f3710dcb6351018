"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """An environment setting is present but unusable."""


class MissingConfigurationError(ConfigurationError):
    """Required environment settings are absent or blank."""
