"""Errors raised while reading settings and policy documents."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when the environment or a policy document cannot be used."""


class MissingConfigurationError(ConfigurationError):
    """A required environment variable is unset or blank."""

    def __init__(self, name: str, *, hint: str | None = None) -> None:
        self.name = name
        message = f"Missing configuration for: {name}"
        super().__init__(f"{message} ({hint})" if hint else message)


class InvalidPolicyError(ConfigurationError):
    """A policy document is unreadable or fails validation."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid policy {source}: {reason}")
