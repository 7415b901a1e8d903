"""Application configuration helpers."""

from __future__ import annotations

from .errors import ConfigurationError, InvalidPolicyError, MissingConfigurationError
from .logging import configure_logging
from .policy import PolicyDocument, load_policy, parse_policy
from .settings import data_dir, get_database_uri, get_policy_path

__all__ = [
    "ConfigurationError",
    "InvalidPolicyError",
    "MissingConfigurationError",
    "PolicyDocument",
    "configure_logging",
    "data_dir",
    "get_database_uri",
    "get_policy_path",
    "load_policy",
    "parse_policy",
]
