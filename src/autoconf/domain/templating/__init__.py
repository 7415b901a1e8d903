"""Property templating against single triggers or aggregate views."""

from __future__ import annotations

from .aggregate import AggregateView
from .resolver import parse_template_line, render_value, resolve_templates
from .source import MISSING_PLACEHOLDER, PropertySource, to_text

__all__ = [
    "MISSING_PLACEHOLDER",
    "AggregateView",
    "PropertySource",
    "parse_template_line",
    "render_value",
    "resolve_templates",
    "to_text",
]
