"""Template rendering: placeholder, Jinja2 and no-op renderers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .noop import NoopRenderer
from .placeholder import VARIABLE_PATTERN, PlaceholderRenderer, extract_variables
from .registry import RendererRegistry

_placeholder = PlaceholderRenderer()


def render(content: str, variables: Mapping[str, Any]) -> str:
    """Render ``${name}`` placeholders outside of dispatch, e.g. for previews."""
    return _placeholder.render(content, variables)


__all__ = [
    "NoopRenderer",
    "PlaceholderRenderer",
    "RendererRegistry",
    "VARIABLE_PATTERN",
    "extract_variables",
    "render",
]
