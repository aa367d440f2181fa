"""Renderer for static content."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..ports.renderer import ITemplateRenderer


class NoopRenderer(ITemplateRenderer):
    """Returns content unchanged; used for channels without templates."""

    def validate(self, content: str, variables: Mapping[str, Any]) -> None:
        return None

    def render(self, content: str, variables: Mapping[str, Any]) -> str:
        return content
