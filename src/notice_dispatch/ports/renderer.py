"""Template renderer port."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ITemplateRenderer(Protocol):
    """Protocol for rendering template content against variables."""

    def validate(self, content: str, variables: Mapping[str, Any]) -> None:
        """Raise ``TemplateError`` if the variables cannot satisfy the template."""
        ...

    def render(self, content: str, variables: Mapping[str, Any]) -> str:
        """Validate, then substitute variables into content."""
        ...
