"""Jinja2 template renderer."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..exceptions import TemplateError
from ..ports.renderer import ITemplateRenderer

logger = logging.getLogger(__name__)


class JinjaTemplateRenderer(ITemplateRenderer):
    """
    Renders content with the Jinja2 engine in a sandbox, with strict
    undefined handling: any referenced but unsupplied variable is a
    :class:`TemplateError`.
    """

    def __init__(self) -> None:
        try:
            from jinja2 import StrictUndefined, meta
            from jinja2.sandbox import SandboxedEnvironment
        except ImportError as e:
            raise ImportError(
                "Jinja2 is required. Install with: pip install 'notice-dispatch[jinja2]'"
            ) from e

        self._meta = meta
        self._env = SandboxedEnvironment(undefined=StrictUndefined, autoescape=False)

    def referenced_variables(self, content: str) -> set[str]:
        from jinja2 import TemplateSyntaxError

        try:
            ast = self._env.parse(content)
        except TemplateSyntaxError as e:
            raise TemplateError(f"Invalid template: {e}") from e
        return set(self._meta.find_undeclared_variables(ast))

    def validate(self, content: str, variables: Mapping[str, Any]) -> None:
        missing = self.referenced_variables(content) - set(variables)
        if missing:
            raise TemplateError(missing=missing)

    def render(self, content: str, variables: Mapping[str, Any]) -> str:
        from jinja2 import TemplateError as JinjaError

        self.validate(content, variables)
        try:
            return self._env.from_string(content).render(**variables)
        except JinjaError as e:
            logger.error("Jinja2 rendering failed: %s", e)
            raise TemplateError(f"Render failed: {e}") from e
