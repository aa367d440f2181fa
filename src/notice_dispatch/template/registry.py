"""RendererRegistry — template type to renderer lookup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .noop import NoopRenderer
from .placeholder import PlaceholderRenderer

if TYPE_CHECKING:
    from ..ports.renderer import ITemplateRenderer

logger = logging.getLogger(__name__)


class RendererRegistry:
    """
    Maps a case-insensitive template type to a renderer.

    Unknown or missing template types fall back to the no-op renderer, so
    content of an unrecognized type is delivered as is.
    """

    def __init__(self, default: ITemplateRenderer | None = None) -> None:
        self._renderers: dict[str, ITemplateRenderer] = {}
        self._default = default or NoopRenderer()

    @classmethod
    def with_defaults(cls) -> RendererRegistry:
        """Registry with ``placeholder``/``text``, ``noop`` and (if installed) ``jinja``."""
        registry = cls()
        placeholder = PlaceholderRenderer()
        registry.register("placeholder", placeholder)
        registry.register("text", placeholder)
        registry.register("noop", registry._default)
        try:
            from .jinja import JinjaTemplateRenderer

            registry.register("jinja", JinjaTemplateRenderer())
        except ImportError:
            logger.debug("jinja2 not installed; 'jinja' template type unavailable")
        return registry

    def register(self, template_type: str, renderer: ITemplateRenderer) -> None:
        self._renderers[template_type.strip().lower()] = renderer

    def get(self, template_type: str | None) -> ITemplateRenderer:
        if template_type is None:
            return self._default
        renderer = self._renderers.get(template_type.strip().lower())
        if renderer is None:
            logger.debug("No renderer for template type %r; using no-op", template_type)
            return self._default
        return renderer
