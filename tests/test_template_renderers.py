"""Tests for template renderers."""

import pytest

from notice_dispatch.exceptions import TemplateError
from notice_dispatch.template import (
    NoopRenderer,
    PlaceholderRenderer,
    RendererRegistry,
    extract_variables,
    render,
)

# Check if jinja2 is installed
try:
    import jinja2  # noqa: F401

    from notice_dispatch.template.jinja import JinjaTemplateRenderer

    _JINJA_AVAILABLE = True
except ImportError:
    _JINJA_AVAILABLE = False
    JinjaTemplateRenderer = None


def test_extract_variables_distinct_names():
    """Test extraction returns each name once."""
    assert extract_variables("${a} and ${b} and ${a}") == {"a", "b"}


def test_extract_variables_ignores_non_word_names():
    """Test names with dots or dashes are not treated as variables."""
    assert extract_variables("${user.name} ${first-name} ${ok_1}") == {"ok_1"}


def test_placeholder_renderer_basic():
    """Test placeholders are substituted."""
    renderer = PlaceholderRenderer()

    result = renderer.render("Hello ${name}, order ${order_id} is ready", {
        "name": "Alice",
        "order_id": 123,
    })

    assert result == "Hello Alice, order 123 is ready"


def test_placeholder_renderer_missing_variable():
    """Test rendering fails listing every missing variable."""
    renderer = PlaceholderRenderer()

    with pytest.raises(TemplateError) as exc_info:
        renderer.render("${a}${b}${c}", {"a": 1})

    assert exc_info.value.missing == ["b", "c"]


def test_placeholder_renderer_extra_variables_allowed():
    renderer = PlaceholderRenderer()

    assert renderer.render("hi ${name}", {"name": "Ann", "unused": "x"}) == "hi Ann"


def test_placeholder_renderer_is_idempotent():
    """Test rendered output rendered again is unchanged."""
    renderer = PlaceholderRenderer()
    variables = {"name": "Ann"}

    once = renderer.render("hi ${name}", variables)

    assert renderer.render(once, variables) == once


def test_placeholder_renderer_does_not_expand_values():
    """Test values containing placeholders are inserted verbatim."""
    renderer = PlaceholderRenderer()

    result = renderer.render("${a} ${b}", {"a": "${b}", "b": "x"})

    assert result == "${b} x"


def test_placeholder_renderer_dotted_names_replaced_when_supplied():
    """Test non-word names are substituted literally if supplied, kept if not."""
    renderer = PlaceholderRenderer()

    assert renderer.render("hi ${user.name}", {"user.name": "Ann"}) == "hi Ann"
    assert renderer.render("hi ${user.name}", {}) == "hi ${user.name}"


def test_module_render_preview():
    assert render("hi ${name}", {"name": "Ann"}) == "hi Ann"


def test_noop_renderer_returns_content():
    renderer = NoopRenderer()

    renderer.validate("${missing}", {})
    assert renderer.render("${missing}", {}) == "${missing}"


def test_registry_defaults():
    """Test registry resolves known types case-insensitively."""
    registry = RendererRegistry.with_defaults()

    assert isinstance(registry.get("PLACEHOLDER"), PlaceholderRenderer)
    assert isinstance(registry.get("text"), PlaceholderRenderer)


def test_registry_unknown_type_falls_back_to_noop():
    """Test unknown or missing template types render content as is."""
    registry = RendererRegistry.with_defaults()

    assert isinstance(registry.get(None), NoopRenderer)
    assert isinstance(registry.get("mustache"), NoopRenderer)


def test_registry_custom_renderer():
    registry = RendererRegistry()
    renderer = PlaceholderRenderer()

    registry.register("Custom", renderer)

    assert registry.get("custom") is renderer


@pytest.mark.skipif(not _JINJA_AVAILABLE, reason="Jinja2 not installed")
def test_jinja_renderer_basic():
    """Test Jinja2 renderer."""
    renderer = JinjaTemplateRenderer()

    result = renderer.render("Hello {{ name }}!{% if vip %} VIP{% endif %}", {
        "name": "Alice",
        "vip": True,
    })

    assert result == "Hello Alice! VIP"


@pytest.mark.skipif(not _JINJA_AVAILABLE, reason="Jinja2 not installed")
def test_jinja_renderer_missing_variable():
    """Test undefined variables are reported as TemplateError."""
    renderer = JinjaTemplateRenderer()

    with pytest.raises(TemplateError) as exc_info:
        renderer.render("Hello {{ name }} {{ order.id }}", {"name": "Alice"})

    assert exc_info.value.missing == ["order"]


@pytest.mark.skipif(not _JINJA_AVAILABLE, reason="Jinja2 not installed")
def test_jinja_renderer_syntax_error():
    renderer = JinjaTemplateRenderer()

    with pytest.raises(TemplateError):
        renderer.render("Hello {{ name ", {"name": "Alice"})


@pytest.mark.skipif(not _JINJA_AVAILABLE, reason="Jinja2 not installed")
def test_jinja_renderer_sandboxed():
    """Test unsafe attribute access is refused."""
    renderer = JinjaTemplateRenderer()

    with pytest.raises(TemplateError):
        renderer.render("{{ obj.__class__.__mro__ }}", {"obj": object()})


@pytest.mark.skipif(not _JINJA_AVAILABLE, reason="Jinja2 not installed")
def test_registry_includes_jinja():
    registry = RendererRegistry.with_defaults()

    assert isinstance(registry.get("jinja"), JinjaTemplateRenderer)
