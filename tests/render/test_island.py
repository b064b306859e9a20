"""Tests for the Island helper."""

from __future__ import annotations

import json
from functools import partial
from html import unescape

import pytest

from pagelite.catalog import ComponentCatalog
from pagelite.errors import RenderError
from pagelite.models import ComponentCatalogEntry
from pagelite.render import Island, IslandCounter, RenderContext, render_context
from pagelite.validators import IslandError


def Counter(start=0):
    return f"<button>count is {start}</button>"


def _props(markup: str) -> dict:
    raw = markup.split('data-props="', 1)[1].split('"', 1)[0]
    return json.loads(unescape(raw))


def test_island_emits_marker_fallback_and_script() -> None:
    context = RenderContext(counter=IslandCounter())

    with render_context(context):
        markup = Island(partial(Counter, start=2))

    assert markup.startswith('<div id="island-1" data-island="Counter"')
    assert "<button>count is 2</button></div>" in markup
    assert markup.endswith('<script type="module" src="./islandRender.js" defer></script>')
    assert _props(markup) == {"start": 2}
    assert [ref.component for ref in context.islands] == ["Counter"]


def test_island_component_props_take_precedence() -> None:
    context = RenderContext(counter=IslandCounter())

    with render_context(context):
        markup = Island(partial(Counter, start=5), start=1, label="hits")

    assert _props(markup) == {"start": 5, "label": "hits"}
    assert context.islands[0].props == {"start": 5, "label": "hits"}


def test_island_instance_ids_increase_across_pages() -> None:
    counter = IslandCounter()

    with render_context(RenderContext(counter=counter, page_output="index.html")):
        first = Island(Counter)
    with render_context(RenderContext(counter=counter, page_output="about.html")):
        second = Island(Counter)

    assert 'id="island-1"' in first
    assert 'id="island-2"' in second
    assert counter.value == 2


def test_island_script_path_is_relative_to_nested_pages() -> None:
    context = RenderContext(counter=IslandCounter(), page_output="blog/2024/post.html")

    with render_context(context):
        markup = Island(Counter)

    assert 'src="../../islandRender.js"' in markup


def test_island_prefers_catalog_identifier() -> None:
    catalog = ComponentCatalog(
        [
            ComponentCatalogEntry(
                identifier="FancyCounter",
                relative_path="FancyCounter.py",
                source_path=__file__,  # type: ignore[arg-type]
                implementation=Counter,
            )
        ]
    )
    context = RenderContext(counter=IslandCounter(), catalog=catalog)

    with render_context(context):
        markup = Island(Counter)

    assert 'data-island="FancyCounter"' in markup


def test_island_uses_explicit_island_name_for_anonymous_callables() -> None:
    widget = lambda: "<i>w</i>"  # noqa: E731
    widget.island_name = "Widget"  # type: ignore[attr-defined]

    with render_context(RenderContext(counter=IslandCounter())):
        markup = Island(widget)

    assert 'data-island="Widget"' in markup


def test_island_rejects_anonymous_components() -> None:
    with render_context(RenderContext(counter=IslandCounter())):
        with pytest.raises(IslandError):
            Island(lambda: "<i></i>")


def test_island_rejects_unserialisable_props() -> None:
    with render_context(RenderContext(counter=IslandCounter())):
        with pytest.raises(IslandError):
            Island(Counter, when=object())


def test_island_outside_render_is_an_error() -> None:
    with pytest.raises(RenderError):
        Island(Counter)


def test_island_escapes_props_for_attribute_context() -> None:
    with render_context(RenderContext(counter=IslandCounter())):
        markup = Island(Counter, title='say "hi" <now>')

    assert '"hi"' not in markup.split("data-props=", 1)[1].split(">", 1)[0][1:-1]
    assert _props(markup) == {"title": 'say "hi" <now>'}
