"""The Island helper used inside page and component source."""

from __future__ import annotations

import functools
import json
from typing import Any, Callable, Dict, Tuple

from markupsafe import Markup

from ..models import IslandReference
from ..validators.base import IslandError
from ..validators.component import is_anonymous
from .context import RenderContext, current_context
from .renderer import render


def _unwrap(component: Any) -> Tuple[Callable[..., Any], Dict[str, Any]]:
    props: Dict[str, Any] = {}
    target = component
    while isinstance(target, functools.partial):
        if target.args:
            raise IslandError(
                "Island components must bind props by keyword, not position"
            )
        props = {**target.keywords, **props}
        target = target.func
    if not callable(target):
        raise IslandError(f"Island expects a component callable, got {type(target).__name__}")
    return target, props


def component_identifier(component: Callable[..., Any], context: RenderContext) -> str:
    """Resolve a stable identifier for a component.

    The catalog is consulted first, then an explicit ``island_name``
    attribute, then ``__name__``. Anonymous components are rejected.
    """
    if context.catalog is not None:
        identifier = context.catalog.identifier_for(component)
        if identifier:
            return identifier
    explicit = getattr(component, "island_name", None)
    if isinstance(explicit, str) and explicit:
        return explicit
    if is_anonymous(component):
        raise IslandError(
            "Cannot derive an island identifier from an anonymous component; "
            "define it with `def` or set `island_name`"
        )
    return str(component.__name__)


def Island(component: Any, **attrs: Any) -> Markup:
    """Render ``component`` statically and mark it for client hydration.

    ``component`` is a component callable or a ``functools.partial`` binding
    its props. Extra keyword arguments are merged into the serialised props;
    the component's own props win on key collisions.
    """
    context = current_context()
    target, props = _unwrap(component)
    identifier = component_identifier(target, context)
    merged = {**attrs, **props}
    try:
        payload = json.dumps(merged, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise IslandError(f"Props for island '{identifier}' are not JSON-serialisable: {exc}") from exc

    reference = IslandReference(
        component=identifier,
        instance_id=context.counter.next(),
        props=merged,
    )
    fallback = render(target, props)
    context.islands.append(reference)

    return Markup(
        '<div id="{id}" data-island="{name}" data-props="{props}">{fallback}</div>'
        '<script type="module" src="{src}" defer></script>'
    ).format(
        id=reference.element_id,
        name=identifier,
        props=payload,
        fallback=Markup(fallback),
        src=context.script_src,
    )


__all__ = ["Island", "component_identifier"]
