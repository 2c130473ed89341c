# =============================================================================
#  Discord Delivery
#  Copyright (C) 2025 Discord Delivery contributors
#
#  This source code is released under the GNU Affero General Public License
#  version 3.0. A copy of the license is available at:
#  https://www.gnu.org/licenses/agpl-3.0.en.html
# =============================================================================

"""
Typed message component trees and the structural differ used to detect drift.

Components arrive as Discord JSON (both from the API and from the channels
file) and are parsed into a small tagged union keyed by ``discord.ComponentType``:
groups that own child components, buttons, text displays, and a plain
``Component`` for every other kind. The raw payload is kept on each node so the
desired tree can be sent back to Discord unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from discord import ComponentType

from common.constants import MAX_COMPONENT_DEPTH

GROUP_KINDS = frozenset(
    {
        ComponentType.action_row.value,
        ComponentType.section.value,
        ComponentType.container.value,
    }
)
BUTTON_KIND = ComponentType.button.value
TEXT_DISPLAY_KIND = ComponentType.text_display.value

# Compared only when both sides define them.
_BUTTON_WEAK_FIELDS = ("custom_id", "url", "label")


class ComponentDepthError(ValueError):
    pass


@dataclass(frozen=True)
class Component:
    type: int
    raw: dict = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class ComponentGroup(Component):
    children: tuple[Component, ...] = ()


@dataclass(frozen=True)
class Button(Component):
    style: Optional[int] = None
    custom_id: Optional[str] = None
    url: Optional[str] = None
    label: Optional[str] = None


@dataclass(frozen=True)
class TextDisplay(Component):
    content: str = ""


def parse_component(raw: dict[str, Any], depth: int = 0) -> Component:
    if depth >= MAX_COMPONENT_DEPTH:
        raise ComponentDepthError(
            f"Component tree nested deeper than {MAX_COMPONENT_DEPTH} levels"
        )
    if not isinstance(raw, dict):
        raise ValueError(f"Component must be an object, got {type(raw).__name__}")
    try:
        kind = int(raw["type"])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Component has no valid 'type': {raw!r}") from e

    if kind in GROUP_KINDS:
        return ComponentGroup(
            type=kind,
            raw=raw,
            children=parse_components(raw.get("components") or (), depth + 1),
        )
    if kind == BUTTON_KIND:
        return Button(
            type=kind,
            raw=raw,
            style=raw.get("style"),
            custom_id=raw.get("custom_id"),
            url=raw.get("url"),
            label=raw.get("label"),
        )
    if kind == TEXT_DISPLAY_KIND:
        return TextDisplay(type=kind, raw=raw, content=raw.get("content") or "")
    return Component(type=kind, raw=raw)


def parse_components(raw: Iterable[dict[str, Any]] | None, depth: int = 0) -> tuple[Component, ...]:
    return tuple(parse_component(c, depth) for c in (raw or ()))


def to_payload(components: Sequence[Component]) -> list[dict[str, Any]]:
    return [c.raw for c in components]


def is_components_different(
    components: Sequence[Component], local_components: Sequence[Component]
) -> bool:
    """True when the two trees differ structurally; the first difference short-circuits."""
    if len(components) != len(local_components):
        return True

    for component, local in zip(components, local_components):
        if component.type != local.type:
            return True

        if isinstance(component, ComponentGroup) and isinstance(local, ComponentGroup):
            if is_components_different(component.children, local.children):
                return True
            continue

        if isinstance(component, Button) and isinstance(local, Button):
            if component.style != local.style:
                return True
            for name in _BUTTON_WEAK_FIELDS:
                ours, theirs = getattr(component, name), getattr(local, name)
                if ours is not None and theirs is not None and ours != theirs:
                    return True
            continue

        if isinstance(component, TextDisplay) and isinstance(local, TextDisplay):
            if component.content != local.content:
                return True

    return False
