"""Assemble screen fragments into a single navigable prototype document."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from .chrome import (
    render_chrome,
    render_empty_placeholder,
    render_registry_script,
    render_runtime_script,
    render_screen_section,
)
from .links import resolve_screens
from .screens import Platform, Screen, build_registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrototypeDocument:
    """A fully assembled prototype and a summary of what went into it."""

    html: str
    screen_count: int
    entry_screen: str | None = None
    screen_ids: tuple[str, ...] = ()
    unparsed_screens: tuple[str, ...] = ()

    def to_payload(self) -> dict[str, object]:
        """Return the JSON body handed back to HTTP clients."""

        return {"html": self.html, "screenCount": self.screen_count}


def build_prototype(
    screens: Iterable[Screen],
    platform: Platform,
    project_name: str,
) -> PrototypeDocument:
    """Build a self-contained prototype document from ``screens``.

    ``screens`` must already be in presentation order. The result depends only
    on the arguments, so identical inputs always produce identical HTML. An
    empty ``screens`` sequence yields a valid document with no screens.

    Raises:
        TypeError: If a screen record, ``platform`` or ``project_name`` has the
            wrong type.
        ValueError: If a screen has a blank name.
    """

    shell = render_chrome(platform, project_name)
    registry = build_registry(screens)
    resolution = resolve_screens(registry)
    resolved = resolution.registry

    parts = [shell.head, shell.frame_open]
    if len(resolved) == 0:
        parts.append(render_empty_placeholder())
    for screen in resolved:
        parts.append(
            render_screen_section(screen, active=screen.screen_id == resolved.entry_id)
        )
    parts.extend(
        [
            shell.frame_close,
            render_registry_script(resolved),
            render_runtime_script(),
            shell.tail,
        ]
    )

    document = PrototypeDocument(
        html="".join(parts),
        screen_count=len(resolved),
        entry_screen=resolved.entry_id,
        screen_ids=resolved.ids(),
        unparsed_screens=resolution.unparsed_screens,
    )
    logger.debug(
        "Assembled %s prototype %r with %d screens (entry %s)",
        platform.value,
        project_name,
        document.screen_count,
        document.entry_screen,
    )
    return document


__all__ = ["PrototypeDocument", "build_prototype"]
