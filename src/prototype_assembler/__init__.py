"""Assemble per-screen HTML fragments into a single navigable prototype."""

from .builder import PrototypeDocument, build_prototype
from .links import (
    MarkupError,
    ScreenFlow,
    extract_flows,
    extract_flows_from_html,
    resolve_links,
    resolve_screens,
)
from .screens import (
    PLATFORM_CONFIG,
    Platform,
    PlatformConfig,
    Screen,
    ScreenRegistry,
    build_registry,
    get_platform_config,
    screens_from_payload,
    to_screen_id,
)

__all__ = [
    "PLATFORM_CONFIG",
    "Platform",
    "PlatformConfig",
    "Screen",
    "ScreenRegistry",
    "build_registry",
    "get_platform_config",
    "screens_from_payload",
    "to_screen_id",
    "MarkupError",
    "ScreenFlow",
    "extract_flows",
    "extract_flows_from_html",
    "resolve_links",
    "resolve_screens",
    "PrototypeDocument",
    "build_prototype",
]
