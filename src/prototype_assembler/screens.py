"""Screen records, platform definitions and the screen registry builder."""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, Any, Iterable, Iterator, Mapping, Sequence

logger = logging.getLogger(__name__)

SCREEN_ID_PREFIX = "screen-"

_NON_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


class Platform(str, Enum):
    """Target platforms supported by the prototype chrome."""

    MOBILE = "mobile"
    DESKTOP = "desktop"

    @classmethod
    def parse(cls, value: object) -> "Platform":
        """Return the platform matching ``value``.

        Raises:
            ValueError: If ``value`` does not name a supported platform.
        """

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Platform must be a string, got {type(value).__name__}.")

        normalised = value.strip().lower()
        for member in cls:
            if member.value == normalised:
                return member

        choices = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown platform '{value}'. Expected one of: {choices}.")


@dataclass(frozen=True)
class PlatformConfig:
    """Viewport dimensions and display metadata for a platform."""

    width: int
    height: int
    label: str
    description: str
    frame_radius: int


PLATFORM_CONFIG: Mapping[Platform, PlatformConfig] = {
    Platform.MOBILE: PlatformConfig(
        width=390,
        height=844,
        label="Mobile",
        description="iPhone-style mobile app",
        frame_radius=48,
    ),
    Platform.DESKTOP: PlatformConfig(
        width=1440,
        height=900,
        label="Desktop",
        description="Desktop browser website",
        frame_radius=12,
    ),
}


def get_platform_config(platform: Platform) -> PlatformConfig:
    """Return the :class:`PlatformConfig` registered for ``platform``."""

    return PLATFORM_CONFIG[platform]


def slugify(value: str) -> str:
    """Lower-case ``value`` and collapse non-alphanumeric runs into hyphens."""

    return _NON_SLUG_PATTERN.sub("-", value.strip().lower()).strip("-")


def to_screen_id(name: str) -> str:
    """Convert a screen name into the id used for navigation.

    >>> to_screen_id("Home Screen")
    'screen-home-screen'
    >>> to_screen_id("User Profile")
    'screen-user-profile'
    """

    slug = slugify(name)
    if not slug:
        # Names without ASCII letters or digits still need a stable id.
        slug = hashlib.sha1(name_key(name).encode("utf-8")).hexdigest()[:8]
    return f"{SCREEN_ID_PREFIX}{slug}"


def name_key(name: str) -> str:
    """Return the case-insensitive key under which screen names are compared."""

    return name.strip().casefold()


@dataclass(frozen=True)
class Screen:
    """A single designed surface of a prototype."""

    name: str
    html: str = ""
    is_root: bool = False
    sort_order: int | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Screen":
        """Build a screen from a JSON-style mapping.

        Both the camel-case keys used by browser clients (``htmlContent``,
        ``isRoot``, ``sortOrder``) and their snake-case storage counterparts
        are accepted.
        """

        if not isinstance(payload, Mapping):
            raise TypeError("Screen payload must be a mapping.")

        name = _first_present(payload, "name", "screen_name", "screenName")
        if name is None:
            raise ValueError("Screen payload must include a 'name'.")

        html = _first_present(payload, "html", "htmlContent", "html_content")
        is_root = _first_present(payload, "isRoot", "is_root")
        sort_order = _first_present(payload, "sortOrder", "sort_order")

        if sort_order is not None and not isinstance(sort_order, int):
            raise ValueError("Screen 'sortOrder' must be an integer.")

        return cls(
            name=name,
            html="" if html is None else html,
            is_root=bool(is_root),
            sort_order=sort_order,
        )


@dataclass(frozen=True)
class RegisteredScreen:
    """A de-duplicated screen addressable by its screen id."""

    screen_id: str
    name: str
    html: str


@dataclass(frozen=True)
class ScreenRegistry:
    """Ordered, de-duplicated screens plus the navigation entry point."""

    screens: tuple[RegisteredScreen, ...] = ()
    entry_id: str | None = None
    _ids: frozenset[str] = field(init=False, repr=False, compare=False)
    _names: Mapping[str, str] = field(init=False, repr=False, compare=False)
    _slugs: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        names: dict[str, str] = {}
        slugs: dict[str, str] = {}
        for screen in self.screens:
            names.setdefault(name_key(screen.name), screen.screen_id)
            slugs.setdefault(to_screen_id(screen.name), screen.screen_id)
        object.__setattr__(
            self, "_ids", frozenset(screen.screen_id for screen in self.screens)
        )
        object.__setattr__(self, "_names", names)
        object.__setattr__(self, "_slugs", slugs)

    def __len__(self) -> int:
        return len(self.screens)

    def __iter__(self) -> Iterator[RegisteredScreen]:
        return iter(self.screens)

    def __contains__(self, screen_id: object) -> bool:
        return screen_id in self._ids

    def ids(self) -> tuple[str, ...]:
        """Return the screen ids in presentation order."""

        return tuple(screen.screen_id for screen in self.screens)

    @property
    def entry(self) -> RegisteredScreen | None:
        for screen in self.screens:
            if screen.screen_id == self.entry_id:
                return screen
        return None

    def resolve(self, target: str) -> str | None:
        """Return the screen id referenced by ``target`` or ``None``.

        Exact screen ids (``screen-details``) take precedence over screen
        names (``Details``), which take precedence over names that merely
        share a slug (``details!``). Matching ignores case, surrounding
        whitespace and a leading ``#``.
        """

        if not isinstance(target, str):
            return None

        normalised = target.strip()
        if normalised.startswith("#"):
            normalised = normalised[1:].strip()
        if not normalised:
            return None

        candidate = normalised.lower()
        if candidate in self:
            return candidate

        by_name = self._names.get(name_key(normalised))
        if by_name is not None:
            return by_name
        return self._slugs.get(to_screen_id(normalised))


def build_registry(screens: Iterable[Screen]) -> ScreenRegistry:
    """Normalise ``screens`` into a :class:`ScreenRegistry`.

    Names are compared case-insensitively; the first screen with a given name
    wins and later duplicates are dropped. Distinct names whose slugs collide
    (``Home!`` and ``Home?``) keep separate screens, the later one receiving a
    numbered id (``screen-home-2``). The entry screen is the first screen
    flagged ``is_root``, or the first screen when none is flagged.

    Raises:
        TypeError: If a record is not a :class:`Screen` or has non-string
            fields.
        ValueError: If a screen name is blank.
    """

    registered: list[RegisteredScreen] = []
    ids_by_name: dict[str, str] = {}
    taken_ids: set[str] = set()
    flagged_root: str | None = None

    for index, screen in enumerate(screens):
        _validate_screen(screen, index)
        key = name_key(screen.name)

        if screen.is_root and flagged_root is None:
            flagged_root = key

        if key in ids_by_name:
            logger.debug(
                "Dropping duplicate screen %r at position %d (id %s)",
                screen.name,
                index,
                ids_by_name[key],
            )
            continue

        screen_id = _unique_screen_id(screen.name, taken_ids)
        ids_by_name[key] = screen_id
        taken_ids.add(screen_id)
        registered.append(
            RegisteredScreen(screen_id=screen_id, name=screen.name, html=screen.html)
        )

    if flagged_root is not None:
        entry_id: str | None = ids_by_name[flagged_root]
    elif registered:
        entry_id = registered[0].screen_id
    else:
        entry_id = None

    return ScreenRegistry(screens=tuple(registered), entry_id=entry_id)


def _unique_screen_id(name: str, taken: AbstractSet[str]) -> str:
    base = to_screen_id(name)
    screen_id = base
    suffix = 2
    while screen_id in taken:
        screen_id = f"{base}-{suffix}"
        suffix += 1
    return screen_id


def _validate_screen(screen: object, index: int) -> None:
    if not isinstance(screen, Screen):
        raise TypeError(
            f"Screen at position {index} must be a Screen, got {type(screen).__name__}."
        )
    if not isinstance(screen.name, str):
        raise TypeError(f"Screen at position {index} must have a string name.")
    if not screen.name.strip():
        raise ValueError(f"Screen at position {index} must have a non-empty name.")
    if not isinstance(screen.html, str):
        raise TypeError(f"Screen '{screen.name}' must have string HTML content.")


def _first_present(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


def screens_from_payload(payload: Sequence[Mapping[str, Any]]) -> list[Screen]:
    """Convert a sequence of JSON-style mappings into :class:`Screen` records."""

    if isinstance(payload, (str, bytes)) or not isinstance(payload, Sequence):
        raise TypeError("Screens payload must be a sequence of objects.")
    return [Screen.from_mapping(item) for item in payload]


__all__ = [
    "PLATFORM_CONFIG",
    "Platform",
    "PlatformConfig",
    "RegisteredScreen",
    "SCREEN_ID_PREFIX",
    "Screen",
    "ScreenRegistry",
    "build_registry",
    "get_platform_config",
    "name_key",
    "screens_from_payload",
    "slugify",
    "to_screen_id",
]
