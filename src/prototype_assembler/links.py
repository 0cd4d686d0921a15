"""Rewrite cross-screen references into in-document navigation markers.

Screen fragments are scanned with the standard library's tolerant HTML parser.
Only start tags are inspected: every tag that references another screen gains a
``data-flow`` attribute naming the target screen id, which the navigation
runtime in :mod:`prototype_assembler.chrome` understands. Everything else in the
fragment is copied through byte for byte.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, replace
from html.parser import HTMLParser
from typing import Iterable, Sequence

from .screens import RegisteredScreen, ScreenRegistry, to_screen_id

logger = logging.getLogger(__name__)

FLOW_ATTRIBUTE = "data-flow"

_LINK_TAGS = frozenset({"a", "area"})

# Elements whose content browsers read as text up to the matching end tag.
_RAW_TEXT_TAGS = frozenset(
    {"iframe", "noembed", "noframes", "script", "style", "textarea", "title", "xmp"}
)

_OPEN_CONSTRUCT_PATTERN = re.compile(r"<[!/?a-zA-Z]")


class MarkupError(ValueError):
    """Raised when a screen fragment cannot be scanned for references.

    ``contained_markup`` is a version of the fragment that cannot swallow the
    markup following it in a document, or ``None`` when the fragment needs no
    change for that.
    """

    def __init__(
        self,
        screen_name: str | None,
        message: str,
        *,
        contained_markup: str | None = None,
    ) -> None:
        super().__init__(message)
        self.screen_name = screen_name
        self.contained_markup = contained_markup


@dataclass(frozen=True)
class ScreenFlow:
    """A navigation edge between two screens, expressed as screen ids."""

    from_screen: str
    to_screen: str


@dataclass(frozen=True)
class LinkResolution:
    """Registry with resolved markup plus the screens left untouched."""

    registry: ScreenRegistry
    unparsed_screens: tuple[str, ...] = ()


@dataclass(frozen=True)
class _StartTag:
    offset: int
    tag: str
    attrs: tuple[tuple[str, str | None], ...]
    raw: str
    self_closing: bool

    def first(self, name: str) -> str | None:
        for key, value in self.attrs:
            if key == name:
                return value
        return None

    def has(self, name: str) -> bool:
        return any(key == name for key, _ in self.attrs)


class _StartTagScanner(HTMLParser):
    """Collect start tags together with their absolute source offsets."""

    def __init__(self, source: str) -> None:
        super().__init__(convert_charrefs=True)
        self.tags: list[_StartTag] = []
        self.open_raw_text: str | None = None
        self._line_starts = [0]
        for index, char in enumerate(source):
            if char == "\n":
                self._line_starts.append(index + 1)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._record(tag, attrs, self_closing=False)

    def handle_startendtag(
        self, tag: str, attrs: list[tuple[str, str | None]]
    ) -> None:
        self._record(tag, attrs, self_closing=True)

    def handle_endtag(self, tag: str) -> None:
        if tag == self.open_raw_text:
            self.open_raw_text = None

    def _record(
        self, tag: str, attrs: list[tuple[str, str | None]], *, self_closing: bool
    ) -> None:
        if self.open_raw_text is not None:
            # Tags inside raw text are plain text to a browser.
            return
        if tag in _RAW_TEXT_TAGS:
            # Browsers ignore the self-closing slash on these elements.
            self.open_raw_text = tag

        raw = self.get_starttag_text()
        if raw is None:
            return
        line, column = self.getpos()
        self.tags.append(
            _StartTag(
                offset=self._line_starts[line - 1] + column,
                tag=tag,
                attrs=tuple(attrs),
                raw=raw,
                self_closing=self_closing,
            )
        )


def _check_terminated(
    scanner: _StartTagScanner, source: str, screen_name: str | None
) -> None:
    """Reject fragments that end inside a comment, tag or raw-text element.

    Browsers carry such constructs on past the end of the fragment, so the
    error offers a contained version of the markup.
    """

    if scanner.open_raw_text is not None:
        tag = scanner.open_raw_text
        raise MarkupError(
            screen_name,
            f"<{tag}> element is never closed.",
            contained_markup=f"{source}</{tag}>",
        )

    # ``rawdata`` holds whatever the parser is still waiting to complete.
    pending = scanner.rawdata
    if not _OPEN_CONSTRUCT_PATTERN.match(pending):
        return

    if pending.startswith("<!--"):
        raise MarkupError(
            screen_name, "Comment is never closed.", contained_markup=f"{source}-->"
        )

    complete = source[: len(source) - len(pending)]
    raise MarkupError(
        screen_name,
        f"Markup ends inside an unfinished tag: {pending[:40]!r}",
        contained_markup=complete + html.escape(pending, quote=False),
    )


def _scan_start_tags(source: str, *, screen_name: str | None = None) -> list[_StartTag]:
    scanner = _StartTagScanner(source)
    try:
        scanner.feed(source)
        _check_terminated(scanner, source, screen_name)
        scanner.close()
    except MarkupError:
        raise
    except (AssertionError, IndexError, ValueError) as exc:
        raise MarkupError(screen_name, f"Unable to parse markup: {exc}") from exc

    for start_tag in scanner.tags:
        if not source.startswith(start_tag.raw, start_tag.offset):
            raise MarkupError(
                screen_name,
                f"Start tag <{start_tag.tag}> does not line up with the source markup.",
            )
    return scanner.tags


def _reference_targets(start_tag: _StartTag) -> Iterable[str]:
    flow = start_tag.first(FLOW_ATTRIBUTE)
    if flow is not None:
        yield flow
    if start_tag.tag in _LINK_TAGS:
        href = start_tag.first("href")
        if href is not None:
            yield href


def _tag_name_end(raw: str) -> int:
    index = 1
    while index < len(raw) and raw[index] not in " \t\n\r\f/>":
        index += 1
    return index


def _rewrite_start_tag(start_tag: _StartTag, screen_id: str) -> str:
    if not start_tag.has(FLOW_ATTRIBUTE):
        # Insert right after the tag name so existing attributes keep their bytes.
        split_at = _tag_name_end(start_tag.raw)
        return (
            f"{start_tag.raw[:split_at]} {FLOW_ATTRIBUTE}=\"{html.escape(screen_id)}\""
            f"{start_tag.raw[split_at:]}"
        )

    parts = [start_tag.raw[: _tag_name_end(start_tag.raw)]]
    replaced = False
    for key, value in start_tag.attrs:
        if key == FLOW_ATTRIBUTE:
            if replaced:
                continue
            value = screen_id
            replaced = True
        if value is None:
            parts.append(f" {key}")
        else:
            parts.append(f" {key}=\"{html.escape(value, quote=True)}\"")
    parts.append("/>" if start_tag.self_closing else ">")
    return "".join(parts)


def resolve_links(
    markup: str, registry: ScreenRegistry, *, screen_name: str | None = None
) -> str:
    """Return ``markup`` with references to registered screens rewritten.

    A reference is the ``data-flow`` attribute of any element or the ``href`` of
    an ``<a>``/``<area>`` element. References that do not name a registered
    screen are left untouched. Resolving already-resolved markup is a no-op.

    Raises:
        MarkupError: If the markup cannot be scanned.
    """

    edits: list[tuple[_StartTag, str]] = []
    for start_tag in _scan_start_tags(markup, screen_name=screen_name):
        for target in _reference_targets(start_tag):
            screen_id = registry.resolve(target)
            if screen_id is None:
                continue
            if start_tag.first(FLOW_ATTRIBUTE) != screen_id:
                edits.append((start_tag, _rewrite_start_tag(start_tag, screen_id)))
            break

    if not edits:
        return markup

    pieces: list[str] = []
    cursor = 0
    for start_tag, replacement in edits:
        pieces.append(markup[cursor : start_tag.offset])
        pieces.append(replacement)
        cursor = start_tag.offset + len(start_tag.raw)
    pieces.append(markup[cursor:])
    return "".join(pieces)


def resolve_screens(registry: ScreenRegistry) -> LinkResolution:
    """Resolve references in every screen of ``registry``.

    A screen whose markup cannot be scanned is passed through without link
    resolution and reported in :attr:`LinkResolution.unparsed_screens`; the
    other screens are still resolved. A fragment that ends inside a comment,
    tag or raw-text element is closed off first so it cannot swallow the
    screens after it.
    """

    resolved: list[RegisteredScreen] = []
    unparsed: list[str] = []

    for screen in registry:
        try:
            markup = resolve_links(screen.html, registry, screen_name=screen.name)
        except MarkupError as exc:
            logger.warning(
                "Leaving screen %r unresolved: %s", screen.name, exc, exc_info=exc
            )
            unparsed.append(screen.name)
            if exc.contained_markup is not None:
                screen = replace(screen, html=exc.contained_markup)
            resolved.append(screen)
            continue
        resolved.append(replace(screen, html=markup))

    return LinkResolution(
        registry=ScreenRegistry(screens=tuple(resolved), entry_id=registry.entry_id),
        unparsed_screens=tuple(unparsed),
    )


def extract_flows_from_html(
    screen_name: str, markup: str, *, screen_id: str | None = None
) -> list[ScreenFlow]:
    """Return the navigation flows declared by ``data-flow`` attributes.

    Flows are reported in document order without duplicates. Markup that cannot
    be scanned yields no flows. ``screen_id`` overrides the id derived from
    ``screen_name``.
    """

    source_id = screen_id or to_screen_id(screen_name)
    try:
        start_tags = _scan_start_tags(markup, screen_name=screen_name)
    except MarkupError as exc:
        logger.warning("Skipping flow extraction for %r: %s", screen_name, exc)
        return []

    flows: list[ScreenFlow] = []
    seen: set[str] = set()
    for start_tag in start_tags:
        target = start_tag.first(FLOW_ATTRIBUTE)
        if target is None:
            continue
        target = target.strip()
        if not target or target in seen:
            continue
        seen.add(target)
        flows.append(ScreenFlow(from_screen=source_id, to_screen=target))
    return flows


def extract_flows(screens: Sequence[RegisteredScreen]) -> list[ScreenFlow]:
    """Collect flows across ``screens`` in presentation order."""

    flows: list[ScreenFlow] = []
    for screen in screens:
        flows.extend(
            extract_flows_from_html(screen.name, screen.html, screen_id=screen.screen_id)
        )
    return flows


__all__ = [
    "FLOW_ATTRIBUTE",
    "LinkResolution",
    "MarkupError",
    "ScreenFlow",
    "extract_flows",
    "extract_flows_from_html",
    "resolve_links",
    "resolve_screens",
]
