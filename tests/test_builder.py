from __future__ import annotations

import re
from html.parser import HTMLParser

import pytest

from prototype_assembler import Platform, PrototypeDocument, Screen, build_prototype
from prototype_assembler import links


def _section_tags(document: PrototypeDocument) -> list[str]:
    return re.findall(r"<section [^>]*>", document.html)


def test_build_prototype_demo_scenario(demo_screens: list[Screen]) -> None:
    document = build_prototype(demo_screens, Platform.MOBILE, "Demo")

    assert document.screen_count == 2
    assert document.entry_screen == "screen-home"
    assert document.screen_ids == ("screen-home", "screen-details")
    assert document.unparsed_screens == ()

    html = document.html
    assert html.startswith("<!DOCTYPE html>\n")
    assert "<title>Demo - Prototype</title>" in html
    assert "device-frame--mobile" in html
    assert '<a data-flow="screen-details" href="Details">Go</a>' in html
    assert "<p>Detail</p>" in html
    assert _section_tags(document) == [
        '<section id="screen-home" class="screen screen--active" data-screen="Home">',
        '<section id="screen-details" class="screen" data-screen="Details" hidden>',
    ]
    assert document.to_payload() == {"html": html, "screenCount": 2}


def test_build_prototype_embeds_runtime_after_screens(demo_screens) -> None:
    html = build_prototype(demo_screens, Platform.DESKTOP, "Demo").html

    last_section = html.rindex("</section>")
    assert html.index('id="prototype-registry"') > last_section
    assert html.index("window.prototypeNavigate") > last_section
    assert html.endswith("</body>\n</html>\n")


def test_build_prototype_is_deterministic(demo_screens) -> None:
    first = build_prototype(demo_screens, Platform.MOBILE, "Demo")
    second = build_prototype(list(demo_screens), Platform.MOBILE, "Demo")

    assert first == second
    assert first.html == second.html


def test_build_prototype_empty_input_is_valid() -> None:
    document = build_prototype([], Platform.MOBILE, "Fresh")

    assert document.screen_count == 0
    assert document.entry_screen is None
    assert document.screen_ids == ()
    assert "No screens yet" in document.html
    assert "<section" not in document.html
    assert "<title>Fresh - Prototype</title>" in document.html
    assert document.html.endswith("</html>\n")


def test_build_prototype_defaults_entry_to_first_screen(make_screens) -> None:
    screens = make_screens([("Welcome", "<p>w</p>"), ("Feed", "<p>f</p>"), ("Me", "")])

    document = build_prototype(screens, Platform.MOBILE, "Demo")
    tags = _section_tags(document)

    assert document.entry_screen == "screen-welcome"
    assert [tag for tag in tags if "screen--active" in tag] == [tags[0]]
    assert sum(tag.endswith(" hidden>") for tag in tags) == 2


def test_build_prototype_duplicate_names_count_once() -> None:
    screens = [
        Screen(name="Home", html="<p>one</p>", is_root=True),
        Screen(name="Home", html="<p>two</p>"),
    ]

    document = build_prototype(screens, Platform.MOBILE, "Demo")

    assert document.screen_count == 1
    assert "<p>one</p>" in document.html
    assert "<p>two</p>" not in document.html


def test_build_prototype_counts_distinct_screens(make_screens) -> None:
    screens = make_screens(
        [("A", ""), ("B", ""), ("a", ""), ("C", ""), ("B", "")], root="C"
    )

    document = build_prototype(screens, Platform.DESKTOP, "Demo")

    assert document.screen_count == 3
    assert document.entry_screen == "screen-c"


def test_build_prototype_leaves_unknown_references_inert(make_screens) -> None:
    screens = make_screens(
        [("Home", '<h1>Title</h1><a href="Checkout">Buy</a><p>Footer</p>')]
    )

    html = build_prototype(screens, Platform.MOBILE, "Demo").html

    assert '<h1>Title</h1><a href="Checkout">Buy</a><p>Footer</p>' in html


def test_build_prototype_survives_unparsable_screen(monkeypatch, make_screens) -> None:
    original = links._StartTagScanner.handle_starttag

    def _explode(self, tag, attrs):  # type: ignore[no-untyped-def]
        if tag == "blink":
            raise AssertionError("unexpected markup")
        original(self, tag, attrs)

    monkeypatch.setattr(links._StartTagScanner, "handle_starttag", _explode)

    screens = make_screens(
        [
            ("Home", '<a href="Odd">odd</a>'),
            ("Odd", '<blink><a href="Home">home</a></blink>'),
        ]
    )

    document = build_prototype(screens, Platform.MOBILE, "Demo")

    assert document.screen_count == 2
    assert document.unparsed_screens == ("Odd",)
    assert '<blink><a href="Home">home</a></blink>' in document.html
    assert '<a data-flow="screen-odd" href="Odd">odd</a>' in document.html


def test_build_prototype_rejects_structurally_invalid_input() -> None:
    with pytest.raises(TypeError):
        build_prototype([Screen(name="Home")], "mobile", "Demo")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        build_prototype([Screen(name="")], Platform.MOBILE, "Demo")


class _Outline(HTMLParser):
    def __init__(self) -> None:
        super().__init__()
        self.sections: list[str] = []
        self.script_ids: list[str | None] = []
        self.script_text: list[str] = []
        self._in_script = False

    def handle_starttag(self, tag, attrs):  # type: ignore[no-untyped-def]
        if tag == "section":
            self.sections.append(dict(attrs)["id"])
        elif tag == "script":
            self.script_ids.append(dict(attrs).get("id"))
            self._in_script = True

    def handle_endtag(self, tag):  # type: ignore[no-untyped-def]
        if tag == "script":
            self._in_script = False

    def handle_data(self, data):  # type: ignore[no-untyped-def]
        if self._in_script:
            self.script_text.append(data)


def _outline(html: str) -> _Outline:
    outline = _Outline()
    outline.feed(html)
    outline.close()
    return outline


@pytest.mark.parametrize(
    "broken",
    [
        "<p>hi</p><!-- unterminated",
        "<script>var pending = true;",
        "<textarea>draft",
        '<p>hi</p><a href="Details',
    ],
)
def test_build_prototype_contains_unterminated_screen(broken: str) -> None:
    screens = [
        Screen(name="Home", html=broken, is_root=True),
        Screen(name="Details", html='<a href="Home">Back</a>'),
    ]

    document = build_prototype(screens, Platform.MOBILE, "Demo")
    outline = _outline(document.html)

    assert document.screen_count == 2
    assert document.unparsed_screens == ("Home",)
    assert outline.sections == ["screen-home", "screen-details"]
    assert "prototype-registry" in outline.script_ids
    assert "window.prototypeNavigate" in "".join(outline.script_text)
    assert '<a data-flow="screen-home" href="Home">Back</a>' in document.html


def test_build_prototype_counts_names_with_colliding_slugs() -> None:
    screens = [
        Screen(name="首页 v2", html='<a href="设置 v2">settings</a>', is_root=True),
        Screen(name="设置 v2"),
        Screen(name="Home!"),
        Screen(name="Home?"),
    ]

    document = build_prototype(screens, Platform.MOBILE, "Demo")

    assert document.screen_count == 4
    assert document.screen_ids == (
        "screen-v2",
        "screen-v2-2",
        "screen-home",
        "screen-home-2",
    )
    assert '<a data-flow="screen-v2-2" href="设置 v2">settings</a>' in document.html
