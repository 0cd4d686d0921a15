"""Platform-specific document chrome and the client-side navigation runtime."""

from __future__ import annotations

import html
import json
from dataclasses import dataclass

from .screens import Platform, PlatformConfig, RegisteredScreen, ScreenRegistry
from .screens import get_platform_config

TAILWIND_CDN_URL = "https://cdn.tailwindcss.com"
"""Utility stylesheet the generated screen fragments are written against."""

REGISTRY_ELEMENT_ID = "prototype-registry"

_BASE_STYLES = """\
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    html, body {{ min-height: 100%; }}
    body {{
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
      background: #e5e7eb;
      display: flex;
      align-items: flex-start;
      justify-content: center;
      padding: 32px;
    }}
    .prototype-viewport {{
      position: relative;
      width: {width}px;
      height: {height}px;
      overflow-x: hidden;
      overflow-y: auto;
      background: #ffffff;
    }}
    .screen {{
      min-height: {height}px;
      width: 100%;
      animation: screenFadeIn 0.15s ease-out;
    }}
    .screen[hidden] {{ display: none; }}
    @keyframes screenFadeIn {{
      from {{ opacity: 0.8; }}
      to {{ opacity: 1; }}
    }}
    a {{ cursor: pointer; text-decoration: none; color: inherit; }}
    a:hover {{ opacity: 0.9; }}
    button {{ cursor: pointer; }}
    [data-flow] {{
      cursor: pointer;
      transition: box-shadow 0.2s ease, transform 0.15s ease;
    }}
    [data-flow]:hover {{
      box-shadow: 0 0 0 2px rgba(147, 51, 234, 0.5), 0 0 12px rgba(147, 51, 234, 0.3);
      transform: scale(1.01);
    }}
    [data-flow]:active {{ transform: scale(0.99); }}
    body.show-hotspots [data-flow] {{
      box-shadow: 0 0 0 2px rgba(147, 51, 234, 0.4), 0 0 8px rgba(147, 51, 234, 0.2);
    }}
    .prototype-empty {{
      display: flex;
      flex-direction: column;
      align-items: center;
      justify-content: center;
      height: 100%;
      color: #6b7280;
      text-align: center;
    }}
    .prototype-empty p + p {{ margin-top: 8px; font-size: 14px; }}
"""

_MOBILE_STYLES = """\
    .device-frame {{
      position: relative;
      padding: 14px;
      background: #111827;
      border-radius: {radius}px;
      box-shadow: 0 24px 48px rgba(15, 23, 42, 0.35);
    }}
    .device-frame__notch {{
      position: absolute;
      top: 14px;
      left: 50%;
      width: 126px;
      height: 30px;
      margin-left: -63px;
      background: #111827;
      border-radius: 0 0 18px 18px;
      z-index: 10;
    }}
    .device-frame .prototype-viewport {{ border-radius: {inner_radius}px; }}
"""

_DESKTOP_STYLES = """\
    .window-frame {{
      border-radius: {radius}px;
      overflow: hidden;
      background: #ffffff;
      box-shadow: 0 24px 48px rgba(15, 23, 42, 0.25);
    }}
    .window-frame__titlebar {{
      display: flex;
      align-items: center;
      gap: 8px;
      height: 36px;
      padding: 0 14px;
      background: #f3f4f6;
      border-bottom: 1px solid #e5e7eb;
    }}
    .window-frame__control {{
      width: 12px;
      height: 12px;
      border-radius: 50%;
    }}
    .window-frame__control--close {{ background: #ef4444; }}
    .window-frame__control--minimise {{ background: #f59e0b; }}
    .window-frame__control--maximise {{ background: #22c55e; }}
    .window-frame__title {{
      flex: 1;
      margin-right: 52px;
      text-align: center;
      font-size: 13px;
      color: #6b7280;
    }}
"""

NAVIGATION_RUNTIME = """\
(function () {
  var registryNode = document.getElementById('prototype-registry');
  var registry = registryNode ? JSON.parse(registryNode.textContent) : { screens: [] };
  var known = {};
  registry.screens.forEach(function (screen) { known[screen.id] = true; });
  var current = document.querySelector('.screen.screen--active');

  function showScreen(screenId) {
    if (!screenId || !known[screenId]) {
      return false;
    }
    var target = document.querySelector('section.screen#' + screenId);
    if (!target) {
      return false;
    }
    if (current && current !== target) {
      current.classList.remove('screen--active');
      current.hidden = true;
    }
    target.hidden = false;
    target.classList.add('screen--active');
    current = target;
    var viewport = document.querySelector('.prototype-viewport');
    if (viewport) {
      viewport.scrollTop = 0;
    }
    return true;
  }

  function isDocumentRelative(href) {
    return !/^([a-z][a-z0-9+.-]*:|\\/\\/)/i.test(href);
  }

  document.addEventListener('click', function (event) {
    var node = event.target;
    while (node && node !== document.body) {
      if (node.hasAttribute && node.hasAttribute('data-flow')) {
        event.preventDefault();
        event.stopPropagation();
        showScreen(node.getAttribute('data-flow'));
        return;
      }
      if (node.tagName === 'A' || node.tagName === 'AREA') {
        var href = (node.getAttribute('href') || '').trim();
        if (href && isDocumentRelative(href)) {
          event.preventDefault();
          event.stopPropagation();
          if (href.charAt(0) === '#') {
            showScreen(href.substring(1));
          }
          return;
        }
      }
      node = node.parentElement;
    }
  }, true);

  window.addEventListener('message', function (event) {
    if (event.data && event.data.type === 'toggleHotspots') {
      document.body.classList.toggle('show-hotspots', Boolean(event.data.show));
    }
  });

  document.body.classList.add('show-hotspots');
  window.prototypeNavigate = showScreen;
})();
"""


@dataclass(frozen=True)
class ChromeShell:
    """Document fragments that surround the embedded screens."""

    head: str
    frame_open: str
    frame_close: str
    tail: str


def render_chrome(platform: Platform, project_name: str) -> ChromeShell:
    """Return the chrome for ``platform`` titled after ``project_name``."""

    if not isinstance(platform, Platform):
        raise TypeError(
            f"platform must be a Platform member, got {type(platform).__name__}."
        )
    if not isinstance(project_name, str):
        raise TypeError("project_name must be a string.")

    config = get_platform_config(platform)
    title = html.escape(project_name)
    return ChromeShell(
        head=_render_head(platform, config, title),
        frame_open=_render_frame_open(platform, title),
        frame_close="    </main>\n  </div>\n",
        tail="</body>\n</html>\n",
    )


def _render_head(platform: Platform, config: PlatformConfig, title: str) -> str:
    styles = _BASE_STYLES.format(width=config.width, height=config.height)
    if platform is Platform.MOBILE:
        styles += _MOBILE_STYLES.format(
            radius=config.frame_radius, inner_radius=config.frame_radius - 14
        )
    else:
        styles += _DESKTOP_STYLES.format(radius=config.frame_radius)

    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '  <meta charset="UTF-8">\n'
        f'  <meta name="viewport" content="width={config.width}, initial-scale=1.0">\n'
        f'  <meta name="prototype-platform" content="{platform.value}">\n'
        f"  <title>{title} - Prototype</title>\n"
        f'  <script src="{TAILWIND_CDN_URL}"></script>\n'
        "  <style>\n"
        f"{styles}"
        "  </style>\n"
        "</head>\n"
    )


def _render_frame_open(platform: Platform, title: str) -> str:
    if platform is Platform.MOBILE:
        return (
            f'<body class="prototype prototype--{platform.value}">\n'
            '  <div class="device-frame device-frame--mobile">\n'
            '    <div class="device-frame__notch" aria-hidden="true"></div>\n'
            '    <main class="prototype-viewport">\n'
        )
    return (
        f'<body class="prototype prototype--{platform.value}">\n'
        '  <div class="window-frame window-frame--desktop">\n'
        '    <div class="window-frame__titlebar" aria-hidden="true">\n'
        '      <span class="window-frame__control window-frame__control--close"></span>\n'
        '      <span class="window-frame__control window-frame__control--minimise"></span>\n'
        '      <span class="window-frame__control window-frame__control--maximise"></span>\n'
        f'      <span class="window-frame__title">{title}</span>\n'
        "    </div>\n"
        '    <main class="prototype-viewport">\n'
    )


def render_screen_section(screen: RegisteredScreen, *, active: bool) -> str:
    """Wrap a screen's markup in its addressable ``<section>``."""

    classes = "screen screen--active" if active else "screen"
    hidden = "" if active else " hidden"
    return (
        f'<section id="{screen.screen_id}" class="{classes}" '
        f'data-screen="{html.escape(screen.name, quote=True)}"{hidden}>\n'
        f"{screen.html}\n"
        "</section>\n"
    )


def render_empty_placeholder() -> str:
    return (
        '<div class="prototype-empty">\n'
        "  <p>No screens yet</p>\n"
        "  <p>Generate some screens to preview your prototype</p>\n"
        "</div>\n"
    )


def render_registry_script(registry: ScreenRegistry) -> str:
    """Serialise the screen registry for the navigation runtime."""

    payload = {
        "entry": registry.entry_id,
        "screens": [
            {"id": screen.screen_id, "name": screen.name} for screen in registry
        ],
    }
    encoded = json.dumps(payload, sort_keys=True, ensure_ascii=False)
    # Keep "</script>" inside screen names from terminating the element.
    encoded = encoded.replace("<", "\\u003c")
    return (
        f'<script type="application/json" id="{REGISTRY_ELEMENT_ID}">'
        f"{encoded}</script>\n"
    )


def render_runtime_script() -> str:
    return f"<script>\n{NAVIGATION_RUNTIME}</script>\n"


__all__ = [
    "ChromeShell",
    "NAVIGATION_RUNTIME",
    "REGISTRY_ELEMENT_ID",
    "TAILWIND_CDN_URL",
    "render_chrome",
    "render_empty_placeholder",
    "render_registry_script",
    "render_runtime_script",
    "render_screen_section",
]
