"""Command-line entry point for assembling prototypes from JSON screen dumps."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from .builder import build_prototype
from .screens import Platform, screens_from_payload

logger = logging.getLogger(__name__)

__all__ = ["load_screen_file", "main", "serve"]


def load_screen_file(path: Path) -> dict[str, Any]:
    """Read a screen dump from ``path``.

    The file holds either a JSON list of screens or an object with a
    ``screens`` list and optional ``platform`` and ``projectName`` keys.
    """

    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(payload, list):
        return {"screens": payload}
    if not isinstance(payload, dict):
        raise ValueError("Screen file must contain a JSON list or object.")

    screens = payload.get("screens", [])
    if not isinstance(screens, list):
        raise ValueError("Screen file 'screens' entry must be a list.")
    return dict(payload)


def main(argv: Sequence[str] | None = None) -> int:
    """Assemble a prototype document and write it to disk."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        payload = load_screen_file(Path(args.input))
        platform = Platform.parse(
            args.platform or payload.get("platform") or Platform.MOBILE.value
        )
        project_name = args.project_name or payload.get("projectName") or "Prototype"
        screens = screens_from_payload(payload.get("screens", []))
        document = build_prototype(screens, platform, str(project_name))

        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(document.html, encoding="utf-8")
    except (OSError, ValueError, TypeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for name in document.unparsed_screens:
        logger.warning("Screen %r was embedded without link resolution", name)

    print(f"Wrote {document.screen_count} screens to {output}")
    return 0


def serve(argv: Sequence[str] | None = None) -> int:
    """Run the prototype build API under uvicorn."""

    parser = argparse.ArgumentParser(
        prog="prototype-assembler-serve",
        description="Serve the prototype build API.",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")
    parser.add_argument(
        "--reload", action="store_true", help="Reload the server when code changes."
    )
    args = parser.parse_args(argv)

    import uvicorn

    uvicorn.run(
        "prototype_assembler.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prototype-assembler",
        description="Combine per-screen HTML fragments into one navigable prototype.",
    )
    parser.add_argument(
        "--input",
        required=True,
        help="JSON file containing the screens (list or object with 'screens').",
    )
    parser.add_argument(
        "--output", required=True, help="Path of the HTML document to write."
    )
    parser.add_argument(
        "--platform",
        choices=[platform.value for platform in Platform],
        help="Override the target platform. Defaults to the file's value or 'mobile'.",
    )
    parser.add_argument(
        "--project-name",
        help="Override the project name used for the document title.",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser


if __name__ == "__main__":  # pragma: no cover - module executable
    raise SystemExit(main())
