"""Configuration helpers for deploying the prototype build service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from ..screens import Platform


def _normalise_path(value: str | None) -> Path | None:
    if value is None:
        return None

    trimmed = value.strip()
    if not trimmed:
        return None

    return Path(trimmed).expanduser()


@dataclass(frozen=True)
class PrototypeApiSettings:
    """Deployment settings for the FastAPI application.

    Values are read from environment variables so the service can be configured
    without modifying application code. Empty strings are treated as if the
    variable was unset.
    """

    project_root: Path | None = None
    default_platform: Platform = Platform.MOBILE

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None
    ) -> "PrototypeApiSettings":
        """Return settings populated from ``environ``.

        Args:
            environ: Optional mapping of environment variables. When omitted,
                :data:`os.environ` is used.

        Raises:
            ValueError: If ``PROTOTYPE_DEFAULT_PLATFORM`` names an unknown
                platform.
        """

        source = environ if environ is not None else os.environ

        project_root = _normalise_path(source.get("PROTOTYPE_PROJECT_ROOT"))

        default_platform = Platform.MOBILE
        platform_raw = source.get("PROTOTYPE_DEFAULT_PLATFORM")
        if platform_raw is not None and platform_raw.strip():
            try:
                default_platform = Platform.parse(platform_raw)
            except ValueError as exc:
                raise ValueError(
                    f"PROTOTYPE_DEFAULT_PLATFORM is invalid: {exc}"
                ) from exc

        return cls(project_root=project_root, default_platform=default_platform)


__all__ = ["PrototypeApiSettings"]
