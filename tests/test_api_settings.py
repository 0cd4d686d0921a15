from __future__ import annotations

from pathlib import Path

import pytest

from prototype_assembler import Platform
from prototype_assembler.api import PrototypeApiSettings


def test_settings_defaults_without_environment() -> None:
    settings = PrototypeApiSettings.from_env({})

    assert settings.project_root is None
    assert settings.default_platform is Platform.MOBILE


def test_settings_read_environment_values() -> None:
    settings = PrototypeApiSettings.from_env(
        {
            "PROTOTYPE_PROJECT_ROOT": " ~/prototypes ",
            "PROTOTYPE_DEFAULT_PLATFORM": "Desktop",
        }
    )

    assert settings.project_root == Path("~/prototypes").expanduser()
    assert settings.default_platform is Platform.DESKTOP


def test_settings_treat_blank_values_as_unset() -> None:
    settings = PrototypeApiSettings.from_env(
        {"PROTOTYPE_PROJECT_ROOT": "   ", "PROTOTYPE_DEFAULT_PLATFORM": ""}
    )

    assert settings.project_root is None
    assert settings.default_platform is Platform.MOBILE


def test_settings_reject_unknown_platform() -> None:
    with pytest.raises(ValueError, match="PROTOTYPE_DEFAULT_PLATFORM"):
        PrototypeApiSettings.from_env({"PROTOTYPE_DEFAULT_PLATFORM": "tablet"})
