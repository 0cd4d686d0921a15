"""Project and screen persistence used by the prototype build endpoint."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping

from ..screens import Screen


@dataclass(frozen=True)
class ProjectRecord:
    """Stored metadata describing a prototype project."""

    identifier: str
    owner_id: str
    name: str
    platform: str | None = None

    def to_payload(self) -> Dict[str, object]:
        return {"owner_id": self.owner_id, "name": self.name, "platform": self.platform}

    @classmethod
    def from_payload(
        cls, identifier: str, payload: Mapping[str, object]
    ) -> "ProjectRecord":
        owner_id = payload.get("owner_id")
        name = payload.get("name")
        platform = payload.get("platform")
        if not isinstance(owner_id, str) or not owner_id:
            raise ValueError(f"Project '{identifier}' is missing an owner_id.")
        if not isinstance(name, str):
            raise ValueError(f"Project '{identifier}' is missing a name.")
        if platform is not None and not isinstance(platform, str):
            raise ValueError(f"Project '{identifier}' has an invalid platform.")
        return cls(identifier=identifier, owner_id=owner_id, name=name, platform=platform)


@dataclass(frozen=True)
class ScreenRecord:
    """A stored screen row belonging to a project."""

    project_id: str
    screen_name: str
    html_content: str = ""
    is_root: bool = False
    sort_order: int = 0

    def to_screen(self) -> Screen:
        return Screen(
            name=self.screen_name,
            html=self.html_content,
            is_root=self.is_root,
            sort_order=self.sort_order,
        )

    def to_payload(self) -> Dict[str, object]:
        return {
            "screen_name": self.screen_name,
            "html_content": self.html_content,
            "is_root": self.is_root,
            "sort_order": self.sort_order,
        }

    @classmethod
    def from_payload(
        cls, project_id: str, payload: Mapping[str, object]
    ) -> "ScreenRecord":
        if not isinstance(payload, Mapping):
            raise ValueError(f"Screens in project '{project_id}' must be objects.")
        screen_name = payload.get("screen_name")
        html_content = payload.get("html_content", "")
        sort_order = payload.get("sort_order", 0)
        if not isinstance(screen_name, str):
            raise ValueError(f"Screen in project '{project_id}' is missing a name.")
        if not isinstance(html_content, str):
            raise ValueError(f"Screen '{screen_name}' has invalid html_content.")
        if not isinstance(sort_order, int):
            raise ValueError(f"Screen '{screen_name}' has an invalid sort_order.")
        return cls(
            project_id=project_id,
            screen_name=screen_name,
            html_content=html_content,
            is_root=bool(payload.get("is_root", False)),
            sort_order=sort_order,
        )


class ProjectStore(ABC):
    """Interface describing how projects and their screens are persisted."""

    @abstractmethod
    def load_project(self, project_id: str, *, owner_id: str) -> ProjectRecord:
        """Return the project owned by ``owner_id``.

        Raises:
            KeyError: If the project does not exist or belongs to someone else.
        """

    @abstractmethod
    def list_screens(self, project_id: str) -> List[ScreenRecord]:
        """Return the project's screens ordered by ``sort_order`` ascending."""

    @abstractmethod
    def save_project(self, project: ProjectRecord) -> None:
        """Create or replace ``project``."""

    @abstractmethod
    def save_screen(self, screen: ScreenRecord) -> None:
        """Append ``screen`` to its project."""


class InMemoryProjectStore(ProjectStore):
    """Keep projects and screens in local process memory."""

    def __init__(self) -> None:
        self._projects: Dict[str, ProjectRecord] = {}
        self._screens: Dict[str, List[ScreenRecord]] = {}

    def load_project(self, project_id: str, *, owner_id: str) -> ProjectRecord:
        key = _validate_identifier(project_id, "project_id")
        project = self._projects.get(key)
        if project is None or project.owner_id != owner_id:
            raise KeyError(f"Project '{project_id}' does not exist")
        return project

    def list_screens(self, project_id: str) -> List[ScreenRecord]:
        key = _validate_identifier(project_id, "project_id")
        return _ordered(self._screens.get(key, []))

    def save_project(self, project: ProjectRecord) -> None:
        key = _validate_identifier(project.identifier, "project_id")
        self._projects[key] = project

    def save_screen(self, screen: ScreenRecord) -> None:
        key = _validate_identifier(screen.project_id, "project_id")
        self._screens.setdefault(key, []).append(screen)


class FileProjectStore(ProjectStore):
    """Persist projects as ``project.json`` and ``screens.json`` per directory."""

    _PROJECT_FILENAME = "project.json"
    _SCREENS_FILENAME = "screens.json"

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def load_project(self, project_id: str, *, owner_id: str) -> ProjectRecord:
        project_file = self._project_dir(project_id) / self._PROJECT_FILENAME
        if not project_file.is_file():
            raise KeyError(f"Project '{project_id}' does not exist")
        payload = json.loads(project_file.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Project '{project_id}' metadata must be an object.")
        project = ProjectRecord.from_payload(project_id.strip(), payload)
        if project.owner_id != owner_id:
            raise KeyError(f"Project '{project_id}' does not exist")
        return project

    def list_screens(self, project_id: str) -> List[ScreenRecord]:
        screens_file = self._project_dir(project_id) / self._SCREENS_FILENAME
        if not screens_file.is_file():
            return []
        payload = json.loads(screens_file.read_text(encoding="utf-8"))
        if not isinstance(payload, list):
            raise ValueError(f"Screens for project '{project_id}' must be a list.")
        key = project_id.strip()
        return _ordered(ScreenRecord.from_payload(key, entry) for entry in payload)

    def save_project(self, project: ProjectRecord) -> None:
        directory = self._project_dir(project.identifier)
        directory.mkdir(parents=True, exist_ok=True)
        (directory / self._PROJECT_FILENAME).write_text(
            json.dumps(project.to_payload(), indent=2), encoding="utf-8"
        )

    def save_screen(self, screen: ScreenRecord) -> None:
        directory = self._project_dir(screen.project_id)
        directory.mkdir(parents=True, exist_ok=True)
        screens_file = directory / self._SCREENS_FILENAME
        entries: list[object] = []
        if screens_file.is_file():
            entries = json.loads(screens_file.read_text(encoding="utf-8"))
        entries.append(screen.to_payload())
        screens_file.write_text(json.dumps(entries, indent=2), encoding="utf-8")

    def _project_dir(self, project_id: str) -> Path:
        validated = _validate_identifier(project_id, "project_id")
        if validated in {".", ".."} or "/" in validated or "\\" in validated:
            raise ValueError(f"Invalid project identifier '{project_id}'")
        return self.root / validated


def _ordered(screens: Iterable[ScreenRecord]) -> List[ScreenRecord]:
    # Stable: equal sort orders keep their insertion order.
    return sorted(screens, key=lambda screen: screen.sort_order)


def _validate_identifier(value: str, label: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{label} must be a string")
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{label} must be a non-empty string")
    return stripped


__all__ = [
    "FileProjectStore",
    "InMemoryProjectStore",
    "ProjectRecord",
    "ProjectStore",
    "ScreenRecord",
]
