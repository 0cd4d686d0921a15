"""FastAPI application exposing the prototype build endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field, model_validator
from starlette.responses import HTMLResponse

from ..builder import PrototypeDocument, build_prototype
from ..links import extract_flows, resolve_screens
from ..screens import Platform, Screen, build_registry
from .settings import PrototypeApiSettings
from .store import FileProjectStore, InMemoryProjectStore, ProjectRecord, ProjectStore

logger = logging.getLogger(__name__)


class PrototypeBuildRequest(BaseModel):
    """Request body identifying the project to assemble."""

    project_id: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_camel_case(cls, value: Any) -> Any:
        if isinstance(value, dict) and "project_id" not in value and "projectId" in value:
            return {**value, "project_id": value["projectId"]}
        return value


class PrototypeBuildResponse(BaseModel):
    """Assembled prototype document returned to the editor."""

    model_config = ConfigDict(populate_by_name=True)

    html: str
    screen_count: int = Field(..., ge=0, alias="screenCount")


class ScreenFlowResource(BaseModel):
    """Navigation edge between two screens of a project."""

    from_screen: str
    to_screen: str


class ScreenFlowListResponse(BaseModel):
    """Navigation edges declared across a project's screens."""

    flows: list[ScreenFlowResource]


def create_app(
    project_store: ProjectStore | None = None,
    *,
    settings: PrototypeApiSettings | None = None,
) -> FastAPI:
    """Create a FastAPI app exposing the prototype build endpoints."""

    resolved_settings = settings or PrototypeApiSettings.from_env()

    store = project_store
    if store is None:
        if resolved_settings.project_root is not None:
            store = FileProjectStore(resolved_settings.project_root)
        else:
            store = InMemoryProjectStore()

    def _require_user(acting_user_id: str | None) -> str:
        if acting_user_id is None or not acting_user_id.strip():
            raise HTTPException(status_code=401, detail="Unauthorized")
        return acting_user_id.strip()

    def _load_project(project_id: str, user_id: str) -> ProjectRecord:
        try:
            return store.load_project(project_id, owner_id=user_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Project not found") from exc
        except ValueError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        except (OSError, RuntimeError) as exc:
            logger.exception("Failed to load project %s", project_id)
            raise HTTPException(status_code=500, detail="Failed to load project") from exc

    def _load_screens(project_id: str) -> list[Screen]:
        try:
            records = store.list_screens(project_id)
        except (OSError, RuntimeError, ValueError) as exc:
            logger.exception("Failed to fetch screens for project %s", project_id)
            raise HTTPException(
                status_code=500, detail="Failed to fetch screens"
            ) from exc
        return [record.to_screen() for record in records]

    def _resolve_platform(project: ProjectRecord) -> Platform:
        if project.platform is None:
            return resolved_settings.default_platform
        try:
            return Platform.parse(project.platform)
        except ValueError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    def _assemble(project_id: str | None, acting_user_id: str | None) -> PrototypeDocument:
        user_id = _require_user(acting_user_id)
        if project_id is None or not project_id.strip():
            raise HTTPException(status_code=400, detail="Project ID required")

        project = _load_project(project_id.strip(), user_id)
        screens = _load_screens(project.identifier)
        platform = _resolve_platform(project)

        try:
            return build_prototype(screens, platform, project.name)
        except (TypeError, ValueError) as exc:
            logger.exception("Failed to build prototype for project %s", project_id)
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    tags_metadata = [
        {
            "name": "Prototypes",
            "description": (
                "Assemble generated screens into a single navigable prototype "
                "document and inspect the navigation flows between screens."
            ),
        },
    ]

    app = FastAPI(
        title="Prototype Assembly API",
        version="0.1.0",
        description=(
            "HTTP API combining per-screen HTML fragments into self-contained, "
            "navigable prototype documents for mobile and desktop projects."
        ),
        openapi_tags=tags_metadata,
    )

    @app.post(
        "/api/prototype/build",
        response_model=PrototypeBuildResponse,
        tags=["Prototypes"],
    )
    def build_prototype_endpoint(
        payload: PrototypeBuildRequest,
        acting_user_id: str | None = Query(
            None,
            description="Identifier of the authenticated user requesting the build.",
        ),
    ) -> PrototypeBuildResponse:
        document = _assemble(payload.project_id, acting_user_id)
        return PrototypeBuildResponse(
            html=document.html, screen_count=document.screen_count
        )

    @app.get(
        "/api/prototype/{project_id}/preview",
        response_class=HTMLResponse,
        tags=["Prototypes"],
    )
    def preview_prototype(
        project_id: str,
        acting_user_id: str | None = Query(
            None,
            description="Identifier of the authenticated user requesting the preview.",
        ),
    ) -> HTMLResponse:
        document = _assemble(project_id, acting_user_id)
        return HTMLResponse(content=document.html)

    @app.get(
        "/api/prototype/{project_id}/flows",
        response_model=ScreenFlowListResponse,
        tags=["Prototypes"],
    )
    def list_prototype_flows(
        project_id: str,
        acting_user_id: str | None = Query(
            None,
            description="Identifier of the authenticated user requesting the flows.",
        ),
    ) -> ScreenFlowListResponse:
        user_id = _require_user(acting_user_id)
        project = _load_project(project_id, user_id)
        screens = _load_screens(project.identifier)

        try:
            resolution = resolve_screens(build_registry(screens))
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

        return ScreenFlowListResponse(
            flows=[
                ScreenFlowResource(from_screen=flow.from_screen, to_screen=flow.to_screen)
                for flow in extract_flows(resolution.registry.screens)
            ]
        )

    return app


__all__ = [
    "PrototypeBuildRequest",
    "PrototypeBuildResponse",
    "ScreenFlowListResponse",
    "ScreenFlowResource",
    "create_app",
]
