"""FastAPI application exposing the prototype build endpoints."""

from .app import create_app
from .settings import PrototypeApiSettings

__all__ = ["create_app", "PrototypeApiSettings"]
