"""HTTP API (FastAPI) for schedule collection and queries."""

from src.api.app import app, create_app
from src.api.auth import Principal, PrincipalVerifier, StaticTokenVerifier, require_principal

__all__ = [
    "app",
    "create_app",
    "Principal",
    "PrincipalVerifier",
    "StaticTokenVerifier",
    "require_principal",
]
