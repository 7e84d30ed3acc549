"""
Principal verification for the HTTP API.

A request carries a token either as ``Authorization: Bearer <token>`` or in
the session cookie. A PrincipalVerifier turns that token into a Principal.
"""

import hmac
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Protocol

from fastapi import Depends, Request

from src.utils import logger
from src.utils.exceptions import AuthError
from src.config import settings


@dataclass(frozen=True)
class Principal:
    """Authenticated caller."""
    subject: str


class PrincipalVerifier(Protocol):
    """Identity collaborator: maps a token to a principal, or None if unknown."""

    def verify(self, token: str) -> Principal | None:
        ...


class StaticTokenVerifier:
    """Accepts a fixed set of API tokens (AUTH_API_TOKENS)."""

    def __init__(self, tokens: Iterable[str]):
        self.tokens = tuple(token for token in tokens if token)
        if not self.tokens:
            logger.warning("No API tokens configured, every request will be rejected")

    def verify(self, token: str) -> Principal | None:
        for index, known in enumerate(self.tokens):
            if hmac.compare_digest(token.encode(), known.encode()):
                return Principal(subject=f"api-token-{index}")
        return None


@lru_cache
def get_verifier() -> PrincipalVerifier:
    """Default verifier built from settings."""
    return StaticTokenVerifier(settings.auth.token_set)


def extract_token(request: Request) -> str | None:
    """Read the bearer token, falling back to the session cookie."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(settings.auth.cookie_name) or None


def require_principal(
    request: Request,
    verifier: PrincipalVerifier = Depends(get_verifier),
) -> Principal:
    """
    FastAPI dependency resolving the authenticated principal.

    Raises:
        AuthError: No token, or the verifier does not recognize it
    """
    token = extract_token(request)
    if token is None:
        raise AuthError()

    principal = verifier.verify(token)
    if principal is None:
        logger.warning(f"Rejected unknown token on {request.url.path}")
        raise AuthError("Invalid credentials")
    return principal


__all__ = [
    "Principal",
    "PrincipalVerifier",
    "StaticTokenVerifier",
    "get_verifier",
    "extract_token",
    "require_principal",
]
