"""Request dependencies shared by the routers."""

from __future__ import annotations

from fastapi import Depends, Request

from agrihub.auth.verifier import IdentityVerifier
from agrihub.cache.store import CacheStore
from agrihub.chain.engine import ChainEngine
from agrihub.config import settings
from agrihub.db.connection import GraphStore
from agrihub.errors import AuthError

DEV_BYPASS_HEADER = "X-Dev-Bypass-Token"


def bearer_token(request: Request) -> str:
    """Raw token from ``Authorization: Bearer <token>``.

    The development token may also arrive in ``X-Dev-Bypass-Token``.
    """
    bypass = request.headers.get(DEV_BYPASS_HEADER, "")
    if bypass and settings.dev_bypass_token and bypass == settings.dev_bypass_token:
        return bypass

    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthError("missing bearer token")
    return token


def graph_store(request: Request) -> GraphStore:
    return request.app.state.graph


def cache_store(request: Request) -> CacheStore:
    return request.app.state.cache


def chain_engine(request: Request) -> ChainEngine:
    return request.app.state.engine


def identity_verifier(request: Request) -> IdentityVerifier:
    return request.app.state.verifier


def current_subject(
    token: str = Depends(bearer_token),
    verifier: IdentityVerifier = Depends(identity_verifier),
) -> str:
    return verifier.verify(token)
