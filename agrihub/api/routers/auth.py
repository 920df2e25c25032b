"""Wallet login endpoints.

Routes
------
GET  /api/auth/nonce/{wallet_address}   Issue the nonce the wallet signs
POST /api/auth/wallet                   Redeem a signed nonce for a token

A nonce is valid for ``NONCE_TTL_SECONDS`` and can be redeemed once.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from agrihub.api.deps import graph_store, identity_verifier
from agrihub.auth.verifier import IdentityVerifier
from agrihub.auth.wallet import WalletLoginRequest, WalletLoginResponse, authenticate_wallet
from agrihub.db.connection import GraphStore
from agrihub.serialization import WireModel
from agrihub.services.validation import validate_address

router = APIRouter()


class NonceResponse(WireModel):
    wallet_address: str
    nonce: str
    expires_in: float


@router.get("/nonce/{wallet_address}", response_model=NonceResponse)
def issue_nonce(wallet_address: str, request: Request) -> NonceResponse:
    validate_address(wallet_address, "walletAddress")
    nonces = request.app.state.nonces
    nonces.sweep()
    return NonceResponse(
        wallet_address=wallet_address,
        nonce=nonces.issue(wallet_address.lower()),
        expires_in=nonces.ttl_seconds,
    )


@router.post("/wallet", response_model=WalletLoginResponse)
def wallet_login(
    body: WalletLoginRequest,
    request: Request,
    store: GraphStore = Depends(graph_store),
    verifier: IdentityVerifier = Depends(identity_verifier),
) -> WalletLoginResponse:
    return authenticate_wallet(store, request.app.state.nonces, verifier, body)
