"""Wallet endpoints.

Routes
------
GET  /api/wallet/balances                   Native and DAGRI balances in USD
GET  /api/wallet/nfts/{contract_address}    ERC-1155 tokens owned on a contract
POST /api/wallet/create                     Provision a backend wallet
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from agrihub.api.deps import bearer_token, cache_store, chain_engine, identity_verifier
from agrihub.auth.verifier import IdentityVerifier
from agrihub.cache.store import CacheStore
from agrihub.chain.engine import ChainEngine
from agrihub.chain.models import BackendWallet, NFTItem, UserBalances
from agrihub.services import wallet as wallet_service

router = APIRouter()


@router.get("/balances", response_model=UserBalances)
def balances(
    token: str = Depends(bearer_token),
    verifier: IdentityVerifier = Depends(identity_verifier),
    engine: ChainEngine = Depends(chain_engine),
    cache: CacheStore = Depends(cache_store),
) -> UserBalances:
    return wallet_service.get_user_balances(verifier, engine, cache, token)


@router.get("/nfts/{contract_address}", response_model=list[NFTItem])
def owned_nfts(
    contract_address: str,
    token: str = Depends(bearer_token),
    verifier: IdentityVerifier = Depends(identity_verifier),
    engine: ChainEngine = Depends(chain_engine),
) -> list[NFTItem]:
    return wallet_service.get_owned_nfts(verifier, engine, token, contract_address)


@router.post("/create", response_model=BackendWallet, status_code=201)
def create(
    token: str = Depends(bearer_token),
    verifier: IdentityVerifier = Depends(identity_verifier),
    engine: ChainEngine = Depends(chain_engine),
) -> BackendWallet:
    return wallet_service.create_wallet(verifier, engine, token)
