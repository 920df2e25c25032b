"""Wallet balances and ownership lookups for the verified subject."""

from __future__ import annotations

import time

from agrihub.auth.verifier import IdentityVerifier
from agrihub.cache import keys
from agrihub.cache.read_through import get_or_compute
from agrihub.cache.store import CacheStore
from agrihub.chain.engine import NATIVE_TOKEN_ADDRESS, ChainEngine
from agrihub.chain.models import BackendWallet, NFTItem, TokenBalance, UserBalances, WalletBalance
from agrihub.config import settings
from agrihub.services.validation import validate_address


def token_price(engine: ChainEngine, cache: CacheStore, token_address: str) -> float:
    """USD price, cached for two minutes per ``(chain, token)``."""
    address = token_address or NATIVE_TOKEN_ADDRESS
    return get_or_compute(
        cache,
        keys.entity_key(keys.TOKEN_PRICE, engine.chain_id, address.lower()),
        keys.TOKEN_PRICE_TTL,
        lambda: engine.get_token_price_usd(address),
        load=float,
    )


def _token_balance(balance: WalletBalance, price: float) -> TokenBalance:
    try:
        amount = float(balance.display_value)
    except ValueError:
        amount = 0.0
    return TokenBalance(
        balance=balance.display_value,
        raw_balance=balance.value,
        price_usd=price,
        value_usd=amount * price,
    )


def get_user_balances(
    verifier: IdentityVerifier,
    engine: ChainEngine,
    cache: CacheStore,
    token: str,
) -> UserBalances:
    """Native and DAGRI balances of the subject, valued in USD.

    Raises:
        AuthError: *token* did not verify.
        ChainError: Any balance lookup failed.
    """
    subject = verifier.verify(token)

    native = engine.get_balance(subject)
    dagri = engine.get_erc20_balance(settings.dagri_contract, subject)
    native_price = token_price(engine, cache, NATIVE_TOKEN_ADDRESS)
    dagri_price = token_price(engine, cache, settings.dagri_contract)

    return UserBalances(
        wallet_address=subject,
        native=_token_balance(native, native_price),
        dagri=_token_balance(dagri, dagri_price),
        last_updated=int(time.time()),
    )


def get_owned_nfts(
    verifier: IdentityVerifier,
    engine: ChainEngine,
    token: str,
    contract: str,
) -> list[NFTItem]:
    validate_address(contract, "contractAddress")
    subject = verifier.verify(token)
    return engine.get_owned_nfts(contract, subject)


def create_wallet(verifier: IdentityVerifier, engine: ChainEngine, token: str) -> BackendWallet:
    """Provision a backend wallet labelled with the subject."""
    subject = verifier.verify(token)
    wallet = engine.create_backend_wallet(label=subject)
    print(f"[WALLET] Created backend wallet {wallet.wallet_address} for {subject}")
    return wallet
