"""Tests for agrihub.auth: token verification, login nonces and wallet login."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from agrihub.auth.nonce import NonceStore
from agrihub.auth.verifier import IdentityVerifier
from agrihub.auth.wallet import WalletLoginRequest, authenticate_wallet, recover_signer
from agrihub.errors import AuthError, QueryError, ValidationError

from conftest import DEV_SUBJECT, DEV_TOKEN, TEST_SECRET


class TestIdentityVerifier:
    def test_round_trip(self, verifier) -> None:
        assert verifier.verify(verifier.issue("alice")) == "alice"

    def test_dev_token_maps_to_dev_subject(self, verifier) -> None:
        assert verifier.verify(DEV_TOKEN) == DEV_SUBJECT

    def test_dev_token_disabled_when_unset(self) -> None:
        strict = IdentityVerifier(secret=TEST_SECRET, bypass_token="")
        with pytest.raises(AuthError):
            strict.verify(DEV_TOKEN)

    @pytest.mark.parametrize("token", ["", "not.a.jwt", "garbage"])
    def test_malformed(self, verifier, token) -> None:
        with pytest.raises(AuthError):
            verifier.verify(token)

    def test_expired(self, verifier) -> None:
        token = verifier.issue("alice", lifetime=timedelta(seconds=-10))
        with pytest.raises(AuthError, match="expired"):
            verifier.verify(token)

    def test_wrong_signature(self, verifier) -> None:
        forged = jwt.encode({"userName": "alice"}, "another-secret-that-is-also-long-enough", algorithm="HS256")
        with pytest.raises(AuthError):
            verifier.verify(forged)

    def test_missing_subject_claim(self, verifier) -> None:
        token = jwt.encode({"sub": "alice"}, TEST_SECRET, algorithm="HS256")
        with pytest.raises(AuthError, match="username"):
            verifier.verify(token)

    def test_unknown_user_is_rejected(self, graph) -> None:
        checker = IdentityVerifier(store=graph, secret=TEST_SECRET, bypass_token=DEV_TOKEN)
        with pytest.raises(AuthError, match="does not exist"):
            checker.verify(checker.issue("ghost"))
        assert graph.calls[0][1] == {"userName": "ghost"}

    def test_known_user_is_accepted(self, graph) -> None:
        graph.add("MATCH (u:User", [{"username": "alice"}])
        checker = IdentityVerifier(store=graph, secret=TEST_SECRET, bypass_token=DEV_TOKEN)
        assert checker.verify(checker.issue("alice")) == "alice"

    def test_store_failure_is_a_query_error(self, graph) -> None:
        graph.add("MATCH (u:User", QueryError("down"))
        checker = IdentityVerifier(store=graph, secret=TEST_SECRET, bypass_token=DEV_TOKEN)
        with pytest.raises(QueryError):
            checker.verify(checker.issue("alice"))

    def test_unconfigured_secret(self) -> None:
        with pytest.raises(AuthError):
            IdentityVerifier(secret="", bypass_token="").verify("a.b.c")


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestNonceStore:
    def test_single_use(self) -> None:
        store = NonceStore(ttl_seconds=300)
        nonce = store.issue("0xabc")

        assert store.consume("0xabc", nonce) is True
        assert store.consume("0xabc", nonce) is False

    def test_wrong_value_retires_nonce(self) -> None:
        store = NonceStore(ttl_seconds=300)
        nonce = store.issue("0xabc")

        assert store.consume("0xabc", "wrong") is False
        assert store.consume("0xabc", nonce) is False

    def test_expiry(self) -> None:
        clock = _Clock()
        store = NonceStore(ttl_seconds=300, clock=clock)
        nonce = store.issue("0xabc")

        clock.now += 301
        assert store.consume("0xabc", nonce) is False
        assert len(store) == 0

    def test_reissue_replaces(self) -> None:
        store = NonceStore(ttl_seconds=300)
        first = store.issue("0xabc")
        second = store.issue("0xabc")

        assert first != second
        assert len(store) == 1
        assert store.consume("0xabc", second) is True

    def test_sweep(self) -> None:
        clock = _Clock()
        store = NonceStore(ttl_seconds=60, clock=clock)
        store.issue("old")
        clock.now += 30
        fresh = store.issue("new")
        clock.now += 45

        assert store.sweep() == 1
        assert len(store) == 1
        assert store.consume("new", fresh) is True


# ---------------------------------------------------------------------------
# Wallet login
# ---------------------------------------------------------------------------

WALLET_KEY = "0x" + "4c" * 32


def _sign(message: str, key: str = WALLET_KEY) -> str:
    signed = Account.sign_message(encode_defunct(text=message), private_key=key)
    return bytes(signed.signature).hex()


def _login(address: str, nonce: str, signature: str) -> WalletLoginRequest:
    return WalletLoginRequest(
        wallet_address=address,
        nonce=nonce,
        signature_hex=signature,
        device_id="device-1",
    )


class TestRecoverSigner:
    def test_recovers_signing_address(self) -> None:
        address = Account.from_key(WALLET_KEY).address
        assert recover_signer("hello", "0x" + _sign("hello")) == address

    def test_zero_based_recovery_id(self) -> None:
        raw = bytearray(bytes.fromhex(_sign("hello")))
        raw[-1] -= 27
        assert recover_signer("hello", raw.hex()) == Account.from_key(WALLET_KEY).address

    @pytest.mark.parametrize("signature", ["zz", "00" * 10, "00" * 64 + "05"])
    def test_malformed_signature(self, signature: str) -> None:
        with pytest.raises(AuthError):
            recover_signer("hello", signature)


class TestAuthenticateWallet:
    def test_new_wallet_is_registered_and_token_issued(self, graph, verifier) -> None:
        address = Account.from_key(WALLET_KEY).address
        nonces = NonceStore(ttl_seconds=300)
        nonce = nonces.issue(address.lower())

        response = authenticate_wallet(graph, nonces, verifier, _login(address, nonce, _sign(nonce)))

        assert response.is_new_user is True
        assert response.login_type == "wallet"
        assert verifier.verify(response.access_token) == address
        query, params = graph.writes[0]
        assert "CREATE (u:User" in query
        assert params == {"username": address, "walletAddress": address, "deviceId": "device-1"}

    def test_known_wallet_is_not_recreated(self, graph, verifier) -> None:
        address = Account.from_key(WALLET_KEY).address
        graph.add("MATCH (u:User", [{"username": address}])
        nonces = NonceStore(ttl_seconds=300)
        nonce = nonces.issue(address.lower())

        response = authenticate_wallet(graph, nonces, verifier, _login(address, nonce, _sign(nonce)))

        assert response.is_new_user is False
        assert graph.writes == []

    def test_nonce_cannot_be_replayed(self, graph, verifier) -> None:
        address = Account.from_key(WALLET_KEY).address
        nonces = NonceStore(ttl_seconds=300)
        nonce = nonces.issue(address.lower())
        request = _login(address, nonce, _sign(nonce))

        authenticate_wallet(graph, nonces, verifier, request)
        with pytest.raises(AuthError, match="nonce"):
            authenticate_wallet(graph, nonces, verifier, request)

    def test_signature_from_another_wallet(self, graph, verifier) -> None:
        address = Account.from_key(WALLET_KEY).address
        nonces = NonceStore(ttl_seconds=300)
        nonce = nonces.issue(address.lower())
        other_key = "0x" + "7d" * 32

        with pytest.raises(AuthError, match="does not belong"):
            authenticate_wallet(graph, nonces, verifier, _login(address, nonce, _sign(nonce, other_key)))
        assert graph.writes == []
        assert len(nonces) == 0

    def test_unissued_nonce(self, graph, verifier) -> None:
        address = Account.from_key(WALLET_KEY).address
        with pytest.raises(AuthError):
            authenticate_wallet(
                graph, NonceStore(ttl_seconds=300), verifier, _login(address, "abc", _sign("abc"))
            )

    def test_missing_device_id(self, graph, verifier) -> None:
        address = Account.from_key(WALLET_KEY).address
        request = WalletLoginRequest(wallet_address=address, nonce="n", signature_hex="00")
        with pytest.raises(ValidationError, match="deviceId"):
            authenticate_wallet(graph, NonceStore(ttl_seconds=300), verifier, request)
