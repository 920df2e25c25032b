"""Wallet login: a signed nonce exchanged for an access token.

The client fetches a nonce, signs it with ``personal_sign`` (EIP-191) and
posts the signature back.  The nonce is retired on that first attempt
whatever the outcome.  A wallet seen for the first time gets a ``User`` node.
"""

from __future__ import annotations

from eth_account import Account
from eth_account.messages import encode_defunct

from agrihub.auth.nonce import NonceStore
from agrihub.auth.verifier import USER_EXISTS_QUERY, IdentityVerifier
from agrihub.db.connection import GraphStore
from agrihub.errors import AuthError, ValidationError
from agrihub.serialization import WireModel
from agrihub.services.validation import validate_address

SIGNATURE_LENGTH = 65

CREATE_USER_QUERY = """
CREATE (u:User {
    username: $username,
    createdAt: timestamp(),
    walletAddress: $walletAddress,
    deviceId: $deviceId
})
RETURN u.username AS username
"""


class WalletLoginRequest(WireModel):
    wallet_address: str = ""
    nonce: str = ""
    signature_hex: str = ""
    device_id: str = ""


class WalletLoginResponse(WireModel):
    wallet_address: str
    access_token: str
    is_new_user: bool
    message: str
    login_type: str = "wallet"


def recover_signer(message: str, signature_hex: str) -> str:
    """Checksummed address behind a ``personal_sign`` signature of *message*.

    Recovery ids 0/1 are accepted alongside 27/28.

    Raises:
        AuthError: Malformed signature or failed recovery.
    """
    try:
        signature = bytearray(bytes.fromhex(signature_hex.removeprefix("0x")))
    except ValueError as exc:
        raise AuthError("invalid signature hex") from exc

    if len(signature) != SIGNATURE_LENGTH:
        raise AuthError("invalid signature length")
    if signature[-1] in (0, 1):
        signature[-1] += 27
    elif signature[-1] not in (27, 28):
        raise AuthError("invalid recovery id")

    try:
        return Account.recover_message(encode_defunct(text=message), signature=bytes(signature))
    except Exception as exc:
        raise AuthError(f"signature recovery failed: {exc}") from exc


def authenticate_wallet(
    store: GraphStore,
    nonces: NonceStore,
    verifier: IdentityVerifier,
    request: WalletLoginRequest,
) -> WalletLoginResponse:
    """Redeem a signed nonce, registering the wallet on first login.

    Raises:
        ValidationError: A required field is missing or the address is malformed.
        AuthError: Unknown, expired or mismatched nonce, or a signature from
            another wallet.
        QueryError: The user lookup or creation failed.
    """
    validate_address(request.wallet_address, "walletAddress")
    for field, value in (
        ("nonce", request.nonce),
        ("signatureHex", request.signature_hex),
        ("deviceId", request.device_id),
    ):
        if not value:
            raise ValidationError(field, "is required")

    wallet = request.wallet_address
    if not nonces.consume(wallet.lower(), request.nonce):
        raise AuthError("nonce not found, expired or mismatched")

    signer = recover_signer(request.nonce, request.signature_hex)
    if signer.lower() != wallet.lower():
        raise AuthError("signature does not belong to wallet")

    rows = store.read_query(USER_EXISTS_QUERY, {"userName": wallet})
    is_new_user = not rows
    if is_new_user:
        store.write_query(
            CREATE_USER_QUERY,
            {"username": wallet, "walletAddress": wallet, "deviceId": request.device_id},
        )
        print(f"[AUTH] ✓ Registered wallet {wallet}")

    return WalletLoginResponse(
        wallet_address=wallet,
        access_token=verifier.issue(wallet),
        is_new_user=is_new_user,
        message=(
            "Welcome! Your account has been created successfully."
            if is_new_user
            else "Welcome back! You have been logged in successfully."
        ),
    )
