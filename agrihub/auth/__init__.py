"""Identity verification and login nonces."""

from agrihub.auth.nonce import NonceStore
from agrihub.auth.verifier import IdentityVerifier

__all__ = ["IdentityVerifier", "NonceStore"]
