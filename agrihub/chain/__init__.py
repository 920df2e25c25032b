"""Chain engine client and payload models."""

from agrihub.chain.engine import NATIVE_TOKEN_ADDRESS, ChainEngine

__all__ = ["ChainEngine", "NATIVE_TOKEN_ADDRESS"]
