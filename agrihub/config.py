"""Centralised settings for the agrihub aggregation service.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_TREASURY_WALLET = "0x984785A89BF95cb3d5Df4E45F670081944d8D547"


def _redis_addr() -> tuple[str, int]:
    """Split ``REDIS_ADDR`` (``host:port``) into its parts."""
    addr = os.environ.get("REDIS_ADDR", "localhost:6379")
    host, _, port = addr.rpartition(":")
    if not host:
        return addr, 6379
    try:
        return host, int(port)
    except ValueError:
        return host, 6379


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Graph store (Memgraph over bolt)
    # ------------------------------------------------------------------
    memgraph_uri: str = field(
        default_factory=lambda: os.environ.get("MEMGRAPH_URI", "bolt://localhost:7687")
    )
    memgraph_username: str = field(
        default_factory=lambda: os.environ.get("MEMGRAPH_USERNAME", "")
    )
    memgraph_password: str = field(
        default_factory=lambda: os.environ.get("MEMGRAPH_PASSWORD", "")
    )

    # ------------------------------------------------------------------
    # Cache store (Redis)
    # ------------------------------------------------------------------
    redis_host: str = field(default_factory=lambda: _redis_addr()[0])
    redis_port: int = field(default_factory=lambda: _redis_addr()[1])
    redis_password: str = field(
        default_factory=lambda: os.environ.get("REDIS_PASSWORD", "")
    )
    redis_db: int = field(
        default_factory=lambda: int(os.environ.get("REDIS_DB", "0") or 0)
    )

    # ------------------------------------------------------------------
    # Chain engine
    # ------------------------------------------------------------------
    engine_base_url: str = field(
        default_factory=lambda: os.environ.get(
            "ENGINE_BASE_URL", "https://engine.decentragri.com"
        )
    )
    engine_secret_key: str = field(
        default_factory=lambda: os.environ.get("SECRET_KEY", "")
    )
    price_api_template: str = field(
        default_factory=lambda: os.environ.get(
            "PRICE_API_TEMPLATE", "https://{chain_id}.insight.thirdweb.com/v1/tokens/price"
        )
    )
    chain_id: str = field(default_factory=lambda: os.environ.get("CHAIN_ID", "421614"))
    farm_plot_contract: str = field(
        default_factory=lambda: os.environ.get(
            "FARM_PLOT_CONTRACT_ADDRESS", "0x3a981F929b06a44F739C8832e030bEF3881742dc"
        )
    )
    marketplace_contract: str = field(
        default_factory=lambda: os.environ.get(
            "MARKETPLACE_CONTRACT_ADDRESS", "0x204239c1A74e6d1D17A6FE52172f3F8D26597DB9"
        )
    )
    dagri_contract: str = field(
        default_factory=lambda: os.environ.get(
            "DAGRI_CONTRACT_ADDRESS", "0xF21C7E1DC1dB0903C2A4BC015A9825081682D448"
        )
    )
    admin_wallet: str = field(
        default_factory=lambda: os.environ.get(
            "ADMIN_WALLET_ADDRESS", "0xE37D4e372c004ff76c1415d3C711B7dD1BbCCCeB"
        )
    )

    # ------------------------------------------------------------------
    # Decentralised image gateway
    # ------------------------------------------------------------------
    ipfs_client_id: str = field(
        default_factory=lambda: os.environ.get(
            "CLIENT_ID", "758a938bc85320ceb23c40418e01618a"
        )
    )
    ipfs_gateway_domain: str = field(
        default_factory=lambda: os.environ.get("IPFS_GATEWAY_DOMAIN", "ipfscdn.io")
    )
    image_fetch_concurrency: int = field(
        default_factory=lambda: int(os.environ.get("IMAGE_FETCH_CONCURRENCY", "20"))
    )

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    jwt_secret_key: str = field(
        default_factory=lambda: os.environ.get("JWT_SECRET_KEY", "")
    )
    dev_bypass_token: str = field(
        default_factory=lambda: os.environ.get("DEV_BYPASS_TOKEN", "dev_bypass_authorized")
    )
    dev_subject: str = field(
        default_factory=lambda: os.environ.get("DEV_SUBJECT", _TREASURY_WALLET)
    )
    nonce_ttl_seconds: float = field(
        default_factory=lambda: float(os.environ.get("NONCE_TTL_SECONDS", "300"))
    )

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "15.0"))
    )
    port: int = field(default_factory=lambda: int(os.environ.get("PORT", "9085")))

    @property
    def gateway_base_url(self) -> str:
        """HTTP prefix that content hashes are appended to."""
        return f"https://{self.ipfs_client_id}.{self.ipfs_gateway_domain}/ipfs/"


# Module-level singleton; import this everywhere:
#   from agrihub.config import settings
settings = Settings()
