"""HTTP client for the chain engine and the token price service.

Every call goes through :meth:`ChainEngine._request`, which turns transport
failures, non-2xx statuses and malformed JSON into :class:`ChainError`.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from agrihub.chain.models import (
    BackendWallet,
    BuyFromListingRequest,
    FarmPlotListing,
    NFTItem,
    WalletBalance,
)
from agrihub.config import settings
from agrihub.errors import ChainError

NATIVE_TOKEN_ADDRESS = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"


class ChainEngine:
    """Thin wrapper over the engine's REST surface.

    Args:
        base_url: Engine root (``ENGINE_BASE_URL``).
        secret_key: Bearer secret for the engine and price API.
        admin_wallet: Backend wallet used for marketplace calls.
        chain_id: Target chain.
        client: Optional pre-built ``httpx.Client`` (tests, connection reuse).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        secret_key: Optional[str] = None,
        admin_wallet: Optional[str] = None,
        chain_id: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else settings.engine_base_url).rstrip("/")
        self.secret_key = secret_key if secret_key is not None else settings.engine_secret_key
        self.admin_wallet = admin_wallet if admin_wallet is not None else settings.admin_wallet
        self.chain_id = chain_id if chain_id is not None else settings.chain_id
        self._client = client or httpx.Client(timeout=settings.request_timeout, follow_redirects=True)

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _engine_headers(self, with_wallet: bool = False) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }
        if with_wallet:
            headers["X-Backend-Wallet-Address"] = self.admin_wallet
        return headers

    def _request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        params: Optional[dict[str, str]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        try:
            response = self._client.request(method, url, headers=headers, params=params, json=json)
        except httpx.HTTPError as exc:
            raise ChainError(f"request to {url} failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise ChainError(
                f"API request failed with status {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ChainError(f"malformed JSON from {url}") from exc

    @staticmethod
    def _result(payload: Any) -> Any:
        if not isinstance(payload, dict) or "result" not in payload:
            raise ChainError("response is missing 'result'")
        return payload["result"]

    # ------------------------------------------------------------------
    # Marketplace
    # ------------------------------------------------------------------

    def get_all_valid_listings(self, contract: str) -> list[FarmPlotListing]:
        url = f"{self.base_url}/marketplace/{self.chain_id}/{contract}/direct-listings/get-all-valid"
        result = self._result(self._request("GET", url, headers=self._engine_headers(with_wallet=True)))
        if not isinstance(result, list):
            raise ChainError("listing result is not a list")
        return [FarmPlotListing.model_validate(item) for item in result if isinstance(item, dict)]

    def buy_from_listing(self, contract: str, request: BuyFromListingRequest) -> Any:
        url = f"{self.base_url}/marketplace/{self.chain_id}/{contract}/direct-listings/buy-from-listing"
        body = {
            "listingId": request.listing_id,
            "quantity": request.quantity,
            "buyer": request.buyer,
        }
        payload = self._request("POST", url, headers=self._engine_headers(with_wallet=True), json=body)
        if isinstance(payload, dict) and "result" in payload:
            return payload["result"]
        return payload

    # ------------------------------------------------------------------
    # Wallets and tokens
    # ------------------------------------------------------------------

    def create_backend_wallet(self, label: str = "") -> BackendWallet:
        url = f"{self.base_url}/backend-wallet/create"
        body: dict[str, Any] = {"type": "smart:local"}
        if label:
            body["label"] = label
        result = self._result(self._request("POST", url, headers=self._engine_headers(), json=body))
        return BackendWallet.model_validate(result)

    def get_balance(self, wallet: str) -> WalletBalance:
        """Native token balance of *wallet*."""
        url = f"{self.base_url}/backend-wallet/{self.chain_id}/{wallet}/get-balance"
        result = self._result(self._request("GET", url, headers=self._engine_headers()))
        return WalletBalance.model_validate(result)

    def get_erc20_balance(self, contract: str, wallet: str) -> WalletBalance:
        url = f"{self.base_url}/contract/{self.chain_id}/{contract}/erc20/balance-of"
        payload = self._request(
            "GET", url, headers=self._engine_headers(), params={"wallet_address": wallet}
        )
        result = self._result(payload)
        # The engine nests the balance one level deeper for contract reads.
        if isinstance(result, dict) and isinstance(result.get("result"), dict):
            result = result["result"]
        return WalletBalance.model_validate(result)

    def get_owned_nfts(self, contract: str, wallet: str) -> list[NFTItem]:
        url = f"{self.base_url}/contract/{self.chain_id}/{contract}/erc1155/get-owned"
        payload = self._request(
            "GET", url, headers=self._engine_headers(), params={"walletAddress": wallet}
        )
        result = self._result(payload)
        if not isinstance(result, list):
            raise ChainError("owned NFT result is not a list")
        return [NFTItem.model_validate(item) for item in result if isinstance(item, dict)]

    def get_token_price_usd(self, token_address: str = NATIVE_TOKEN_ADDRESS) -> float:
        """USD price of *token_address*; 0.0 when the price service has no quote."""
        url = settings.price_api_template.format(chain_id=self.chain_id)
        payload = self._request(
            "GET",
            url,
            headers={"x-secret-key": self.secret_key},
            params={"address": token_address or NATIVE_TOKEN_ADDRESS},
        )
        data = payload.get("data") if isinstance(payload, dict) else None
        if not data or not isinstance(data[0], dict):
            return 0.0
        price = data[0].get("price_usd")
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            return 0.0
        return float(price)
