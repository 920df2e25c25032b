"""Payload models for the chain engine (marketplace listings, NFTs, balances).

Upstream payloads are loosely typed: ids arrive as numbers or strings,
listing status as a name or an ordinal, and farm plot attributes in one of
three layouts.  The validators here fold all of that into one shape.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from agrihub.serialization import ImageBytes, WireModel

LISTING_STATUSES = ("UNSET", "CREATED", "COMPLETED", "CANCELLED", "ACTIVE", "EXPIRED")

_ATTRIBUTE_TRAITS = (
    "id",
    "price",
    "farmName",
    "description",
    "cropType",
    "owner",
    "image",
    "location",
    "createdAt",
)


# ---------------------------------------------------------------------------
# Marketplace
# ---------------------------------------------------------------------------

class CurrencyValue(WireModel):
    name: str = ""
    symbol: str = ""
    decimals: int = 0
    value: str = ""
    display_value: str = ""


class PlotCoordinates(WireModel):
    lat: str = ""
    long: str = ""


class FarmPlotAttributes(WireModel):
    id: str = ""
    price: str = ""
    farm_name: str = ""
    description: str = ""
    crop_type: str = ""
    owner: str = ""
    image: str = ""
    location: str = ""
    coordinates: PlotCoordinates = Field(default_factory=PlotCoordinates)
    created_at: str = ""


def _traits_to_attributes(pairs: dict[str, Any]) -> list[dict[str, Any]]:
    found = {
        trait: str(pairs[trait])
        for trait in _ATTRIBUTE_TRAITS
        if pairs.get(trait) not in (None, "")
    }
    if found.get("id") or found.get("farmName"):
        return [found]
    return []


def normalise_attributes(raw: Any, properties: Any = None) -> list[dict[str, Any]]:
    """Fold the three known attribute layouts into farm plot attribute dicts.

    1. A list of attribute objects (``{"id": .., "farmName": ..}``).
    2. A list of ``{"trait_type": .., "value": ..}`` pairs.
    3. A flat ``properties`` map using the same trait names.

    Anything else yields an empty list.
    """
    if isinstance(raw, list) and raw:
        objects = [item for item in raw if isinstance(item, dict)]
        if objects and all("trait_type" not in item for item in objects):
            if any(item.get("id") or item.get("farmName") or item.get("description") for item in objects):
                return objects

        pairs = {
            item["trait_type"]: item.get("value")
            for item in objects
            if isinstance(item.get("trait_type"), str)
        }
        if pairs:
            attributes = _traits_to_attributes(pairs)
            if attributes:
                return attributes

    if isinstance(properties, dict) and properties:
        return _traits_to_attributes(properties)

    return []


class FarmPlotMetadata(WireModel):
    name: str = ""
    description: str = ""
    image: str = ""
    external_url: str = Field("", alias="external_url")
    background_color: str = Field("", alias="background_color")
    properties: dict[str, Any] = Field(default_factory=dict)
    attributes: list[FarmPlotAttributes] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalise(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        data["attributes"] = normalise_attributes(data.get("attributes"), data.get("properties"))
        if data.get("properties") is None:
            data.pop("properties", None)
        return data

    def image_reference(self) -> str:
        for attribute in self.attributes:
            if attribute.image:
                return attribute.image
        return ""


class DirectListing(WireModel):
    id: str = ""
    asset_contract_address: str = ""
    token_id: str = ""
    seller: str = ""
    price_per_token: str = ""
    currency_contract_address: str = ""
    quantity: str = ""
    is_reserved_listing: bool = False
    currency_value_per_token: Optional[CurrencyValue] = None
    start_time_in_seconds: int = 0
    end_time_in_seconds: int = 0
    status: str = "UNSET"

    @field_validator("status", mode="before")
    @classmethod
    def _status_name(cls, value: Any) -> Any:
        if value is None:
            return "UNSET"
        if isinstance(value, bool):
            raise ValueError(f"invalid listing status: {value!r}")
        if isinstance(value, int):
            if 0 <= value < len(LISTING_STATUSES):
                return LISTING_STATUSES[value]
            raise ValueError(f"unknown listing status ordinal: {value}")
        return value


class FarmPlotListing(DirectListing):
    asset: FarmPlotMetadata = Field(default_factory=FarmPlotMetadata)
    image_bytes: ImageBytes = b""


class BuyFromListingRequest(WireModel):
    listing_id: str
    quantity: str = "1"
    buyer: str = ""


class BuyFromListingResponse(WireModel):
    receipt: Any = None


# ---------------------------------------------------------------------------
# NFTs
# ---------------------------------------------------------------------------

class NFTAttribute(WireModel):
    trait_type: str = Field("", alias="trait_type")
    value: str = ""

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)


class NFTMetadata(WireModel):
    id: str = ""
    uri: str = ""
    name: str = ""
    description: str = ""
    external_url: str = Field("", alias="external_url")
    attributes: list[NFTAttribute] = Field(default_factory=list)

    @field_validator("attributes", mode="before")
    @classmethod
    def _attribute_list(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    def image_reference(self) -> str:
        """The ``image`` trait when present, otherwise the metadata URI."""
        for attribute in self.attributes:
            if attribute.trait_type == "image" and attribute.value:
                return attribute.value
        return self.uri


class NFTItem(WireModel):
    metadata: NFTMetadata = Field(default_factory=NFTMetadata)
    owner: str = ""
    type: str = ""
    supply: str = ""
    quantity_owned: str = ""


# ---------------------------------------------------------------------------
# Balances
# ---------------------------------------------------------------------------

class WalletBalance(WireModel):
    display_value: str = ""
    value: str = ""
    symbol: str = ""
    name: str = ""
    decimals: int = 0


class TokenBalance(WireModel):
    balance: str = ""
    raw_balance: str = ""
    price_usd: float = Field(0.0, alias="priceUSD")
    value_usd: float = Field(0.0, alias="valueUSD")


class UserBalances(WireModel):
    wallet_address: str
    native: TokenBalance
    dagri: TokenBalance
    last_updated: int


class BackendWallet(WireModel):
    wallet_address: str = ""
    status: str = ""
