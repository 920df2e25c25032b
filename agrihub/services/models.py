"""Response models for farm, scan and portfolio views.

These are plain pydantic models materialised per request from graph rows and
chain-engine payloads; nothing here is written back.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import Field

from agrihub.chain.models import NFTItem
from agrihub.serialization import ImageBytes, WireModel


# ---------------------------------------------------------------------------
# Farms
# ---------------------------------------------------------------------------

class FarmCoordinates(WireModel):
    lat: float = 0.0
    lng: float = 0.0


class FarmListing(WireModel):
    owner: str = ""
    farm_name: str = ""
    id: str = ""
    crop_type: str = ""
    description: str = ""
    image: str = ""
    coordinates: FarmCoordinates = Field(default_factory=FarmCoordinates)
    updated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    formatted_updated_at: str = ""
    formatted_created_at: str = ""
    image_bytes: ImageBytes = b""
    location: str = ""


# ---------------------------------------------------------------------------
# Scans
# ---------------------------------------------------------------------------

class SoilInterpretation(WireModel):
    evaluation: str = "Not analyzed"
    fertility: str = "No data available"
    moisture: str = "No data available"
    ph: str = "No data available"
    temperature: str = "No data available"
    sunlight: str = "No data available"
    humidity: str = "No data available"
    historical_comparison: str = ""


class PlantScanInterpretation(WireModel):
    """Structured diagnosis written by newer scan pipelines."""

    diagnosis: str = ""
    reason: str = ""
    recommendations: list[str] = Field(default_factory=list)
    historical_comparison: str = ""


# Older scans carry a free-text interpretation, newer ones the structure above.
Interpretation = Union[PlantScanInterpretation, str]


class PlantScan(WireModel):
    crop_type: str = ""
    note: str = ""
    created_at: Optional[datetime] = None
    formatted_created_at: str = ""
    id: str = ""
    interpretation: Interpretation = ""
    image_uri: str = ""
    image_bytes: ImageBytes = b""


class SoilReading(WireModel):
    fertility: Optional[float] = None
    moisture: Optional[float] = None
    ph: Optional[float] = None
    temperature: Optional[float] = None
    sunlight: Optional[float] = None
    humidity: Optional[float] = None
    farm_name: str = ""
    crop_type: str = ""
    sensor_id: str = ""
    id: str = ""
    created_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    formatted_created_at: str = ""
    formatted_submitted_at: str = ""
    interpretation: SoilInterpretation = Field(default_factory=SoilInterpretation)


class Pagination(WireModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_previous: bool


class FarmScanResult(WireModel):
    plant_scans: list[PlantScan] = Field(default_factory=list)
    soil_readings: list[SoilReading] = Field(default_factory=list)
    pagination: Pagination


# ---------------------------------------------------------------------------
# Portfolio
# ---------------------------------------------------------------------------

class PortfolioSummary(WireModel):
    farm_plot_nft_count: int = Field(0, alias="farmPlotNFTCount")


class NFTItemWithImage(NFTItem):
    image_bytes: ImageBytes = b""


class EntirePortfolio(WireModel):
    farm_plot_nfts: list[NFTItemWithImage] = Field(default_factory=list, alias="farmPlotNFTs")
