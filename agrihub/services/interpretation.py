"""Normalisation of interpretation payloads stored next to scans and readings.

Interpretations were written by several generations of analysis jobs, so the
stored value may be a string, a map with lower- or upper-case keys, or
missing entirely.  The shape is decided by inspecting the value's type.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from agrihub.services.models import Interpretation, PlantScanInterpretation, SoilInterpretation

_SOIL_FIELDS = (
    "evaluation",
    "fertility",
    "moisture",
    "ph",
    "temperature",
    "sunlight",
    "humidity",
)


def _lookup(data: Mapping[str, Any], name: str, kinds: tuple[type, ...]) -> Any:
    """First value of type *kinds* under *name* or its capitalised form (``Diagnosis``)."""
    for key in (name, name[:1].upper() + name[1:]):
        value = data.get(key)
        if isinstance(value, kinds):
            return value
    return None


def _text(data: Mapping[str, Any], name: str) -> Optional[str]:
    return _lookup(data, name, (str,))


def parse_soil_interpretation(value: Any) -> SoilInterpretation:
    """Soil interpretation with per-field defaults for anything absent."""
    result = SoilInterpretation()
    if not isinstance(value, Mapping):
        return result

    updates: dict[str, str] = {}
    for name in _SOIL_FIELDS:
        text = _text(value, name)
        if text is not None:
            updates[name] = text
    comparison = _text(value, "historicalComparison")
    if comparison is not None:
        updates["historical_comparison"] = comparison
    return result.model_copy(update=updates)


def parse_plant_interpretation(value: Any) -> Interpretation:
    """Free text stays text; a map becomes :class:`PlantScanInterpretation`."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if not isinstance(value, Mapping):
        return ""

    recommendations = _lookup(value, "recommendations", (list, str))
    if isinstance(recommendations, str):
        recommendations = [recommendations] if recommendations else []
    elif isinstance(recommendations, list):
        recommendations = [item for item in recommendations if isinstance(item, str)]
    else:
        recommendations = []

    return PlantScanInterpretation(
        diagnosis=_text(value, "diagnosis") or "",
        reason=_text(value, "reason") or "",
        recommendations=recommendations,
        historical_comparison=_text(value, "historicalComparison") or "",
    )
