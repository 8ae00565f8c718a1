"""
Normalized copies of listing text fields used for duplicate detection
"""
import re
from typing import Optional


def normalize_text(value: Optional[str]) -> str:
    """Trim, lowercase and collapse internal whitespace"""
    return re.sub(r"\s+", " ", (value or "").strip().lower())


def normalized_fields(title: Optional[str], location: Optional[str], area: Optional[str]) -> dict:
    return {
        "title_norm": normalize_text(title),
        "location_norm": normalize_text(location),
        "area_norm": normalize_text(area),
    }


def duplicate_key(row: dict) -> tuple:
    """The per-landlord uniqueness key of a property row"""
    return (
        row.get("landlord_id"),
        row.get("title_norm"),
        row.get("location_norm"),
        row.get("area_norm"),
        float(row.get("price") or 0),
        row.get("property_type"),
    )
