"""Formatting helpers shared by the API serializers."""
from typing import Any, Dict, Optional
from urllib.parse import urlencode


PARTIAL_DATE_FORMATS = {
    1: "{:04d}",
    2: "{:04d}-{:02d}",
    3: "{:04d}-{:02d}-{:02d}",
}

GOOGLE_SEARCH_URL = "https://www.google.com/search"
OPENCORPORATES_OFFICERS_URL = "https://opencorporates.com/officers"


def partial_date_format(iso8601_date: Optional[str]) -> Optional[str]:
    """Normalize a partial ISO 8601 date (``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``).

    Timestamps are cut to their date part. Returns None for empty input and raises
    ValueError for anything that is not a partial date.
    """
    if not iso8601_date:
        return None
    date_part = str(iso8601_date).strip().split("T", 1)[0]
    atoms = date_part.split("-")
    if len(atoms) not in PARTIAL_DATE_FORMATS or not all(a.isdigit() for a in atoms):
        raise ValueError(f"Not a partial ISO 8601 date: {iso8601_date!r}")
    return PARTIAL_DATE_FORMATS[len(atoms)].format(*(int(a) for a in atoms))


def google_search_uri(params: Dict[str, Any]) -> str:
    return f"{GOOGLE_SEARCH_URL}?{urlencode(params)}"


def opencorporates_officers_search_uri(params: Dict[str, Any]) -> str:
    return f"{OPENCORPORATES_OFFICERS_URL}?{urlencode(params)}"

