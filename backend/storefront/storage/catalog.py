from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

import requests

from storefront.models.domain import Trip

logger = logging.getLogger(__name__)

BUNDLED_CATALOG = Path(__file__).resolve().parents[1] / "data" / "trips.json"


def parse_catalog(records: Iterable[Mapping[str, Any]]) -> List[Trip]:
    trips: List[Trip] = []
    seen = set()
    for record in records:
        trip = Trip.from_dict(record)
        if trip.id in seen:
            raise ValueError(f"Duplicate trip id {trip.id} in catalog")
        seen.add(trip.id)
        trips.append(trip)
    return trips


def load_catalog_file(path: str | Path) -> List[Trip]:
    path = Path(path)
    records = json.loads(path.read_text(encoding="utf-8"))
    trips = parse_catalog(records)
    logger.info("Loaded %d trips from %s", len(trips), path)
    return trips


def fetch_catalog(url: str, timeout: int = 10) -> List[Trip]:
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    payload = resp.json()
    if not isinstance(payload, list):
        raise ValueError(f"Catalog at {url} is not a list of trips")
    trips = parse_catalog(payload)
    logger.info("Loaded %d trips from %s", len(trips), url)
    return trips


def load_catalog(
    url: Optional[str] = None, path: Optional[str | Path] = None, timeout: int = 10
) -> List[Trip]:
    """
    Catalog snapshot for this process. A configured URL wins over a file
    path; if the URL cannot be fetched the file (or the bundled catalog)
    is used instead.
    """
    if url:
        try:
            return fetch_catalog(url, timeout=timeout)
        except (requests.RequestException, KeyError, TypeError, ValueError) as exc:
            logger.warning("Failed to fetch catalog from %s, falling back to file: %s", url, exc)
    return load_catalog_file(path or BUNDLED_CATALOG)
