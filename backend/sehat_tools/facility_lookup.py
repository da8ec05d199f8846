from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

OVERPASS_URL = "https://overpass-api.de/api/interpreter"
MAX_RESULTS = 5
DEFAULT_RADIUS_KM = 10.0
MAX_RADIUS_KM = 50.0
_CLINIC_LEVELS = {"phc", "clinic"}


def _safe_float(value: Any) -> float | None:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    radius_km = 6371.0
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return radius_km * c


def overpass_query(care_level: str, lat: float, lng: float, radius_km: float) -> str:
    amenity = '["amenity"~"clinic|doctors"]' if care_level in _CLINIC_LEVELS else '["amenity"~"hospital|clinic"]'
    around = f"(around:{int(radius_km * 1000)},{lat},{lng})"
    return f"[out:json][timeout:10];(node{amenity}{around};way{amenity}{around};);out center body 20;"


def maps_search_url(care_level: str, lat: float | None = None, lng: float | None = None) -> str:
    term = "clinic near me" if care_level in _CLINIC_LEVELS else "hospital near me"
    if lat is None or lng is None:
        return f"https://www.google.com/maps/search/{quote(term.replace(' ', '+'), safe='+')}"
    return f"https://www.google.com/maps/search/{quote(term)}/@{lat},{lng},13z"


@dataclass
class Facility:
    name: str
    distance_km: float
    type: str
    maps_url: str
    address: str | None = None
    phone: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "distance_km": self.distance_km,
            "type": self.type,
            "maps_url": self.maps_url,
        }
        if self.address:
            payload["address"] = self.address
        if self.phone:
            payload["phone"] = self.phone
        return payload


def rank_elements(elements: list[dict[str, Any]], lat: float, lng: float) -> list[Facility]:
    facilities: list[Facility] = []
    for element in elements:
        if not isinstance(element, dict):
            continue
        center = element.get("center") if isinstance(element.get("center"), dict) else {}
        el_lat = _safe_float(element.get("lat")) if element.get("lat") is not None else _safe_float(center.get("lat"))
        el_lng = _safe_float(element.get("lon")) if element.get("lon") is not None else _safe_float(center.get("lon"))
        if el_lat is None or el_lng is None:
            continue
        tags = element.get("tags") if isinstance(element.get("tags"), dict) else {}
        facilities.append(
            Facility(
                name=tags.get("name") or tags.get("name:en") or "Unnamed facility",
                distance_km=round(haversine_km(lat, lng, el_lat, el_lng), 1),
                type="clinic" if tags.get("amenity") in {"clinic", "doctors"} else "hospital",
                maps_url=f"https://www.google.com/maps/dir/?api=1&destination={el_lat},{el_lng}",
                address=tags.get("addr:full") or tags.get("addr:street"),
                phone=tags.get("phone") or tags.get("contact:phone"),
            )
        )
    facilities.sort(key=lambda item: item.distance_km)
    return facilities[:MAX_RESULTS]


class FacilityLookup:
    """Nearest hospitals and clinics from OpenStreetMap via the Overpass API."""

    def __init__(self, client_factory: Callable[[], httpx.AsyncClient] | None = None) -> None:
        self.disable_external = os.getenv("SEHAT_DISABLE_EXTERNAL_WEB", "false").lower() == "true"
        self.timeout = float(os.getenv("SEHAT_WEB_TIMEOUT_SECONDS", "8.0"))
        self._client_factory = client_factory or (lambda: httpx.AsyncClient(timeout=self.timeout))

    async def nearby(
        self,
        *,
        lat: float | None,
        lng: float | None,
        care_level: str = "hospital",
        radius_km: float | None = None,
    ) -> dict[str, Any]:
        if lat is None or lng is None:
            return {
                "hospitals": [],
                "note": "Location not available. Recommend patient search Google Maps for nearest hospital.",
                "fallback_url": maps_search_url(care_level),
            }
        if self.disable_external:
            return self._fallback(care_level, lat, lng, "Map lookups are disabled.")

        radius = min(radius_km if radius_km and radius_km > 0 else DEFAULT_RADIUS_KM, MAX_RADIUS_KM)
        try:
            async with self._client_factory() as client:
                response = await client.post(
                    OVERPASS_URL,
                    data={"data": overpass_query(care_level, lat, lng, radius)},
                )
                response.raise_for_status()
                payload = response.json()
        except Exception as exc:
            logger.warning("overpass lookup failed: %s", exc)
            return self._fallback(care_level, lat, lng, "Could not fetch nearby facilities. Use the link below to search.")

        elements = payload.get("elements") if isinstance(payload, dict) else None
        elements = elements if isinstance(elements, list) else []
        ranked = rank_elements(elements, lat, lng)
        if not ranked:
            return self._fallback(care_level, lat, lng, "No facilities found nearby via map data.")
        return {"hospitals": [item.to_payload() for item in ranked], "total_found": len(elements)}

    def _fallback(self, care_level: str, lat: float, lng: float, note: str) -> dict[str, Any]:
        return {"hospitals": [], "note": note, "fallback_url": maps_search_url(care_level, lat, lng)}
