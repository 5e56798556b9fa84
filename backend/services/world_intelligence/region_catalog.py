"""Static geographic registries used for hotspot proximity scoring.

Three registries, each entry mapped to the country codes it concerns:

* point hotspots (cities, bases, flashpoints)
* conflict zones (centres of active theatres)
* strategic waterways (straits and canals)

Also carries the climate-zone table used to attribute climate anomalies.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .catalog_loader import data_root

logger = logging.getLogger(__name__)

_REGION_FILENAME = "cii_regions.json"

_DEFAULT: dict[str, Any] = {
    "version": 0,
    "updated_at": None,
    "hotspots": [],
    "conflict_zones": [],
    "waterways": [],
    "climate_zones": {},
}


@dataclass(frozen=True)
class RegionAnchor:
    id: str
    name: str
    latitude: float
    longitude: float
    countries: tuple[str, ...] = ()


def _parse_anchor(row: dict[str, Any]) -> RegionAnchor:
    countries = tuple(
        str(code).strip().upper() for code in (row.get("countries") or []) if str(code).strip()
    )
    return RegionAnchor(
        id=str(row["id"]),
        name=str(row.get("name") or row["id"]),
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        countries=countries,
    )


class RegionCatalog:
    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path) if path is not None else None
        self._loaded = False
        self._hotspots: list[RegionAnchor] = []
        self._conflict_zones: list[RegionAnchor] = []
        self._waterways: list[RegionAnchor] = []
        self._climate_zones: dict[str, tuple[str, ...]] = {}

    @property
    def path(self) -> Path:
        return self._path if self._path is not None else data_root() / _REGION_FILENAME

    def _read_payload(self) -> dict[str, Any]:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Failed to load region catalog %s: %s", self.path, exc)
            return dict(_DEFAULT)
        if not isinstance(payload, dict):
            logger.error("Region catalog %s root must be an object", self.path)
            return dict(_DEFAULT)
        return payload

    @staticmethod
    def _parse_anchors(rows: Any, kind: str) -> list[RegionAnchor]:
        anchors: list[RegionAnchor] = []
        for row in rows or []:
            try:
                anchors.append(_parse_anchor(row))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid %s row %s: %s", kind, row, exc)
        return anchors

    def _load(self) -> None:
        if self._loaded:
            return

        payload = self._read_payload()
        self._hotspots = self._parse_anchors(payload.get("hotspots"), "hotspot")
        self._conflict_zones = self._parse_anchors(payload.get("conflict_zones"), "conflict zone")
        self._waterways = self._parse_anchors(payload.get("waterways"), "waterway")

        climate: dict[str, tuple[str, ...]] = {}
        raw_climate = payload.get("climate_zones") or {}
        if isinstance(raw_climate, dict):
            for zone, codes in raw_climate.items():
                if not isinstance(codes, list):
                    logger.warning("Skipping invalid climate zone %s: %s", zone, codes)
                    continue
                climate[str(zone)] = tuple(str(c).strip().upper() for c in codes if str(c).strip())
        self._climate_zones = climate
        self._loaded = True

    def hotspots(self) -> list[RegionAnchor]:
        self._load()
        return list(self._hotspots)

    def conflict_zones(self) -> list[RegionAnchor]:
        self._load()
        return list(self._conflict_zones)

    def waterways(self) -> list[RegionAnchor]:
        self._load()
        return list(self._waterways)

    def climate_zone_countries(self, zone: str) -> tuple[str, ...]:
        self._load()
        return self._climate_zones.get(str(zone), ())


region_catalog = RegionCatalog()
