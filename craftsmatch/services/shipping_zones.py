"""Shipping zones, rate tables and delivery timings.

Zones are derived per request from the destination and origin countries.
Rates and timings live in a single immutable ``ShippingConfig`` that the
calculator receives at construction time.
"""

import json
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional


DEFAULT_METHOD = "standard"


class ShippingZone(str, Enum):
    """Destination zones relative to the seller's country."""
    DOMESTIC = "domestic"
    INTERNATIONAL_1 = "international_1"  # North America
    INTERNATIONAL_2 = "international_2"  # Europe, Oceania
    INTERNATIONAL_3 = "international_3"  # Rest of world


@dataclass(frozen=True)
class ShippingRate:
    """Flat base charge plus a per-kilogram charge."""
    base_rate: Decimal
    per_kg_rate: Decimal


@dataclass(frozen=True)
class DeliveryTiming:
    min_days: int
    max_days: int

    def __post_init__(self):
        if self.min_days < 0 or self.max_days < self.min_days:
            raise ValueError(
                f"Invalid delivery window {self.min_days}-{self.max_days} days"
            )

    @property
    def label(self) -> str:
        if self.min_days == self.max_days:
            return f"{self.min_days} days"
        return f"{self.min_days}-{self.max_days} days"


# ── Country codes ───────────────────────────────────────

# Alpha-3 codes and common names seen in seller/buyer input
_COUNTRY_ALIASES: dict[str, str] = {
    "USA": "US", "UNITED STATES": "US", "UNITED STATES OF AMERICA": "US",
    "CAN": "CA", "CANADA": "CA",
    "MEX": "MX", "MEXICO": "MX",
    "UK": "GB", "GBR": "GB", "UNITED KINGDOM": "GB", "GREAT BRITAIN": "GB",
    "DEU": "DE", "GERMANY": "DE",
    "FRA": "FR", "FRANCE": "FR",
    "ITA": "IT", "ITALY": "IT",
    "ESP": "ES", "SPAIN": "ES",
    "PRT": "PT", "PORTUGAL": "PT",
    "NLD": "NL", "NETHERLANDS": "NL",
    "BEL": "BE", "BELGIUM": "BE",
    "LUX": "LU", "LUXEMBOURG": "LU",
    "CHE": "CH", "SWITZERLAND": "CH",
    "AUT": "AT", "AUSTRIA": "AT",
    "DNK": "DK", "DENMARK": "DK",
    "SWE": "SE", "SWEDEN": "SE",
    "NOR": "NO", "NORWAY": "NO",
    "FIN": "FI", "FINLAND": "FI",
    "IRL": "IE", "IRELAND": "IE",
    "ISL": "IS", "ICELAND": "IS",
    "POL": "PL", "POLAND": "PL",
    "CZE": "CZ", "CZECHIA": "CZ", "CZECH REPUBLIC": "CZ",
    "AUS": "AU", "AUSTRALIA": "AU",
    "NZL": "NZ", "NEW ZEALAND": "NZ",
}


def normalize_country(code: str) -> str:
    """Map a country code or name to ISO 3166-1 alpha-2.

    Unknown values come back upper-cased and otherwise untouched, which
    classifies them into the catch-all zone.
    """
    key = " ".join(code.split()).upper()
    return _COUNTRY_ALIASES.get(key, key)


# ── Default tables ──────────────────────────────────────

_DEFAULT_ZONES: dict[ShippingZone, frozenset[str]] = {
    ShippingZone.INTERNATIONAL_1: frozenset({"US", "CA", "MX"}),
    ShippingZone.INTERNATIONAL_2: frozenset({
        # Europe
        "GB", "DE", "FR", "IT", "ES", "PT", "NL", "BE", "LU", "CH",
        "AT", "DK", "SE", "NO", "FI", "IE", "IS", "PL", "CZ",
        # Oceania
        "AU", "NZ",
    }),
}

_DEFAULT_RATES: dict[ShippingZone, dict[str, ShippingRate]] = {
    ShippingZone.DOMESTIC: {
        "standard": ShippingRate(Decimal("10"), Decimal("2")),
        "express": ShippingRate(Decimal("25"), Decimal("4")),
    },
    ShippingZone.INTERNATIONAL_1: {
        "standard": ShippingRate(Decimal("20"), Decimal("5")),
        "express": ShippingRate(Decimal("40"), Decimal("8")),
    },
    ShippingZone.INTERNATIONAL_2: {
        "standard": ShippingRate(Decimal("30"), Decimal("7")),
        "express": ShippingRate(Decimal("55"), Decimal("12")),
    },
    ShippingZone.INTERNATIONAL_3: {
        "standard": ShippingRate(Decimal("40"), Decimal("10")),
        "express": ShippingRate(Decimal("75"), Decimal("15")),
    },
}

_DEFAULT_DELIVERY_TIMES: dict[ShippingZone, dict[str, DeliveryTiming]] = {
    ShippingZone.DOMESTIC: {
        "standard": DeliveryTiming(3, 7),
        "express": DeliveryTiming(1, 3),
    },
    ShippingZone.INTERNATIONAL_1: {
        "standard": DeliveryTiming(7, 14),
        "express": DeliveryTiming(3, 5),
    },
    ShippingZone.INTERNATIONAL_2: {
        "standard": DeliveryTiming(10, 21),
        "express": DeliveryTiming(4, 7),
    },
    ShippingZone.INTERNATIONAL_3: {
        "standard": DeliveryTiming(14, 30),
        "express": DeliveryTiming(5, 10),
    },
}


@dataclass(frozen=True)
class ShippingConfig:
    """Zone membership plus rate and delivery tables, keyed by zone then method.

    Tables are copied into read-only mappings on construction, so a config
    (including ``DEFAULT_CONFIG``) cannot be changed after it is built.
    """
    zones: Mapping[ShippingZone, frozenset[str]] = field(
        default_factory=lambda: _DEFAULT_ZONES
    )
    rates: Mapping[ShippingZone, Mapping[str, ShippingRate]] = field(
        default_factory=lambda: _DEFAULT_RATES
    )
    delivery_times: Mapping[ShippingZone, Mapping[str, DeliveryTiming]] = field(
        default_factory=lambda: _DEFAULT_DELIVERY_TIMES
    )

    def __post_init__(self):
        object.__setattr__(self, "zones", MappingProxyType(
            {zone: frozenset(countries) for zone, countries in self.zones.items()}
        ))
        object.__setattr__(self, "rates", MappingProxyType(
            {zone: MappingProxyType(dict(by_method)) for zone, by_method in self.rates.items()}
        ))
        object.__setattr__(self, "delivery_times", MappingProxyType(
            {zone: MappingProxyType(dict(by_method))
             for zone, by_method in self.delivery_times.items()}
        ))

        seen: dict[str, ShippingZone] = {}
        for zone, countries in self.zones.items():
            if zone in (ShippingZone.DOMESTIC, ShippingZone.INTERNATIONAL_3):
                raise ValueError(f"Zone {zone.value} cannot list countries")
            for country in countries:
                if country in seen:
                    raise ValueError(
                        f"Country {country} listed in both {seen[country].value} and {zone.value}"
                    )
                seen[country] = zone
        for zone in ShippingZone:
            if DEFAULT_METHOD not in self.rates.get(zone, {}):
                raise ValueError(f"Missing {DEFAULT_METHOD} rate for zone {zone.value}")
            if DEFAULT_METHOD not in self.delivery_times.get(zone, {}):
                raise ValueError(f"Missing {DEFAULT_METHOD} delivery time for zone {zone.value}")

    def classify_zone(self, destination_country: str, origin_country: str) -> ShippingZone:
        """Zone for a shipment; countries outside every list are international_3."""
        if destination_country == origin_country:
            return ShippingZone.DOMESTIC
        for zone in (ShippingZone.INTERNATIONAL_1, ShippingZone.INTERNATIONAL_2):
            if destination_country in self.zones.get(zone, ()):
                return zone
        return ShippingZone.INTERNATIONAL_3

    def lookup_rate(self, zone: ShippingZone, method: str) -> ShippingRate:
        """Rate for a zone and method; unknown methods fall back to standard."""
        by_method = self.rates[zone]
        return by_method.get(method.lower(), by_method[DEFAULT_METHOD])

    def lookup_delivery_timing(self, zone: ShippingZone, method: str) -> DeliveryTiming:
        by_method = self.delivery_times[zone]
        return by_method.get(method.lower(), by_method[DEFAULT_METHOD])

    def methods_for(self, zone: ShippingZone) -> list[str]:
        return list(self.rates[zone].keys())

    @classmethod
    def from_dict(cls, data: dict) -> "ShippingConfig":
        """Build a config from plain JSON-style data.

        Expected shape::

            {
              "zones": {"international_1": ["US", "CA"], ...},
              "rates": {"domestic": {"standard": {"base_rate": 10, "per_kg_rate": 2}}, ...},
              "delivery_times": {"domestic": {"standard": {"min_days": 3, "max_days": 7}}, ...}
            }

        Missing sections keep the defaults.
        """
        if not isinstance(data, dict):
            raise ValueError(
                f"Malformed shipping configuration: expected an object, got {type(data).__name__}"
            )
        for section in ("zones", "rates", "delivery_times"):
            if section in data and not isinstance(data[section], dict):
                raise ValueError(
                    f"Malformed shipping configuration: '{section}' must be an object"
                )

        try:
            zones = _DEFAULT_ZONES
            if "zones" in data:
                zones = {}
                for name, countries in data["zones"].items():
                    if isinstance(countries, str):
                        raise TypeError(f"countries for {name} must be a list")
                    zones[ShippingZone(name)] = frozenset(normalize_country(c) for c in countries)

            rates = _DEFAULT_RATES
            if "rates" in data:
                rates = {
                    ShippingZone(name): {
                        method.lower(): ShippingRate(
                            base_rate=Decimal(str(r["base_rate"])),
                            per_kg_rate=Decimal(str(r["per_kg_rate"])),
                        )
                        for method, r in methods.items()
                    }
                    for name, methods in data["rates"].items()
                }

            delivery_times = _DEFAULT_DELIVERY_TIMES
            if "delivery_times" in data:
                delivery_times = {
                    ShippingZone(name): {
                        method.lower(): DeliveryTiming(int(t["min_days"]), int(t["max_days"]))
                        for method, t in methods.items()
                    }
                    for name, methods in data["delivery_times"].items()
                }
        except (KeyError, TypeError, AttributeError, ArithmeticError) as e:
            raise ValueError(f"Malformed shipping configuration: {e!r}") from e

        return cls(zones=zones, rates=rates, delivery_times=delivery_times)

    @classmethod
    def from_file(cls, path: str | Path) -> "ShippingConfig":
        raw = Path(path).read_text(encoding="utf-8")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Shipping configuration {path} is not valid JSON: {e}") from e
        return cls.from_dict(data)


DEFAULT_CONFIG = ShippingConfig()


def classify_zone(
    destination_country: str,
    origin_country: str,
    config: Optional[ShippingConfig] = None,
) -> ShippingZone:
    return (config or DEFAULT_CONFIG).classify_zone(destination_country, origin_country)
