"""Carrier gateway for multi-carrier quotes, labels and tracking.

Placeholder implementation: answers come from fixed tables until real
carrier integrations are wired in. The async interface matches what a
network-backed gateway will need.
"""

import logging
import random
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from craftsmatch.services.shipping_zones import normalize_country

logger = logging.getLogger(__name__)

PLACEHOLDER_LABEL_URL = "https://placeholder.com/shipping-label.pdf"


@dataclass
class ShippingAddress:
    name: str
    street1: str
    city: str
    postal_code: str
    country: str
    street2: str = ""
    state: str = ""
    phone: str = ""
    email: str = ""

    @property
    def country_code(self) -> str:
        return normalize_country(self.country)


@dataclass
class Parcel:
    """Physical package handed to a carrier (cm / kg)."""
    length: Decimal
    width: Decimal
    height: Decimal
    weight: Decimal


@dataclass
class CarrierRate:
    carrier: str
    service: str
    rate: Decimal
    estimated_days: int
    tracking_available: bool = True

    @property
    def carrier_id(self) -> str:
        return "-".join(f"{self.carrier} {self.service}".lower().split())


@dataclass
class ShippingLabel:
    tracking_number: str
    label_url: str
    carrier: str
    service: str


@dataclass
class TrackingEvent:
    timestamp: datetime
    location: str
    description: str


@dataclass
class TrackingInfo:
    tracking_number: str
    carrier: str
    status: str
    estimated_delivery: str  # ISO date
    current_location: Optional[str] = None
    events: list[TrackingEvent] = field(default_factory=list)


@dataclass(frozen=True)
class _CarrierService:
    carrier: str
    service: str
    domestic_rate: Decimal
    international_rate: Decimal
    domestic_days: int
    international_days: int


_SERVICES: tuple[_CarrierService, ...] = (
    _CarrierService("Standard Post", "Ground", Decimal("12.99"), Decimal("29.99"), 5, 14),
    _CarrierService("Express Shipping", "Priority", Decimal("24.99"), Decimal("49.99"), 2, 7),
    _CarrierService("Premium Courier", "Overnight", Decimal("39.99"), Decimal("89.99"), 1, 3),
)

_DOMESTIC_ONLY_CARRIERS = ("Local Delivery", "Same-Day Courier")

PER_KG_SURCHARGE = Decimal("2")


class CarrierGateway:
    """Multi-carrier rate shopping, labels and tracking."""

    def __init__(self, services: tuple[_CarrierService, ...] = _SERVICES):
        self._services = services

    async def available_carriers(self, origin_country: str, destination_country: str) -> list[str]:
        """Carriers serving a route; domestic routes get local options too."""
        carriers = list(dict.fromkeys(s.carrier for s in self._services))
        if normalize_country(origin_country) == normalize_country(destination_country):
            carriers.extend(_DOMESTIC_ONLY_CARRIERS)
        return carriers

    async def get_rates(
        self,
        from_address: ShippingAddress,
        to_address: ShippingAddress,
        parcel: Parcel,
    ) -> list[CarrierRate]:
        """Quote every carrier service for a parcel, cheapest first."""
        domestic = from_address.country_code == to_address.country_code
        surcharge = parcel.weight * PER_KG_SURCHARGE
        rates = []
        for svc in self._services:
            base = svc.domestic_rate if domestic else svc.international_rate
            rates.append(CarrierRate(
                carrier=svc.carrier,
                service=svc.service,
                rate=(base + surcharge).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
                estimated_days=svc.domestic_days if domestic else svc.international_days,
            ))
        rates.sort(key=lambda r: r.rate)
        return rates

    async def create_label(
        self,
        from_address: ShippingAddress,
        to_address: ShippingAddress,
        parcel: Parcel,
        carrier: str,
        service: str,
    ) -> ShippingLabel:
        tracking_number = (
            f"{carrier[:2].upper()}{str(int(time.time() * 1000))[5:]}{random.randint(0, 999)}"
        )
        logger.info(
            f"Created {carrier}/{service} label {tracking_number} "
            f"{from_address.country_code}->{to_address.country_code} ({parcel.weight}kg)"
        )
        return ShippingLabel(
            tracking_number=tracking_number,
            label_url=PLACEHOLDER_LABEL_URL,
            carrier=carrier,
            service=service,
        )

    async def get_tracking_info(self, tracking_number: str, carrier: str) -> TrackingInfo:
        now = datetime.now(timezone.utc)
        return TrackingInfo(
            tracking_number=tracking_number,
            carrier=carrier,
            status="In Transit",
            estimated_delivery=(now + timedelta(days=5)).date().isoformat(),
            current_location="Distribution Center",
            events=[
                TrackingEvent(now, "Distribution Center", "Package is being processed"),
                TrackingEvent(now - timedelta(days=1), "Origin Facility", "Package received"),
            ],
        )


# Module-level singleton
carrier_gateway = CarrierGateway()
