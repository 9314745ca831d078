"""Shipping cost and delivery time estimation for marketplace listings.

Pure functions of their inputs: no I/O and no shared mutable state.
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from craftsmatch.services.shipping_zones import (
    DEFAULT_CONFIG,
    DeliveryTiming,
    ShippingConfig,
    ShippingRate,
    ShippingZone,
    normalize_country,
)

logger = logging.getLogger(__name__)

VOLUMETRIC_DIVISOR = Decimal("5000")  # cm³ per kg


def _to_decimal(value) -> Decimal:
    """Decimal from a Decimal, int, float or numeric string."""
    return value if isinstance(value, Decimal) else Decimal(str(value))


class ShippingUnavailableError(ValueError):
    """Raised when a product cannot be shipped to the requested country."""

    def __init__(self, destination_country: str):
        self.destination_country = destination_country
        super().__init__(
            f"Shipping to {destination_country} is not available for this product"
        )


@dataclass(frozen=True)
class PackageDimensions:
    """Package size in centimeters."""
    length: Decimal
    width: Decimal
    height: Decimal

    def __post_init__(self):
        for name in ("length", "width", "height"):
            object.__setattr__(self, name, _to_decimal(getattr(self, name)))

    @property
    def volumetric_weight(self) -> Decimal:
        return calculate_volumetric_weight(self.length, self.width, self.height)


@dataclass
class ProductShippingDetails:
    """Per-product shipping attributes set by the seller."""
    weight: Decimal  # kg, per unit
    dimensions: Optional[PackageDimensions] = None
    restricted_countries: frozenset[str] = field(default_factory=frozenset)
    free_shipping_threshold: Optional[Decimal] = None
    custom_shipping_rates: dict[str, Decimal] = field(default_factory=dict)

    def __post_init__(self):
        self.weight = _to_decimal(self.weight)
        if self.free_shipping_threshold is not None:
            self.free_shipping_threshold = _to_decimal(self.free_shipping_threshold)
        # Stored normalized so lookups match normalized destinations
        self.restricted_countries = frozenset(
            normalize_country(c) for c in self.restricted_countries
        )
        self.custom_shipping_rates = {
            normalize_country(c): _to_decimal(rate) for c, rate in self.custom_shipping_rates.items()
        }

    def ships_to(self, country: str) -> bool:
        return normalize_country(country) not in self.restricted_countries


def calculate_volumetric_weight(length: Decimal, width: Decimal, height: Decimal) -> Decimal:
    """Dimensional weight in kg: L × W × H (cm) / 5000."""
    return (_to_decimal(length) * _to_decimal(width) * _to_decimal(height)) / VOLUMETRIC_DIVISOR


def _round_currency(amount: Decimal) -> Decimal:
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class ShippingCalculator:
    """Zone-based shipping calculator over an injected rate configuration."""

    def __init__(self, config: Optional[ShippingConfig] = None):
        self.config = DEFAULT_CONFIG if config is None else config

    def classify_zone(self, destination_country: str, origin_country: str) -> ShippingZone:
        return self.config.classify_zone(
            normalize_country(destination_country),
            normalize_country(origin_country),
        )

    def lookup_rate(self, zone: ShippingZone, method: str) -> ShippingRate:
        return self.config.lookup_rate(zone, method)

    def lookup_delivery_timing(self, zone: ShippingZone, method: str) -> DeliveryTiming:
        return self.config.lookup_delivery_timing(zone, method)

    def calculate_shipping_cost(
        self,
        product: ProductShippingDetails,
        destination_country: str,
        origin_country: str,
        shipping_method: str = "standard",
        order_value: Decimal = Decimal("0"),
        quantity: int = 1,
    ) -> Decimal:
        """Shipping cost for ``quantity`` units of a product.

        Restricted destinations raise ``ShippingUnavailableError``. A custom
        per-country rate wins over everything else, then the free-shipping
        threshold, then the zone rate applied to the chargeable weight (the
        greater of actual and volumetric weight).
        """
        destination = normalize_country(destination_country)

        if destination in product.restricted_countries:
            logger.info(f"Refused shipping quote: {destination} is restricted for product")
            raise ShippingUnavailableError(destination)

        custom_rate = product.custom_shipping_rates.get(destination)
        if custom_rate:
            return _round_currency(custom_rate * quantity)

        threshold = product.free_shipping_threshold
        if threshold and _to_decimal(order_value) >= threshold:
            return Decimal("0.00")

        zone = self.classify_zone(destination, origin_country)
        rate = self.lookup_rate(zone, shipping_method)

        total_weight = product.weight * quantity
        volumetric_weight = Decimal("0")
        if product.dimensions is not None:
            volumetric_weight = product.dimensions.volumetric_weight * quantity

        chargeable_weight = max(total_weight, volumetric_weight)
        cost = rate.base_rate + rate.per_kg_rate * chargeable_weight

        logger.debug(
            f"Shipping {destination} zone={zone.value} method={shipping_method} "
            f"chargeable={chargeable_weight}kg cost={cost}"
        )
        return _round_currency(cost)

    def estimate_delivery_time(
        self,
        destination_country: str,
        origin_country: str,
        method: str = "standard",
    ) -> DeliveryTiming:
        zone = self.classify_zone(destination_country, origin_country)
        return self.lookup_delivery_timing(zone, method)

    def get_available_shipping_methods(
        self,
        destination_country: str,
        origin_country: str,
        product: ProductShippingDetails,
    ) -> list[str]:
        """Methods offered for a destination; empty when the product can't go there."""
        if not product.ships_to(destination_country):
            return []
        zone = self.classify_zone(destination_country, origin_country)
        return self.config.methods_for(zone)

    calculate_volumetric_weight = staticmethod(calculate_volumetric_weight)


# Module-level default calculator
shipping_calculator = ShippingCalculator()


def calculate_shipping_cost(
    product: ProductShippingDetails,
    destination_country: str,
    origin_country: str,
    shipping_method: str = "standard",
    order_value: Decimal = Decimal("0"),
    quantity: int = 1,
) -> Decimal:
    return shipping_calculator.calculate_shipping_cost(
        product,
        destination_country,
        origin_country,
        shipping_method=shipping_method,
        order_value=order_value,
        quantity=quantity,
    )


def estimate_delivery_time(
    destination_country: str,
    origin_country: str,
    method: str = "standard",
) -> DeliveryTiming:
    return shipping_calculator.estimate_delivery_time(destination_country, origin_country, method)


def get_available_shipping_methods(
    destination_country: str,
    origin_country: str,
    product: ProductShippingDetails,
) -> list[str]:
    return shipping_calculator.get_available_shipping_methods(
        destination_country, origin_country, product
    )
