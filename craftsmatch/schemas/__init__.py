"""Pydantic schemas for the shipping API."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from craftsmatch.services.carriers import Parcel, ShippingAddress
from craftsmatch.services.shipping import PackageDimensions, ProductShippingDetails


# ── Shipping estimation ─────────────────────────────────
class DimensionsIn(BaseModel):
    length: Decimal = Field(ge=0)
    width: Decimal = Field(ge=0)
    height: Decimal = Field(ge=0)


class ProductShippingIn(BaseModel):
    weight: Decimal = Field(ge=0, description="Unit weight in kg")
    dimensions: Optional[DimensionsIn] = None
    restricted_countries: list[str] = Field(default_factory=list)
    free_shipping_threshold: Optional[Decimal] = Field(default=None, ge=0)
    custom_shipping_rates: dict[str, Decimal] = Field(default_factory=dict)

    def to_details(self) -> ProductShippingDetails:
        dims = None
        if self.dimensions is not None:
            dims = PackageDimensions(
                length=self.dimensions.length,
                width=self.dimensions.width,
                height=self.dimensions.height,
            )
        return ProductShippingDetails(
            weight=self.weight,
            dimensions=dims,
            restricted_countries=frozenset(self.restricted_countries),
            free_shipping_threshold=self.free_shipping_threshold,
            custom_shipping_rates=dict(self.custom_shipping_rates),
        )


class ShippingQuoteRequest(BaseModel):
    product: ProductShippingIn
    destination_country: str = Field(min_length=2)
    origin_country: Optional[str] = None
    shipping_method: str = "standard"
    order_value: Decimal = Field(default=Decimal("0"), ge=0)
    quantity: int = Field(default=1, ge=1)


class DeliveryTimeOut(BaseModel):
    min_days: int
    max_days: int
    label: str


class ShippingQuoteOut(BaseModel):
    cost: Decimal
    currency: str
    zone: str
    method: str
    is_free: bool
    delivery: DeliveryTimeOut


class ShippingMethodsRequest(BaseModel):
    product: ProductShippingIn
    destination_country: str = Field(min_length=2)
    origin_country: Optional[str] = None


class ShippingMethodsOut(BaseModel):
    destination_country: str
    zone: str
    methods: list[str]


class ZoneOut(BaseModel):
    destination_country: str
    origin_country: str
    zone: str


class VolumetricWeightOut(BaseModel):
    length: Decimal
    width: Decimal
    height: Decimal
    volumetric_weight: Decimal


# ── Carriers ────────────────────────────────────────────
class AddressIn(BaseModel):
    name: str
    street1: str
    street2: str = ""
    city: str
    state: str = ""
    postal_code: str
    country: str = Field(min_length=2)
    phone: str = ""
    email: str = ""

    def to_address(self) -> ShippingAddress:
        return ShippingAddress(**self.model_dump())


class ParcelIn(BaseModel):
    length: Decimal = Field(ge=0)
    width: Decimal = Field(ge=0)
    height: Decimal = Field(ge=0)
    weight: Decimal = Field(ge=0)

    def to_parcel(self) -> Parcel:
        return Parcel(**self.model_dump())


class CarrierRatesRequest(BaseModel):
    from_address: AddressIn
    to_address: AddressIn
    parcel: ParcelIn


class CarrierRateOut(BaseModel):
    carrier_id: str
    carrier: str
    service: str
    rate: Decimal
    estimated_days: int
    tracking_available: bool


class LabelRequest(CarrierRatesRequest):
    carrier: str = Field(min_length=2)
    service: str


class LabelOut(BaseModel):
    tracking_number: str
    label_url: str
    carrier: str
    service: str


class TrackingEventOut(BaseModel):
    timestamp: datetime
    location: str
    description: str


class TrackingOut(BaseModel):
    tracking_number: str
    carrier: str
    status: str
    estimated_delivery: str
    current_location: Optional[str] = None
    events: list[TrackingEventOut] = Field(default_factory=list)
