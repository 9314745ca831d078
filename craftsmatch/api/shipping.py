"""Shipping estimation and carrier API."""

import logging
from decimal import Decimal
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Query

from craftsmatch.config import get_settings
from craftsmatch.schemas import (
    CarrierRateOut,
    CarrierRatesRequest,
    DeliveryTimeOut,
    LabelOut,
    LabelRequest,
    ShippingMethodsOut,
    ShippingMethodsRequest,
    ShippingQuoteOut,
    ShippingQuoteRequest,
    TrackingEventOut,
    TrackingOut,
    VolumetricWeightOut,
    ZoneOut,
)
from craftsmatch.services.carriers import CarrierGateway, carrier_gateway
from craftsmatch.services.shipping import (
    ShippingCalculator,
    ShippingUnavailableError,
    calculate_volumetric_weight,
)
from craftsmatch.services.shipping_zones import ShippingConfig, normalize_country

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shipping", tags=["shipping"])
settings = get_settings()


@lru_cache
def get_shipping_calculator() -> ShippingCalculator:
    """Calculator built from the configured rate file, or the built-in tables."""
    if settings.shipping_rates_file:
        logger.info(f"Loading shipping rates from {settings.shipping_rates_file}")
        return ShippingCalculator(ShippingConfig.from_file(settings.shipping_rates_file))
    return ShippingCalculator()


def get_carrier_gateway() -> CarrierGateway:
    return carrier_gateway


def _origin(origin_country: str | None) -> str:
    return normalize_country(origin_country or settings.default_origin_country)


@router.post("/quote", response_model=ShippingQuoteOut)
async def quote_shipping(
    data: ShippingQuoteRequest,
    calc: ShippingCalculator = Depends(get_shipping_calculator),
):
    origin = _origin(data.origin_country)
    try:
        cost = calc.calculate_shipping_cost(
            data.product.to_details(),
            data.destination_country,
            origin,
            shipping_method=data.shipping_method,
            order_value=data.order_value,
            quantity=data.quantity,
        )
    except ShippingUnavailableError as e:
        raise HTTPException(400, str(e))

    zone = calc.classify_zone(data.destination_country, origin)
    timing = calc.estimate_delivery_time(data.destination_country, origin, data.shipping_method)
    return ShippingQuoteOut(
        cost=cost,
        currency=settings.currency,
        zone=zone.value,
        method=data.shipping_method.lower(),
        is_free=cost == 0,
        delivery=DeliveryTimeOut(
            min_days=timing.min_days, max_days=timing.max_days, label=timing.label,
        ),
    )


@router.get("/estimate", response_model=DeliveryTimeOut)
async def estimate_delivery(
    destination: str = Query(..., min_length=2),
    origin: str | None = None,
    method: str = "standard",
    calc: ShippingCalculator = Depends(get_shipping_calculator),
):
    timing = calc.estimate_delivery_time(destination, _origin(origin), method)
    return DeliveryTimeOut(min_days=timing.min_days, max_days=timing.max_days, label=timing.label)


@router.post("/methods", response_model=ShippingMethodsOut)
async def list_methods(
    data: ShippingMethodsRequest,
    calc: ShippingCalculator = Depends(get_shipping_calculator),
):
    origin = _origin(data.origin_country)
    methods = calc.get_available_shipping_methods(
        data.destination_country, origin, data.product.to_details()
    )
    return ShippingMethodsOut(
        destination_country=normalize_country(data.destination_country),
        zone=calc.classify_zone(data.destination_country, origin).value,
        methods=methods,
    )


@router.get("/volumetric-weight", response_model=VolumetricWeightOut)
async def volumetric_weight(
    length: Decimal = Query(..., ge=0),
    width: Decimal = Query(..., ge=0),
    height: Decimal = Query(..., ge=0),
):
    return VolumetricWeightOut(
        length=length,
        width=width,
        height=height,
        volumetric_weight=calculate_volumetric_weight(length, width, height),
    )


@router.get("/zones/{country}", response_model=ZoneOut)
async def get_zone(
    country: str,
    origin: str | None = None,
    calc: ShippingCalculator = Depends(get_shipping_calculator),
):
    origin_code = _origin(origin)
    return ZoneOut(
        destination_country=normalize_country(country),
        origin_country=origin_code,
        zone=calc.classify_zone(country, origin_code).value,
    )


# ── Carriers ────────────────────────────────────────────

@router.get("/carriers", response_model=list[str])
async def list_carriers(
    destination: str = Query(..., min_length=2),
    origin: str | None = None,
    gateway: CarrierGateway = Depends(get_carrier_gateway),
):
    return await gateway.available_carriers(_origin(origin), destination)


@router.post("/carrier-rates", response_model=list[CarrierRateOut])
async def carrier_rates(
    data: CarrierRatesRequest,
    gateway: CarrierGateway = Depends(get_carrier_gateway),
):
    rates = await gateway.get_rates(
        data.from_address.to_address(), data.to_address.to_address(), data.parcel.to_parcel()
    )
    return [
        CarrierRateOut(
            carrier_id=r.carrier_id,
            carrier=r.carrier,
            service=r.service,
            rate=r.rate,
            estimated_days=r.estimated_days,
            tracking_available=r.tracking_available,
        )
        for r in rates
    ]


@router.post("/labels", response_model=LabelOut, status_code=201)
async def create_label(
    data: LabelRequest,
    gateway: CarrierGateway = Depends(get_carrier_gateway),
):
    label = await gateway.create_label(
        data.from_address.to_address(),
        data.to_address.to_address(),
        data.parcel.to_parcel(),
        data.carrier,
        data.service,
    )
    return LabelOut(
        tracking_number=label.tracking_number,
        label_url=label.label_url,
        carrier=label.carrier,
        service=label.service,
    )


@router.get("/tracking/{tracking_number}", response_model=TrackingOut)
async def track_shipment(
    tracking_number: str,
    carrier: str = Query(..., min_length=1),
    gateway: CarrierGateway = Depends(get_carrier_gateway),
):
    info = await gateway.get_tracking_info(tracking_number, carrier)
    return TrackingOut(
        tracking_number=info.tracking_number,
        carrier=info.carrier,
        status=info.status,
        estimated_delivery=info.estimated_delivery,
        current_location=info.current_location,
        events=[
            TrackingEventOut(timestamp=e.timestamp, location=e.location, description=e.description)
            for e in info.events
        ],
    )
