"""Carrier gateway tests."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from craftsmatch.services.carriers import (
    PLACEHOLDER_LABEL_URL,
    CarrierGateway,
    CarrierRate,
    Parcel,
    ShippingAddress,
)


def _address(country: str) -> ShippingAddress:
    return ShippingAddress(
        name="Ada Smith",
        street1="1 Workshop Lane",
        city="Springfield",
        postal_code="12345",
        country=country,
    )


PARCEL = Parcel(
    length=Decimal("30"), width=Decimal("20"), height=Decimal("10"), weight=Decimal("1.5"),
)


class TestAvailableCarriers:
    @pytest.mark.asyncio
    async def test_international_route(self):
        carriers = await CarrierGateway().available_carriers("US", "FR")
        assert carriers == ["Standard Post", "Express Shipping", "Premium Courier"]

    @pytest.mark.asyncio
    async def test_domestic_route_adds_local_options(self):
        carriers = await CarrierGateway().available_carriers("US", "USA")
        assert "Local Delivery" in carriers
        assert "Same-Day Courier" in carriers
        assert len(carriers) == 5


class TestCarrierRates:
    @pytest.mark.asyncio
    async def test_domestic_rates(self):
        rates = await CarrierGateway().get_rates(_address("US"), _address("US"), PARCEL)
        assert [r.rate for r in rates] == [Decimal("15.99"), Decimal("27.99"), Decimal("42.99")]
        assert [r.estimated_days for r in rates] == [5, 2, 1]

    @pytest.mark.asyncio
    async def test_international_rates(self):
        rates = await CarrierGateway().get_rates(_address("US"), _address("GB"), PARCEL)
        assert [r.rate for r in rates] == [Decimal("32.99"), Decimal("52.99"), Decimal("92.99")]
        assert [r.estimated_days for r in rates] == [14, 7, 3]

    @pytest.mark.asyncio
    async def test_sorted_by_cost_with_tracking(self):
        rates = await CarrierGateway().get_rates(_address("CA"), _address("JP"), PARCEL)
        assert [r.rate for r in rates] == sorted(r.rate for r in rates)
        assert all(r.tracking_available for r in rates)

    def test_carrier_id(self):
        rate = CarrierRate("Express Shipping", "Priority", Decimal("1"), 2)
        assert rate.carrier_id == "express-shipping-priority"


class TestLabelsAndTracking:
    @pytest.mark.asyncio
    async def test_create_label(self):
        label = await CarrierGateway().create_label(
            _address("US"), _address("DE"), PARCEL, "Express Shipping", "Priority",
        )
        assert label.tracking_number.startswith("EX")
        assert label.tracking_number[2:].isdigit()
        assert label.label_url == PLACEHOLDER_LABEL_URL
        assert label.carrier == "Express Shipping"
        assert label.service == "Priority"

    @pytest.mark.asyncio
    async def test_tracking_info(self):
        info = await CarrierGateway().get_tracking_info("EX123", "Express Shipping")
        assert info.status == "In Transit"
        assert info.current_location == "Distribution Center"
        assert len(info.events) == 2
        assert info.events[0].timestamp > info.events[1].timestamp
        eta = date.fromisoformat(info.estimated_delivery)
        assert eta >= date.today() + timedelta(days=4)
