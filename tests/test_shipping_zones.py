"""Shipping zone and rate table tests."""

import json

import pytest
from decimal import Decimal

from craftsmatch.services.shipping_zones import (
    DEFAULT_CONFIG,
    DeliveryTiming,
    ShippingConfig,
    ShippingRate,
    ShippingZone,
    classify_zone,
    normalize_country,
)


class TestNormalizeCountry:
    def test_alpha2_unchanged(self):
        assert normalize_country("FR") == "FR"

    def test_lowercase(self):
        assert normalize_country("fr") == "FR"

    def test_alpha3(self):
        assert normalize_country("USA") == "US"
        assert normalize_country("CAN") == "CA"
        assert normalize_country("NZL") == "NZ"

    def test_names(self):
        assert normalize_country("Canada") == "CA"
        assert normalize_country("united  kingdom") == "GB"
        assert normalize_country("Mexico") == "MX"

    def test_uk_alias(self):
        assert normalize_country("UK") == "GB"

    def test_unknown_passthrough(self):
        assert normalize_country(" jp ") == "JP"
        assert normalize_country("Atlantis") == "ATLANTIS"


class TestClassifyZone:
    @pytest.mark.parametrize("country", ["US", "FR", "JP", "BR", "XX"])
    def test_same_country_is_domestic(self, country):
        assert classify_zone(country, country) == ShippingZone.DOMESTIC

    def test_north_america(self):
        assert classify_zone("CA", "US") == ShippingZone.INTERNATIONAL_1
        assert classify_zone("US", "GB") == ShippingZone.INTERNATIONAL_1
        assert classify_zone("MX", "FR") == ShippingZone.INTERNATIONAL_1

    def test_europe_and_oceania(self):
        assert classify_zone("FR", "US") == ShippingZone.INTERNATIONAL_2
        assert classify_zone("GB", "US") == ShippingZone.INTERNATIONAL_2
        assert classify_zone("AU", "US") == ShippingZone.INTERNATIONAL_2
        assert classify_zone("NZ", "CA") == ShippingZone.INTERNATIONAL_2

    def test_rest_of_world(self):
        assert classify_zone("JP", "US") == ShippingZone.INTERNATIONAL_3
        assert classify_zone("BR", "US") == ShippingZone.INTERNATIONAL_3

    def test_unknown_country_is_catch_all(self):
        assert classify_zone("ZZ", "US") == ShippingZone.INTERNATIONAL_3

    def test_no_country_in_two_zones(self):
        intl1 = DEFAULT_CONFIG.zones[ShippingZone.INTERNATIONAL_1]
        intl2 = DEFAULT_CONFIG.zones[ShippingZone.INTERNATIONAL_2]
        assert not intl1 & intl2


class TestRateLookup:
    def test_domestic_standard(self):
        rate = DEFAULT_CONFIG.lookup_rate(ShippingZone.DOMESTIC, "standard")
        assert rate == ShippingRate(Decimal("10"), Decimal("2"))

    def test_express_case_insensitive(self):
        rate = DEFAULT_CONFIG.lookup_rate(ShippingZone.INTERNATIONAL_2, "EXPRESS")
        assert rate == ShippingRate(Decimal("55"), Decimal("12"))

    @pytest.mark.parametrize("zone", list(ShippingZone))
    @pytest.mark.parametrize("method", ["overnight", "", "Freight", "standard "])
    def test_unknown_method_falls_back_to_standard(self, zone, method):
        assert DEFAULT_CONFIG.lookup_rate(zone, method) == DEFAULT_CONFIG.lookup_rate(zone, "standard")
        assert (
            DEFAULT_CONFIG.lookup_delivery_timing(zone, method)
            == DEFAULT_CONFIG.lookup_delivery_timing(zone, "standard")
        )

    def test_delivery_timing_table(self):
        assert DEFAULT_CONFIG.lookup_delivery_timing(
            ShippingZone.INTERNATIONAL_1, "express"
        ) == DeliveryTiming(3, 5)
        assert DEFAULT_CONFIG.lookup_delivery_timing(
            ShippingZone.INTERNATIONAL_3, "standard"
        ) == DeliveryTiming(14, 30)

    def test_methods_for_zone(self):
        assert DEFAULT_CONFIG.methods_for(ShippingZone.DOMESTIC) == ["standard", "express"]


class TestDeliveryTiming:
    def test_range_label(self):
        assert DeliveryTiming(3, 5).label == "3-5 days"

    def test_single_day_label(self):
        assert DeliveryTiming(2, 2).label == "2 days"

    def test_rejects_inverted_window(self):
        with pytest.raises(ValueError, match="Invalid delivery window"):
            DeliveryTiming(5, 3)

    def test_rejects_negative(self):
        with pytest.raises(ValueError):
            DeliveryTiming(-1, 3)


class TestShippingConfig:
    def test_rejects_country_in_two_zones(self):
        with pytest.raises(ValueError, match="listed in both"):
            ShippingConfig(zones={
                ShippingZone.INTERNATIONAL_1: frozenset({"US"}),
                ShippingZone.INTERNATIONAL_2: frozenset({"US"}),
            })

    def test_rejects_domestic_country_list(self):
        with pytest.raises(ValueError, match="cannot list countries"):
            ShippingConfig(zones={ShippingZone.DOMESTIC: frozenset({"US"})})

    def test_requires_standard_rate(self):
        rates = dict(DEFAULT_CONFIG.rates)
        rates[ShippingZone.DOMESTIC] = {"express": ShippingRate(Decimal("1"), Decimal("1"))}
        with pytest.raises(ValueError, match="Missing standard rate"):
            ShippingConfig(rates=rates)

    def test_from_dict_partial_override(self):
        cfg = ShippingConfig.from_dict({
            "zones": {"international_1": ["usa", "Canada"], "international_2": ["JPN", "JP"]},
        })
        assert cfg.classify_zone("US", "FR") == ShippingZone.INTERNATIONAL_1
        assert cfg.classify_zone("JP", "US") == ShippingZone.INTERNATIONAL_2
        assert cfg.classify_zone("FR", "US") == ShippingZone.INTERNATIONAL_3
        # rates untouched
        assert cfg.rates == DEFAULT_CONFIG.rates

    def test_from_dict_rates(self):
        rates = {
            zone.value: {"standard": {"base_rate": 1, "per_kg_rate": "0.5"}}
            for zone in ShippingZone
        }
        cfg = ShippingConfig.from_dict({"rates": rates})
        assert cfg.lookup_rate(ShippingZone.DOMESTIC, "express") == ShippingRate(
            Decimal("1"), Decimal("0.5")
        )

    def test_from_dict_malformed(self):
        with pytest.raises(ValueError, match="Malformed"):
            ShippingConfig.from_dict({"rates": {"domestic": {"standard": {"base_rate": 1}}}})

    @pytest.mark.parametrize("data", [
        {"zones": ["US", "CA"]},
        {"rates": "flat"},
        {"delivery_times": [1, 2]},
        ["US"],
        "zones",
        None,
    ])
    def test_from_dict_wrong_shape(self, data):
        with pytest.raises(ValueError, match="Malformed"):
            ShippingConfig.from_dict(data)

    def test_from_dict_method_table_not_an_object(self):
        with pytest.raises(ValueError, match="Malformed"):
            ShippingConfig.from_dict({"rates": {"domestic": ["x"]}})

    def test_from_dict_country_list_as_string(self):
        with pytest.raises(ValueError, match="Malformed"):
            ShippingConfig.from_dict({"zones": {"international_1": "US"}})

    def test_from_dict_unknown_zone(self):
        with pytest.raises(ValueError):
            ShippingConfig.from_dict({"zones": {"moon": ["XX"]}})

    def test_from_file(self, tmp_path):
        path = tmp_path / "rates.json"
        path.write_text(json.dumps({
            "delivery_times": {
                zone.value: {"standard": {"min_days": 1, "max_days": 2}} for zone in ShippingZone
            },
        }))
        cfg = ShippingConfig.from_file(path)
        assert cfg.lookup_delivery_timing(ShippingZone.INTERNATIONAL_3, "express") == DeliveryTiming(1, 2)

    def test_from_file_invalid_json(self, tmp_path):
        path = tmp_path / "rates.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="not valid JSON"):
            ShippingConfig.from_file(path)

    def test_from_file_top_level_list(self, tmp_path):
        path = tmp_path / "rates.json"
        path.write_text(json.dumps(["US", "CA"]))
        with pytest.raises(ValueError, match="Malformed"):
            ShippingConfig.from_file(path)
