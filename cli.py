"""CraftsMatch shipping CLI.

Usage:
    python -m cli shipping quote --weight 2 --country FR
    python -m cli shipping quote --weight 1 --dims 50 40 30 --country US --method express
    python -m cli shipping quote --weight 1 --country DE --restricted DE
    python -m cli shipping estimate --country CA --origin US --method express
    python -m cli shipping methods --country GB
    python -m cli shipping volumetric 50 40 30
    python -m cli shipping zone --country USA --origin CA
    python -m cli carriers list --country US
    python -m cli carriers rates --from US --to FR --weight 1.5 --dims 30 20 10
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from decimal import Decimal

from craftsmatch.config import configure_logging, get_settings
from craftsmatch.services.carriers import CarrierGateway, Parcel, ShippingAddress
from craftsmatch.services.shipping import (
    PackageDimensions,
    ProductShippingDetails,
    ShippingCalculator,
    ShippingUnavailableError,
    calculate_volumetric_weight,
)
from craftsmatch.services.shipping_zones import ShippingConfig


def _decimal(value: str) -> Decimal:
    try:
        d = Decimal(value)
    except ArithmeticError:
        raise argparse.ArgumentTypeError(f"not a number: {value}")
    if not d.is_finite():
        raise argparse.ArgumentTypeError(f"not a finite number: {value}")
    if d < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value}")
    return d


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="craftsmatch",
        description="CraftsMatch shipping CLI",
    )
    parser.add_argument("--rates-file", help="JSON file overriding the built-in rate tables")
    sub = parser.add_subparsers(dest="command", help="Top-level command")

    # ── Shipping ─────────────────────────────────────────
    ship_parser = sub.add_parser("shipping", help="Shipping estimates")
    ship_sub = ship_parser.add_subparsers(dest="action")

    quote = ship_sub.add_parser("quote", help="Estimate shipping cost")
    quote.add_argument("--weight", type=_decimal, required=True, help="Unit weight in kg")
    quote.add_argument("--dims", type=_decimal, nargs=3, metavar=("L", "W", "H"),
                       help="Package dimensions in cm")
    quote.add_argument("--country", required=True, help="Destination country")
    quote.add_argument("--origin", help="Seller country (default from settings)")
    quote.add_argument("--method", default="standard", help="standard or express")
    quote.add_argument("--quantity", type=int, default=1, help="Units shipped")
    quote.add_argument("--order-value", type=_decimal, default=Decimal("0"), help="Order value")
    quote.add_argument("--free-threshold", type=_decimal, help="Free shipping threshold")
    quote.add_argument("--restricted", nargs="*", default=[], help="Countries not shipped to")
    quote.add_argument("--custom-rate", nargs=2, action="append", default=[],
                       metavar=("COUNTRY", "RATE"), help="Flat per-unit rate for a country")

    estimate = ship_sub.add_parser("estimate", help="Estimate delivery window")
    estimate.add_argument("--country", required=True, help="Destination country")
    estimate.add_argument("--origin", help="Seller country")
    estimate.add_argument("--method", default="standard", help="standard or express")

    methods = ship_sub.add_parser("methods", help="List shipping methods for a destination")
    methods.add_argument("--country", required=True, help="Destination country")
    methods.add_argument("--origin", help="Seller country")
    methods.add_argument("--restricted", nargs="*", default=[], help="Countries not shipped to")

    volumetric = ship_sub.add_parser("volumetric", help="Volumetric weight from dimensions")
    volumetric.add_argument("dims", type=_decimal, nargs=3, metavar=("L", "W", "H"))

    zone = ship_sub.add_parser("zone", help="Shipping zone for a destination")
    zone.add_argument("--country", required=True, help="Destination country")
    zone.add_argument("--origin", help="Seller country")

    # ── Carriers ─────────────────────────────────────────
    carrier_parser = sub.add_parser("carriers", help="Carrier quotes")
    carrier_sub = carrier_parser.add_subparsers(dest="action")

    clist = carrier_sub.add_parser("list", help="Carriers serving a route")
    clist.add_argument("--country", required=True, help="Destination country")
    clist.add_argument("--origin", help="Seller country")

    crates = carrier_sub.add_parser("rates", help="Carrier rate quotes")
    crates.add_argument("--from", dest="from_country", help="Origin country")
    crates.add_argument("--to", dest="to_country", required=True, help="Destination country")
    crates.add_argument("--weight", type=_decimal, required=True, help="Parcel weight in kg")
    crates.add_argument("--dims", type=_decimal, nargs=3, metavar=("L", "W", "H"),
                        default=[Decimal("0")] * 3)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "custom_rate", None):
        try:
            args.custom_rate = [(country, _decimal(rate)) for country, rate in args.custom_rate]
        except argparse.ArgumentTypeError as e:
            parser.error(f"argument --custom-rate: {e}")

    settings = get_settings()
    configure_logging(settings)

    if not args.command:
        parser.print_help()
        return 0

    handlers = {
        "shipping": handle_shipping,
        "carriers": handle_carriers,
    }
    return handlers[args.command](args, settings)


# ── Command Handlers ────────────────────────────────────

def _calculator(args) -> ShippingCalculator:
    if args.rates_file:
        return ShippingCalculator(ShippingConfig.from_file(args.rates_file))
    return ShippingCalculator()


def handle_shipping(args, settings) -> int:
    calc = _calculator(args)
    origin = getattr(args, "origin", None) or settings.default_origin_country

    if args.action == "quote":
        dims = PackageDimensions(*args.dims) if args.dims else None
        product = ProductShippingDetails(
            weight=args.weight,
            dimensions=dims,
            restricted_countries=frozenset(args.restricted),
            free_shipping_threshold=args.free_threshold,
            custom_shipping_rates=dict(args.custom_rate),
        )
        try:
            cost = calc.calculate_shipping_cost(
                product,
                args.country,
                origin,
                shipping_method=args.method,
                order_value=args.order_value,
                quantity=args.quantity,
            )
        except ShippingUnavailableError as e:
            print(f"❌ {e}")
            return 1
        timing = calc.estimate_delivery_time(args.country, origin, args.method)
        zone = calc.classify_zone(args.country, origin)
        price = "Free" if cost == 0 else f"${cost}"
        print(f"Zone:      {zone.value}")
        print(f"Method:    {args.method.lower()}")
        print(f"Cost:      {price}")
        print(f"Delivery:  {timing.label}")

    elif args.action == "estimate":
        timing = calc.estimate_delivery_time(args.country, origin, args.method)
        print(json.dumps({"min_days": timing.min_days, "max_days": timing.max_days}))

    elif args.action == "methods":
        product = ProductShippingDetails(
            weight=Decimal("0"), restricted_countries=frozenset(args.restricted),
        )
        available = calc.get_available_shipping_methods(args.country, origin, product)
        if not available:
            print(f"Shipping to {args.country} is not available for this product.")
            return 1
        print(f"Methods for {args.country}: {', '.join(available)}")

    elif args.action == "volumetric":
        weight = calculate_volumetric_weight(*args.dims)
        print(f"{weight:.2f} kg")

    elif args.action == "zone":
        print(calc.classify_zone(args.country, origin).value)

    else:
        print("Usage: craftsmatch shipping {quote|estimate|methods|volumetric|zone}")
        return 2
    return 0


def handle_carriers(args, settings) -> int:
    gateway = CarrierGateway()

    if args.action == "list":
        origin = args.origin or settings.default_origin_country
        carriers = asyncio.run(gateway.available_carriers(origin, args.country))
        print(f"Carriers {origin} → {args.country}: {', '.join(carriers)}")

    elif args.action == "rates":
        origin = args.from_country or settings.default_origin_country
        sender = ShippingAddress(name="", street1="", city="", postal_code="", country=origin)
        recipient = ShippingAddress(
            name="", street1="", city="", postal_code="", country=args.to_country,
        )
        parcel = Parcel(*args.dims, weight=args.weight)
        rates = asyncio.run(gateway.get_rates(sender, recipient, parcel))
        print(f"{'Carrier':<18} {'Service':<10} {'Cost':<10} {'Days'}")
        print("-" * 46)
        for r in rates:
            print(f"{r.carrier:<18} {r.service:<10} ${r.rate:<9} {r.estimated_days}")

    else:
        print("Usage: craftsmatch carriers {list|rates}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
