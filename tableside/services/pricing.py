"""Order pricing: VAT, tip, total and platform commission for a discounted subtotal."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel

from tableside.core.config import settings

WHOLE_UNIT = Decimal("1")
CENT = Decimal("0.01")


class OrderPricing(BaseModel):
    """Priced breakdown stored on an order."""

    subtotal: Decimal
    vat_amount: Decimal
    tip_amount: Decimal
    total: Decimal
    commission_rate: Decimal
    commission_amount: Decimal


def round_whole(value: Decimal) -> Decimal:
    """Round half-up to a whole currency unit."""
    return value.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)


def round_cents(value: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_order_pricing(
    subtotal: Decimal,
    *,
    vat_rate: Decimal | None = None,
    tip_rate: Decimal | None = None,
    commission_rate: Decimal | None = None,
) -> OrderPricing:
    """Price a non-negative subtotal that is already net of any discount.

    VAT and tip are rounded to whole units before they are summed into the
    total. Commission is a share of that rounded total, rounded to cents.
    Rates default to the configured platform policy.
    """
    vat_rate = settings.vat_rate if vat_rate is None else vat_rate
    tip_rate = settings.tip_rate if tip_rate is None else tip_rate
    commission_rate = settings.commission_rate if commission_rate is None else commission_rate

    subtotal = Decimal(subtotal)
    vat_amount = round_whole(subtotal * vat_rate)
    tip_amount = round_whole(subtotal * tip_rate)
    total = subtotal + vat_amount + tip_amount
    commission_amount = round_cents(total * commission_rate)

    return OrderPricing(
        subtotal=subtotal,
        vat_amount=vat_amount,
        tip_amount=tip_amount,
        total=total,
        commission_rate=commission_rate,
        commission_amount=commission_amount,
    )
