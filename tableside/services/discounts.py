"""Best-discount selection for a cart.

Rules, kept deliberately simple and predictable:

* only one discount is applied per order, the one with the highest savings;
  discounts never stack;
* ``fixed`` subtracts its value once from the applicable subtotal, every other
  discount type is a percentage off;
* scope comes from ``apply_to``: the whole cart, one category, or one item;
* when two discounts save the same amount, the one listed first wins.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from tableside.services.pricing import round_cents
from tableside.utils.time import as_utc, utcnow

ZERO = Decimal("0")


class DiscountRule(BaseModel):
    """Validated view of a discount row."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    discount_type: str
    discount_value: Decimal
    apply_to: str
    category_id: str | None = None
    item_id: int | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    is_active: bool = True


class CartLine(BaseModel):
    """One priced cart line as seen by the discount rules."""

    menu_item_id: int
    category: str | None = None
    line_subtotal: Decimal


class AppliedDiscount(BaseModel):
    discount_id: int
    discount_type: str
    apply_to: str
    amount: Decimal


class DiscountResult(BaseModel):
    discount_amount: Decimal
    applied: AppliedDiscount | None = None


def is_discount_active(rule: DiscountRule, now: datetime) -> bool:
    """Return whether a discount is eligible at ``now``; window bounds are inclusive."""
    if not rule.is_active:
        return False
    now = as_utc(now)
    if rule.start_time is not None and now < as_utc(rule.start_time):
        return False
    if rule.end_time is not None and now > as_utc(rule.end_time):
        return False
    return True


def applicable_subtotal(rule: DiscountRule, subtotal: Decimal, items: Iterable[CartLine]) -> Decimal:
    """Return the part of the cart a discount's scope covers."""
    if rule.apply_to == "all":
        return subtotal
    if rule.apply_to == "category":
        if not rule.category_id:
            return ZERO
        return sum(
            (line.line_subtotal for line in items if line.category and str(line.category) == str(rule.category_id)),
            ZERO,
        )
    if rule.apply_to == "item":
        if rule.item_id is None:
            return ZERO
        return sum((line.line_subtotal for line in items if line.menu_item_id == rule.item_id), ZERO)
    return ZERO


def discount_amount_for(rule: DiscountRule, applicable: Decimal) -> Decimal:
    """Return the monetary effect of one discount on its applicable subtotal."""
    value = Decimal(rule.discount_value)
    if rule.discount_type == "fixed":
        amount = min(value, applicable)
    else:
        amount = min(applicable * value / Decimal("100"), applicable)
    return round_cents(amount)


def compute_best_discount(
    subtotal: Decimal,
    items: Sequence[CartLine],
    discounts: Sequence[DiscountRule],
    now: datetime | None = None,
) -> DiscountResult:
    """Pick the single discount that saves the most on this cart."""
    now = now or utcnow()
    subtotal = Decimal(subtotal)
    if subtotal <= 0:
        return DiscountResult(discount_amount=ZERO, applied=None)

    best: AppliedDiscount | None = None
    best_amount = ZERO

    for rule in discounts:
        if not is_discount_active(rule, now):
            continue
        if Decimal(rule.discount_value) <= 0:
            continue

        applicable = applicable_subtotal(rule, subtotal, items)
        if applicable <= 0:
            continue

        amount = discount_amount_for(rule, applicable)
        if amount <= 0:
            continue

        # Strictly greater: ties keep the earlier discount.
        if amount > best_amount:
            best_amount = amount
            best = AppliedDiscount(
                discount_id=rule.id,
                discount_type=rule.discount_type,
                apply_to=rule.apply_to,
                amount=amount,
            )

    return DiscountResult(discount_amount=min(best_amount, subtotal), applied=best)
