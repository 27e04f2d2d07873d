"""
Award Value Calculator - the implied value of a proposed award

For every selected supplier we take its cheapest priced quote and add them
up. Supplier quotes are loosely typed documents, so costs are coerced
leniently: anything that is not a finite number counts as zero, and a quote
with no usable number at all is treated as not priced.
"""

import math
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any

from sourcing_governance.event.invariants import dedupe_suppliers
from sourcing_governance.event.models import Quote

ZERO = Decimal(0)


def to_cost(value: Any) -> Decimal | None:
    """
    Coerce a line-item cost to a finite Decimal

    Booleans, None, NaN, infinities and non-numeric strings are not costs.

    Returns:
        The cost, or None when the value is not a usable number
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    return amount if amount.is_finite() else None


def quote_total(quote: Quote) -> Decimal | None:
    """
    Sum the line-item costs of a quote

    Returns:
        The total, or None when no line item carries a usable cost
    """
    costs = [to_cost(item.cost) for item in quote.items]
    priced = [cost for cost in costs if cost is not None]
    if not priced:
        return None
    return sum(priced, ZERO)


def compute_award_value(
    quotes: Iterable[Quote | dict[str, Any]],
    selected_supplier_ids: Iterable[str],
) -> Decimal:
    """
    Compute the estimated value of awarding the selected suppliers

    Args:
        quotes: All quotes of the event (any number of revisions per supplier)
        selected_supplier_ids: Suppliers proposed as winners (duplicates ignored)

    Returns:
        Sum over selected suppliers of their minimum priced quote total;
        suppliers without a priced quote contribute zero

    Example:
        A quoted [100, 50], B quoted [40]; selecting both gives 150 + 40 = 190.
    """
    selected = dedupe_suppliers(selected_supplier_ids)
    if not selected:
        return ZERO
    wanted = set(selected)

    minima: dict[str, Decimal] = {}
    for raw in quotes:
        quote = raw if isinstance(raw, Quote) else Quote.model_validate(raw)
        if quote.supplier_id not in wanted:
            continue
        total = quote_total(quote)
        if total is None:
            continue
        current = minima.get(quote.supplier_id)
        if current is None or total < current:
            minima[quote.supplier_id] = total

    return sum((minima.get(supplier_id, ZERO) for supplier_id in selected), ZERO)


def format_amount(value: Decimal) -> str:
    """Render an amount for messages: integral values without decimals"""
    if value == value.to_integral_value():
        return format(value.to_integral_value(), "f")
    return format(value.normalize(), "f")
