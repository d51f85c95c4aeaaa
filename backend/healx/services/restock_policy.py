"""
Restock Policy — pure replenishment computation.

No I/O: takes an item snapshot (ORM row or any object exposing the same
attributes) and returns the quantity and value projections for one restock.
"""
from decimal import Decimal

from healx.core.exceptions import InvalidPriceError, InvalidRestockValueError
from healx.schemas.restock import RestockComputation

CENTS = Decimal("0.01")
MIN_FALLBACK_QUANTITY = 10


def urgency_for(current_stock: int) -> str:
    return "critical" if current_stock == 0 else "high"


def _as_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compute_restock_quantity(
    current_stock: int,
    min_stock_level: int,
    max_stock_level: int,
    restock_method: str,
    reorder_quantity=None,
    respect_manual_quantities: bool = True,
) -> int:
    if (
        respect_manual_quantities
        and restock_method == "fixed_quantity"
        and reorder_quantity
        and reorder_quantity > 0
    ):
        quantity = int(reorder_quantity)
    else:
        quantity = max(max_stock_level - current_stock, min_stock_level)

    # Degenerate thresholds (e.g. min = max = 0) still get a real order.
    if quantity <= 0:
        quantity = max(min_stock_level * 2, MIN_FALLBACK_QUANTITY)
    return quantity


def compute_restock(item, respect_manual_quantities: bool = True) -> RestockComputation:
    """
    Compute the replenishment for a low-stock item.

    Raises:
        InvalidPriceError: unit price is missing or not positive.
        InvalidRestockValueError: quantity x price came out non-positive.
    """
    unit_price = _as_decimal(item.unit_price)
    if unit_price <= 0:
        raise InvalidPriceError(
            f"Item '{item.name}' has invalid unit price {unit_price}",
            {"item_id": item.id, "unit_price": str(unit_price)},
        )

    current_stock = int(item.quantity or 0)
    min_stock_level = int(item.min_stock_level or 0)
    restock_quantity = compute_restock_quantity(
        current_stock=current_stock,
        min_stock_level=min_stock_level,
        max_stock_level=int(item.auto_restock_max_stock_level or 0),
        restock_method=item.auto_restock_method,
        reorder_quantity=item.auto_restock_reorder_quantity,
        respect_manual_quantities=respect_manual_quantities,
    )

    restock_value = (Decimal(restock_quantity) * unit_price).quantize(CENTS)
    if restock_value <= 0:
        raise InvalidRestockValueError(
            f"Computed restock value {restock_value} for item '{item.name}' is not positive",
            {"item_id": item.id, "restock_quantity": restock_quantity},
        )

    final_stock = current_stock + restock_quantity
    return RestockComputation(
        restock_quantity=restock_quantity,
        restock_value=restock_value,
        final_stock=final_stock,
        final_total_value=(Decimal(final_stock) * unit_price).quantize(CENTS),
    )
