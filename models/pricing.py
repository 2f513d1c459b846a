from pydantic import BaseModel


class PriceBreakdownDTO(BaseModel):
    """
    Result of pricing one cart line (per unit).

    Computed at add-to-cart time (provisional, display only) and again at
    checkout, where it is persisted into the order item.
    """
    original_base_price: float
    final_base_price: float
    topping_total: float
    final_price: int
    is_discounted: bool
