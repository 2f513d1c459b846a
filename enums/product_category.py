from enum import Enum


class ProductCategory(str, Enum):
    """
    Fixed product categories.

    Values are the Vietnamese labels stored in the database and shown in the shop.
    TOPPING is priced with a flat price, every other category by size.
    """
    MILK_TEA = "Trà sữa"
    FRUIT_TEA = "Trà trái cây"
    BLENDED = "Đá xay"
    TOPPING = "Topping"
    COFFEE = "Cà phê"
    JUICE = "Nước ép"

    @property
    def is_topping(self) -> bool:
        return self == ProductCategory.TOPPING
