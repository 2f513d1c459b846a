import logging
import unicodedata
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

import config
from models.pricing import PriceBreakdownDTO
from models.product import ProductDTO
from utils.localizator import Localizator


def round_half_up(amount: float | int | Decimal) -> int:
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PricingService:
    """
    Unit price computation for one cart line.

    Promotions (server local wall-clock, weekday() 0=Monday):
    - Mon-Fri, coffee, 05:00-07:59  -> PROMO_DISCOUNT_PERCENT off
    - Mon-Fri, milk tea, 15:00-18:59 -> PROMO_DISCOUNT_PERCENT off
    - Sat/Sun, milk tea, any hour   -> flat WEEKEND_MILK_TEA_PRICE
    """

    COFFEE_KEYWORDS = ("cà phê", "ca phe")
    MILK_TEA_KEYWORDS = ("trà sữa", "tra sua")
    COFFEE_HOURS = (5, 8)
    MILK_TEA_HOURS = (15, 19)

    @staticmethod
    def _matches(keywords: tuple[str, ...], *texts: str | None) -> bool:
        for text in texts:
            if not text:
                continue
            normalized = unicodedata.normalize("NFC", str(text)).lower()
            if any(keyword in normalized for keyword in keywords):
                return True
        return False

    @staticmethod
    def is_coffee(category: str | None, name: str | None) -> bool:
        return PricingService._matches(PricingService.COFFEE_KEYWORDS, category, name)

    @staticmethod
    def is_milk_tea(category: str | None, name: str | None) -> bool:
        return PricingService._matches(PricingService.MILK_TEA_KEYWORDS, category, name)

    @staticmethod
    def find_base_price(product: ProductDTO, size: str | None) -> float | None:
        """
        Resolves the undiscounted unit price for the chosen size.

        Returns None when the product carries neither a usable size list nor a
        flat price.
        """
        if product.is_topping and product.price is not None and product.price > 0:
            return product.price
        if len(product.sizes) > 0:
            if size:
                for product_size in product.sizes:
                    if product_size.size == size and product_size.price is not None:
                        return product_size.price
            if product.sizes[0].price is not None:
                return product.sizes[0].price
        return product.price

    @staticmethod
    def get_base_price(product: ProductDTO, size: str | None) -> float:
        base_price = PricingService.find_base_price(product, size)
        if base_price is None:
            logging.warning(f"No price configured for product {product.id} ({product.name}), size={size}")
            return 0
        return base_price

    @staticmethod
    def get_discounted_base_price(base_price: float,
                                  category: str | None,
                                  name: str | None,
                                  now: datetime) -> tuple[float, bool]:
        """
        Applies the active promotion, if any.

        Returns:
            (final_base_price, is_discounted)
        """
        weekday = now.weekday()
        hour = now.hour

        if weekday <= 4:
            coffee_start, coffee_end = PricingService.COFFEE_HOURS
            milk_tea_start, milk_tea_end = PricingService.MILK_TEA_HOURS
            if PricingService.is_coffee(category, name) and coffee_start <= hour < coffee_end:
                return PricingService._apply_percent_discount(base_price), True
            if PricingService.is_milk_tea(category, name) and milk_tea_start <= hour < milk_tea_end:
                return PricingService._apply_percent_discount(base_price), True
        elif PricingService.is_milk_tea(category, name):
            # Flat weekend price, even when the size price is already lower
            return config.WEEKEND_MILK_TEA_PRICE, True

        return base_price, False

    @staticmethod
    def _apply_percent_discount(base_price: float) -> int:
        percent = Decimal(config.PROMO_DISCOUNT_PERCENT)
        return round_half_up(Decimal(str(base_price)) * (Decimal(100) - percent) / Decimal(100))

    @staticmethod
    def get_topping_price(topping: ProductDTO) -> float:
        if topping.price is not None and topping.price > 0:
            return topping.price
        if len(topping.sizes) > 0 and topping.sizes[0].price is not None:
            return topping.sizes[0].price
        return 0

    @staticmethod
    def compute_final_price(product: ProductDTO,
                            size: str | None,
                            toppings: list[ProductDTO],
                            now: datetime | None = None) -> PriceBreakdownDTO:
        """
        Prices one unit of a cart line.

        Pure for a fixed `now`. Called at add-to-cart (provisional, display only)
        and again at checkout, where the result is authoritative.

        Example (Tuesday 06:00, coffee 30000 + toppings 10000 and 5000):
            original_base_price=30000, final_base_price=25500,
            topping_total=15000, final_price=40500, is_discounted=True
        """
        if now is None:
            now = datetime.now()
        category = product.category.value if product.category is not None else None

        original_base_price = PricingService.get_base_price(product, size)
        final_base_price, is_discounted = PricingService.get_discounted_base_price(
            original_base_price, category, product.name, now
        )
        topping_total = sum(PricingService.get_topping_price(topping) for topping in toppings)
        final_price = max(0, round_half_up(final_base_price + topping_total))

        return PriceBreakdownDTO(
            original_base_price=original_base_price,
            final_base_price=final_base_price,
            topping_total=topping_total,
            final_price=final_price,
            is_discounted=is_discounted
        )

    @staticmethod
    def format_price(amount: float | int, lang: str | None = None) -> str:
        """40500 -> '40.500 ₫'"""
        formatted = f"{round_half_up(amount):,}".replace(",", ".")
        return f"{formatted} {Localizator.get_currency_symbol(lang)}"
