from enum import Enum


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    SPECIAL_DAY_FIXED_PRICE = "special_day_fixed_price"
