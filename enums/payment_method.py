from enum import Enum


class PaymentMethod(str, Enum):
    CASH = "cash"
    BANK = "bank"
    MOMO = "momo"
    ZALOPAY = "zalopay"
    VNPAY = "vnpay"

    @classmethod
    def get_checkout_options(cls) -> list['PaymentMethod']:
        """Payment methods accepted at checkout."""
        return [cls.CASH, cls.VNPAY]
