from enum import Enum


class ShopEntity(Enum):
    ADMIN = 1
    USER = 2
    COMMON = 3
