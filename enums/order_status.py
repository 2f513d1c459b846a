from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"          # Created, waiting for payment or confirmation
    CONFIRMED = "confirmed"      # Paid (cash) or confirmed by staff
    PREPARING = "preparing"      # Being made
    READY = "ready"              # Ready for pickup
    COMPLETED = "completed"      # Handed over
    CANCELLED = "cancelled"      # Cancelled by customer or staff
