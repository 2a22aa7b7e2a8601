"""Database models exposed by the `ghiblify` Django app.

This package aggregates model classes to provide a convenient import surface
for other parts of the backend.
"""

from .credit import CreditPack, CreditTransaction, PaymentOrder
from .transformation import Transformation
from .user import User

__all__ = [
    "CreditPack",
    "CreditTransaction",
    "PaymentOrder",
    "Transformation",
    "User",
]
