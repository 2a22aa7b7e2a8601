"""Serializer package for the `ghiblify` Django app.

This package re-exports the public DRF serializer classes used by views.
"""

from .admin import SetAdminSerializer, UpdateCreditsSerializer
from .credit import (
    CreateOrderSerializer,
    CreditPackSerializer,
    CreditTransactionSerializer,
    VerifyPaymentSerializer,
)
from .transformation import TransformationSerializer, TransformUploadSerializer
from .user import LoginSerializer, RegisterSerializer, UserSerializer, VerifyInstagramSerializer

__all__ = [
    "CreateOrderSerializer",
    "CreditPackSerializer",
    "CreditTransactionSerializer",
    "LoginSerializer",
    "RegisterSerializer",
    "SetAdminSerializer",
    "TransformationSerializer",
    "TransformUploadSerializer",
    "UpdateCreditsSerializer",
    "UserSerializer",
    "VerifyInstagramSerializer",
    "VerifyPaymentSerializer",
]
