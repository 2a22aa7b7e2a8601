from django.apps import apps

from ghiblify.services.ledger import CreditLedger
from ghiblify.services.lifecycle import SubmitResult, TransformationLifecycle, map_remote_status
from ghiblify.services.payments import PaymentService


def _app_config():
    return apps.get_app_config("ghiblify")


def get_ledger() -> CreditLedger:
    return _app_config().ledger


def get_lifecycle() -> TransformationLifecycle:
    return _app_config().lifecycle


def get_payments() -> PaymentService:
    return _app_config().payments


__all__ = [
    "CreditLedger",
    "PaymentService",
    "SubmitResult",
    "TransformationLifecycle",
    "get_ledger",
    "get_lifecycle",
    "get_payments",
    "map_remote_status",
]
