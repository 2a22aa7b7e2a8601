import logging

from django.db import transaction
from django.utils import timezone

from ghiblify.exceptions import (
    NotFoundError,
    SignatureMismatchError,
    ValidationError,
)
from ghiblify.models import CreditPack, CreditTransaction, PaymentOrder

logger = logging.getLogger(__name__)

# Razorpay takes amounts in the currency's minor unit (paise for INR).
MINOR_UNITS = 100


class PaymentService:
    """Sells credit packs through Razorpay orders."""

    def __init__(self, client, ledger, key_id):
        self.client = client
        self.ledger = ledger
        self.key_id = key_id

    def create_order(self, user, amount, currency, credits):
        """
        Open a gateway order for one of the active credit packs.

        Returns:
            dict the checkout widget is initialised with
        """
        currency = (currency or "INR").upper()
        pack = CreditPack.objects.filter(
            active=True, credits=credits, amount=amount, currency=currency
        ).first()
        if pack is None:
            raise ValidationError(
                "No credit pack matches this amount and credit count",
                errors={"credits": ["Unknown credit pack."]},
            )

        order = self.client.create_order(
            amount=pack.amount * MINOR_UNITS,
            currency=pack.currency,
            receipt=f"ghiblify-{user.pk}-{timezone.now():%Y%m%d%H%M%S}",
            notes={
                "user_id": str(user.pk),
                "sku": pack.sku,
                "credits": str(pack.credits),
            },
        )

        PaymentOrder.objects.create(
            order_id=order["id"],
            user=user,
            credits=pack.credits,
            amount=pack.amount,
            currency=pack.currency,
        )
        logger.info("Created order %s (%s credits) for user %s", order["id"], pack.credits, user.pk)

        return {
            "id": order["id"],
            "amount": order.get("amount", pack.amount * MINOR_UNITS),
            "currency": pack.currency,
            "credits": pack.credits,
            "key_id": self.key_id,
        }

    def verify_payment(self, user, order_id, payment_id, signature, credits=None):
        """
        Check the checkout signature and grant the order's credits.

        Replaying an already verified order grants nothing and returns the
        current balance.

        Raises:
            NotFoundError: If the order does not belong to the user.
            ValidationError: If `credits` disagrees with the order.
            SignatureMismatchError: If the signature is not Razorpay's.
        """
        try:
            order = PaymentOrder.objects.get(order_id=order_id, user=user)
        except PaymentOrder.DoesNotExist:
            raise NotFoundError("Order not found")

        if credits is not None and credits != order.credits:
            raise ValidationError(
                "Credit count does not match the order",
                errors={"credits": [f"Expected {order.credits}."]},
            )

        if not self.client.verify_payment_signature(order_id, payment_id, signature):
            logger.warning("Signature mismatch for order %s (user %s)", order_id, user.pk)
            raise SignatureMismatchError()

        with transaction.atomic():
            order = PaymentOrder.objects.select_for_update().get(pk=order.pk)
            if order.status == PaymentOrder.STATUS_PAID:
                logger.info("Order %s already verified", order_id)
                return self.ledger.balance(user.pk)

            self.ledger.credit(
                user.pk,
                order.credits,
                CreditTransaction.REASON_PURCHASE,
                payment_id=payment_id,
            )
            order.status = PaymentOrder.STATUS_PAID
            order.payment_id = payment_id
            order.paid_at = timezone.now()
            order.save(update_fields=["status", "payment_id", "paid_at"])

        logger.info("Order %s paid: %s credits to user %s", order_id, order.credits, user.pk)
        return self.ledger.balance(user.pk)
