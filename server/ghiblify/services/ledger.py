"""Credit ledger.

Every balance change is one database transaction that both moves
`User.credits` and inserts the matching `CreditTransaction` row, so the cached
balance always equals the sum of the user's ledger rows. Balance arithmetic is
done in SQL (`F()` expressions, conditional updates) and never from a value
read earlier in Python, which keeps concurrent requests from overdrawing an
account.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F

from ghiblify.exceptions import (
    AlreadyVerifiedError,
    DuplicateUserError,
    InsufficientCreditsError,
    NotFoundError,
    ValidationError,
)
from ghiblify.models import CreditTransaction

logger = logging.getLogger(__name__)

INITIAL_CREDITS = 1
INSTAGRAM_FOLLOW_CREDITS = 2

REASONS = {choice for choice, _ in CreditTransaction.REASONS}


class CreditLedger:
    """Append-only credit accounting over the users and credits_transactions tables."""

    def __init__(self):
        self.user_model = get_user_model()

    def grant_initial_credits(self, user):
        """Give a freshly created user their starting balance."""
        with transaction.atomic():
            if CreditTransaction.objects.filter(
                user_id=user.pk, reason=CreditTransaction.REASON_INITIAL
            ).exists():
                raise DuplicateUserError(user.email)
            return self._apply(user.pk, INITIAL_CREDITS, CreditTransaction.REASON_INITIAL)

    def debit(self, user_id, amount, reason=CreditTransaction.REASON_GENERATION, transformation=None):
        """
        Take `amount` credits from the user.

        The balance check and the decrement are a single conditional UPDATE, so
        two requests racing for the last credit cannot both win.

        Raises:
            InsufficientCreditsError: If the balance is lower than `amount`.
        """
        self._check_amount(amount)
        self._check_reason(reason)

        with transaction.atomic():
            updated = self.user_model.objects.filter(
                pk=user_id, credits__gte=amount
            ).update(credits=F("credits") - amount)

            if not updated:
                available = self.balance(user_id)
                logger.info("Debit of %s refused for user %s (balance %s)", amount, user_id, available)
                raise InsufficientCreditsError(credits_available=available, credits_needed=amount)

            entry = CreditTransaction.objects.create(
                user_id=user_id,
                amount=-amount,
                reason=reason,
                transformation=transformation,
            )

        logger.info("Debited %s credit(s) from user %s for %s", amount, user_id, reason)
        return entry

    def credit(self, user_id, amount, reason, transformation=None, payment_id=None):
        """Add `amount` credits to the user and record why."""
        self._check_amount(amount)
        self._check_reason(reason)

        with transaction.atomic():
            entry = self._apply(
                user_id,
                amount,
                reason,
                transformation=transformation,
                payment_id=payment_id,
            )

        logger.info("Credited %s credit(s) to user %s for %s", amount, user_id, reason)
        return entry

    def set_balance(self, user_id, target, reason=CreditTransaction.REASON_ADMIN):
        """
        Reconcile the balance to an absolute value.

        The difference is written as a corrective ledger row; nothing is
        written when the balance already matches. Returns the row or None.
        """
        if target < 0:
            raise ValueError("Balance cannot be negative")
        self._check_reason(reason)

        with transaction.atomic():
            try:
                user = self.user_model.objects.select_for_update().get(pk=user_id)
            except self.user_model.DoesNotExist:
                raise NotFoundError("User not found")

            delta = target - user.credits
            if delta == 0:
                return None
            entry = self._apply(user.pk, delta, reason)

        logger.info("Balance of user %s set to %s (delta %s, %s)", user_id, target, delta, reason)
        return entry

    def verify_instagram(self, user_id, instagram_username):
        """
        Grant the one-time Instagram follow bonus.

        Flipping `instagram_verified` is a conditional UPDATE in the same
        transaction as the credit, so the bonus can be paid at most once.
        """
        instagram_username = (instagram_username or "").strip().lstrip("@")
        if not instagram_username:
            raise ValidationError(
                "Instagram username is required",
                errors={"instagram_username": ["This field is required."]},
            )

        with transaction.atomic():
            try:
                user = self.user_model.objects.select_for_update().get(pk=user_id)
            except self.user_model.DoesNotExist:
                raise NotFoundError("User not found")

            if user.instagram_verified:
                raise AlreadyVerifiedError()

            if user.instagram_username and user.instagram_username.lower() != instagram_username.lower():
                raise ValidationError(
                    "Instagram username cannot be changed once set",
                    errors={"instagram_username": ["Does not match the username on this account."]},
                )

            updated = self.user_model.objects.filter(
                pk=user_id, instagram_verified=False
            ).update(
                instagram_verified=True,
                instagram_username=user.instagram_username or instagram_username,
            )
            if not updated:
                raise AlreadyVerifiedError()

            entry = self._apply(user_id, INSTAGRAM_FOLLOW_CREDITS, CreditTransaction.REASON_INSTAGRAM_FOLLOW)

        logger.info("Instagram bonus granted to user %s", user_id)
        return entry

    def history(self, user_id):
        """Return the user's ledger rows, most recent first."""
        return CreditTransaction.objects.filter(user_id=user_id).order_by("-created_at", "-id")

    def balance(self, user_id):
        """Return the current balance as stored in the database."""
        return (
            self.user_model.objects.filter(pk=user_id)
            .values_list("credits", flat=True)
            .first()
        ) or 0

    def _apply(self, user_id, delta, reason, transformation=None, payment_id=None):
        # Caller holds the transaction.
        updated = self.user_model.objects.filter(pk=user_id).update(credits=F("credits") + delta)
        if not updated:
            raise NotFoundError("User not found")
        return CreditTransaction.objects.create(
            user_id=user_id,
            amount=delta,
            reason=reason,
            transformation=transformation,
            payment_id=payment_id,
        )

    @staticmethod
    def _check_amount(amount):
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise ValueError(f"Credit amount must be a positive integer, got {amount!r}")

    @staticmethod
    def _check_reason(reason):
        if reason not in REASONS:
            raise ValueError(f"Unknown credit reason: {reason!r}")
