from django.conf import settings
from django.db import models


class CreditPack(models.Model):
    """Available credit packs for purchase"""

    sku = models.CharField(
        max_length=50,
        unique=True,
        help_text="Stock keeping unit identifier"
    )
    name = models.CharField(max_length=100, blank=True)
    credits = models.PositiveIntegerField(
        help_text="Number of credits in this pack"
    )
    amount = models.PositiveIntegerField(
        help_text="Price in whole currency units (rupees for INR)"
    )
    currency = models.CharField(max_length=3, default="INR")
    active = models.BooleanField(
        default=True,
        help_text="Whether this pack is currently available for purchase"
    )

    class Meta:
        db_table = 'credit_packs'
        ordering = ['credits']

    def __str__(self):
        return f"{self.sku} - {self.credits} credits ({self.amount} {self.currency})"


class CreditTransaction(models.Model):
    """Append-only ledger row. Every balance change has exactly one."""

    REASON_INITIAL = 'initial'
    REASON_INSTAGRAM_FOLLOW = 'instagram_follow'
    REASON_ADMIN = 'admin'
    REASON_GENERATION = 'generation'
    REASON_PURCHASE = 'purchase'

    REASONS = [
        (REASON_INITIAL, 'Initial'),
        (REASON_INSTAGRAM_FOLLOW, 'Instagram follow'),
        (REASON_ADMIN, 'Admin'),
        (REASON_GENERATION, 'Generation'),
        (REASON_PURCHASE, 'Purchase'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='credit_transactions'
    )
    amount = models.IntegerField(
        help_text="Positive for grants and purchases, negative for generations"
    )
    reason = models.CharField(
        max_length=20,
        choices=REASONS
    )
    transformation = models.ForeignKey(
        'Transformation',
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name='credit_transactions',
        help_text="Transformation paid for (or refunded) by this row"
    )
    payment_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        unique=True,
        help_text="Razorpay payment id for purchases"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'credits_transactions'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='credit_tx_user_created_idx'),
        ]

    def save(self, *args, **kwargs):
        """Insert only: ledger rows are never edited."""
        if not self._state.adding:
            raise ValueError("Credit transactions are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Credit transactions cannot be deleted")

    def __str__(self):
        return f"{self.reason} - {self.amount} credits ({self.user.email})"


class PaymentOrder(models.Model):
    """Gateway order created before checkout, binding the credits it buys."""

    STATUS_CREATED = 'created'
    STATUS_PAID = 'paid'

    STATUS_CHOICES = [
        (STATUS_CREATED, 'Created'),
        (STATUS_PAID, 'Paid'),
    ]

    order_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Razorpay order id"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='payment_orders'
    )
    credits = models.PositiveIntegerField()
    amount = models.PositiveIntegerField(
        help_text="Price in whole currency units"
    )
    currency = models.CharField(max_length=3, default="INR")
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_CREATED
    )
    payment_id = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'payment_orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='payment_order_user_idx'),
        ]

    def __str__(self):
        return f"{self.order_id} - {self.credits} credits ({self.status})"
