"""DRF serializers for credit packs, ledger rows and Razorpay checkout."""

from rest_framework import serializers

from ghiblify.models import CreditPack, CreditTransaction


class CreditPackSerializer(serializers.ModelSerializer):
    """Serializer for CreditPack model"""

    price_display = serializers.SerializerMethodField()

    class Meta:
        model = CreditPack
        fields = [
            'id',
            'sku',
            'name',
            'credits',
            'amount',
            'currency',
            'price_display',
        ]
        read_only_fields = fields

    def get_price_display(self, obj):
        """Render the pack price for display, e.g. "₹249"."""
        symbol = "₹" if obj.currency == "INR" else f"{obj.currency} "
        return f"{symbol}{obj.amount}"


class CreditTransactionSerializer(serializers.ModelSerializer):
    """Serializer for CreditTransaction model"""

    class Meta:
        model = CreditTransaction
        fields = [
            'id',
            'amount',
            'reason',
            'transformation',
            'payment_id',
            'created_at',
        ]
        read_only_fields = fields


class CreateOrderSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=1)
    currency = serializers.CharField(max_length=3, default="INR")
    credits = serializers.IntegerField(min_value=1)

    def validate_currency(self, value):
        return value.upper()


class VerifyPaymentSerializer(serializers.Serializer):
    razorpay_order_id = serializers.CharField(max_length=255)
    razorpay_payment_id = serializers.CharField(max_length=255)
    razorpay_signature = serializers.CharField(max_length=255)
    credits = serializers.IntegerField(min_value=1, required=False)
