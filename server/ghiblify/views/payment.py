from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ghiblify.models import CreditPack
from ghiblify.serializers import (
    CreateOrderSerializer,
    CreditPackSerializer,
    VerifyPaymentSerializer,
)
from ghiblify.services import get_payments


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def list_credit_packs(request):
    """
    List available credit packs.
    """
    packs = CreditPack.objects.filter(active=True).order_by("credits")
    serializer = CreditPackSerializer(packs, many=True)
    return Response(serializer.data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def create_order(request):
    """
    Create a Razorpay order for a credit pack.
    """
    serializer = CreateOrderSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    order = get_payments().create_order(
        request.user,
        amount=serializer.validated_data["amount"],
        currency=serializer.validated_data["currency"],
        credits=serializer.validated_data["credits"],
    )
    return Response(order)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def verify_payment(request):
    """
    Verify a Razorpay checkout and add the purchased credits.
    """
    serializer = VerifyPaymentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    balance = get_payments().verify_payment(
        request.user,
        order_id=data["razorpay_order_id"],
        payment_id=data["razorpay_payment_id"],
        signature=data["razorpay_signature"],
        credits=data.get("credits"),
    )
    return Response({"success": True, "credits": balance})
