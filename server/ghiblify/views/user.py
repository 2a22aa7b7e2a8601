from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ghiblify.serializers import (
    CreditTransactionSerializer,
    TransformationSerializer,
    UserSerializer,
    VerifyInstagramSerializer,
)
from ghiblify.services import get_ledger


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def me(request):
    """
    Get current user profile.
    """
    request.user.refresh_from_db()
    return Response(UserSerializer(request.user).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def verify_instagram(request):
    """
    Grant the one-time bonus for following the Instagram account.
    """
    serializer = VerifyInstagramSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    get_ledger().verify_instagram(
        request.user.pk,
        serializer.validated_data["instagram_username"],
    )

    request.user.refresh_from_db()
    return Response(UserSerializer(request.user).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def credits(request):
    """
    Get the balance and the full ledger history, newest first.
    """
    ledger = get_ledger()
    transactions = ledger.history(request.user.pk)
    return Response(
        {
            "credits": ledger.balance(request.user.pk),
            "transactions": CreditTransactionSerializer(transactions, many=True).data,
        }
    )


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def transformations(request):
    """
    List the user's transformations, newest first.
    """
    records = request.user.transformations.order_by("-created_at", "-id")
    return Response(TransformationSerializer(records, many=True).data)
