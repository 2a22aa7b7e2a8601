import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import BasePermission, IsAuthenticated
from rest_framework.response import Response

from ghiblify.exceptions import AuthorizationError, NotFoundError
from ghiblify.models import User
from ghiblify.serializers import SetAdminSerializer, UpdateCreditsSerializer, UserSerializer
from ghiblify.services import get_ledger

logger = logging.getLogger(__name__)


class IsAdmin(BasePermission):
    """Allows access to users flagged `is_admin`."""

    def has_permission(self, request, view):
        if not getattr(request.user, "is_admin", False):
            raise AuthorizationError()
        return True


@api_view(["GET"])
@permission_classes([IsAuthenticated, IsAdmin])
def list_users(request):
    """
    List all users, newest first.
    """
    users = User.objects.order_by("-created_at", "-id")
    return Response(UserSerializer(users, many=True).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated, IsAdmin])
def set_admin(request):
    """
    Grant or revoke admin access.
    """
    serializer = SetAdminSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user_id = serializer.validated_data["user_id"]
    is_admin = serializer.validated_data["is_admin"]

    if not User.objects.filter(pk=user_id).update(is_admin=is_admin):
        raise NotFoundError("User not found")

    logger.info("User %s set is_admin=%s on user %s", request.user.pk, is_admin, user_id)
    return Response(UserSerializer(User.objects.get(pk=user_id)).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated, IsAdmin])
def update_credits(request):
    """
    Set a user's balance; the difference is recorded as an admin transaction.
    """
    serializer = UpdateCreditsSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user_id = serializer.validated_data["user_id"]

    get_ledger().set_balance(user_id, serializer.validated_data["credits"])

    logger.info("User %s set the balance of user %s", request.user.pk, user_id)
    return Response(UserSerializer(User.objects.get(pk=user_id)).data)
