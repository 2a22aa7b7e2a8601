import logging

from django.contrib.auth import authenticate
from django_ratelimit.decorators import ratelimit
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from ghiblify.exceptions import AuthenticationError
from ghiblify.models import User
from ghiblify.serializers import LoginSerializer, RegisterSerializer, UserSerializer

logger = logging.getLogger(__name__)


def _token_payload(user):
    refresh = RefreshToken.for_user(user)
    return {
        "token": str(refresh.access_token),
        "refresh": str(refresh),
        "user": UserSerializer(user).data,
    }


@api_view(["POST"])
@permission_classes([AllowAny])
@ratelimit(group="auth_register", key="ip", rate="5/m", block=True)
def register(request):
    """
    Create an account with email and password.

    The new account starts with one credit.
    """
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    user = User.objects.create_user(
        data["email"],
        data["password"],
        instagram_username=data.get("instagram_username"),
    )

    return Response(_token_payload(user), status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([AllowAny])
@ratelimit(group="auth_login", key="ip", rate="10/m", block=True)
def login(request):
    """
    Exchange email and password for a JWT pair.
    """
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = authenticate(
        request,
        username=serializer.validated_data["email"],
        password=serializer.validated_data["password"],
    )
    if user is None:
        logger.info("Failed login for %s", serializer.validated_data["email"])
        raise AuthenticationError()

    return Response(_token_payload(user))


@api_view(["POST"])
@permission_classes([AllowAny])
def refresh_token(request):
    """
    Exchange a refresh token for a new access token.
    """
    serializer = TokenRefreshSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return Response({"token": serializer.validated_data["access"]})
