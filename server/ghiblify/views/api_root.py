from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.reverse import reverse


@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request, format=None):
    """
    API root endpoint to make the browsable API navigable.
    """
    return Response(
        {
            "health": reverse("health_check", request=request, format=format),
            "schema": reverse("schema", request=request, format=format),
            "auth_register": reverse("auth_register", request=request, format=format),
            "auth_login": reverse("auth_login", request=request, format=format),
            "auth_refresh": reverse("auth_refresh", request=request, format=format),
            "user_me": reverse("user_me", request=request, format=format),
            "user_credits": reverse("user_credits", request=request, format=format),
            "user_transformations": reverse("user_transformations", request=request, format=format),
            "user_verify_instagram": reverse("user_verify_instagram", request=request, format=format),
            "credits_packs": reverse("credit_packs", request=request, format=format),
            "create_order": reverse("create_order", request=request, format=format),
            "verify_payment": reverse("verify_payment", request=request, format=format),
            "transform": reverse("transform", request=request, format=format),
            "transform_status_template": "/api/transform/{id}",
        }
    )
