from django.contrib import admin
from django.urls import path
from drf_spectacular.views import SpectacularAPIView

from ghiblify import views

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", views.api_root, name="api_root"),
    path("api/schema", SpectacularAPIView.as_view(), name="schema"),
    path("api/health", views.health_check, name="health_check"),

    # Auth
    path("api/auth/register", views.register, name="auth_register"),
    path("api/auth/login", views.login, name="auth_login"),
    path("api/auth/refresh", views.refresh_token, name="auth_refresh"),

    # User
    path("api/user/me", views.me, name="user_me"),
    path("api/user/verify-instagram", views.verify_instagram, name="user_verify_instagram"),
    path("api/user/credits", views.credits, name="user_credits"),
    path("api/user/transformations", views.transformations, name="user_transformations"),

    # Transformations
    path("api/transform", views.submit_transformation, name="transform"),
    path("api/transform/<str:remote_job_id>", views.transformation_status, name="transform_status"),

    # Payments
    path("api/credits/packs", views.list_credit_packs, name="credit_packs"),
    path("api/create-order", views.create_order, name="create_order"),
    path("api/verify-payment", views.verify_payment, name="verify_payment"),

    # Admin API
    path("api/admin/users", views.list_users, name="admin_users"),
    path("api/admin/set-admin", views.set_admin, name="admin_set_admin"),
    path("api/admin/update-credits", views.update_credits, name="admin_update_credits"),
]
