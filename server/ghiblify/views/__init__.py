from ghiblify.views.admin import list_users, set_admin, update_credits
from ghiblify.views.api_root import api_root
from ghiblify.views.auth import login, refresh_token, register
from ghiblify.views.health import health_check
from ghiblify.views.payment import create_order, list_credit_packs, verify_payment
from ghiblify.views.transform import submit_transformation, transformation_status
from ghiblify.views.user import credits, me, transformations, verify_instagram

__all__ = [
    "api_root",
    "create_order",
    "credits",
    "health_check",
    "list_credit_packs",
    "list_users",
    "login",
    "me",
    "refresh_token",
    "register",
    "set_admin",
    "submit_transformation",
    "transformation_status",
    "transformations",
    "update_credits",
    "verify_instagram",
    "verify_payment",
]
