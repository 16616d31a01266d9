# cg_core/iam/openapi.py
from django.conf import settings
from drf_spectacular.extensions import OpenApiAuthenticationExtension


class CookieOrHeaderJWTAuthenticationScheme(OpenApiAuthenticationExtension):
    """
    Schema entry for CookieOrHeaderJWTAuthentication. Listed under
    SPECTACULAR_SETTINGS["SECURITY"] as "BearerOrCookieJWT".
    """
    target_class = "cg_core.iam.auth.CookieOrHeaderJWTAuthentication"
    name = "BearerOrCookieJWT"

    def get_security_definition(self, auto_schema):
        cookie = settings.SIMPLE_JWT.get("AUTH_COOKIE", "cg_access")
        return {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": (
                f"Access token from POST /auth/login/. Send it as `Authorization: Bearer <token>`; "
                f"browsers get it in the HttpOnly `{cookie}` cookie, which is accepted as well."
            ),
        }
