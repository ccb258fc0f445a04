from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication


class CookieJWTAuthentication(JWTAuthentication):
    """
    JWT authentication that reads the access token from the
    `JWT_AUTH_COOKIE` cookie first and falls back to the
    `Authorization: Bearer` header.

    Identity is resolved here and nowhere else; the swap services only
    ever see the resulting user wrapped in an `Actor`.
    """

    def authenticate(self, request):
        access_token = request.COOKIES.get(settings.JWT_AUTH_COOKIE)
        if not access_token:
            return super().authenticate(request)

        validated_token = self.get_validated_token(access_token)
        return self.get_user(validated_token), validated_token
