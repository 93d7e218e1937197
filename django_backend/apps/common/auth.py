import logging

from django.contrib.auth import get_user_model
from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from .sessions import TokenRejected, verify_token

logger = logging.getLogger(__name__)

User = get_user_model()


class BearerTokenAuthentication(BaseAuthentication):
    """
    Authenticate requests carrying ``Authorization: Bearer <token>``.

    The account behind the token is loaded on every request, so a user
    deactivated after login is locked out immediately.
    """

    keyword = "Bearer"

    def authenticate(self, request):
        auth = get_authorization_header(request).split()
        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None
        if len(auth) != 2:
            raise exceptions.AuthenticationFailed("Invalid token")

        try:
            token = auth[1].decode()
        except UnicodeError:
            raise exceptions.AuthenticationFailed("Invalid token")

        try:
            user_id = verify_token(token)
        except TokenRejected as e:
            logger.warning("Rejected bearer token: %s", e.message)
            raise exceptions.AuthenticationFailed(e.message)

        user = User.objects.filter(pk=user_id).first()
        if user is None:
            raise exceptions.AuthenticationFailed("Token is valid but user not found")
        if not user.is_active:
            raise exceptions.AuthenticationFailed("User account is deactivated")
        return user, token

    def authenticate_header(self, request):
        return self.keyword
