"""
Bearer token issuing and verification.

Tokens are simplejwt access tokens: HS256-signed, carrying the user id
claim, issue time and a fixed expiry (``SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"]``,
seven days by default). Nothing is stored server side, so a token stays
valid until it expires; account state is re-checked on every request by
``apps.common.auth.BearerTokenAuthentication``.
"""
import jwt
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken


class TokenRejected(Exception):
    """Base class for tokens that must not authenticate a request."""

    message = "Invalid token"


class TokenExpired(TokenRejected):
    message = "Token expired"


class TokenMalformed(TokenRejected):
    message = "Invalid token"


def issue_token(user) -> str:
    """Issue a signed access token whose subject is ``user``."""
    return str(AccessToken.for_user(user))


def verify_token(token: str):
    """Return the user id carried by ``token``.

    Raises ``TokenExpired`` once the expiry has passed and ``TokenMalformed``
    when the signature, structure or claims are wrong.
    """
    if not token:
        raise TokenMalformed()
    try:
        payload = jwt.decode(
            token,
            api_settings.VERIFYING_KEY or api_settings.SIGNING_KEY,
            algorithms=[api_settings.ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpired() from exc
    except jwt.InvalidTokenError as exc:
        raise TokenMalformed() from exc

    if payload.get(api_settings.TOKEN_TYPE_CLAIM) != AccessToken.token_type:
        raise TokenMalformed()
    user_id = payload.get(api_settings.USER_ID_CLAIM)
    if user_id is None:
        raise TokenMalformed()
    return user_id
