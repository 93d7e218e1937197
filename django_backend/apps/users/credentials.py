"""
Password hashing and verification.

Digests are produced by the first entry of ``settings.PASSWORD_HASHERS``
(bcrypt-SHA256 with 12 rounds in deployment). Every call draws a fresh salt,
so hashing the same plaintext twice yields two different digests.
"""
from django.contrib.auth.hashers import check_password, is_password_usable, make_password

MIN_PASSWORD_LENGTH = 6


def hash_password(plaintext: str) -> str:
    """Hash a plaintext password with a random salt."""
    return make_password(plaintext)


def verify_password(plaintext: str, digest: str) -> bool:
    """Compare a plaintext password against a stored digest in constant time."""
    if not plaintext or not digest or not is_password_usable(digest):
        return False
    return check_password(plaintext, digest)


def burn_hash_cycle(plaintext: str) -> None:
    """Spend one hashing round so a missing account costs as much as a wrong password."""
    make_password(plaintext or "")
