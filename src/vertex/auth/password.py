"""
argon2id password hashing for Vertex accounts.

Hashes embed their own salt and parameters, so a hash produced under older
settings still verifies and ``verify_and_update`` hands back a fresh hash to
store in its place.
"""

from __future__ import annotations

import argon2

MAX_PASSWORD_LENGTH = 128

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # 64 MB
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,
)


class PasswordStrengthError(ValueError):
    """The new password is blank, too short or too long."""


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """True on a match; False for a wrong password or an unreadable hash."""
    try:
        return _hasher.verify(password_hash, password)
    except (argon2.exceptions.VerificationError, argon2.exceptions.InvalidHashError):
        return False


def check_needs_rehash(password_hash: str) -> bool:
    return _hasher.check_needs_rehash(password_hash)


def verify_and_update(password: str, password_hash: str) -> tuple[bool, str | None]:
    """
    Verify a login attempt.

    Returns ``(matched, new_hash)``. ``new_hash`` is set only when the password
    matched and the stored hash was made with outdated parameters.
    """
    if not verify_password(password, password_hash):
        return False, None
    if check_needs_rehash(password_hash):
        return True, hash_password(password)
    return True, None


def validate_password_strength(password: str, min_length: int = 6) -> None:
    """Raises PasswordStrengthError unless ``min_length <= len(password) <= 128``."""
    if not password or not password.strip():
        msg = "Password cannot be empty"
        raise PasswordStrengthError(msg)
    if len(password) < min_length:
        msg = f"Password must be at least {min_length} characters"
        raise PasswordStrengthError(msg)
    if len(password) > MAX_PASSWORD_LENGTH:
        msg = f"Password must not exceed {MAX_PASSWORD_LENGTH} characters"
        raise PasswordStrengthError(msg)
