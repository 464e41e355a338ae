"""
app/core/security.py

Purpose: Password hashing

- One-way bcrypt hashing of new passwords
- Constant-time verification against a stored digest
"""

import bcrypt

from app.core.config import settings

# bcrypt only reads the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """
    Hashes a plaintext password with a fresh salt.

    Args:
        password: Plaintext password

    Returns:
        bcrypt digest as a str
    """
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, digest: str) -> bool:
    """
    Checks a plaintext password against a stored bcrypt digest.
    Returns False for digests that are not valid bcrypt hashes.
    """
    if not digest:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), digest.encode("utf-8"))
    except ValueError:
        return False
