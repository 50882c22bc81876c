"""
capopt_platform.auth.passwords

Password hashing for stored credentials.

Responsibilities:
- Hash new passwords with werkzeug's salted PBKDF2/scrypt scheme.
- Verify a login attempt against the stored hash.
"""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


# --- Module Notes -----------------------------------------------------------
# The hash string carries its own method and salt, so changing werkzeug's default
# method later keeps existing hashes verifiable.
