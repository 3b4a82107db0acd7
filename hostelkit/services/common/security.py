# hostelkit/services/common/security.py
"""
Credential helpers for student accounts.

Provides password hashing with bcrypt, random password generation and
username derivation from a student's name and CNIC.
"""
from __future__ import annotations

import hashlib
import re
import secrets
import string
from typing import Callable

from passlib.context import CryptContext

from hostelkit.config.settings import settings
from hostelkit.core.exceptions import UsernameUnavailableError, ValidationError

_pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_BCRYPT_ROUNDS,
)

_PASSWORD_ALPHABET = string.ascii_letters + string.digits


# ------------------------------------------------------------------ #
# Password hashing
# ------------------------------------------------------------------ #

def _prepare_password_for_bcrypt(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    if len(password.encode("utf-8")) > 71:
        return hashlib.sha256(password.encode("utf-8")).hexdigest()
    return password


def hash_password(password: str) -> str:
    """
    Hash a plaintext password using bcrypt.

    Raises:
        ValidationError: If password is empty
    """
    if not password:
        raise ValidationError("Password cannot be empty", {"password": ["required"]})
    return _pwd_context.hash(_prepare_password_for_bcrypt(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return _pwd_context.verify(_prepare_password_for_bcrypt(plain_password), hashed_password)
    except ValueError:
        return False


def generate_password(length: int = settings.GENERATED_PASSWORD_LENGTH) -> str:
    """Generate a random password containing letters and digits."""
    while True:
        password = "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))
        if any(c.isalpha() for c in password) and any(c.isdigit() for c in password):
            return password


# ------------------------------------------------------------------ #
# Usernames
# ------------------------------------------------------------------ #

def base_username(full_name: str, cnic: str) -> str:
    """
    Lowercase alphanumeric first name followed by the last four CNIC digits.

    Example:
        >>> base_username("Ali Raza", "35202-1234567-1")
        'ali5671'
    """
    first = full_name.strip().split()[0] if full_name and full_name.strip() else ""
    first = re.sub(r"[^a-z0-9]", "", first.lower()) or "student"
    digits = re.sub(r"\D", "", cnic or "")
    return f"{first}{digits[-4:]}"


def derive_username(
    full_name: str,
    cnic: str,
    is_taken: Callable[[str], bool],
    max_attempts: int = settings.USERNAME_MAX_ATTEMPTS,
) -> str:
    """
    Pick the first free username: the base form, then base1, base2, ...

    Raises:
        UsernameUnavailableError: If every candidate is taken
    """
    base = base_username(full_name, cnic)
    for attempt in range(max_attempts):
        candidate = base if attempt == 0 else f"{base}{attempt}"
        if not is_taken(candidate):
            return candidate
    raise UsernameUnavailableError(base, max_attempts)
