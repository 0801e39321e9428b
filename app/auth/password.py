"""
Password Hashing
bcrypt through passlib; hashes from older cost settings are upgraded on login
"""

from typing import Optional

from passlib.context import CryptContext

# Password context for hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Check a login attempt against a stored hash

    Accounts without a stored hash never verify.
    """
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def rehash_if_needed(plain_password: str, hashed_password: str) -> Optional[str]:
    """New hash when the stored one uses outdated settings, else None"""
    if pwd_context.needs_update(hashed_password):
        return pwd_context.hash(plain_password)
    return None
