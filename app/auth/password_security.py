from typing import Optional, Tuple

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> Tuple[bool, Optional[str]]:
    """
    Check a password against its stored Argon2 hash.

    Returns ``(matches, new_hash)``; ``new_hash`` is set when the stored hash
    uses outdated parameters and should be replaced.
    """
    return pwd_context.verify_and_update(plain_password, hashed_password)
