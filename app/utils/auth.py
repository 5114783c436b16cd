from typing import Optional, Tuple

from passlib.context import CryptContext

# pbkdf2_sha256 for new hashes. hex_sha256 is what the old key/value store kept
# (unsalted SHA-256 hex); it still verifies but is flagged for replacement.
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256", "hex_sha256"],
    default="pbkdf2_sha256",
    deprecated=["hex_sha256"],
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Stored value is not a hash any configured scheme recognizes
        return False


def verify_and_update(plain_password: str, hashed_password: str) -> Tuple[bool, Optional[str]]:
    """
    Verify a password and, when the stored hash uses a deprecated scheme,
    return the replacement hash to persist.
    """
    if not plain_password or not hashed_password:
        return False, None
    try:
        return pwd_context.verify_and_update(plain_password, hashed_password)
    except ValueError:
        return False, None
