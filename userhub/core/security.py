"""Password hashing and verification (bcrypt)."""
import base64
import hashlib

import bcrypt

from userhub.core.config import settings


def _to_bytes(plain_password: str) -> bytes:
    # bcrypt ignores input past 72 bytes; a base64 SHA-256 digest is 44, so every byte of the password counts
    digest = hashlib.sha256(plain_password.encode("utf-8")).digest()
    return base64.b64encode(digest)


def hash_password(plain_password: str) -> str:
    """Salted one-way hash for storage. Two calls on the same input never match."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_to_bytes(plain_password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Return True when plain_password matches hashed; mismatch and junk digests are False."""
    if not plain_password or not hashed:
        return False
    try:
        return bcrypt.checkpw(_to_bytes(plain_password), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False
