"""Credential hashing for locally stored users."""

import hashlib
import hmac

DIGEST_LENGTH = 40


def hash_password(password: str) -> str:
    """Return the stored digest for a plaintext password.

    The digest is an unsalted SHA-1 rendered as 40 lowercase hex characters.
    It matches the format already present in existing user databases; moving
    to a salted scheme requires migrating stored rows.

    Args:
        password: Plaintext secret

    Returns:
        Hex encoded digest
    """
    return hashlib.sha1(password.encode("utf-8")).hexdigest()


def verify_password(password: str, digest: str | None) -> bool:
    """Check a candidate password against a stored digest."""
    if not digest:
        return False
    return hmac.compare_digest(hash_password(password), digest.strip())
