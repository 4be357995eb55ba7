"""Salt generation and salted SHA-512 password digests."""

from __future__ import annotations

import hashlib
import hmac
import secrets

SALT_BYTES = 16
DIGEST_HEX_LENGTH = hashlib.sha512().digest_size * 2


def generate_salt(nbytes: int = SALT_BYTES) -> bytes:
    """Return ``nbytes`` of CSPRNG output for use as a per-user salt."""
    if nbytes < SALT_BYTES:
        raise ValueError(f"Salt must be at least {SALT_BYTES} bytes, got {nbytes}")
    return secrets.token_bytes(nbytes)


def digest_password(password: str, salt: bytes) -> str:
    """Hash ``password || salt`` with SHA-512.

    Returns:
        Lowercase hex digest, always ``DIGEST_HEX_LENGTH`` characters.
        Lone surrogates (undecodable argv bytes) are hashed as-is.
    """
    return hashlib.sha512(password.encode("utf-8", "surrogatepass") + salt).hexdigest()


def digests_match(candidate: str, stored: str) -> bool:
    """Constant-time digest comparison."""
    return hmac.compare_digest(candidate.encode("utf-8"), stored.encode("utf-8"))
