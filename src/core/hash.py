"""Digest helpers for fingerprints and cache keys.

xxhash64 is the default for memoization fingerprints (fast, non-cryptographic);
SHA256 is available where a stable, collision-resistant key is preferred.
"""

from typing import Protocol
from enum import Enum
import hashlib

import xxhash


class Algorithm(str, Enum):
    """Supported hash algorithms."""

    XXHASH64 = "xxhash64"  # Fast, non-cryptographic (fingerprints)
    SHA256 = "sha256"      # Collision-resistant (shared cache keys)


class Hasher(Protocol):
    """Protocol for hash implementations."""

    def digest(self, data: bytes) -> str:
        """Compute hex digest of data."""
        ...


class XXHasher:
    """Non-cryptographic 64-bit hasher."""

    def digest(self, data: bytes) -> str:
        """Compute xxhash64 hex digest."""
        return xxhash.xxh64(data).hexdigest()


class SHA256Hasher:
    """Cryptographic hasher."""

    def digest(self, data: bytes) -> str:
        """Compute SHA256 hex digest."""
        return hashlib.sha256(data).hexdigest()


_HASHERS: dict[Algorithm, Hasher] = {
    Algorithm.XXHASH64: XXHasher(),
    Algorithm.SHA256: SHA256Hasher(),
}


def create_hasher(algorithm: Algorithm = Algorithm.XXHASH64) -> Hasher:
    """
    Look up the hasher for an algorithm.

    Args:
        algorithm: Hash algorithm to use

    Returns:
        Hasher instance (shared, stateless)

    Raises:
        ValueError: If the algorithm is unknown
    """
    try:
        return _HASHERS[Algorithm(algorithm)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown algorithm: {algorithm}") from None


def hash_bytes(
    data: bytes,
    algorithm: Algorithm = Algorithm.XXHASH64,
    truncate: int | None = None,
) -> str:
    """
    Hash bytes to hex digest.

    Args:
        data: Bytes to hash
        algorithm: Hash algorithm
        truncate: Optional length to truncate digest

    Returns:
        Hex digest string
    """
    digest = create_hasher(algorithm).digest(data)
    return digest[:truncate] if truncate else digest


def hash_string(
    text: str,
    algorithm: Algorithm = Algorithm.XXHASH64,
    truncate: int | None = None,
) -> str:
    """
    Hash string to hex digest.

    Args:
        text: String to hash
        algorithm: Hash algorithm (default: xxhash64 for speed)
        truncate: Optional length to truncate digest (e.g., 16 for cache keys)

    Returns:
        Hex digest string

    Examples:
        >>> len(hash_string("test"))
        16
        >>> len(hash_string("test", Algorithm.SHA256))
        64
    """
    return hash_bytes(text.encode("utf-8"), algorithm, truncate)


def hash_fields(*fields: str, algorithm: Algorithm = Algorithm.XXHASH64) -> str:
    """
    Hash an ordered sequence of fields.

    Fields are joined with a null byte so ("ab", "c") and ("a", "bc")
    produce different digests.

    Args:
        *fields: Fields to combine and hash
        algorithm: Hash algorithm

    Returns:
        Hex digest of combined fields
    """
    return hash_string("\x00".join(fields), algorithm)


__all__ = [
    "Algorithm",
    "Hasher",
    "create_hasher",
    "hash_string",
    "hash_bytes",
    "hash_fields",
]
