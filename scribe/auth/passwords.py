"""
Password hashing.

PBKDF2-SHA256 with a random per-password salt. The stored form records
its own iteration count so a changed work factor does not strand
existing hashes.
"""

from __future__ import annotations

import asyncio
import hashlib
import secrets

ALGORITHM = "pbkdf2_sha256"


class PasswordHasher:
    """One-way salted hashing with constant-time verification."""

    def __init__(self, iterations: int = 100_000):
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self.iterations = iterations

    def _derive(self, password: str, salt: str, iterations: int) -> str:
        return hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            salt.encode("utf-8"),
            iterations=iterations,
        ).hex()

    def hash(self, password: str) -> str:
        """
        Hash a password.

        Returns: ``pbkdf2_sha256$<iterations>$<salt>$<hash>``
        """
        salt = secrets.token_hex(32)
        digest = self._derive(password, salt, self.iterations)
        return f"{ALGORITHM}${self.iterations}${salt}${digest}"

    def verify(self, password: str, password_hash: str | None) -> bool:
        """Verify a password against its hash. Malformed or missing hashes never match."""
        if not password_hash:
            return False
        try:
            algorithm, iterations, salt, stored = password_hash.split("$")
            if algorithm != ALGORITHM:
                return False
            digest = self._derive(password, salt, int(iterations))
        except (ValueError, AttributeError):
            return False
        return secrets.compare_digest(digest, stored)

    # Hashing is deliberately slow; keep it off the event loop.

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, password_hash: str | None) -> bool:
        return await asyncio.to_thread(self.verify, password, password_hash)
