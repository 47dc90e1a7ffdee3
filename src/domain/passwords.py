"""
Password hashing - bcrypt with per-call random salt.

bcrypt comparison is constant-time and dominates request latency,
which masks timing differences in the surrounding logic.

bcrypt only reads the first 72 bytes of a password. Longer inputs are
truncated to that limit on every path (hash, verify and burn), so a long
password behaves the same whether or not the account exists.
"""

from dataclasses import dataclass, field

import bcrypt

BCRYPT_MAX_BYTES = 72


def _secret(password: str) -> bytes:
    return password.encode()[:BCRYPT_MAX_BYTES]


@dataclass
class PasswordHasher:
    """One-way adaptive password hasher."""

    cost: int = 10
    _dummy_hash: bytes = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.cost < 4 or self.cost > 31:
            raise ValueError(f"bcrypt cost out of range: {self.cost}")
        # Compared against when no stored hash exists, so lookups that miss
        # still pay for one full bcrypt round.
        self._dummy_hash = bcrypt.hashpw(
            b"dummy_password_for_timing_safety", bcrypt.gensalt(self.cost)
        )

    def hash(self, password: str) -> str:
        """Hash a plaintext password with a fresh salt."""
        return bcrypt.hashpw(_secret(password), bcrypt.gensalt(rounds=self.cost)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored bcrypt hash."""
        try:
            return bcrypt.checkpw(_secret(password), password_hash.encode())
        except ValueError:
            # Malformed stored hash never matches
            return False

    def burn(self, password: str) -> None:
        """Spend the same time as verify() without a real hash to compare."""
        bcrypt.checkpw(_secret(password), self._dummy_hash)
