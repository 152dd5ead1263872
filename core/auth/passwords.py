"""Password hashing (bcrypt).

Isolated behind a small class so the algorithm and its cost factor can be
swapped without touching the account service.
"""
import bcrypt

from core.config import DEFAULT_PASSWORD_WORK_FACTOR
from core.errors import CorruptHash

# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72


def _password_bytes(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


class PasswordHasher:
    """Salted one-way hash with a tunable work factor (log2 bcrypt rounds)."""

    def __init__(self, work_factor: int = DEFAULT_PASSWORD_WORK_FACTOR) -> None:
        self.work_factor = work_factor

    def hash(self, plaintext: str) -> str:
        salt = bcrypt.gensalt(rounds=self.work_factor)
        return bcrypt.hashpw(_password_bytes(plaintext), salt).decode("ascii")

    def verify(self, plaintext: str, password_hash: str) -> bool:
        """True iff plaintext matches. Raises CorruptHash only for a malformed hash."""
        if not isinstance(password_hash, str) or not password_hash:
            raise CorruptHash()
        try:
            hashed = password_hash.encode("ascii")
        except UnicodeEncodeError as e:
            raise CorruptHash() from e
        try:
            return bcrypt.checkpw(_password_bytes(plaintext), hashed)
        except ValueError as e:
            raise CorruptHash() from e
