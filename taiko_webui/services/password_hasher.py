"""bcrypt password hashing."""

import bcrypt

DEFAULT_ROUNDS = 12

# bcrypt only consumes this many bytes of input
BCRYPT_MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


class PasswordHasher:
    """Derives and verifies salted, self-describing bcrypt hashes.

    The cost factor is embedded in every hash, so raising ``rounds`` later
    only affects new hashes and existing ones keep verifying.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain-text password to hash

        Returns:
            Bcrypt hash string (``$2b$<cost>$<salt+digest>``)
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(_encode(password), salt)
        return hashed.decode("utf-8")

    def verify(self, password_hash: str, password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            password_hash: Bcrypt hash to verify against
            password: Plain-text password to check

        Returns:
            True if the password matches. False on mismatch or when the
            stored hash is unusable.
        """
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except ValueError:
            return False
