import secrets

from werkzeug.security import generate_password_hash, check_password_hash


class PasswordHasher:
    """Salted one-way password hashing; cost is carried in ``method``."""

    def __init__(self, method: str = "scrypt"):
        self.method = method
        self._dummy_hash = None

    def hash(self, raw_password: str) -> str:
        return generate_password_hash(raw_password, method=self.method)

    def verify(self, raw_password: str, password_hash: str) -> bool:
        return check_password_hash(password_hash, raw_password)

    def verify_dummy(self, raw_password: str) -> bool:
        """Same work as ``verify`` against a hash nobody owns. Always False."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash(secrets.token_urlsafe(16))
        check_password_hash(self._dummy_hash, raw_password)
        return False


def generate_opaque_id(length: int = 32) -> str:
    """Unguessable identifier for sessions and tokens (bearer credentials)."""
    return secrets.token_urlsafe(length)
