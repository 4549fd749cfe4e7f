"""Password Hasher — werkzeug-backed implementation of the PasswordHasher protocol.

Invariants:
    - hash() output embeds method and salt; verify() needs nothing else
    - verify() never raises on a malformed or missing stored hash, it returns False
"""

from werkzeug.security import check_password_hash, generate_password_hash


class WerkzeugPasswordHasher:
    def __init__(self, method: str = "scrypt"):
        self.method = method

    def hash(self, plaintext: str) -> str:
        return generate_password_hash(plaintext, method=self.method)

    def verify(self, plaintext: str, hashed: str | None) -> bool:
        if not hashed:
            return False
        try:
            return check_password_hash(hashed, plaintext)
        except ValueError:
            return False
