from hashlib import sha256
from typing import Protocol
import secrets


class Hasher(Protocol):
    def create_id(self) -> str: ...

    def hash(self, data: str) -> str: ...


class Sha256Hasher:
    def create_id(self) -> str:
        return secrets.token_hex(16)

    def hash(self, data: str) -> str:
        return sha256(data.encode()).hexdigest()


def combine(hasher: Hasher, left: str, right: str | None = None) -> str:
    """Parent hash of one or two child hashes.

    A lone left child is hashed on its own, a pair is hashed concatenated.
    """
    if right is None:
        return hasher.hash(left)
    return hasher.hash(left + right)
