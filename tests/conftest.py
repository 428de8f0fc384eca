from hashlib import sha256

import pytest

from merkle_tree import MerkleTree


class CountingHasher:
    """Deterministic ids (k0, k1, ...) so tests can predict keys."""

    def __init__(self) -> None:
        self.issued = 0

    def create_id(self) -> str:
        key = f"k{self.issued}"
        self.issued += 1
        return key

    def hash(self, data: str) -> str:
        return sha256(data.encode()).hexdigest()


@pytest.fixture
def hasher() -> CountingHasher:
    return CountingHasher()


@pytest.fixture
def tree(hasher: CountingHasher) -> MerkleTree:
    return MerkleTree(hasher, max_entries=64)
