from .exceptions import CapacityExceeded, MerkleTreeError, VerificationFailure
from .hashing import Hasher, Sha256Hasher, combine
from .nodes import Internal, Leaf, Node
from .tree import DEFAULT_MAX_ENTRIES, EMPTY_HASH, MerkleTree

__all__ = [
    "CapacityExceeded",
    "DEFAULT_MAX_ENTRIES",
    "EMPTY_HASH",
    "Hasher",
    "Internal",
    "Leaf",
    "MerkleTree",
    "MerkleTreeError",
    "Node",
    "Sha256Hasher",
    "VerificationFailure",
    "combine",
]
