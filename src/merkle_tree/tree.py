from typing import Any, cast
import logging

from .exceptions import CapacityExceeded, VerificationFailure
from .hashing import Hasher, Sha256Hasher, combine
from .nodes import Internal, Leaf, Node

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 65536
EMPTY_HASH = ""


class MerkleTree:
    """Append-only binary Merkle tree.

    Leaf ``n`` (0-based insertion order) is placed by reading the binary
    representation of ``n`` as a left/right path from the root and hanging the
    leaf under the node at the end of that path. The first leaf hangs directly
    under a fresh root. Whenever the leaf count reaches a power of two the tree
    is full and the next append puts a new root on top, with the old root as
    its left child.
    """

    def __init__(
        self, hasher: Hasher | None = None, max_entries: int = DEFAULT_MAX_ENTRIES
    ) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self.hasher: Hasher = hasher if hasher is not None else Sha256Hasher()
        self.max_entries = max_entries
        self._root: Internal | None = None
        self._leaf_count = 0
        self._leaf_index: dict[str, Leaf] = {}

    @property
    def root(self) -> Internal | None:
        return self._root

    def append(self, entry: str) -> str:
        if self._leaf_count >= self.max_entries:
            logger.warning(f"Rejected append, tree holds {self._leaf_count} entries")
            raise CapacityExceeded(self.max_entries)

        leaf = Leaf(self.hasher.create_id(), self.hasher.hash(entry))

        path = self.calc_path(self._leaf_count)
        self._build_path(path)
        parents = self._walk(path)
        parents[-1].add_child(leaf)

        self._leaf_index[leaf.key] = leaf
        self._leaf_count += 1

        self._rehash(parents)
        logger.debug(f"Appended leaf {leaf.key} at path {path!r}")
        return leaf.key

    def load_random_entries(self, number_of_entries: int) -> list[str]:
        return [
            self.append(self.hasher.create_id()) for _ in range(number_of_entries)
        ]

    @staticmethod
    def calc_path(leaves: int) -> str:
        if leaves == 0:
            return ""
        return format(leaves, "b")

    def _tree_is_full(self) -> bool:
        n = self._leaf_count
        return n != 0 and n & (n - 1) == 0

    def _build_path(self, path: str) -> None:
        if self._root is None:
            self._root = Internal()
            return

        if self._tree_is_full():
            self._root = Internal(left=self._root)
            logger.debug(f"Tree full at {self._leaf_count} leaves, new root added")

        parent = self._root
        for bit in path:
            child = parent.left if bit == "0" else parent.right
            if child is None:
                child = Internal()
                parent.add_child(child)
            parent = cast(Internal, child)

    def _walk(self, path: str) -> list[Internal]:
        node = cast(Internal, self._root)
        nodes = [node]
        for bit in path:
            node = cast(Internal, node.left if bit == "0" else node.right)
            nodes.append(node)
        return nodes

    def _rehash(self, nodes: list[Internal]) -> None:
        for node in reversed(nodes):
            left = cast(Node, node.left)
            right = None if node.right is None else node.right.hash
            node.hash = combine(self.hasher, left.hash, right)

    def verify(self, key: str | None = None, entry: str | None = None) -> None:
        """Raise :class:`VerificationFailure` unless the tree checks out.

        Without arguments every internal hash is recomputed from the leaves
        and compared to the stored one, failing on the first mismatch. With a
        ``key`` and an ``entry`` only that leaf is checked against the hash of
        ``entry``.
        """
        if key is None and entry is None:
            self._verify_tree()
        elif key is not None and entry is not None:
            self._verify_entry(key, entry)
        else:
            raise TypeError("verify() takes either no arguments or both key and entry")

    def _verify_entry(self, key: str, entry: str) -> None:
        leaf = self._leaf_index.get(key)
        if leaf is None:
            logger.warning(f"Verification failed, unknown key {key}")
            raise VerificationFailure(f"no entry for key {key}", key=key)
        if self.hasher.hash(entry) != leaf.hash:
            logger.warning(f"Verification failed, entry mismatch for key {key}")
            raise VerificationFailure(f"entry does not match key {key}", key=key)

    def _verify_tree(self) -> None:
        indexed = len(self._leaf_index)
        if indexed != self._leaf_count:
            logger.warning(
                f"Verification failed, {indexed} keys indexed for {self._leaf_count} leaves"
            )
            raise VerificationFailure(
                f"index holds {indexed} keys, expected {self._leaf_count}"
            )
        if self._root is None:
            return
        _, seen = self._verify_node(self._root, "")
        if seen != self._leaf_count:
            logger.warning(
                f"Verification failed, {seen} leaves in a tree of {self._leaf_count}"
            )
            raise VerificationFailure(
                f"found {seen} leaves, expected {self._leaf_count}", path=""
            )

    def _verify_node(self, node: Node, path: str) -> tuple[str, int]:
        match node:
            case Leaf(key=key, hash=leaf_hash):
                if self._leaf_index.get(key) is not node:
                    logger.warning(f"Verification failed, unindexed leaf at {path!r}")
                    raise VerificationFailure(
                        f"leaf {key} at path {path!r} is not indexed",
                        key=key,
                        path=path,
                    )
                return leaf_hash, 1
            case Internal(left=None):
                logger.warning(f"Verification failed, childless node at {path!r}")
                raise VerificationFailure(
                    f"internal node at path {path!r} has no children", path=path
                )
            case Internal(left=left, right=right, hash=stored):
                left_hash, seen = self._verify_node(left, path + "0")
                right_hash = None
                if right is not None:
                    right_hash, right_seen = self._verify_node(right, path + "1")
                    seen += right_seen
                if combine(self.hasher, left_hash, right_hash) != stored:
                    logger.warning(f"Verification failed, hash mismatch at {path!r}")
                    raise VerificationFailure(
                        f"hash mismatch at path {path!r}", path=path
                    )
                return stored, seen
        raise TypeError(f"not a tree node: {node!r}")

    def clear(self) -> None:
        self._root = None
        self._leaf_count = 0
        self._leaf_index = {}
        logger.info("Tree cleared")

    def leaves(self) -> int:
        return self._leaf_count

    def get(self, key: str) -> Leaf | None:
        return self._leaf_index.get(key)

    def get_hash(self) -> str:
        if self._root is None:
            return EMPTY_HASH
        return self._root.hash

    def height(self) -> int:
        if self._leaf_count == 0:
            return 0
        # ceil(log2(n)) without floating point
        return (self._leaf_count - 1).bit_length()

    def to_dict(self, include_root: bool = False) -> dict[str, Any]:
        summary: dict[str, Any] = {
            "hash": self.get_hash(),
            "leaves": self.leaves(),
            "height": self.height(),
        }
        if include_root:
            summary["root"] = None if self._root is None else self._root.to_dict()
        return summary
