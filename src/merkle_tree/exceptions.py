class MerkleTreeError(Exception):
    pass


class CapacityExceeded(MerkleTreeError):
    def __init__(self, max_entries: int) -> None:
        super().__init__(f"tree max size: {max_entries} reached.")
        self.max_entries = max_entries


class VerificationFailure(MerkleTreeError):
    """A stored hash disagrees with the recomputed one, or a key is unknown.

    ``path`` is the left/right bit path of the offending node from the root
    (``""`` is the root itself) and ``key`` the offending leaf key, when known.
    """

    def __init__(
        self, message: str, key: str | None = None, path: str | None = None
    ) -> None:
        super().__init__(message)
        self.key = key
        self.path = path
