from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class Leaf:
    key: str
    hash: str

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "hash": self.hash}


@dataclass(eq=False)
class Internal:
    left: "Node | None" = None
    right: "Node | None" = None
    hash: str = ""

    def add_child(self, child: "Node") -> None:
        # filled left to right
        if self.left is None:
            self.left = child
        elif self.right is None:
            self.right = child
        else:
            raise ValueError("node already has two children")

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.hash,
            "left": None if self.left is None else self.left.to_dict(),
            "right": None if self.right is None else self.right.to_dict(),
        }


Node = Internal | Leaf
