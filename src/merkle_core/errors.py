from __future__ import annotations


class MerkleError(Exception):
    """Base class for all tree and proof errors."""


class EmptyInputError(MerkleError, ValueError):
    """A tree needs at least one block."""


class IndexOutOfRangeError(MerkleError, IndexError):
    def __init__(self, index, leaf_count: int):
        super().__init__(f"leaf index {index!r} out of range [0, {leaf_count})")
        self.index = index
        self.leaf_count = leaf_count


class LeafNotFoundError(MerkleError, KeyError):
    """No leaf digest matches the requested block."""


class MalformedProofError(MerkleError, ValueError):
    """Proof is structurally invalid (rejected before hashing)."""


class UnsupportedHashError(MerkleError, ValueError):
    pass
