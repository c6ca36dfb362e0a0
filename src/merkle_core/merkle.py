from __future__ import annotations
import enum
import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .crypto import Hasher, hexd, sha256
from .errors import EmptyInputError, IndexOutOfRangeError, LeafNotFoundError
from .proof import MerkleProof, ProofStep, Side, verify as verify_proof

logger = logging.getLogger(__name__)

Level = Tuple[bytes, ...]


class Padding(str, enum.Enum):
    """What the last node of an odd-sized level is paired with."""

    DUPLICATE = "duplicate"  # the node itself
    ZERO = "zero"  # an all-zero digest of hasher width


@dataclass(frozen=True)
class MerkleTree:
    levels: Tuple[Level, ...]  # level 0 = leaves, last = (root,)
    hasher: Hasher = sha256
    padding: Padding = Padding.DUPLICATE

    @classmethod
    def build(
        cls,
        blocks: Sequence[bytes],
        hasher: Hasher = sha256,
        padding: Padding = Padding.DUPLICATE,
    ) -> "MerkleTree":
        """Hash each block into a leaf and build the tree over them."""
        if not blocks:
            raise EmptyInputError("cannot build a tree from zero blocks")
        return cls.from_leaves([hasher(b) for b in blocks], hasher, padding)

    @classmethod
    def from_leaves(
        cls,
        leaves: Sequence[bytes],
        hasher: Hasher = sha256,
        padding: Padding = Padding.DUPLICATE,
    ) -> "MerkleTree":
        if not leaves:
            raise EmptyInputError("no leaves")
        padding = Padding(padding)
        lvl: List[bytes] = list(leaves)
        levels = [tuple(lvl)]
        while len(lvl) > 1:
            nxt = []
            for i in range(0, len(lvl), 2):
                a = lvl[i]
                if i + 1 < len(lvl):
                    b = lvl[i + 1]
                else:
                    b = a if padding is Padding.DUPLICATE else bytes(len(a))
                nxt.append(hasher(a + b))
            levels.append(tuple(nxt))
            lvl = nxt
        logger.debug(
            "built merkle tree: leaves=%d depth=%d padding=%s",
            len(leaves), len(levels) - 1, padding.value,
        )
        return cls(tuple(levels), hasher, padding)

    @property
    def root(self) -> bytes:
        return self.levels[-1][0]

    @property
    def root_hex(self) -> str:
        return hexd(self.root)

    @property
    def leaves(self) -> Level:
        return self.levels[0]

    @property
    def leaf_count(self) -> int:
        return len(self.levels[0])

    @property
    def depth(self) -> int:
        return len(self.levels) - 1

    def _check_index(self, index) -> None:
        if (
            not isinstance(index, int)
            or isinstance(index, bool)
            or not 0 <= index < self.leaf_count
        ):
            raise IndexOutOfRangeError(index, self.leaf_count)

    def _padding_for(self, node: bytes) -> bytes:
        if self.padding is Padding.DUPLICATE:
            return node
        return bytes(len(node))

    def prove_leaf(self, index: int) -> MerkleProof:
        """Collect (sibling, side) pairs from leaf `index` up to the root."""
        self._check_index(index)
        path = []
        idx = index
        for level in self.levels[:-1]:
            is_right = idx % 2 == 1
            sibling_idx = idx - 1 if is_right else idx + 1
            if sibling_idx >= len(level):
                sibling = self._padding_for(level[idx])
            else:
                sibling = level[sibling_idx]
            path.append(ProofStep(sibling, Side.LEFT if is_right else Side.RIGHT))
            idx //= 2
        return MerkleProof(index, self.levels[0][index], tuple(path))

    def index_of(self, block: bytes) -> int:
        """Index of the first leaf whose digest is H(block)."""
        target = self.hasher(block)
        for i, leaf in enumerate(self.levels[0]):
            if leaf == target:
                return i
        raise LeafNotFoundError("block is not a leaf of this tree")

    def prove_block(self, block: bytes) -> MerkleProof:
        return self.prove_leaf(self.index_of(block))

    def verify(self, proof: MerkleProof) -> bool:
        """Check `proof` against this tree's own root and shape."""
        return verify_proof(proof, self.root, hasher=self.hasher, leaf_count=self.leaf_count)
