from __future__ import annotations
import enum
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .crypto import Hasher, sha256
from .errors import MalformedProofError

logger = logging.getLogger(__name__)


class Side(str, enum.Enum):
    """Where the sibling sits relative to the node being combined."""

    LEFT = "L"
    RIGHT = "R"


@dataclass(frozen=True)
class ProofStep:
    sibling: bytes
    side: Side


def tree_depth(leaf_count: int) -> int:
    """Number of combination steps between a leaf and the root."""
    depth = 0
    width = leaf_count
    while width > 1:
        width = (width + 1) // 2
        depth += 1
    return depth


@dataclass(frozen=True)
class MerkleProof:
    """Inclusion proof for a single leaf.

    `path` runs from the leaf level up to (excluding) the root. The proof is a
    standalone value; verifying it needs only the claimed root digest.
    """

    leaf_index: int
    leaf_digest: bytes
    path: Tuple[ProofStep, ...] = ()

    @classmethod
    def from_pairs(
        cls, leaf_index: int, leaf_digest: bytes, pairs: Iterable[Tuple[bytes, str]]
    ) -> "MerkleProof":
        """Build from (sibling, 'L'|'R') pairs; unknown sides are malformed."""
        steps = []
        for sibling, side in pairs:
            try:
                steps.append(ProofStep(bytes(sibling), Side(side)))
            except (ValueError, TypeError) as e:
                raise MalformedProofError(f"invalid proof step: side={side!r}") from e
        return cls(leaf_index, bytes(leaf_digest), tuple(steps))

    def pairs(self) -> List[Tuple[bytes, str]]:
        return [(step.sibling, step.side.value) for step in self.path]

    def compute_root(self, hasher: Hasher = sha256) -> bytes:
        h = self.leaf_digest
        for step in self.path:
            if step.side == Side.LEFT:
                h = hasher(step.sibling + h)
            else:
                h = hasher(h + step.sibling)
        return h

    def verify(
        self,
        claimed_root: bytes,
        hasher: Hasher = sha256,
        leaf_count: Optional[int] = None,
    ) -> bool:
        return verify(self, claimed_root, hasher=hasher, leaf_count=leaf_count)


def _sides_match_index(proof: MerkleProof) -> bool:
    # even position -> sibling on the right, odd -> sibling on the left
    idx = proof.leaf_index
    for step in proof.path:
        expected = Side.LEFT if idx % 2 == 1 else Side.RIGHT
        if step.side != expected:
            return False
        idx //= 2
    # bits above the path length would name a leaf outside this tree
    return idx == 0


def _well_typed(proof: MerkleProof, width: int) -> bool:
    if not isinstance(proof.leaf_index, int) or isinstance(proof.leaf_index, bool):
        return False
    if proof.leaf_index < 0:
        return False
    if not isinstance(proof.leaf_digest, bytes) or len(proof.leaf_digest) != width:
        return False
    for step in proof.path:
        if not isinstance(step, ProofStep) or not isinstance(step.sibling, bytes):
            return False
        if len(step.sibling) != width or not isinstance(step.side, Side):
            return False
    return True


def verify(
    proof: MerkleProof,
    claimed_root: bytes,
    hasher: Hasher = sha256,
    leaf_count: Optional[int] = None,
) -> bool:
    """Return True iff the proof's recomputed root equals `claimed_root`.

    Tampered or ill-typed proofs yield False, as does a leaf_index with bits
    above the path length. When `leaf_count` is given, a path whose length does
    not match that tree's depth, or an index past its padded width, is rejected
    up front with MalformedProofError.
    """
    if leaf_count is not None:
        expected = tree_depth(leaf_count)
        if leaf_count < 1 or len(proof.path) != expected:
            raise MalformedProofError(
                f"proof path has {len(proof.path)} steps, tree of {leaf_count} leaves needs {expected}"
            )
        if isinstance(proof.leaf_index, int) and proof.leaf_index >= 1 << expected:
            raise MalformedProofError(
                f"leaf index {proof.leaf_index} past the padded width of a tree of {leaf_count} leaves"
            )
    if not isinstance(claimed_root, bytes):
        return False
    if not _well_typed(proof, len(claimed_root)):
        logger.debug("proof rejected: ill-typed fields for index %r", proof.leaf_index)
        return False
    if not _sides_match_index(proof):
        logger.debug("proof rejected: sides disagree with index %d", proof.leaf_index)
        return False
    return proof.compute_root(hasher) == claimed_root


def verify_block(
    block: bytes,
    proof: MerkleProof,
    claimed_root: bytes,
    hasher: Hasher = sha256,
) -> bool:
    """Verify that `block` itself (not just a digest) is included under `claimed_root`."""
    if hasher(block) != proof.leaf_digest:
        return False
    return verify(proof, claimed_root, hasher=hasher)
