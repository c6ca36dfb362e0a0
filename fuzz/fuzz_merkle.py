"""Fuzz harness for tree construction & proof soundness."""
from __future__ import annotations
import atheris
import sys

with atheris.instrument_imports():
    from merkle_core.merkle import MerkleTree, Padding
    from merkle_core.proof import verify


def TestOneInput(data: bytes):  # noqa: N802
    if not data:
        return
    # Split data deterministically into blocks (bounded count)
    size = max(1, min(32, data[0]))
    blocks = [data[i : i + size] for i in range(1, min(len(data), 1 + size * 32), size)]
    if not blocks:
        return
    padding = Padding.ZERO if data[0] & 0x80 else Padding.DUPLICATE
    tree = MerkleTree.build(blocks, padding=padding)
    idx = data[-1] % len(blocks)
    proof = tree.prove_leaf(idx)
    if not verify(proof, tree.root, leaf_count=tree.leaf_count):
        raise RuntimeError("valid inclusion proof failed")
    if tree.prove_block(blocks[idx]).leaf_digest != proof.leaf_digest:
        raise RuntimeError("proof by content selected a different leaf digest")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
