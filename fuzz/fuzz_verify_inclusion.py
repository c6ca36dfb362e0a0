"""Inclusion proof fuzzing with mutated proofs (digests and side flags)."""
from __future__ import annotations
import atheris
import sys
import dataclasses
import random

with atheris.instrument_imports():
    from merkle_core.merkle import MerkleTree
    from merkle_core.proof import ProofStep, Side, verify


def _flip(b: bytes, pos: int) -> bytes:
    pos %= len(b)
    return b[:pos] + bytes([b[pos] ^ 0x01]) + b[pos + 1 :]


def TestOneInput(data: bytes):  # noqa: N802
    if len(data) < 8:
        return
    seed = int.from_bytes(data[:4], "little")
    random.seed(seed)
    chunk_len = 1 + (data[4] % 32)
    body = data[5:]
    blocks = [body[i : i + chunk_len] for i in range(0, min(len(body), chunk_len * 16), chunk_len)]
    if len(blocks) < 2:
        return
    tree = MerkleTree.build(blocks)
    idx = seed % len(blocks)
    proof = tree.prove_leaf(idx)
    if not verify(proof, tree.root):
        raise RuntimeError("valid proof failed")

    path = list(proof.path)
    choice = random.randrange(3)
    if choice == 0:
        tampered = dataclasses.replace(proof, leaf_digest=_flip(proof.leaf_digest, seed))
    else:
        k = random.randrange(len(path))
        step = path[k]
        if choice == 1:
            path[k] = ProofStep(_flip(step.sibling, seed >> 8), step.side)
        else:
            other = Side.LEFT if step.side == Side.RIGHT else Side.RIGHT
            path[k] = ProofStep(step.sibling, other)
        tampered = dataclasses.replace(proof, path=tuple(path))
    if verify(tampered, tree.root):
        raise RuntimeError("tampered proof unexpectedly verified")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
