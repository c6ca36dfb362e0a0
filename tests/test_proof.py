import dataclasses
import hashlib

import pytest

from merkle_core.errors import MalformedProofError
from merkle_core.merkle import MerkleTree
from merkle_core.proof import MerkleProof, ProofStep, Side, tree_depth, verify, verify_block


def H(b: bytes) -> bytes:
    return hashlib.sha256(b).digest()


def _flip_byte(b: bytes, pos: int) -> bytes:
    return b[:pos] + bytes([b[pos] ^ 0x01]) + b[pos + 1 :]


def _other(side: Side) -> Side:
    return Side.LEFT if side == Side.RIGHT else Side.RIGHT


def test_three_blocks_padded_slot_verifies():
    tree = MerkleTree.build([b"a", b"b", b"c"])
    hc = H(b"c")
    left = tree.levels[1][0]
    assert verify(tree.prove_leaf(2), tree.root)
    # leaf 3 is the duplicated copy of leaf 2; a hand-built proof for it holds
    dup = MerkleProof(3, hc, (ProofStep(hc, Side.LEFT), ProofStep(left, Side.LEFT)))
    assert verify(dup, tree.root)


@pytest.mark.parametrize("n", [1, 2, 3, 5, 8])
def test_flipping_leaf_byte_rejects(n):
    tree = MerkleTree.build([bytes([i]) * 4 for i in range(n)])
    for i in range(n):
        proof = tree.prove_leaf(i)
        for pos in (0, 15, 31):
            bad = dataclasses.replace(proof, leaf_digest=_flip_byte(proof.leaf_digest, pos))
            assert not verify(bad, tree.root)


@pytest.mark.parametrize("n", [2, 3, 5, 7])
def test_flipping_sibling_byte_rejects(n):
    tree = MerkleTree.build([bytes([i]) * 4 for i in range(n)])
    for i in range(n):
        proof = tree.prove_leaf(i)
        for k, step in enumerate(proof.path):
            path = list(proof.path)
            path[k] = ProofStep(_flip_byte(step.sibling, k % 32), step.side)
            bad = dataclasses.replace(proof, path=tuple(path))
            assert not verify(bad, tree.root)


@pytest.mark.parametrize("n", [2, 3, 5, 7])
def test_flipping_side_rejects(n):
    tree = MerkleTree.build([bytes([i]) * 4 for i in range(n)])
    for i in range(n):
        proof = tree.prove_leaf(i)
        for k, step in enumerate(proof.path):
            path = list(proof.path)
            path[k] = ProofStep(step.sibling, _other(step.side))
            bad = dataclasses.replace(proof, path=tuple(path))
            assert not verify(bad, tree.root)


def test_flipped_side_on_duplicated_sibling_rejects():
    # sibling == current here, so only the index/side check can catch it
    tree = MerkleTree.build([b"a", b"b", b"c"])
    proof = tree.prove_leaf(2)
    assert proof.path[0].sibling == proof.leaf_digest
    path = (ProofStep(proof.path[0].sibling, Side.LEFT),) + proof.path[1:]
    assert not verify(dataclasses.replace(proof, path=path), tree.root)


def test_wrong_root_rejects():
    tree = MerkleTree.build([b"a", b"b"])
    other = MerkleTree.build([b"a", b"c"])
    assert not verify(tree.prove_leaf(0), other.root)


def test_wrong_index_rejects():
    tree = MerkleTree.build([b"a", b"b", b"c", b"d"])
    proof = tree.prove_leaf(0)
    assert not verify(dataclasses.replace(proof, leaf_index=1), tree.root)


def test_truncated_or_extended_path_rejects():
    tree = MerkleTree.build([b"a", b"b", b"c", b"d"])
    proof = tree.prove_leaf(1)
    assert not verify(dataclasses.replace(proof, path=proof.path[:-1]), tree.root)
    extra = proof.path + (ProofStep(H(b"x"), Side.RIGHT),)
    assert not verify(dataclasses.replace(proof, path=extra), tree.root)


def test_ill_typed_proofs_return_false():
    tree = MerkleTree.build([b"a", b"b"])
    proof = tree.prove_leaf(0)
    assert not verify(dataclasses.replace(proof, leaf_digest=proof.leaf_digest[:-1]), tree.root)
    assert not verify(dataclasses.replace(proof, leaf_index=-2), tree.root)
    short = (ProofStep(proof.path[0].sibling[:16], Side.RIGHT),)
    assert not verify(dataclasses.replace(proof, path=short), tree.root)
    assert not verify(dataclasses.replace(proof, path=(ProofStep(H(b"b"), "R"),)), tree.root)
    assert not verify(proof, tree.root.hex())


def test_leaf_count_fast_reject():
    tree = MerkleTree.build([b"a", b"b", b"c", b"d", b"e"])
    proof = tree.prove_leaf(4)
    assert verify(proof, tree.root, leaf_count=5)
    with pytest.raises(MalformedProofError):
        verify(dataclasses.replace(proof, path=proof.path[:1]), tree.root, leaf_count=5)
    with pytest.raises(MalformedProofError):
        verify(proof, tree.root, leaf_count=0)


@pytest.mark.parametrize("n,depth", [(1, 0), (2, 1), (3, 2), (4, 2), (5, 3), (8, 3), (9, 4)])
def test_tree_depth(n, depth):
    assert tree_depth(n) == depth
    assert MerkleTree.build([b"x"] * n).depth == depth


def test_verify_block():
    tree = MerkleTree.build([b"tx: Alice -> Bob, amount: 10", b"tx: Eve -> Frank, amount: 30"])
    proof = tree.prove_leaf(0)
    assert verify_block(b"tx: Alice -> Bob, amount: 10", proof, tree.root)
    assert not verify_block(b"tx: Alice -> Bob, amount: 20", proof, tree.root)


def test_from_pairs_round_trip_and_bad_side():
    tree = MerkleTree.build([b"a", b"b", b"c"])
    proof = tree.prove_leaf(1)
    again = MerkleProof.from_pairs(proof.leaf_index, proof.leaf_digest, proof.pairs())
    assert again == proof
    with pytest.raises(MalformedProofError):
        MerkleProof.from_pairs(0, proof.leaf_digest, [(H(b"a"), "X")])


def test_proof_is_immutable():
    proof = MerkleTree.build([b"a"]).prove_leaf(0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        proof.leaf_index = 1  # type: ignore[misc]


def test_method_and_function_agree():
    tree = MerkleTree.build([b"a", b"b", b"c"])
    proof = tree.prove_leaf(1)
    assert proof.verify(tree.root) is verify(proof, tree.root) is True


@pytest.mark.parametrize("relabel", [5, 9, 4000001])
def test_index_bits_above_path_reject(relabel):
    # same low bits as leaf 1, so every side still matches
    tree = MerkleTree.build([b"a", b"b", b"c", b"d"])
    proof = dataclasses.replace(tree.prove_leaf(1), leaf_index=relabel)
    assert not verify(proof, tree.root)


@pytest.mark.parametrize("relabel", [4, 5, 4000001])
def test_index_past_padded_width_is_malformed(relabel):
    tree = MerkleTree.build([b"a", b"b", b"c", b"d"])
    proof = dataclasses.replace(tree.prove_leaf(1), leaf_index=relabel)
    with pytest.raises(MalformedProofError):
        verify(proof, tree.root, leaf_count=4)


def test_padded_slot_still_allowed_with_leaf_count():
    tree = MerkleTree.build([b"a", b"b", b"c"])
    hc = H(b"c")
    dup = MerkleProof(3, hc, (ProofStep(hc, Side.LEFT), ProofStep(tree.levels[1][0], Side.LEFT)))
    assert verify(dup, tree.root, leaf_count=3)


def test_single_leaf_rejects_nonzero_index():
    tree = MerkleTree.build([b"only"])
    proof = dataclasses.replace(tree.prove_leaf(0), leaf_index=1)
    assert not verify(proof, tree.root)
