from __future__ import annotations
import datetime
import logging

from .crypto import B64, ed25519_sign, jcs_dumps
from .merkle import MerkleTree
from .models import TreeHead

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def tree_head_body(head: dict) -> bytes:
    """Canonical bytes covered by a tree head signature (all fields but the signature)."""
    body = {k: v for k, v in head.items() if k != "signature_b64"}
    return jcs_dumps(body)


def make_tree_head(
    tree: MerkleTree,
    signer_sk_bytes: bytes,
    signer_pk_bytes: bytes,
    hash_alg: str = "sha256",
) -> TreeHead:
    body = {
        "tree_size": tree.leaf_count,
        "hash_alg": hash_alg,
        "padding": tree.padding.value,
        "merkle_root_b64": B64(tree.root),
        "ts": _now_iso(),
        "signer_pubkey_b64": B64(signer_pk_bytes),
    }
    sig = ed25519_sign(signer_sk_bytes, tree_head_body(body))
    logger.debug("signed tree head: size=%d root=%s", tree.leaf_count, tree.root_hex)
    return TreeHead(**{**body, "signature_b64": B64(sig)})
