from typing import Any, Dict, Optional, Union

from merkle_core.crypto import B64D, ed25519_verify, get_hasher, hash_name
from merkle_core.errors import MalformedProofError, UnsupportedHashError
from merkle_core.heads import tree_head_body
from merkle_core.models import ProofDocument
from merkle_core.proof import verify


def verify_tree_head(head_json: Dict[str, Any]) -> bool:
    """Return True if the tree head's Ed25519 signature is valid.

    The signature covers the RFC 8785 canonical JSON of every field except
    signature_b64, so the root, size, hash algorithm and padding rule are all
    bound to the signer's key.
    """
    try:
        sig_b64 = head_json["signature_b64"]
        pub_b64 = head_json["signer_pubkey_b64"]
    except (KeyError, TypeError):
        return False
    try:
        return ed25519_verify(B64D(pub_b64), tree_head_body(head_json), B64D(sig_b64))
    except ValueError:
        return False


def verify_proof_document(
    doc: Union[str, bytes, Dict[str, Any]], root_b64: Optional[str] = None
) -> bool:
    """Verify a JSON proof document against `root_b64` (or the root it carries).

    Holders of only the root can call this; no tree is needed.
    """
    try:
        pd = ProofDocument.load(doc)
        proof = pd.to_proof()
        root = B64D(root_b64) if root_b64 is not None else pd.root()
        if root is None:
            return False
        hasher = get_hasher(pd.hash_alg)
        return verify(proof, root, hasher=hasher, leaf_count=pd.tree_size)
    except (MalformedProofError, UnsupportedHashError, ValueError):
        return False


def verify_inclusion(
    proof_json: Union[str, bytes, Dict[str, Any]], head_json: Dict[str, Any]
) -> bool:
    """Verify a proof against the root of a signed tree head.

    The head signature is checked first; the proof must use the head's hash
    algorithm and have the path length of a tree with `tree_size` leaves.
    """
    if not verify_tree_head(head_json):
        return False
    try:
        pd = ProofDocument.load(proof_json)
        if hash_name(pd.hash_alg) != hash_name(str(head_json.get("hash_alg", ""))):
            return False
        return verify(
            pd.to_proof(),
            B64D(head_json["merkle_root_b64"]),
            hasher=get_hasher(pd.hash_alg),
            leaf_count=int(head_json["tree_size"]),
        )
    except (MalformedProofError, UnsupportedHashError, ValueError, KeyError, TypeError):
        return False
