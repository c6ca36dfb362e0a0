from __future__ import annotations
import json
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .crypto import B64, B64D
from .errors import MalformedProofError
from .proof import MerkleProof


class ProofStepModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sibling_b64: str
    side: Literal["L", "R"]


class ProofDocument(BaseModel):
    """Transport form of a MerkleProof (JSON, base64 digests).

    Strict: numbers given as strings or unknown keys are rejected rather than
    coerced, so a document either decodes to exactly one proof or fails with
    MalformedProofError.
    """

    model_config = ConfigDict(extra="forbid")

    hash_alg: str = "sha256"
    leaf_index: int = Field(ge=0, strict=True)
    leaf_digest_b64: str
    path: List[ProofStepModel] = Field(default_factory=list)
    root_b64: Optional[str] = None
    tree_size: Optional[int] = Field(default=None, ge=1, strict=True)

    @classmethod
    def from_proof(
        cls,
        proof: MerkleProof,
        hash_alg: str = "sha256",
        root: Optional[bytes] = None,
        tree_size: Optional[int] = None,
    ) -> "ProofDocument":
        return cls(
            hash_alg=hash_alg,
            leaf_index=proof.leaf_index,
            leaf_digest_b64=B64(proof.leaf_digest),
            path=[ProofStepModel(sibling_b64=B64(s), side=side) for s, side in proof.pairs()],
            root_b64=B64(root) if root is not None else None,
            tree_size=tree_size,
        )

    @classmethod
    def load(cls, raw: Union[str, bytes, Dict[str, Any]]) -> "ProofDocument":
        try:
            if isinstance(raw, (str, bytes)):
                return cls.model_validate_json(raw)
            return cls.model_validate(raw)
        except ValidationError as e:
            raise MalformedProofError(f"invalid proof document: {e.error_count()} error(s)") from e

    def to_proof(self) -> MerkleProof:
        try:
            pairs = [(B64D(step.sibling_b64), step.side) for step in self.path]
            leaf = B64D(self.leaf_digest_b64)
        except ValueError as e:
            raise MalformedProofError("proof document holds invalid base64") from e
        return MerkleProof.from_pairs(self.leaf_index, leaf, pairs)

    def root(self) -> Optional[bytes]:
        if self.root_b64 is None:
            return None
        try:
            return B64D(self.root_b64)
        except ValueError as e:
            raise MalformedProofError("proof document root is invalid base64") from e

    def dumps(self) -> str:
        return json.dumps(self.model_dump(exclude_none=True), indent=2)


class TreeHead(BaseModel):
    """Signed commitment to a tree's size and root."""

    tree_size: int
    hash_alg: str
    padding: str
    merkle_root_b64: str
    ts: str
    signer_pubkey_b64: str
    signature_b64: str
