from __future__ import annotations
import json
import logging
import pathlib
import string
from typing import List, Optional

import typer
from rich import print

from merkle_core.crypto import B64, B64D, ed25519_generate, get_hasher, unhex
from merkle_core.errors import MerkleError
from merkle_core.heads import make_tree_head
from merkle_core.logutil import setup_logging
from merkle_core.merkle import MerkleTree, Padding
from merkle_core.models import ProofDocument
from merkle_core.proof import verify, verify_block
from merkle_core.settings import settings
from merkle_sdk.verify import verify_inclusion as sdk_verify_inclusion
from merkle_sdk.verify import verify_tree_head

app = typer.Typer(add_completion=False, no_args_is_help=True)
logger = logging.getLogger("merkle_cli")


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, help="Logging level"),
):
    setup_logging(log_level)


def _fail(msg: str) -> None:
    print(f"[red]{msg}[/red]")
    raise typer.Exit(code=1)


def _read_block(path: pathlib.Path) -> bytes:
    if not path.is_file():
        _fail(f"Not a file: {path}")
    size = path.stat().st_size
    if size > settings.max_block_bytes:
        _fail(f"{path} is {size} bytes; limit is {settings.max_block_bytes}")
    return path.read_bytes()


def _read_text(path: pathlib.Path) -> str:
    try:
        return path.read_text()
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Cannot read {path}: {e.__class__.__name__}")


def _read_json(path: pathlib.Path) -> dict:
    try:
        obj = json.loads(_read_text(path))
    except ValueError:
        _fail(f"Not valid JSON: {path}")
    if not isinstance(obj, dict):
        _fail(f"Not a JSON object: {path}")
    return obj


def _load_blocks(files: List[pathlib.Path], lines: bool) -> List[bytes]:
    if lines:
        if len(files) != 1:
            _fail("--lines takes exactly one file")
        blocks = _read_block(files[0]).splitlines()
    else:
        blocks = [_read_block(p) for p in files]
    logger.debug("loaded %d blocks", len(blocks))
    return blocks


def _build(files: List[pathlib.Path], lines: bool, hash_alg: str, padding: str) -> MerkleTree:
    try:
        hasher = get_hasher(hash_alg)
        return MerkleTree.build(_load_blocks(files, lines), hasher, Padding(padding))
    except MerkleError as e:
        _fail(str(e))
    except ValueError:
        _fail(f"Unknown padding rule: {padding} (choose duplicate or zero)")


def _parse_digest(s: str) -> bytes:
    """Accept a digest as hex or base64."""
    s = s.strip()
    if len(s) % 2 == 0 and all(c in string.hexdigits for c in s):
        return unhex(s)
    try:
        return B64D(s)
    except ValueError:
        raise typer.BadParameter("root must be hex or base64")


_FILES = typer.Argument(..., help="Block files, in order")
_LINES = typer.Option(False, "--lines", help="Treat each line of a single file as a block")
_HASH = typer.Option(settings.hash_alg, help="hashlib algorithm name")
_PAD = typer.Option(settings.padding, help="Odd-level padding: duplicate|zero")


@app.command()
def build(
    files: List[pathlib.Path] = _FILES,
    lines: bool = _LINES,
    hash_alg: str = _HASH,
    padding: str = _PAD,
    out: Optional[pathlib.Path] = typer.Option(None, help="Write a JSON summary here"),
):
    """Build a tree over the blocks and print its root."""
    tree = _build(files, lines, hash_alg, padding)
    summary = {
        "leaf_count": tree.leaf_count,
        "depth": tree.depth,
        "hash_alg": hash_alg,
        "padding": tree.padding.value,
        "root_hex": tree.root_hex,
        "root_b64": B64(tree.root),
    }
    if out is not None:
        out.write_text(json.dumps(summary, indent=2))
        print(f"[green]Wrote tree summary to {out}[/green]")
    print(f"[cyan]Leaves[/cyan]: {tree.leaf_count}")
    print(f"[cyan]Root[/cyan]: {tree.root_hex}")


@app.command()
def prove(
    files: List[pathlib.Path] = _FILES,
    lines: bool = _LINES,
    hash_alg: str = _HASH,
    padding: str = _PAD,
    index: Optional[int] = typer.Option(None, help="Leaf index to prove"),
    block_file: Optional[pathlib.Path] = typer.Option(
        None, help="Prove the first leaf matching this file's content"
    ),
    out: pathlib.Path = typer.Option(pathlib.Path("proof.json"), help="Proof output path"),
):
    """Write an inclusion proof for one leaf."""
    if (index is None) == (block_file is None):
        raise typer.BadParameter("give exactly one of --index or --block-file")
    tree = _build(files, lines, hash_alg, padding)
    try:
        if index is not None:
            proof = tree.prove_leaf(index)
        else:
            proof = tree.prove_block(_read_block(block_file))
    except MerkleError as e:
        _fail(str(e))
    doc = ProofDocument.from_proof(proof, hash_alg, root=tree.root, tree_size=tree.leaf_count)
    out.write_text(doc.dumps())
    print(f"[green]Wrote proof for leaf {proof.leaf_index} to {out}[/green]")


@app.command("verify")
def verify_cmd(
    proof_path: pathlib.Path = typer.Argument(..., help="Proof JSON"),
    root: Optional[str] = typer.Option(None, help="Claimed root (hex or base64); defaults to the proof's own"),
    block_file: Optional[pathlib.Path] = typer.Option(
        None, help="Also check that the proven leaf is this file's content"
    ),
):
    """Verify a proof against a claimed root."""
    try:
        doc = ProofDocument.load(_read_text(proof_path))
        proof = doc.to_proof()
        claimed = _parse_digest(root) if root is not None else doc.root()
        if claimed is None:
            _fail("No root given and the proof carries none")
        hasher = get_hasher(doc.hash_alg)
        if block_file is not None:
            ok = verify_block(_read_block(block_file), proof, claimed, hasher)
        else:
            ok = verify(proof, claimed, hasher=hasher, leaf_count=doc.tree_size)
    except MerkleError as e:
        _fail(f"Malformed proof: {e}")
    print({"proof_valid": ok})
    if not ok:
        raise typer.Exit(code=1)


def _load_keys():
    sk_path = pathlib.Path(settings.signing_key_path)
    pk_path = pathlib.Path(settings.signing_pubkey_path)
    if not sk_path.exists() or not pk_path.exists():
        # development only (gated by MERKLE_ALLOW_DEV_KEYGEN)
        if not settings.allow_dev_keygen:
            _fail(
                "signing keypair not found; run gen-keys or set MERKLE_ALLOW_DEV_KEYGEN=true"
            )
        sk, pk = ed25519_generate()
        sk_path.parent.mkdir(parents=True, exist_ok=True)
        sk_path.write_bytes(sk)
        pk_path.write_bytes(pk)
        logger.warning("generated development signing key at %s", sk_path)
    return sk_path.read_bytes(), pk_path.read_bytes()


@app.command()
def gen_keys(out_dir: str = typer.Option("./keys", help="Directory to write keypair")):
    out = pathlib.Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    sk, pk = ed25519_generate()
    (out / "ed25519_private.key").write_bytes(sk)
    (out / "ed25519_public.key").write_bytes(pk)
    print(f"[green]Wrote keys to {out_dir}[/green]")


@app.command()
def sign_root(
    files: List[pathlib.Path] = _FILES,
    lines: bool = _LINES,
    hash_alg: str = _HASH,
    padding: str = _PAD,
    out: pathlib.Path = typer.Option(pathlib.Path("head.json"), help="Tree head output path"),
):
    """Build a tree and emit a signed tree head for its root."""
    tree = _build(files, lines, hash_alg, padding)
    sk, pk = _load_keys()
    head = make_tree_head(tree, sk, pk, hash_alg)
    out.write_text(json.dumps(head.model_dump(), indent=2))
    print(f"[green]Wrote tree head to {out}[/green]")


@app.command()
def verify_root(path: pathlib.Path):
    """Check a tree head's signature."""
    obj = _read_json(path)
    ok = verify_tree_head(obj)
    print({"signature_valid": ok, "root_b64": obj.get("merkle_root_b64")})
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def verify_inclusion(proof_path: pathlib.Path, head_path: pathlib.Path):
    """Verify a proof against the root of a signed tree head."""
    ok = sdk_verify_inclusion(_read_text(proof_path), _read_json(head_path))
    print({"inclusion_valid": ok})
    if not ok:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
