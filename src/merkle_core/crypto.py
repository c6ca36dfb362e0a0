from __future__ import annotations
import base64
import binascii
import hashlib
from typing import Callable, Tuple

import nacl.signing
import nacl.exceptions
import rfc8785

from .errors import UnsupportedHashError

Hasher = Callable[[bytes], bytes]


def B64(b: bytes) -> str:
    """Base64-encode bytes to ASCII string."""
    return base64.b64encode(b).decode("ascii")


def B64D(s: str) -> bytes:
    """Decode base64 ASCII string to bytes with strict validation."""
    try:
        return base64.b64decode(s.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError, AttributeError) as e:
        raise ValueError("invalid base64") from e


def hexd(b: bytes) -> str:
    return b.hex()


def unhex(s: str) -> bytes:
    try:
        return bytes.fromhex(s)
    except (ValueError, TypeError) as e:
        raise ValueError("invalid hex") from e


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def _blake2b_256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


def hash_name(name: str) -> str:
    """Canonical spelling of a hash algorithm name (``SHA-256`` -> ``sha256``)."""
    key = name.strip().lower().replace("-", "_")
    if key == "sha_256":
        return "sha256"
    return key


def get_hasher(name: str) -> Hasher:
    """Resolve a hashlib algorithm name into a fixed-length `Hasher`.

    Names are case-insensitive and may use '-' in place of '_' (``sha-256``,
    ``sha3-256``). Variable-length algorithms (shake_*) are rejected since the
    tree needs a fixed digest width.
    """
    key = hash_name(name)
    if key == "sha256":
        return sha256
    if key == "blake2b":
        return _blake2b_256
    if key.startswith("shake") or key not in hashlib.algorithms_available:
        raise UnsupportedHashError(f"unsupported hash algorithm: {name}")

    def _h(data: bytes) -> bytes:
        return hashlib.new(key, data).digest()

    _h.__name__ = key
    # listed by hashlib but refused by the OpenSSL build (e.g. ripemd160 on 3.x)
    try:
        digest_size(_h)
    except ValueError as e:
        raise UnsupportedHashError(f"hash algorithm unavailable: {name}") from e
    return _h


def digest_size(hasher: Hasher) -> int:
    return len(hasher(b""))


def jcs_dumps(obj) -> bytes:
    """Deterministic canonical JSON bytes per RFC8785."""
    return rfc8785.dumps(obj)


def ed25519_generate() -> Tuple[bytes, bytes]:
    sk = nacl.signing.SigningKey.generate()
    pk = sk.verify_key
    return (sk.encode(), pk.encode())


def ed25519_sign(sk_bytes: bytes, data: bytes) -> bytes:
    sk = nacl.signing.SigningKey(sk_bytes)
    return sk.sign(data).signature


def ed25519_verify(pk_bytes: bytes, data: bytes, signature: bytes) -> bool:
    try:
        vk = nacl.signing.VerifyKey(pk_bytes)
        vk.verify(data, signature)
        return True
    except (nacl.exceptions.BadSignatureError, nacl.exceptions.ValueError, TypeError):
        return False
