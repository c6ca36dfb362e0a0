"""Fuzz harness for proof document decoding and verification.

Arbitrary bytes are fed to the JSON verifier entry point. Any exception that
escapes verify_proof_document is a crash: malformed documents must come back
as False.
"""
from __future__ import annotations
import atheris
import sys

with atheris.instrument_imports():
    from merkle_sdk.verify import verify_proof_document


def TestOneInput(data: bytes):  # noqa: N802
    ok = verify_proof_document(data)
    if not isinstance(ok, bool):
        raise RuntimeError("verifier returned a non-bool")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
