import os
import sys
from pathlib import Path

import pytest

# Ensure the 'src' directory is on sys.path for imports in tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Keep tests independent of a developer's shell / .env
os.environ.setdefault("MERKLE_HASH_ALG", "sha256")
os.environ.setdefault("MERKLE_PADDING", "duplicate")


@pytest.fixture
def blocks():
    return [f"tx-{i}".encode() for i in range(7)]
