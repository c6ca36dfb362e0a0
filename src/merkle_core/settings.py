from __future__ import annotations
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    hash_alg: str = Field(default="sha256", alias="MERKLE_HASH_ALG")
    # 'duplicate' pairs the last node of an odd level with itself, 'zero' with
    # an all-zero digest
    padding: str = Field(default="duplicate", alias="MERKLE_PADDING")

    signing_key_path: str = Field(
        default="./keys/ed25519_private.key", alias="MERKLE_SIGNING_KEY_PATH"
    )
    signing_pubkey_path: str = Field(
        default="./keys/ed25519_public.key", alias="MERKLE_SIGNING_PUBKEY_PATH"
    )
    allow_dev_keygen: bool = Field(default=False, alias="MERKLE_ALLOW_DEV_KEYGEN")

    # Per-block size guard for files read by the CLI (bytes)
    max_block_bytes: int = Field(default=16777216, alias="MERKLE_MAX_BLOCK_BYTES")

    log_level: str = Field(default="INFO", alias="MERKLE_LOG_LEVEL")

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()  # load at import
