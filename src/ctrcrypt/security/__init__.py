"""Security helpers: KDF, block cipher primitive and streaming CTR driver for ctrcrypt.

This package provides:
- Argon2id key derivation from a password and a fixed protocol label
- A keyed block cipher primitive (AES-256 by default) from ``cryptography``
- A scoped CipherContext that zeroizes key material on release
- The chunked CTR-mode stream driver used for both encryption and decryption
"""

from .kdf import DEFAULT_LABEL, derive_key
from .cipher import CIPHERS, DEFAULT_CIPHER, BlockCipher
from .context import DEFAULT_IV, CipherContext
from .stream import (
    DEFAULT_CHUNK_SIZE,
    DriverState,
    StreamCipherDriver,
    TransformResult,
    ctr_transform,
)

__all__ = [
    "DEFAULT_LABEL",
    "derive_key",
    "CIPHERS",
    "DEFAULT_CIPHER",
    "BlockCipher",
    "DEFAULT_IV",
    "CipherContext",
    "DEFAULT_CHUNK_SIZE",
    "DriverState",
    "StreamCipherDriver",
    "TransformResult",
    "ctr_transform",
]
