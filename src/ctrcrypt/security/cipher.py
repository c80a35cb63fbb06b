"""Raw block cipher primitive used to turn counter blocks into keystream.

Only the forward permutation is exposed: CTR mode never needs to decrypt a
block, it only encrypts counter values. The permutation itself comes from
``cryptography``; this module wraps it in ECB mode, which for whole-block input
is exactly "encrypt each block independently".
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ctrcrypt.core.exceptions import CipherError


@dataclass(frozen=True)
class CipherSpec:
    name: str
    factory: Callable[[bytes], object]
    key_len: int
    block_size: int = 16


CIPHERS: Dict[str, CipherSpec] = {
    "aes": CipherSpec("aes", algorithms.AES, key_len=32),
    "sm4": CipherSpec("sm4", algorithms.SM4, key_len=16),
}

DEFAULT_CIPHER = "aes"


def get_cipher_spec(name: str) -> CipherSpec:
    try:
        return CIPHERS[name.lower()]
    except KeyError:
        raise CipherError(
            f"unknown cipher '{name}' (choose from: {', '.join(sorted(CIPHERS))})"
        ) from None


class BlockCipher:
    """Forward block permutation keyed once, applied to whole blocks."""

    def __init__(self, name: str, key: Union[bytes, bytearray]):
        self.spec = get_cipher_spec(name)
        if len(key) != self.spec.key_len:
            raise CipherError(
                f"{self.spec.name} needs a {self.spec.key_len}-byte key, got {len(key)} bytes"
            )
        try:
            algorithm = self.spec.factory(key)
            self._encryptor = Cipher(algorithm, modes.ECB()).encryptor()
        except (UnsupportedAlgorithm, ValueError) as e:
            raise CipherError(f"cannot initialise {self.spec.name}: {e}") from e

    @property
    def block_size(self) -> int:
        return self.spec.block_size

    def encrypt_blocks(self, data: bytes) -> bytes:
        """Encrypt ``data`` (a whole number of blocks) block by block."""
        if self._encryptor is None:
            raise CipherError("block cipher has been released")
        if len(data) % self.block_size:
            raise CipherError(
                f"input must be a multiple of {self.block_size} bytes, got {len(data)}"
            )
        try:
            return self._encryptor.update(data)
        except Exception as e:
            raise CipherError(f"{self.spec.name} block encryption failed: {e}") from e

    def release(self) -> None:
        """Drop the backend context; the object is unusable afterwards."""
        self._encryptor = None
