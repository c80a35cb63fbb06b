"""Scoped ownership of key material for a single encrypt/decrypt run.

A CipherContext is created at the start of a run and released at the end, on
every exit path. Releasing it overwrites the key bytes with zeros and drops the
block cipher. Nothing here is process-global: two contexts never share a key,
a primitive or a counter.
"""
from __future__ import annotations

import logging
from typing import Optional, Union

from ctrcrypt.core.exceptions import CipherError
from .cipher import DEFAULT_CIPHER, BlockCipher, get_cipher_spec
from .kdf import DEFAULT_LABEL, derive_key

logger = logging.getLogger(__name__)

# Protocol constant: the 8-byte synchronisation value that forms the high half
# of every counter block. Changing it breaks compatibility with existing files.
DEFAULT_IV = bytes([0x03, 0x07, 0xAE, 0xF1, 0x00, 0x00, 0x00, 0x00])
IV_LEN = 8


def zeroize(buf: bytearray) -> None:
    """Overwrite a mutable buffer with zeros in place."""
    buf[:] = bytes(len(buf))


class CipherContext:
    def __init__(
        self,
        key: Union[bytes, bytearray],
        cipher: str = DEFAULT_CIPHER,
        iv: bytes = DEFAULT_IV,
    ):
        if len(iv) != IV_LEN:
            raise CipherError(f"IV must be exactly {IV_LEN} bytes, got {len(iv)}")
        # take ownership of a mutable copy unless we were handed one already
        self._key: Optional[bytearray] = key if isinstance(key, bytearray) else bytearray(key)
        self.cipher_name = get_cipher_spec(cipher).name
        self.iv = bytes(iv)
        self._primitive: Optional[BlockCipher] = None
        self.released = False

    @classmethod
    def from_password(
        cls,
        password: Union[bytes, str],
        cipher: str = DEFAULT_CIPHER,
        iv: bytes = DEFAULT_IV,
        label: bytes = DEFAULT_LABEL,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 1,
    ) -> "CipherContext":
        """Derive the key for ``cipher`` from ``password`` and wrap it in a context."""
        spec = get_cipher_spec(cipher)
        key = derive_key(
            password,
            label=label,
            key_len=spec.key_len,
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )
        try:
            return cls(key, cipher=spec.name, iv=iv)
        except Exception:
            zeroize(key)
            raise

    # ------------------------------------------------------------------
    # Scoped acquisition
    # ------------------------------------------------------------------

    def __enter__(self) -> "CipherContext":
        if self.released:
            raise CipherError("cipher context has already been released")
        try:
            self._primitive = BlockCipher(self.cipher_name, self._key)
        except Exception:
            self.release()
            raise
        logger.debug("cipher context acquired (%s)", self.cipher_name)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def release(self) -> None:
        """Zeroize the key and drop the primitive. Safe to call more than once."""
        try:
            if self._primitive is not None:
                self._primitive.release()
            if self._key is not None:
                zeroize(self._key)
        finally:
            self._primitive = None
            self._key = None
            if not self.released:
                logger.debug("cipher context released, key material zeroized")
            self.released = True

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def primitive(self) -> BlockCipher:
        if self._primitive is None:
            raise CipherError("cipher context is not active; use it as a context manager")
        return self._primitive

    @property
    def block_size(self) -> int:
        return get_cipher_spec(self.cipher_name).block_size
