"""Streaming CTR-mode transform.

The driver reads the input in fixed-size chunks, XORs each chunk with keystream
and writes the result, keeping one running counter across the whole stream.

Counter block layout (16 bytes for every supported cipher):
- 8 bytes: the protocol IV
- 8 bytes: big-endian block index, starting at 0

Each keystream block is ``E_k(iv || index)``. The index goes up by one for every
keystream block handed out, including a block that a short final chunk only
partly uses, so no counter value is ever encrypted twice in one run. The output
depends only on the absolute position in the stream, not on the chunk size.

CTR is its own inverse, so the same driver encrypts and decrypts.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Union

from ctrcrypt.core.exceptions import AllocationError, CipherError, FileAccessError
from .cipher import DEFAULT_CIPHER
from .context import DEFAULT_IV, CipherContext, zeroize

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024
COUNTER_LEN = 8
MAX_BLOCKS = 1 << (8 * COUNTER_LEN)


class DriverState(Enum):
    INIT = "init"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"


@dataclass
class TransformResult:
    bytes_processed: int = 0
    chunks: int = 0
    blocks_used: int = 0


def xor_bytes(data: bytes, keystream: bytes) -> bytes:
    """XOR ``data`` with the first ``len(data)`` bytes of ``keystream``."""
    n = len(data)
    if n == 0:
        return b""
    mixed = int.from_bytes(data, "big") ^ int.from_bytes(keystream[:n], "big")
    return mixed.to_bytes(n, "big")


class StreamCipherDriver:
    """One-shot CTR transform bound to an active CipherContext."""

    def __init__(self, context: CipherContext, chunk_size: int = DEFAULT_CHUNK_SIZE):
        block = context.block_size
        if chunk_size <= 0 or chunk_size % block:
            raise ValueError(
                f"chunk_size must be a positive multiple of {block}, got {chunk_size}"
            )
        self.context = context
        self.chunk_size = chunk_size
        self.block_size = block
        self.state = DriverState.INIT
        self._counter = 0
        self.result = TransformResult()

    @property
    def counter(self) -> int:
        """Index of the next keystream block."""
        return self._counter

    def _counter_blocks(self, count: int) -> bytes:
        if self._counter + count > MAX_BLOCKS:
            raise CipherError("CTR counter exhausted; refusing to reuse keystream")
        iv = self.context.iv
        start = self._counter
        return b"".join(
            iv + (start + i).to_bytes(COUNTER_LEN, "big") for i in range(count)
        )

    def keystream(self, n: int) -> bytes:
        """Return ``n`` keystream bytes and advance the counter past every block used."""
        if n <= 0:
            return b""
        count = -(-n // self.block_size)
        blocks = self.context.primitive.encrypt_blocks(self._counter_blocks(count))
        self._counter += count
        self.result.blocks_used += count
        return blocks[:n]

    def transform_chunk(self, data: bytes) -> bytes:
        if not data:
            return b""
        return xor_bytes(data, self.keystream(len(data)))

    def _read_chunk(self, instream: BinaryIO) -> bytes:
        # keep reading until the chunk is full or the stream hits EOF,
        # so that a short chunk always means end of input
        try:
            chunk = instream.read(self.chunk_size)
            if not chunk or len(chunk) == self.chunk_size:
                return chunk
            parts = [chunk]
            have = len(chunk)
            while have < self.chunk_size:
                more = instream.read(self.chunk_size - have)
                if not more:
                    break
                parts.append(more)
                have += len(more)
            return b"".join(parts)
        except MemoryError as e:
            raise AllocationError(f"cannot allocate a {self.chunk_size}-byte buffer") from e
        except OSError as e:
            raise FileAccessError(f"read failed: {e}") from e

    def _write(self, outstream: BinaryIO, data: bytes) -> None:
        try:
            outstream.write(data)
        except OSError as e:
            raise FileAccessError(f"write failed: {e}") from e

    def run(self, instream: BinaryIO, outstream: BinaryIO) -> TransformResult:
        """Transform ``instream`` into ``outstream``; returns the byte/chunk/block counts.

        Bytes already written when an error occurs are left in ``outstream``.
        """
        if self.state is not DriverState.INIT:
            raise CipherError(f"driver already used (state={self.state.value})")

        self._counter = 0
        self.state = DriverState.STREAMING
        logger.debug("CTR transform started (chunk_size=%d)", self.chunk_size)
        try:
            while True:
                chunk = self._read_chunk(instream)
                n = len(chunk)
                if n:
                    try:
                        out = self.transform_chunk(chunk)
                    except MemoryError as e:
                        raise AllocationError("cannot allocate keystream buffer") from e
                    self._write(outstream, out)
                    self.result.bytes_processed += n
                    self.result.chunks += 1
                if n < self.chunk_size:
                    break
        except Exception:
            self.state = DriverState.FAILED
            logger.debug(
                "CTR transform aborted after %d bytes", self.result.bytes_processed
            )
            raise

        self.state = DriverState.DONE
        logger.debug(
            "CTR transform finished: %d bytes, %d chunks, %d blocks",
            self.result.bytes_processed,
            self.result.chunks,
            self.result.blocks_used,
        )
        return self.result


def ctr_transform(
    instream: BinaryIO,
    outstream: BinaryIO,
    key: Union[bytes, bytearray],
    cipher: str = DEFAULT_CIPHER,
    iv: bytes = DEFAULT_IV,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> TransformResult:
    """Run one CTR transform with ``key``; the key is zeroized on every exit path."""
    try:
        context = CipherContext(key, cipher=cipher, iv=iv)
    except Exception:
        if isinstance(key, bytearray):
            zeroize(key)
        raise
    with context:
        return StreamCipherDriver(context, chunk_size=chunk_size).run(instream, outstream)
