"""
Password-to-file entry points that tie the KDF, cipher context and CTR driver together.
The CLI goes through here; so can any other caller that wants whole-file operations.
"""

from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ctrcrypt.config import Settings
from ctrcrypt.core.exceptions import FileAccessError
from ctrcrypt.security.context import DEFAULT_IV, CipherContext
from ctrcrypt.security.kdf import DEFAULT_LABEL, kdf_params_to_dict
from ctrcrypt.security.stream import StreamCipherDriver, TransformResult

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def transform_stream(
    instream: BinaryIO,
    outstream: BinaryIO,
    password: Union[bytes, str],
    settings: Optional[Settings] = None,
    cipher: Optional[str] = None,
    chunk_size: Optional[int] = None,
    label: bytes = DEFAULT_LABEL,
    iv: bytes = DEFAULT_IV,
) -> TransformResult:
    """
    Derive the key from ``password`` and CTR-transform ``instream`` into ``outstream``.
    Explicit ``cipher``/``chunk_size`` win over ``settings``.
    """
    settings = settings or Settings()
    cipher = cipher or settings.cipher
    chunk_size = chunk_size or settings.chunk_size

    logger.debug(
        "deriving %s key with %s",
        cipher,
        kdf_params_to_dict(
            label, settings.kdf_time_cost, settings.kdf_memory_cost, settings.kdf_parallelism
        ),
    )
    context = CipherContext.from_password(
        password,
        cipher=cipher,
        iv=iv,
        label=label,
        time_cost=settings.kdf_time_cost,
        memory_cost=settings.kdf_memory_cost,
        parallelism=settings.kdf_parallelism,
    )
    with context:
        driver = StreamCipherDriver(context, chunk_size=chunk_size)
        return driver.run(instream, outstream)


def transform_file(
    in_path: PathLike,
    out_path: PathLike,
    password: Union[bytes, str],
    settings: Optional[Settings] = None,
    cipher: Optional[str] = None,
    chunk_size: Optional[int] = None,
) -> TransformResult:
    """
    CTR-transform the file at ``in_path`` into ``out_path``.

    The input is opened first; if the output cannot be opened the input is
    closed again before FileAccessError is raised. A failure mid-stream leaves
    a partial ``out_path`` behind, which callers must treat as invalid.
    """
    in_path = Path(in_path)
    out_path = Path(out_path)

    try:
        inf = open(in_path, "rb")
    except OSError as e:
        raise FileAccessError(f"cannot open input file '{in_path}': {e.strerror or e}") from e

    with inf:
        # opening the input itself with "wb" would truncate it before the first read
        if out_path.exists() and os.path.samefile(in_path, out_path):
            raise FileAccessError(f"output file '{out_path}' is the input file")
        try:
            outf = open(out_path, "wb")
        except OSError as e:
            raise FileAccessError(
                f"cannot open output file '{out_path}': {e.strerror or e}"
            ) from e
        with outf:
            try:
                result = transform_stream(
                    inf, outf, password, settings=settings, cipher=cipher, chunk_size=chunk_size
                )
            except Exception:
                if outf.tell() > 0:
                    logger.warning("partial output left at '%s'; treat it as invalid", out_path)
                raise

    logger.info("%s -> %s (%d bytes)", in_path, out_path, result.bytes_processed)
    return result


def encrypt_file(in_path: PathLike, out_path: PathLike, password: Union[bytes, str], **kwargs) -> TransformResult:
    return transform_file(in_path, out_path, password, **kwargs)


def decrypt_file(in_path: PathLike, out_path: PathLike, password: Union[bytes, str], **kwargs) -> TransformResult:
    # CTR is an involution: decryption is the same transform
    return transform_file(in_path, out_path, password, **kwargs)


def transform_bytes(data: bytes, password: Union[bytes, str], **kwargs) -> bytes:
    """In-memory variant of transform_stream."""
    out = io.BytesIO()
    transform_stream(io.BytesIO(data), out, password, **kwargs)
    return out.getvalue()
