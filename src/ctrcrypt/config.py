"""Runtime settings for ctrcrypt.

Defaults live in code; each field can be overridden with a ``CTRCRYPT_*``
environment variable. Command-line flags take precedence over both.

Note that the KDF costs feed into the key: a file must be decrypted with the
same costs (and cipher) it was encrypted with.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from ctrcrypt.security.cipher import CIPHERS, DEFAULT_CIPHER
from ctrcrypt.security.stream import DEFAULT_CHUNK_SIZE

ENV_PREFIX = "CTRCRYPT_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    cipher: str = DEFAULT_CIPHER
    chunk_size: int = DEFAULT_CHUNK_SIZE
    kdf_time_cost: int = 3
    kdf_memory_cost: int = 65536
    kdf_parallelism: int = 1
    log_level: str = "WARNING"


def _positive_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX + name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{ENV_PREFIX + name} must be positive, got {value}")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from defaults plus environment overrides."""
    if environ is None:
        environ = os.environ
    defaults = Settings()

    cipher = environ.get(ENV_PREFIX + "CIPHER", defaults.cipher).strip().lower()
    if cipher not in CIPHERS:
        raise ValueError(
            f"{ENV_PREFIX}CIPHER must be one of {', '.join(sorted(CIPHERS))}, got {cipher!r}"
        )

    chunk_size = _positive_int(environ, "CHUNK_SIZE", defaults.chunk_size)
    block = CIPHERS[cipher].block_size
    if chunk_size % block:
        raise ValueError(f"{ENV_PREFIX}CHUNK_SIZE must be a multiple of {block}, got {chunk_size}")

    log_level = environ.get(ENV_PREFIX + "LOG_LEVEL", defaults.log_level).strip().upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(
            f"{ENV_PREFIX}LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
        )

    return Settings(
        cipher=cipher,
        chunk_size=chunk_size,
        kdf_time_cost=_positive_int(environ, "KDF_TIME_COST", defaults.kdf_time_cost),
        kdf_memory_cost=_positive_int(environ, "KDF_MEMORY_COST", defaults.kdf_memory_cost),
        kdf_parallelism=_positive_int(environ, "KDF_PARALLELISM", defaults.kdf_parallelism),
        log_level=log_level,
    )
