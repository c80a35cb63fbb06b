"""Password key derivation for ctrcrypt."""
from typing import Dict, Optional, Union

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw

from ctrcrypt.core.exceptions import KeyDerivationError

# Fixed protocol label used as the Argon2 salt. It is NOT random per file:
# the header-less file format has nowhere to store a salt, so every file
# encrypted with the same password shares one key.
DEFAULT_LABEL = b"ctrcrypt-rand-01"

# Argon2 refuses salts shorter than this.
MIN_LABEL_LEN = 8


def derive_key(
    password: Optional[Union[bytes, str]],
    label: bytes = DEFAULT_LABEL,
    key_len: int = 32,
    time_cost: int = 3,
    memory_cost: int = 65536,
    parallelism: int = 1,
) -> bytearray:
    """
    Derive cipher key material from a password using Argon2id and a fixed label.
    Deterministic: the same password, label and parameters always give the same key.
    Returns a mutable bytearray so the owner can zeroize it afterwards.
    """
    if password is None:
        raise KeyDerivationError("password is required")
    if isinstance(password, str):
        password = password.encode("utf-8")
    if not password:
        raise KeyDerivationError("password must not be empty")
    if len(label) < MIN_LABEL_LEN:
        raise KeyDerivationError(f"label must be at least {MIN_LABEL_LEN} bytes")

    try:
        raw = hash_secret_raw(
            secret=bytes(password),
            salt=label,
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=key_len,
            type=Type.ID,
        )
    except HashingError as e:
        raise KeyDerivationError(f"key derivation failed: {e}") from e
    return bytearray(raw)


def kdf_params_to_dict(label: bytes, time_cost: int, memory_cost: int, parallelism: int) -> Dict:
    return {
        "algo": "argon2id",
        "label": label.hex(),
        "time": time_cost,
        "memory": memory_cost,
        "parallelism": parallelism,
    }
