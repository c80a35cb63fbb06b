""" Output file naming for encrypt/decrypt runs. """

from __future__ import annotations

import os
from enum import Enum
from typing import Union

from ctrcrypt.core.exceptions import InvalidPathError


ENC_SUFFIX = ".enc"
DEC_SUFFIX = ".dec"


class Mode(Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


def resolve_output_path(input_name: Union[str, os.PathLike], mode: Mode) -> str:
    """Return the destination name for ``input_name`` in the given mode.

    Pure string manipulation; the filesystem is never consulted.

    - encrypt: ``report.txt`` -> ``report.txt.enc``
    - decrypt: ``report.txt.enc`` -> ``report.txt.dec``,
      ``data.bin`` -> ``data.bin.dec``
    """
    name = os.fspath(input_name)
    if isinstance(name, bytes):
        name = os.fsdecode(name)
    if not name:
        raise InvalidPathError("input file name is empty")

    if mode is Mode.ENCRYPT:
        return name + ENC_SUFFIX
    if mode is Mode.DECRYPT:
        # a bare ".enc" has nothing left to strip, so it keeps the marker
        if len(name) > len(ENC_SUFFIX) and name.endswith(ENC_SUFFIX):
            name = name[: -len(ENC_SUFFIX)]
        return name + DEC_SUFFIX
    raise ValueError(f"unknown mode: {mode!r}")
