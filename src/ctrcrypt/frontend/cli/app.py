"""Command-line front end for ctrcrypt.

Usage:
    ctrcrypt [-e | -d] -i <file> -p <password> [-o <file>] [--cipher NAME]
             [--chunk-size N] [-v | -q]

Encrypting ``report.txt`` writes ``report.txt.enc``; decrypting
``report.txt.enc`` writes ``report.txt.dec``. Exit status is 0 on success,
1 on a runtime failure and 2 on a usage error.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from ctrcrypt.config import load_settings
from ctrcrypt.core.exceptions import CtrCryptError, UsageError
from ctrcrypt.core.paths import Mode, resolve_output_path
from ctrcrypt.core.transform import transform_file
from ctrcrypt.security.cipher import CIPHERS
from .logging_config import configure_logging

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

# every registered cipher has a 16-byte block
_BLOCK_SIZE = 16


class _ArgumentParser(argparse.ArgumentParser):
    # turn argparse's print-and-exit into an exception main() can map to a status
    def error(self, message: str) -> None:
        raise UsageError(message)


def _chunk_size(value: str) -> int:
    try:
        size = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid chunk size: {value!r}") from None
    if size <= 0 or size % _BLOCK_SIZE:
        raise argparse.ArgumentTypeError(
            f"chunk size must be a positive multiple of {_BLOCK_SIZE}, got {size}"
        )
    return size


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="ctrcrypt",
        description="Encrypt or decrypt a file with a password-derived key in CTR mode.",
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("-e", dest="encrypt", action="store_true", help="Encrypt the input file")
    mode.add_argument("-d", dest="decrypt", action="store_true", help="Decrypt the input file")
    parser.add_argument("-i", dest="input", metavar="<file>", required=True, help="Input file")
    parser.add_argument(
        "-p", dest="password", metavar="<password>", required=True, help="Password"
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        metavar="<file>",
        help="Output file (default: input name with .enc / .dec)",
    )
    parser.add_argument(
        "--cipher",
        choices=sorted(CIPHERS),
        default=None,
        help="Block cipher (default: CTRCRYPT_CIPHER or aes)",
    )
    parser.add_argument(
        "--chunk-size",
        type=_chunk_size,
        default=None,
        help="Bytes processed per step, a multiple of 16 (default: 65536)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Errors only")
    return parser


def _log_level(args: argparse.Namespace, default: str) -> int:
    if args.verbose:
        return logging.DEBUG
    if args.quiet:
        return logging.ERROR
    return logging.getLevelName(default)


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_arg_parser()
    try:
        args = parser.parse_args(argv)
        if not args.password:
            raise UsageError("password must not be empty")
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    configure_logging(_log_level(args, settings.log_level))

    mode = Mode.ENCRYPT if args.encrypt else Mode.DECRYPT
    try:
        out_path = args.output or resolve_output_path(args.input, mode)
        result = transform_file(
            args.input,
            out_path,
            args.password,
            settings=settings,
            cipher=args.cipher,
            chunk_size=args.chunk_size,
        )
    except CtrCryptError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    logger.info("%s finished: %d bytes written to %s", mode.value, result.bytes_processed, out_path)
    return EXIT_SUCCESS


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
