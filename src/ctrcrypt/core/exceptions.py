"""
Exceptions for ctrcrypt
Everything derives from CtrCryptError so the CLI has a single error catcher
"""


class CtrCryptError(Exception):
    # general container for errors
    pass


class UsageError(CtrCryptError):
    # raised on missing, unknown or conflicting command-line arguments
    pass


class FileAccessError(CtrCryptError):
    # raised when the input or output file cannot be opened
    pass


class InvalidPathError(FileAccessError):
    # raised when a file name cannot be used to derive an output name
    pass


class AllocationError(CtrCryptError):
    # raised when working buffers cannot be acquired
    pass


class KeyDerivationError(CtrCryptError):
    # raised on empty password or a KDF failure (before any cipher state exists)
    pass


class CipherError(CtrCryptError):
    # raised when the block cipher fails, or the counter/key state is unusable
    pass
