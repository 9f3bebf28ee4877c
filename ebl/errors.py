from __future__ import annotations

from typing import Optional


class EblError(Exception):
    """Base class for EBL0 decoding errors."""


# Preamble
class BadMagic(EblError):
    def __init__(self, magic: bytes):
        super().__init__(f"bad magic: {magic!r}")
        self.magic = magic


class UnsupportedVersion(EblError):
    def __init__(self, version: int):
        super().__init__(f"unsupported version: {version}")
        self.version = version


# Framing
class TruncatedStream(EblError, EOFError):
    """End of stream inside a field, i.e. not on a record boundary."""

    def __init__(self, field: str, expected: int, got: int):
        super().__init__(f"truncated stream while reading {field}: expected {expected} bytes, got {got}")
        self.field = field
        self.expected = expected
        self.got = got


class FieldTooLarge(EblError):
    def __init__(self, field: str, declared: int, limit: int):
        super().__init__(f"{field} too large: {declared} > {limit}")
        self.field = field
        self.declared = declared
        self.limit = limit


class StreamReadError(EblError):
    """Transport error raised while reading a field; the original is chained as ``__cause__``."""

    def __init__(self, field: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"read failed while reading {field}{detail}")
        self.field = field


# Call discipline on stateful streams
class StreamStateError(EblError):
    pass
