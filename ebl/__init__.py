"""
EBL0: streaming decoder for length-prefixed blob record streams.

An EBL0 stream is a 5-byte preamble (magic "EBL0", version 1) followed by
zero or more records, each a header (nonce, id, declared blob length) and the
blob bytes it announces. The package provides:

- Preamble and record header readers for blocking files and asyncio streams.
- Size ceilings on every length field (nonce 64 B, id 256 B, blob 100 GiB).
- A clean end-of-stream signal distinct from truncation.
- Bounded blob readers and stateful record streams that keep records aligned.
- An ``ebl`` command for listing and verifying streams.

Blob bytes are never buffered by the header readers; what to do with them is
up to the caller. Treat every stream as untrusted.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "errors",
    "fields",
    "preamble",
    "records",
    "blob",
    "stream",
    "cli",
]
