from __future__ import annotations

import argparse
import json as _json
import sys
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from ebl import __version__
from ebl.constants import DEFAULT_COPY_CHUNK
from ebl.errors import EblError, StreamStateError
from ebl.stream import RecordStream, open_stream


@contextmanager
def _open_input(path: str, chunk_size: int) -> Iterator[RecordStream]:
    """Open ``path`` as a record stream; ``-`` reads standard input."""
    if path == "-":
        yield RecordStream(sys.stdin.buffer, chunk_size=chunk_size)
    else:
        with open_stream(path, chunk_size=chunk_size) as stream:
            yield stream


def _error_context(stream: RecordStream) -> str:
    if not stream.has_preamble:
        return "in preamble"
    return f"in record {stream.record_index} at offset {stream.record_offset}"


def _fail(stream: RecordStream, exc: EblError) -> None:
    if isinstance(exc, StreamStateError):
        print(f"Error: {exc}", file=sys.stderr)
    else:
        print(f"Error: {exc} ({_error_context(stream)})", file=sys.stderr)
    sys.exit(2)


def cmd_list(path: str, *, as_json: bool = False, chunk_size: int = DEFAULT_COPY_CHUNK) -> bool:
    """List the record headers of an EBL0 stream.

    Args:
        path: Stream file path, or ``-`` for standard input.
        as_json: Emit a JSON document instead of tab-separated lines.
        chunk_size: Read size used while skipping blob bytes.
    """
    rows: List[Dict[str, Any]] = []
    with _open_input(path, chunk_size) as stream:
        try:
            for index, record in enumerate(stream):
                h = record.header
                if as_json:
                    rows.append({"index": index, "nonce": h.nonce.hex(), "id": h.id.hex(), "blob_len": h.blob_len})
                else:
                    print(f"{index}\t{h.blob_len}\t{h.nonce.hex()}\t{h.id.hex()}")
        except EblError as exc:
            _fail(stream, exc)
    if as_json:
        print(_json.dumps({"records": rows}))
    return True


def cmd_verify(path: str, *, chunk_size: int = DEFAULT_COPY_CHUNK) -> bool:
    """Walk the whole stream, skipping blobs, and report a summary."""
    total = 0
    with _open_input(path, chunk_size) as stream:
        try:
            for record in stream:
                total += record.header.blob_len
        except EblError as exc:
            _fail(stream, exc)
        count = stream.records_read
    print(f"records={count} blob_bytes={total}")
    return True


def _positive_int(value: str) -> int:
    n = int(value, 0)
    if n <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return n


def main(argv: List[str] | None = None) -> None:
    ap = argparse.ArgumentParser(prog="ebl", description="Inspect EBL0 record streams")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_list = sub.add_parser("list", help="List record headers")
    ap_list.add_argument("stream", help="Stream path, or - for stdin")
    ap_list.add_argument("--json", action="store_true", help="Emit JSON instead of tab-separated lines")
    ap_list.add_argument(
        "--chunk-size", type=_positive_int, default=DEFAULT_COPY_CHUNK, help="Read size used when skipping blobs"
    )

    ap_verify = sub.add_parser("verify", help="Check that a stream decodes to a clean end")
    ap_verify.add_argument("stream", help="Stream path, or - for stdin")
    ap_verify.add_argument(
        "--chunk-size", type=_positive_int, default=DEFAULT_COPY_CHUNK, help="Read size used when skipping blobs"
    )

    args = ap.parse_args(argv)
    try:
        if args.cmd == "list":
            cmd_list(args.stream, as_json=args.json, chunk_size=args.chunk_size)
        elif args.cmd == "verify":
            cmd_verify(args.stream, chunk_size=args.chunk_size)
        else:
            raise RuntimeError("Unknown command")
    except (EblError, OSError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
