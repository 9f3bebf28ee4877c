from __future__ import annotations

import asyncio
from typing import BinaryIO

from .constants import FIELD_MAGIC, FIELD_VERSION, MAGIC, VERSION
from .errors import BadMagic, UnsupportedVersion
from .fields import read_exact, read_exact_async


def _check_magic(magic: bytes) -> None:
    if magic != MAGIC:
        raise BadMagic(magic)


def _check_version(raw: bytes) -> None:
    if raw[0] != VERSION:
        raise UnsupportedVersion(raw[0])


def read_preamble(f: BinaryIO) -> None:
    """Validate the 5-byte ``EBL0`` preamble; must be called once, before any record."""
    _check_magic(read_exact(f, len(MAGIC), FIELD_MAGIC))
    _check_version(read_exact(f, 1, FIELD_VERSION))


async def read_preamble_async(reader: asyncio.StreamReader) -> None:
    _check_magic(await read_exact_async(reader, len(MAGIC), FIELD_MAGIC))
    _check_version(await read_exact_async(reader, 1, FIELD_VERSION))
