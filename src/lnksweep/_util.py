"""Internal helpers for decoding MS-SHLLINK string fields."""

import struct

from ._constants import ANSI_CODEPAGE


def read_u16(data: bytes, off: int) -> int:
    return struct.unpack_from("<H", data, off)[0]


def read_u32(data: bytes, off: int) -> int:
    return struct.unpack_from("<I", data, off)[0]


def find_utf16le_null(data: bytes, start: int = 0) -> int:
    """Find the first UTF-16LE null terminator (two zero bytes at even offset).

    Returns the byte offset of the null terminator relative to *start*,
    or ``len(data) - start`` if not found.  The result is always even.
    """
    pos = start
    end = len(data) - 1
    while pos < end:
        if data[pos] == 0 and data[pos + 1] == 0:
            return pos - start
        pos += 2
    return len(data) - start


def decode_utf16le_at(data: bytes, off: int, limit: int | None = None) -> str:
    """Decode a null-terminated UTF-16LE string starting at *off*.

    If *limit* is given it caps the search range (byte count from *off*).
    """
    end = off + limit if limit is not None else len(data)
    search_data = data[off:end]
    null_pos = find_utf16le_null(search_data)
    return search_data[:null_pos].decode("utf-16-le", errors="replace")


def decode_ansi_at(data: bytes, off: int, end: int | None = None) -> str:
    """Decode a null-terminated ANSI string between *off* and *end*."""
    return (
        data[off:end].split(b"\x00")[0].decode(ANSI_CODEPAGE, errors="replace")
    )
