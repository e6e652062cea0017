"""Byte-signature searches over a memory image.

A signature byte of ``0xCC`` is a wildcard and matches any byte.
Offsets are indices into the searched buffer.
"""

from __future__ import annotations

import struct

WILDCARD = 0xCC
FUNCTION_SEARCH_DISTANCE = 100
FUNCTION_PROLOGUE = bytes((0x55, 0x8B, 0xEC))
PADDED_PROLOGUE = bytes((0x90, 0x90, 0x6A))
_PADDING_LENGTH = 2

_UINT32 = struct.Struct("<I")
_INT32 = struct.Struct("<i")


def _matches(buffer: memoryview, start: int, signature: bytes) -> bool:
    if not signature or start < 0 or start + len(signature) > len(buffer):
        return False
    return all(
        expected == WILDCARD or actual == expected
        for actual, expected in zip(buffer[start : start + len(signature)], signature)
    )


def find_signature_offset(buffer: bytes, signature: bytes) -> int | None:
    """Return the offset of the first match of ``signature``, or None.

    A match that would end exactly at the end of the buffer is not
    considered.
    """
    view = memoryview(bytes(buffer))
    signature = bytes(signature)
    last = len(view) - len(signature)
    return next(
        (start for start in range(max(last, 0)) if _matches(view, start, signature)),
        None,
    )


def find_signature_offset_backwards(
    buffer: bytes, position: int, search_length: int, signature: bytes
) -> int | None:
    """Search the ``search_length`` offsets before ``position``, nearest first."""
    view = memoryview(bytes(buffer))
    signature = bytes(signature)
    candidates = range(position - 1, position - search_length - 1, -1)
    return next(
        (start for start in candidates if _matches(view, start, signature)),
        None,
    )


def find_function_call(buffer: bytes, signature: bytes) -> int | None:
    """Find ``signature`` and return the start of the function holding it."""
    found = find_signature_offset(buffer, signature)
    if found is None:
        return None
    start = find_signature_offset_backwards(
        buffer, found, FUNCTION_SEARCH_DISTANCE, FUNCTION_PROLOGUE
    )
    if start is not None:
        return start
    start = find_signature_offset_backwards(
        buffer, found, FUNCTION_SEARCH_DISTANCE, PADDED_PROLOGUE
    )
    return None if start is None else start + _PADDING_LENGTH


def _read(layout: struct.Struct, buffer: bytes, at: int) -> int:
    if at < 0 or at + layout.size > len(buffer):
        raise ValueError(f"reading {layout.size} bytes at {at} runs past the buffer")
    return layout.unpack_from(buffer, at)[0]


def find_signature(buffer: bytes, signature: bytes, offset: int) -> int | None:
    """Find ``signature`` and return the 32-bit value stored ``offset`` bytes after it."""
    found = find_signature_offset(buffer, signature)
    if found is None:
        return None
    return _read(_UINT32, bytes(buffer), found + offset)


def find_structure(
    buffer: bytes, signature: bytes, offset: int, size_offset: int
) -> tuple[int, int] | None:
    """Find ``signature`` and return a structure address and its signed size."""
    found = find_signature_offset(buffer, signature)
    if found is None:
        return None
    data = bytes(buffer)
    return _read(_UINT32, data, found + offset), _read(_INT32, data, found + size_offset)