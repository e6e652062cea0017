"""Checksums of a map block: its land data followed by its statics data."""

from __future__ import annotations

import zlib

LAND_BLOCK_SIZE = 192


def _land_part(block_data: bytes | None) -> bytes:
    if block_data is None:
        return b""
    if len(block_data) < LAND_BLOCK_SIZE:
        raise ValueError(
            f"land block needs {LAND_BLOCK_SIZE} bytes, got {len(block_data)}"
        )
    return bytes(block_data[:LAND_BLOCK_SIZE])


def fletcher16(block_data: bytes | None, statics_data: bytes | None) -> int:
    """Fletcher-16 over the 192-byte land block and then the statics data."""
    sum1 = 0
    sum2 = 0
    for data in (_land_part(block_data), bytes(statics_data or b"")):
        for byte in data:
            sum1 = (sum1 + byte) % 255
            sum2 = (sum2 + sum1) % 255
    return (sum2 << 8) | sum1


def calculate_crc32(block_data: bytes | None, statics_data: bytes | None) -> int:
    """CRC-32 over the 192-byte land block and then the statics data."""
    crc = zlib.crc32(_land_part(block_data))
    return zlib.crc32(bytes(statics_data or b""), crc) & 0xFFFFFFFF