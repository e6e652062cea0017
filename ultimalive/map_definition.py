"""Map geometry records exchanged with the server and the client."""

from __future__ import annotations

import struct
from dataclasses import dataclass, fields
from typing import ClassVar

TILES_PER_BLOCK_SHIFT = 3


def _check_range(record: object, bits: int) -> None:
    limit = 1 << bits
    for field in fields(record):  # type: ignore[arg-type]
        value = getattr(record, field.name)
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{field.name} must be an int, got {value!r}")
        if not 0 <= value < limit:
            raise ValueError(f"{field.name}={value} does not fit in {bits} bits")


@dataclass(frozen=True)
class MapDefinition:
    """Size, wrap point and index of one map, as sent by the server."""

    map_width_in_tiles: int
    map_height_in_tiles: int
    map_wrap_width_in_tiles: int
    map_wrap_height_in_tiles: int
    map_number: int

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<4HB")

    def __post_init__(self) -> None:
        for field in fields(self)[:4]:
            value = getattr(self, field.name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{field.name} must be an int, got {value!r}")
            if not 0 <= value <= 0xFFFF:
                raise ValueError(f"{field.name}={value} does not fit in 16 bits")
        if not isinstance(self.map_number, int) or isinstance(self.map_number, bool):
            raise TypeError(f"map_number must be an int, got {self.map_number!r}")
        if not 0 <= self.map_number <= 0xFF:
            raise ValueError(f"map_number={self.map_number} does not fit in 8 bits")

    def total_number_of_blocks(self) -> int:
        """Number of 8x8 tile blocks the map holds."""
        return (self.map_width_in_tiles >> TILES_PER_BLOCK_SHIFT) * (
            self.map_height_in_tiles >> TILES_PER_BLOCK_SHIFT
        )

    def pack(self) -> bytes:
        """Encode as the packed little-endian 9-byte record."""
        return self._FORMAT.pack(
            self.map_width_in_tiles,
            self.map_height_in_tiles,
            self.map_wrap_width_in_tiles,
            self.map_wrap_height_in_tiles,
            self.map_number,
        )

    @classmethod
    def unpack(cls, data: bytes) -> MapDefinition:
        """Decode a packed 9-byte record."""
        if len(data) != cls._FORMAT.size:
            raise ValueError(
                f"expected {cls._FORMAT.size} bytes, got {len(data)}"
            )
        return cls(*cls._FORMAT.unpack(bytes(data)))


@dataclass(frozen=True)
class MapTileDefinition:
    """Map dimensions in the layout the client keeps in memory."""

    map_width_in_tiles: int
    map_height_in_tiles: int
    map_wrap_width_in_tiles: int
    map_wrap_height_in_tiles: int

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<4I")

    def __post_init__(self) -> None:
        _check_range(self, 32)

    @classmethod
    def from_map_definition(cls, definition: MapDefinition) -> MapTileDefinition:
        """Take the tile dimensions of a map definition."""
        return cls(
            definition.map_width_in_tiles,
            definition.map_height_in_tiles,
            definition.map_wrap_width_in_tiles,
            definition.map_wrap_height_in_tiles,
        )

    def pack(self) -> bytes:
        """Encode as four little-endian 32-bit words."""
        return self._FORMAT.pack(
            self.map_width_in_tiles,
            self.map_height_in_tiles,
            self.map_wrap_width_in_tiles,
            self.map_wrap_height_in_tiles,
        )

    @classmethod
    def unpack(cls, data: bytes) -> MapTileDefinition:
        """Decode four little-endian 32-bit words."""
        if len(data) != cls._FORMAT.size:
            raise ValueError(
                f"expected {cls._FORMAT.size} bytes, got {len(data)}"
            )
        return cls(*cls._FORMAT.unpack(bytes(data)))