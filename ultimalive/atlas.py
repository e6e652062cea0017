"""Map bookkeeping: map switching, block checksums and server hash queries."""

from __future__ import annotations

import logging
import struct
from typing import Callable, Iterable, Protocol

from .checksums import calculate_crc32, fletcher16
from .map_definition import TILES_PER_BLOCK_SHIFT, MapDefinition, MapTileDefinition

logger = logging.getLogger(__name__)

ULTIMALIVE_PACKET = 0x3F
QUERY_STATICS_COUNT = 8
COMMAND_BLOCKS_VIEW_RANGE = 0x04
COMMAND_QUERY_RESPONSE = 0xFF
COMMAND_QUERY32_RESPONSE = 0xFD
QUERY_HEADER_SIZE = 15

DEFAULT_VIEW_RANGE = (-2, 2, -2, 2)

REFRESH_MOVE_REJECT_PACKET = bytes(
    (0x21, 0xFF, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x22, 0x00, 0x00)
)
REFRESH_RESYNC_PACKET = bytes((0x22, 0xFF, 0x00))
SWITCH_TO_MAP_ONE_PACKET = bytes((0xBF, 0x06, 0x00, 0x00, 0x08, 0x01))

_HEADER_START = struct.Struct("<BH")
_HEADER_REST = struct.Struct(">IIHBB")


class _FileManager(Protocol):
    def initialize_shard_maps(
        self, shard_identifier: str, definitions: dict[int, MapDefinition]
    ) -> None: ...

    def load_map(self, map_number: int) -> None: ...

    def write_statics_block(self, map_number: int, block_number: int, data: bytes) -> None: ...

    def update_land_block(self, map_number: int, block_number: int, land_data: bytes) -> None: ...

    def read_land_block(self, map_number: int, block_number: int) -> bytes | None: ...

    def read_statics_block(self, map_number: int, block_number: int) -> bytes | None: ...

    def on_logout(self) -> None: ...


class _NetworkManager(Protocol):
    def send_packet_to_server(self, packet: bytes) -> None: ...

    def send_packet_to_client(self, packet: bytes) -> None: ...


class _Client(Protocol):
    def set_map_dimensions(self, definition: MapTileDefinition) -> None: ...

    def refresh_client_statics(self, block_number: int) -> None: ...

    def refresh_client_land(self) -> None: ...


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _truncated_mod(dividend: int, divisor: int) -> int:
    """Remainder with the sign of the dividend, as integer hardware computes it."""
    remainder = abs(dividend) % abs(divisor)
    return -remainder if dividend < 0 else remainder


def _query_header(size: int, block_number: int, command: int, map_number: int) -> bytes:
    return _HEADER_START.pack(ULTIMALIVE_PACKET, size & 0xFFFF) + _HEADER_REST.pack(
        block_number, QUERY_STATICS_COUNT, 0, command, map_number
    )


class Atlas:
    """Tracks the server's map definitions and answers its block queries."""

    def __init__(
        self,
        file_manager: _FileManager,
        network_manager: _NetworkManager,
        client: _Client,
    ) -> None:
        self._file_manager = file_manager
        self._network_manager = network_manager
        self._client = client
        self._map_definitions: dict[int, MapDefinition] = {}
        self._current_map = 0
        self._shard_identifier = ""
        self._first_map_load = True
        self._crc_cache: dict[int, int] = {}
        self._crc32_cache: dict[int, int] = {}
        (
            self._min_block_x,
            self._max_block_x,
            self._min_block_y,
            self._max_block_y,
        ) = DEFAULT_VIEW_RANGE
        self._blocks_width = self._max_block_x - self._min_block_x + 1
        self._blocks_height = self._max_block_y - self._min_block_y + 1

    @property
    def current_map(self) -> int:
        """Number of the map currently loaded into the client."""
        return self._current_map

    def load_map(self, map_number: int) -> None:
        """Load a map by number, if the server has defined it."""
        logger.debug("loading map %d", map_number)
        if self._first_map_load:
            self._first_map_load = False
            self._file_manager.initialize_shard_maps(
                self._shard_identifier, dict(self._map_definitions)
            )

        definition = self._map_definitions.get(map_number)
        if definition is None:
            logger.debug(
                "no definition for map %d among %s",
                map_number,
                sorted(self._map_definitions),
            )
            return

        self._crc_cache.clear()
        self._crc32_cache.clear()
        self._client.set_map_dimensions(MapTileDefinition.from_map_definition(definition))
        self._file_manager.load_map(map_number)
        self._current_map = map_number

    def _group(
        self,
        map_number: int,
        block_number: int,
        cache: dict[int, int],
        compute: Callable[[int, int], int],
    ) -> list[int]:
        crcs = [0] * (self._blocks_width * self._blocks_height)
        definition = self._map_definitions.get(map_number)
        if definition is None:
            return crcs

        map_width = definition.map_width_in_tiles >> TILES_PER_BLOCK_SHIFT
        map_height = definition.map_height_in_tiles >> TILES_PER_BLOCK_SHIFT
        wrap_width = definition.map_wrap_width_in_tiles >> TILES_PER_BLOCK_SHIFT
        wrap_height = definition.map_wrap_height_in_tiles >> TILES_PER_BLOCK_SHIFT

        signed_block = _to_int32(block_number)
        block_x = int(signed_block / map_height)
        block_y = _truncated_mod(signed_block, map_height)

        if not (0 <= block_x < map_width and 0 <= block_y < map_height):
            return crcs

        bound_x = self._min_block_x - 1
        offset_x = abs(self._min_block_x)
        offset_y = abs(self._min_block_y)
        width_modulus = wrap_width if block_x < wrap_width else map_width
        height_modulus = wrap_height if block_y < wrap_height else map_height

        for x in range(self._min_block_x, self._max_block_x + 1):
            x_block = _truncated_mod(block_x + x, width_modulus)
            if bound_x < x_block < 0:
                x_block += width_modulus
            for y in range(self._min_block_y, self._max_block_y + 1):
                y_block = _truncated_mod(block_y + y, height_modulus)
                if y_block < 0:
                    y_block += height_modulus

                current = x_block * map_height + y_block
                if 0 <= current <= map_height * map_width:
                    if current not in cache:
                        cache[current] = compute(map_number, current)
                    crcs[(x + offset_x) * self._blocks_height + (y + offset_y)] = cache[current]
        return crcs

    def group_of_block_crcs(self, map_number: int, block_number: int) -> list[int]:
        """Fletcher-16 checksums of the blocks in view around ``block_number``."""
        return self._group(map_number, block_number, self._crc_cache, self.block_crc)

    def group_of_block_crcs32(self, map_number: int, block_number: int) -> list[int]:
        """CRC-32 checksums of the blocks in view around ``block_number``."""
        return self._group(map_number, block_number, self._crc32_cache, self.block_crc32)

    def _checksum(
        self,
        map_number: int,
        block_number: int,
        function: Callable[[bytes | None, bytes | None], int],
    ) -> int:
        if map_number not in self._map_definitions:
            return 0
        land = self._file_manager.read_land_block(map_number & 0xFF, block_number)
        statics = self._file_manager.read_statics_block(map_number, block_number)
        if land is None:
            return 0
        return function(land, statics)

    def block_crc(self, map_number: int, block_number: int) -> int:
        """Fletcher-16 of one block's land and statics, or 0 if unavailable."""
        return self._checksum(map_number, block_number, fletcher16)

    def block_crc32(self, map_number: int, block_number: int) -> int:
        """CRC-32 of one block's land and statics, or 0 if unavailable."""
        return self._checksum(map_number, block_number, calculate_crc32)

    def on_before_map_change(self, map_number: int) -> None:
        """Switch the client to map 1 so the next map 0 load really reloads."""
        self._network_manager.send_packet_to_client(SWITCH_TO_MAP_ONE_PACKET)

    def on_map_change(self, map_number: int) -> int:
        """Load the requested map; return the map number the client should see."""
        self.load_map(map_number)
        return 0

    def on_blocks_view_range(
        self, min_block_x: int, max_block_x: int, min_block_y: int, max_block_y: int
    ) -> None:
        """Adopt the server's view range and acknowledge it."""
        self._min_block_x = min_block_x
        self._max_block_x = max_block_x
        self._min_block_y = min_block_y
        self._max_block_y = max_block_y
        self._blocks_width = max_block_x - min_block_x + 1
        self._blocks_height = max_block_y - min_block_y + 1

        body = struct.pack(
            ">4H",
            min_block_x & 0xFFFF,
            max_block_x & 0xFFFF,
            min_block_y & 0xFFFF,
            max_block_y & 0xFFFF,
        )
        header = _query_header(QUERY_HEADER_SIZE + len(body), 0, COMMAND_BLOCKS_VIEW_RANGE, 0)
        self._network_manager.send_packet_to_server(header + body)

    def on_hash_query(self, block_number: int, map_number: int) -> None:
        """Answer a server hash query with Fletcher-16 checksums."""
        logger.debug("hash query for block %d on map %d", block_number, map_number)
        crcs = self.group_of_block_crcs(map_number, block_number)
        body = struct.pack(f">{len(crcs)}H", *crcs)
        header = _query_header(
            QUERY_HEADER_SIZE + len(body), block_number, COMMAND_QUERY_RESPONSE, map_number
        )
        self._network_manager.send_packet_to_server(header + body)

    def on_hash_query32(self, block_number: int, map_number: int) -> None:
        """Answer a server hash query with CRC-32 checksums."""
        logger.debug("hash query32 for block %d on map %d", block_number, map_number)
        crcs = self.group_of_block_crcs32(map_number, block_number)
        body = struct.pack(f">{len(crcs)}I", *crcs)
        header = _query_header(
            QUERY_HEADER_SIZE + len(body), block_number, COMMAND_QUERY32_RESPONSE, map_number
        )
        self._network_manager.send_packet_to_server(header + body)

    def on_refresh_client_view(self) -> None:
        """Make the client redraw its view of the current map."""
        logger.debug("refreshing client view")
        self._network_manager.send_packet_to_client(REFRESH_MOVE_REJECT_PACKET)
        self._network_manager.send_packet_to_client(REFRESH_RESYNC_PACKET)

    def on_update_map_definitions(self, definitions: Iterable[MapDefinition]) -> None:
        """Replace the known map definitions with those from the server."""
        self._map_definitions.clear()
        for definition in definitions:
            self._map_definitions[definition.map_number] = definition
            logger.debug(
                "registering map #%d, dim=%dx%d, wrap=%dx%d",
                definition.map_number,
                definition.map_width_in_tiles,
                definition.map_height_in_tiles,
                definition.map_wrap_width_in_tiles,
                definition.map_wrap_height_in_tiles,
            )

    def _invalidate(self, block_number: int) -> None:
        self._crc_cache.pop(block_number, None)
        self._crc32_cache.pop(block_number, None)

    def on_update_statics(self, map_number: int, block_number: int, data: bytes) -> None:
        """Store a new statics block and refresh it in the client."""
        logger.debug(
            "statics block %d on map %d, %d bytes", block_number, map_number, len(data)
        )
        self._file_manager.write_statics_block(map_number, block_number, data)
        self._invalidate(block_number)
        self._client.refresh_client_statics(block_number)

    def on_update_land(self, map_number: int, block_number: int, land_data: bytes) -> None:
        """Store a new land block and refresh the client's land."""
        self._file_manager.update_land_block(map_number, block_number, land_data)
        self._invalidate(block_number)
        self._client.refresh_client_land()

    def on_shard_identifier_update(self, shard_identifier: str) -> None:
        """Remember the shard identifier sent at login."""
        self._shard_identifier = shard_identifier

    def on_logout(self) -> None:
        """Pass the logout on to the file manager."""
        self._file_manager.on_logout()