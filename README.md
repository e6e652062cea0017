# ultimalive

Map-side logic for keeping a tile-based game client's world in step with a
server. It covers map definitions, per-block checksums and the packets that
answer the server's hash queries. It also has a byte-signature scanner for
finding values in a memory image.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `ultimalive.map_definition`

- `MapDefinition(map_width_in_tiles, map_height_in_tiles,
  map_wrap_width_in_tiles, map_wrap_height_in_tiles, map_number)` is a frozen
  dataclass. The four sizes must fit in 16 bits and the map number must fit in
  8 bits. Anything else raises `ValueError`, and a value that is not an int
  raises `TypeError`.
  - `total_number_of_blocks()` gives the number of 8x8 tile blocks.
  - `pack()` and `MapDefinition.unpack(data)` convert to and from the packed
    little-endian 9-byte record. `unpack` raises `ValueError` on a wrong length.
- `MapTileDefinition` holds the four tile dimensions as 32-bit values.
  - `MapTileDefinition.from_map_definition(definition)` builds one from a
    `MapDefinition`.
  - `pack()` and `unpack(data)` convert to and from four little-endian 32-bit
    words.

### `ultimalive.checksums`

- `fletcher16(block_data, statics_data)`
- `calculate_crc32(block_data, statics_data)`

Each hashes the first 192 bytes of the land block and then the statics data.
Either argument may be `None`, and that part is then skipped. A land block
shorter than 192 bytes raises `ValueError`.

### `ultimalive.signatures`

These functions search a `bytes` buffer. A signature byte of `0xCC` is a
wildcard and matches any byte. Results are offsets into the buffer, or `None`
when there is no match.

- `find_signature_offset(buffer, signature)` returns the first match, searching
  forwards. It does not consider a match that ends exactly at the end of the
  buffer.
- `find_signature_offset_backwards(buffer, position, search_length, signature)`
  searches the `search_length` offsets before `position`, nearest first.
- `find_function_call(buffer, signature)` finds the signature and then looks
  back up to 100 bytes for a function start. It tries the prologue
  `55 8B EC` first. If that is not found it tries `90 90 6A` and returns the
  offset 2 bytes past it.
- `find_signature(buffer, signature, offset)` returns the unsigned 32-bit
  little-endian value stored `offset` bytes after the match.
- `find_structure(buffer, signature, offset, size_offset)` returns a tuple
  `(address, size)`. The address is unsigned 32-bit and the size is signed
  32-bit, both read at the given offsets from the match.

Reading past the end of the buffer raises `ValueError`.

### `ultimalive.atlas`

`Atlas(file_manager, network_manager, client)` keeps the map definitions sent
by the server and caches block checksums. Its three collaborators are plain
objects with these methods:

- **file manager**: `initialize_shard_maps(shard_identifier, definitions)`,
  `load_map(map_number)`, `write_statics_block(map_number, block_number, data)`,
  `update_land_block(map_number, block_number, land_data)`,
  `read_land_block(map_number, block_number)`,
  `read_statics_block(map_number, block_number)` and `on_logout()`.
- **network manager**: `send_packet_to_server(packet)` and
  `send_packet_to_client(packet)`.
- **client**: `set_map_dimensions(tile_definition)`,
  `refresh_client_statics(block_number)` and `refresh_client_land()`.

The main members of `Atlas` are:

- `on_update_map_definitions(definitions)` replaces the known maps.
- `load_map(map_number)` loads a map, but only if it has been defined. The
  first call also passes the shard identifier and the definitions to the file
  manager.
- The `current_map` property gives the number of the loaded map.
- `on_map_change(map_number)` loads the map and returns `0`, the number the
  client should be shown.
- `on_before_map_change(map_number)` tells the client to switch to map 1.
- `group_of_block_crcs(map_number, block_number)` and
  `group_of_block_crcs32(...)` return the checksums of the blocks in the
  current view range around a block. Coordinates wrap at the map's wrap
  limits. Cached values are reused.
- `block_crc(map_number, block_number)` and `block_crc32(...)` give the
  checksum of a single block. They return `0` when the map is unknown or the
  land data is missing.
- `on_blocks_view_range(min_x, max_x, min_y, max_y)` adopts a new view range
  and acknowledges it to the server. The default range is -2..2 on both axes.
- `on_hash_query(block_number, map_number)` and
  `on_hash_query32(block_number, map_number)` send the server a query
  response packet with the group's checksums.
- `on_update_statics(...)` and `on_update_land(...)` write through the file
  manager, drop the cached checksums for that block and refresh the client.
- `on_refresh_client_view()` sends the client the two packets that make it
  redraw.
- `on_shard_identifier_update(shard_identifier)` and `on_logout()` complete
  the set.

## Example

```python
from ultimalive.checksums import calculate_crc32, fletcher16
from ultimalive.map_definition import MapDefinition

land = bytes(192)
statics = b"\x01\x02\x03"
print(hex(fletcher16(land, statics)), hex(calculate_crc32(land, statics)))

felucca = MapDefinition(
    map_width_in_tiles=7168,
    map_height_in_tiles=4096,
    map_wrap_width_in_tiles=5120,
    map_wrap_height_in_tiles=4096,
    map_number=0,
)
print(felucca.total_number_of_blocks())
```

## What it does not do

The package has no network connection, no map-file storage and no way of
attaching to a running client. `Atlas` only builds packets and makes calls.
Sending those packets, reading and writing map files, and changing the
client's memory are left to the file manager, network manager and client
objects you supply. The signature functions search a buffer you already hold;
they do not read another process's memory.