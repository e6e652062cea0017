import pytest

from ultimalive.map_definition import MapDefinition, MapTileDefinition


def _felucca():
    return MapDefinition(7168, 4096, 5120, 4096, 0)


def test_total_number_of_blocks_matches_default_cache_size():
    assert _felucca().total_number_of_blocks() == 896 * 512


def test_total_number_of_blocks_ignores_partial_blocks():
    full = MapDefinition(64, 64, 64, 64, 2)
    ragged = MapDefinition(71, 70, 64, 64, 2)
    assert ragged.total_number_of_blocks() == full.total_number_of_blocks()


def test_pack_wire_bytes():
    definition = MapDefinition(0x1C00, 0x1000, 0x1400, 0x1000, 1)
    assert definition.pack() == bytes(
        [0x00, 0x1C, 0x00, 0x10, 0x00, 0x14, 0x00, 0x10, 0x01]
    )


def test_map_definition_round_trip():
    definition = MapDefinition(2304, 1600, 2304, 1600, 3)
    assert MapDefinition.unpack(definition.pack()) == definition


def test_map_definition_unpack_wrong_length():
    with pytest.raises(ValueError):
        MapDefinition.unpack(b"\x00" * 8)


@pytest.mark.parametrize(
    "args",
    [
        (0x10000, 0, 0, 0, 0),
        (0, -1, 0, 0, 0),
        (0, 0, 0, 0, 256),
    ],
)
def test_map_definition_rejects_out_of_range(args):
    with pytest.raises(ValueError):
        MapDefinition(*args)


def test_map_definition_rejects_non_int():
    with pytest.raises(TypeError):
        MapDefinition(1.5, 0, 0, 0, 0)


def test_tile_definition_from_map_definition():
    definition = _felucca()
    tiles = MapTileDefinition.from_map_definition(definition)
    assert (
        tiles.map_width_in_tiles,
        tiles.map_height_in_tiles,
        tiles.map_wrap_width_in_tiles,
        tiles.map_wrap_height_in_tiles,
    ) == (7168, 4096, 5120, 4096)


def test_tile_definition_pack_is_four_little_endian_words():
    tiles = MapTileDefinition(1, 2, 3, 4)
    packed = tiles.pack()
    assert len(packed) == 16
    assert [int.from_bytes(packed[i:i + 4], "little") for i in range(0, 16, 4)] == [
        1,
        2,
        3,
        4,
    ]


def test_tile_definition_round_trip():
    tiles = MapTileDefinition(0xFFFFFFFF, 4096, 5120, 0)
    assert MapTileDefinition.unpack(tiles.pack()) == tiles


def test_tile_definition_unpack_wrong_length():
    with pytest.raises(ValueError):
        MapTileDefinition.unpack(b"\x00" * 17)


def test_tile_definition_rejects_out_of_range():
    with pytest.raises(ValueError):
        MapTileDefinition(1 << 32, 0, 0, 0)