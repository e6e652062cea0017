import pytest

from ultimalive.checksums import LAND_BLOCK_SIZE, calculate_crc32, fletcher16

LAND = bytes(range(LAND_BLOCK_SIZE))
STATICS = bytes((7, 0, 3, 255, 9, 1, 2))


def test_fletcher16_of_nothing_is_zero():
    assert fletcher16(None, None) == 0


def test_fletcher16_single_byte():
    assert fletcher16(None, b"\x01") == 0x0101


def test_fletcher16_land_equals_land_as_statics():
    assert fletcher16(LAND, STATICS) == fletcher16(None, LAND + STATICS)


def test_fletcher16_only_reads_192_land_bytes():
    assert fletcher16(LAND + b"\xff" * 10, None) == fletcher16(LAND, None)


def test_fletcher16_halves_stay_below_255():
    value = fletcher16(LAND, b"\xff" * 1000)
    assert value & 0xFF < 255 and value >> 8 < 255


def test_fletcher16_short_land_block_raises():
    with pytest.raises(ValueError):
        fletcher16(b"\x00" * 10, None)


def test_crc32_known_check_value():
    assert calculate_crc32(None, b"123456789") == 0xCBF43926


def test_crc32_of_nothing_is_zero():
    assert calculate_crc32(None, None) == 0


def test_crc32_land_equals_land_as_statics():
    assert calculate_crc32(LAND, STATICS) == calculate_crc32(None, LAND + STATICS)


def test_crc32_only_reads_192_land_bytes():
    assert calculate_crc32(LAND + b"\x01", STATICS) == calculate_crc32(LAND, STATICS)


def test_crc32_changes_with_statics():
    assert calculate_crc32(LAND, STATICS) != calculate_crc32(LAND, STATICS + b"\x00")
    assert 0 <= calculate_crc32(LAND, STATICS) <= 0xFFFFFFFF


def test_crc32_short_land_block_raises():
    with pytest.raises(ValueError):
        calculate_crc32(b"\x00" * 191, STATICS)