#!/usr/bin/env python3
"""
Tests for palette band derivation
"""

import pytest

from raster_codecs.gif.palette import (
    ExtensionBlock,
    derive_interlace_map,
    derive_palette_band,
    find_transparent_index,
)

RAW = [(0, 0, 0), (255, 0, 0), (0, 255, 0), (0, 0, 255)]


def gce(flags, index):
    return ExtensionBlock(function=0xF9, data=bytes([flags, 0, 0, index]))


class TestTransparency:
    """Transparent index from graphic control extensions"""

    def test_no_blocks(self):
        assert find_transparent_index([]) is None

    def test_flag_set(self):
        assert find_transparent_index([gce(0x01, 2)]) == 2

    def test_flag_clear(self):
        assert find_transparent_index([gce(0x04, 2)]) is None

    def test_last_block_wins(self):
        assert find_transparent_index([gce(0x01, 1), gce(0x01, 3)]) == 3

    def test_later_block_without_flag_keeps_earlier(self):
        assert find_transparent_index([gce(0x01, 1), gce(0x00, 3)]) == 1

    def test_short_and_foreign_blocks_ignored(self):
        blocks = [
            ExtensionBlock(function=0xF9, data=b"\x01\x00\x00"),
            ExtensionBlock(function=0xFE, data=b"\x01\x00\x00\x02"),
        ]
        assert find_transparent_index(blocks) is None


class TestPaletteBand:
    """Color table, nodata and background"""

    def test_color_table_alpha(self):
        band = derive_palette_band(RAW, transparent_index=1)
        assert band.color_table == (
            (0, 0, 0, 255),
            (255, 0, 0, 0),
            (0, 255, 0, 255),
            (0, 0, 255, 255),
        )
        assert band.nodata == 1

    def test_opaque_without_transparency(self):
        band = derive_palette_band(RAW)
        assert all(entry[3] == 255 for entry in band.color_table)
        assert band.nodata is None

    def test_background(self):
        assert derive_palette_band(RAW, background=2).background_index == 2
        assert derive_palette_band(RAW, background=255).background_index is None

    def test_not_interlaced(self):
        band = derive_palette_band(RAW, height=8)
        assert not band.interlaced
        assert band.storage_row(5) == 5

    def test_interlaced(self):
        band = derive_palette_band(RAW, interlaced=True, height=8)
        assert band.interlaced
        assert band.storage_row(4) == 1


class TestInterlaceMap:
    """Row order of the four interlace passes"""

    def test_eight_rows(self):
        assert derive_interlace_map(8) == (0, 4, 2, 5, 1, 6, 3, 7)

    @pytest.mark.parametrize("height", [1, 2, 3, 5, 9, 17, 100])
    def test_is_permutation(self, height):
        assert sorted(derive_interlace_map(height)) == list(range(height))

    def test_empty(self):
        assert derive_interlace_map(0) == ()
