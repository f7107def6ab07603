"""
Shared fixtures for the raster-codecs test suite
"""

import numpy as np
import pytest
from rasterio.crs import CRS
from rasterio.transform import from_origin

from raster_codecs.lcp.header import RasterHeader
from raster_codecs.lcp.options import LinearUnit
from raster_codecs.sources import ArraySource

XMP_TRAILER = bytes([0x01]) + bytes(range(0xFF, -1, -1)) + b"\x00"


def make_header(crown=False, ground=False, **overrides) -> RasterHeader:
    """A georeferenced header with round numbers"""
    fields = dict(
        crown_fuels=crown,
        ground_fuels=ground,
        width=4,
        height=3,
        west=500000.0,
        east=500120.0,
        north=4500000.0,
        south=4499910.0,
        cell_x=30.0,
        cell_y=30.0,
        linear_unit=LinearUnit.METERS,
        latitude=41,
        description="test landscape",
    )
    fields.update(overrides)
    return RasterHeader(**fields)


def make_stack(bands=5, height=3, width=4) -> np.ndarray:
    """Distinct, small int16 values per band"""
    base = np.arange(height * width, dtype=np.int16).reshape(height, width)
    return np.stack([base + 100 * b for b in range(bands)]).astype(np.int16)


def make_gif(
    extensions=b"",
    width=2,
    height=2,
    background=0,
    interlaced=False,
    global_table=b"\x00\x00\x00\xff\xff\xff",
) -> bytes:
    """Minimal GIF89a with a 2-entry global table and one image"""
    packed = 0x80 if global_table else 0x00
    image_flags = 0x40 if interlaced else 0x00
    return (
        b"GIF89a"
        + width.to_bytes(2, "little")
        + height.to_bytes(2, "little")
        + bytes([packed, background, 0])
        + global_table
        + extensions
        + b"\x2c\x00\x00\x00\x00"
        + width.to_bytes(2, "little")
        + height.to_bytes(2, "little")
        + bytes([image_flags])
        + b"\x02\x02\x44\x01\x00"
        + b"\x3b"
    )


def graphic_control(flags=0x01, index=0) -> bytes:
    return b"\x21\xf9\x04" + bytes([flags, 0, 0, index]) + b"\x00"


def xmp_extension(packet: bytes) -> bytes:
    return b"\x21\xff\x0bXMP DataXMP" + packet + XMP_TRAILER


@pytest.fixture
def header():
    return make_header()


@pytest.fixture
def utm_source():
    """5-band int16 stack in UTM zone 11N"""
    return ArraySource(
        make_stack(5),
        transform=from_origin(500000.0, 4500000.0, 30.0, 30.0),
        crs=CRS.from_epsg(32611),
    )


@pytest.fixture
def geographic_source():
    """5-band int16 stack in WGS84 centred near 45.3N"""
    return ArraySource(
        make_stack(5, height=4, width=4),
        transform=from_origin(-120.0, 45.5, 0.1, 0.1),
        crs=CRS.from_epsg(4326),
    )
