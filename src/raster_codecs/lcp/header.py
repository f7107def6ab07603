"""
Landscape (.lcp) header codec

Decodes the fixed 7316 byte header into a RasterHeader with one
BandDescriptor per band, and encodes a header plus per-band statistics back
into the exact same byte layout. All offsets come from the HeaderLayout of
the file's feature-flag combination; raw sentinels (-1 class counts, 20/21
flags) only exist inside this module.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from rasterio.transform import Affine

from ..byte_cursor import ByteCursor
from ..exceptions import ConfigError, FormatError
from .classify import ClassSet
from .layout import (
    CELL_X_OFFSET,
    CELL_Y_OFFSET,
    CROWN_FLAG_OFFSET,
    DESCRIPTION_OFFSET,
    EXTENT_OFFSET,
    FLAG_ABSENT,
    FLAG_PRESENT,
    GROUND_FLAG_OFFSET,
    HEADER_SIZE,
    HEIGHT_OFFSET,
    LATITUDE_OFFSET,
    LINEAR_UNIT_OFFSET,
    MAX_BANDS,
    MAX_CLASSES,
    MAX_DESCRIPTION,
    MAX_PATH,
    PATHS_END_OFFSETS,
    STATS_END_OFFSETS,
    UNIT_CODES_OFFSET,
    VALID_BAND_COUNTS,
    WIDTH_OFFSET,
    HeaderLayout,
    Quantity,
    get_layout,
    layout_for_band_count,
)
from .options import DEFAULT_UNIT_CODES, LinearUnit

logger = logging.getLogger("raster_codecs.lcp.header")

IDENTIFY_MIN_BYTES = 50
INT32_MAX = 2**31 - 1
BYTES_PER_SAMPLE = 2


@dataclass(frozen=True)
class BandDescriptor:
    """Decoded description of one band."""

    index: int
    key: str
    label: str
    unit_code: int
    unit_name: Optional[str] = None
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    classification: Optional[ClassSet] = None
    source_file: Optional[str] = None


@dataclass(frozen=True)
class BandStatistics:
    """Values written into a band's statistics block.

    `classification` is None when classification was not requested.
    """

    minimum: float
    maximum: float
    classification: Optional[ClassSet] = None


@dataclass
class RasterHeader:
    """In-memory form of a landscape header."""

    crown_fuels: bool
    ground_fuels: bool
    width: int
    height: int
    west: float
    east: float
    north: float
    south: float
    cell_x: float
    cell_y: float
    linear_unit: Optional[LinearUnit] = LinearUnit.METERS
    latitude: int = 0
    description: str = ""
    unit_codes: Tuple[int, ...] = DEFAULT_UNIT_CODES
    bands: Tuple[BandDescriptor, ...] = field(default_factory=tuple)

    @property
    def layout(self) -> HeaderLayout:
        return get_layout(self.crown_fuels, self.ground_fuels)

    @property
    def band_count(self) -> int:
        return self.layout.band_count

    @property
    def geotransform(self) -> Affine:
        # cell_y is stored positive; north-up rasters step down in y
        return Affine(self.cell_x, 0.0, self.west, 0.0, -self.cell_y, self.north)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        return (self.west, self.south, self.east, self.north)


def resolve_layout(band_count: int) -> HeaderLayout:
    """Layout for a requested band count.

    Raises:
        ConfigError: no feature-flag combination has `band_count` bands
    """
    layout = layout_for_band_count(band_count)
    if layout is None:
        expected = ", ".join(str(n) for n in VALID_BAND_COUNTS)
        raise ConfigError(
            f"LCP driver doesn't support {band_count} bands. Must be one of {expected} bands."
        )
    return layout


def identify(data: bytes) -> bool:
    """Cheap check of the first header fields, without decoding."""
    if len(data) < IDENTIFY_MIN_BYTES:
        return False
    cursor = ByteCursor(data=data[:IDENTIFY_MIN_BYTES])
    flags = (cursor.int32_at(CROWN_FLAG_OFFSET), cursor.int32_at(GROUND_FLAG_OFFSET))
    if any(flag not in (FLAG_ABSENT, FLAG_PRESENT) for flag in flags):
        return False
    return -90 <= cursor.int32_at(LATITUDE_OFFSET) <= 90


def _decode_flag(cursor: ByteCursor, offset: int, name: str) -> bool:
    value = cursor.int32_at(offset)
    if value not in (FLAG_ABSENT, FLAG_PRESENT):
        raise FormatError(f"Invalid {name} flag {value}, expected {FLAG_ABSENT} or {FLAG_PRESENT}")
    return value == FLAG_PRESENT


def _decode_classification(cursor: ByteCursor, quantity: Quantity) -> Optional[ClassSet]:
    count = cursor.int32_at(quantity.stats_offset + 8)
    if count == -1:
        return ClassSet.too_many()
    if count < 0 or count >= MAX_CLASSES:
        logger.debug(f"Ignoring out of range class count {count} for {quantity.key}")
        return None
    first = quantity.stats_offset + 12
    values = tuple(cursor.int32_at(first + 4 * i) for i in range(count + 1))
    return ClassSet(count=count, values=values)


def _decode_band(cursor: ByteCursor, index: int, quantity: Quantity) -> BandDescriptor:
    unit_code = cursor.uint16_at(quantity.unit_offset)
    source_file = cursor.string_at(quantity.path_offset, MAX_PATH)
    return BandDescriptor(
        index=index,
        key=quantity.key,
        label=quantity.label,
        unit_code=unit_code,
        unit_name=quantity.unit_name(unit_code),
        minimum=cursor.int32_at(quantity.stats_offset),
        maximum=cursor.int32_at(quantity.stats_offset + 4),
        classification=_decode_classification(cursor, quantity),
        source_file=source_file or None,
    )


def decode_header(data: bytes) -> RasterHeader:
    """
    Decode a landscape header.

    Args:
        data: At least the first 7316 bytes of the file

    Returns:
        RasterHeader with its band descriptors

    Raises:
        FormatError: short buffer, bad feature flags or invalid dimensions
    """
    if len(data) < HEADER_SIZE:
        raise FormatError(f"File too short: {len(data)} bytes, header needs {HEADER_SIZE}")

    cursor = ByteCursor(data=data[:HEADER_SIZE])

    # crown fuels = canopy height, canopy base height, canopy bulk density
    crown_fuels = _decode_flag(cursor, CROWN_FLAG_OFFSET, "crown fuels")
    # ground fuels = duff loading, coarse woody debris
    ground_fuels = _decode_flag(cursor, GROUND_FLAG_OFFSET, "ground fuels")
    layout = get_layout(crown_fuels, ground_fuels)

    width = cursor.int32_at(WIDTH_OFFSET)
    height = cursor.int32_at(HEIGHT_OFFSET)
    if width <= 0 or height <= 0:
        raise FormatError(f"Invalid dataset dimensions: {width} x {height}")

    pixel_size = layout.band_count * BYTES_PER_SAMPLE
    if width > INT32_MAX // pixel_size:
        raise FormatError(f"Int overflow occurred: width {width} with {layout.band_count} bands")

    linear_code = cursor.int32_at(LINEAR_UNIT_OFFSET)
    try:
        linear_unit = LinearUnit(linear_code)
    except ValueError:
        logger.debug(f"Unknown linear unit code {linear_code}")
        linear_unit = None

    bands = tuple(
        _decode_band(cursor, index, quantity)
        for index, quantity in enumerate(layout.quantities, start=1)
    )

    header = RasterHeader(
        crown_fuels=crown_fuels,
        ground_fuels=ground_fuels,
        width=width,
        height=height,
        east=cursor.float64_at(EXTENT_OFFSET),
        west=cursor.float64_at(EXTENT_OFFSET + 8),
        north=cursor.float64_at(EXTENT_OFFSET + 16),
        south=cursor.float64_at(EXTENT_OFFSET + 24),
        cell_x=cursor.float64_at(CELL_X_OFFSET),
        cell_y=cursor.float64_at(CELL_Y_OFFSET),
        linear_unit=linear_unit,
        latitude=cursor.int32_at(LATITUDE_OFFSET),
        description=cursor.string_at(DESCRIPTION_OFFSET, MAX_DESCRIPTION),
        unit_codes=tuple(cursor.uint16_at(UNIT_CODES_OFFSET + 2 * k) for k in range(MAX_BANDS)),
        bands=bands,
    )
    logger.debug(
        f"Decoded header: {width}x{height}, {layout.band_count} bands, "
        f"crown={crown_fuels}, ground={ground_fuels}"
    )
    return header


def _write_extent(cursor: ByteCursor, header: RasterHeader) -> None:
    cursor.write_float64(header.east)
    cursor.write_float64(header.west)
    cursor.write_float64(header.north)
    cursor.write_float64(header.south)


def _write_statistics(
    cursor: ByteCursor, layout: HeaderLayout, statistics: Sequence[BandStatistics]
) -> None:
    for quantity, stats in zip(layout.quantities, statistics):
        # ground fuels without crown fuels: fast forward over the crown blocks
        if cursor.tell() < quantity.stats_offset:
            cursor.seek(quantity.stats_offset)
        cursor.write_int32(int(stats.minimum))
        cursor.write_int32(int(stats.maximum))

        classes = stats.classification
        if classes is None:
            cursor.write_int32(-1)
            cursor.skip(4 * MAX_CLASSES)
            continue

        cursor.write_int32(classes.count)
        slots = list(classes.values[:MAX_CLASSES])
        slots.extend([0] * (MAX_CLASSES - len(slots)))
        for value in slots:
            cursor.write_int32(value)


def _write_paths(cursor: ByteCursor, layout: HeaderLayout, source_file: str) -> None:
    for quantity in layout.quantities:
        if cursor.tell() < quantity.path_offset:
            cursor.seek(quantity.path_offset)
        cursor.write_string(source_file, MAX_PATH)
        cursor.seek(quantity.path_offset + MAX_PATH)


def encode_header(
    header: RasterHeader,
    statistics: Optional[Sequence[BandStatistics]] = None,
    source_files: Optional[Sequence[str]] = None,
) -> bytes:
    """
    Encode a landscape header.

    Args:
        header: Header to write; its flags select the layout
        statistics: One entry per band, or None when statistics were not
            requested (the whole statistics region is then skipped)
        source_files: File list of the source dataset; the first entry is
            written into every band's path slot. None or empty skips the
            path slots.

    Returns:
        The 7316 byte header

    Raises:
        ConfigError: statistics do not match the band count, or the linear
            unit was never resolved
    """
    layout = header.layout
    if statistics is not None and len(statistics) != layout.band_count:
        raise ConfigError(
            f"Got statistics for {len(statistics)} bands, layout has {layout.band_count}"
        )
    if header.linear_unit is None:
        raise ConfigError("Linear unit must be resolved before encoding")

    cursor = ByteCursor(size=HEADER_SIZE)
    cursor.write_int32(FLAG_PRESENT if header.crown_fuels else FLAG_ABSENT)
    cursor.write_int32(FLAG_PRESENT if header.ground_fuels else FLAG_ABSENT)
    cursor.write_int32(header.latitude)
    _write_extent(cursor, header)

    if statistics is not None:
        _write_statistics(cursor, layout, statistics)
    else:
        cursor.seek(WIDTH_OFFSET)

    assert cursor.tell() in STATS_END_OFFSETS, f"Statistics writer ended at {cursor.tell()}"
    cursor.seek(WIDTH_OFFSET)

    cursor.write_int32(header.width)
    cursor.write_int32(header.height)
    _write_extent(cursor, header)
    cursor.write_int32(int(header.linear_unit))
    cursor.write_float64(header.cell_x)
    cursor.write_float64(abs(header.cell_y))

    for code in header.unit_codes[:MAX_BANDS]:
        cursor.write_int16(code)

    if source_files:
        _write_paths(cursor, layout, source_files[0])
    else:
        # no file list (in-memory source)
        cursor.seek(DESCRIPTION_OFFSET)

    assert cursor.tell() in PATHS_END_OFFSETS, f"Path writer ended at {cursor.tell()}"
    cursor.seek(DESCRIPTION_OFFSET)

    cursor.write_string(header.description, MAX_DESCRIPTION)
    assert cursor.tell() <= HEADER_SIZE

    return cursor.getvalue()
