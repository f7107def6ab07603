"""
FARSITE v.4 Landscape (.lcp) datasets

Opening decodes the header and exposes the interleaved int16 pixel block
row by row. create_copy() writes a new landscape file from any RasterSource:
all options are validated and the statistics computed before the output
file is created, so a configuration problem never leaves a partial file.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Union

import numpy as np
from rasterio.crs import CRS
from rasterio.errors import CRSError
from rasterio.warp import transform as warp_transform
from rich.console import Console

from ..exceptions import ConfigError, FormatError, UserCancelled
from ..sources import RasterSource, band_statistics, iter_rows, to_int16
from .classify import DEFAULT_NODATA, classify_band
from .header import (
    BandStatistics,
    RasterHeader,
    decode_header,
    encode_header,
    resolve_layout,
)
from .layout import HEADER_SIZE, HeaderLayout
from .options import CreateOptions, LinearUnit, parse_options

console = Console()
logger = logging.getLogger("raster_codecs.lcp.dataset")

PIXEL_DTYPE = np.dtype("<i2")
GEOGRAPHIC_EPSG = 4269  # NAD83, used to derive the header latitude

ProgressCallback = Callable[[float], bool]
PathLike = Union[str, Path]


def _find_prj(path: Path) -> Optional[Path]:
    for suffix in (".prj", ".PRJ"):
        candidate = path.with_suffix(suffix)
        if candidate.exists():
            return candidate
    return None


class LCPDataset:
    """An open landscape file."""

    def __init__(self, path: Path, header: RasterHeader, fp, crs: Optional[CRS] = None,
                 prj_path: Optional[Path] = None):
        self.path = path
        self.header = header
        self.crs = crs
        self.prj_path = prj_path
        self._fp = fp

    @classmethod
    def open(cls, path: PathLike) -> "LCPDataset":
        """
        Open a landscape file read-only.

        Raises:
            FormatError: the header is missing or invalid
        """
        path = Path(path)
        fp = open(path, "rb")
        try:
            header = decode_header(fp.read(HEADER_SIZE))
        except FormatError:
            fp.close()
            raise

        crs = None
        prj_path = _find_prj(path)
        if prj_path is not None:
            try:
                crs = CRS.from_wkt(prj_path.read_text())
                logger.debug(f"Loaded SRS from {prj_path}")
            except CRSError as e:
                logger.warning(f"Ignoring unreadable projection file {prj_path}: {e}")

        logger.info(f"Opened {path}: {header.width}x{header.height}, {header.band_count} bands")
        return cls(path, header, fp, crs=crs, prj_path=prj_path)

    def close(self):
        if self._fp is not None:
            self._fp.close()
            self._fp = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    @property
    def width(self) -> int:
        return self.header.width

    @property
    def height(self) -> int:
        return self.header.height

    @property
    def count(self) -> int:
        return self.header.band_count

    @property
    def transform(self):
        return self.header.geotransform

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(np.int16)

    def _check_open(self):
        if self._fp is None:
            raise ValueError(f"Dataset is closed: {self.path}")

    @property
    def _line_size(self) -> int:
        return self.width * self.count * PIXEL_DTYPE.itemsize

    def read_row(self, band: int, row: int) -> np.ndarray:
        """Read one row of a 1-based band."""
        self._check_open()
        if not 1 <= band <= self.count:
            raise IndexError(f"Band {band} out of range 1..{self.count}")
        if not 0 <= row < self.height:
            raise IndexError(f"Row {row} out of range 0..{self.height - 1}")

        self._fp.seek(HEADER_SIZE + row * self._line_size)
        raw = self._fp.read(self._line_size)
        if len(raw) != self._line_size:
            raise OSError(f"Short read at row {row} of {self.path}")
        line = np.frombuffer(raw, dtype=PIXEL_DTYPE).reshape(self.width, self.count)
        return line[:, band - 1].astype(np.int16)

    def read_band(self, band: int) -> np.ndarray:
        """Read a whole 1-based band as a (rows, cols) int16 array."""
        return np.stack([self.read_row(band, row) for row in range(self.height)])

    def nodata(self, band: int) -> Optional[float]:
        return None

    def file_list(self) -> List[str]:
        files = [str(self.path)]
        if self.crs is not None and self.prj_path is not None:
            files.append(str(self.prj_path))
        return files

    def metadata(self) -> Dict[str, str]:
        """Dataset level metadata items."""
        items = {
            "LATITUDE": str(self.header.latitude),
            "DESCRIPTION": self.header.description,
        }
        if self.header.linear_unit is not None:
            items["LINEAR_UNIT"] = self.header.linear_unit.label
        return items

    def band_metadata(self, band: int) -> Dict[str, str]:
        """Metadata items of a 1-based band, keyed by the quantity prefix."""
        descriptor = self.header.bands[band - 1]
        quantity = self.header.layout.quantity(band)
        items = {quantity.unit_key: str(descriptor.unit_code)}
        if descriptor.unit_name is not None:
            items[quantity.name_key] = descriptor.unit_name

        key = descriptor.key
        items[f"{key}_MIN"] = str(descriptor.minimum)
        items[f"{key}_MAX"] = str(descriptor.maximum)
        classes = descriptor.classification
        items[f"{key}_NUM_CLASSES"] = str(classes.count if classes is not None else -1)

        if key == "FUEL_MODEL":
            values = []
            if classes is not None and classes.count > 0:
                values = [
                    str(v) for v in classes.values
                    if descriptor.minimum <= v <= descriptor.maximum
                ]
            items["FUEL_MODEL_VALUES"] = ",".join(values)

        items[f"{key}_FILE"] = descriptor.source_file or ""
        return items

    def band_description(self, band: int) -> str:
        return self.header.bands[band - 1].label


def _resolve_latitude(source: RasterSource, opts: CreateOptions) -> float:
    if opts.latitude is not None:
        return float(opts.latitude)

    message = "Could not calculate latitude from spatial reference and LATITUDE was not set."
    if source.crs is None:
        raise ConfigError(message)

    gt = source.transform
    center_x = gt.c + gt.a * source.width / 2
    center_y = gt.f + gt.e * source.height / 2
    try:
        _, ys = warp_transform(source.crs, CRS.from_epsg(GEOGRAPHIC_EPSG), [center_x], [center_y])
    except Exception as e:
        raise ConfigError(message) from e

    latitude = ys[0]
    if not np.isfinite(latitude):
        raise ConfigError(message)
    logger.debug(f"Derived latitude {latitude:.4f} from raster center")
    return latitude


def _resolve_linear_unit(source: RasterSource, opts: CreateOptions, strict: bool) -> LinearUnit:
    if opts.linear_unit is not None:
        return opts.linear_unit

    if source.crs is None:
        message = "Could not parse linear unit from spatial reference and LINEAR_UNIT was not set"
        if strict:
            raise ConfigError(f"{message}.")
        logger.warning(f"{message}, defaulting to meters.")
        return LinearUnit.METERS

    try:
        unit_name, unit_scale = source.crs.linear_units_factor
    except CRSError:
        unit_name, unit_scale = None, None

    if not unit_name:
        if strict:
            raise ConfigError("Could not parse linear unit.")
        logger.warning("Could not parse linear unit, using meters")
        return LinearUnit.METERS

    logger.debug(f"Setting linear unit to {unit_name}")
    lowered = unit_name.lower()
    if lowered in ("meter", "metre"):
        unit = LinearUnit.METERS
    elif "foot" in lowered or "feet" in lowered:
        unit = LinearUnit.FEET
    elif lowered.startswith("kilomet"):
        unit = LinearUnit.KILOMETERS
    else:
        unit = LinearUnit.METERS

    if unit_scale is not None and unit_scale != 1.0:
        if strict:
            raise ConfigError(f"Unit scale is {unit_scale:f} (!=1.0). It is not supported.")
        logger.warning(f"Unit scale is {unit_scale:f} (!=1.0). It is not supported, ignoring.")
    return unit


def _collect_statistics(
    source: RasterSource, opts: CreateOptions
) -> Optional[List[BandStatistics]]:
    if not opts.calculate_stats:
        return None

    statistics = []
    for band in range(1, source.count + 1):
        minimum, maximum = band_statistics(source, band)
        classes = None
        if opts.classify_data:
            nodata = source.nodata(band)
            if nodata is None or not np.isfinite(nodata):
                nodata = DEFAULT_NODATA
            rows = (to_int16(row) for row in iter_rows(source, band))
            classes = classify_band(rows, int(nodata))
        statistics.append(BandStatistics(minimum=minimum, maximum=maximum, classification=classes))
        logger.debug(f"Band {band}: min={minimum}, max={maximum}")
    return statistics


def _build_header(
    source: RasterSource,
    layout: HeaderLayout,
    opts: CreateOptions,
    latitude: float,
    linear_unit: LinearUnit,
) -> RasterHeader:
    gt = source.transform
    return RasterHeader(
        crown_fuels=layout.crown_fuels,
        ground_fuels=layout.ground_fuels,
        width=source.width,
        height=source.height,
        west=gt.c,
        east=gt.c + gt.a * source.width,
        north=gt.f,
        south=gt.f + gt.e * source.height,
        cell_x=gt.a,
        cell_y=abs(gt.e),
        linear_unit=linear_unit,
        latitude=int(latitude + 0.5),
        description=opts.description,
        unit_codes=tuple(opts.unit_codes),
    )


def _report(progress: Optional[ProgressCallback], fraction: float):
    if progress is not None and not progress(fraction):
        raise UserCancelled("User terminated CreateCopy()")


def _write_prj(path: Path, crs: CRS):
    prj_path = path.with_suffix(".prj")
    try:
        wkt = crs.to_wkt(morph_to_esri_dialect=True)
    except CRSError as e:
        logger.warning(f"Could not export spatial reference as ESRI WKT: {e}")
        return
    prj_path.write_text(wkt)
    logger.debug(f"Wrote projection file {prj_path}")


def create_copy(
    path: PathLike,
    source: RasterSource,
    strict: bool = False,
    options: Optional[Mapping[str, object]] = None,
    progress: Optional[ProgressCallback] = None,
) -> LCPDataset:
    """
    Write `source` as a landscape file and reopen it.

    Args:
        path: Output .lcp path
        source: Raster with 5, 7, 8 or 10 bands
        strict: Turn recoverable ambiguities (unset linear unit, unit scale
            other than 1, non int16 data) into errors
        options: Creation options (see parse_options)
        progress: Called with the completed fraction; a falsy return aborts

    Raises:
        ConfigError: invalid options, detected before the file is created
        UserCancelled: progress callback asked to stop
        OSError: reading the source or writing the output failed
    """
    path = Path(path)
    layout = resolve_layout(source.count)

    if np.dtype(source.dtype) != np.dtype(np.int16):
        if strict:
            raise ConfigError("LCP only supports 16-bit signed integer data types.")
        logger.warning("Setting data type to 16-bit integer.")

    opts = parse_options(options, layout)
    latitude = _resolve_latitude(source, opts)
    linear_unit = _resolve_linear_unit(source, opts, strict)
    header = _build_header(source, layout, opts, latitude, linear_unit)

    logger.info(f"Creating {path}: {source.width}x{source.height}, {layout.band_count} bands")
    statistics = _collect_statistics(source, opts)
    header_bytes = encode_header(header, statistics, source.file_list())

    with open(path, "wb") as fp:
        fp.write(header_bytes)
        _report(progress, 0.0)

        line = np.empty((source.width, source.count), dtype=PIXEL_DTYPE)
        for row in range(source.height):
            for band in range(1, source.count + 1):
                line[:, band - 1] = to_int16(source.read_row(band, row))
            fp.write(line.tobytes())
            _report(progress, (row + 1) / source.height)

    _report(progress, 1.0)

    if source.crs is not None:
        _write_prj(path, source.crs)

    console.print(f"[green]SUCCESS: Created landscape file: {path}[/green]")
    return LCPDataset.open(path)
