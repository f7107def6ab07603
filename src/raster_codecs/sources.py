"""
Raster sources consumed by the writers.

A writer only needs dimensions, georeferencing, row access and the list of
files backing the source. Anything rasterio can open is wrapped by
RasterioSource; ArraySource serves in-memory stacks (no backing files).
"""

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Protocol, Tuple

import numpy as np
import rasterio
from rasterio.crs import CRS
from rasterio.transform import Affine
from rasterio.windows import Window

logger = logging.getLogger("raster_codecs.sources")


class RasterSource(Protocol):
    width: int
    height: int
    count: int
    dtype: np.dtype
    transform: Affine
    crs: Optional[CRS]

    def read_row(self, band: int, row: int) -> np.ndarray: ...

    def nodata(self, band: int) -> Optional[float]: ...

    def file_list(self) -> List[str]: ...


INT16_MIN = -32768
INT16_MAX = 32767


def to_int16(row: np.ndarray) -> np.ndarray:
    """Round to nearest and clamp to the int16 range."""
    row = np.asarray(row)
    if row.dtype == np.int16:
        return row
    return np.clip(np.rint(row), INT16_MIN, INT16_MAX).astype(np.int16)


def iter_rows(source: RasterSource, band: int) -> Iterator[np.ndarray]:
    """Yield the rows of a 1-based band, top to bottom."""
    for row in range(source.height):
        yield source.read_row(band, row)


def band_statistics(source: RasterSource, band: int) -> Tuple[float, float]:
    """
    Exact minimum and maximum of a band as written to int16, ignoring its
    nodata value.

    Returns (0.0, 0.0) when every pixel is nodata.
    """
    nodata = source.nodata(band)
    minimum = None
    maximum = None
    for row in iter_rows(source, band):
        values = np.asarray(row)
        if nodata is not None:
            values = values[values != nodata]
        values = to_int16(values)
        if values.size == 0:
            continue
        row_min = float(values.min())
        row_max = float(values.max())
        minimum = row_min if minimum is None else min(minimum, row_min)
        maximum = row_max if maximum is None else max(maximum, row_max)

    if minimum is None:
        logger.warning(f"Band {band} has no valid pixels, statistics set to 0")
        return 0.0, 0.0
    return minimum, maximum


class ArraySource:
    """In-memory (bands, rows, cols) stack."""

    def __init__(
        self,
        data: np.ndarray,
        transform: Affine = Affine.identity(),
        crs: Optional[CRS] = None,
        nodata: Optional[float] = None,
    ):
        if data.ndim == 2:
            data = data[np.newaxis, ...]
        if data.ndim != 3:
            raise ValueError(f"Expected a (bands, rows, cols) array, got shape {data.shape}")
        self.data = data
        self.count, self.height, self.width = data.shape
        self.dtype = data.dtype
        self.transform = transform
        self.crs = crs
        self._nodata = nodata

    def read_row(self, band: int, row: int) -> np.ndarray:
        return self.data[band - 1, row]

    def nodata(self, band: int) -> Optional[float]:
        return self._nodata

    def file_list(self) -> List[str]:
        return []


class RasterioSource:
    """Row access over an open rasterio dataset."""

    def __init__(self, dataset):
        self.dataset = dataset
        self.width = dataset.width
        self.height = dataset.height
        self.count = dataset.count
        self.dtype = np.dtype(dataset.dtypes[0])
        self.transform = dataset.transform
        self.crs = dataset.crs

    @classmethod
    def open(cls, path: Path) -> "RasterioSource":
        return cls(rasterio.open(path))

    def close(self):
        self.dataset.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def read_row(self, band: int, row: int) -> np.ndarray:
        window = Window(0, row, self.width, 1)
        return self.dataset.read(band, window=window)[0]

    def nodata(self, band: int) -> Optional[float]:
        return self.dataset.nodatavals[band - 1]

    def file_list(self) -> List[str]:
        return list(self.dataset.files)
