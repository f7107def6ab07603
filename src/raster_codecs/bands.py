"""
Band variants behind a single dispatch.

A band is plain pixel data, a palette band (pixels index a color table), a
proxy that delegates pixels to another band but overrides its color
interpretation, or a complex band pairing an in-phase and a quadrature
band.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .gif.palette import ColorEntry, PaletteBand
from .sources import RasterSource

logger = logging.getLogger("raster_codecs.bands")


class BandKind(Enum):
    PLAIN = "plain"
    PALETTE = "palette"
    PROXY = "proxy"
    COMPLEX = "complex"


@dataclass
class Band:
    kind: BandKind
    source: Optional[RasterSource] = None
    index: int = 1
    palette: Optional[PaletteBand] = None
    color_interpretation: str = "Undefined"
    # PROXY: the band supplying pixels
    underlying: Optional["Band"] = None
    # COMPLEX: 1-based index of the quadrature band in `source`
    quadrature_index: Optional[int] = None

    @classmethod
    def plain(cls, source: RasterSource, index: int) -> "Band":
        return cls(BandKind.PLAIN, source=source, index=index, color_interpretation="Gray")

    @classmethod
    def palette_band(cls, source: RasterSource, index: int, palette: PaletteBand) -> "Band":
        return cls(
            BandKind.PALETTE,
            source=source,
            index=index,
            palette=palette,
            color_interpretation="Palette",
        )

    @classmethod
    def proxy(
        cls,
        underlying: "Band",
        color_interpretation: str,
        palette: Optional[PaletteBand] = None,
    ) -> "Band":
        return cls(
            BandKind.PROXY,
            underlying=underlying,
            palette=palette,
            color_interpretation=color_interpretation,
        )

    @classmethod
    def complex_pair(cls, source: RasterSource, in_phase: int, quadrature: int) -> "Band":
        return cls(
            BandKind.COMPLEX,
            source=source,
            index=in_phase,
            quadrature_index=quadrature,
            color_interpretation="Undefined",
        )


def read_row(band: Band, row: int) -> np.ndarray:
    """Pixel values of one row of `band`."""
    if band.kind in (BandKind.PLAIN, BandKind.PALETTE):
        return band.source.read_row(band.index, row)
    if band.kind is BandKind.PROXY:
        return read_row(band.underlying, row)
    if band.kind is BandKind.COMPLEX:
        real = np.asarray(band.source.read_row(band.index, row), dtype=np.float64)
        imag = np.asarray(band.source.read_row(band.quadrature_index, row), dtype=np.float64)
        return real + 1j * imag
    raise ValueError(f"Unknown band kind: {band.kind}")


def color_table(band: Band) -> Optional[Tuple[ColorEntry, ...]]:
    """RGBA color table, or None for bands without one."""
    if band.palette is not None:
        return band.palette.color_table
    if band.kind is BandKind.PROXY:
        return color_table(band.underlying)
    return None


def nodata(band: Band) -> Optional[float]:
    if band.kind is BandKind.PALETTE:
        return band.palette.nodata
    if band.kind is BandKind.PROXY:
        return nodata(band.underlying)
    return band.source.nodata(band.index)
