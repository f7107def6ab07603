"""
GIF datasets: container records, palette band, world file and XMP.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from rasterio.transform import Affine

from ..exceptions import FormatError
from .palette import PaletteBand, derive_palette_band, find_transparent_index
from .records import GIFRecords, read_records
from .xmp import MetadataPacket, locate_xmp

logger = logging.getLogger("raster_codecs.gif.dataset")

WORLD_FILE_SUFFIXES = (".gfw", ".GFW", ".wld", ".WLD")

PathLike = Union[str, Path]


def read_world_file(path: Path) -> Affine:
    """
    Parse an ESRI world file into an affine transform.

    The six values locate the center of the upper left pixel; the returned
    transform is anchored on the pixel corner.
    """
    values = [float(line) for line in path.read_text().split() if line.strip()]
    if len(values) < 6:
        raise FormatError(f"World file {path} has {len(values)} values, expected 6")
    a, d, b, e, c, f = values[:6]
    return Affine(a, b, c - a / 2 - b / 2, d, e, f - d / 2 - e / 2)


def _find_world_file(path: Path) -> Optional[Path]:
    for suffix in WORLD_FILE_SUFFIXES:
        candidate = path.with_suffix(suffix)
        if candidate.exists():
            return candidate
    return None


class GIFDataset:
    """An open GIF file, described up to its first image."""

    def __init__(self, path: Path, records: GIFRecords, fp, transform: Optional[Affine] = None):
        self.path = path
        self.records = records
        self.transform = transform if transform is not None else Affine.identity()
        self.georeferenced = transform is not None
        self._fp = fp
        self._xmp: Optional[MetadataPacket] = None

        image = records.image
        self.palette_band: PaletteBand = derive_palette_band(
            records.palette,
            transparent_index=find_transparent_index(records.extensions),
            background=records.background,
            interlaced=image.interlaced,
            height=image.height,
        )

    @classmethod
    def open(cls, path: PathLike) -> "GIFDataset":
        """
        Open a GIF file read-only.

        Raises:
            FormatError: not a GIF, or the file holds no image
        """
        path = Path(path)
        fp = open(path, "rb")
        try:
            records = read_records(fp)
            if records.image is None:
                raise FormatError(f"GIF file {path} contains no image")

            transform = None
            world_file = _find_world_file(path)
            if world_file is not None:
                transform = read_world_file(world_file)
                logger.debug(f"Loaded geotransform from {world_file}")
        except Exception:
            fp.close()
            raise

        logger.info(f"Opened {path}: {records.image.width}x{records.image.height} GIF{records.version}")
        return cls(path, records, fp, transform=transform)

    def close(self):
        if self._fp is not None:
            self._fp.close()
            self._fp = None
        self._xmp = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    @property
    def width(self) -> int:
        return self.records.image.width

    @property
    def height(self) -> int:
        return self.records.image.height

    @property
    def count(self) -> int:
        return 1

    def xmp(self) -> MetadataPacket:
        """The embedded XMP packet, scanned on first access."""
        if self._xmp is None:
            if self._fp is None:
                raise ValueError(f"Dataset is closed: {self.path}")
            self._xmp = locate_xmp(self._fp)
        return self._xmp

    def metadata(self, domain: str = "") -> Dict[str, str]:
        if domain == "IMAGE_STRUCTURE":
            return {"INTERLACED": "YES" if self.palette_band.interlaced else "NO"}
        if domain == "xml:XMP":
            packet = self.xmp()
            return {"XMP": packet.text} if packet.found else {}
        return {}

    def band_metadata(self, band: int = 1) -> Dict[str, str]:
        if band != 1:
            raise IndexError(f"Band {band} out of range 1..1")
        background = self.palette_band.background_index
        if background is None:
            return {}
        return {"GIF_BACKGROUND": str(background)}

    def nodata(self, band: int = 1) -> Optional[int]:
        return self.palette_band.nodata
