"""GIF container records, palette bands and embedded XMP."""

from .dataset import GIFDataset
from .palette import ExtensionBlock, PaletteBand, derive_interlace_map, derive_palette_band
from .records import GIFRecords, read_records
from .xmp import MetadataPacket, locate_xmp

__all__ = [
    "ExtensionBlock",
    "GIFDataset",
    "GIFRecords",
    "MetadataPacket",
    "PaletteBand",
    "derive_interlace_map",
    "derive_palette_band",
    "locate_xmp",
    "read_records",
]
