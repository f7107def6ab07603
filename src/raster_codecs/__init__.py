"""
raster-codecs: binary codecs for geospatial raster formats

- FARSITE v.4 Landscape (.lcp) header decoding and encoding, with
  per-band statistics and classification
- XMP packet extraction from GIF streams
- Palette band derivation (transparency, interlaced row order)
"""

from .bands import Band, BandKind
from .compare import compare_rasters, display_comparison_table
from .exceptions import ConfigError, FormatError, RasterCodecError, UserCancelled
from .gif import GIFDataset, MetadataPacket, derive_palette_band, locate_xmp
from .lcp import ClassSet, LCPDataset, classify_band, create_copy, decode_header, encode_header
from .remote import download_remote, is_remote_url
from .sources import ArraySource, RasterioSource

__version__ = "0.1.0"  # Keep in sync with pyproject.toml
__all__ = [
    # Landscape files
    "LCPDataset",
    "create_copy",
    "decode_header",
    "encode_header",
    "classify_band",
    "ClassSet",
    # GIF
    "GIFDataset",
    "MetadataPacket",
    "locate_xmp",
    "derive_palette_band",
    # Bands and sources
    "Band",
    "BandKind",
    "ArraySource",
    "RasterioSource",
    # Comparison utilities
    "compare_rasters",
    "display_comparison_table",
    # Remote access
    "is_remote_url",
    "download_remote",
    # Errors
    "RasterCodecError",
    "FormatError",
    "ConfigError",
    "UserCancelled",
]
