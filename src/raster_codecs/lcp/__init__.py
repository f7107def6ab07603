"""FARSITE v.4 Landscape (.lcp) files."""

from .classify import ClassSet, classify_band
from .dataset import LCPDataset, create_copy
from .header import BandDescriptor, BandStatistics, RasterHeader, decode_header, encode_header, identify
from .options import CreateOptions, LinearUnit, parse_options

__all__ = [
    "BandDescriptor",
    "BandStatistics",
    "ClassSet",
    "CreateOptions",
    "LCPDataset",
    "LinearUnit",
    "RasterHeader",
    "classify_band",
    "create_copy",
    "decode_header",
    "encode_header",
    "identify",
    "parse_options",
]
