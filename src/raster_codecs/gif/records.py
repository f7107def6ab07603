"""
GIF container records up to the first image.

Reads the header, logical screen descriptor, color tables, the extension
blocks preceding the first image and that image's descriptor. Pixel data
(LZW) is not decoded here.
"""

import logging
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional, Tuple

from ..exceptions import FormatError
from .palette import ExtensionBlock

logger = logging.getLogger("raster_codecs.gif.records")

GIF_SIGNATURES = (b"GIF87a", b"GIF89a")
EXTENSION_INTRODUCER = 0x21
IMAGE_SEPARATOR = 0x2C
TRAILER = 0x3B
CONTINUE_FUNCTION = 0x00

RGB = Tuple[int, int, int]


@dataclass
class ImageDescriptor:
    left: int
    top: int
    width: int
    height: int
    interlaced: bool
    local_palette: Optional[List[RGB]] = None


@dataclass
class GIFRecords:
    version: str
    width: int
    height: int
    background: int
    global_palette: Optional[List[RGB]] = None
    extensions: List[ExtensionBlock] = field(default_factory=list)
    image: Optional[ImageDescriptor] = None

    @property
    def palette(self) -> List[RGB]:
        """Palette in effect for the first image."""
        if self.image is not None and self.image.local_palette is not None:
            return self.image.local_palette
        return self.global_palette or []


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise FormatError(f"Truncated GIF: expected {size} bytes of {what}, got {len(data)}")
    return data


def _read_palette(stream: BinaryIO, packed: int) -> List[RGB]:
    entries = 2 ** ((packed & 0x07) + 1)
    raw = _read_exact(stream, 3 * entries, "color table")
    return [(raw[i], raw[i + 1], raw[i + 2]) for i in range(0, len(raw), 3)]


def _read_extension(stream: BinaryIO) -> List[ExtensionBlock]:
    function = _read_exact(stream, 1, "extension label")[0]
    blocks = []
    while True:
        size = _read_exact(stream, 1, "sub-block size")[0]
        if size == 0:
            break
        data = _read_exact(stream, size, "extension sub-block")
        blocks.append(ExtensionBlock(function=function if not blocks else CONTINUE_FUNCTION,
                                     data=data))
    return blocks


def read_records(stream: BinaryIO) -> GIFRecords:
    """
    Read the GIF records up to (and including) the first image descriptor.

    Raises:
        FormatError: not a GIF stream, or truncated records
    """
    signature = _read_exact(stream, 6, "signature")
    if signature not in GIF_SIGNATURES:
        raise FormatError(f"Not a GIF file: bad signature {signature!r}")

    width, height, packed, background, _aspect = struct.unpack(
        "<HHBBB", _read_exact(stream, 7, "logical screen descriptor")
    )
    records = GIFRecords(
        version=signature[3:].decode("ascii"),
        width=width,
        height=height,
        background=background,
    )
    if packed & 0x80:
        records.global_palette = _read_palette(stream, packed)

    while True:
        introducer = stream.read(1)
        if not introducer or introducer[0] == TRAILER:
            break

        if introducer[0] == EXTENSION_INTRODUCER:
            records.extensions.extend(_read_extension(stream))
        elif introducer[0] == IMAGE_SEPARATOR:
            left, top, image_width, image_height, image_packed = struct.unpack(
                "<HHHHB", _read_exact(stream, 9, "image descriptor")
            )
            records.image = ImageDescriptor(
                left=left,
                top=top,
                width=image_width,
                height=image_height,
                interlaced=bool(image_packed & 0x40),
            )
            if image_packed & 0x80:
                records.image.local_palette = _read_palette(stream, image_packed)
            break
        else:
            raise FormatError(f"Unexpected GIF record type 0x{introducer[0]:02x}")

    logger.debug(
        f"GIF{records.version}: {width}x{height}, {len(records.extensions)} extension blocks, "
        f"image={'yes' if records.image else 'no'}"
    )
    return records
