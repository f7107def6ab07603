"""
Display properties of palette bands.

Builds the RGBA color table of a palette band (with the transparent entry
taken from graphic control extensions) and the row map of interlaced
images.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

logger = logging.getLogger("raster_codecs.gif.palette")

GRAPHIC_CONTROL_FUNCTION = 0xF9
TRANSPARENCY_FLAG = 0x01
NO_BACKGROUND = 255

# Interlaced rows are stored in four passes
INTERLACE_OFFSETS = (0, 4, 2, 1)
INTERLACE_JUMPS = (8, 8, 4, 2)

ColorEntry = Tuple[int, int, int, int]
InterlaceMap = Tuple[int, ...]


@dataclass(frozen=True)
class ExtensionBlock:
    """A raw extension sub-block attached to an image."""

    function: int
    data: bytes


@dataclass(frozen=True)
class PaletteBand:
    """Display descriptor of a palette-indexed band."""

    color_table: Tuple[ColorEntry, ...]
    transparent_index: Optional[int] = None
    background_index: Optional[int] = None
    interlace_map: Optional[InterlaceMap] = None

    @property
    def nodata(self) -> Optional[int]:
        return self.transparent_index

    @property
    def interlaced(self) -> bool:
        return self.interlace_map is not None

    def storage_row(self, row: int) -> int:
        """Physical row holding logical row `row`."""
        if self.interlace_map is None:
            return row
        return self.interlace_map[row]


def find_transparent_index(blocks: Iterable[ExtensionBlock]) -> Optional[int]:
    """
    Transparent color index from graphic control extensions.

    Every block with the transparency flag set overrides the previous one,
    so the last such block wins.
    """
    transparent = None
    for block in blocks:
        if block.function != GRAPHIC_CONTROL_FUNCTION or len(block.data) < 4:
            continue
        if not block.data[0] & TRANSPARENCY_FLAG:
            continue
        transparent = block.data[3]
    return transparent


def derive_interlace_map(height: int) -> InterlaceMap:
    """Map each logical row to its storage row for an interlaced image."""
    mapping = [0] * height
    storage_row = 0
    for offset, jump in zip(INTERLACE_OFFSETS, INTERLACE_JUMPS):
        for row in range(offset, height, jump):
            mapping[row] = storage_row
            storage_row += 1
    return tuple(mapping)


def derive_palette_band(
    raw_palette: Sequence[Tuple[int, int, int]],
    transparent_index: Optional[int] = None,
    background: int = NO_BACKGROUND,
    interlaced: bool = False,
    height: int = 0,
) -> PaletteBand:
    """
    Build the display descriptor of a palette band.

    Args:
        raw_palette: RGB triplets in palette order
        transparent_index: Index rendered fully transparent, if any
        background: Background color index; 255 means none
        interlaced: Whether rows are stored in interlaced order
        height: Raster height, needed for the interlace map
    """
    color_table = tuple(
        (red, green, blue, 0 if index == transparent_index else 255)
        for index, (red, green, blue) in enumerate(raw_palette)
    )
    interlace_map = derive_interlace_map(height) if interlaced else None
    if interlace_map is not None:
        logger.debug(f"Built interlace map for {height} rows")

    return PaletteBand(
        color_table=color_table,
        transparent_index=transparent_index,
        background_index=None if background == NO_BACKGROUND else background,
        interlace_map=interlace_map,
    )
