"""
Capped classification of categorical int16 bands.

Landscape headers carry, per band, the list of distinct values when there
are few enough of them (at most 99). This is not a histogram: the scan only
answers "is the set of distinct values small enough to enumerate" and stops
as soon as it is not.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

from .layout import MAX_CLASSES

logger = logging.getLogger("raster_codecs.lcp.classify")

CLASS_CAP = MAX_CLASSES - 1
DEFAULT_NODATA = -9999

_INT16_MIN = int(np.iinfo(np.int16).min)
_INT16_RANGE = int(np.iinfo(np.int16).max) - _INT16_MIN + 1
# values in [-32768, 32767] map to flag indices [0, 65535]
_OFFSET = -_INT16_MIN


@dataclass(frozen=True)
class ClassSet:
    """Distinct values of a band, or the "too many" marker.

    `values` always starts with the sentinel 0 when the band was enumerable;
    `count` is the number of real values after it, or -1 when there were more
    than the cap.
    """

    count: int
    values: Tuple[int, ...] = ()

    @classmethod
    def from_values(cls, values: Iterable[int]) -> "ClassSet":
        ordered = tuple(sorted(int(v) for v in values))
        return cls(count=len(ordered), values=(0,) + ordered)

    @classmethod
    def too_many(cls) -> "ClassSet":
        return cls(count=-1, values=())

    @property
    def is_too_many(self) -> bool:
        return self.count < 0

    @property
    def classes(self) -> Tuple[int, ...]:
        """Real values, without the leading sentinel."""
        return self.values[1:]


def classify_band(rows: Iterable[np.ndarray], nodata: int = DEFAULT_NODATA) -> ClassSet:
    """
    Scan a band row by row and collect its distinct values.

    Args:
        rows: Iterable of 1-D int16 arrays, top row first
        nodata: Pixel value excluded from the scan

    Returns:
        ClassSet with the ascending values, or ClassSet.too_many() as soon as
        more than 99 distinct values are seen
    """
    flags = np.zeros(_INT16_RANGE, dtype=bool)
    found = 0

    for row in rows:
        values = np.asarray(row).astype(np.int32, copy=False)
        values = values[values != nodata]
        if values.size == 0:
            continue

        candidates = np.unique(values) + _OFFSET
        new = candidates[~flags[candidates]]
        if found + new.size > CLASS_CAP:
            logger.debug(f"Found more than {CLASS_CAP} unique values, not classifying")
            return ClassSet.too_many()

        flags[new] = True
        found += new.size

    collected = np.flatnonzero(flags) - _OFFSET
    logger.debug(f"Classified band: {found} unique values")
    return ClassSet(count=found, values=(0,) + tuple(int(v) for v in collected))
