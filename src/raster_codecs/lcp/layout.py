"""
Byte layout of the FARSITE v.4 Landscape (.lcp) header.

The header is a fixed 7316 byte block. Ten physical quantities have a
reserved statistics block, a unit code and a source file slot each; which of
them exist as bands depends on the two feature flags (crown fuels, ground
fuels). A HeaderLayout is the per-combination view: the quantities present,
in band order, with the offsets of their fields.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

HEADER_SIZE = 7316
MAX_BANDS = 10
MAX_PATH = 256
MAX_DESCRIPTION = 512
MAX_CLASSES = 100  # sentinel slot + 99 values

FLAG_ABSENT = 20
FLAG_PRESENT = 21

# Dataset level fields
CROWN_FLAG_OFFSET = 0
GROUND_FLAG_OFFSET = 4
LATITUDE_OFFSET = 8
LEADING_EXTENT_OFFSET = 12  # east, west, north, south (float64)
STATS_OFFSET = 44
STATS_BLOCK_SIZE = 4 + 4 + 4 + 4 * MAX_CLASSES
WIDTH_OFFSET = 4164
HEIGHT_OFFSET = 4168
EXTENT_OFFSET = 4172  # east, west, north, south (float64)
LINEAR_UNIT_OFFSET = 4204
CELL_X_OFFSET = 4208
CELL_Y_OFFSET = 4216
UNIT_CODES_OFFSET = 4224
PATHS_OFFSET = 4244
DESCRIPTION_OFFSET = 6804


@dataclass(frozen=True)
class Quantity:
    """One of the ten physical quantities a landscape file can carry."""

    slot: int
    key: str
    label: str
    unit_suffix: str = "UNIT"
    unit_names: Optional[Dict[int, str]] = None
    name_suffix: str = "UNIT_NAME"

    @property
    def stats_offset(self) -> int:
        return STATS_OFFSET + STATS_BLOCK_SIZE * self.slot

    @property
    def unit_offset(self) -> int:
        return UNIT_CODES_OFFSET + 2 * self.slot

    @property
    def path_offset(self) -> int:
        return PATHS_OFFSET + MAX_PATH * self.slot

    @property
    def unit_key(self) -> str:
        return f"{self.key}_{self.unit_suffix}"

    @property
    def name_key(self) -> str:
        return f"{self.key}_{self.name_suffix}"

    def unit_name(self, code: int) -> Optional[str]:
        if not self.unit_names:
            return None
        return self.unit_names.get(code)


_HEIGHT_UNITS = {1: "Meters", 2: "Feet", 3: "Meters x 10", 4: "Feet x 10"}

QUANTITIES: Tuple[Quantity, ...] = (
    Quantity(0, "ELEVATION", "Elevation", unit_names={0: "Meters", 1: "Feet"}),
    Quantity(1, "SLOPE", "Slope", unit_names={0: "Degrees", 1: "Percent"}),
    Quantity(
        2,
        "ASPECT",
        "Aspect",
        unit_names={0: "Grass categories", 1: "Grass degrees", 2: "Azimuth degrees"},
    ),
    Quantity(
        3,
        "FUEL_MODEL",
        "Fuel models",
        unit_suffix="OPTION",
        name_suffix="OPTION_DESC",
        unit_names={
            0: "no custom models AND no conversion file needed",
            1: "custom models BUT no conversion file needed",
            2: "no custom models BUT conversion file needed",
            3: "custom models AND conversion file needed",
        },
    ),
    Quantity(4, "CANOPY_COV", "Canopy cover", unit_names={0: "Categories (0-4)", 1: "Percent"}),
    Quantity(5, "CANOPY_HT", "Canopy height", unit_names=_HEIGHT_UNITS),
    Quantity(6, "CBH", "Canopy base height", unit_names=_HEIGHT_UNITS),
    Quantity(
        7,
        "CBD",
        "Canopy bulk density",
        unit_names={1: "kg/m^3", 2: "lb/ft^3", 3: "kg/m^3 x 100", 4: "lb/ft^3 x 1000"},
    ),
    Quantity(8, "DUFF", "Duff", unit_names={1: "Mg/ha", 2: "t/ac"}),
    Quantity(9, "CWD", "Coarse woody debris", unit_suffix="OPTION"),
)

_BASE = QUANTITIES[:5]
_CROWN = QUANTITIES[5:8]
_GROUND = QUANTITIES[8:10]


@dataclass(frozen=True)
class HeaderLayout:
    """Offsets for one feature-flag combination."""

    crown_fuels: bool
    ground_fuels: bool
    quantities: Tuple[Quantity, ...]

    @property
    def band_count(self) -> int:
        return len(self.quantities)

    @property
    def stats_end(self) -> int:
        """Where the sequential stats writer stops for this layout."""
        return self.quantities[-1].stats_offset + STATS_BLOCK_SIZE

    @property
    def paths_end(self) -> int:
        """Where the sequential path writer stops for this layout."""
        return self.quantities[-1].path_offset + MAX_PATH

    def quantity(self, band: int) -> Quantity:
        """Quantity stored in 1-based band `band`."""
        return self.quantities[band - 1]


LAYOUTS: Dict[Tuple[bool, bool], HeaderLayout] = {
    (crown, ground): HeaderLayout(
        crown_fuels=crown,
        ground_fuels=ground,
        quantities=_BASE + (_CROWN if crown else ()) + (_GROUND if ground else ()),
    )
    for crown in (False, True)
    for ground in (False, True)
}

VALID_BAND_COUNTS = tuple(sorted(layout.band_count for layout in LAYOUTS.values()))

# The writer lands on one of these after the stats and path regions
STATS_END_OFFSETS = frozenset(layout.stats_end for layout in LAYOUTS.values()) | {WIDTH_OFFSET}
PATHS_END_OFFSETS = frozenset(layout.paths_end for layout in LAYOUTS.values())


def get_layout(crown_fuels: bool, ground_fuels: bool) -> HeaderLayout:
    return LAYOUTS[(bool(crown_fuels), bool(ground_fuels))]


def layout_for_band_count(band_count: int) -> Optional[HeaderLayout]:
    """Layout whose band count is `band_count`, or None if no layout has it."""
    for layout in LAYOUTS.values():
        if layout.band_count == band_count:
            return layout
    return None
