"""
Creation options for landscape files.

Options arrive as a flat KEY=VALUE mapping (the CLI passes them through
`--co`), are matched case-insensitively and are resolved into unit codes
before anything is written.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Mapping, Optional, Tuple

from ..exceptions import ConfigError
from .layout import MAX_BANDS, HeaderLayout

logger = logging.getLogger("raster_codecs.lcp.options")

DEFAULT_DESCRIPTION = "LCP file created by raster-codecs."


class LinearUnit(IntEnum):
    METERS = 0
    FEET = 1
    KILOMETERS = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


# Default code per quantity slot, used when the quantity is absent or the
# option is not given
DEFAULT_UNIT_CODES: Tuple[int, ...] = (0, 0, 2, 0, 1, 3, 3, 3, 1, 0)

_HEIGHT_CHOICES = {
    "METERS": 1,
    "METER": 1,
    "FEET": 2,
    "FOOT": 2,
    "METERS_X_10": 3,
    "METER_X_10": 3,
    "FEET_X_10": 4,
    "FOOT_X_10": 4,
}

# (option name, quantity slot, default value, choices)
_UNIT_OPTIONS = (
    ("ELEVATION_UNIT", 0, "METERS", {"FEET": 1, "FOOT": 1}),
    ("SLOPE_UNIT", 1, "DEGREES", {"DEGREES": 0, "PERCENT": 1}),
    (
        "ASPECT_UNIT",
        2,
        "AZIMUTH_DEGREES",
        {"GRASS_CATEGORIES": 0, "GRASS_DEGREES": 1, "AZIMUTH_DEGREES": 2},
    ),
    (
        "FUEL_MODEL_OPTION",
        3,
        "NO_CUSTOM_AND_NO_FILE",
        {
            "NO_CUSTOM_AND_NO_FILE": 0,
            "CUSTOM_AND_NO_FILE": 1,
            "NO_CUSTOM_AND_FILE": 2,
            "CUSTOM_AND_FILE": 3,
        },
    ),
    ("CANOPY_COV_UNIT", 4, "PERCENT", {"CATEGORIES": 0, "PERCENT": 1}),
)

_CROWN_OPTIONS = (
    ("CANOPY_HT_UNIT", 5, "METERS_X_10", _HEIGHT_CHOICES),
    ("CBH_UNIT", 6, "METERS_X_10", _HEIGHT_CHOICES),
    (
        "CBD_UNIT",
        7,
        "KG_PER_CUBIC_METER_X_100",
        {
            "KG_PER_CUBIC_METER": 1,
            "POUND_PER_CUBIC_FOOT": 2,
            "KG_PER_CUBIC_METER_X_100": 3,
            "POUND_PER_CUBIC_FOOT_X_1000": 4,
        },
    ),
)

_GROUND_OPTIONS = (
    (
        "DUFF_UNIT",
        8,
        "MG_PER_HECTARE_X_10",
        {"MG_PER_HECTARE_X_10": 1, "TONS_PER_ACRE_X_10": 2},
    ),
)

_TRUE_VALUES = {"YES", "TRUE", "ON", "1"}
_FALSE_VALUES = {"NO", "FALSE", "OFF", "0"}


@dataclass
class CreateOptions:
    """Resolved creation options for one output file."""

    unit_codes: List[int] = field(default_factory=lambda: list(DEFAULT_UNIT_CODES))
    calculate_stats: bool = True
    classify_data: bool = True
    linear_unit: Optional[LinearUnit] = None  # None means "set from the source SRS"
    latitude: Optional[int] = None
    description: str = DEFAULT_DESCRIPTION


def _normalize(options: Optional[Mapping[str, object]]) -> Dict[str, str]:
    if not options:
        return {}
    return {str(key).upper(): str(value) for key, value in options.items()}


def _fetch_bool(options: Dict[str, str], key: str, default: bool) -> bool:
    value = options.get(key)
    if value is None:
        return default
    upper = value.strip().upper()
    if upper in _TRUE_VALUES:
        return True
    if upper in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid value ({value}) for {key}.")


def _resolve_unit(options: Dict[str, str], name: str, default: str, choices: Dict[str, int]) -> int:
    value = options.get(name, default)
    upper = value.strip().upper()
    if name == "ELEVATION_UNIT" and upper.startswith("METER"):
        return 0
    if upper in choices:
        return choices[upper]
    raise ConfigError(f"Invalid value ({value}) for {name}.")


def parse_linear_unit(value: str) -> Optional[LinearUnit]:
    """Map a LINEAR_UNIT option to a unit; None for SET_FROM_SRS."""
    upper = value.strip().upper()
    if upper == "SET_FROM_SRS":
        return None
    if upper.startswith("METER"):
        return LinearUnit.METERS
    if upper in ("FOOT", "FEET"):
        return LinearUnit.FEET
    if upper.startswith("KILOMETER"):
        return LinearUnit.KILOMETERS
    raise ConfigError(f"Invalid value ({value}) for LINEAR_UNIT.")


def parse_options(options: Optional[Mapping[str, object]], layout: HeaderLayout) -> CreateOptions:
    """
    Resolve creation options against the layout that will be written.

    Crown fuel units are only checked when the layout has crown fuels, the
    duff unit only when it has ground fuels.

    Raises:
        ConfigError: an option value has no matching code
    """
    opts = _normalize(options)
    resolved = CreateOptions()

    groups = list(_UNIT_OPTIONS)
    if layout.crown_fuels:
        groups.extend(_CROWN_OPTIONS)
    if layout.ground_fuels:
        groups.extend(_GROUND_OPTIONS)

    for name, slot, default, choices in groups:
        resolved.unit_codes[slot] = _resolve_unit(opts, name, default, choices)

    if layout.ground_fuels:
        # coarse woody debris is present
        resolved.unit_codes[MAX_BANDS - 1] = 1

    resolved.calculate_stats = _fetch_bool(opts, "CALCULATE_STATS", True)
    resolved.classify_data = _fetch_bool(opts, "CLASSIFY_DATA", True)
    if resolved.classify_data and not resolved.calculate_stats:
        logger.warning(
            "Ignoring request to not calculate statistics, because CLASSIFY_DATA was set to ON"
        )
        resolved.calculate_stats = True

    resolved.linear_unit = parse_linear_unit(opts.get("LINEAR_UNIT", "SET_FROM_SRS"))

    if "LATITUDE" in opts:
        try:
            latitude = int(opts["LATITUDE"])
        except ValueError as e:
            raise ConfigError(f"Invalid value ({opts['LATITUDE']}) for LATITUDE.") from e
        if latitude > 90 or latitude < -90:
            raise ConfigError(f"Invalid value ({latitude}) for LATITUDE.")
        resolved.latitude = latitude

    resolved.description = opts.get("DESCRIPTION", DEFAULT_DESCRIPTION)
    return resolved
