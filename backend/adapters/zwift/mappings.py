"""
Zwift workout (.zwo) tables.

Backed by ``shared/dictionaries/zwift.yaml``. Zwift powers are fractions of
FTP; canonical power targets use percent of FTP.
"""

from typing import Dict

from backend.adapters.dictionaries import LookupTable, load_dictionary

SPORT = LookupTable.from_dictionary("zwift", "sport", case_insensitive=True)
INTERVAL_INTENSITY = LookupTable.from_dictionary("zwift", "interval_intensity")

POWER_ZONE_PERCENT: Dict[int, float] = {
    int(zone): float(percent)
    for zone, percent in load_dictionary("zwift")["power_zone_percent"].items()
}

SEGMENTS = ("SteadyState", "Warmup", "Cooldown", "Ramp", "FreeRide", "MaxEffort", "IntervalsT")
# Segments that carry no power target.
OPEN_SEGMENTS = ("FreeRide", "MaxEffort")

RUNNING_CADENCE_FACTOR = 2


def fraction_to_percent(fraction: float) -> float:
    return round(fraction * 100, 2)


def percent_to_fraction(percent: float) -> float:
    return round(percent / 100, 4)
