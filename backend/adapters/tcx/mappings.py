"""
TCX enumeration tables.

Backed by ``shared/dictionaries/tcx.yaml``. Vendor values are matched
case-insensitively ("Warmup", "warmup" and "WARMUP" are the same intensity).
"""

from backend.adapters.dictionaries import LookupTable

TCX_NS = "http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2"
TPX_NS = "http://www.garmin.com/xmlschemas/ActivityExtension/v2"
METADATA_NS = "urn:workout-conversion:metadata"

SPORT = LookupTable.from_dictionary("tcx", "sport", case_insensitive=True)
INTENSITY = LookupTable.from_dictionary("tcx", "intensity", case_insensitive=True)
DURATION = LookupTable.from_dictionary("tcx", "duration", case_insensitive=True)
TARGET = LookupTable.from_dictionary("tcx", "target", case_insensitive=True)

# Running cadence is counted in steps per minute; canonical cadence is per leg.
RUNNING_CADENCE_FACTOR = 2
