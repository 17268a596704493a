"""
FIT enumeration tables.

Thin wrappers over ``shared/dictionaries/fit.yaml``. Each table maps FIT enum
integers to canonical names and back; unknown values fall back to the table
defaults.
"""

import logging
from typing import Optional

from rapidfuzz import fuzz, process

from backend.adapters.dictionaries import LookupTable, load_dictionary

logger = logging.getLogger(__name__)

FILE_TYPE = LookupTable.from_dictionary("fit", "file_type")
SPORT = LookupTable.from_dictionary("fit", "sport")
SUB_SPORT = LookupTable.from_dictionary("fit", "sub_sport")
DURATION_TYPE = LookupTable.from_dictionary("fit", "duration_type")
TARGET_TYPE = LookupTable.from_dictionary("fit", "target_type")
INTENSITY = LookupTable.from_dictionary("fit", "intensity")
EQUIPMENT = LookupTable.from_dictionary("fit", "equipment")
STROKE = LookupTable.from_dictionary("fit", "stroke")
MANUFACTURER = LookupTable.from_dictionary("fit", "manufacturer")
EVENT_TYPE = LookupTable.from_dictionary("fit", "event_type")
LAP_TRIGGER = LookupTable.from_dictionary("fit", "lap_trigger")

# Vendor strings such as "Garmin Ltd" or "Wahoo Fitness" still resolve.
MANUFACTURER_MATCH_THRESHOLD = 85


def manufacturer_name(manufacturer_id: Optional[int]) -> Optional[str]:
    """FIT manufacturer id to canonical name; unknown ids keep their number."""
    if manufacturer_id is None:
        return None
    if MANUFACTURER.knows(manufacturer_id):
        return MANUFACTURER.to_canonical(manufacturer_id)
    return str(manufacturer_id)


def manufacturer_id(name: Optional[str]) -> Optional[int]:
    """
    Resolve a manufacturer name to its FIT id.

    Exact names, numeric strings and close spellings resolve; anything else
    returns None so the caller can apply its default.
    """
    if not name:
        return None
    text = name.strip()
    if text.isascii() and text.isdigit():
        return int(text)
    known = load_dictionary("fit")["manufacturer"]["forward"]
    ids_by_name = {v: k for k, v in known.items()}
    key = text.lower().replace(" ", "_")
    if key in ids_by_name:
        return ids_by_name[key]
    match = process.extractOne(
        text.lower().replace("_", " "),
        {v: v.replace("_", " ") for v in ids_by_name},
        scorer=fuzz.token_set_ratio,
        score_cutoff=MANUFACTURER_MATCH_THRESHOLD,
    )
    if match is None:
        return None
    matched_name = match[2]
    logger.debug(f"Matched manufacturer '{name}' to '{matched_name}' ({match[1]:.0f})")
    return ids_by_name[matched_name]
