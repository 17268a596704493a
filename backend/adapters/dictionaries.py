"""
Vendor mapping dictionaries.

Each vendor's enumerations are kept as YAML under ``shared/dictionaries`` and
exposed as LookupTables: two total functions (vendor -> canonical and
canonical -> vendor) with explicit defaults, so unknown keys never fail.

A table entry in YAML looks like:

    intensity:
      forward: {0: active, 1: rest}      # vendor -> canonical
      backward: {active: 0}              # optional, canonical -> vendor
      default: active                    # canonical value for unknown keys
      backward_default: 0                # vendor value for unknown names

Without ``backward`` the forward map is inverted (first key wins).
"""

import pathlib
from functools import lru_cache
from typing import Any, Dict, Hashable, Mapping, Optional

import yaml

ROOT = pathlib.Path(__file__).resolve().parents[2]
DICTIONARY_DIR = ROOT / "shared" / "dictionaries"


@lru_cache(maxsize=None)
def load_dictionary(name: str) -> Dict[str, Any]:
    """Load and cache ``shared/dictionaries/<name>.yaml``."""
    return yaml.safe_load((DICTIONARY_DIR / f"{name}.yaml").read_text())


class LookupTable:
    """Bidirectional, total lookup over one vendor enumeration."""

    def __init__(
        self,
        forward: Mapping[Hashable, Any],
        default: Any = None,
        backward: Optional[Mapping[Hashable, Any]] = None,
        backward_default: Any = None,
        case_insensitive: bool = False,
    ) -> None:
        self._case_insensitive = case_insensitive
        self._forward = {self._key(k): v for k, v in forward.items()}
        if backward is None:
            backward = {}
            for key, value in forward.items():
                backward.setdefault(value, key)
        self._backward = dict(backward)
        self.default = default
        self.backward_default = backward_default

    @classmethod
    def from_dictionary(
        cls, name: str, table: str, case_insensitive: bool = False
    ) -> "LookupTable":
        entry = load_dictionary(name)[table]
        return cls(
            forward=entry["forward"],
            default=entry.get("default"),
            backward=entry.get("backward"),
            backward_default=entry.get("backward_default"),
            case_insensitive=case_insensitive,
        )

    def _key(self, key: Any) -> Any:
        if self._case_insensitive and isinstance(key, str):
            return key.lower()
        return key

    def to_canonical(self, vendor_value: Any) -> Any:
        if vendor_value is None:
            return self.default
        return self._forward.get(self._key(vendor_value), self.default)

    def from_canonical(self, canonical_value: Any) -> Any:
        if canonical_value is None:
            return self.backward_default
        return self._backward.get(canonical_value, self.backward_default)

    def knows(self, vendor_value: Any) -> bool:
        return self._key(vendor_value) in self._forward
