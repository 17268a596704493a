"""Zwift workout file (.zwo) adapter."""

from backend.adapters.zwift.reader import ZwiftReader
from backend.adapters.zwift.validator import ZwiftValidator
from backend.adapters.zwift.writer import ZwiftWriter

__all__ = ["ZwiftReader", "ZwiftWriter", "ZwiftValidator"]
