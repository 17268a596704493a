"""Garmin Connect workout JSON (GCN) adapter."""

from backend.adapters.garmin.reader import GarminReader
from backend.adapters.garmin.writer import GarminWriter

__all__ = ["GarminReader", "GarminWriter"]
