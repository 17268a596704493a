"""FIT (Flexible and Interoperable Data Transfer) adapter."""

from backend.adapters.fit.codec import FitDecodeError, FitEncodeError, FitFileCodec
from backend.adapters.fit.reader import FitReader
from backend.adapters.fit.writer import FitWriter

__all__ = ["FitFileCodec", "FitDecodeError", "FitEncodeError", "FitReader", "FitWriter"]
