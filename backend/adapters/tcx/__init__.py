"""Training Center XML (TCX) workout adapter."""

from backend.adapters.tcx.reader import TcxReader
from backend.adapters.tcx.validator import TcxValidator
from backend.adapters.tcx.writer import TcxWriter

__all__ = ["TcxReader", "TcxWriter", "TcxValidator"]
