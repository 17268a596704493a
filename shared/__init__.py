"""Shared data files (vendor mapping dictionaries)."""
