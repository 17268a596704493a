"""Small pure converters shared by all vendor adapters."""

from domain.converters.device_numbers import device_number_to_int, parse_device_number

__all__ = ["parse_device_number", "device_number_to_int"]
