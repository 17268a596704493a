"""
Namespace-tolerant ElementTree helpers shared by the XML adapters.

TCX files appear with and without the default Garmin namespace, so lookups
compare local names only.
"""

import math
import xml.etree.ElementTree as ET
from typing import Iterator, Optional

XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
XSI_TYPE = f"{{{XSI_NS}}}type"


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix from an element or attribute name."""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    for child in element:
        if isinstance(child.tag, str) and local_name(child.tag) == name:
            yield child


def child(element: ET.Element, name: str) -> Optional[ET.Element]:
    return next(children(element, name), None)


def child_text(element: ET.Element, name: str) -> Optional[str]:
    found = child(element, name)
    if found is None or found.text is None:
        return None
    return found.text.strip() or None


def parse_float(text: Optional[str]) -> Optional[float]:
    """Finite float from text; None for missing, malformed, inf or nan."""
    if text is None:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def child_float(element: ET.Element, name: str) -> Optional[float]:
    return parse_float(child_text(element, name))


def find_path(element: ET.Element, *names: str) -> Optional[ET.Element]:
    current: Optional[ET.Element] = element
    for name in names:
        if current is None:
            return None
        current = child(current, name)
    return current


def xsi_type(element: ET.Element) -> Optional[str]:
    """The ``xsi:type`` attribute, namespace prefix removed from the value."""
    value = element.get(XSI_TYPE) or element.get("type")
    if value is None:
        return None
    return value.split(":", 1)[-1]


def attribute(element: ET.Element, name: str) -> Optional[str]:
    """Attribute lookup by local name, whatever its namespace."""
    for key, value in element.attrib.items():
        if local_name(key) == name:
            return value
    return None


def float_attribute(element: ET.Element, name: str) -> Optional[float]:
    return parse_float(attribute(element, name))


def format_number(value: float) -> str:
    """Integral floats print without a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
