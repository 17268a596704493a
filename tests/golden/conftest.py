"""
Golden fixture harness.

Golden tests compare adapter output with files under ``fixtures/``:

- dict output is compared with the parsed JSON fixture, so ``300 == 300.0``
- XML text (``.tcx``, ``.zwo``, ``.xml`` fixtures) is compared as element
  trees; attribute order, indentation and the declaration are ignored
- other text is compared after normalizing line endings and trailing spaces
- bytes (``is_binary=True``) must match exactly

Run ``pytest --update-golden`` (or ``--regenerate-golden``) to rewrite the
fixtures from current output instead of asserting.
"""

import difflib
import json
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, Union

import pytest

from domain.models import CanonicalRecord

FIXTURES_DIR = Path(__file__).parent / "fixtures"

XML_SUFFIXES = {".tcx", ".zwo", ".xml"}
BINARY_SUFFIXES = {".fit"}

# Set by pytest_configure. An environment variable rather than a module
# global, since this module is imported both as a conftest and as a package.
UPDATE_ENV_VAR = "GOLDEN_UPDATE"

Output = Union[str, bytes, Dict[str, Any]]


class GoldenTestError(AssertionError):
    """Output differs from its golden fixture; ``diff`` shows how."""

    def __init__(self, message: str, diff: str, fixture_path: Path):
        super().__init__(message)
        self.diff = diff
        self.fixture_path = fixture_path


# ---------------------------------------------------------------------------
# Comparison helpers
# ---------------------------------------------------------------------------


def _normalize_content(content: Union[str, bytes], is_binary: bool = False) -> Union[str, bytes]:
    if is_binary:
        return content
    text = content.decode("utf-8") if isinstance(content, bytes) else content
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return "\n".join(line.rstrip() for line in lines).rstrip() + "\n"


def _xml_structure(content: str) -> Dict[str, Any]:
    """Element tree as nested dicts; whitespace-only text is ignored."""

    def convert(element: ET.Element) -> Dict[str, Any]:
        return {
            "tag": element.tag,
            "attrib": dict(element.attrib),
            "text": (element.text or "").strip() or None,
            "children": [convert(child) for child in element],
        }

    if content.startswith("<?xml"):
        content = content.split("?>", 1)[1]
    return convert(ET.fromstring(content.strip()))


def _dump_json(data: Any) -> str:
    return json.dumps(data, indent=2, sort_keys=True) + "\n"


def _generate_diff(expected: str, actual: str, fixture_path: Path) -> str:
    return "".join(
        difflib.unified_diff(
            expected.splitlines(keepends=True),
            actual.splitlines(keepends=True),
            fromfile=f"fixture: {fixture_path.name}",
            tofile="actual output",
            lineterm="",
        )
    )


def _fail(fixture_path: Path, diff: str) -> None:
    raise GoldenTestError(
        f"Output doesn't match golden fixture: {fixture_path}\n\n"
        f"Diff:\n{diff}\n\n"
        f"To update the fixture, run: pytest --update-golden {fixture_path.parent}",
        diff=diff,
        fixture_path=fixture_path,
    )


def _fixture_path(fixture_name: str) -> Path:
    return FIXTURES_DIR / fixture_name


def _update_requested() -> bool:
    return os.environ.get(UPDATE_ENV_VAR) == "1"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def canonical_snapshot(record: CanonicalRecord) -> Dict[str, Any]:
    """
    Canonical record as a plain dict for snapshot comparison.

    Readers stamp ``metadata.created`` with the current time when the vendor
    format carries none, so it is left out.
    """
    document = record.to_document()
    document["metadata"].pop("created", None)
    return document


def update_golden(output: Output, fixture_name: str, *, is_binary: bool = False) -> Path:
    """Write ``output`` as the fixture; dicts are stored as sorted JSON."""
    path = _fixture_path(fixture_name)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(output, dict):
        path.write_text(_dump_json(output), encoding="utf-8")
    elif is_binary:
        path.write_bytes(output)
    else:
        path.write_text(_normalize_content(output), encoding="utf-8")
    return path


def assert_golden(
    output: Output,
    fixture_name: str,
    *,
    is_binary: bool = False,
    update: bool = False,
) -> None:
    """
    Assert that output matches the golden fixture.

    Raises:
        GoldenTestError: output differs (the error carries a unified diff)
        FileNotFoundError: no fixture exists and no update was requested
    """
    if update or _update_requested():
        update_golden(output, fixture_name, is_binary=is_binary)
        return

    path = _fixture_path(fixture_name)
    if not path.exists():
        raise FileNotFoundError(
            f"Golden fixture not found: {path}\n"
            f"Run with --update-golden to create it, or call update_golden() directly."
        )

    if is_binary:
        expected_bytes = path.read_bytes()
        if output != expected_bytes:
            _fail(path, f"Binary content differs (expected {len(expected_bytes)} bytes, got {len(output)} bytes)")
        return

    expected_text = path.read_text(encoding="utf-8")
    if isinstance(output, dict):
        expected = json.loads(expected_text)
        if output != expected:
            _fail(path, _generate_diff(_dump_json(expected), _dump_json(output), path))
        return

    text = output.decode("utf-8") if isinstance(output, bytes) else output
    if path.suffix in XML_SUFFIXES:
        expected_tree, actual_tree = _xml_structure(expected_text), _xml_structure(text)
        if actual_tree != expected_tree:
            _fail(path, _generate_diff(_dump_json(expected_tree), _dump_json(actual_tree), path))
        return

    expected_text, text = _normalize_content(expected_text), _normalize_content(text)
    if text != expected_text:
        _fail(path, _generate_diff(expected_text, text, path))


def load_fixture(fixture_name: str) -> Output:
    """Fixture contents: bytes for .fit, parsed JSON for .json, text otherwise."""
    path = _fixture_path(fixture_name)
    if not path.exists():
        raise FileNotFoundError(f"Fixture not found: {path}")
    if path.suffix in BINARY_SUFFIXES:
        return path.read_bytes()
    text = path.read_text(encoding="utf-8")
    return json.loads(text) if path.suffix == ".json" else text


# ---------------------------------------------------------------------------
# Pytest plugin
# ---------------------------------------------------------------------------


def pytest_addoption(parser):
    group = parser.getgroup("golden", "golden fixtures")
    group.addoption(
        "--update-golden",
        "--regenerate-golden",
        dest="update_golden",
        action="store_true",
        default=False,
        help="Rewrite golden fixtures from current output instead of asserting",
    )


def pytest_configure(config):
    if config.getoption("update_golden", default=False):
        os.environ[UPDATE_ENV_VAR] = "1"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR
