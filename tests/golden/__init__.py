"""
Golden fixture tests for every vendor adapter.

Vendor files in ``fixtures/`` are read into canonical records and compared
with saved snapshots; writer output is compared with expected vendor files.

Usage:
    from tests.golden import assert_golden, canonical_snapshot, load_fixture

    @pytest.mark.golden
    def test_tcx_read():
        record = TcxReader().read(load_fixture("tcx/track_repeats.tcx"))
        assert_golden(canonical_snapshot(record), "tcx/track_repeats.canonical.json")

Rewrite fixtures after an intended output change with:
    pytest --update-golden tests/golden/
"""

from tests.golden.conftest import (
    FIXTURES_DIR,
    GoldenTestError,
    assert_golden,
    canonical_snapshot,
    load_fixture,
    update_golden,
)

__all__ = [
    "FIXTURES_DIR",
    "GoldenTestError",
    "assert_golden",
    "canonical_snapshot",
    "load_fixture",
    "update_golden",
]
