"""Unit tests for factionrespect.io.exporters."""

from __future__ import annotations

import csv
import io
import json
from datetime import date

import pytest

from factionrespect.analysis.aggregator import process_attacks
from factionrespect.io.exporters import (
    CSV_HEADERS,
    export_filename,
    export_member_stats,
    member_stats_to_csv,
    member_stats_to_json,
)


@pytest.fixture
def member_stats(sample_raw_attacks, sample_roster):
    _, stats = process_attacks(sample_raw_attacks, sample_roster)
    return stats


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


class TestCsv:
    def test_header_row(self, member_stats):
        rows = _rows(member_stats_to_csv(member_stats))

        assert rows[0] == CSV_HEADERS
        assert len(rows) == 1 + len(member_stats)

    def test_current_member_row(self, member_stats):
        alice = dict(zip(CSV_HEADERS, _rows(member_stats_to_csv(member_stats))[1]))

        assert alice["Member"] == "Alice"
        assert alice["Status"] == "Current"
        assert alice["Level"] == "50"
        assert alice["Position"] == "Leader"
        assert alice["Total Attacks"] == "2"
        assert alice["Success Rate (%)"] == "100.0"
        assert alice["Total Respect"] == "13.50"
        assert alice["Avg/Attack"] == "6.75"
        assert alice["Bonus Hits"] == "1"
        assert alice["Best Hit"] == "3.50 (10)"
        assert alice["Fair Fight Avg"] == "1.75"

    def test_former_member_row(self, member_stats):
        rows = [dict(zip(CSV_HEADERS, row)) for row in _rows(member_stats_to_csv(member_stats))[1:]]
        carol = next(row for row in rows if row["Member"] == "Carol")

        assert carol["Status"] == "Former"
        assert carol["Position"] == ""
        assert carol["Best Hit"] == "2.25"

    def test_empty_stats_header_only(self):
        assert _rows(member_stats_to_csv([])) == [CSV_HEADERS]


class TestJson:
    def test_records_include_derived_field(self, member_stats):
        records = json.loads(member_stats_to_json(member_stats))

        assert [r["name"] for r in records] == ["Alice", "Bob", "Carol"]
        bob = records[1]
        assert bob["total_attacks"] == 2
        assert bob["successful_attacks"] == 1
        assert bob["unsuccessful_attacks"] == 1
        assert bob["is_current_member"] is True


class TestExportFile:
    def test_filename_uses_date(self):
        assert export_filename("csv", date(2024, 3, 9)) == "faction-respect-2024-03-09.csv"

    @pytest.mark.parametrize("fmt", ["csv", "json"])
    def test_writes_file(self, tmp_path, member_stats, fmt):
        path = export_member_stats(member_stats, fmt, tmp_path / "out", on=date(2024, 3, 9))

        assert path == tmp_path / "out" / f"faction-respect-2024-03-09.{fmt}"
        assert path.read_text(encoding="utf-8").strip()

    def test_unsupported_format_raises(self, tmp_path, member_stats):
        with pytest.raises(ValueError, match="xlsx"):
            export_member_stats(member_stats, "xlsx", tmp_path)
        assert list(tmp_path.iterdir()) == []
