"""Unit tests for CSV export."""

import codecs

import pytz

from app.services.csv_service import CSV_HEADERS, build_row, render_csv, to_civil_time

MOSCOW = pytz.timezone("Europe/Moscow")


def read_lines(path):
    with open(path, encoding="utf-8-sig") as f:
        return f.read().splitlines()


class TestRenderCsv:
    """Test render_csv()."""

    def test_row_matches_expected_layout(self, tmp_path, record_factory):
        """Test a full record renders with civil time and the club name."""
        path = render_csv([record_factory()], {"c1": "ClubOne"}, str(tmp_path / "r.csv"), tz=MOSCOW)

        lines = read_lines(path)
        assert lines[0] == ";".join(CSV_HEADERS)
        assert lines[1] == "79990001122;A;2024-01-01 13:00:00;30;ClubOne;91;1990-01-01;M"

    def test_file_starts_with_bom(self, tmp_path, record_factory):
        """Test the UTF-8 BOM is written for spreadsheet apps."""
        path = render_csv([record_factory()], {"c1": "ClubOne"}, str(tmp_path / "r.csv"), tz=MOSCOW)

        with open(path, "rb") as f:
            assert f.read(3) == codecs.BOM_UTF8

    def test_empty_records_write_header_only(self, tmp_path):
        """Test an empty record set still produces the header row."""
        path = render_csv([], {}, str(tmp_path / "empty.csv"), tz=MOSCOW)

        assert read_lines(path) == [";".join(CSV_HEADERS)]

    def test_unknown_club_keeps_raw_id(self, tmp_path, record_factory):
        """Test records of unknown clubs are still written with their raw id."""
        path = render_csv(
            [record_factory(club_id="c9"), "garbage"], {"c1": "ClubOne"}, str(tmp_path / "r.csv"), tz=MOSCOW
        )

        lines = read_lines(path)
        assert len(lines) == 2
        assert lines[1].split(";")[4] == "c9"


class TestBuildRow:
    """Test build_row()."""

    def test_missing_fields_are_empty(self):
        """Test absent or oddly-typed fields render as empty cells."""
        row = build_row({"name": 5, "date_visit": None}, {}, tz=MOSCOW)
        assert row == ["", "", "", "", "", "", "", ""]

    def test_fractional_percent(self, record_factory):
        """Test non-integral percents keep their fraction."""
        row = build_row(record_factory(text_aura={"percent": "72.5%"}), {"c1": "ClubOne"}, tz=MOSCOW)
        assert row[5] == "72.5"

    def test_numeric_phone(self, record_factory):
        """Test numeric phones are stringified."""
        row = build_row(record_factory(phone=79990001122), {"c1": "ClubOne"}, tz=MOSCOW)
        assert row[0] == "79990001122"

    def test_unparsable_visit_date_passes_through(self):
        """Test date_visit without an offset is written unchanged."""
        assert to_civil_time("2024-01-01", MOSCOW) == "2024-01-01"
