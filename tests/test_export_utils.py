# =============================================================================
# tests/test_export_utils.py - Export Tests
# =============================================================================
# Session and CPD exports, and the ICF Client Coaching Log workbook that
# coaches attach to credential applications.
#
# Run with: pytest tests/test_export_utils.py -v
# =============================================================================

import csv
from datetime import datetime
from io import BytesIO, StringIO
from types import SimpleNamespace

from openpyxl import load_workbook

from app.utils.export_utils import (
    ICF_LOG_HEADERS,
    ICF_LOG_TITLE,
    SESSION_HEADERS,
    build_csv,
    build_icf_log_xlsx,
    build_xlsx,
    export_filename,
    icf_log_row,
    session_row,
)


def make_session(**overrides):
    values = {
        "client_name": "Jordan Lee",
        "client": SimpleNamespace(email="jordan@example.com"),
        "date": datetime(2024, 2, 3, 10, 0),
        "finish_date": None,
        "duration": 90,
        "types": ["one-on-one"],
        "number_in_group": None,
        "payment_type": "paid",
        "payment_amount": 150.0,
        "focus_area": "Leadership",
        "key_outcomes": None,
        "client_progress": None,
        "coaching_tools": ["GROW"],
        "icf_competencies": ["Active Listening", "Evokes Awareness"],
        "notes": "Good session",
        "additional_notes": None,
        "created_at": datetime(2024, 2, 3, 12, 30, 5),
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class TestSessionExport:
    """Tests for the sessions CSV/Excel export."""

    def test_session_row(self):
        row = session_row(make_session())
        assert len(row) == len(SESSION_HEADERS)
        assert row[0] == "Jordan Lee"
        assert row[1] == "2024-02-03"
        assert row[2] == ""
        assert row[3] == "90 minutes"
        assert row[12] == "Active Listening, Evokes Awareness"
        assert row[15] == "2024-02-03 12:30:05"

    def test_csv_has_header_and_rows(self):
        content = build_csv(SESSION_HEADERS, [session_row(make_session())])
        rows = list(csv.reader(StringIO(content)))
        assert rows[0] == SESSION_HEADERS
        assert rows[1][0] == "Jordan Lee"

    def test_xlsx_sheet(self):
        data = build_xlsx("Sessions Data", SESSION_HEADERS, [session_row(make_session())])
        ws = load_workbook(BytesIO(data)).active
        assert ws.title == "Sessions Data"
        assert ws["A1"].value == "Client Name"
        assert ws["A1"].font.bold is True
        assert ws["A2"].value == "Jordan Lee"

    def test_export_filename(self):
        name = export_filename("coaching_sessions", "csv")
        assert name.startswith("coaching_sessions_")
        assert name.endswith(".csv")


class TestIcfLogRow:
    """Tests for one ICF coaching log row."""

    def test_paid_individual(self):
        row = icf_log_row(make_session())
        assert row == [
            "Jordan Lee",
            "jordan@example.com",
            "Individual",
            1,
            "3/2/2024",
            "3/2/2024",
            1.5,
            0,
        ]

    def test_pro_bono_group(self):
        row = icf_log_row(
            make_session(
                types=["Group"],
                number_in_group=6,
                payment_type="pro-bono",
                duration=45,
                finish_date=datetime(2024, 12, 24, 11, 0),
            )
        )
        assert row[2] == "Group"
        assert row[3] == 6
        assert row[5] == "24/12/2024"
        assert row[6] == 0
        assert row[7] == 0.75

    def test_camel_case_pro_bono(self):
        row = icf_log_row(make_session(payment_type="proBono"))
        assert row[6] == 0
        assert row[7] == 1.5

    def test_team_counts_as_group(self):
        assert icf_log_row(make_session(types=["team"]))[2] == "Group"

    def test_scheduled_session_logs_zero_hours(self):
        row = icf_log_row(make_session(payment_type="scheduled"))
        assert row[6] == 0
        assert row[7] == 0

    def test_session_without_client(self):
        assert icf_log_row(make_session(client=None))[1] == ""


class TestIcfLogWorkbook:
    """Tests for the ICF coaching log layout."""

    def test_layout(self):
        data = build_icf_log_xlsx([make_session(), make_session(client_name="Sam Park")])
        ws = load_workbook(BytesIO(data)).active

        assert ws.title == ICF_LOG_TITLE
        assert ws["A1"].value == ICF_LOG_TITLE
        assert ws["A1"].font.bold is True
        assert ws["A2"].value is None
        assert [cell.value for cell in ws[3]] == ICF_LOG_HEADERS
        assert ws["A3"].fill.start_color.rgb.endswith("FFFF00")
        assert ws["A4"].value == "Jordan Lee"
        assert ws["A5"].value == "Sam Park"
        assert ws.column_dimensions["B"].width == 25

    def test_empty_log_keeps_headers(self):
        ws = load_workbook(BytesIO(build_icf_log_xlsx([]))).active
        assert ws.max_row == 3
