"""
CSV and Excel exports of coaching sessions and CPD activity,
including the ICF Client Coaching Log workbook used for credential applications.
"""

import csv
import logging
from datetime import datetime
from io import BytesIO, StringIO
from typing import Iterable, Optional

from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

SESSION_HEADERS = [
    "Client Name",
    "Start Date",
    "End Date",
    "Duration",
    "Session Type",
    "Number in Group",
    "Payment Type",
    "Payment Amount",
    "Focus Area",
    "Key Outcomes",
    "Client Progress",
    "Coaching Tools",
    "ICF Competencies",
    "Notes",
    "Additional Notes",
    "Created At",
]

CPD_HEADERS = ["Title", "Date", "Hours", "Type", "Description", "Certificate Link", "Created At"]

ICF_LOG_TITLE = "ICF Client Coaching Log"
ICF_LOG_HEADERS = [
    "Client Name",
    "Contact Information",
    "Individual/Group",
    "Number in Group",
    "Start Date",
    "End Date",
    "Paid hours",
    "Pro-bono hours",
]
ICF_LOG_COLUMN_WIDTHS = [20, 25, 15, 15, 12, 12, 12, 12]

GROUP_TYPES = {"group", "team"}
PRO_BONO_TYPES = {"proBono", "pro-bono"}

thin_border = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


def _date(value: Optional[datetime], fmt: str = "%Y-%m-%d") -> str:
    return value.strftime(fmt) if value else ""


def _join(values: Optional[Iterable]) -> str:
    return ", ".join(str(v) for v in values) if values else ""


def session_row(session) -> list:
    return [
        session.client_name or "",
        _date(session.date),
        _date(session.finish_date),
        f"{session.duration or 0} minutes",
        _join(session.types),
        session.number_in_group or 1,
        session.payment_type or "",
        session.payment_amount if session.payment_amount is not None else "",
        session.focus_area or "",
        session.key_outcomes or "",
        session.client_progress or "",
        _join(session.coaching_tools),
        _join(session.icf_competencies),
        session.notes or "",
        session.additional_notes or "",
        _date(session.created_at, "%Y-%m-%d %H:%M:%S"),
    ]


def cpd_row(entry) -> list:
    return [
        entry.title or "",
        _date(entry.activity_date),
        entry.hours if entry.hours is not None else 0,
        entry.cpd_type or "",
        entry.description or "",
        entry.supporting_document or "",
        _date(entry.created_at, "%Y-%m-%d %H:%M:%S"),
    ]


def build_csv(headers: list[str], rows: Iterable[list]) -> str:
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(headers)
    writer.writerows(rows)
    return output.getvalue()


def build_xlsx(sheet_title: str, headers: list[str], rows: Iterable[list]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title

    ws.append(headers)
    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.border = thin_border

    for row in rows:
        ws.append(row)

    # Auto-fit columns
    for col in ws.columns:
        max_length = max(len(str(cell.value or "")) for cell in col)
        ws.column_dimensions[col[0].column_letter].width = min(max(max_length + 2, 10), 60)

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def icf_log_row(session) -> list:
    types = {t.lower() for t in (session.types or [])}
    is_group = bool(types & GROUP_TYPES)
    hours = round((session.duration or 0) / 60, 2)
    contact = session.client.email if getattr(session, "client", None) else ""

    paid_hours = hours if session.payment_type == "paid" else 0
    pro_bono_hours = hours if session.payment_type in PRO_BONO_TYPES else 0

    return [
        session.client_name or "",
        contact,
        "Group" if is_group else "Individual",
        session.number_in_group or 1,
        _icf_date(session.date),
        _icf_date(session.finish_date or session.date),
        paid_hours,
        pro_bono_hours,
    ]


def _icf_date(value: Optional[datetime]) -> str:
    # D/M/YYYY without zero padding
    return f"{value.day}/{value.month}/{value.year}" if value else ""


def build_icf_log_xlsx(sessions: Iterable) -> bytes:
    """Workbook in the layout ICF asks for: title row, blank row, yellow header row, one row per session"""
    wb = Workbook()
    ws = wb.active
    ws.title = ICF_LOG_TITLE

    ws.append([ICF_LOG_TITLE])
    title_cell = ws["A1"]
    title_cell.font = Font(bold=True, size=14)
    title_cell.fill = PatternFill(start_color="E6F3FF", end_color="E6F3FF", fill_type="solid")

    ws.append([])
    ws.append(ICF_LOG_HEADERS)
    header_fill = PatternFill(start_color="FFFF00", end_color="FFFF00", fill_type="solid")
    for cell in ws[3]:
        cell.font = Font(bold=True)
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.border = thin_border

    for session in sessions:
        ws.append(icf_log_row(session))

    for index, width in enumerate(ICF_LOG_COLUMN_WIDTHS):
        ws.column_dimensions[chr(ord("A") + index)].width = width

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def file_response(content, filename: str, media_type: str) -> StreamingResponse:
    return StreamingResponse(
        iter([content]),
        media_type=media_type,
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            "Cache-Control": "no-cache",
        },
    )


def export_filename(prefix: str, extension: str) -> str:
    return f"{prefix}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.{extension}"
