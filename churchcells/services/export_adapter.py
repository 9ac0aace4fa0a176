# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Report rendering — CSV, Excel (openpyxl) and PDF (reportlab).

Renderers take an already-assembled report dict and return raw bytes; they
never touch the database.
"""

import csv
import io
from datetime import datetime, timezone
from typing import Any, Dict, List

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

MEMBER_COLUMNS = [
    ("Full Name", "full_name"),
    ("Member ID", "member_id"),
    ("Email", "email"),
    ("Phone", "phone"),
    ("Status", "membership_status"),
]

ZONE_COLUMNS = [
    ("Zone Name", "name"),
    ("Zone Leader", "leader_id"),
    ("Home Cells", "home_cells"),
    ("Status", "status"),
]

_HEADER_FONT = Font(bold=True, color="FFFFFF")
_HEADER_FILL = PatternFill("solid", fgColor="1F4E78")


def _rows(items: List[Dict[str, Any]], columns) -> List[List[str]]:
    return [["" if item.get(key) is None else str(item[key]) for _, key in columns] for item in items]


def _csv_bytes(items: List[Dict[str, Any]], columns) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL)
    writer.writerow([label for label, _ in columns])
    writer.writerows(_rows(items, columns))
    return buffer.getvalue().encode("utf-8")


# ── Home cell ──

def render_home_cell_csv(report: Dict[str, Any]) -> bytes:
    return _csv_bytes(report["members"], MEMBER_COLUMNS)


def render_home_cell_excel(report: Dict[str, Any]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Members"
    ws.append([label for label, _ in MEMBER_COLUMNS])
    for cell in ws[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
    for row in _rows(report["members"], MEMBER_COLUMNS):
        ws.append(row)
    for idx, (label, key) in enumerate(MEMBER_COLUMNS, start=1):
        width = max([len(label)] + [len(str(m.get(key) or "")) for m in report["members"]])
        ws.column_dimensions[get_column_letter(idx)].width = min(width + 2, 60)
    ws.freeze_panes = "A2"

    summary = wb.create_sheet("Summary")
    cell = report["home_cell"]
    summary.append(["Home Cell", cell["name"]])
    summary.append(["Zone", (report.get("zone") or {}).get("name", "N/A")])
    summary.append(["District", (report.get("district") or {}).get("name", "N/A")])
    summary.append(["Meeting Day", cell.get("meeting_day") or "N/A"])
    summary.append(["Meeting Time", cell.get("meeting_time") or "N/A"])
    summary.append(["Location", cell.get("meeting_location") or "N/A"])
    summary.append([])
    for key, value in report["stats"].items():
        summary.append([key.replace("_", " ").title(), value])
    summary.append(["Generated At", report["generated_at"]])
    for row in summary.iter_rows(min_col=1, max_col=1):
        row[0].font = Font(bold=True)
    summary.column_dimensions["A"].width = 22
    summary.column_dimensions["B"].width = 40

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class _PdfWriter:
    """Line-oriented reportlab canvas with automatic page breaks."""

    def __init__(self, title: str):
        self.buffer = io.BytesIO()
        self.pdf = canvas.Canvas(self.buffer, pagesize=A4)
        self.pdf.setTitle(title)
        self.width, self.height = A4
        self.y = self.height - 50

    def line(self, text: str, size: int = 10, bold: bool = False, gap: int = 15):
        if self.y < 60:
            self.pdf.showPage()
            self.y = self.height - 50
        self.pdf.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        self.pdf.drawString(40, self.y, text)
        self.y -= gap

    def table(self, columns, rows: List[List[str]], widths: List[int]):
        header = [label for label, _ in columns]
        self._row(header, widths, bold=True)
        for row in rows:
            self._row(row, widths)

    def _row(self, values: List[str], widths: List[int], bold: bool = False):
        if self.y < 60:
            self.pdf.showPage()
            self.y = self.height - 50
        self.pdf.setFont("Helvetica-Bold" if bold else "Helvetica", 9)
        x = 40
        for value, width in zip(values, widths):
            max_chars = max(width // 5, 4)
            text = value if len(value) <= max_chars else value[: max_chars - 1] + "…"
            self.pdf.drawString(x, self.y, text)
            x += width
        self.y -= 14

    def finish(self) -> bytes:
        self.y -= 10
        self.line(f"Generated on {datetime.now(timezone.utc):%Y-%m-%d %H:%M} UTC", size=8)
        self.line("Church Management System", size=8)
        self.pdf.save()
        return self.buffer.getvalue()


def render_home_cell_pdf(report: Dict[str, Any]) -> bytes:
    cell = report["home_cell"]
    stats = report["stats"]
    doc = _PdfWriter(f"{cell['name']} Report")
    doc.line(cell["name"], size=18, bold=True, gap=26)
    doc.line(f"Zone: {(report.get('zone') or {}).get('name', 'N/A')}")
    doc.line(f"District: {(report.get('district') or {}).get('name', 'N/A')}")
    doc.line(f"Leader: {cell.get('leader_id') or 'Not assigned'}")
    doc.line(f"Meeting: {cell.get('meeting_day') or 'N/A'} {cell.get('meeting_time') or ''}".rstrip())
    doc.line(f"Location: {cell.get('meeting_location') or 'N/A'}")
    doc.line(f"Status: {'Active' if cell.get('is_active') else 'Inactive'}", gap=24)
    doc.line("Summary Statistics", size=13, bold=True, gap=18)
    doc.line(f"Total Members: {stats['total_members']}")
    doc.line(f"Active Members: {stats['active_members']}")
    doc.line(f"Inactive Members: {stats['inactive_members']}")
    doc.line(f"Male: {stats['male_members']}   Female: {stats['female_members']}", gap=24)
    if report["members"]:
        doc.line(f"Members List ({len(report['members'])})", size=13, bold=True, gap=18)
        doc.table(MEMBER_COLUMNS, _rows(report["members"], MEMBER_COLUMNS),
                  [140, 80, 140, 90, 60])
    return doc.finish()


# ── District ──

def render_district_csv(report: Dict[str, Any]) -> bytes:
    return _csv_bytes(report["zones"], ZONE_COLUMNS)


def render_district_pdf(report: Dict[str, Any]) -> bytes:
    district = report["district"]
    doc = _PdfWriter(f"{district['name']} Report")
    doc.line(district["name"], size=18, bold=True, gap=26)
    doc.line(f"Total Zones: {len(report['zones'])}")
    doc.line(f"Status: {'Active' if district.get('is_active') else 'Inactive'}", gap=24)
    if report["zones"]:
        doc.line("Zones in this District", size=13, bold=True, gap=18)
        doc.table(ZONE_COLUMNS, _rows(report["zones"], ZONE_COLUMNS), [180, 140, 80, 80])
    return doc.finish()
