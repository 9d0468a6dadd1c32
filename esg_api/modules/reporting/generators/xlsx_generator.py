"""XLSX export generator using openpyxl."""

import io
from typing import Any

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE, Cell
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from esg_api.modules.reporting.generators.base import BaseReportGenerator
from esg_api.modules.reporting.layout import ESGReport, HistoryTable, MetricSection

SUMMARY_SHEET = "Summary"
HISTORY_SHEET = "Historical Data"
DETAIL_SHEET = "Response Details"


def _put(ws: Worksheet, row: int, column: int, value: Any) -> Cell:
    """Write a cell; text is always stored as a literal string, never a formula."""
    if isinstance(value, str):
        value = ILLEGAL_CHARACTERS_RE.sub("", value)
    cell = ws.cell(row=row, column=column, value=value)
    if isinstance(value, str):
        cell.data_type = "s"
    return cell


class XLSXGenerator(BaseReportGenerator):
    """Summary workbooks get a history sheet; single responses get one sheet."""

    CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    EXTENSION = "xlsx"

    def generate(self, report: ESGReport) -> tuple[bytes, str]:
        wb = Workbook()
        ws = wb.active
        ws.title = SUMMARY_SHEET if report.is_summary else DETAIL_SHEET
        self._write_details(ws, report)

        if report.history is not None:
            self._write_history(wb.create_sheet(title=HISTORY_SHEET), report.history)

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue(), self.CONTENT_TYPE

    def _fill(self, color: str) -> PatternFill:
        hex_color = self._hex(color)
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _write_details(self, ws: Worksheet, report: ESGReport) -> None:
        ws.merge_cells("A1:C1")
        _put(ws, 1, 1, report.title)
        ws["A1"].font = Font(color="FFFFFF", bold=True, size=16)
        ws["A1"].fill = self._fill(self.brand_color)
        ws["A1"].alignment = Alignment(horizontal="center")
        ws.row_dimensions[1].height = 32

        row = 3
        for label, value in report.header:
            _put(ws, row, 1, label).font = Font(bold=True)
            _put(ws, row, 2, value)
            row += 1

        for section in report.sections:
            row += 1
            row = self._write_section(ws, section, row)

        ws.column_dimensions["A"].width = 38
        ws.column_dimensions["B"].width = 24
        ws.column_dimensions["C"].width = 16

    def _write_section(self, ws: Worksheet, section: MetricSection, row: int) -> int:
        """Write one section starting at ``row``; returns the next free row."""
        title = _put(ws, row, 1, section.title)
        title.font = Font(bold=True, size=13, color=self._hex(section.color))
        row += 1

        fill = self._fill(section.color)
        for col_idx, header in enumerate(section.headers, 1):
            cell = _put(ws, row, col_idx, header)
            cell.font = Font(color="FFFFFF", bold=True)
            cell.fill = fill
            cell.alignment = Alignment(horizontal="center")
        row += 1

        for metric in section.rows:
            _put(ws, row, 1, metric.label)
            _put(ws, row, 2, metric.value).alignment = Alignment(horizontal="right")
            _put(ws, row, 3, metric.unit)
            row += 1
        return row

    def _write_history(self, ws: Worksheet, history: HistoryTable) -> None:
        header_fill = self._fill(self.brand_color)
        header_font = Font(color="FFFFFF", bold=True)

        for col_idx, header in enumerate(history.headers, 1):
            cell = _put(ws, 1, col_idx, header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center", wrap_text=True)

        for row_idx, row_data in enumerate(history.rows, 2):
            for col_idx, value in enumerate(row_data, 1):
                _put(ws, row_idx, col_idx, value)

        # Auto-width
        for col_idx in range(1, len(history.headers) + 1):
            max_len = max(
                len(str(ws.cell(row=r, column=col_idx).value or ""))
                for r in range(1, len(history.rows) + 2)
            )
            ws.column_dimensions[get_column_letter(col_idx)].width = min(max_len + 4, 40)
        ws.freeze_panes = "A2"
