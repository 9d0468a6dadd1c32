"""PDF export generator using reportlab platypus.

Portrait pages carry the header block and one colour-coded grid table per
metric section; the historical table of a summary export follows on a
landscape page so all seventeen columns fit.
"""

import io

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import (
    BaseDocTemplate,
    Frame,
    KeepTogether,
    NextPageTemplate,
    PageBreak,
    PageTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
)

from esg_api.modules.reporting.generators.base import BaseReportGenerator
from esg_api.modules.reporting.layout import ESGReport, HistoryTable, MetricSection

MARGIN = 1.5 * cm
# Fonts shipped with reportlab have no rupee glyph
_GLYPH_FALLBACKS = {"₹": "Rs. "}


def _pdf_text(value: str) -> str:
    for glyph, replacement in _GLYPH_FALLBACKS.items():
        value = value.replace(glyph, replacement)
    return value


class PDFGenerator(BaseReportGenerator):
    """Generate a paginated PDF with one styled table per section."""

    CONTENT_TYPE = "application/pdf"
    EXTENSION = "pdf"

    def __init__(self, brand_color: str = "#1E3A5F") -> None:
        super().__init__(brand_color)
        styles = getSampleStyleSheet()
        self.title_style = ParagraphStyle(
            "ESGTitle",
            parent=styles["Title"],
            fontSize=20,
            textColor=colors.HexColor(self.brand_color),
            alignment=0,
            spaceAfter=12,
        )
        self.meta_style = ParagraphStyle("ESGMeta", parent=styles["Normal"], fontSize=11, leading=15)
        self.section_style = ParagraphStyle(
            "ESGSection", parent=styles["Heading2"], fontSize=14, spaceBefore=6, spaceAfter=6
        )
        self.cell_style = ParagraphStyle("ESGCell", parent=styles["Normal"], fontSize=6.5, leading=8)
        self.head_cell_style = ParagraphStyle(
            "ESGHeadCell", parent=self.cell_style, textColor=colors.white, fontName="Helvetica-Bold"
        )

    def generate(self, report: ESGReport) -> tuple[bytes, str]:
        buf = io.BytesIO()
        doc = BaseDocTemplate(
            buf,
            pagesize=A4,
            title=report.title,
            leftMargin=MARGIN,
            rightMargin=MARGIN,
            topMargin=MARGIN,
            bottomMargin=MARGIN,
        )
        portrait_w, portrait_h = A4
        land_w, land_h = landscape(A4)
        doc.addPageTemplates([
            PageTemplate(
                id="portrait",
                frames=[Frame(MARGIN, MARGIN, portrait_w - 2 * MARGIN, portrait_h - 2 * MARGIN)],
                pagesize=A4,
                onPage=self._footer,
            ),
            PageTemplate(
                id="landscape",
                frames=[Frame(MARGIN, MARGIN, land_w - 2 * MARGIN, land_h - 2 * MARGIN)],
                pagesize=landscape(A4),
                onPage=self._footer,
            ),
        ])

        story: list = [Paragraph(report.title, self.title_style)]
        for label, value in report.header:
            story.append(Paragraph(f"<b>{_escape(label)}</b> {_escape(_pdf_text(value))}", self.meta_style))
        story.append(Spacer(1, 0.6 * cm))

        for section in report.sections:
            story.append(self._section(section, portrait_w - 2 * MARGIN))
            story.append(Spacer(1, 0.5 * cm))

        if report.history is not None:
            story.extend([NextPageTemplate("landscape"), PageBreak()])
            story.append(Paragraph("Historical Data", self.section_style))
            story.append(self._history(report.history, land_w - 2 * MARGIN))

        doc.build(story)
        return buf.getvalue(), self.CONTENT_TYPE

    def _section(self, section: MetricSection, width: float) -> KeepTogether:
        data = [list(section.headers)]
        data.extend([m.label, _pdf_text(m.value), _pdf_text(m.unit)] for m in section.rows)

        table = Table(data, colWidths=[width * 0.5, width * 0.3, width * 0.2])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(section.color)),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("ALIGN", (1, 1), (1, -1), "RIGHT"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#9CA3AF")),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F9FAFB")]),
            ("TOPPADDING", (0, 0), (-1, -1), 5),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
        ]))
        return KeepTogether([Paragraph(section.title, self.section_style), table])

    def _history(self, history: HistoryTable, width: float) -> Table:
        head = [Paragraph(_escape(_pdf_text(h)), self.head_cell_style) for h in history.headers]
        body = [
            [Paragraph(_escape(_pdf_text(v)), self.cell_style) for v in row]
            for row in history.display_rows
        ]
        col_width = width / len(history.headers)
        table = Table([head, *body], colWidths=[col_width] * len(history.headers), repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(self.brand_color)),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("GRID", (0, 0), (-1, -1), 0.4, colors.HexColor("#9CA3AF")),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F9FAFB")]),
        ]))
        return table

    def _footer(self, canvas, doc) -> None:
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(colors.HexColor("#6B7280"))
        page_width = doc.pageTemplate.pagesize[0]
        canvas.drawRightString(page_width - MARGIN, MARGIN / 2, f"Page {doc.page}")
        canvas.restoreState()


def _escape(text: str) -> str:
    """Escape markup characters for reportlab Paragraph mini-HTML."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
