"""
Statement-of-work renderers.

Every styled format walks the same block sequence produced by
``app.services.content_model.classify`` and only decides how each block kind
looks in its own format, so PDF, DOCX and the HTML preview cannot drift apart.

Capabilities
------------
PdfRenderer        paginated document (reportlab platypus)
DocxRenderer       flow document (python-docx)
PlainTextRenderer  fixed preamble + raw body, no classification
HtmlRenderer       on-screen preview fragment

Renderers keep per-render state, so ``get_renderer`` hands out a fresh
instance for every call.
"""
from __future__ import annotations

import html
import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Type
from xml.sax.saxutils import escape

from docx import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table as PdfTable, TableStyle

from app.services.content_model import (
    Blank,
    Block,
    Body,
    SectionHeader,
    Subheader,
    Table,
    classify,
)
from app.utils.helpers import build_export_filename, format_date

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Style contract
# ---------------------------------------------------------------------------

TITLE_TEXT = "Statement of Work"
ACCENT_A_HEX = "707CF1"   # section headers, table header background
ACCENT_B_HEX = "393392"   # subheaders
BODY_COLOR_HEX = "000000"
HEADER_TEXT_HEX = "FFFFFF"
CELL_BORDER_HEX = "DDDDDD"

TITLE_SIZE = 22
SECTION_SIZE = 16
SUBHEADER_SIZE = 14
BODY_SIZE = 9.5

PLAIN_TEXT_RULE = "=" * 50


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SowHeader:
    """Client block printed under the title, plus the body to render."""

    account_name: str
    created_at: datetime
    content: str
    company: Optional[str] = None
    contact: Optional[str] = None

    @classmethod
    def from_document(cls, document) -> "SowHeader":
        """Build from a materialized ``SowDocument`` (account eagerly loaded)."""
        return cls(
            account_name=document.account_name or "",
            created_at=document.created_at,
            content=document.content or "",
            company=document.account_company,
            contact=document.account_contact,
        )

    def client_lines(self) -> List[str]:
        lines = [f"Account: {self.account_name}"]
        if self.company:
            lines.append(f"Company: {self.company}")
        if self.contact:
            lines.append(f"Contact: {self.contact}")
        lines.append(f"Date: {format_date(self.created_at)}")
        return lines


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------

class DocumentRenderer(ABC):
    """Turns one SOW into the bytes of a single output format."""

    media_type: str = "application/octet-stream"
    extension: str = "bin"

    def filename(self, header: SowHeader, timestamp_ms: Optional[int] = None) -> str:
        return build_export_filename(header.account_name, self.extension, timestamp_ms)

    @abstractmethod
    def render(self, header: SowHeader) -> bytes:
        """Return the complete document for *header*."""


class StyledRenderer(DocumentRenderer):
    """Drives the per-block hooks of a concrete format over the classified body."""

    def render(self, header: SowHeader) -> bytes:
        self.begin(header)
        block_count = 0
        for block in classify(header.content):
            self.add_block(block)
            block_count += 1
        data = self.finish()
        logger.debug(
            "%s: rendered %d blocks into %d bytes",
            type(self).__name__,
            block_count,
            len(data),
        )
        return data

    def add_block(self, block: Block) -> None:
        if isinstance(block, Blank):
            self.add_blank()
        elif isinstance(block, Table):
            self.add_table(block.headers, block.rows)
        elif isinstance(block, SectionHeader):
            self.add_section_header(block.text)
        elif isinstance(block, Subheader):
            self.add_subheader(block.text)
        elif isinstance(block, Body):
            self.add_body(block.text)
        else:
            raise TypeError(f"Unknown block type: {type(block).__name__}")

    @abstractmethod
    def begin(self, header: SowHeader) -> None:
        """Start a new document and emit the title and client block."""

    @abstractmethod
    def add_blank(self) -> None: ...

    @abstractmethod
    def add_table(self, headers: List[str], rows: List[List[str]]) -> None: ...

    @abstractmethod
    def add_section_header(self, text: str) -> None: ...

    @abstractmethod
    def add_subheader(self, text: str) -> None: ...

    @abstractmethod
    def add_body(self, text: str) -> None: ...

    @abstractmethod
    def finish(self) -> bytes:
        """Return the finished document bytes."""


def _pad_rows(headers: List[str], rows: List[List[str]]) -> List[List[str]]:
    """Return header + data rows padded to a common column count."""
    width = max([len(headers)] + [len(row) for row in rows])
    return [list(row) + [""] * (width - len(row)) for row in [headers] + rows]


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------

class PdfRenderer(StyledRenderer):
    """Paginated document built with reportlab platypus flowables."""

    media_type = "application/pdf"
    extension = "pdf"

    def begin(self, header: SowHeader) -> None:
        self._buffer = io.BytesIO()
        self._doc = SimpleDocTemplate(
            self._buffer,
            pagesize=LETTER,
            rightMargin=0.75 * inch,
            leftMargin=0.75 * inch,
            topMargin=0.75 * inch,
            bottomMargin=0.75 * inch,
            title=TITLE_TEXT,
        )
        self._story: list = []

        styles = getSampleStyleSheet()
        accent_a = colors.HexColor(f"#{ACCENT_A_HEX}")
        self._styles = {
            "title": ParagraphStyle(
                name="SowTitle",
                parent=styles["Title"],
                fontName="Helvetica-Bold",
                fontSize=TITLE_SIZE,
                leading=TITLE_SIZE + 4,
                alignment=TA_CENTER,
                spaceAfter=12,
            ),
            "section": ParagraphStyle(
                name="SowSection",
                parent=styles["Normal"],
                fontName="Helvetica-Bold",
                fontSize=SECTION_SIZE,
                leading=SECTION_SIZE + 4,
                textColor=accent_a,
                spaceBefore=12,
                spaceAfter=6,
            ),
            "subheader": ParagraphStyle(
                name="SowSubheader",
                parent=styles["Normal"],
                fontName="Helvetica-Bold",
                fontSize=SUBHEADER_SIZE,
                leading=SUBHEADER_SIZE + 3,
                textColor=colors.HexColor(f"#{ACCENT_B_HEX}"),
                spaceBefore=9,
                spaceAfter=4,
            ),
            "body": ParagraphStyle(
                name="SowBody",
                parent=styles["Normal"],
                fontName="Helvetica",
                fontSize=BODY_SIZE,
                leading=BODY_SIZE * 1.6,
                textColor=colors.HexColor(f"#{BODY_COLOR_HEX}"),
                alignment=TA_LEFT,
            ),
            "cell_header": ParagraphStyle(
                name="SowCellHeader",
                parent=styles["Normal"],
                fontName="Helvetica-Bold",
                fontSize=BODY_SIZE,
                leading=BODY_SIZE + 3,
                textColor=colors.HexColor(f"#{HEADER_TEXT_HEX}"),
            ),
            "cell": ParagraphStyle(
                name="SowCell",
                parent=styles["Normal"],
                fontName="Helvetica",
                fontSize=BODY_SIZE,
                leading=BODY_SIZE + 3,
            ),
        }

        self._story.append(Paragraph(TITLE_TEXT, self._styles["title"]))
        for line in header.client_lines():
            self._story.append(Paragraph(escape(line), self._styles["body"]))
        self._story.append(Spacer(1, 12))

    def add_blank(self) -> None:
        self._story.append(Spacer(1, BODY_SIZE * 1.6))

    def add_table(self, headers: List[str], rows: List[List[str]]) -> None:
        grid = _pad_rows(headers, rows)
        if not grid[0]:
            return
        data = [[Paragraph(escape(cell), self._styles["cell_header"]) for cell in grid[0]]]
        data += [[Paragraph(escape(cell), self._styles["cell"]) for cell in row] for row in grid[1:]]

        col_width = self._doc.width / len(grid[0])
        table = PdfTable(data, colWidths=[col_width] * len(grid[0]), repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(f"#{ACCENT_A_HEX}")),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor(f"#{CELL_BORDER_HEX}")),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("TOPPADDING", (0, 0), (-1, -1), 6),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ]))
        self._story.append(Spacer(1, 6))
        self._story.append(table)
        self._story.append(Spacer(1, 6))

    def add_section_header(self, text: str) -> None:
        self._story.append(Paragraph(escape(text), self._styles["section"]))

    def add_subheader(self, text: str) -> None:
        self._story.append(Paragraph(escape(text), self._styles["subheader"]))

    def add_body(self, text: str) -> None:
        self._story.append(Paragraph(escape(text), self._styles["body"]))

    def finish(self) -> bytes:
        self._doc.build(self._story)
        self._buffer.seek(0)
        return self._buffer.getvalue()


# ---------------------------------------------------------------------------
# DOCX
# ---------------------------------------------------------------------------

def _rgb(hex_value: str) -> RGBColor:
    return RGBColor.from_string(hex_value)


def _shade_cell(cell, fill_hex: str) -> None:
    """Give a table cell a solid background colour."""
    tc_pr = cell._tc.get_or_add_tcPr()
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill_hex)
    tc_pr.append(shd)


def _set_table_borders(table, color_hex: str) -> None:
    tbl_pr = table._tbl.tblPr
    borders = OxmlElement("w:tblBorders")
    for edge in ("top", "left", "bottom", "right", "insideH", "insideV"):
        element = OxmlElement(f"w:{edge}")
        element.set(qn("w:val"), "single")
        element.set(qn("w:sz"), "4")
        element.set(qn("w:space"), "0")
        element.set(qn("w:color"), color_hex)
        borders.append(element)
    tbl_pr.append(borders)


class DocxRenderer(StyledRenderer):
    """Flow document built with python-docx."""

    media_type = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    extension = "docx"

    def begin(self, header: SowHeader) -> None:
        self._doc = DocxDocument()
        normal = self._doc.styles["Normal"]
        normal.font.name = "Verdana"
        normal.font.size = Pt(BODY_SIZE)

        title = self._doc.add_paragraph()
        title.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = title.add_run(TITLE_TEXT)
        run.bold = True
        run.font.size = Pt(TITLE_SIZE)

        for line in header.client_lines():
            self.add_body(line)
        self._doc.add_paragraph()

    def _add_styled(self, text: str, size: float, color_hex: str, bold: bool, space_before: int, space_after: int) -> None:
        para = self._doc.add_paragraph()
        para.paragraph_format.space_before = Pt(space_before)
        para.paragraph_format.space_after = Pt(space_after)
        run = para.add_run(text)
        run.bold = bold
        run.font.size = Pt(size)
        run.font.color.rgb = _rgb(color_hex)

    def add_blank(self) -> None:
        self._doc.add_paragraph()

    def add_table(self, headers: List[str], rows: List[List[str]]) -> None:
        grid = _pad_rows(headers, rows)
        if not grid[0]:
            return
        table = self._doc.add_table(rows=len(grid), cols=len(grid[0]))
        _set_table_borders(table, CELL_BORDER_HEX)

        for r, values in enumerate(grid):
            for c, value in enumerate(values):
                cell = table.cell(r, c)
                run = cell.paragraphs[0].add_run(value)
                run.font.size = Pt(BODY_SIZE)
                if r == 0:
                    run.bold = True
                    run.font.color.rgb = _rgb(HEADER_TEXT_HEX)
                    _shade_cell(cell, ACCENT_A_HEX)

    def add_section_header(self, text: str) -> None:
        self._add_styled(text, SECTION_SIZE, ACCENT_A_HEX, True, 12, 6)

    def add_subheader(self, text: str) -> None:
        self._add_styled(text, SUBHEADER_SIZE, ACCENT_B_HEX, True, 9, 4)

    def add_body(self, text: str) -> None:
        self._add_styled(text, BODY_SIZE, BODY_COLOR_HEX, False, 0, 0)

    def finish(self) -> bytes:
        buffer = io.BytesIO()
        self._doc.save(buffer)
        buffer.seek(0)
        return buffer.getvalue()


# ---------------------------------------------------------------------------
# HTML preview
# ---------------------------------------------------------------------------

_FONT = "font-family: Verdana, sans-serif;"


class HtmlRenderer(StyledRenderer):
    """HTML fragment with inline styles, used for the on-screen preview."""

    media_type = "text/html"
    extension = "html"

    def begin(self, header: SowHeader) -> None:
        self._parts: List[str] = [
            f'<div class="sow-preview" style="{_FONT}">',
            f'<h1 style="{_FONT} font-size: {TITLE_SIZE}px; font-weight: bold; text-align: center;">'
            f"{html.escape(TITLE_TEXT)}</h1>",
        ]
        for line in header.client_lines():
            self.add_body(line)
        self.add_blank()

    def add_blank(self) -> None:
        self._parts.append("<br>")

    def add_table(self, headers: List[str], rows: List[List[str]]) -> None:
        grid = _pad_rows(headers, rows)
        if not grid[0]:
            return
        cell_style = f"border: 1px solid #{CELL_BORDER_HEX}; padding: 8px; {_FONT} font-size: {BODY_SIZE}px;"
        head_style = (
            f"{cell_style} background-color: #{ACCENT_A_HEX}; color: #{HEADER_TEXT_HEX}; "
            "font-weight: bold; text-align: left;"
        )
        parts = ['<table style="width: 100%; border-collapse: collapse; margin: 12px 0;">', "<thead><tr>"]
        parts += [f'<th style="{head_style}">{html.escape(cell)}</th>' for cell in grid[0]]
        parts.append("</tr></thead><tbody>")
        for row in grid[1:]:
            parts.append("<tr>")
            parts += [f'<td style="{cell_style}">{html.escape(cell)}</td>' for cell in row]
            parts.append("</tr>")
        parts.append("</tbody></table>")
        self._parts.append("".join(parts))

    def add_section_header(self, text: str) -> None:
        self._parts.append(
            f'<div style="{_FONT} font-size: {SECTION_SIZE}px; color: #{ACCENT_A_HEX}; font-weight: bold; '
            f'margin-top: 16px; margin-bottom: 8px;">{html.escape(text)}</div>'
        )

    def add_subheader(self, text: str) -> None:
        self._parts.append(
            f'<div style="{_FONT} font-size: {SUBHEADER_SIZE}px; color: #{ACCENT_B_HEX}; font-weight: bold; '
            f'margin-top: 12px; margin-bottom: 6px;">{html.escape(text)}</div>'
        )

    def add_body(self, text: str) -> None:
        self._parts.append(
            f'<div style="{_FONT} font-size: {BODY_SIZE}px; color: #{BODY_COLOR_HEX}; line-height: 1.6;">'
            f"{html.escape(text)}</div>"
        )

    def finish(self) -> bytes:
        self._parts.append("</div>")
        return "\n".join(self._parts).encode("utf-8")


# ---------------------------------------------------------------------------
# Plain text
# ---------------------------------------------------------------------------

class PlainTextRenderer(DocumentRenderer):
    """
    Fixed preamble followed by the body verbatim.

    Plain text has no styling to apply, so the body is not classified.
    """

    media_type = "text/plain"
    extension = "txt"

    def render(self, header: SowHeader) -> bytes:
        lines = [
            "STATEMENT OF WORK",
            PLAIN_TEXT_RULE,
            "",
            "CLIENT INFORMATION",
            f"Account: {header.account_name}",
        ]
        if header.company:
            lines.append(f"Company: {header.company}")
        lines += [
            f"Date: {format_date(header.created_at)}",
            "",
            PLAIN_TEXT_RULE,
            "",
            header.content,
        ]
        return "\n".join(lines).encode("utf-8")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

RENDERERS: Dict[str, Type[DocumentRenderer]] = {
    "pdf": PdfRenderer,
    "docx": DocxRenderer,
    "txt": PlainTextRenderer,
    "html": HtmlRenderer,
}


def get_renderer(fmt: str) -> DocumentRenderer:
    """Return a fresh renderer for *fmt* (``pdf``, ``docx``, ``txt`` or ``html``)."""
    key = getattr(fmt, "value", fmt)
    try:
        renderer_cls = RENDERERS[str(key).lower()]
    except KeyError:
        raise ValueError(f"Unsupported export format: {fmt!r}") from None
    return renderer_cls()
