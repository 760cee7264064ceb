"""Cursor-based PDF document writer built on ReportLab.

The writer keeps a vertical cursor on the current page and exposes drawing
primitives for reports:
- Header banner with title, subtitle and rule
- Headings and word-wrapped paragraphs
- Bordered tables with a filled header row and striped body rows
- Footer with "Page N of TOTAL" on every page

Drawing calls are recorded as per-page operations and rendered to PDF bytes
with the ReportLab canvas only at export time. Positions are millimetres
from the top-left corner; ``current_y`` is the baseline of the next line.
"""

import base64
import logging
from dataclasses import dataclass, field, replace
from io import BytesIO
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence, Union

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas as pdf_canvas

from eduflow.domain.themes import (
    DEFAULT_PDF_CONFIG,
    DEFAULT_THEME,
    PDFConfig,
    resolve_font,
    get_theme,
)

logger = logging.getLogger(__name__)


# =============================================================================
# LAYOUT CONSTANTS (millimetres)
# =============================================================================

LINE_HEIGHT = 6.0
ROW_HEIGHT = 8.0
CELL_PADDING = 2.0
LOGO_HEIGHT = 15.0
TABLE_GAP = 4.0
FOOTER_OFFSET = 5.0
RULE_WIDTH = 0.5

TITLE_SIZES = {1: 16, 2: 14, 3: 12}
TITLE_ADVANCE = {1: 8, 2: 6, 3: 4}

ALT_ROW_COLOR = "#f8fafc"
HEADER_TEXT_COLOR = "#ffffff"

CellValue = Union[str, int, float, Any]


class TableShapeError(ValueError):
    """Raised when table rows, headers and column widths disagree."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.details = details


# =============================================================================
# DRAW OPERATIONS
# =============================================================================

@dataclass(frozen=True, slots=True)
class TextOp:
    """A single line of text drawn at a baseline position."""

    x: float
    y: float
    text: str
    font: str
    size: float
    color: str
    align: str = "left"


@dataclass(frozen=True, slots=True)
class RectOp:
    """A filled and/or stroked rectangle; ``y`` is the top edge."""

    x: float
    y: float
    width: float
    height: float
    fill: Optional[str] = None
    stroke: Optional[str] = None
    line_width: float = RULE_WIDTH

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True, slots=True)
class LineOp:
    """A straight line segment."""

    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    line_width: float = RULE_WIDTH


DrawOp = Union[TextOp, RectOp, LineOp]


@dataclass
class Page:
    """Body and footer operations of one page."""

    number: int
    ops: list[DrawOp] = field(default_factory=list)
    footer_ops: list[DrawOp] = field(default_factory=list)

    def texts(self, include_footer: bool = True) -> list[str]:
        """All text drawn on this page, in drawing order."""
        ops = self.ops + self.footer_ops if include_footer else self.ops
        return [op.text for op in ops if isinstance(op, TextOp)]


# =============================================================================
# TABLE SPECIFICATION
# =============================================================================

@dataclass(frozen=True, slots=True)
class HeaderStyle:
    """Styling of a table's header row."""

    background_color: Optional[str] = None  # None = theme primary
    text_color: str = HEADER_TEXT_COLOR
    font_size: float = 10


@dataclass(frozen=True, slots=True)
class RowStyle:
    """Styling of a table's body rows."""

    font_size: float = 9
    text_color: Optional[str] = None  # None = theme text colour
    alternating_rows: bool = False


@dataclass(frozen=True, slots=True)
class TableSpec:
    """Table content and styling for ``PDFGenerator.add_table``."""

    headers: Sequence[str]
    rows: Sequence[Sequence[CellValue]]
    column_widths: Optional[Sequence[float]] = None  # None = equal split
    header_style: HeaderStyle = field(default_factory=HeaderStyle)
    row_style: RowStyle = field(default_factory=RowStyle)


# =============================================================================
# TEXT MEASUREMENT
# =============================================================================

def text_width(text: str, font: str, size: float) -> float:
    """Width of a string in millimetres."""
    return stringWidth(text, font, size) / mm


def _split_long_token(token: str, font: str, size: float, max_width: float) -> list[str]:
    """Break a single token wider than the line into width-safe chunks."""
    if text_width(token, font, size) <= max_width:
        return [token]
    chunks = []
    remaining = token
    while remaining:
        lo, hi = 1, len(remaining)
        fit = 1
        while lo <= hi:
            mid = (lo + hi) // 2
            if text_width(remaining[:mid], font, size) <= max_width:
                fit = mid
                lo = mid + 1
            else:
                hi = mid - 1
        chunks.append(remaining[:fit])
        remaining = remaining[fit:]
    return chunks


def wrap_text(text: str, font: str, size: float, max_width: float) -> list[str]:
    """Word-wrap text to a maximum width in millimetres.

    Explicit newlines start a new line. Returns an empty list for empty text.
    """
    if not text:
        return []

    lines = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split():
            for piece in _split_long_token(word, font, size, max_width):
                candidate = f"{current} {piece}" if current else piece
                if text_width(candidate, font, size) <= max_width:
                    current = candidate
                else:
                    if current:
                        lines.append(current)
                    current = piece
        lines.append(current)
    return lines


def fit_text(text: str, font: str, size: float, max_width: float) -> str:
    """Truncate text with an ellipsis so it fits ``max_width`` millimetres."""
    if text_width(text, font, size) <= max_width:
        return text
    ellipsis = "..."
    while text and text_width(text + ellipsis, font, size) > max_width:
        text = text[:-1]
    return text.rstrip() + ellipsis if text else ""


def _cell_text(value: CellValue) -> str:
    return "" if value is None else str(value)


# =============================================================================
# PDF GENERATOR
# =============================================================================

def _merge_config(base: PDFConfig, overrides: dict) -> PDFConfig:
    """Merge keyword overrides over a config; a margins dict is merged too."""
    margins = overrides.pop("margins", None)
    if isinstance(margins, dict):
        margins = replace(base.margins, **margins)
    if margins is not None:
        overrides["margins"] = margins
    return replace(base, **overrides)


class PDFGenerator:
    """Paginated, cursor-based document writer.

    Every drawing primitive first calls ``check_page_break`` with the height
    it is about to consume, so body content never crosses the bottom margin.

    Example:
        >>> gen = PDFGenerator(theme_name="modern_green")
        >>> gen.add_header("Quarterly Summary", "Q1 2026")
        >>> gen.add_text("Hello")
        >>> gen.add_footer("Generated by EduFlow")
        >>> pdf_bytes = gen.get_blob()
    """

    def __init__(
        self,
        config: Optional[PDFConfig] = None,
        theme_name: str = DEFAULT_THEME,
        **overrides: Any,
    ):
        """Initialize the writer with one empty page.

        Args:
            config: Base configuration (defaults to A4 portrait, 20 mm margins)
            theme_name: Theme key; unknown keys fall back to classic_blue
            **overrides: orientation, format or margins (a partial dict of
                margins is merged over the base margins)
        """
        self.config = _merge_config(config or DEFAULT_PDF_CONFIG, overrides)
        self.geometry = self.config.geometry()
        self.theme = get_theme(theme_name)
        self.line_height = LINE_HEIGHT

        self.pages: list[Page] = [Page(number=1)]
        self.current_y = self.geometry.margin_top

        self._footer_text: Optional[str] = None
        self._properties: dict[str, str] = {}

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def current_page(self) -> Page:
        return self.pages[-1]

    @property
    def remaining_height(self) -> float:
        """Vertical space left above the bottom margin on this page."""
        return self.geometry.content_bottom - self.current_y

    def _font(self, style: str = "normal") -> str:
        return resolve_font(self.theme.fonts.primary, style)

    def set_properties(
        self,
        title: Optional[str] = None,
        author: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> None:
        """Set PDF document metadata."""
        for key, value in (("title", title), ("author", author), ("subject", subject)):
            if value is not None:
                self._properties[key] = value

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    def check_page_break(self, required_height: float) -> bool:
        """Start a new page if ``required_height`` does not fit on this one.

        Returns:
            True if a page break was inserted
        """
        if self.current_y + required_height > self.geometry.content_bottom:
            self.add_page_break()
            return True
        return False

    def add_page_break(self) -> None:
        """Append a new page and move the cursor to the top margin."""
        if self._footer_text is not None:
            logger.warning("Page added after add_footer(); it will still get the footer")
        self.pages.append(Page(number=len(self.pages) + 1))
        self.current_y = self.geometry.margin_top

    def _advance(self, height: float) -> None:
        """Move the cursor down, never past the bottom margin."""
        self.current_y = min(self.current_y + height, self.geometry.content_bottom)

    def add_spacer(self, height: float = 5) -> None:
        """Leave vertical space without drawing."""
        self._advance(height)

    # -------------------------------------------------------------------------
    # Primitive drawing
    # -------------------------------------------------------------------------

    def _draw_text(
        self, text: str, x: float, y: float, font: str, size: float, color: str, align: str = "left"
    ) -> None:
        self.current_page.ops.append(TextOp(x, y, text, font, size, color, align))

    def _draw_rect(self, x: float, y: float, width: float, height: float, **style: Any) -> None:
        self.current_page.ops.append(RectOp(x, y, width, height, **style))

    def _draw_line(self, x1: float, y1: float, x2: float, y2: float, color: str) -> None:
        self.current_page.ops.append(LineOp(x1, y1, x2, y2, color))

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def add_header(
        self, title: str, subtitle: Optional[str] = None, logo_url: Optional[str] = None
    ) -> None:
        """Draw the report header: optional logo space, title, subtitle, rule.

        The logo itself is not fetched or drawn; only its space is reserved.
        """
        g = self.geometry
        needed = (LOGO_HEIGHT if logo_url else 0) + 8 + (6 if subtitle else 0) + 8
        self.check_page_break(needed)

        if logo_url:
            self.current_y += LOGO_HEIGHT

        self._draw_text(
            title, g.margin_left, self.current_y, self._font("bold"), 18, self.theme.colors.primary
        )
        self.current_y += 8

        if subtitle:
            self._draw_text(
                subtitle, g.margin_left, self.current_y, self._font(), 12, self.theme.colors.secondary
            )
            self.current_y += 6

        rule_y = self.current_y + 2
        self._draw_line(g.margin_left, rule_y, g.content_right, rule_y, self.theme.colors.border)
        self.current_y += 8

    def add_title(self, text: str, level: int = 1) -> None:
        """Draw a bold heading; level 1 is the largest.

        The heading is kept together with at least one following line, so it
        is never left alone at the bottom of a page.
        """
        if level not in TITLE_SIZES:
            raise ValueError(f"Heading level must be 1, 2 or 3, got {level}")

        advance = TITLE_ADVANCE[level]
        self.check_page_break(advance + self.line_height)

        self._draw_text(
            text,
            self.geometry.margin_left,
            self.current_y,
            self._font("bold"),
            TITLE_SIZES[level],
            self.theme.colors.primary,
        )
        self.current_y += advance

    def add_text(
        self,
        text: str,
        font_size: float = 10,
        font_style: str = "normal",
        color: Optional[str] = None,
        margin_bottom: float = 4,
        align: str = "left",
    ) -> None:
        """Draw a word-wrapped paragraph.

        A paragraph that fits on one page is kept together. Longer paragraphs
        flow onto following pages line by line.
        """
        g = self.geometry
        if align == "left":
            x = g.margin_left
        elif align == "center":
            x = g.width / 2
        elif align == "right":
            x = g.content_right
        else:
            raise ValueError(f"Unknown alignment: {align}")

        font = self._font(font_style)
        lines = wrap_text(text, font, font_size, g.content_width)

        block_height = len(lines) * self.line_height
        if lines and block_height <= g.content_height:
            self.check_page_break(block_height)

        for line in lines:
            self.check_page_break(self.line_height)
            self._draw_text(line, x, self.current_y, font, font_size, color or self.theme.colors.text, align)
            self.current_y += self.line_height

        self._advance(margin_bottom)

    def add_table(self, spec: Optional[TableSpec] = None, **kwargs: Any) -> None:
        """Draw a bordered table.

        The whole table is placed on one page: if it does not fit in the
        remaining space a new page is started first. Only a table taller than
        an empty page is split, repeating the header row on each page.

        Args:
            spec: Table specification; alternatively pass TableSpec fields
                as keyword arguments

        Raises:
            TableShapeError: If a row's cell count differs from the header
                count, or column widths do not match the columns
        """
        if spec is None:
            spec = TableSpec(**kwargs)

        g = self.geometry
        headers = [str(h) for h in spec.headers]
        rows = [[_cell_text(cell) for cell in row] for row in spec.rows]

        column_count = len(headers) if headers else (len(rows[0]) if rows else 0)
        if column_count == 0:
            raise TableShapeError("Table has no columns")

        for index, row in enumerate(rows):
            if len(row) != column_count:
                raise TableShapeError(
                    f"Row {index} has {len(row)} cells, expected {column_count}",
                    f"Row content: {row}",
                )

        if spec.column_widths:
            widths = [float(w) for w in spec.column_widths]
            if len(widths) != column_count:
                raise TableShapeError(
                    f"Got {len(widths)} column widths for {column_count} columns"
                )
            if any(w <= 0 for w in widths):
                raise TableShapeError("Column widths must be positive")
            total_width = sum(widths)
            if total_width > g.content_width:
                # Scale down so the table stays inside the side margins
                widths = [w * g.content_width / total_width for w in widths]
        else:
            widths = [g.content_width / column_count] * column_count

        header_height = ROW_HEIGHT if headers else 0.0
        table_height = header_height + len(rows) * ROW_HEIGHT

        if table_height <= g.content_height:
            self.check_page_break(table_height)
            self._draw_table_block(headers, rows, widths, spec, first_index=0)
        else:
            per_page = int((g.content_height - header_height) // ROW_HEIGHT)
            if per_page < 1:
                raise TableShapeError("Page is too short to hold a single table row")
            logger.info(
                f"Table of {len(rows)} rows exceeds one page; "
                f"splitting into blocks of {per_page}"
            )
            for start in range(0, len(rows), per_page):
                chunk = rows[start:start + per_page]
                self.check_page_break(header_height + len(chunk) * ROW_HEIGHT)
                self._draw_table_block(headers, chunk, widths, spec, first_index=start)

        self._advance(TABLE_GAP)

    def _draw_table_block(
        self,
        headers: list[str],
        rows: list[list[str]],
        widths: list[float],
        spec: TableSpec,
        first_index: int,
    ) -> None:
        """Draw header and rows below the cursor; rows fit on this page.

        The cursor is the block's top edge. Each row box is ROW_HEIGHT tall
        with its text baseline CELL_PADDING above the box bottom.
        """
        g = self.geometry
        left = g.margin_left
        table_width = sum(widths)
        top = self.current_y
        y = top + ROW_HEIGHT - CELL_PADDING

        if headers:
            header = spec.header_style
            self._draw_rect(
                left, y - ROW_HEIGHT + CELL_PADDING, table_width, ROW_HEIGHT,
                fill=header.background_color or self.theme.colors.primary,
            )
            font = self._font("bold")
            x = left
            for text, width in zip(headers, widths):
                label = fit_text(text, font, header.font_size, width - 2 * CELL_PADDING)
                self._draw_text(label, x + width / 2, y, font, header.font_size, header.text_color, "center")
                x += width
            y += ROW_HEIGHT

        style = spec.row_style
        font = self._font()
        color = style.text_color or self.theme.colors.text
        for offset, row in enumerate(rows):
            if style.alternating_rows and (first_index + offset) % 2 == 1:
                self._draw_rect(
                    left, y - ROW_HEIGHT + CELL_PADDING, table_width, ROW_HEIGHT,
                    fill=ALT_ROW_COLOR,
                )
            x = left
            for text, width in zip(row, widths):
                cell = fit_text(text, font, style.font_size, width - 2 * CELL_PADDING)
                self._draw_text(cell, x + CELL_PADDING, y, font, style.font_size, color)
                x += width
            y += ROW_HEIGHT

        height = (len(rows) + (1 if headers else 0)) * ROW_HEIGHT
        border = self.theme.colors.border
        self._draw_rect(left, top, table_width, height, stroke=border)

        x = left
        for index, width in enumerate(widths):
            if index > 0:
                self._draw_line(x, top, x, top + height, border)
            x += width

        self.current_y = top + height

    # -------------------------------------------------------------------------
    # Footer
    # -------------------------------------------------------------------------

    def add_footer(self, text: str) -> None:
        """Put footer text and "Page N of TOTAL" on every page.

        Call once, after all content. The footer is drawn in a finalization
        pass at export time, over every page of the document.
        """
        if self._footer_text is not None:
            logger.debug("Footer replaced")
        self._footer_text = text

    def _finalize_footers(self) -> None:
        """Rebuild footer operations for every page."""
        g = self.geometry
        total = len(self.pages)
        y = g.content_bottom + FOOTER_OFFSET
        font = self._font()
        color = self.theme.colors.secondary

        for page in self.pages:
            page.footer_ops = []
            if self._footer_text is None:
                continue
            label = f"Page {page.number} of {total}"
            room = g.content_width - text_width(label, font, 8) - 4
            page.footer_ops.extend([
                TextOp(g.margin_left, y, fit_text(self._footer_text, font, 8, room), font, 8, color),
                TextOp(g.content_right, y, label, font, 8, color, "right"),
                LineOp(g.margin_left, g.content_bottom, g.content_right, g.content_bottom,
                       self.theme.colors.border),
            ])

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def iter_text(self) -> Iterator[tuple[int, str]]:
        """Yield (page number, text) for every text line, footers included."""
        self._finalize_footers()
        for page in self.pages:
            for text in page.texts():
                yield page.number, text

    def _render_op(self, pdf: pdf_canvas.Canvas, op: DrawOp) -> None:
        height = self.geometry.height
        if isinstance(op, TextOp):
            pdf.setFont(op.font, op.size)
            pdf.setFillColor(colors.HexColor(op.color))
            x, y = op.x * mm, (height - op.y) * mm
            if op.align == "center":
                pdf.drawCentredString(x, y, op.text)
            elif op.align == "right":
                pdf.drawRightString(x, y, op.text)
            else:
                pdf.drawString(x, y, op.text)
        elif isinstance(op, RectOp):
            if op.fill:
                pdf.setFillColor(colors.HexColor(op.fill))
            if op.stroke:
                pdf.setStrokeColor(colors.HexColor(op.stroke))
                pdf.setLineWidth(op.line_width * mm)
            pdf.rect(
                op.x * mm, (height - op.bottom) * mm, op.width * mm, op.height * mm,
                stroke=1 if op.stroke else 0,
                fill=1 if op.fill else 0,
            )
        else:
            pdf.setStrokeColor(colors.HexColor(op.color))
            pdf.setLineWidth(op.line_width * mm)
            pdf.line(op.x1 * mm, (height - op.y1) * mm, op.x2 * mm, (height - op.y2) * mm)

    def get_blob(self) -> bytes:
        """Render the document to PDF bytes.

        Output is deterministic: the same drawing calls give identical bytes.
        """
        self._finalize_footers()
        g = self.geometry
        buffer = BytesIO()
        pdf = pdf_canvas.Canvas(buffer, pagesize=(g.width * mm, g.height * mm), invariant=1)
        pdf.setCreator("EduFlow Reports")
        if "title" in self._properties:
            pdf.setTitle(self._properties["title"])
        if "author" in self._properties:
            pdf.setAuthor(self._properties["author"])
        if "subject" in self._properties:
            pdf.setSubject(self._properties["subject"])

        for page in self.pages:
            for op in page.ops + page.footer_ops:
                self._render_op(pdf, op)
            pdf.showPage()

        pdf.save()
        return buffer.getvalue()

    def get_base64(self) -> str:
        """Render the document as a base64 data URI."""
        encoded = base64.b64encode(self.get_blob()).decode("ascii")
        return f"data:application/pdf;base64,{encoded}"

    def output(self, kind: str = "blob") -> Union[bytes, str]:
        """Render as ``blob`` (bytes) or ``datauristring``."""
        if kind == "blob":
            return self.get_blob()
        if kind == "datauristring":
            return self.get_base64()
        raise ValueError(f"Unknown output type: {kind}")

    def save(self, path: Path) -> None:
        """Write the rendered document to a file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.get_blob())
