"""Tests for the PDF document writer."""

import base64
import logging

import pytest

from eduflow.domain.themes import PDF_THEMES
from eduflow.services.pdf_generator import (
    LineOp,
    PDFGenerator,
    RectOp,
    RowStyle,
    TableShapeError,
    TableSpec,
    TextOp,
    fit_text,
    text_width,
    wrap_text,
)


def _body_ops(gen):
    return [op for page in gen.pages for op in page.ops]


def _page_of(gen, text):
    """Page number on which a text line was drawn."""
    pages = [number for number, line in gen.iter_text() if line == text]
    assert len(pages) == 1, f"{text!r} drawn {len(pages)} times"
    return pages[0]


def _fill_to(gen, remaining):
    """Move the cursor so that ``remaining`` millimetres are left on the page."""
    gen.current_y = gen.geometry.content_bottom - remaining


def _build_long_document():
    gen = PDFGenerator()
    gen.add_header("Statement", "Period", logo_url="https://example.org/logo.png")
    for i in range(8):
        gen.add_title(f"Section {i}", 2)
        gen.add_text("Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 6)
        gen.add_table(
            headers=["Name", "Value"],
            rows=[[f"Row {i}-{r}", str(r)] for r in range(12)],
            column_widths=[100, 70],
        )
        gen.add_spacer(8)
    gen.add_footer("Generated for tests")
    return gen


class TestTextMeasurement:
    """Tests for wrapping and truncation helpers."""

    def test_wrap_empty(self):
        assert wrap_text("", "Helvetica", 10, 100) == []

    def test_wrap_respects_width(self):
        text = "The quick brown fox jumps over the lazy dog " * 10
        lines = wrap_text(text, "Helvetica", 10, 80)

        assert len(lines) > 1
        assert all(text_width(line, "Helvetica", 10) <= 80 for line in lines)
        assert " ".join(lines).split() == text.split()

    def test_wrap_splits_long_token(self):
        token = "X" * 200
        lines = wrap_text(token, "Helvetica", 10, 30)

        assert "".join(lines) == token
        assert all(text_width(line, "Helvetica", 10) <= 30 for line in lines)

    def test_wrap_honours_newlines(self):
        assert wrap_text("one\ntwo", "Helvetica", 10, 100) == ["one", "two"]

    def test_fit_text(self):
        assert fit_text("short", "Helvetica", 9, 50) == "short"

        long_text = "A very long transaction description that will not fit"
        fitted = fit_text(long_text, "Helvetica", 9, 30)
        assert fitted.endswith("...")
        assert text_width(fitted, "Helvetica", 9) <= 30


class TestConfiguration:
    """Tests for generator construction."""

    def test_defaults(self):
        gen = PDFGenerator()

        assert gen.page_count == 1
        assert gen.current_y == 20
        assert gen.theme is PDF_THEMES["classic_blue"]

    def test_overrides(self):
        gen = PDFGenerator(orientation="landscape", margins={"top": 30})

        assert gen.geometry.width == 297
        assert gen.geometry.margin_top == 30
        assert gen.geometry.margin_left == 20
        assert gen.current_y == 30

    def test_unknown_theme_falls_back(self):
        assert PDFGenerator(theme_name="nonexistent").theme is PDF_THEMES["classic_blue"]


class TestPagination:
    """Tests for page breaks and content bounds."""

    def test_body_content_stays_inside_margins(self):
        """No body operation reaches below the bottom margin."""
        gen = _build_long_document()
        bottom = gen.geometry.content_bottom

        assert gen.page_count > 1
        for op in _body_ops(gen):
            if isinstance(op, TextOp):
                assert op.y <= bottom
            elif isinstance(op, RectOp):
                assert op.bottom <= bottom
            elif isinstance(op, LineOp):
                assert max(op.y1, op.y2) <= bottom

    def test_check_page_break(self):
        gen = PDFGenerator()

        assert not gen.check_page_break(100)
        _fill_to(gen, 5)
        assert gen.check_page_break(10)
        assert gen.page_count == 2
        assert gen.current_y == gen.geometry.margin_top

    def test_add_header_advances_cursor(self):
        gen = PDFGenerator()
        gen.add_header("Title")
        assert gen.current_y == 36

        gen = PDFGenerator()
        gen.add_header("Title", "Subtitle", logo_url="https://example.org/logo.png")
        assert gen.current_y == 57

    def test_title_levels(self):
        gen = PDFGenerator()
        gen.add_title("Big", 1)
        gen.add_title("Small", 3)

        sizes = [op.size for op in gen.current_page.ops]
        assert sizes == [16, 12]
        assert gen.current_y == 20 + 8 + 4

    def test_invalid_title_level(self):
        with pytest.raises(ValueError, match="Heading level"):
            PDFGenerator().add_title("Oops", 4)

    def test_heading_not_orphaned(self):
        """A heading with no room for a following line moves to the next page."""
        gen = PDFGenerator()
        _fill_to(gen, 9)
        gen.add_title("Interest Breakdown", 2)

        assert _page_of(gen, "Interest Breakdown") == 2

    def test_short_paragraph_kept_together(self):
        gen = PDFGenerator()
        _fill_to(gen, 10)
        gen.add_text("line one\nline two\nline three")

        assert gen.page_count == 2
        assert gen.pages[0].texts() == []
        assert gen.pages[1].texts() == ["line one", "line two", "line three"]

    def test_long_paragraph_flows(self):
        """A paragraph taller than a page continues on the next page."""
        gen = PDFGenerator()
        lines = [f"Line {i}" for i in range(60)]
        gen.add_text("\n".join(lines))

        assert gen.page_count == 2
        assert [text for _, text in gen.iter_text()] == lines

    def test_spacer_clamped_at_bottom(self):
        gen = PDFGenerator()
        _fill_to(gen, 3)
        gen.add_spacer(50)

        assert gen.page_count == 1
        assert gen.current_y == gen.geometry.content_bottom

    def test_text_alignment(self):
        gen = PDFGenerator()
        gen.add_text("centred", align="center")
        gen.add_text("right", align="right")

        centred, right = gen.current_page.ops
        assert centred.x == 105 and centred.align == "center"
        assert right.x == 190 and right.align == "right"

        with pytest.raises(ValueError, match="alignment"):
            gen.add_text("x", align="justify")


class TestTables:
    """Tests for table drawing."""

    def test_table_is_atomic(self):
        """A table that does not fit the remaining space moves whole."""
        gen = PDFGenerator()
        _fill_to(gen, 40)
        rows = [[f"R{i}", str(i)] for i in range(10)]
        gen.add_table(headers=["Key", "Value"], rows=rows)

        assert gen.page_count == 2
        assert gen.pages[0].texts() == []
        texts = gen.pages[1].texts()
        assert "Key" in texts
        assert all(f"R{i}" in texts for i in range(10))

    def test_table_fits_on_current_page(self):
        gen = PDFGenerator()
        gen.add_table(headers=["A", "B"], rows=[["1", "2"]])

        assert gen.page_count == 1
        assert gen.current_y == 20 + 16 + 4

    def test_oversized_table_repeats_header(self):
        """A table taller than a page is split with the header on each part."""
        gen = PDFGenerator()
        rows = [[f"R{i}", str(i)] for i in range(40)]
        gen.add_table(headers=["Key", "Value"], rows=rows)

        assert gen.page_count == 2
        for page in gen.pages:
            assert page.texts().count("Key") == 1
        all_texts = [text for _, text in gen.iter_text()]
        assert all(f"R{i}" in all_texts for i in range(40))

    def test_table_starts_below_top_margin(self):
        """A table moved to a new page is drawn inside the top margin."""
        gen = PDFGenerator()
        _fill_to(gen, 5)
        gen.add_table(headers=["Key", "Value"], rows=[["R0", "0"], ["R1", "1"]])

        top = gen.geometry.margin_top
        ops = gen.pages[1].ops
        rects = [op for op in ops if isinstance(op, RectOp)]
        assert min(op.y for op in rects) == top
        assert all(op.y > top for op in ops if isinstance(op, TextOp))
        assert gen.current_y == top + 3 * 8 + 4

    def test_row_cell_count_mismatch(self):
        gen = PDFGenerator()
        with pytest.raises(TableShapeError, match="Row 1 has 1 cells, expected 2") as exc_info:
            gen.add_table(headers=["A", "B"], rows=[["1", "2"], ["3"]])
        assert "Row content" in exc_info.value.details

    def test_width_count_mismatch(self):
        gen = PDFGenerator()
        with pytest.raises(TableShapeError, match="column widths"):
            gen.add_table(headers=["A", "B"], rows=[["1", "2"]], column_widths=[50])

    def test_no_columns(self):
        with pytest.raises(TableShapeError):
            PDFGenerator().add_table(headers=[], rows=[])

    def test_wide_columns_scaled_to_content(self):
        gen = PDFGenerator()
        gen.add_table(headers=["A", "B"], rows=[["1", "2"]], column_widths=[200, 100])

        border = [op for op in gen.current_page.ops if isinstance(op, RectOp) and op.stroke]
        assert len(border) == 1
        assert border[0].width == pytest.approx(gen.geometry.content_width)

    def test_alternating_rows(self):
        gen = PDFGenerator()
        spec = TableSpec(
            headers=["A"],
            rows=[["1"], ["2"], ["3"], ["4"]],
            row_style=RowStyle(alternating_rows=True),
        )
        gen.add_table(spec)

        stripes = [op for op in gen.current_page.ops if isinstance(op, RectOp) and op.fill == "#f8fafc"]
        assert len(stripes) == 2

    def test_long_cells_truncated(self):
        gen = PDFGenerator()
        gen.add_table(headers=["Description"], rows=[["word " * 40]], column_widths=[40])

        cell = [op for op in gen.current_page.ops if isinstance(op, TextOp)][1]
        assert cell.text.endswith("...")

    def test_none_cells_render_empty(self):
        gen = PDFGenerator()
        gen.add_table(headers=["A", "B"], rows=[[None, 5]])

        texts = gen.current_page.texts()
        assert texts == ["A", "B", "", "5"]


class TestFooter:
    """Tests for the footer pass."""

    def test_every_page_has_footer(self):
        gen = _build_long_document()
        total = gen.page_count
        lines = list(gen.iter_text())

        for number in range(1, total + 1):
            page_lines = [text for page, text in lines if page == number]
            assert f"Page {number} of {total}" in page_lines
            assert "Generated for tests" in page_lines

    def test_no_footer_without_add_footer(self):
        gen = PDFGenerator()
        gen.add_text("Body")
        assert [text for _, text in gen.iter_text()] == ["Body"]

    def test_footer_below_content(self):
        gen = PDFGenerator()
        gen.add_footer("Footer")
        list(gen.iter_text())

        footer_texts = [op for op in gen.pages[0].footer_ops if isinstance(op, TextOp)]
        assert all(op.y == gen.geometry.content_bottom + 5 for op in footer_texts)

    def test_page_after_footer_warns(self, caplog):
        gen = PDFGenerator()
        gen.add_footer("Footer")

        with caplog.at_level(logging.WARNING):
            gen.add_page_break()

        assert "after add_footer" in caplog.text
        assert "Page 2 of 2" in [text for _, text in gen.iter_text()]


class TestExport:
    """Tests for PDF output."""

    def test_blob_is_pdf(self):
        gen = PDFGenerator()
        gen.add_text("Hello")
        assert gen.get_blob().startswith(b"%PDF")

    def test_output_is_deterministic(self):
        """Identical drawing calls produce identical bytes."""
        first = _build_long_document()
        first.set_properties(title="Statement", author="Admin")
        second = _build_long_document()
        second.set_properties(title="Statement", author="Admin")

        assert first.get_blob() == second.get_blob()

    def test_base64(self):
        gen = PDFGenerator()
        uri = gen.get_base64()

        assert uri.startswith("data:application/pdf;base64,")
        assert base64.b64decode(uri.split(",", 1)[1]) == gen.get_blob()

    def test_output_kinds(self):
        gen = PDFGenerator()
        assert isinstance(gen.output("blob"), bytes)
        assert gen.output("datauristring").startswith("data:")
        with pytest.raises(ValueError):
            gen.output("arraybuffer")

    def test_save(self, tmp_path):
        gen = PDFGenerator()
        gen.add_text("Saved")
        path = tmp_path / "out" / "report.pdf"

        gen.save(path)

        assert path.read_bytes() == gen.get_blob()
