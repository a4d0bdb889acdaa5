"""PDF rendering of the document model with ReportLab Platypus."""

from __future__ import annotations

import html
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from loguru import logger
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import BaseDocTemplate, Flowable, Frame, PageTemplate, Spacer, Table, TableStyle
from reportlab.platypus import PageBreak as RLPageBreak
from reportlab.platypus import Paragraph as RLParagraph

from testgen.services import document_model as dm
from testgen.services.errors import ConfigurationError


ALIGNMENTS = {"left": TA_LEFT, "center": TA_CENTER, "right": TA_RIGHT}

ROLE_SIZE_DELTA = {"title": 4, "heading": 2}

# Oblique faces of the built-in PDF fonts
STANDARD_ITALICS = {
    "Times-Roman": "Times-Italic",
    "Helvetica": "Helvetica-Oblique",
    "Courier": "Courier-Oblique",
}

CUSTOM_FONT = "AssessmentFont"
CUSTOM_BOLD_FONT = "AssessmentFont-Bold"

# Cyrillic-capable system TTFs (regular, bold), tried in order when no font path is configured
SYSTEM_FONT_CANDIDATES: Tuple[Tuple[str, str], ...] = (
    ("/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSerif-Bold.ttf"),
    ("/usr/share/fonts/dejavu/DejaVuSerif.ttf", "/usr/share/fonts/dejavu/DejaVuSerif-Bold.ttf"),
    (
        "/usr/share/fonts/truetype/liberation/LiberationSerif-Regular.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSerif-Bold.ttf",
    ),
    ("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
    ("/usr/share/fonts/TTF/DejaVuSerif.ttf", "/usr/share/fonts/TTF/DejaVuSerif-Bold.ttf"),
    ("C:/Windows/Fonts/times.ttf", "C:/Windows/Fonts/timesbd.ttf"),
    ("/System/Library/Fonts/Supplemental/Times New Roman.ttf", "/System/Library/Fonts/Supplemental/Times New Roman Bold.ttf"),
    ("/Library/Fonts/Times New Roman.ttf", "/Library/Fonts/Times New Roman Bold.ttf"),
)

# Encoding of the built-in PDF fonts
STANDARD_FONT_ENCODING = "cp1252"


@dataclass(frozen=True)
class _Fonts:
    regular: str
    bold: str
    italic: str


class PageNumberReset(Flowable):
    """Invisible marker: the page it lands on is numbered ``start``."""

    def __init__(self, start: int) -> None:
        super().__init__()
        self.start = start

    def wrap(self, availWidth, availHeight):
        return 0, 0

    def draw(self) -> None:
        pass


class _AssessmentDocTemplate(BaseDocTemplate):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.page_number_offset = 0

    def afterFlowable(self, flowable) -> None:
        if isinstance(flowable, PageNumberReset):
            self.page_number_offset = self.page - flowable.start

    @property
    def display_page_number(self) -> int:
        return self.page - self.page_number_offset


def find_system_font(
    candidates: Iterable[Tuple[str, str]] = SYSTEM_FONT_CANDIDATES,
) -> Optional[Tuple[Path, Optional[Path]]]:
    for regular, bold in candidates:
        regular_path = Path(regular)
        if regular_path.is_file():
            bold_path = Path(bold)
            return regular_path, bold_path if bold_path.is_file() else None
    return None


def _font_paths(style: dm.DocumentStyle) -> Optional[Tuple[Path, Optional[Path]]]:
    if style.font_path:
        return style.font_path, style.bold_font_path
    return find_system_font()


def _register_fonts(style: dm.DocumentStyle) -> Optional[_Fonts]:
    """Register the TTF pair for this document, or return ``None`` when only built-in fonts exist."""
    paths = _font_paths(style)
    if paths is None:
        return None

    font_path, bold_font_path = paths
    pdfmetrics.registerFont(TTFont(CUSTOM_FONT, str(font_path)))
    bold = CUSTOM_FONT
    if bold_font_path:
        pdfmetrics.registerFont(TTFont(CUSTOM_BOLD_FONT, str(bold_font_path)))
        bold = CUSTOM_BOLD_FONT
    logger.debug("Registered document font", font=str(font_path), bold=str(bold_font_path))
    return _Fonts(CUSTOM_FONT, bold, CUSTOM_FONT)


def _standard_fonts(style: dm.DocumentStyle, document: dm.Document) -> _Fonts:
    # The built-in fonts only carry Western glyphs; anything else would print as blank boxes.
    for text in document.text_lines():
        try:
            text.encode(STANDARD_FONT_ENCODING)
        except UnicodeEncodeError as exc:
            raise ConfigurationError(
                f"No TrueType font with Cyrillic glyphs was found for the PDF. "
                f"Set DOCUMENT_FONT_PATH to a TTF file such as DejaVuSerif.ttf (text: {text[:40]!r})"
            ) from exc
    return _Fonts(style.font, style.bold_font, STANDARD_ITALICS.get(style.font, style.font))


class PdfWriter:
    extension = "pdf"
    media_type = "application/pdf"

    def render(self, document: dm.Document) -> bytes:
        style = document.style
        fonts = _register_fonts(style) or _standard_fonts(style, document)
        top, right, bottom, left = (margin * mm for margin in style.margins_mm)

        buffer = BytesIO()
        doc = _AssessmentDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=left,
            rightMargin=right,
            topMargin=top,
            bottomMargin=bottom,
            title=document.metadata.title,
            author=document.metadata.creator,
            creator=document.metadata.creator,
            subject=document.metadata.description,
        )
        frame = Frame(doc.leftMargin, doc.bottomMargin, doc.width, doc.height, id="body")

        def _draw_page_number(canvas, doc_template) -> None:
            canvas.saveState()
            canvas.setFont(fonts.regular, style.font_size - 2)
            canvas.drawCentredString(
                doc_template.pagesize[0] / 2, doc_template.bottomMargin / 2, str(doc_template.display_page_number)
            )
            canvas.restoreState()

        doc.addPageTemplates([PageTemplate(id="page", frames=[frame], onPageEnd=_draw_page_number)])

        renderer = _FlowableRenderer(style, fonts, doc.width)
        story: List[Flowable] = []
        for section in document.sections:
            story.extend(renderer.section(section))
        doc.build(story)

        content = buffer.getvalue()
        logger.info("PDF rendered", pages=doc.page, size=len(content))
        return content


class _FlowableRenderer:
    def __init__(self, style: dm.DocumentStyle, fonts: _Fonts, width: float) -> None:
        self.style = style
        self.fonts = fonts
        self.width = width

    def section(self, section: dm.DocumentSection) -> List[Flowable]:
        flowables: List[Flowable] = []
        reset_pending = section.page_number_start is not None
        for block in section.blocks:
            if reset_pending and not isinstance(block, dm.PageBreak):
                flowables.append(PageNumberReset(section.page_number_start))
                reset_pending = False
            flowables.extend(self.block(block))
        return flowables

    def block(self, block: dm.Block) -> List[Flowable]:
        if isinstance(block, dm.PageBreak):
            return [RLPageBreak()]
        if isinstance(block, dm.Paragraph):
            return [self.paragraph(block)]
        if isinstance(block, dm.HeaderRow):
            return [self.header_row(block)]
        if isinstance(block, dm.Table):
            return [self.table(block)]
        raise TypeError(f"Unsupported block type: {type(block).__name__}")

    def paragraph_style(self, p: dm.Paragraph) -> ParagraphStyle:
        size = self.style.font_size + ROLE_SIZE_DELTA.get(p.role, 0)
        if p.bold or p.role in ROLE_SIZE_DELTA:
            font = self.fonts.bold
        elif p.italic:
            font = self.fonts.italic
        else:
            font = self.fonts.regular
        return ParagraphStyle(
            f"block-{p.role}",
            fontName=font,
            fontSize=size,
            leading=size * 1.2 * self.style.line_spacing,
            alignment=ALIGNMENTS[p.align],
            leftIndent=p.indent_mm * mm,
            spaceBefore=p.space_before,
            spaceAfter=p.space_after,
        )

    def paragraph(self, p: dm.Paragraph) -> Flowable:
        if not p.text:
            return Spacer(1, p.space_before + p.space_after or self.style.font_size)
        return RLParagraph(html.escape(p.text, quote=False), self.paragraph_style(p))

    def header_row(self, row: dm.HeaderRow) -> Table:
        left = [self.paragraph(p) for p in row.left]
        right = [self.paragraph(p) for p in row.right]
        table = Table([[left, right]], colWidths=[self.width / 2, self.width / 2])
        table.setStyle(
            TableStyle(
                [
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("LINEBELOW", (0, 0), (-1, -1), 0.5, colors.black),
                    ("LEFTPADDING", (0, 0), (-1, -1), 0),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 0),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                ]
            )
        )
        return table

    def table(self, block: dm.Table) -> Table:
        rows = []
        if block.header:
            rows.append([self.paragraph(dm.Paragraph(text, bold=True)) for text in block.header])
        for row in block.rows:
            rows.append([self.paragraph(dm.Paragraph(text)) for text in row])

        column_count = max(len(row) for row in rows)
        table = Table(rows, colWidths=[self.width / column_count] * column_count)
        commands = [
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]
        if block.header and block.header_fill:
            commands.append(("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(f"#{block.header_fill}")))
        table.setStyle(TableStyle(commands))
        return table
