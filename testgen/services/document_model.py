"""Writer-independent document model produced by the assembler.

Spacing is expressed in points and indents in millimetres; writers translate
them to their own units.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Literal, Optional, Tuple, Union


Alignment = Literal["left", "center", "right"]
ParagraphRole = Literal["normal", "title", "heading", "label", "option", "footer"]


@dataclass(frozen=True)
class Paragraph:
    text: str
    role: ParagraphRole = "normal"
    bold: bool = False
    italic: bool = False
    align: Alignment = "left"
    indent_mm: float = 0.0
    space_before: float = 0.0
    space_after: float = 0.0


@dataclass(frozen=True)
class Table:
    """Simple grid; the optional header row is shaded with ``header_fill``."""

    rows: List[Tuple[str, ...]]
    header: Optional[Tuple[str, ...]] = None
    header_fill: Optional[str] = None


@dataclass(frozen=True)
class HeaderRow:
    """Borderless two-cell row with a rule underneath."""

    left: List[Paragraph]
    right: List[Paragraph]


@dataclass(frozen=True)
class PageBreak:
    pass


Block = Union[Paragraph, Table, HeaderRow, PageBreak]


@dataclass
class DocumentSection:
    blocks: List[Block] = field(default_factory=list)
    # Page numbering restarts at this value where the section's content begins.
    page_number_start: Optional[int] = None


@dataclass(frozen=True)
class DocumentMetadata:
    title: str
    creator: str
    description: str


@dataclass(frozen=True)
class DocumentStyle:
    font: str
    bold_font: str
    font_size: float
    line_spacing: float
    margins_mm: Tuple[float, float, float, float]  # top, right, bottom, left
    font_path: Optional[Path] = None
    bold_font_path: Optional[Path] = None


@dataclass
class Document:
    metadata: DocumentMetadata
    style: DocumentStyle
    sections: List[DocumentSection] = field(default_factory=list)

    def text_lines(self) -> Iterator[str]:
        """Yield every piece of visible text in reading order."""
        for section in self.sections:
            for block in section.blocks:
                yield from block_text(block)


def block_text(block: Block) -> Iterator[str]:
    if isinstance(block, Paragraph):
        yield block.text
    elif isinstance(block, HeaderRow):
        for paragraph in (*block.left, *block.right):
            yield paragraph.text
    elif isinstance(block, Table):
        if block.header:
            yield from block.header
        for row in block.rows:
            yield from row
