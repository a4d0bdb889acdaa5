"""Composition of two variants and their answer keys into one document model."""

from __future__ import annotations

from typing import List, Tuple

from testgen.config.settings import Settings, settings
from testgen.services.document_model import (
    Block,
    Document,
    DocumentMetadata,
    DocumentSection,
    DocumentStyle,
    HeaderRow,
    PageBreak,
    Paragraph,
)
from testgen.services.question_kinds import KIND_ORDER, QuestionItem, QuestionKind
from testgen.services.variant_generator import AssessmentContext, VariantBundle


TITLE = "ТЕСТОВА РОБОТА"
DATE_BLANK = "Дата: ________________"


def populated_kinds(bundle: VariantBundle) -> List[Tuple[QuestionKind, List[QuestionItem]]]:
    """Kinds with at least one item, in the fixed kind order."""
    return [(kind, bundle[kind]) for kind in KIND_ORDER if bundle.get(kind)]


def header_row(context: AssessmentContext, variant_number: int) -> HeaderRow:
    return HeaderRow(
        left=[
            Paragraph(f"Клас: {context.grade}", bold=True),
            Paragraph(f"Урок №: {context.lesson or ''}", bold=True),
        ],
        right=[
            Paragraph(f"Варіант: {variant_number}", bold=True, align="right"),
            Paragraph(DATE_BLANK, align="right"),
        ],
    )


def _kind_label(kind: QuestionKind, first: bool, space_before_rest: float) -> Paragraph:
    return Paragraph(
        f"{kind.label}:",
        role="label",
        bold=True,
        space_before=10 if first else space_before_rest,
        space_after=10,
    )


def question_blocks(bundle: VariantBundle) -> List[Block]:
    """Question sections; numbering runs on across kinds."""
    blocks: List[Block] = []
    number = 1
    for index, (kind, items) in enumerate(populated_kinds(bundle)):
        blocks.append(_kind_label(kind, index == 0, 20))
        for item in items:
            blocks.extend(item.render(number))
            number += 1
    return blocks


def answer_blocks(bundle: VariantBundle) -> List[Block]:
    """Answer key mirroring ``question_blocks``: same kind order, same numbers."""
    blocks: List[Block] = []
    number = 1
    for index, (kind, items) in enumerate(populated_kinds(bundle)):
        blocks.append(_kind_label(kind, index == 0, 15))
        for item in items:
            blocks.append(item.answer(number))
            number += 1
    return blocks


def variant_section(
    bundle: VariantBundle,
    context: AssessmentContext,
    variant_number: int,
    *,
    config: Settings = settings,
) -> DocumentSection:
    blocks: List[Block] = []
    page_number_start = None
    if variant_number > 1:
        blocks.append(PageBreak())
        page_number_start = 1

    blocks.extend(
        [
            header_row(context, variant_number),
            Paragraph("", space_after=10),
            Paragraph(TITLE, role="title", align="center", space_after=5),
            Paragraph(f"Тема: {context.topic}", bold=True, align="center", space_after=20),
        ]
    )
    blocks.extend(question_blocks(bundle))

    blocks.append(PageBreak())
    blocks.append(Paragraph(f"ВІДПОВІДІ - Варіант {variant_number}", role="heading", align="center", space_after=20))
    blocks.extend(answer_blocks(bundle))

    blocks.append(Paragraph("", space_before=30))
    blocks.append(
        Paragraph(
            f"Створено: {config.app_author} | {config.app_name}",
            role="footer",
            italic=True,
            align="center",
            space_before=20,
        )
    )
    return DocumentSection(blocks=blocks, page_number_start=page_number_start)


def document_style(config: Settings = settings) -> DocumentStyle:
    return DocumentStyle(
        font=config.document_font,
        bold_font=config.document_bold_font,
        font_size=config.document_font_size,
        line_spacing=config.document_line_spacing,
        margins_mm=(config.margin_top_mm, config.margin_right_mm, config.margin_bottom_mm, config.margin_left_mm),
        font_path=config.document_font_path,
        bold_font_path=config.document_bold_font_path,
    )


def assemble(
    variant1: VariantBundle,
    variant2: VariantBundle,
    context: AssessmentContext,
    *,
    config: Settings = settings,
) -> Document:
    """Build the two-variant document. Variant 2 starts on a new page numbered 1."""
    metadata = DocumentMetadata(
        title=f"Тест: {context.topic}",
        creator=config.app_author,
        description=f"Test generated by {config.app_name}",
    )
    return Document(
        metadata=metadata,
        style=document_style(config),
        sections=[
            variant_section(variant1, context, 1, config=config),
            variant_section(variant2, context, 2, config=config),
        ],
    )
