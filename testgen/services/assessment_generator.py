"""End-to-end run: two independent variants, assembly, and export."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from loguru import logger

from testgen.config.settings import Settings, settings
from testgen.services.assembler import assemble
from testgen.services.document_model import Document
from testgen.services.errors import AssessmentGenerationError, InvalidRequestError
from testgen.services.exporter import DocumentWriter, ExportedAssessment, export_document, get_writer
from testgen.services.gemini_client import GeminiClient
from testgen.services.variant_generator import (
    AssessmentContext,
    GenerationClient,
    ProgressCallback,
    VariantBundle,
    generate_variant,
    no_progress,
    normalize_counts,
)


EMPTY_SOURCE_MESSAGE = "Будь ласка, введіть текст для генерації"
NO_QUESTIONS_MESSAGE = "Будь ласка, оберіть хоча б один тип питання"


@dataclass
class AssessmentResult:
    """Details of a generated assessment."""

    artifact: ExportedAssessment
    document: Document
    variant1: VariantBundle
    variant2: VariantBundle
    created_at: datetime = field(default_factory=datetime.utcnow)


def generate_assessment(
    *,
    topic: str,
    source_text: str,
    grade: str,
    lesson: Optional[str] = None,
    kind_counts: Mapping[Any, int],
    output_format: str = "pdf",
    client: Optional[GenerationClient] = None,
    writer: Optional[DocumentWriter] = None,
    progress: Optional[ProgressCallback] = None,
    config: Settings = settings,
) -> AssessmentResult:
    """Generate both variants, assemble them with answer keys, and export the document.

    The run is sequential and fail-fast: the first error raised by any step
    propagates unchanged and no document is produced.
    """
    progress = progress or no_progress
    if not source_text or not source_text.strip():
        raise InvalidRequestError(EMPTY_SOURCE_MESSAGE)
    counts = normalize_counts(kind_counts)
    if sum(counts.values()) == 0:
        raise InvalidRequestError(NO_QUESTIONS_MESSAGE)

    context = AssessmentContext(
        topic=topic.strip(),
        grade=grade.strip(),
        lesson=(lesson or "").strip() or None,
        source_text=source_text,
    )
    llm_client = client or GeminiClient(config)
    document_writer = writer or get_writer(output_format)

    logger.info(
        "Generating assessment",
        topic=context.topic,
        grade=context.grade,
        counts={kind.value: count for kind, count in counts.items()},
    )
    try:
        progress("variant", "Генерація варіанту 1...")
        variant1 = generate_variant(context, counts, client=llm_client, progress=progress)

        progress("variant", "Генерація варіанту 2...")
        variant2 = generate_variant(context, counts, client=llm_client, progress=progress)

        progress("document", "Створення документу...")
        document = assemble(variant1, variant2, context, config=config)
        artifact = export_document(document, context, writer=document_writer)
    except AssessmentGenerationError as exc:
        logger.error(f"Assessment generation failed: {exc}")
        raise

    progress("done", "Готово! Завантаження файлу...")
    return AssessmentResult(artifact=artifact, document=document, variant1=variant1, variant2=variant2)
