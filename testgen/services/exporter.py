"""Export boundary: document model -> named, downloadable artifact."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol

from loguru import logger

from testgen.services.document_model import Document
from testgen.services.errors import InvalidRequestError
from testgen.services.html_renderer import HtmlWriter
from testgen.services.pdf_writer import PdfWriter
from testgen.services.variant_generator import AssessmentContext


class DocumentWriter(Protocol):
    extension: str
    media_type: str

    def render(self, document: Document) -> bytes: ...


WRITERS: Dict[str, Callable[[], DocumentWriter]] = {
    "pdf": PdfWriter,
    "html": HtmlWriter,
}


@dataclass(frozen=True)
class ExportedAssessment:
    filename: str
    content: bytes
    media_type: str


def get_writer(output_format: str) -> DocumentWriter:
    try:
        return WRITERS[output_format]()
    except KeyError:
        raise InvalidRequestError(f"Unsupported output format: {output_format}") from None


# Characters that cannot appear in a file name on Windows
UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def _filename_part(value: str) -> str:
    part = re.sub(r"\s+", "_", value.strip())
    return UNSAFE_FILENAME_CHARS.sub("_", part)


def build_filename(context: AssessmentContext, extension: str, timestamp_ms: int) -> str:
    """``Test_<grade>_<topic_with_underscores>_<timestamp>.<extension>``"""
    return f"Test_{_filename_part(context.grade)}_{_filename_part(context.topic)}_{timestamp_ms}.{extension}"


def export_document(
    document: Document,
    context: AssessmentContext,
    *,
    writer: DocumentWriter,
    now: Optional[Callable[[], float]] = None,
) -> ExportedAssessment:
    timestamp_ms = int((now or time.time)() * 1000)
    filename = build_filename(context, writer.extension, timestamp_ms)
    content = writer.render(document)
    logger.info("Assessment exported", filename=filename, bytes=len(content))
    return ExportedAssessment(filename=filename, content=content, media_type=writer.media_type)


def save_assessment(artifact: ExportedAssessment, directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / artifact.filename
    path.write_bytes(artifact.content)
    return path
