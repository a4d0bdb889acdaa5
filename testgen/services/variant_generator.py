"""Generation of one assessment variant: one service round trip per requested kind."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from loguru import logger

from testgen.services.errors import InvalidRequestError
from testgen.services.prompts import build_prompt
from testgen.services.question_kinds import KIND_ORDER, QuestionItem, QuestionKind, validate_items
from testgen.services.reply_parser import parse_reply


ProgressCallback = Callable[[str, str], None]

VariantBundle = Dict[QuestionKind, List[QuestionItem]]

KIND_PROGRESS: Dict[QuestionKind, str] = {
    QuestionKind.single_choice: "Генерація питань з однією відповіддю...",
    QuestionKind.multiple_choice: "Генерація питань з двома відповідями...",
    QuestionKind.matching: "Генерація питань на відповідність...",
    QuestionKind.sorting: "Генерація питань на сортування...",
}


class GenerationClient(Protocol):
    def generate(self, instruction_text: str) -> str: ...


@dataclass(frozen=True)
class AssessmentContext:
    """Shared by both variants and by the answer keys."""

    topic: str
    grade: str
    lesson: Optional[str]
    source_text: str


def no_progress(stage: str, message: str) -> None:
    return None


def normalize_counts(kind_counts: Mapping[Any, int]) -> Dict[QuestionKind, int]:
    counts: Dict[QuestionKind, int] = {}
    for raw_kind, count in kind_counts.items():
        kind = QuestionKind.parse(raw_kind)
        if count is None:
            count = 0
        if count < 0:
            raise InvalidRequestError(f"Question count for {kind.value} must not be negative")
        counts[kind] = counts.get(kind, 0) + int(count)
    return counts


def generate_questions(
    context: AssessmentContext,
    kind: Any,
    count: int,
    *,
    client: GenerationClient,
) -> List[QuestionItem]:
    """Build the instruction, call the service, parse and validate the reply."""
    kind = QuestionKind.parse(kind)
    if count == 0:
        return []

    prompt = build_prompt(
        topic=context.topic,
        source_text=context.source_text,
        grade=context.grade,
        lesson=context.lesson,
        kind=kind,
        count=count,
    )
    logger.info("Requesting questions", kind=kind.value, count=count)
    reply_text = client.generate(prompt)
    items = validate_items(kind, parse_reply(reply_text))
    if len(items) != count:
        logger.warning("Service returned a different number of items", kind=kind.value, requested=count, received=len(items))
    return items


def generate_variant(
    context: AssessmentContext,
    kind_counts: Mapping[Any, int],
    *,
    client: GenerationClient,
    progress: ProgressCallback = no_progress,
) -> VariantBundle:
    """Generate every kind with a positive count, in the fixed kind order.

    Kinds with a zero count get no request and no entry in the bundle. Errors
    propagate unchanged; there are no partial bundles.
    """
    counts = normalize_counts(kind_counts)
    bundle: VariantBundle = {}
    for kind in KIND_ORDER:
        count = counts.get(kind, 0)
        if count <= 0:
            continue
        progress("questions", KIND_PROGRESS[kind])
        bundle[kind] = generate_questions(context, kind, count, client=client)
    return bundle
