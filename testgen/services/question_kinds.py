"""Question kinds, their item schemas, and the render / answer-key rules.

Each kind has one pydantic model. Records coming back from the generation
service use the wire names (``question``, ``correct``, ``correctOrder``) while
the models expose descriptive attribute names. Every model renders its question
form and its answer-key form from the same stored fields.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, ClassVar, Dict, List, Literal, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from testgen.services.document_model import Block, Paragraph, Table
from testgen.services.errors import ItemValidationError, UnsupportedKind


class QuestionKind(str, Enum):
    single_choice = "singleChoice"
    multiple_choice = "multipleChoice"
    matching = "matching"
    sorting = "sorting"

    @classmethod
    def parse(cls, value: Any) -> "QuestionKind":
        """Accept the wire value (``singleChoice``) or the member name (``single_choice``)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            pass
        if isinstance(value, str) and value in cls.__members__:
            return cls[value]
        raise UnsupportedKind(value)

    @property
    def label(self) -> str:
        return KIND_LABELS[self]


KIND_ORDER: Tuple[QuestionKind, ...] = (
    QuestionKind.single_choice,
    QuestionKind.multiple_choice,
    QuestionKind.matching,
    QuestionKind.sorting,
)

KIND_LABELS: Dict[QuestionKind, str] = {
    QuestionKind.single_choice: "Одна правильна відповідь",
    QuestionKind.multiple_choice: "Дві правильні відповіді",
    QuestionKind.matching: "Встановлення відповідності",
    QuestionKind.sorting: "Сортування",
}

OPTION_LABELS = "abcde"
MATCHING_LEFT_LABELS = ("1", "2", "3", "4")
MATCHING_RIGHT_LABELS = ("A", "B", "C", "D")

OPTION_INDENT_MM = 12.7

_OPTION_PREFIX = re.compile(r"^\s*([A-Za-zА-Яа-яЄєІіЇїҐґ])\s*([\)\.:])\s*")
_LABEL_VALUE = re.compile(r"^([a-z])(?:\s*[\)\.:].*)?$", re.DOTALL)

# Cyrillic letters that look identical to Latin labels
_LATIN_LOOKALIKES = str.maketrans("аесАВСЕ", "aecABCE")


def _clean_label(value: Any, allowed: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"label must be a string, got {type(value).__name__}")
    match = _LABEL_VALUE.match(value.strip().translate(_LATIN_LOOKALIKES).lower())
    if not match or match.group(1) not in allowed:
        raise ValueError(f"label {value!r} is not one of {', '.join(allowed)}")
    return match.group(1)


def _strip_label(option: str, label: str) -> str:
    """Drop a leading label only when it is the label expected at this position.

    Cyrillic lookalikes count only with a ``)`` separator, so initials such as
    ``В. Чорновіл`` stay intact.
    """
    match = _OPTION_PREFIX.match(option)
    if not match:
        return option
    letter, separator = match.groups()
    if letter.lower() == label or (separator == ")" and letter.translate(_LATIN_LOOKALIKES).lower() == label):
        return option[match.end() :].strip()
    return option


def _labelled_options(options: List[str], count: int) -> List[str]:
    """Check the option count and make every option start with its positional label."""
    if len(options) != count:
        raise ValueError(f"expected exactly {count} options, got {len(options)}")
    labelled = []
    for label, option in zip(OPTION_LABELS, options):
        body = _strip_label(option.strip(), label)
        if not body:
            raise ValueError(f"option {label} is empty")
        labelled.append(f"{label}) {body}")
    return labelled


def _question_paragraph(number: int, prompt: str) -> Paragraph:
    return Paragraph(f"{number}. {prompt}", space_before=10, space_after=5)


def _option_paragraph(text: str) -> Paragraph:
    return Paragraph(text, role="option", indent_mm=OPTION_INDENT_MM, space_after=2.5)


def _answer_paragraph(text: str) -> Paragraph:
    return Paragraph(text, space_after=5)


class _QuestionItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    prompt: str = Field(alias="question")

    @field_validator("prompt")
    @classmethod
    def prompt_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("question text is empty")
        return v


class SingleChoiceItem(_QuestionItem):
    kind: Literal[QuestionKind.single_choice] = QuestionKind.single_choice
    options: List[str]
    correct_label: str = Field(alias="correct")

    option_count: ClassVar[int] = 4

    @field_validator("options")
    @classmethod
    def four_options(cls, v: List[str]) -> List[str]:
        return _labelled_options(v, cls.option_count)

    @field_validator("correct_label", mode="before")
    @classmethod
    def known_label(cls, v: Any) -> str:
        return _clean_label(v, OPTION_LABELS[: cls.option_count])

    def render(self, number: int) -> List[Block]:
        return [_question_paragraph(number, self.prompt), *(_option_paragraph(o) for o in self.options)]

    def answer(self, number: int) -> Paragraph:
        return _answer_paragraph(f"{number}. Відповідь: {self.correct_label}")


class MultipleChoiceItem(_QuestionItem):
    """Five options, the first two of which are the correct ones."""

    kind: Literal[QuestionKind.multiple_choice] = QuestionKind.multiple_choice
    options: List[str]
    correct_labels: Tuple[str, str] = Field(alias="correct")

    option_count: ClassVar[int] = 5

    @field_validator("options")
    @classmethod
    def five_options(cls, v: List[str]) -> List[str]:
        return _labelled_options(v, cls.option_count)

    @field_validator("correct_labels", mode="before")
    @classmethod
    def two_labels(cls, v: Any) -> Tuple[str, ...]:
        if isinstance(v, str):
            v = [part for part in re.split(r"[,;\s]+", v) if part]
        if not isinstance(v, (list, tuple)):
            raise ValueError("correct answers must be a list of two labels")
        labels = {_clean_label(item, OPTION_LABELS[: cls.option_count]) for item in v}
        if len(labels) != 2 or len(v) != 2:
            raise ValueError(f"expected exactly 2 distinct correct labels, got {list(v)}")
        return tuple(sorted(labels, key=OPTION_LABELS.index))

    @field_validator("correct_labels")
    @classmethod
    def first_two_positions(cls, v: Tuple[str, str]) -> Tuple[str, str]:
        if v != tuple(OPTION_LABELS[:2]):
            raise ValueError(f"correct answers must be the first two options (a, b), got {', '.join(v)}")
        return v

    def render(self, number: int) -> List[Block]:
        return [_question_paragraph(number, self.prompt), *(_option_paragraph(o) for o in self.options)]

    def answer(self, number: int) -> Paragraph:
        return _answer_paragraph(f"{number}. Відповіді: {', '.join(self.correct_labels)}")


class MatchingPair(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    left: str = Field(min_length=1)
    right: str = Field(min_length=1)


class MatchingItem(_QuestionItem):
    kind: Literal[QuestionKind.matching] = QuestionKind.matching
    pairs: List[MatchingPair]
    correct_map: Dict[str, str] = Field(alias="correct")

    pair_count: ClassVar[int] = 4

    @field_validator("pairs")
    @classmethod
    def four_pairs(cls, v: List[MatchingPair]) -> List[MatchingPair]:
        if len(v) != cls.pair_count:
            raise ValueError(f"expected exactly {cls.pair_count} pairs, got {len(v)}")
        return v

    @field_validator("correct_map", mode="before")
    @classmethod
    def clean_map(cls, v: Any) -> Dict[str, str]:
        if not isinstance(v, dict):
            raise ValueError("correct answers must map left labels to right labels")
        return {
            str(key).strip().rstrip(".)"): str(value).strip().rstrip(".)").translate(_LATIN_LOOKALIKES).upper()
            for key, value in v.items()
        }

    @model_validator(mode="after")
    def covers_every_pair(self) -> "MatchingItem":
        if set(self.correct_map) != set(MATCHING_LEFT_LABELS):
            raise ValueError(f"correct answers must cover left labels 1-4, got {sorted(self.correct_map)}")
        if sorted(self.correct_map.values()) != list(MATCHING_RIGHT_LABELS):
            raise ValueError(
                f"correct answers must use each right label A-D once, got {sorted(self.correct_map.values())}"
            )
        return self

    def answer_pairs(self) -> List[Tuple[str, str]]:
        return [(left, self.correct_map[left]) for left in MATCHING_LEFT_LABELS]

    def render(self, number: int) -> List[Block]:
        table = Table(
            rows=[(pair.left, pair.right) for pair in self.pairs],
            header=("Елемент", "Відповідність"),
            header_fill="E5E7EB",
        )
        return [_question_paragraph(number, self.prompt), table, Paragraph("", space_after=10)]

    def answer(self, number: int) -> Paragraph:
        text = ", ".join(f"{left}-{right}" for left, right in self.answer_pairs())
        return _answer_paragraph(f"{number}. Відповідність: {text}")


class SortingItem(_QuestionItem):
    """``items`` are shuffled; ``correct_order`` lists 1-based positions in true order."""

    kind: Literal[QuestionKind.sorting] = QuestionKind.sorting
    items: List[str]
    correct_order: List[int] = Field(alias="correctOrder")

    item_count: ClassVar[int] = 4

    @field_validator("items")
    @classmethod
    def four_items(cls, v: List[str]) -> List[str]:
        if len(v) != cls.item_count:
            raise ValueError(f"expected exactly {cls.item_count} items, got {len(v)}")
        if any(not item.strip() for item in v):
            raise ValueError("sorting items must not be empty")
        return [item.strip() for item in v]

    @field_validator("correct_order")
    @classmethod
    def permutation(cls, v: List[int]) -> List[int]:
        if sorted(v) != list(range(1, cls.item_count + 1)):
            raise ValueError(f"correct order must be a permutation of 1-{cls.item_count}, got {v}")
        return v

    def true_order(self) -> List[str]:
        return [self.items[position - 1] for position in self.correct_order]

    def render(self, number: int) -> List[Block]:
        return [
            _question_paragraph(number, self.prompt),
            *(_option_paragraph(f"{i}) {item}") for i, item in enumerate(self.items, start=1)),
        ]

    def answer(self, number: int) -> Paragraph:
        return _answer_paragraph(f"{number}. Правильний порядок: {', '.join(str(p) for p in self.correct_order)}")


QuestionItem = Union[SingleChoiceItem, MultipleChoiceItem, MatchingItem, SortingItem]

ITEM_MODELS: Dict[QuestionKind, Type[_QuestionItem]] = {
    QuestionKind.single_choice: SingleChoiceItem,
    QuestionKind.multiple_choice: MultipleChoiceItem,
    QuestionKind.matching: MatchingItem,
    QuestionKind.sorting: SortingItem,
}

# A new kind without a schema or render rules must fail at import, not at render time.
if set(ITEM_MODELS) != set(QuestionKind) or set(KIND_LABELS) != set(QuestionKind):
    raise RuntimeError("every QuestionKind needs an item model and a label")
if not all(callable(getattr(model, "render", None)) and callable(getattr(model, "answer", None)) for model in ITEM_MODELS.values()):
    raise RuntimeError("every item model needs render and answer")


def validate_items(kind: Any, records: Any) -> List[QuestionItem]:
    """Validate parsed reply records against the schema of ``kind``."""
    kind = QuestionKind.parse(kind)
    if not isinstance(records, list):
        raise ItemValidationError(f"{kind.label}: expected a JSON array of items, got {type(records).__name__}")

    model = ITEM_MODELS[kind]
    items: List[QuestionItem] = []
    for index, record in enumerate(records, start=1):
        if not isinstance(record, dict):
            raise ItemValidationError(f"{kind.label}: item {index} is not a JSON object")
        try:
            items.append(model.model_validate(record))
        except ValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first["loc"]) or "item"
            raise ItemValidationError(
                f"{kind.label}: item {index} does not match the expected schema ({location}: {first['msg']})"
            ) from exc
    return items
