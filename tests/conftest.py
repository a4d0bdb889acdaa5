"""Shared sample records and a scripted generation client."""

import json
from typing import Dict, List

import pytest

from testgen.services.pdf_writer import find_system_font
from testgen.services.prompts import KIND_FORMATS
from testgen.services.question_kinds import QuestionKind
from testgen.services.variant_generator import AssessmentContext


SINGLE_CHOICE_RECORD = {
    "question": "У якому році почалася Національно-визвольна війна?",
    "options": ["a) 1648", "b) 1654", "c) 1709", "d) 1775"],
    "correct": "a",
}

MULTIPLE_CHOICE_RECORD = {
    "question": "Які гетьмани правили у XVII столітті?",
    "options": ["a) Богдан Хмельницький", "b) Іван Виговський", "c) Іван Мазепа", "d) Павло Скоропадський", "e) Кирило Розумовський"],
    "correct": ["a", "b"],
}

MATCHING_RECORD = {
    "question": "Встановіть відповідність між подією та роком",
    "pairs": [
        {"left": "1. Корсунська битва", "right": "A. 1648"},
        {"left": "2. Переяславська рада", "right": "B. 1654"},
        {"left": "3. Полтавська битва", "right": "C. 1709"},
        {"left": "4. Ліквідація Січі", "right": "D. 1775"},
    ],
    "correct": {"1": "A", "2": "B", "3": "C", "4": "D"},
}

SORTING_RECORD = {
    "question": "Розташуйте події у хронологічному порядку",
    "items": ["Переяславська рада", "Жовтоводська битва", "Полтавська битва", "Зборівський договір"],
    "correctOrder": [2, 4, 1, 3],
}

RECORDS: Dict[QuestionKind, dict] = {
    QuestionKind.single_choice: SINGLE_CHOICE_RECORD,
    QuestionKind.multiple_choice: MULTIPLE_CHOICE_RECORD,
    QuestionKind.matching: MATCHING_RECORD,
    QuestionKind.sorting: SORTING_RECORD,
}


def kind_of_prompt(prompt: str) -> QuestionKind:
    for kind, kind_format in KIND_FORMATS.items():
        if kind_format in prompt:
            return kind
    raise AssertionError("prompt carries no known kind format")


def reply_for(kind: QuestionKind, count: int) -> str:
    return "```json\n" + json.dumps([RECORDS[kind]] * count, ensure_ascii=False) + "\n```"


class ScriptedClient:
    """Answers every prompt with ``count`` copies of the sample record for its kind."""

    def __init__(self) -> None:
        self.prompts: List[str] = []

    def generate(self, instruction_text: str) -> str:
        self.prompts.append(instruction_text)
        kind = kind_of_prompt(instruction_text)
        count = int(instruction_text.split("створити ", 1)[1].split(" ", 1)[0])
        return reply_for(kind, count)

    @property
    def kinds(self) -> List[QuestionKind]:
        return [kind_of_prompt(prompt) for prompt in self.prompts]


@pytest.fixture
def context() -> AssessmentContext:
    return AssessmentContext(
        topic="Козацька доба",
        grade="8-А",
        lesson="12",
        source_text="Національно-визвольна війна під проводом Богдана Хмельницького почалася 1648 року.",
    )


@pytest.fixture
def scripted_client() -> ScriptedClient:
    return ScriptedClient()


@pytest.fixture
def cyrillic_font():
    """A system TTF with Cyrillic glyphs; PDF tests with Ukrainian text need one."""
    found = find_system_font()
    if found is None:
        pytest.skip("no Cyrillic-capable TTF installed (e.g. fonts-dejavu-core)")
    return found
