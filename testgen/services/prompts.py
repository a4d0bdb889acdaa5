"""Instruction text sent to the generation service, one per question kind."""

from __future__ import annotations

from textwrap import dedent
from typing import Any, Dict, Optional

from testgen.services.question_kinds import QuestionKind


KIND_FORMATS: Dict[QuestionKind, str] = {
    QuestionKind.single_choice: dedent(
        """\
        Тип питання: одна правильна відповідь.
        Формат кожного питання:
        {
            "question": "текст питання",
            "options": ["a) варіант 1", "b) варіант 2", "c) варіант 3", "d) варіант 4"],
            "correct": "a"
        }"""
    ),
    QuestionKind.multiple_choice: dedent(
        """\
        Тип питання: дві правильні відповіді.
        Формат кожного питання:
        {
            "question": "текст питання",
            "options": ["a) варіант 1", "b) варіант 2", "c) варіант 3", "d) варіант 4", "e) варіант 5"],
            "correct": ["a", "b"]
        }
        ВАЖЛИВО: Перші два варіанти (a та b) ЗАВЖДИ мають бути правильними, решта - неправильними."""
    ),
    QuestionKind.matching: dedent(
        """\
        Тип питання: встановлення відповідності (4 пари).
        Формат кожного питання:
        {
            "question": "Встановіть відповідність:",
            "pairs": [
                {"left": "1. Елемент 1", "right": "A. Відповідність 1"},
                {"left": "2. Елемент 2", "right": "B. Відповідність 2"},
                {"left": "3. Елемент 3", "right": "C. Відповідність 3"},
                {"left": "4. Елемент 4", "right": "D. Відповідність 4"}
            ],
            "correct": {"1": "A", "2": "B", "3": "C", "4": "D"}
        }"""
    ),
    QuestionKind.sorting: dedent(
        """\
        Тип питання: сортування (хронологічний або логічний порядок).
        Формат кожного питання:
        {
            "question": "Розташуйте у правильному порядку:",
            "items": ["Подія 1", "Подія 2", "Подія 3", "Подія 4"],
            "correctOrder": [1, 2, 3, 4]
        }
        items - це елементи у ПЕРЕМІШАНОМУ порядку.
        correctOrder - це правильний порядок (індекси починаються з 1)."""
    ),
}

JSON_ONLY_INSTRUCTION = "Поверни ТІЛЬКИ JSON масив без додаткового тексту."


def context_line(*, grade: str, lesson: Optional[str], topic: str) -> str:
    return f'Клас: {grade}, Урок №{lesson if lesson else "без номера"}, Тема: "{topic}"'


def build_prompt(
    *,
    topic: str,
    source_text: str,
    grade: str,
    lesson: Optional[str],
    kind: Any,
    count: int,
) -> str:
    """Build the instruction for ``count`` items of ``kind`` based only on ``source_text``.

    Raises:
        UnsupportedKind: If ``kind`` is not one of the four question kinds.
    """
    kind = QuestionKind.parse(kind)
    kind_format = KIND_FORMATS[kind]

    base_prompt = (
        f"Ти - вчитель. Твоє завдання - створити {count} тестових питань для учнів "
        "на основі наданого нижче тексту.\n"
        f"{context_line(grade=grade, lesson=lesson, topic=topic)}\n"
        "\n"
        "ТЕКСТ ДЛЯ ОПРАЦЮВАННЯ:\n"
        '"""\n'
        f"{source_text}\n"
        '"""\n'
        "\n"
        "Питання мають бути створені ВИКЛЮЧНО на основі цього тексту.\n"
        "Відповідь ОБОВ'ЯЗКОВО має бути у форматі JSON масиву."
    )
    return f"{base_prompt}\n{kind_format}\n{JSON_ONLY_INSTRUCTION}"
