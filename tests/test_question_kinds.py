"""Tests for item schemas and their render / answer-key rules."""

import copy

import pytest

from testgen.services.document_model import Paragraph, Table
from testgen.services.errors import ItemValidationError, UnsupportedKind
from testgen.services.question_kinds import (
    ITEM_MODELS,
    KIND_ORDER,
    MatchingItem,
    MultipleChoiceItem,
    QuestionKind,
    SingleChoiceItem,
    SortingItem,
    validate_items,
)

from conftest import MATCHING_RECORD, MULTIPLE_CHOICE_RECORD, SINGLE_CHOICE_RECORD, SORTING_RECORD


def _record(base, **changes):
    record = copy.deepcopy(base)
    record.update(changes)
    return record


class TestQuestionKind:
    def test_fixed_order(self):
        assert [kind.value for kind in KIND_ORDER] == ["singleChoice", "multipleChoice", "matching", "sorting"]

    def test_parse_value_and_name(self):
        assert QuestionKind.parse("singleChoice") is QuestionKind.single_choice
        assert QuestionKind.parse("sorting") is QuestionKind.sorting
        assert QuestionKind.parse("multiple_choice") is QuestionKind.multiple_choice

    def test_parse_unknown(self):
        with pytest.raises(UnsupportedKind):
            QuestionKind.parse("trueFalse")

    def test_labels(self):
        assert QuestionKind.matching.label == "Встановлення відповідності"
        assert QuestionKind.sorting.label == "Сортування"


class TestSingleChoiceItem:
    def test_valid(self):
        item = SingleChoiceItem.model_validate(SINGLE_CHOICE_RECORD)
        assert item.prompt.startswith("У якому році")
        assert item.correct_label == "a"
        assert item.options[0] == "a) 1648"

    def test_render_and_answer(self):
        item = SingleChoiceItem.model_validate(SINGLE_CHOICE_RECORD)
        blocks = item.render(3)
        assert blocks[0].text == "3. У якому році почалася Національно-визвольна війна?"
        assert [block.text for block in blocks[1:]] == ["a) 1648", "b) 1654", "c) 1709", "d) 1775"]
        assert all(block.indent_mm > 0 for block in blocks[1:])
        assert item.answer(3).text == "3. Відповідь: a"

    def test_unlabelled_options_get_labels(self):
        item = SingleChoiceItem.model_validate(_record(SINGLE_CHOICE_RECORD, options=["1648", "1654", "1709", "1775"]))
        assert item.options == ["a) 1648", "b) 1654", "c) 1709", "d) 1775"]

    def test_initials_are_not_taken_for_labels(self):
        options = ["Б. Хмельницький", "І. Мазепа", "П. Орлик", "К. Розумовський"]
        item = SingleChoiceItem.model_validate(_record(SINGLE_CHOICE_RECORD, options=options))
        assert item.options == ["a) Б. Хмельницький", "b) І. Мазепа", "c) П. Орлик", "d) К. Розумовський"]

    def test_lookalike_initial_with_period_is_kept(self):
        options = ["a) Б. Хмельницький", "В. Чорновіл", "С. Петлюра", "d) П. Орлик"]
        item = SingleChoiceItem.model_validate(_record(SINGLE_CHOICE_RECORD, options=options))
        assert item.options[1] == "b) В. Чорновіл"
        assert item.options[2] == "c) С. Петлюра"

    def test_cyrillic_lookalike_option_label_is_replaced(self):
        options = ["а) 1648", "b. 1654", "с) 1709", "D: 1775"]
        item = SingleChoiceItem.model_validate(_record(SINGLE_CHOICE_RECORD, options=options))
        assert item.options == ["a) 1648", "b) 1654", "c) 1709", "d) 1775"]

    def test_label_of_another_position_is_kept(self):
        options = ["b) 1654", "a) 1648", "c) 1709", "d) 1775"]
        item = SingleChoiceItem.model_validate(_record(SINGLE_CHOICE_RECORD, options=options))
        assert item.options[0] == "a) b) 1654"

    def test_cyrillic_lookalike_label(self):
        item = SingleChoiceItem.model_validate(_record(SINGLE_CHOICE_RECORD, correct="с"))
        assert item.correct_label == "c"

    def test_wrong_option_count(self):
        with pytest.raises(ValueError):
            SingleChoiceItem.model_validate(_record(SINGLE_CHOICE_RECORD, options=["a) 1", "b) 2", "c) 3"]))

    def test_unknown_label(self):
        with pytest.raises(ValueError):
            SingleChoiceItem.model_validate(_record(SINGLE_CHOICE_RECORD, correct="e"))


class TestMultipleChoiceItem:
    def test_correct_labels_are_first_two_options(self):
        item = MultipleChoiceItem.model_validate(MULTIPLE_CHOICE_RECORD)
        assert item.correct_labels == ("a", "b")
        assert len(item.options) == 5

    def test_answer(self):
        item = MultipleChoiceItem.model_validate(MULTIPLE_CHOICE_RECORD)
        assert item.answer(7).text == "7. Відповіді: a, b"

    def test_comma_separated_string(self):
        item = MultipleChoiceItem.model_validate(_record(MULTIPLE_CHOICE_RECORD, correct="b, a"))
        assert item.correct_labels == ("a", "b")

    def test_other_labels_rejected(self):
        with pytest.raises(ValueError):
            MultipleChoiceItem.model_validate(_record(MULTIPLE_CHOICE_RECORD, correct=["a", "c"]))

    def test_single_label_rejected(self):
        with pytest.raises(ValueError):
            MultipleChoiceItem.model_validate(_record(MULTIPLE_CHOICE_RECORD, correct=["a"]))


class TestMatchingItem:
    def test_render_table(self):
        item = MatchingItem.model_validate(MATCHING_RECORD)
        question, table, spacer = item.render(1)
        assert question.text == "1. Встановіть відповідність між подією та роком"
        assert isinstance(table, Table)
        assert table.header == ("Елемент", "Відповідність")
        assert table.rows[0] == ("1. Корсунська битва", "A. 1648")
        assert len(table.rows) == 4
        assert isinstance(spacer, Paragraph) and spacer.text == ""

    def test_answer(self):
        item = MatchingItem.model_validate(_record(MATCHING_RECORD, correct={"1": "B", "2": "A", "3": "D", "4": "C"}))
        assert item.answer(2).text == "2. Відповідність: 1-B, 2-A, 3-D, 4-C"

    def test_answer_pairs_in_left_order(self):
        item = MatchingItem.model_validate(_record(MATCHING_RECORD, correct={"4": "D", "1": "a", "3": "C", "2": "В"}))
        assert item.answer_pairs() == [("1", "A"), ("2", "B"), ("3", "C"), ("4", "D")]

    def test_three_pairs_rejected(self):
        with pytest.raises(ValueError):
            MatchingItem.model_validate(_record(MATCHING_RECORD, pairs=MATCHING_RECORD["pairs"][:3]))

    def test_repeated_right_label_rejected(self):
        with pytest.raises(ValueError):
            MatchingItem.model_validate(_record(MATCHING_RECORD, correct={"1": "A", "2": "A", "3": "C", "4": "D"}))


class TestSortingItem:
    def test_correct_order_reconstructs_true_order(self):
        item = SortingItem.model_validate(
            _record(SORTING_RECORD, items=["Третя", "Перша", "Четверта", "Друга"], correctOrder=[2, 4, 1, 3])
        )
        assert item.true_order() == ["Перша", "Друга", "Третя", "Четверта"]

    def test_order_3142(self):
        item = SortingItem.model_validate(_record(SORTING_RECORD, items=["B", "D", "A", "C"], correctOrder=[3, 1, 4, 2]))
        assert item.true_order() == ["A", "B", "C", "D"]
        assert item.answer(4).text == "4. Правильний порядок: 3, 1, 4, 2"

    def test_render_numbers_items(self):
        item = SortingItem.model_validate(SORTING_RECORD)
        blocks = item.render(1)
        assert [block.text for block in blocks[1:]] == [
            "1) Переяславська рада",
            "2) Жовтоводська битва",
            "3) Полтавська битва",
            "4) Зборівський договір",
        ]

    @pytest.mark.parametrize("order", [[1, 2, 3], [1, 1, 2, 3], [0, 1, 2, 3], [1, 2, 3, 5]])
    def test_not_a_permutation(self, order):
        with pytest.raises(ValueError):
            SortingItem.model_validate(_record(SORTING_RECORD, correctOrder=order))


class TestItemModels:
    @pytest.mark.parametrize("model", list(ITEM_MODELS.values()))
    def test_each_model_defines_its_own_rules(self, model):
        assert "render" in vars(model)
        assert "answer" in vars(model)

    def test_shared_base_has_no_placeholder_rules(self):
        base = SingleChoiceItem.__mro__[1]
        assert "render" not in vars(base)
        assert "answer" not in vars(base)


class TestValidateItems:
    """Tests for validate_items function."""

    def test_valid_records(self):
        items = validate_items("sorting", [SORTING_RECORD, SORTING_RECORD])
        assert len(items) == 2
        assert all(isinstance(item, SortingItem) for item in items)

    def test_not_a_list(self):
        with pytest.raises(ItemValidationError) as exc_info:
            validate_items(QuestionKind.matching, {"question": "Q"})
        assert "expected a JSON array" in str(exc_info.value)

    def test_not_an_object(self):
        with pytest.raises(ItemValidationError) as exc_info:
            validate_items(QuestionKind.single_choice, ["текст"])
        assert "item 1 is not a JSON object" in str(exc_info.value)

    def test_schema_mismatch_names_item(self):
        broken = _record(SINGLE_CHOICE_RECORD)
        del broken["correct"]
        with pytest.raises(ItemValidationError) as exc_info:
            validate_items(QuestionKind.single_choice, [SINGLE_CHOICE_RECORD, broken])
        assert "item 2" in str(exc_info.value)
        assert exc_info.value.__cause__ is not None

    def test_unknown_kind(self):
        with pytest.raises(UnsupportedKind):
            validate_items("essay", [])
