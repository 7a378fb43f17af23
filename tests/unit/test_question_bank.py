"""
Unit tests for the built-in question bank.
"""

import pytest

from src.study.question_bank import QUESTION_BANK, Question, bank_keys, lookup, slugify


class TestSlugify:
    @pytest.mark.parametrize(
        "value,slug",
        [
            ("Trees", "trees"),
            ("Linked List", "linked-list"),
            ("  Python ML  ", "python-ml"),
            ("C++ / STL", "c--stl"),
            (None, ""),
        ],
    )
    def test_slugs(self, value, slug):
        assert slugify(value) == slug


class TestLookup:
    def test_topic_key(self):
        key, questions = lookup("DSA", "Linked List")

        assert key == "dsa-linked-list"
        assert len(questions) == 5

    def test_subtopic_preferred(self):
        key, questions = lookup("DSA", "Trees", "Traversals")

        assert key == "dsa-trees-traversals"
        assert [q.question_id for q in questions][0] == "dsa-tree-trav-1"

    def test_unknown_subtopic_falls_back_to_topic(self):
        key, questions = lookup("DSA", "Trees", "Heaps")

        assert key == "dsa-trees"
        assert questions == QUESTION_BANK["dsa-trees"]

    def test_unknown_topic(self):
        key, questions = lookup("DSA", "Tries")

        assert key == "dsa-tries"
        assert questions == ()

    def test_custom_bank(self):
        bank = {"math-algebra": (Question("m-1", "2 + 2?", ("3", "4"), 1, "easy"),)}
        key, questions = lookup("Math", "Algebra", bank=bank)

        assert key == "math-algebra"
        assert questions[0].is_correct(1)

    def test_bank_keys_order(self):
        assert bank_keys("DSA", "Trees", "Traversals") == ["dsa-trees-traversals", "dsa-trees"]


class TestQuestion:
    def test_to_dict_hides_answer(self):
        question = QUESTION_BANK["dsa-arrays"][0]
        data = question.to_dict()

        assert "correct_index" not in data
        assert data["options"] == ["O(1)", "O(n)", "O(log n)", "O(n^2)"]
        assert question.to_dict(include_answer=True)["correct_index"] == 0

    def test_every_answer_index_in_range(self):
        for questions in QUESTION_BANK.values():
            for question in questions:
                assert 0 <= question.correct_index < len(question.options)
