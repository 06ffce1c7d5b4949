# Area: Match Tests
"""Tests for the weighted question generator and the Question model."""

import random
from collections import Counter

import pytest
from pydantic import ValidationError

from glitch_duel._match import question_generator
from glitch_duel._match.constants import HARD_TABLES
from glitch_duel._match.question import Question
from glitch_duel._match.question_generator import generate_question, weighted_rand_int
from glitch_duel.errors import GenerationInvariantError


class TestGeneratedQuestions:
    """Invariants every generated question must satisfy."""

    @pytest.fixture
    def questions(self):
        rng = random.Random(7)
        return [generate_question(rng) for _ in range(500)]

    def test_six_distinct_options_with_answer_once(self, questions):
        for q in questions:
            assert len(q.options) == 6
            assert len(set(q.options)) == 6
            assert q.options.count(q.answer) == 1

    def test_options_are_positive(self, questions):
        for q in questions:
            assert all(value > 0 for value in q.options)

    def test_arithmetic_is_right(self, questions):
        for q in questions:
            if q.kind == "multiplication":
                assert q.a * q.b == q.answer
            else:
                assert q.a == q.b * q.answer

    def test_division_has_no_remainder(self, questions):
        divisions = [q for q in questions if q.kind == "division"]
        assert divisions
        for q in divisions:
            assert q.a % q.b == 0

    def test_operand_ranges(self, questions):
        for q in questions:
            if q.kind == "multiplication":
                assert 2 <= q.a <= 10
                assert 2 <= q.b <= 12
            else:
                assert 2 <= q.b <= 10
                assert 2 <= q.answer <= 12

    def test_hard_flag(self, questions):
        for q in questions:
            if q.kind == "multiplication":
                expected = q.a in HARD_TABLES and q.b in HARD_TABLES
            else:
                expected = q.b in HARD_TABLES and q.answer in HARD_TABLES
            assert q.is_hard is expected

    def test_both_kinds_appear(self, questions):
        kinds = Counter(q.kind for q in questions)
        assert kinds["multiplication"] > 150
        assert kinds["division"] > 150

    def test_answer_position_varies(self, questions):
        positions = {q.options.index(q.answer) for q in questions}
        assert positions == set(range(6))

    def test_seeded_generation_is_reproducible(self):
        first = [generate_question(random.Random(42)) for _ in range(3)]
        second = [generate_question(random.Random(42)) for _ in range(3)]
        assert first == second


class TestWeightedRandInt:
    """Tests for the hard-table weighting."""

    def test_stays_in_range(self):
        rng = random.Random(1)
        values = {weighted_rand_int(2, 12, rng) for _ in range(2000)}
        assert values == set(range(2, 13))

    def test_hard_tables_favored(self):
        rng = random.Random(3)
        counts = Counter(weighted_rand_int(2, 10, rng) for _ in range(20_000))
        hard = sum(counts[v] for v in HARD_TABLES) / len(HARD_TABLES)
        easy = sum(counts[v] for v in (2, 3, 4, 5, 10)) / 5
        assert hard > easy * 1.3


class TestInvariantGuard:
    """The generator refuses to emit a broken question."""

    def test_missing_answer_raises(self):
        with pytest.raises(GenerationInvariantError):
            question_generator._check_invariant(99, [1, 2, 3, 4, 5, 6])

    def test_wrong_option_count_raises(self):
        with pytest.raises(GenerationInvariantError):
            question_generator._check_invariant(1, [1, 2, 3])

    def test_broken_wrong_options_surface(self, monkeypatch):
        monkeypatch.setattr(
            question_generator, "_wrong_options",
            lambda answer, rng: [answer, answer + 1, answer + 2, answer + 3, answer + 4],
        )
        with pytest.raises(GenerationInvariantError):
            generate_question(random.Random(0))

    def test_duplicate_answer_raises(self):
        with pytest.raises(GenerationInvariantError) as exc_info:
            question_generator._check_invariant(6, [6, 6, 1, 2, 3, 4])
        assert "exactly once" in str(exc_info.value)
        assert "GENERATION_INVARIANT_VIOLATION" in exc_info.value.format_error_log()


class TestQuestionModel:
    """Tests for the Question value and its wire form."""

    def test_wire_names(self):
        q = Question(a=6, b=7, kind="multiplication", answer=42,
                     options=(40, 42, 45, 48, 36, 54), is_hard=True)
        wire = q.to_wire()
        assert wire["type"] == "multiplication"
        assert wire["isHardQuestion"] is True
        assert wire["options"] == [40, 42, 45, 48, 36, 54]
        assert Question.model_validate(wire) == q

    def test_prompt(self):
        q = Question(a=42, b=6, kind="division", answer=7,
                     options=(7, 8, 9, 10, 11, 12), is_hard=True)
        assert q.prompt() == "42 ÷ 6"
        assert q.is_correct(7) is True
        assert q.is_correct(8) is False

    @pytest.mark.parametrize("options", [
        (1, 2, 3, 4, 5),
        (1, 2, 3, 4, 5, 6),
        (42, 42, 3, 4, 5, 6),
    ])
    def test_rejects_bad_options(self, options):
        with pytest.raises(ValidationError):
            Question(a=6, b=7, kind="multiplication", answer=42,
                     options=options, is_hard=True)

    def test_is_frozen(self):
        q = Question(a=2, b=3, kind="multiplication", answer=6,
                     options=(1, 2, 3, 4, 5, 6), is_hard=False)
        with pytest.raises(ValidationError):
            q.answer = 7
