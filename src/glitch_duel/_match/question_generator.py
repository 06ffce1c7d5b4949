# Area: Match
"""
glitch_duel._match.question_generator — Weighted question generator
===================================================================

Produces multiplication or division questions (50/50). Operands are drawn
from a weighted distribution that favors the hard tables, so the same
relative difficulty keeps coming back. Five distinct wrong options are
produced by perturbing the correct answer:

- 50%: small offset (answer ± 5)
- 30%: larger offset (answer ± 10)
- 20%: random positive value (1..120)

Candidates equal to the answer, already present, or not positive are
rejected. The answer is inserted at a uniformly random position.
"""

import logging
import random
from typing import List, Optional

from ..errors import GenerationInvariantError
from .constants import (
    FACTOR_RANGE,
    HARD_TABLES,
    HARD_WEIGHT,
    MULTIPLIER_RANGE,
    OPTION_COUNT,
    RANDOM_WRONG_RANGE,
)
from .question import Question

logger = logging.getLogger("glitch_duel.match.generator")

_default_rng = random.Random()


def weighted_rand_int(low: int, high: int, rng: random.Random) -> int:
    """Draw an integer in [low, high], hard-table values weighted up."""
    values = list(range(low, high + 1))
    weights = [HARD_WEIGHT if v in HARD_TABLES else 1.0 for v in values]
    return rng.choices(values, weights=weights, k=1)[0]


def _wrong_options(answer: int, rng: random.Random) -> List[int]:
    wrong: List[int] = []
    while len(wrong) < OPTION_COUNT - 1:
        strategy = rng.random()
        if strategy < 0.5:
            candidate = answer + rng.randint(-5, 5)
        elif strategy < 0.8:
            candidate = answer + rng.randint(-10, 10)
        else:
            candidate = rng.randint(*RANDOM_WRONG_RANGE)
        if candidate > 0 and candidate != answer and candidate not in wrong:
            wrong.append(candidate)
    return wrong


def _check_invariant(answer: int, options: List[int]) -> None:
    if len(options) != OPTION_COUNT:
        raise GenerationInvariantError(
            answer, options, f"expected {OPTION_COUNT} options"
        )
    if options.count(answer) != 1:
        raise GenerationInvariantError(
            answer, options, "answer must appear exactly once"
        )


def generate_question(rng: Optional[random.Random] = None) -> Question:
    """
    Generate one question.

    Args:
        rng: Random source. Defaults to the module-level generator.

    Returns:
        A validated Question

    Raises:
        GenerationInvariantError: If the options do not contain the
            answer exactly once (a generator bug)
    """
    rng = rng or _default_rng

    if rng.random() < 0.5:
        a = weighted_rand_int(*FACTOR_RANGE, rng)
        b = weighted_rand_int(*MULTIPLIER_RANGE, rng)
        answer = a * b
        kind = "multiplication"
        is_hard = a in HARD_TABLES and b in HARD_TABLES
    else:
        divisor = weighted_rand_int(*FACTOR_RANGE, rng)
        quotient = weighted_rand_int(*MULTIPLIER_RANGE, rng)
        a = divisor * quotient
        b = divisor
        answer = quotient
        kind = "division"
        is_hard = divisor in HARD_TABLES and quotient in HARD_TABLES

    options = _wrong_options(answer, rng)
    options.insert(rng.randint(0, OPTION_COUNT - 1), answer)
    _check_invariant(answer, options)

    logger.debug("Generated %s %s=%d hard=%s", kind, (a, b), answer, is_hard)
    return Question(
        a=a,
        b=b,
        kind=kind,
        answer=answer,
        options=tuple(options),
        is_hard=is_hard,
    )
