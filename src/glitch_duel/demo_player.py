"""
glitch_duel.demo_player — Bot participant
=========================================

A ready-to-use player that answers questions on its own, for demo
matches and for exercising the match engine end to end.

Usage:
    orchestrator = MatchOrchestrator(params, profile)
    bot = DemoPlayer(orchestrator, accuracy=0.8)
    while not orchestrator.left:
        orchestrator.poll()
        bot.poll()
"""

import logging
import random
from typing import Optional

from ._match.actions import Action, NewQuestion
from ._match.orchestrator import MatchOrchestrator
from ._match.state import MatchState
from ._match.timing import TimerSlot

logger = logging.getLogger("glitch_duel.demo_player")


class DemoPlayer:
    """
    Answers each new question after a random think time.

    Args:
        orchestrator: Match to play in
        accuracy: Chance of picking the correct option
        min_think_ms: Shortest think time
        max_think_ms: Longest think time; above 5000 the bot sometimes
            lets the question time out
        rng: Random source (seed it for reproducible matches)
    """

    def __init__(
        self,
        orchestrator: MatchOrchestrator,
        accuracy: float = 0.8,
        min_think_ms: int = 700,
        max_think_ms: int = 4500,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not 0.0 <= accuracy <= 1.0:
            raise ValueError(f"accuracy must be within 0..1, got {accuracy}")
        if min_think_ms > max_think_ms:
            raise ValueError("min_think_ms must not exceed max_think_ms")
        self.orchestrator = orchestrator
        self.accuracy = accuracy
        self.min_think_ms = min_think_ms
        self.max_think_ms = max_think_ms
        self.rng = rng or random.Random()
        self.answers_given = 0
        self._pending = TimerSlot(f"bot:{orchestrator.profile.name}")
        self._unsubscribe = orchestrator.subscribe(self._on_transition)

    def _on_transition(self, before: MatchState, after: MatchState, action: Action) -> None:
        if isinstance(action, NewQuestion):
            think = self.rng.randint(self.min_think_ms, self.max_think_ms)
            index = after.question_index
            self._pending.arm(
                self.orchestrator.timing.now_ms() + think,
                lambda: self._answer(index),
            )
        elif after.input_locked or not after.is_live:
            self._pending.cancel()

    def pick(self, state: MatchState) -> Optional[int]:
        """Choose an option for the question on screen."""
        question = state.current_question
        if question is None:
            return None
        if self.rng.random() < self.accuracy:
            return question.answer
        wrong = [value for value in question.options if value != question.answer]
        return self.rng.choice(wrong)

    def _answer(self, question_index: int) -> None:
        state = self.orchestrator.state
        if state.question_index != question_index or state.input_locked:
            return
        value = self.pick(state)
        if value is None:
            return
        self.answers_given += 1
        logger.debug("%s picks %d", self.orchestrator.profile.name, value)
        self.orchestrator.answer(value)

    def poll(self) -> None:
        """Answer if the think time is over."""
        if self._pending.is_due(self.orchestrator.timing.now_ms()):
            self._pending.fire()

    def stop(self) -> None:
        self._pending.cancel()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
