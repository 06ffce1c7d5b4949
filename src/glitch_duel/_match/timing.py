# Area: Match
"""
glitch_duel._match.timing — Match timers
========================================

All wall-clock driven behavior of a match lives here: the 3-2-1
countdown, the 5-second question clock, the post-settlement advance
delay, the bonus banner window, the remaining-time display and the
forfeit grace period before returning to the lobby.

The controller is cooperative and single-threaded. Nothing fires on its
own: the runner loop calls ``poll()`` and every due callback runs inside
that call. Each timer category owns exactly one ``TimerSlot``; arming a
slot replaces whatever it held, and ``cancel_all()`` empties every slot
so no callback can fire afterwards.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from .constants import (
    BONUS_DISPLAY_MS,
    CLOCK_REFRESH_MS,
    COUNTDOWN_STEP_MS,
    COUNTDOWN_STEPS,
    QUESTION_DURATION_MS,
)

logger = logging.getLogger("glitch_duel.match.timing")

Callback = Callable[[], None]


class TimerSlot:
    """
    Owned handle for one timer category.

    Holds at most one pending callback and the clock time (ms) at which
    it becomes due.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._due_at: float = 0.0
        self._callback: Optional[Callback] = None

    @property
    def active(self) -> bool:
        return self._callback is not None

    @property
    def due_at(self) -> Optional[float]:
        return self._due_at if self._callback is not None else None

    def arm(self, due_at: float, callback: Callback) -> None:
        """Set (or replace) the pending callback."""
        self._due_at = due_at
        self._callback = callback

    def cancel(self) -> None:
        """Drop the pending callback. No-op if nothing is pending."""
        if self._callback is not None:
            logger.debug("Timer cancelled: %s", self.name)
        self._callback = None

    def is_due(self, now: float) -> bool:
        return self._callback is not None and now >= self._due_at

    def fire(self) -> None:
        """Run the pending callback once, emptying the slot first."""
        callback, self._callback = self._callback, None
        if callback is not None:
            callback()


class QuestionClock:
    """
    Continuously sampled question deadline.

    Sampled on every poll so a progress callback can drive a deadline
    bar; fires ``on_expire`` exactly once when the duration has elapsed,
    unless stopped first.
    """

    def __init__(self) -> None:
        self.started_at: float = 0.0
        self.duration_ms: int = QUESTION_DURATION_MS
        self._on_expire: Optional[Callback] = None
        self._on_progress: Optional[Callable[[float], None]] = None

    @property
    def active(self) -> bool:
        return self._on_expire is not None

    def start(
        self,
        now: float,
        on_expire: Callback,
        on_progress: Optional[Callable[[float], None]] = None,
        duration_ms: int = QUESTION_DURATION_MS,
    ) -> None:
        self.started_at = now
        self.duration_ms = duration_ms
        self._on_expire = on_expire
        self._on_progress = on_progress

    def stop(self) -> None:
        if self._on_expire is not None:
            logger.debug("Question clock stopped")
        self._on_expire = None
        self._on_progress = None

    def remaining_fraction(self, now: float) -> float:
        """Share of the answer window still left, 1.0 down to 0.0."""
        elapsed = now - self.started_at
        return max(0.0, 1.0 - elapsed / self.duration_ms)

    def sample(self, now: float) -> None:
        if self._on_expire is None:
            return
        if self._on_progress is not None:
            self._on_progress(self.remaining_fraction(now))
        if now - self.started_at >= self.duration_ms:
            on_expire = self._on_expire
            self.stop()
            on_expire()


class TimingController:
    """
    Owns every timer of one match.

    Usage:
        timing = TimingController()
        timing.run_countdown(60_000, on_tick, on_done)
        while running:
            timing.poll()
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        """
        Args:
            clock: Monotonic time source in seconds. Defaults to
                time.monotonic.
        """
        self._clock = clock or time.monotonic
        self.countdown = TimerSlot("countdown")
        self.question = QuestionClock()
        self.advance = TimerSlot("advance")
        self.bonus = TimerSlot("bonus")
        self.match_clock = TimerSlot("match_clock")
        self.navigation = TimerSlot("navigation")
        self._slots: List[TimerSlot] = [
            self.countdown,
            self.advance,
            self.bonus,
            self.match_clock,
            self.navigation,
        ]

    def now_ms(self) -> int:
        """Current clock time in milliseconds."""
        return round(self._clock() * 1000)

    # ── countdown ──────────────────────────────────────────────

    def run_countdown(
        self,
        duration_ms: int,
        on_tick: Callable[[int], None],
        on_done: Callable[[int], None],
    ) -> None:
        """
        Emit 3, 2, 1 one second apart, then finish the countdown.

        Args:
            duration_ms: Match length; matchEndsAt = now + duration_ms
            on_tick: Called with each countdown value
            on_done: Called with matchEndsAt once the countdown is over
        """
        steps = list(COUNTDOWN_STEPS)

        def step() -> None:
            if not steps:
                match_ends_at = self.now_ms() + duration_ms
                logger.info("Countdown done, match ends at %d", match_ends_at)
                on_done(match_ends_at)
                return
            on_tick(steps.pop(0))
            self.countdown.arm(self.now_ms() + COUNTDOWN_STEP_MS, step)

        step()

    # ── question clock ─────────────────────────────────────────

    def start_question_clock(
        self,
        on_expire: Callback,
        on_progress: Optional[Callable[[float], None]] = None,
        duration_ms: int = QUESTION_DURATION_MS,
    ) -> int:
        """
        Start the answer window for a new question.

        Any previous question clock is replaced.

        Returns:
            The clock time (ms) the window started at
        """
        now = self.now_ms()
        self.question.start(now, on_expire, on_progress, duration_ms)
        logger.debug("Question clock started at %d (%dms)", now, duration_ms)
        return now

    def cancel_question_clock(self) -> None:
        self.question.stop()

    # ── one-shot timers ────────────────────────────────────────

    def schedule_advance(self, delay_ms: int, on_advance: Callback) -> None:
        """Run ``on_advance`` after a settled question has been shown."""
        self.advance.arm(self.now_ms() + delay_ms, on_advance)

    def show_bonus(self, on_hide: Callback, duration_ms: int = BONUS_DISPLAY_MS) -> None:
        """Keep the bonus banner up for ``duration_ms``, then hide it."""
        self.bonus.arm(self.now_ms() + duration_ms, on_hide)

    def schedule_navigation(self, delay_ms: int, on_navigate: Callback) -> None:
        """Leave the match screen after a grace period."""
        self.navigation.arm(self.now_ms() + delay_ms, on_navigate)

    def start_match_clock(
        self,
        match_ends_at: int,
        on_clock: Callable[[int], None],
        on_expired: Optional[Callback] = None,
        expiry_grace_ms: int = 0,
    ) -> None:
        """
        Report remaining match time every 250ms until the match is over.

        Args:
            match_ends_at: Clock ms when the match ends
            on_clock: Called with the remaining milliseconds
            on_expired: Optional, called once ``expiry_grace_ms`` after
                the end time has passed
            expiry_grace_ms: Extra wait before ``on_expired``
        """

        def tick() -> None:
            remaining = max(0, match_ends_at - self.now_ms())
            on_clock(remaining)
            if remaining > 0:
                self.match_clock.arm(self.now_ms() + CLOCK_REFRESH_MS, tick)
            elif on_expired is not None:
                self.match_clock.arm(match_ends_at + expiry_grace_ms, on_expired)

        tick()

    # ── lifecycle ──────────────────────────────────────────────

    def pending(self) -> List[str]:
        """Names of timers that can still fire."""
        names = [slot.name for slot in self._slots if slot.active]
        if self.question.active:
            names.insert(0, "question")
        return names

    def cancel_all(self) -> None:
        """Cancel every timer. Safe to call repeatedly."""
        self.question.stop()
        for slot in self._slots:
            slot.cancel()

    def poll(self) -> None:
        """Sample the question clock and fire every due timer."""
        now = self.now_ms()
        self.question.sample(now)
        for slot in self._slots:
            if slot.is_due(now):
                slot.fire()


def format_remaining(remaining_ms: int) -> str:
    """Render remaining match time as m:ss."""
    remaining_ms = max(0, remaining_ms)
    minutes = remaining_ms // 60000
    seconds = (remaining_ms % 60000) // 1000
    return f"{minutes}:{seconds:02d}"
