# Area: Match
"""
glitch_duel._match.constants — Timing, scoring and generation constants
=======================================================================
"""

# Countdown before the first question
COUNTDOWN_STEPS = (3, 2, 1)
COUNTDOWN_STEP_MS = 1000

# Per-question answer window
QUESTION_DURATION_MS = 5000

# Hard questions answered faster than this earn BONUS_POINTS
BONUS_WINDOW_MS = 3000
BONUS_POINTS = 2
NORMAL_POINTS = 1
BONUS_DISPLAY_MS = 1500

# Delay between settlement and the next question
ADVANCE_FAST_MS = 1500
ADVANCE_SLOW_MS = 3000

# Time a forfeit screen stays up before returning to the lobby
FORFEIT_GRACE_MS = 2000

# A multiplayer match still open this long after its end time is closed locally
MATCH_END_GRACE_MS = 5000

# Remaining-time display refresh
CLOCK_REFRESH_MS = 250

# Match length bounds in minutes
DEFAULT_DURATION_MINUTES = 1
MIN_DURATION_MINUTES = 1
MAX_DURATION_MINUTES = 5

# Question generation
OPTION_COUNT = 6
HARD_TABLES = frozenset({6, 7, 8, 9})
HARD_WEIGHT = 1.6
FACTOR_RANGE = (2, 10)
MULTIPLIER_RANGE = (2, 12)
RANDOM_WRONG_RANGE = (1, 120)

# Wire value of an answer that picked nothing (timeout or lockout echo)
NO_ANSWER = -1
