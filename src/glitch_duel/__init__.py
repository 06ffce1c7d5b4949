"""
glitch_duel — Two-player timed arithmetic quiz engine
=====================================================

Both players see the same question and race to answer it within five
seconds; scores add up over a fixed match duration. The two clients stay
in step over a best-effort pub/sub channel with no server in between.

Quick Start (bot vs bot over the in-memory transport):
    python -m glitch_duel --demo

Driving a match from code:
    from glitch_duel import (
        InMemoryHub, MatchRunner, build_session, parse_match_params,
        PlayerProfile,
    )
    hub = InMemoryHub()
    params = parse_match_params("duration=1")
    session = build_session(hub, params, PlayerProfile("p-1", "Ada"), {})
    MatchRunner({"player_id": "p-1"}, hub, [session]).run()

Layers
------
- _match: question generator, state machine (pure reducer), timers,
  orchestrator
- _sync:  wire messages, transport interfaces, presence, forfeit
  detection, the multiplayer sync adapter, history storage
"""

__version__ = "1.0.0"

from ._match import (
    GamePhase,
    QuestionPhase,
    OptionMark,
    Role,
    Question,
    MatchState,
    ForfeitInfo,
    generate_question,
    match_reducer,
    create_initial_state,
    TimingController,
)
from ._match.orchestrator import MatchOrchestrator
from ._runner_config import MatchParams, PlayerProfile, parse_match_params, load_profile
from ._sync import (
    InMemoryHub,
    MultiplayerSyncAdapter,
    PresenceBuilder,
    GameHistoryRepository,
    MatchLedgerRepository,
    parse_message,
    encode_message,
)
from .records import GameRecord, MultiplayerGameRecord, LastGameSummary, get_last_game
from .errors import (
    GlitchDuelError,
    GenerationInvariantError,
    MessageFormatError,
    TransportError,
)
from .demo_player import DemoPlayer
from .runner import MatchRunner, MatchSession, build_session

__all__ = [
    "__version__",
    "GamePhase",
    "QuestionPhase",
    "OptionMark",
    "Role",
    "Question",
    "MatchState",
    "ForfeitInfo",
    "generate_question",
    "match_reducer",
    "create_initial_state",
    "TimingController",
    "MatchOrchestrator",
    "MatchParams",
    "PlayerProfile",
    "parse_match_params",
    "load_profile",
    "InMemoryHub",
    "MultiplayerSyncAdapter",
    "PresenceBuilder",
    "GameHistoryRepository",
    "MatchLedgerRepository",
    "parse_message",
    "encode_message",
    "GameRecord",
    "MultiplayerGameRecord",
    "LastGameSummary",
    "get_last_game",
    "GlitchDuelError",
    "GenerationInvariantError",
    "MessageFormatError",
    "TransportError",
    "DemoPlayer",
    "MatchRunner",
    "MatchSession",
    "build_session",
]
