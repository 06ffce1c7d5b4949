"""Shared fixtures: a controllable clock, questions and a two-player match."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from glitch_duel._match.question import Question  # noqa: E402
from glitch_duel._match.timing import TimingController  # noqa: E402
from glitch_duel._runner_config import PlayerProfile, parse_match_params  # noqa: E402
from glitch_duel._shared.protocol import PLAYERS_CHANNEL  # noqa: E402
from glitch_duel._sync.adapter import MultiplayerSyncAdapter  # noqa: E402
from glitch_duel._sync.presence import PresenceBuilder  # noqa: E402
from glitch_duel._sync.transport import InMemoryHub  # noqa: E402
from glitch_duel._match.orchestrator import MatchOrchestrator  # noqa: E402


CHANNEL = "Ada - Bob"
HOST = PlayerProfile(player_id="p-host", name="Ada", avatar="🦊")
GUEST = PlayerProfile(player_id="p-guest", name="Bob", avatar="🐼")


class FakeClock:
    """Monotonic clock in seconds that only moves when told to."""

    def __init__(self, start_ms: int = 1_000_000):
        self.ms = start_ms

    def __call__(self) -> float:
        return self.ms / 1000.0

    def advance_ms(self, ms: int) -> None:
        self.ms += ms


def make_question(a=6, b=7, answer=42, options=(40, 42, 45, 48, 36, 54), hard=True):
    return Question(
        a=a, b=b, kind="multiplication", answer=answer,
        options=options, is_hard=hard,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timing(clock):
    return TimingController(clock)


@pytest.fixture
def question():
    return make_question()


@pytest.fixture
def hub():
    return InMemoryHub()


def build_peer(hub, clock, profile, opponent, role):
    """One side of a host/guest match on the hub, wired but not started."""
    params = parse_match_params({
        "multiplayer": "true",
        "channel": CHANNEL,
        "role": role,
        "duration": "1",
        "opponentId": opponent.player_id,
        "opponentName": opponent.name,
        "opponentAvatar": opponent.avatar,
    })
    adapter = MultiplayerSyncAdapter(
        game_channel=hub.channel(CHANNEL, profile.player_id),
        players_channel=hub.channel(PLAYERS_CHANNEL, profile.player_id),
        builder=PresenceBuilder(profile.player_id, profile.name, profile.avatar),
        role=params.role,
        opponent_id=opponent.player_id,
        opponent_name=opponent.name,
        opponent_avatar=opponent.avatar,
    )
    return MatchOrchestrator(
        params=params,
        profile=profile,
        timing=TimingController(clock),
        adapter=adapter,
    )


class Duel:
    """Host and guest sharing one hub and one clock."""

    def __init__(self, hub, clock):
        self.hub = hub
        self.clock = clock
        self.host = build_peer(hub, clock, HOST, GUEST, "host")
        self.guest = build_peer(hub, clock, GUEST, HOST, "guest")

    def start(self):
        self.host.start()
        self.guest.start()
        self.hub.pump()

    def step(self, ms: int = 0):
        """Move the clock, fire timers on both sides, deliver messages."""
        self.clock.advance_ms(ms)
        self.host.poll()
        self.guest.poll()
        self.hub.pump()

    def run_countdown(self):
        for _ in range(3):
            self.step(1000)

    @property
    def sides(self):
        return (self.host, self.guest)


@pytest.fixture
def duel(hub, clock):
    return Duel(hub, clock)
