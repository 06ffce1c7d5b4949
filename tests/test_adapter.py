# Area: Sync Tests
"""Tests for MultiplayerSyncAdapter — inbound dispatch, lockout echo, forfeits."""

from dataclasses import replace

import pytest

from glitch_duel._match.enums import GamePhase, QuestionPhase, Role
from glitch_duel._match.reducer import match_reducer
from glitch_duel._match.state import MatchState
from glitch_duel._shared.protocol import GAME_EVENT, PLAYERS_CHANNEL
from glitch_duel._sync.adapter import MultiplayerSyncAdapter, SyncListener
from glitch_duel._sync.messages import (
    AnswerMessage,
    ForfeitMessage,
    MatchEndMessage,
    QuestionMessage,
    encode_message,
)
from glitch_duel._sync.presence import PresenceBuilder

from conftest import CHANNEL, make_question


class RecordingListener(SyncListener):
    def __init__(self):
        self.events = []

    def on_remote_question(self, question_index, question):
        self.events.append(("question", question_index))

    def on_lockout(self):
        self.events.append(("lockout",))

    def on_remote_match_end(self):
        self.events.append(("end",))

    def on_remote_forfeit(self, signal):
        self.events.append(("forfeit", signal.source))


class LocalMatch:
    """Minimal stand-in for the orchestrator's state holder."""

    def __init__(self, state):
        self.state = state

    def dispatch(self, action):
        self.state = match_reducer(self.state, action)
        return self.state


def _active(**overrides):
    state = MatchState(phase=GamePhase.ACTIVE, current_question=make_question(), question_index=1)
    return replace(state, **overrides)


@pytest.fixture
def local():
    return LocalMatch(_active())


@pytest.fixture
def listener():
    return RecordingListener()


def _adapter(hub, role, local, listener):
    adapter = MultiplayerSyncAdapter(
        game_channel=hub.channel(CHANNEL, "p-me"),
        players_channel=hub.channel(PLAYERS_CHANNEL, "p-me"),
        builder=PresenceBuilder("p-me", "Ada", "🦊"),
        role=role,
        opponent_id="p-peer",
        opponent_name="Bob",
        opponent_avatar="🐼",
    )
    adapter.bind(lambda: local.state, local.dispatch, listener)
    adapter.connect()
    return adapter


@pytest.fixture
def guest(hub, local, listener):
    return _adapter(hub, Role.GUEST, local, listener)


@pytest.fixture
def peer(hub):
    return hub.channel(CHANNEL, "p-peer")


def _answer(index=1, value=42, correct=True, points=1, player_id="p-peer"):
    return encode_message(AnswerMessage(
        player_id=player_id, question_index=index, selected_value=value,
        is_correct=correct, points=points, timestamp=0,
    ))


def _sent_answers(hub, sender="p-me"):
    return [data for channel, who, data in hub.published
            if who == sender and data.get("type") == "answer"]


class TestConstruction:
    """Adapter setup rules."""

    def test_solo_role_rejected(self, hub):
        with pytest.raises(ValueError):
            MultiplayerSyncAdapter(
                hub.channel(CHANNEL, "p-me"), hub.channel(PLAYERS_CHANNEL, "p-me"),
                PresenceBuilder("p-me", "Ada", "🦊"), Role.SOLO, "p-peer",
            )

    def test_connect_requires_bind(self, hub):
        adapter = MultiplayerSyncAdapter(
            hub.channel(CHANNEL, "p-me"), hub.channel(PLAYERS_CHANNEL, "p-me"),
            PresenceBuilder("p-me", "Ada", "🦊"), Role.HOST, "p-peer",
        )
        with pytest.raises(RuntimeError):
            adapter.connect()

    def test_disconnect_stops_delivery(self, hub, guest, peer, local):
        guest.disconnect()
        guest.disconnect()
        assert guest.connected is False
        peer.publish(GAME_EVENT, _answer(correct=False, value=40, points=0))
        hub.pump()
        assert local.state.question_phase == QuestionPhase.WAITING


class TestLockoutEcho:
    """A pre-empted side echoes a no-answer to its peer."""

    def test_correct_peer_answer_locks_out_and_echoes(self, hub, guest, peer, local, listener):
        peer.publish(GAME_EVENT, _answer(points=2))
        hub.pump()

        assert listener.events == [("lockout",)]
        assert local.state.question_phase == QuestionPhase.BOTH_ANSWERED
        assert local.state.peer_score == 2
        echo = _sent_answers(hub)
        assert len(echo) == 1
        assert echo[0]["selectedValue"] == -1
        assert echo[0]["isCorrect"] is False
        assert echo[0]["points"] == 0
        assert echo[0]["questionIndex"] == 1

    def test_no_echo_after_own_answer(self, hub, guest, peer, local, listener):
        local.state = _active(question_phase=QuestionPhase.SELF_ANSWERED)
        peer.publish(GAME_EVENT, _answer())
        hub.pump()
        assert local.state.question_phase == QuestionPhase.BOTH_ANSWERED
        assert listener.events == []
        assert _sent_answers(hub) == []

    def test_wrong_peer_answer_does_not_lock_out(self, hub, guest, peer, local, listener):
        peer.publish(GAME_EVENT, _answer(value=40, correct=False, points=0))
        hub.pump()
        assert local.state.question_phase == QuestionPhase.PEER_ANSWERED
        assert local.state.input_locked is False
        assert _sent_answers(hub) == []

    def test_duplicate_delivery_echoes_once(self, hub, guest, peer, local):
        hub.duplicate_when = lambda channel, data: data.get("playerId") == "p-peer"
        peer.publish(GAME_EVENT, _answer())
        hub.pump()
        assert local.state.peer_score == 1
        assert len(_sent_answers(hub)) == 1

    def test_presence_refreshed_with_scores(self, hub, guest, peer):
        peer.publish(GAME_EVENT, _answer(points=2))
        hub.pump()
        record = hub.channel(PLAYERS_CHANNEL, "p-peer").presence.get()["p-me"]
        assert record["currentGame"] == CHANNEL
        assert record["currentOpponentScore"] == 2


class TestInboundFiltering:
    """Answers that must not touch the local state."""

    def test_stale_index_dropped(self, hub, guest, peer, local, listener):
        before = local.state
        peer.publish(GAME_EVENT, _answer(index=2))
        peer.publish(GAME_EVENT, _answer(index=0))
        hub.pump()
        assert local.state is before
        assert listener.events == []

    def test_own_echo_dropped(self, hub, guest, local):
        before = local.state
        guest.publish_answer(1, 42, True, 1)
        hub.pump()
        assert local.state is before

    def test_malformed_dropped(self, hub, guest, peer, local):
        before = local.state
        peer.publish(GAME_EVENT, {"type": "answer", "playerId": "p-peer"})
        peer.publish(GAME_EVENT, {"hello": "world"})
        hub.pump()
        assert local.state is before


class TestRoleRouting:
    """Questions and match end flow host -> guest only."""

    def test_guest_receives_question_and_end(self, hub, guest, peer, listener):
        peer.publish(GAME_EVENT, encode_message(QuestionMessage(question_index=3, question=make_question())))
        peer.publish(GAME_EVENT, encode_message(MatchEndMessage()))
        hub.pump()
        assert listener.events == [("question", 3), ("end",)]

    def test_host_ignores_question_and_end(self, hub, local, listener, peer):
        _adapter(hub, Role.HOST, local, listener)
        peer.publish(GAME_EVENT, encode_message(QuestionMessage(question_index=3, question=make_question())))
        peer.publish(GAME_EVENT, encode_message(MatchEndMessage()))
        hub.pump()
        assert listener.events == []

    def test_guest_cannot_publish_host_messages(self, hub, guest, local):
        assert guest.publish_question(1, make_question()) is False
        assert guest.publish_match_end() is False
        assert guest.publish_result(local.state) is False
        assert hub.published == []

    def test_host_result_message(self, hub, local, listener):
        host = _adapter(hub, Role.HOST, local, listener)
        assert host.publish_result(_active(self_score=4, peer_score=3)) is True
        _, sender, data = hub.published[-1]
        assert sender == "p-me"
        assert data["type"] == "game-result"
        assert (data["player1Score"], data["player2Score"]) == (4, 3)
        assert data["player2Name"] == "Bob"
        assert data["channel"] == CHANNEL
        assert data["gameId"]


class TestForfeitSignals:
    """All three forfeit signals reach the listener."""

    def test_forfeit_message(self, hub, guest, peer, listener):
        peer.publish(GAME_EVENT, encode_message(
            ForfeitMessage(player_id="p-peer", player_name="Bob", player_avatar="🐼")
        ))
        hub.pump()
        assert listener.events == [("forfeit", "message")]

    def test_own_forfeit_ignored(self, hub, guest, listener):
        guest.publish_forfeit()
        hub.pump()
        assert listener.events == []

    def test_presence_leave(self, hub, guest, listener):
        lobby = hub.channel(PLAYERS_CHANNEL, "p-peer").presence
        lobby.enter(PresenceBuilder("p-peer", "Bob", "🐼").build(current_game=CHANNEL).to_wire())
        lobby.leave()
        hub.pump()
        assert listener.events == [("forfeit", "presence-leave")]

    def test_presence_moved_elsewhere(self, hub, guest, listener):
        lobby = hub.channel(PLAYERS_CHANNEL, "p-peer").presence
        lobby.update(PresenceBuilder("p-peer", "Bob", "🐼").build(current_game=CHANNEL).to_wire())
        lobby.update(PresenceBuilder("p-peer", "Bob", "🐼").build(current_game="Bob - Cy").to_wire())
        hub.pump()
        assert listener.events == [("forfeit", "presence-update")]

    def test_presence_ignored_after_match(self, hub, guest, local, listener):
        local.state = replace(local.state, phase=GamePhase.RESULTS)
        lobby = hub.channel(PLAYERS_CHANNEL, "p-peer").presence
        lobby.enter(PresenceBuilder("p-peer", "Bob", "🐼").build().to_wire())
        lobby.leave()
        hub.pump()
        assert listener.events == []


class TestBestEffortPublish:
    """Transport failures never propagate."""

    def test_publish_failure_returns_false(self, hub, guest):
        hub.fail_publish = True
        assert guest.publish_answer(1, 42, True, 1) is False
        assert guest.publish_forfeit() is False

    def test_presence_failure_returns_false(self, hub, guest, local):
        hub.fail_presence = True
        assert guest.publish_presence(local.state) is False

    def test_lockout_applied_even_if_echo_fails(self, hub, guest, peer, local):
        peer.publish(GAME_EVENT, _answer())
        hub.fail_publish = True
        hub.pump()
        assert local.state.question_phase == QuestionPhase.BOTH_ANSWERED

    def test_idle_presence_record(self, hub, guest, local):
        assert guest.publish_presence(local.state, in_match=False) is True
        record = hub.channel(PLAYERS_CHANNEL, "p-peer").presence.get()["p-me"]
        assert record["currentGame"] is None
        assert record["currentOpponent"] is None
