# Area: Sync Tests
"""Two-peer matches over the in-memory hub: liveness, lockout, end and forfeit."""

from glitch_duel._match.enums import GamePhase, QuestionPhase
from glitch_duel._shared.protocol import PLAYERS_CHANNEL
from glitch_duel._sync.presence import PresenceBuilder

from conftest import CHANNEL, GUEST, HOST


def _published(hub, message_type, sender=None):
    return [data for _, who, data in hub.published
            if data.get("type") == message_type and (sender is None or who == sender)]


def _play_until(duel, predicate, step_ms=500, limit=400):
    for _ in range(limit):
        if predicate():
            return
        duel.step(step_ms)
    raise AssertionError("condition never reached")


class TestMatchStart:
    """Countdown and the first question."""

    def test_both_sides_count_down_then_share_question(self, duel):
        duel.start()
        for side in duel.sides:
            assert side.state.phase == GamePhase.COUNTDOWN
            assert side.state.countdown_value == 3

        duel.run_countdown()
        host, guest = duel.sides
        assert host.state.phase == GamePhase.ACTIVE
        assert guest.state.phase == GamePhase.ACTIVE
        assert host.state.question_index == guest.state.question_index == 1
        assert host.state.current_question == guest.state.current_question
        assert host.state.match_ends_at == guest.state.match_ends_at

    def test_presence_names_the_match(self, duel):
        duel.start()
        members = duel.hub.channel(PLAYERS_CHANNEL, "observer").presence.get()
        assert members[HOST.player_id]["currentGame"] == CHANNEL
        assert members[GUEST.player_id]["currentOpponent"] == HOST.name


class TestQuestionRace:
    """Both sides settle every question exactly once."""

    def test_lockout_settles_both_sides(self, duel):
        duel.start()
        duel.run_countdown()
        host, guest = duel.sides
        question = host.state.current_question
        expected = 2 if question.is_hard else 1

        host.answer(question.answer)
        assert host.state.question_phase == QuestionPhase.SELF_ANSWERED
        duel.step()

        for side in duel.sides:
            assert side.state.question_phase == QuestionPhase.BOTH_ANSWERED
            assert side.state.answered_count == 1
        assert host.state.self_score == guest.state.peer_score == expected
        assert guest.state.self_score == host.state.peer_score == 0
        assert "question" not in guest.timing.pending()

    def test_next_question_after_fast_advance(self, duel):
        duel.start()
        duel.run_countdown()
        host, guest = duel.sides
        host.answer(host.state.current_question.answer)
        duel.step()

        duel.step(1499)
        assert guest.state.question_index == 1
        duel.step(1)
        assert host.state.question_index == guest.state.question_index == 2
        assert guest.state.question_phase == QuestionPhase.WAITING
        assert guest.state.option_highlights == {}

    def test_wrong_then_right(self, duel):
        duel.start()
        duel.run_countdown()
        host, guest = duel.sides
        question = guest.state.current_question
        wrong = next(v for v in question.options if v != question.answer)

        guest.answer(wrong)
        duel.step(500)
        assert host.state.question_phase == QuestionPhase.PEER_ANSWERED
        assert host.state.input_locked is False

        host.answer(question.answer)
        duel.step()
        for side in duel.sides:
            assert side.state.question_phase == QuestionPhase.BOTH_ANSWERED
        expected = 2 if question.is_hard else 1
        assert guest.state.peer_score == host.state.self_score == expected
        assert guest.state.self_score == 0

    def test_double_timeout(self, duel):
        duel.start()
        duel.run_countdown()
        duel.step(5000)
        for side in duel.sides:
            assert side.state.question_phase == QuestionPhase.BOTH_ANSWERED
            assert side.state.answered_count == 1
            assert side.state.self_score == side.state.peer_score == 0

    def test_answers_after_settlement_ignored(self, duel):
        duel.start()
        duel.run_countdown()
        host, guest = duel.sides
        host.answer(host.state.current_question.answer)
        duel.step()
        settled = guest.state
        guest.answer(settled.current_question.answer)
        assert guest.state is settled


class TestMatchEnd:
    """Both sides reach results with matching scores."""

    def test_full_match_of_timeouts(self, duel):
        duel.start()
        duel.run_countdown()
        host, guest = duel.sides
        _play_until(duel, lambda: host.state.phase == GamePhase.RESULTS)

        assert guest.state.phase == GamePhase.RESULTS
        for side in duel.sides:
            assert side.state.answered_count == 10
            assert side.state.history[-1].total == 10
            assert side.state.history[-1].correct == 0

        assert len(_published(duel.hub, "game-end", HOST.player_id)) == 1
        results = _published(duel.hub, "game-result")
        assert len(results) == 1
        assert results[0]["player1Id"] == HOST.player_id
        assert results[0]["player2Id"] == GUEST.player_id

    def test_last_game_in_presence_after_end(self, duel):
        duel.start()
        duel.run_countdown()
        host, _ = duel.sides
        _play_until(duel, lambda: host.state.phase == GamePhase.RESULTS)
        members = duel.hub.channel(PLAYERS_CHANNEL, "observer").presence.get()
        assert members[HOST.player_id]["lastGame"]["opponent"] == GUEST.name
        assert members[GUEST.player_id]["lastGame"]["won"] is False

    def test_lost_echo_ends_after_grace(self, duel):
        """Test a lost lockout echo cannot keep the match open forever."""
        duel.hub.drop_when = lambda channel, data: data.get("selectedValue") == -1
        duel.start()
        duel.run_countdown()
        host, guest = duel.sides
        ends = host.state.match_ends_at

        host.answer(host.state.current_question.answer)
        duel.step()
        assert host.state.question_phase == QuestionPhase.SELF_ANSWERED
        assert guest.state.question_phase == QuestionPhase.BOTH_ANSWERED

        while duel.clock.ms < ends + 4500:
            duel.step(500)
        assert host.state.phase == GamePhase.ACTIVE

        duel.step(500)
        assert host.state.phase == GamePhase.RESULTS
        assert guest.state.phase == GamePhase.RESULTS
        assert len(_published(duel.hub, "game-end", HOST.player_id)) == 1


class TestForfeit:
    """A side leaving ends the match for the other."""

    def test_quit_is_seen_as_forfeit(self, duel):
        duel.start()
        duel.run_countdown()
        host, guest = duel.sides

        guest.quit()
        assert guest.left is True
        duel.step()

        assert host.state.phase == GamePhase.FORFEITED
        assert host.state.forfeit_info.name == GUEST.name
        assert host.left is False
        assert host.timing.pending() == ["navigation"]

        duel.step(1999)
        assert host.left is False
        duel.step(1)
        assert host.left is True

    def test_quit_during_countdown(self, duel):
        duel.start()
        duel.host.quit()
        duel.step()
        assert duel.guest.state.phase == GamePhase.FORFEITED
        duel.step(5000)
        assert duel.guest.state.phase == GamePhase.FORFEITED

    def test_crash_seen_through_presence_leave(self, duel):
        duel.start()
        duel.run_countdown()
        duel.hub.channel(PLAYERS_CHANNEL, GUEST.player_id).presence.leave()
        duel.step()
        assert duel.host.state.phase == GamePhase.FORFEITED
        assert duel.host.state.forfeit_info.avatar == GUEST.avatar

    def test_opponent_joining_another_match(self, duel):
        duel.start()
        duel.run_countdown()
        record = PresenceBuilder(HOST.player_id, HOST.name, HOST.avatar).build(
            current_game="Ada - Cy", current_opponent="Cy"
        )
        duel.hub.channel(PLAYERS_CHANNEL, HOST.player_id).presence.update(record.to_wire())
        duel.step()
        assert duel.guest.state.phase == GamePhase.FORFEITED

    def test_forfeit_clears_own_presence(self, duel):
        duel.start()
        duel.run_countdown()
        duel.guest.quit()
        duel.step()
        members = duel.hub.channel(PLAYERS_CHANNEL, "observer").presence.get()
        assert members[HOST.player_id]["currentGame"] is None
        assert members[GUEST.player_id]["currentGame"] is None
