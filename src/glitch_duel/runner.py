"""
glitch_duel.runner — Match event loop
=====================================

``MatchRunner`` drives one or more match sessions on a shared transport
in a single blocking loop: deliver pending messages, fire due timers,
let bots answer, sleep one tick. It stops once every session has left
its match or on Ctrl+C.

Sessions are assembled by ``build_session`` from the match parameters,
the local profile and the config.
"""

from __future__ import annotations

import logging
import random
import signal
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ._match.enums import GamePhase
from ._match.orchestrator import MatchOrchestrator
from ._match.timing import TimingController
from ._runner_config import MatchParams, PlayerProfile, validate_config
from ._shared import (
    PLAYERS_CHANNEL,
    ProtocolLogger,
    log_and_terminate,
    setup_logging,
)
from ._sync.adapter import MultiplayerSyncAdapter
from ._sync.history import GameHistoryRepository, MatchLedgerRepository
from ._sync.presence import PresenceBuilder, SoloPresence
from ._sync.transport import InMemoryHub
from .demo_player import DemoPlayer
from .errors import GenerationInvariantError

logger = logging.getLogger("glitch_duel")

DEFAULT_TICK_INTERVAL = 0.05


def scaled_clock(speed: float) -> Callable[[], float]:
    """Monotonic clock running ``speed`` times faster than real time."""
    origin = time.monotonic()
    return lambda: origin + (time.monotonic() - origin) * speed


@dataclass
class MatchSession:
    """One participant: its orchestrator and, for bot play, its bot."""

    orchestrator: MatchOrchestrator
    player: Optional[DemoPlayer] = None

    @property
    def finished(self) -> bool:
        return self.orchestrator.left


def build_session(
    hub: InMemoryHub,
    params: MatchParams,
    profile: PlayerProfile,
    config: Dict[str, Any],
    clock: Optional[Callable[[], float]] = None,
    bot: bool = True,
    rng: Optional[random.Random] = None,
) -> MatchSession:
    """
    Assemble a match session on a transport.

    Args:
        hub: Shared transport
        params: Match parameters (single-player or host/guest)
        profile: Local identity
        config: Runner config (``history_db``, ``bot_accuracy``)
        clock: Time source for every timer of the session
        bot: Attach a DemoPlayer that answers on its own
        rng: Random source for questions and bot picks
    """
    protocol = ProtocolLogger(role=params.role.name)
    players_channel = hub.channel(PLAYERS_CHANNEL, profile.player_id)
    builder = PresenceBuilder(profile.player_id, profile.name, profile.avatar)

    adapter = None
    solo_presence = None
    if params.is_multiplayer:
        adapter = MultiplayerSyncAdapter(
            game_channel=hub.channel(params.channel, profile.player_id),
            players_channel=players_channel,
            builder=builder,
            role=params.role,
            opponent_id=params.opponent_id,
            opponent_name=params.opponent_name,
            opponent_avatar=params.opponent_avatar,
            protocol_logger=protocol,
        )
    else:
        solo_presence = SoloPresence(players_channel, builder, protocol)

    history = ledger = None
    db_path = config.get("history_db")
    if db_path:
        history = GameHistoryRepository(db_path)
        ledger = MatchLedgerRepository(db_path)

    orchestrator = MatchOrchestrator(
        params=params,
        profile=profile,
        timing=TimingController(clock),
        adapter=adapter,
        history=history,
        ledger=ledger,
        solo_presence=solo_presence,
        rng=rng,
        protocol_logger=protocol,
    )
    player = None
    if bot:
        player = DemoPlayer(
            orchestrator,
            accuracy=float(config.get("bot_accuracy", 0.8)),
            rng=rng,
        )
    return MatchSession(orchestrator=orchestrator, player=player)


class MatchRunner:
    """
    Main loop for match sessions sharing one transport.

    Usage:
        hub = InMemoryHub()
        runner = MatchRunner(config, hub, [host_session, guest_session])
        runner.run()
    """

    def __init__(
        self,
        config: Dict[str, Any],
        hub: InMemoryHub,
        sessions: List[MatchSession],
    ) -> None:
        self.config = config
        self.hub = hub
        self.sessions = sessions
        self._running = False

        setup_logging(log_file_path=config.get("log_file", "glitch_duel.log"))
        validate_config(config)

        self.tick_interval = float(config.get("tick_interval", DEFAULT_TICK_INTERVAL))

    def run(self) -> List[MatchSession]:
        """Play every session to the end. Blocks until done or Ctrl+C."""
        self._running = True
        signal.signal(signal.SIGINT, lambda s, f: setattr(self, "_running", False))

        self._log_startup()
        self.start()

        while self._running and not self.finished:
            try:
                self.step()
                time.sleep(self.tick_interval)
            except KeyboardInterrupt:
                break
            except GenerationInvariantError as e:
                log_and_terminate(e)
            except Exception as e:
                logger.error(f"Loop error: {e}", exc_info=True)
                time.sleep(self.tick_interval)

        self.stop()
        self._log_summary()
        return self.sessions

    def start(self) -> None:
        for session in self.sessions:
            session.orchestrator.start()
        for session in self.sessions:
            if session.orchestrator.state.phase == GamePhase.SETUP:
                session.orchestrator.start_match()

    @property
    def finished(self) -> bool:
        return all(session.finished for session in self.sessions)

    def step(self) -> None:
        """Single iteration: deliver messages, fire timers, let bots act."""
        self.hub.pump()
        for session in self.sessions:
            orchestrator = session.orchestrator
            if orchestrator.left:
                continue
            orchestrator.poll()
            if session.player is not None:
                session.player.poll()
        self.hub.pump()

        # Leaving the results screen clears presence, which a peer still
        # playing would read as a forfeit
        if any(session.orchestrator.state.is_live for session in self.sessions):
            return
        for session in self.sessions:
            orchestrator = session.orchestrator
            if not orchestrator.left and orchestrator.state.phase == GamePhase.RESULTS:
                orchestrator.quit()

    def stop(self) -> None:
        """Leave every match still open (Ctrl+C)."""
        for session in self.sessions:
            if session.player is not None:
                session.player.stop()
            if not session.orchestrator.left:
                session.orchestrator.quit()
            self.hub.pump()

    def _log_startup(self) -> None:
        logger.info("=" * 60)
        logger.info("  Glitch Duel Runner — Starting")
        for session in self.sessions:
            orchestrator = session.orchestrator
            logger.info(
                f"  {orchestrator.role.value:6} {orchestrator.profile.name} "
                f"({orchestrator.params.duration_minutes} min)"
            )
        logger.info(f"  Tick:  every {self.tick_interval}s")
        logger.info("=" * 60)

    def _log_summary(self) -> None:
        for session in self.sessions:
            state = session.orchestrator.state
            name = session.orchestrator.profile.name
            if state.phase == GamePhase.FORFEITED and state.forfeit_info is not None:
                logger.info(f"  {name}: opponent {state.forfeit_info.name} forfeited")
            elif state.history:
                record = state.history[-1]
                logger.info(
                    f"  {name}: {record.correct} pts, {record.total} questions, "
                    f"{record.percent}% (opponent {state.peer_score})"
                )
        logger.info("Runner stopped.")
