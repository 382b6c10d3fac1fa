"""
scheduler.py
Cancellable pacing for AI turns. An AI move is computed only after a short artificial "thinking" delay on a
daemon timer; cancelling or resetting the scheduler invalidates the pending ticket so a stale move is never
applied to a newer game or a later turn.
Related modules:
- core/engine.py: Receives the move through process_move.
- agents: Chooses the move once the delay has elapsed.
- UI/cli.py: Drives a human-vs-AI match through this scheduler.
"""

import logging
import random
import threading
from typing import Any, Callable, Dict, Optional

from ..agents import agent_for
from ..agents.base import Agent
from ..core.actions import ChallengeAction
from ..core.config import GameConfig
from ..core.engine import GameEngine, MoveError, MoveResult

logger = logging.getLogger(__name__)


def think_delay(active_players: int, config: GameConfig, rng: random.Random) -> float:
    """Seconds to wait before an AI move: shorter heads-up, longer at bigger tables."""
    low, high = config.two_player_delay if active_players <= 2 else config.multiplayer_delay
    return rng.uniform(low, high)


class AITurnScheduler:
    """Schedules the current AI player's move on a cancellable timer.

    Agents default to the registered tier named by each player's
    ``difficulty``. ``on_move`` is invoked after every applied AI move with
    ``(player_id, action, result)``; callers typically re-read the engine
    state there and call ``schedule()`` again.
    """

    def __init__(
        self,
        engine: GameEngine,
        agents: Optional[Dict[str, Agent]] = None,
        on_move: Optional[Callable[[str, Any, MoveResult], None]] = None,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        timer_factory: Callable[..., Any] = threading.Timer,
    ) -> None:
        self._engine = engine
        self._agents: Dict[str, Agent] = dict(agents or {})
        self._on_move = on_move
        self._config = config or engine.config
        self._rng = rng or random.Random()
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer: Any = None
        self._ticket = 0

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def schedule(self) -> bool:
        """Arm a timer for the current player if it is an AI.

        Returns:
            True if a move was scheduled, False if the game is over or
            the current player is human.

        Raises:
            ValueError: If no agent is registered for the player's difficulty.
        """
        with self._lock:
            if self._engine.is_terminal():
                return False
            player = self._engine.get_current_player()
            if player is None or not player.is_ai:
                return False
            self._agent(player)

            self._cancel_locked()
            self._ticket += 1
            ticket = self._ticket
            state = self._engine.get_state()
            guard = (state.id, state.round_number, state.current_player_index, len(self._engine.get_actions()))
            delay = think_delay(len(state.active_players), self._config, self._rng)

            timer = self._timer_factory(delay, self._fire, args=(ticket, guard))
            timer.daemon = True
            self._timer = timer
            timer.start()
            logger.debug("Scheduled %s in %.2fs (ticket %d)", player.id, delay, ticket)
            return True

    def cancel(self) -> None:
        """Drop any pending move; a timer that already fired will not apply it."""
        with self._lock:
            self._cancel_locked()
            self._ticket += 1

    def reset(self, engine: GameEngine, agents: Optional[Dict[str, Agent]] = None) -> None:
        """Cancel pending work and re-target a new engine (e.g. after a restart)."""
        with self._lock:
            self._cancel_locked()
            self._ticket += 1
            self._engine = engine
            if agents is not None:
                self._agents = dict(agents)

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            logger.debug("Cancelled pending AI move (ticket %d)", self._ticket)
            self._timer = None

    def _agent(self, player) -> Agent:
        agent = self._agents.get(player.id)
        if agent is None:
            agent = agent_for(player.difficulty)
            self._agents[player.id] = agent
        return agent

    def _fire(self, ticket: int, guard: tuple) -> None:
        with self._lock:
            if ticket != self._ticket:
                logger.debug("Ignoring stale AI move (ticket %d, current %d)", ticket, self._ticket)
                return
            self._timer = None
            state = self._engine.get_state()
            current = (state.id, state.round_number, state.current_player_index, len(self._engine.get_actions()))
            if current != guard:
                logger.debug("Game moved on before ticket %d fired; dropping move", ticket)
                return

            player = self._engine.get_current_player()
            action = None
            try:
                view = self._engine.get_view(player.id)
                action = self._agent(player).choose_action(view)
                result = self._engine.process_move(player.id, action)
                if not result.success and state.current_bid is not None:
                    logger.warning("%s proposed a rejected move (%s); challenging instead", player.id, result.error.value)
                    action = ChallengeAction()
                    result = self._engine.process_move(player.id, action)
                if not result.success:
                    logger.warning("AI move by %s rejected: %s", player.id, result.error.value)
            except Exception:
                # the caller is still waiting on on_move
                logger.exception("AI move by %s failed", player.id)
                result = MoveResult(success=False, error=MoveError.INVALID_MOVE)

        if self._on_move is not None:
            self._on_move(player.id, action, result)
