"""
match.py
Synchronous self-play: drives a GameEngine to completion with one agent per seat and no thinking delays.
Related modules:
- core/engine.py: The engine being driven.
- agents: Agents choose each move.
- scripts/full_game.py: Runs many matches through play_match.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..agents.base import Agent
from ..core.actions import BidAction, ChallengeAction
from ..core.engine import GameEngine
from ..core.state import GameAction

logger = logging.getLogger(__name__)


@dataclass
class MatchSummary:
    """
    Aggregated result of one match.
    Fields:
        winner_id (str|None): Winner, or None if the move limit was hit first.
        rounds (int): Rounds played.
        bids (int): Bids placed.
        challenges (int): Challenges made.
        successful_challenges (int): Challenges that caught a bluff.
        actions (list[GameAction]): Full action log.
    """
    winner_id: Optional[str] = None
    rounds: int = 0
    bids: int = 0
    challenges: int = 0
    successful_challenges: int = 0
    actions: List[GameAction] = field(default_factory=list)


def play_match(engine: GameEngine, agents: Dict[str, Agent], max_moves: int = 10_000) -> MatchSummary:
    """
    Play a match to the end. The first round is started here if no dice have been rolled yet.
    Args:
        engine (GameEngine): Engine holding a fresh or in-progress game.
        agents (dict): Player id -> Agent for every seat.
        max_moves (int): Safety limit on the number of moves.
    Returns:
        MatchSummary: Outcome and counters.
    Raises:
        IllegalMoveError: If an agent submits a move the engine rejects.
    """
    summary = MatchSummary()
    state = engine.get_state()
    if all(not p.dice for p in state.active_players):
        engine.start_new_round()

    moves = 0
    while not engine.is_terminal() and moves < max_moves:
        player = engine.get_current_player()
        action = agents[player.id].choose_action(engine.get_view(player.id))
        result = engine.apply_action(player.id, action)
        moves += 1
        if isinstance(action, BidAction):
            summary.bids += 1
        elif isinstance(action, ChallengeAction):
            summary.challenges += 1
            if result.challenge_successful:
                summary.successful_challenges += 1

    final = engine.get_state()
    if not final.is_game_over:
        logger.warning("Match %s stopped after %d moves without a winner", final.id, moves)
    summary.winner_id = final.winner_id
    summary.rounds = final.round_number
    summary.actions = engine.get_actions()
    return summary


