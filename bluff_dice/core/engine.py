"""
engine.py
Implements the GameEngine class, which owns the match state, validates and applies moves, resolves challenges,
eliminates players and records the action log.
Related modules:
- config.py: GameConfig is used to configure the engine.
- state.py: GameState, Player and GameAction hold all game data.
- actions.py: Moves dispatched by process_move.
- bid.py / rules.py: Bid validation, ordering and match counting.
"""

import copy
import dataclasses
import hashlib
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .actions import Action, BidAction, ChallengeAction
from .bid import Bid, MAX_SUM, MIN_FACE, MIN_SUM
from .config import GameConfig
from .dice import roll_active_hands
from .rules import count_matches, endgame_sum, is_valid_bid
from .state import (
    BID, BIDDING, CHALLENGE, DICE_LOST, GAME_OVER, REVEALING, ROUND_END,
    GameAction, GameState, Player, utc_now,
)

logger = logging.getLogger(__name__)


class MoveError(Enum):
    """Why a move was rejected. Every rejection leaves the state untouched."""
    NOT_CURRENT_PLAYER = "not_current_player"
    INACTIVE_PLAYER = "inactive_player"
    INVALID_BID = "invalid_bid"
    NO_STANDING_BID = "no_standing_bid"
    GAME_ALREADY_OVER = "game_already_over"
    UNKNOWN_PLAYER = "unknown_player"
    INVALID_MOVE = "invalid_move"


@dataclass(frozen=True)
class MoveResult:
    success: bool
    error: Optional[MoveError] = None

    def __bool__(self) -> bool:
        return self.success


@dataclass(frozen=True)
class ChallengeResult(MoveResult):
    """
    Outcome of a challenge.
    Fields:
        challenge_successful (bool): True if the standing bid was a bluff.
        loser_id (str|None): Player who lost a die.
        actual_count (int|None): Matching dice (or the dice sum in endgame).
    """
    challenge_successful: bool = False
    loser_id: Optional[str] = None
    actual_count: Optional[int] = None


class IllegalMoveError(Exception):
    """
    Raised by apply_action when a move is rejected (wrong turn, invalid bid, nothing to challenge, ...).
    """
    def __init__(self, error: MoveError, message: Optional[str] = None):
        self.error = error
        super().__init__(message or error.value)


class GameEngine:
    """
    Main state machine for a match. Owns a private GameState; callers only ever see snapshots.
    Mutating calls return a MoveResult instead of raising, so a UI can simply re-prompt.
    """
    def __init__(self, state: GameState, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None):
        """
        Args:
            state (GameState): Initial state, usually from create_new_game. A private copy is kept.
            config (GameConfig|None): Rule options; defaults to GameConfig().
            rng (random.Random|None): Dice RNG; defaults to random.Random(config.rng_seed).
        """
        self.config = config or GameConfig()
        self.rng = rng or random.Random(self.config.rng_seed)
        self._state = copy.deepcopy(state)
        self._actions: List[GameAction] = []

    @staticmethod
    def create_new_game(players: Sequence[Player], match_id: str,
                        starting_dice: Optional[int] = None,
                        config: Optional[GameConfig] = None) -> GameState:
        """
        Build a fresh GameState: every player active, holding the starting dice count, dice not yet rolled.
        Args:
            players (sequence[Player]): Seats in order.
            match_id (str): Caller-side match identifier.
            starting_dice (int|None): Overrides config.starting_dice.
            config (GameConfig|None): Rule options.
        Returns:
            GameState: The new state (phase 'bidding', round 1, no bid).
        Raises:
            ValueError: If the starting dice count is below one.
        """
        config = config or GameConfig()
        dice_count = starting_dice if starting_dice is not None else config.starting_dice
        if dice_count < 1:
            raise ValueError(f"starting_dice must be at least 1, got {dice_count}")
        raw = f"{match_id}_{utc_now().isoformat()}_{'_'.join(p.id for p in players)}"
        game_id = "game_" + hashlib.sha256(raw.encode()).hexdigest()[:16]
        return GameState(
            id=game_id,
            match_id=match_id,
            players=[
                dataclasses.replace(p, dice_count=dice_count, dice=[], is_active=True)
                for p in players
            ],
        )

    # --- action log -------------------------------------------------------

    def _record(self, type_: str, player_id: str, data: Any = None) -> None:
        self._actions.append(GameAction(type=type_, player_id=player_id, data=data))

    def get_actions(self) -> List[GameAction]:
        """Return a copy of the action log."""
        return list(self._actions)

    # --- queries ----------------------------------------------------------

    def get_state(self) -> GameState:
        """Return a deep-copied snapshot of the current state."""
        return copy.deepcopy(self._state)

    def get_current_player(self) -> Optional[Player]:
        players = self._state.players
        if 0 <= self._state.current_player_index < len(players):
            return copy.deepcopy(players[self._state.current_player_index])
        return None

    def get_active_players(self) -> List[Player]:
        return copy.deepcopy(self._state.active_players)

    def get_total_dice_count(self) -> int:
        return self._state.total_dice

    def is_endgame(self) -> bool:
        """True when exactly two players remain and each holds one die."""
        active = self._state.active_players
        return len(active) == 2 and all(p.dice_count == 1 for p in active)

    def is_valid_bid(self, bid: Bid, current_bid: Optional[Bid] = None) -> bool:
        return is_valid_bid(bid, current_bid, endgame=self.is_endgame(), max_face=self.config.dice_faces)

    def get_possible_bids(self) -> List[Bid]:
        """
        Enumerate every bid the current player could legally make right now.
        In endgame this is every higher claimed sum; otherwise every (quantity, face) pair up to the dice in play.
        """
        current = self._state.current_bid
        player = self._state.players[self._state.current_player_index]
        candidates = []
        if self.is_endgame():
            for total in range(MIN_SUM, MAX_SUM + 1):
                candidates.append(Bid(1, total, player.id))
        else:
            for quantity in range(1, self._state.total_dice + 1):
                for face in range(MIN_FACE, self.config.dice_faces + 1):
                    candidates.append(Bid(quantity, face, player.id))
        return [b for b in candidates if self.is_valid_bid(b, current)]

    def count_matches(self, face_value: int) -> int:
        """Count active dice matching face_value, ones wild when configured. Does not mutate state."""
        return count_matches(
            (p.dice for p in self._state.active_players), face_value, self.config.ones_wild
        )

    def get_view(self, player_id: str) -> Dict[str, Any]:
        """
        Get a player-specific view of the game for agent decision-making.
        The player's own dice are visible; everybody else's dice are hidden (counts stay visible).
        Args:
            player_id (str): Viewing player.
        Returns:
            dict: keys 'player_id', 'player', 'players', 'current_bid', 'is_endgame', 'total_dice', 'config'.
        """
        players = []
        me = None
        for p in self._state.players:
            if p.id == player_id:
                me = copy.deepcopy(p)
                players.append(me)
            else:
                players.append(dataclasses.replace(p, dice=[]))
        return {
            "player_id": player_id,
            "player": me,
            "players": players,
            "current_bid": self._state.current_bid,
            "is_endgame": self.is_endgame(),
            "total_dice": self._state.total_dice,
            "config": self.config,
        }

    # --- round flow -------------------------------------------------------

    def start_new_round(self) -> None:
        """
        Roll fresh dice for every active player, clear the standing bid and reopen bidding.
        The caller sets current_player_index to the starting seat beforehand.
        """
        roll_active_hands(self._state.players, self.rng, self.config.dice_faces)
        self._state.current_bid = None
        self._state.phase = BIDDING
        logger.info(
            "Round %d started in game %s (%d dice in play)",
            self._state.round_number, self._state.id, self._state.total_dice,
        )

    def _find_next_active_player(self, index: int) -> int:
        players = self._state.players
        if len(self._state.active_players) <= 1:
            return index
        next_index = (index + 1) % len(players)
        while not players[next_index].is_active:
            next_index = (next_index + 1) % len(players)
        return next_index

    def _check_turn(self, player_id: str) -> Optional[MoveError]:
        if self._state.is_game_over:
            return MoveError.GAME_ALREADY_OVER
        player = self._state.find_player(player_id)
        if player is None:
            return MoveError.UNKNOWN_PLAYER
        if not player.is_active:
            return MoveError.INACTIVE_PLAYER
        if self._state.players[self._state.current_player_index].id != player_id:
            return MoveError.NOT_CURRENT_PLAYER
        return None

    def _reject(self, player_id: str, error: MoveError, result_cls=MoveResult):
        logger.debug("Rejected move by %s: %s", player_id, error.value)
        return result_cls(success=False, error=error)

    # --- moves ------------------------------------------------------------

    def make_bid(self, player_id: str, bid: Bid) -> MoveResult:
        """
        Place a bid for the current player.
        Args:
            player_id (str): Bidder.
            bid (Bid): Proposed bid.
        Returns:
            MoveResult: success, or the reason for rejection.
        """
        error = self._check_turn(player_id)
        if error is not None:
            return self._reject(player_id, error)
        if not self.is_valid_bid(bid, self._state.current_bid):
            return self._reject(player_id, MoveError.INVALID_BID)

        if bid.player_id != player_id:
            bid = dataclasses.replace(bid, player_id=player_id)
        self._state.current_bid = bid
        self._state.current_player_index = self._find_next_active_player(self._state.current_player_index)
        self._record(BID, player_id, bid)
        logger.debug("%s bid %s", player_id, bid)
        return MoveResult(success=True)

    def challenge_bid(self, challenger_id: str) -> ChallengeResult:
        """
        Challenge the standing bid, reveal, take a die from the loser and set up the next round.
        Args:
            challenger_id (str): Player calling the bluff.
        Returns:
            ChallengeResult: success flag, whether the bid was a bluff, the loser and the revealed count.
        """
        error = self._check_turn(challenger_id)
        if error is not None:
            return self._reject(challenger_id, error, ChallengeResult)
        current_bid = self._state.current_bid
        if current_bid is None:
            return self._reject(challenger_id, MoveError.NO_STANDING_BID, ChallengeResult)

        endgame = self.is_endgame()
        if endgame:
            actual = endgame_sum(p.dice for p in self._state.active_players)
            challenge_successful = actual < current_bid.face_value
        else:
            actual = self.count_matches(current_bid.face_value)
            challenge_successful = actual < current_bid.quantity

        loser_id = current_bid.player_id if challenge_successful else challenger_id
        loser_index = next(
            (i for i, p in enumerate(self._state.players) if p.id == loser_id), None
        )
        if loser_index is None:
            return self._reject(challenger_id, MoveError.UNKNOWN_PLAYER, ChallengeResult)

        self._state.phase = REVEALING
        self._record(CHALLENGE, challenger_id, {
            "bid": current_bid,
            "actual_count": actual,
            "successful": challenge_successful,
            "is_endgame": endgame,
        })
        logger.info(
            "%s challenged %s%s: actual %d, %s loses a die",
            challenger_id, "sum " if endgame else "", current_bid, actual, loser_id,
        )

        self._remove_die(loser_id)

        if not self._state.is_game_over:
            if not self._state.players[loser_index].is_active:
                self._state.current_player_index = self._find_next_active_player(loser_index)
            else:
                self._state.current_player_index = loser_index
            self._state.round_number += 1
            self.start_new_round()

        return ChallengeResult(
            success=True,
            challenge_successful=challenge_successful,
            loser_id=loser_id,
            actual_count=actual,
        )

    def _remove_die(self, player_id: str) -> None:
        player = self._state.find_player(player_id)
        if player is None:
            return
        player.dice_count = max(0, player.dice_count - 1)
        if player.dice_count == 0:
            player.is_active = False
            logger.info("%s has been eliminated", player_id)
        self._record(DICE_LOST, player_id, {"remaining_dice": player.dice_count})
        self._check_game_over()

    def _check_game_over(self) -> None:
        active = self._state.active_players
        if len(active) != 1:
            return
        winner = active[0]
        self._state.is_game_over = True
        self._state.winner_id = winner.id
        self._state.phase = ROUND_END
        self._record(GAME_OVER, winner.id, {"winner_id": winner.id})
        logger.info("Game %s over: %s wins", self._state.id, winner.id)

    def process_move(self, player_id: str, action: Action) -> MoveResult:
        """
        Dispatch a move to make_bid or challenge_bid.
        Args:
            player_id (str): Acting player.
            action (Action): BidAction or ChallengeAction.
        Returns:
            MoveResult: The result of the dispatched call (a ChallengeResult for challenges).
        """
        if isinstance(action, BidAction):
            return self.make_bid(player_id, action.bid)
        if isinstance(action, ChallengeAction):
            return self.challenge_bid(player_id)
        return self._reject(player_id, MoveError.INVALID_MOVE)

    def apply_action(self, player_id: str, action: Action) -> MoveResult:
        """
        Like process_move, but raises on rejection.
        Raises:
            IllegalMoveError: If the move is rejected.
        """
        result = self.process_move(player_id, action)
        if not result.success:
            raise IllegalMoveError(result.error, f"{player_id}: {result.error.value}")
        return result

    def is_terminal(self) -> bool:
        """Returns True once the match has a winner."""
        return self._state.is_game_over
