"""
state.py
Defines the game state dataclasses: Player, GameAction and GameState, plus the phase and action-type names.
Related modules:
- engine.py: Owns and mutates GameState during play.
- bid.py: Used for current_bid and bid actions.
- history.py: Serializes and describes GameAction entries.
"""

import datetime
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .bid import Bid

# phases
BIDDING = "bidding"
REVEALING = "revealing"
ROUND_END = "round_end"

# action log entry types
BID = "bid"
CHALLENGE = "challenge"
DICE_LOST = "dice_lost"
GAME_OVER = "game_over"


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass
class Player:
    """
    A seat at the table. Human and AI players share this record; only the caller branches on is_ai.
    Fields:
        id (str): Player identifier.
        name (str): Display name.
        dice_count (int): Dice still held.
        dice (list[int]): Faces rolled this round (empty before the first roll).
        is_active (bool): False once the player has lost every die.
        is_ai (bool): True if the caller should ask an agent for this player's moves.
        difficulty (str|None): AI tier name ('easy', 'medium', 'hard').
    """
    id: str
    name: str
    dice_count: int = 0
    dice: List[int] = field(default_factory=list)
    is_active: bool = True
    is_ai: bool = False
    difficulty: Optional[str] = None


@dataclass(frozen=True)
class GameAction:
    """
    One entry of the append-only action log.
    Fields:
        type (str): 'bid', 'challenge', 'dice_lost' or 'game_over'.
        player_id (str): Acting (or affected) player.
        data (Any): The Bid for 'bid'; a dict payload for the other types.
        timestamp (datetime): When the entry was recorded (UTC).
    """
    type: str
    player_id: str
    data: Any = None
    timestamp: datetime.datetime = field(default_factory=utc_now)


@dataclass
class GameState:
    """
    Canonical state of a match.
    Fields:
        id (str): Game identifier.
        match_id (str): Identifier supplied by the caller.
        players (list[Player]): Seats in fixed order.
        current_player_index (int): Seat whose move is awaited.
        current_bid (Bid|None): Standing bid; None at the start of every round.
        round_number (int): Starts at 1, increments after each resolved challenge.
        phase (str): 'bidding', 'revealing' or 'round_end'.
        winner_id (str|None): Set when one player remains.
        is_game_over (bool): True once one player remains.
    """
    id: str
    match_id: str
    players: List[Player]
    current_player_index: int = 0
    current_bid: Optional[Bid] = None
    round_number: int = 1
    phase: str = BIDDING
    winner_id: Optional[str] = None
    is_game_over: bool = False

    @property
    def active_players(self) -> List[Player]:
        return [p for p in self.players if p.is_active]

    @property
    def total_dice(self) -> int:
        return sum(p.dice_count for p in self.players if p.is_active)

    def find_player(self, player_id: str) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None
