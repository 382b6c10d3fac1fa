"""
config.py
Defines the GameConfig dataclass, which centralizes all rule options, numeric constraints and AI pacing for the engine.
Related modules:
- engine.py: Uses GameConfig to roll dice and count wild ones.
- bid.py: Uses dice_faces for normal-mode face bounds.
- session/scheduler.py: Reads the AI thinking-delay ranges.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class GameConfig:
    """
    Centralizes all rule options and numeric constraints for a match.
    Fields:
        starting_dice (int): Dice each player holds at the start of the match.
        min_players (int): Smallest table the callers should set up.
        max_players (int): Largest table the callers should set up.
        dice_faces (int): Faces per die.
        ones_wild (bool): If True, ones match any claimed face in normal-mode counting.
        rng_seed (int|None): Seed for deterministic games; None draws fresh dice every run.
        two_player_delay (tuple): (min, max) seconds an AI "thinks" when two players remain.
        multiplayer_delay (tuple): (min, max) seconds an AI "thinks" at larger tables.
    """
    starting_dice: int = 5
    min_players: int = 2
    max_players: int = 6
    dice_faces: int = 6
    ones_wild: bool = True
    rng_seed: Optional[int] = None
    two_player_delay: Tuple[float, float] = (0.5, 1.0)
    multiplayer_delay: Tuple[float, float] = (1.0, 3.0)

    def __post_init__(self) -> None:
        if self.starting_dice < 1:
            raise ValueError("starting_dice must be at least 1")
        if not (2 <= self.min_players <= self.max_players):
            raise ValueError("player bounds must satisfy 2 <= min_players <= max_players")
        if self.dice_faces < 2:
            raise ValueError("dice_faces must be at least 2")
        for name in ("two_player_delay", "multiplayer_delay"):
            low, high = getattr(self, name)
            if low < 0 or high < low:
                raise ValueError(f"{name} must be a (min, max) pair with 0 <= min <= max")

    def check_player_count(self, count: int) -> None:
        """
        Raise ValueError if a table of `count` players is outside the configured bounds.
        """
        if not (self.min_players <= count <= self.max_players):
            raise ValueError(
                f"Player count must be between {self.min_players} and {self.max_players}, got {count}."
            )
