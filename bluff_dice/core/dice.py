"""
dice.py
Rolls the hidden hands at the start of every round.
Related modules:
- engine.py: Calls roll_active_hands from start_new_round.
- state.py: Player.dice holds the rolled hand; dice_count is how many to roll.
"""

import random
from typing import Iterable, List

from .state import Player


def roll_hand(dice_count: int, rng: random.Random, faces: int = 6) -> List[int]:
    """
    Roll a fresh hand.
    Args:
        dice_count (int): Dice the player still holds.
        rng (random.Random): Shared engine RNG, so a seeded game replays the same dice.
        faces (int): Faces per die.
    Returns:
        list[int]: Face values in 1..faces.
    """
    return [rng.randint(1, faces) for _ in range(dice_count)]


def roll_active_hands(players: Iterable[Player], rng: random.Random, faces: int = 6) -> int:
    """
    Re-roll every active player's hand in place; eliminated seats are left alone.
    Returns:
        int: Number of dice rolled.
    """
    rolled = 0
    for p in players:
        if p.is_active:
            p.dice = roll_hand(p.dice_count, rng, faces)
            rolled += p.dice_count
    return rolled
