"""
rules.py
Pure helper functions for the game rules: counting matches with wild ones, the endgame sum and bid legality.
Related modules:
- engine.py: Uses these helpers to resolve challenges and validate bids.
- agents/confidence_agent.py: Reuses the counting and legality rules for its own search.
"""

from typing import Iterable, List, Optional

from .bid import Bid, MAX_FACE

WILD_FACE = 1


def count_matches(all_dice: Iterable[List[int]], face: int, ones_wild: bool = True) -> int:
    """
    Count the dice matching a given face across a set of hands.
    Args:
        all_dice (iterable): One list of dice per player.
        face (int): Face value to count.
        ones_wild (bool): If True, ones count as a match for any face other than one.
    Returns:
        int: Total count of matching dice.
    """
    count = 0
    for dice in all_dice:
        for d in dice:
            if d == face or (ones_wild and d == WILD_FACE and face != WILD_FACE):
                count += 1
    return count


def endgame_sum(all_dice: Iterable[List[int]]) -> int:
    """
    Literal sum of the single die each remaining player holds. Ones are not wild here.
    """
    return sum(dice[0] for dice in all_dice if dice)


def is_valid_bid(bid: Bid, current_bid: Optional[Bid], endgame: bool = False, max_face: int = MAX_FACE) -> bool:
    """
    True if `bid` is in range for the mode and strictly dominates `current_bid`.
    """
    try:
        bid.validate(endgame=endgame, max_face=max_face)
    except ValueError:
        return False
    return bid.is_higher_than(current_bid, endgame=endgame, max_face=max_face)
