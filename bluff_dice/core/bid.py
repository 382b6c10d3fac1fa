"""
bid.py
Defines the Bid model, including range validation and the two bid orderings (normal and endgame).
Related modules:
- actions.py: Uses Bid in BidAction.
- rules.py: Combines validation and ordering into a single legality check.
- engine.py: Stores the standing bid and stamps it with the bidder id.
"""

from dataclasses import dataclass
from typing import Optional

MIN_FACE = 2
MAX_FACE = 6
MIN_SUM = 2
MAX_SUM = 12


@dataclass(frozen=True)
class Bid:
    """
    A claim about the dice on the table.
    In normal mode: at least `quantity` dice show `face_value` (ones count as wild).
    In endgame mode: the two remaining dice sum to at least `face_value`; `quantity` is ignored.
    Args:
        quantity (int): Number of dice claimed.
        face_value (int): Face claimed (2-6), or the claimed sum (2-12) in endgame.
        player_id (str|None): Bidder; stamped by the engine when the bid is accepted.
    """
    quantity: int
    face_value: int
    player_id: Optional[str] = None

    def validate(self, endgame: bool = False, max_face: int = MAX_FACE) -> None:
        """
        Validates the bid ranges for the current mode.
        Args:
            endgame (bool): True when bids claim the sum of the two last dice.
            max_face (int): Highest die face in normal mode.
        Raises:
            ValueError: If the bid is out of bounds.
        """
        if endgame:
            if not (MIN_SUM <= self.face_value <= MAX_SUM):
                raise ValueError(f"sum must be between {MIN_SUM} and {MAX_SUM}")
            return
        # ones are wild and can never be the claimed face
        if not (MIN_FACE <= self.face_value <= max_face):
            raise ValueError(f"face must be between {MIN_FACE} and {max_face}")
        if self.quantity <= 0:
            raise ValueError("quantity must be positive")

    def is_higher_than(self, other: Optional['Bid'], endgame: bool = False, max_face: int = MAX_FACE) -> bool:
        """
        Checks if this bid strictly dominates another bid.
        A higher quantity always wins. An equal quantity needs a strictly higher face,
        and is never enough once the standing face is already the top face.
        In endgame only the claimed sum matters.
        Args:
            other (Bid|None): The standing bid (None means any bid is higher).
            endgame (bool): Compare claimed sums instead of quantity/face.
            max_face (int): Highest die face in normal mode.
        Returns:
            bool: True if this bid is higher, False otherwise.
        """
        if other is None:
            return True
        if endgame:
            return self.face_value > other.face_value
        if self.quantity != other.quantity:
            return self.quantity > other.quantity
        if other.face_value >= max_face:
            return False
        return self.face_value > other.face_value

    def __str__(self) -> str:
        return f"{self.quantity} × {self.face_value}"
