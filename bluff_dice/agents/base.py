from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ..core.bid import Bid, MAX_FACE, MIN_FACE
from ..core.rules import count_matches


class Agent(ABC):
    """
    Abstract base class for all automated players.
    Agents must implement choose_action(view), which receives a player-specific view of the game
    (GameEngine.get_view) and returns an Action. Agents never mutate state; the caller applies the move.
    Common view accessors live here for reuse.
    """

    @abstractmethod
    def choose_action(self, view: Any):
        """
        Given a player-specific view, return the next Action to take.
        Args:
            view (dict): Player view with keys 'player', 'players', 'current_bid', 'is_endgame' and optionally 'config'.
        Returns:
            Action: The action to take (BidAction or ChallengeAction).
        """
        raise NotImplementedError

    def get_my_dice(self, view) -> List[int]:
        return list(view["player"].dice)

    def get_current_bid(self, view) -> Optional[Bid]:
        return view.get("current_bid")

    def get_total_dice(self, view) -> int:
        return sum(p.dice_count for p in view["players"] if p.is_active)

    def ones_wild(self, view) -> bool:
        config = view.get("config")
        return getattr(config, "ones_wild", True)

    def max_face(self, view) -> int:
        return getattr(view.get("config"), "dice_faces", MAX_FACE)

    def my_count_of_face(self, my_dice, face: int, ones_wild: bool = True) -> int:
        """
        Count how many of the agent's dice support a given face.
        Args:
            my_dice (iterable): The agent's private dice.
            face (int): The face value to count.
            ones_wild (bool): Count ones as matches for any other face.
        Returns:
            int: Number of supporting dice.
        """
        return count_matches([list(my_dice)], face, ones_wild)

    def face_counts(self, view):
        """
        Supporting dice for every biddable face (2 up to the configured top face) in the agent's own hand.
        Returns:
            dict[int, int]: face -> count, own ones added to every face when wild.
        """
        my_dice = self.get_my_dice(view)
        ones_wild = self.ones_wild(view)
        return {face: self.my_count_of_face(my_dice, face, ones_wild) for face in range(MIN_FACE, self.max_face(view) + 1)}
