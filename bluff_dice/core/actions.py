"""
actions.py
The two moves a seat can submit on its turn. Agents return them, the engine dispatches on their type.
Related modules:
- engine.py: process_move / apply_action.
- agents/confidence_agent.py, UI/cli.py: Produce them.
"""

from dataclasses import dataclass
from .bid import Bid


class Action:
    """Marker base; anything else handed to the engine is rejected as an invalid move."""


@dataclass(frozen=True)
class BidAction(Action):
    # in endgame bid.face_value carries the claimed sum
    bid: Bid


@dataclass(frozen=True)
class ChallengeAction(Action):
    """Call the standing bid a bluff. Only legal while a bid stands."""
