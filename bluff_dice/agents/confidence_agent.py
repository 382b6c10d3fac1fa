"""
confidence_agent.py
The automated opponent: scores the standing bid with a closed-form confidence heuristic and either
challenges it or searches for a raise it believes in. Three registered tiers (easy, medium, hard) differ
only in their thresholds.
Related modules:
- base.py: Agent interface and view accessors.
- core/rules.py: Match counting and bid legality shared with the engine.
- session/scheduler.py: Calls choose_action after the thinking delay.
"""

import math
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from . import register_agent
from .base import Agent
from ..core.actions import BidAction, ChallengeAction
from ..core.bid import Bid, MAX_SUM, MIN_FACE
from ..core.rules import count_matches, is_valid_bid

OPENING_CAP_RATIO = 0.4
OTHERS_WEIGHT = 0.6
MAX_EXTRA_FROM_OTHERS = 2
TOP_CHOICES = 3
VARIETY = 0.1


@dataclass(frozen=True)
class Difficulty:
    """
    Tunables for one AI tier.
    Fields:
        challenge_threshold (float): Challenge when the standing bid's confidence falls below this.
        bid_acceptance_threshold (float): Only raise with bids at least this confident.
        probability_multiplier (float): Optimism applied to bid_probability estimates.
    """
    challenge_threshold: float
    bid_acceptance_threshold: float
    probability_multiplier: float


# Harder tiers tolerate riskier bids and challenge less readily.
DIFFICULTIES: Dict[str, Difficulty] = {
    "easy": Difficulty(challenge_threshold=-0.25, bid_acceptance_threshold=-0.05, probability_multiplier=0.9),
    "medium": Difficulty(challenge_threshold=-0.35, bid_acceptance_threshold=-0.15, probability_multiplier=1.0),
    "hard": Difficulty(challenge_threshold=-0.45, bid_acceptance_threshold=-0.25, probability_multiplier=1.1),
}


def bid_confidence(bid: Bid, my_dice: List[int], total_dice: int, ones_wild: bool = True) -> float:
    """
    Confidence in [-1, 1] that a normal-mode bid holds, from the bidder's own dice.
    1.0 when own dice already cover it, -1.0 when the other dice could not cover it,
    otherwise own support ratio minus a weighted share of what the others must hold.
    """
    own = count_matches([my_dice], bid.face_value, ones_wild)
    other_dice = total_dice - len(my_dice)
    needed = bid.quantity - own
    if needed <= 0:
        return 1.0
    if needed > other_dice:
        return -1.0
    return own / bid.quantity - OTHERS_WEIGHT * (needed / other_dice)


def endgame_confidence(bid_sum: int, own_die: int) -> float:
    """
    Confidence in [-1, 1] that the two last dice sum to at least bid_sum, knowing one of them.
    Linear between the guaranteed minimum (own + 1) and the impossible maximum (own + 6).
    """
    max_sum = own_die + 6
    min_sum = own_die + 1
    if bid_sum > max_sum:
        return -1.0
    if bid_sum < min_sum:
        return 1.0
    position = bid_sum - min_sum
    confidence = 1.0 - position / (max_sum - min_sum)
    return confidence * 2 - 1


class ConfidenceAgent(Agent):
    """
    ConfidenceAgent:
    - Opening bid: its best-supported face, at the count it holds plus at most one die expected from the others.
    - Facing a bid: challenges if its confidence is below the tier's challenge threshold, otherwise raises
      with one of its top few candidate bids (slightly randomized) or challenges if none is acceptable.
    - Endgame (1v1, one die each): bids on the sum of both dice.
    """
    def __init__(self, difficulty: Union[str, Difficulty] = "medium", rng: Optional[random.Random] = None):
        """
        Args:
            difficulty: Tier name ('easy', 'medium', 'hard') or a custom Difficulty.
            rng: Optional random number generator for the raise tie-break.
        """
        if isinstance(difficulty, Difficulty):
            self.difficulty = difficulty
        else:
            self.difficulty = DIFFICULTIES[difficulty]
        self.rng = rng or random.Random()

    def choose_action(self, view):
        me = view["player"]
        current_bid = self.get_current_bid(view)
        if view.get("is_endgame"):
            return self.endgame_move(me, current_bid)
        return self.normal_move(view, current_bid)

    # --- normal mode ------------------------------------------------------

    def opening_bid(self, view) -> Bid:
        my_dice = self.get_my_dice(view)
        total_dice = self.get_total_dice(view)
        counts = self.face_counts(view)
        best_face, best_count = MIN_FACE, -1
        for face in sorted(counts):
            if counts[face] > best_count:
                best_face, best_count = face, counts[face]

        other_dice = total_dice - len(my_dice)
        buffer = min(1, other_dice // 8)
        cap = max(1, math.floor(total_dice * OPENING_CAP_RATIO))
        quantity = min(max(1, best_count + buffer), cap)
        return Bid(quantity, best_face, view["player_id"])

    def normal_move(self, view, current_bid: Optional[Bid]):
        if current_bid is None:
            return BidAction(self.opening_bid(view))

        my_dice = self.get_my_dice(view)
        total_dice = self.get_total_dice(view)
        ones_wild = self.ones_wild(view)
        confidence = bid_confidence(current_bid, my_dice, total_dice, ones_wild)
        if confidence < self.difficulty.challenge_threshold:
            return ChallengeAction()

        raise_bid = self.find_raise(view, current_bid)
        if raise_bid is None:
            return ChallengeAction()
        return BidAction(raise_bid)

    def candidate_raises(self, view, current_bid: Bid) -> List[Bid]:
        """
        Legal raises built from the agent's own per-face counts that clear the acceptance threshold.
        Quantities stay within a couple of dice over what it holds and never exceed 40% of the dice in play.
        """
        my_dice = self.get_my_dice(view)
        total_dice = self.get_total_dice(view)
        ones_wild = self.ones_wild(view)
        other_dice = total_dice - len(my_dice)
        max_extra = min(MAX_EXTRA_FROM_OTHERS, other_dice // 6)

        candidates = []
        for face, count in self.face_counts(view).items():
            if count == 0:
                continue
            min_quantity = current_bid.quantity if face > current_bid.face_value else current_bid.quantity + 1
            max_quantity = min(total_dice, count + max_extra)
            for quantity in range(min_quantity, max_quantity + 1):
                if quantity > total_dice * OPENING_CAP_RATIO:
                    continue
                bid = Bid(quantity, face, view["player_id"])
                if not is_valid_bid(bid, current_bid, max_face=self.max_face(view)):
                    continue
                if bid_confidence(bid, my_dice, total_dice, ones_wild) >= self.difficulty.bid_acceptance_threshold:
                    candidates.append(bid)
        return candidates

    def find_raise(self, view, current_bid: Bid) -> Optional[Bid]:
        candidates = self.candidate_raises(view, current_bid)
        if not candidates:
            return None
        my_dice = self.get_my_dice(view)
        total_dice = self.get_total_dice(view)
        ones_wild = self.ones_wild(view)
        scored = sorted(
            candidates,
            key=lambda b: bid_confidence(b, my_dice, total_dice, ones_wild) + self.rng.random() * VARIETY,
            reverse=True,
        )
        return self.rng.choice(scored[:TOP_CHOICES])

    # --- endgame ----------------------------------------------------------

    def opening_buffer(self) -> int:
        # cautious tiers open closer to their own die
        threshold = self.difficulty.bid_acceptance_threshold
        if threshold > -0.1:
            return 1
        if threshold > -0.2:
            return 2
        return 3

    def endgame_move(self, me, current_bid: Optional[Bid]):
        own_die = me.dice[0]
        if current_bid is None:
            return BidAction(Bid(1, min(MAX_SUM, own_die + self.opening_buffer()), me.id))

        if current_bid.face_value > own_die + 6:
            return ChallengeAction()
        if endgame_confidence(current_bid.face_value, own_die) < self.difficulty.challenge_threshold:
            return ChallengeAction()

        next_sum = current_bid.face_value + 1
        if next_sum <= MAX_SUM and endgame_confidence(next_sum, own_die) >= self.difficulty.bid_acceptance_threshold:
            return BidAction(Bid(1, next_sum, me.id))
        return ChallengeAction()

    # --- probability read-out --------------------------------------------

    def bid_probability(self, bid: Bid, view) -> float:
        """
        Probability that `bid` is true given the viewer's dice, scaled by the tier's probability multiplier.
        Normal mode uses a binomial tail over the other players' dice; endgame counts the opponent faces
        that would reach the claimed sum.
        """
        my_dice = self.get_my_dice(view)
        if view.get("is_endgame"):
            own_die = my_dice[0]
            hits = sum(1 for face in range(1, 7) if own_die + face >= bid.face_value)
            probability = hits / 6
        else:
            ones_wild = self.ones_wild(view)
            other_dice = self.get_total_dice(view) - len(my_dice)
            needed = max(0, bid.quantity - self.my_count_of_face(my_dice, bid.face_value, ones_wild))
            faces = self.max_face(view)
            per_die = 2 / faces if ones_wild and bid.face_value != 1 else 1 / faces
            probability = binomial_tail(other_dice, needed, per_die)
        return max(0.0, min(1.0, probability * self.difficulty.probability_multiplier))


def binomial_tail(n: int, k: int, p: float) -> float:
    """P(X >= k) for X ~ Binomial(n, p)."""
    if k <= 0:
        return 1.0
    if k > n:
        return 0.0
    return sum(math.comb(n, i) * p ** i * (1 - p) ** (n - i) for i in range(k, n + 1))


@register_agent("easy")
class EasyAgent(ConfidenceAgent):
    """Cautious: challenges sooner and only raises with well-supported bids."""
    def __init__(self, rng=None):
        super().__init__("easy", rng=rng)

@register_agent("medium")
class MediumAgent(ConfidenceAgent):
    def __init__(self, rng=None):
        super().__init__("medium", rng=rng)

@register_agent("hard")
class HardAgent(ConfidenceAgent):
    """Bold: tolerates riskier raises and rarely challenges."""
    def __init__(self, rng=None):
        super().__init__("hard", rng=rng)
