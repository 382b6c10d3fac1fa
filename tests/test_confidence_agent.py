import random
import unittest
from bluff_dice.agents import AGENT_MAP, agent_for
from bluff_dice.agents.confidence_agent import (
    ConfidenceAgent, DIFFICULTIES, Difficulty, binomial_tail, bid_confidence, endgame_confidence,
)
from bluff_dice.core.actions import BidAction, ChallengeAction
from bluff_dice.core.bid import Bid
from bluff_dice.core.config import GameConfig
from bluff_dice.core.rules import is_valid_bid
from bluff_dice.core.state import Player


def view_for(my_dice, others, current_bid=None, is_endgame=False, config=None):
    """Build an agent view: own dice plus the dice counts of each opponent."""
    me = Player(id="me", name="Me", dice_count=len(my_dice), dice=list(my_dice), is_ai=True)
    players = [me] + [Player(id=f"o{i}", name=f"O{i}", dice_count=n) for i, n in enumerate(others)]
    return {
        "player_id": "me",
        "player": me,
        "players": players,
        "current_bid": current_bid,
        "is_endgame": is_endgame,
        "total_dice": sum(p.dice_count for p in players),
        "config": config,
    }


class TestDifficulties(unittest.TestCase):

    def test_tiers_are_registered(self):
        for name in ("easy", "medium", "hard"):
            self.assertIn(name, AGENT_MAP)
            agent = agent_for(name)
            self.assertEqual(agent.difficulty, DIFFICULTIES[name])
        self.assertEqual(agent_for(None).difficulty, DIFFICULTIES["medium"])
        with self.assertRaises(ValueError):
            agent_for("impossible")

    def test_harder_tiers_take_more_risk(self):
        easy, medium, hard = DIFFICULTIES["easy"], DIFFICULTIES["medium"], DIFFICULTIES["hard"]
        self.assertTrue(hard.challenge_threshold <= medium.challenge_threshold <= easy.challenge_threshold)
        self.assertTrue(hard.bid_acceptance_threshold <= medium.bid_acceptance_threshold <= easy.bid_acceptance_threshold)

    def test_custom_difficulty(self):
        custom = Difficulty(challenge_threshold=0.0, bid_acceptance_threshold=0.0, probability_multiplier=1.0)
        self.assertIs(ConfidenceAgent(custom).difficulty, custom)


class TestConfidence(unittest.TestCase):

    def test_certain_when_own_dice_cover(self):
        self.assertEqual(bid_confidence(Bid(3, 3), [3, 3, 1, 4, 5], 10), 1.0)

    def test_impossible_when_others_cannot_cover(self):
        self.assertEqual(bid_confidence(Bid(9, 4), [2, 2, 2, 2, 2], 10), -1.0)

    def test_partial_support(self):
        # own 2 of 4, need 2 of the other 5 dice
        self.assertAlmostEqual(bid_confidence(Bid(4, 5), [5, 5, 2, 3, 4], 10), 0.5 - 0.6 * 0.4)

    def test_endgame_confidence_bounds(self):
        self.assertEqual(endgame_confidence(4, 4), 1.0)
        self.assertEqual(endgame_confidence(5, 4), 1.0)
        self.assertAlmostEqual(endgame_confidence(7, 4), 0.2)
        self.assertAlmostEqual(endgame_confidence(10, 4), -1.0)
        self.assertEqual(endgame_confidence(11, 4), -1.0)

    def test_binomial_tail(self):
        self.assertAlmostEqual(binomial_tail(3, 1, 0.5), 0.875)
        self.assertEqual(binomial_tail(3, 0, 0.5), 1.0)
        self.assertEqual(binomial_tail(3, 4, 0.5), 0.0)


class TestOpeningBid(unittest.TestCase):

    def test_strongest_face(self):
        action = ConfidenceAgent("medium").choose_action(view_for([3, 3, 1, 5, 6], [5]))
        self.assertIsInstance(action, BidAction)
        self.assertEqual(action.bid, Bid(3, 3, "me"))

    def test_ties_go_to_lowest_face(self):
        action = ConfidenceAgent("medium").choose_action(view_for([2, 3], [2]))
        self.assertEqual(action.bid, Bid(1, 2, "me"))

    def test_capped_at_forty_percent_of_dice(self):
        action = ConfidenceAgent("hard").choose_action(view_for([1, 1, 1, 1, 1], [5]))
        self.assertEqual(action.bid, Bid(4, 2, "me"))

    def test_small_buffer_at_big_tables(self):
        action = ConfidenceAgent("medium").choose_action(view_for([4, 4, 2, 3, 5], [5, 5]))
        self.assertEqual(action.bid, Bid(3, 4, "me"))


class TestFaceRange(unittest.TestCase):

    def test_face_counts_follow_configured_faces(self):
        agent = ConfidenceAgent("medium")
        counts = agent.face_counts(view_for([7, 1, 3], [3], config=GameConfig(dice_faces=8)))
        self.assertEqual(sorted(counts), [2, 3, 4, 5, 6, 7, 8])
        self.assertEqual(counts[7], 2)
        self.assertEqual(counts[8], 1)
        self.assertEqual(sorted(agent.face_counts(view_for([7, 1, 3], [3]))), [2, 3, 4, 5, 6])

    def test_ones_count_only_when_wild(self):
        agent = ConfidenceAgent("medium")
        self.assertEqual(agent.my_count_of_face([1, 1, 4], 4), 3)
        self.assertEqual(agent.my_count_of_face([1, 1, 4], 4, ones_wild=False), 1)
        counts = agent.face_counts(view_for([1, 1, 4], [3], config=GameConfig(ones_wild=False)))
        self.assertEqual(counts[4], 1)

    def test_opens_on_high_face(self):
        view = view_for([7, 7, 7, 2, 3], [5], config=GameConfig(dice_faces=8))
        self.assertEqual(ConfidenceAgent("medium").choose_action(view).bid, Bid(3, 7, "me"))

    def test_raises_to_high_face(self):
        current = Bid(2, 6, "o0")
        cfg = GameConfig(dice_faces=8)
        view = view_for([8, 8, 8, 1, 2], [5], current_bid=current, config=cfg)
        action = ConfidenceAgent("medium", rng=random.Random(0)).choose_action(view)
        self.assertIsInstance(action, BidAction)
        self.assertEqual(action.bid.face_value, 8)
        self.assertTrue(is_valid_bid(action.bid, current, max_face=cfg.dice_faces))

    def test_probability_uses_configured_faces(self):
        view = view_for([2, 4], [3], config=GameConfig(dice_faces=8))
        self.assertAlmostEqual(ConfidenceAgent("medium").bid_probability(Bid(2, 5), view), binomial_tail(3, 2, 2 / 8))


class TestResponse(unittest.TestCase):

    def test_challenges_impossible_bid(self):
        view = view_for([2, 2, 2, 2, 2], [5], current_bid=Bid(9, 4, "o0"))
        for name in DIFFICULTIES:
            self.assertIsInstance(ConfidenceAgent(name).choose_action(view), ChallengeAction)

    def test_raises_with_supported_face(self):
        current = Bid(2, 3, "o0")
        view = view_for([4, 4, 4, 1, 2], [5], current_bid=current)
        for seed in range(10):
            action = ConfidenceAgent("medium", rng=random.Random(seed)).choose_action(view)
            self.assertIsInstance(action, BidAction)
            self.assertEqual(action.bid.face_value, 4)
            self.assertTrue(is_valid_bid(action.bid, current))
            self.assertLessEqual(action.bid.quantity, 4)

    def test_tier_decides_borderline_challenge(self):
        # confidence in 7 × 2 is -0.28: easy challenges, medium and hard raise to 7 × 5
        view = view_for([5, 5, 5, 5, 5], [5, 5, 5], current_bid=Bid(7, 2, "o0"))
        self.assertAlmostEqual(bid_confidence(Bid(7, 2), [5] * 5, 20), -0.28)
        self.assertIsInstance(ConfidenceAgent("easy").choose_action(view), ChallengeAction)
        for name in ("medium", "hard"):
            action = ConfidenceAgent(name).choose_action(view)
            self.assertIsInstance(action, BidAction)
            self.assertEqual(action.bid, Bid(7, 5, "me"))

    def test_challenges_when_no_raise_qualifies(self):
        # standing bid already above 40% of the dice: no candidate raise is allowed
        view = view_for([3, 3, 3, 2, 2], [5], current_bid=Bid(5, 3, "o0"))
        self.assertAlmostEqual(bid_confidence(Bid(5, 3), [3, 3, 3, 2, 2], 10), 0.6 - 0.6 * 0.4)
        self.assertIsInstance(ConfidenceAgent("hard").choose_action(view), ChallengeAction)

    def test_does_not_mutate_view(self):
        view = view_for([4, 4, 4, 1, 2], [5], current_bid=Bid(2, 3, "o0"))
        ConfidenceAgent("hard").choose_action(view)
        self.assertEqual(view["player"].dice, [4, 4, 4, 1, 2])
        self.assertEqual(view["current_bid"], Bid(2, 3, "o0"))


class TestEndgame(unittest.TestCase):

    def test_opening_sum_scales_with_difficulty(self):
        view = view_for([4], [1], is_endgame=True)
        sums = {name: ConfidenceAgent(name).choose_action(view).bid.face_value for name in DIFFICULTIES}
        self.assertEqual(sums, {"easy": 5, "medium": 6, "hard": 7})

    def test_opening_sum_capped_at_twelve(self):
        view = view_for([6], [1], is_endgame=True)
        self.assertEqual(ConfidenceAgent("hard").choose_action(view).bid.face_value, 9)
        self.assertLessEqual(ConfidenceAgent("hard").choose_action(view).bid.face_value, 12)

    def test_challenges_above_maximum(self):
        view = view_for([2], [1], current_bid=Bid(1, 9, "o0"), is_endgame=True)
        for name in DIFFICULTIES:
            self.assertIsInstance(ConfidenceAgent(name).choose_action(view), ChallengeAction)

    def test_raises_by_one_when_confident(self):
        view = view_for([4], [1], current_bid=Bid(1, 6, "o0"), is_endgame=True)
        action = ConfidenceAgent("easy").choose_action(view)
        self.assertEqual(action.bid, Bid(1, 7, "me"))

    def test_challenges_when_next_sum_is_too_risky(self):
        view = view_for([4], [1], current_bid=Bid(1, 7, "o0"), is_endgame=True)
        self.assertIsInstance(ConfidenceAgent("medium").choose_action(view), ChallengeAction)
        self.assertEqual(ConfidenceAgent("hard").choose_action(view).bid, Bid(1, 8, "me"))

    def test_low_confidence_bid_is_challenged(self):
        view = view_for([4], [1], current_bid=Bid(1, 9, "o0"), is_endgame=True)
        self.assertIsInstance(ConfidenceAgent("hard").choose_action(view), ChallengeAction)


class TestBidProbability(unittest.TestCase):

    def test_certain_and_impossible(self):
        agent = ConfidenceAgent("hard")
        view = view_for([3, 3, 1], [2])
        self.assertEqual(agent.bid_probability(Bid(3, 3), view), 1.0)
        self.assertEqual(agent.bid_probability(Bid(6, 3), view), 0.0)

    def test_multiplier_scales_estimate(self):
        view = view_for([2, 4], [3])
        easy = ConfidenceAgent("easy").bid_probability(Bid(2, 5), view)
        medium = ConfidenceAgent("medium").bid_probability(Bid(2, 5), view)
        self.assertAlmostEqual(medium, binomial_tail(3, 2, 2 / 6))
        self.assertAlmostEqual(easy, medium * 0.9)

    def test_endgame_probability(self):
        view = view_for([4], [1], is_endgame=True)
        # opponent needs 4 or more
        self.assertAlmostEqual(ConfidenceAgent("medium").bid_probability(Bid(1, 8), view), 0.5)


if __name__ == '__main__':
    unittest.main()
