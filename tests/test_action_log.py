import unittest
from bluff_dice.core.bid import Bid
from bluff_dice.core.config import GameConfig
from bluff_dice.core.engine import GameEngine
from bluff_dice.core.history import action_to_dict, describe_action, dumps, loads
from bluff_dice.core.state import GameAction, GameState, Player


def two_player_engine(a_dice, b_dice, current=0, bid=None):
    players = [
        Player(id="a", name="Ann", dice_count=len(a_dice), dice=list(a_dice)),
        Player(id="b", name="Bob", dice_count=len(b_dice), dice=list(b_dice)),
    ]
    state = GameState(id="g1", match_id="m1", players=players, current_player_index=current, current_bid=bid)
    return GameEngine(state, config=GameConfig(rng_seed=11))


NAMES = {"a": "Ann", "b": "Bob"}


class TestActionLog(unittest.TestCase):
    """
    Tests for the append-only action log recorded by `GameEngine`:
      - A bid entry carries the accepted Bid.
      - A challenge appends challenge and dice_lost entries, plus game_over when it ends the match.
      - Rejected moves append nothing.
    """

    def test_bid_entry(self):
        engine = two_player_engine([2, 3], [4, 5])
        engine.make_bid("a", Bid(2, 4))
        actions = engine.get_actions()
        self.assertEqual(len(actions), 1)
        self.assertEqual(actions[0].type, "bid")
        self.assertEqual(actions[0].player_id, "a")
        self.assertEqual(actions[0].data, Bid(2, 4, "a"))
        self.assertIsNotNone(actions[0].timestamp.tzinfo)

    def test_challenge_entries(self):
        engine = two_player_engine([2, 3], [4, 5], current=1, bid=Bid(3, 6, "a"))
        engine.challenge_bid("b")
        types = [a.type for a in engine.get_actions()]
        self.assertEqual(types, ["challenge", "dice_lost"])
        challenge, lost = engine.get_actions()
        self.assertEqual(challenge.player_id, "b")
        self.assertEqual(challenge.data, {"bid": Bid(3, 6, "a"), "actual_count": 0, "successful": True, "is_endgame": False})
        self.assertEqual(lost.player_id, "a")
        self.assertEqual(lost.data, {"remaining_dice": 1})

    def test_game_over_entry_is_last(self):
        engine = two_player_engine([6], [6], current=1, bid=Bid(1, 12, "a"))
        engine.challenge_bid("b")
        actions = engine.get_actions()
        self.assertEqual([a.type for a in actions], ["challenge", "dice_lost", "game_over"])
        self.assertEqual(actions[-1].player_id, "a")
        self.assertEqual(actions[-1].data, {"winner_id": "a"})

    def test_log_copy_is_detached(self):
        engine = two_player_engine([2, 3], [4, 5])
        engine.make_bid("a", Bid(1, 2))
        engine.get_actions().clear()
        self.assertEqual(len(engine.get_actions()), 1)


class TestHistory(unittest.TestCase):

    def test_describe_bids(self):
        self.assertEqual(describe_action(GameAction("bid", "a", Bid(3, 4, "a")), NAMES), "Ann bid 3 × 4")
        self.assertEqual(describe_action(GameAction("bid", "b", Bid(1, 5, "b")), NAMES, is_endgame=True), "Bob bid sum: 5")
        self.assertEqual(describe_action(GameAction("bid", "b", Bid(1, 9, "b")), NAMES), "Bob bid sum: 9")

    def test_describe_challenges(self):
        normal = GameAction("challenge", "a", {"bid": Bid(3, 4, "b"), "actual_count": 2, "successful": True, "is_endgame": False})
        self.assertEqual(describe_action(normal, NAMES), "Ann challenged 3 × 4 (successful - actual: 2)")
        endgame = GameAction("challenge", "b", {"bid": Bid(1, 8, "a"), "actual_count": 9, "successful": False, "is_endgame": True})
        self.assertEqual(describe_action(endgame, NAMES), "Bob challenged sum: 8 (failed - actual sum: 9)")

    def test_describe_other_entries(self):
        self.assertEqual(describe_action(GameAction("dice_lost", "b", {"remaining_dice": 2}), NAMES), "Bob lost a die (2 remaining)")
        self.assertEqual(describe_action(GameAction("game_over", "a", {"winner_id": "a"}), NAMES), "Ann won the game!")
        self.assertEqual(describe_action(GameAction("bid", "zed", Bid(1, 2)), NAMES), "Unknown bid 1 × 2")

    def test_json_export(self):
        engine = two_player_engine([2, 3], [4, 5], current=1, bid=Bid(3, 6, "a"))
        engine.challenge_bid("b")
        data = loads(dumps(engine.get_actions()))
        self.assertEqual(data[0]["type"], "challenge")
        self.assertEqual(data[0]["data"]["bid"], {"quantity": 3, "face_value": 6, "player_id": "a"})
        self.assertEqual(data[1]["data"], {"remaining_dice": 1})
        self.assertIsInstance(data[0]["timestamp"], str)
        self.assertEqual(action_to_dict(engine.get_actions()[1])["player_id"], "a")


if __name__ == '__main__':
    unittest.main()
