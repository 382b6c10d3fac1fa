import argparse
import logging
import sys
import threading
from typing import List, Optional

from bluff_dice.agents.confidence_agent import ConfidenceAgent, DIFFICULTIES
from bluff_dice.core.actions import Action, BidAction, ChallengeAction
from bluff_dice.core.bid import Bid
from bluff_dice.core.config import GameConfig
from bluff_dice.core.engine import GameEngine
from bluff_dice.core.history import describe_action
from bluff_dice.core.state import Player
from bluff_dice.session.scheduler import AITurnScheduler

HUMAN_ID = "you"


def build_players(num_players: int, difficulty: str) -> List[Player]:
    """
    Seat the human first, then the AI opponents.
    Args:
        num_players (int): Total seats, including the human.
        difficulty (str): Tier for every AI opponent.
    Returns:
        list[Player]: Seats in order.
    """
    players = [Player(id=HUMAN_ID, name="You")]
    for i in range(1, num_players):
        players.append(Player(id=f"ai{i}", name=f"Bot {i} ({difficulty})", is_ai=True, difficulty=difficulty))
    return players



def print_state(engine: GameEngine):
    """
    Print the public table state and the human's dice.
    Args:
        engine (GameEngine): The running engine.
    """
    state = engine.get_state()
    me = state.find_player(HUMAN_ID)
    print(f"\n=== ROUND {state.round_number} ===")
    for p in state.players:
        status = f"{p.dice_count} dice" if p.is_active else "out"
        print(f"  {p.name}: {status}")
    if me.is_active:
        print(f"Your dice: {tuple(me.dice)}")
    if engine.is_endgame():
        print("ENDGAME: bids claim the sum of both remaining dice (2-12).")
    last = state.current_bid
    if last is None:
        print("No bids yet.")
    elif engine.is_endgame():
        print(f"Current bid: sum {last.face_value}")
    else:
        print(f"Current bid: {last.quantity} × {last.face_value}")



def prompt_action(engine: GameEngine) -> Optional[Action]:
    """
    Prompt the human player for an action (Bid or Challenge).
    Args:
        engine (GameEngine): The running engine.
    Returns:
        Action or None: The chosen action, or None if input is invalid.
    """
    endgame = engine.is_endgame()
    has_bid = engine.get_state().current_bid is not None
    print("\nChoose action:")
    print("  1) Bid")
    if has_bid:
        print("  2) Challenge")
    choice = input("Enter choice: ").strip()
    if choice == "2" and has_bid:
        return ChallengeAction()
    if choice != "1":
        print("Choice not recognized.")
        return None
    try:
        if endgame:
            total = int(input("Enter claimed sum (2-12): ").strip())
            bid = Bid(1, total, HUMAN_ID)
        else:
            qty = int(input("Enter quantity: ").strip())
            face = int(input("Enter face (2-6, ones are wild): ").strip())
            bid = Bid(qty, face, HUMAN_ID)
    except ValueError:
        print("Please enter whole numbers.")
        return None
    if not engine.is_valid_bid(bid, engine.get_state().current_bid):
        print("That bid is not a legal raise.")
        return None
    return BidAction(bid)



def show_hint(engine: GameEngine):
    """Print how likely the standing bid looks from the human's seat."""
    bid = engine.get_state().current_bid
    if bid is None:
        return
    reader = ConfidenceAgent("medium")
    probability = reader.bid_probability(bid, engine.get_view(HUMAN_ID))
    print(f"Hint: the current bid looks {probability:.0%} likely to be true.")



def play_against(num_players: int = 2, difficulty: str = "medium", config: Optional[GameConfig] = None, hints: bool = False):
    """
    Play a full match as a human (seat 0) against AI opponents in the terminal.
    Args:
        num_players (int): Total seats, including the human.
        difficulty (str): Tier for every AI opponent.
        config (GameConfig, optional): Rule options. If None, uses defaults.
        hints (bool): Show the probability read-out before each human move.
    """
    config = config or GameConfig()
    config.check_player_count(num_players)
    players = build_players(num_players, difficulty)
    names = {p.id: p.name for p in players}
    state = GameEngine.create_new_game(players, match_id="cli", config=config)
    engine = GameEngine(state, config=config)
    engine.start_new_round()

    printed = 0
    ai_moved = threading.Event()
    ai_results = []

    def print_history():
        nonlocal printed
        actions = engine.get_actions()
        for action in actions[printed:]:
            is_endgame = bool(action.data.get("is_endgame")) if isinstance(action.data, dict) else engine.is_endgame()
            print(f"  > {describe_action(action, names, is_endgame=is_endgame)}")
        printed = len(actions)

    def on_ai_move(player_id, action, result):
        ai_results.append(result)
        ai_moved.set()

    scheduler = AITurnScheduler(engine, on_move=on_ai_move, config=config)

    try:
        while not engine.is_terminal():
            current = engine.get_current_player()
            if current.is_ai:
                print(f"{current.name} is thinking...")
                ai_moved.clear()
                if not scheduler.schedule():
                    break
                ai_moved.wait()
                print_history()
                if not ai_results[-1].success:
                    print(f"{current.name} could not move ({ai_results[-1].error.value}); stopping.")
                    return
                continue

            print_state(engine)
            if hints:
                show_hint(engine)
            action = None
            while action is None:
                action = prompt_action(engine)
            result = engine.process_move(HUMAN_ID, action)
            if not result.success:
                print(f"Illegal move: {result.error.value}")
                continue
            print_history()
    finally:
        scheduler.cancel()

    winner = engine.get_state().winner_id
    print("\n--- GAME OVER ---")
    print("You win!" if winner == HUMAN_ID else f"{names[winner]} wins.")



def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Play bluff dice against AI opponents.")
    parser.add_argument("--players", type=int, default=2, help="Total players, including you (2-6)")
    parser.add_argument("--dice", type=int, default=5, help="Starting dice per player")
    parser.add_argument("--difficulty", choices=sorted(DIFFICULTIES), default="medium")
    parser.add_argument("--seed", type=int, default=None, help="Seed the dice for a reproducible match")
    parser.add_argument("--fast", action="store_true", help="Skip the AI thinking delay")
    parser.add_argument("--hints", action="store_true", help="Show how likely the current bid looks")
    parser.add_argument("--log-level", default="WARNING")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    delays = {"two_player_delay": (0.0, 0.0), "multiplayer_delay": (0.0, 0.0)} if args.fast else {}
    cfg = GameConfig(starting_dice=args.dice, rng_seed=args.seed, **delays)
    print("Welcome to Bluff Dice (CLI)")
    try:
        play_against(args.players, args.difficulty, config=cfg, hints=args.hints)
    except ValueError as e:
        print(f"Cannot start: {e}")
        sys.exit(2)
    except KeyboardInterrupt:
        print("\nExiting play loop.")
