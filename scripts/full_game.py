"""full_game.py
Simulate full matches between AI difficulty tiers. Every match seats one agent per listed tier,
starting with the same number of dice each; players lose a die per lost challenge until one remains.
Seats are rotated between matches so no tier always opens.

Usage: python scripts/full_game.py --tiers easy medium hard --matches 50 --dice 5
"""
import argparse
import datetime
import hashlib
import logging
import random
from collections import Counter
from typing import List

from bluff_dice.agents import AGENT_MAP
from bluff_dice.core.config import GameConfig
from bluff_dice.core.engine import GameEngine
from bluff_dice.core.state import Player
from bluff_dice.session.match import MatchSummary, play_match


def generate_match_id(tiers: List[str], timestamp: str) -> str:
    raw = f"{timestamp}_{'_'.join(tiers)}"
    return hashlib.sha256(raw.encode()).hexdigest()[:16]


def run_full_match(tiers: List[str], cfg: GameConfig, match_index: int, rng: random.Random) -> MatchSummary:
    """Run one match with one seat per tier, rotated by match_index."""
    shift = match_index % len(tiers)
    seating = tiers[shift:] + tiers[:shift]
    players = [
        Player(id=f"{tier}-{seat}", name=f"{tier} #{seat}", is_ai=True, difficulty=tier)
        for seat, tier in enumerate(seating)
    ]
    timestamp = datetime.datetime.now(datetime.timezone.utc).isoformat()
    match_id = generate_match_id(seating, f"{timestamp}_{match_index}")
    state = GameEngine.create_new_game(players, match_id, config=cfg)
    engine = GameEngine(state, config=cfg, rng=random.Random(rng.random()))
    agents = {p.id: AGENT_MAP[p.difficulty](rng=random.Random(rng.random())) for p in players}
    return play_match(engine, agents)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Simulate AI-vs-AI bluff dice matches.")
    parser.add_argument("--tiers", nargs="+", default=["easy", "medium", "hard"], choices=sorted(AGENT_MAP))
    parser.add_argument("--matches", type=int, default=20)
    parser.add_argument("--dice", type=int, default=5)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    cfg = GameConfig(starting_dice=args.dice, rng_seed=args.seed)
    cfg.check_player_count(len(args.tiers))
    rng = random.Random(args.seed)

    wins = Counter()
    rounds = 0
    challenges = 0
    caught = 0
    for i in range(args.matches):
        print(f"Running match {i+1}/{args.matches}...", end=" ")
        summary = run_full_match(args.tiers, cfg, i, rng)
        winner_tier = summary.winner_id.rsplit("-", 1)[0] if summary.winner_id else "none"
        wins[winner_tier] += 1
        rounds += summary.rounds
        challenges += summary.challenges
        caught += summary.successful_challenges
        print(f"winner: {winner_tier} after {summary.rounds} rounds")

    print("\n=== RESULTS ===")
    for tier in args.tiers:
        print(f"{tier:>8}: {wins[tier]} wins ({wins[tier] / max(1, args.matches):.0%})")
    print(f"Average rounds per match: {rounds / max(1, args.matches):.1f}")
    print(f"Challenges that caught a bluff: {caught}/{challenges}")


if __name__ == "__main__":
    main()
