"""Bot-vs-bot simulation runner.

Every seat, including the usual human seat 0, is driven by the bot policy
of the chosen difficulty. Useful for balance checks and for shaking out
engine invariants over many games.

Usage:
    jackattack-sim --games 100 --players 3 --difficulty hard --seed 7
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from jackattack.engine import Difficulty, GameState, create_new_game, perform_bot_turn
from jackattack.engine.serialize import snapshot

logger = logging.getLogger(__name__)

DECK_SIZE = 52


@dataclass
class SimulationStats:
    games_played: int = 0
    unfinished: int = 0
    total_turns: int = 0
    seat_wins: Counter[int] = field(default_factory=Counter)

    @property
    def average_turns(self) -> float:
        if self.games_played == 0:
            return 0.0
        return self.total_turns / self.games_played


def play_one(state: GameState, max_turns: int) -> tuple[GameState, int]:
    turns = 0
    while state.winner_id is None and turns < max_turns:
        state = perform_bot_turn(state)
        turns += 1
        if state.card_count() != DECK_SIZE:
            raise RuntimeError(f"card conservation broken after turn {turns}: {state.card_count()}")
    return state, turns


def run(
    games: int,
    players: int,
    difficulty: Difficulty,
    seed: int | None,
    max_turns: int,
    dump: Path | None = None,
) -> SimulationStats:
    stats = SimulationStats()
    finals: list[dict[str, object]] = []
    for i in range(games):
        game_seed = None if seed is None else seed + i
        state = create_new_game(players, difficulty, seed=game_seed)
        state, turns = play_one(state, max_turns)
        stats.games_played += 1
        stats.total_turns += turns
        if state.winner_id is None:
            stats.unfinished += 1
            logger.warning("Game %d hit the %d turn limit", i, max_turns)
        else:
            seat = next(n for n, p in enumerate(state.players) if p.id == state.winner_id)
            stats.seat_wins[seat] += 1
        if dump is not None:
            finals.append(snapshot(state, include_undo=False))
    if dump is not None:
        dump.parent.mkdir(parents=True, exist_ok=True)
        dump.write_text(json.dumps(finals, ensure_ascii=False, indent=2), encoding="utf-8")
    return stats


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="jackattack-sim")
    parser.add_argument("--games", type=int, default=10)
    parser.add_argument("--players", type=int, default=4, choices=(2, 3, 4))
    parser.add_argument(
        "--difficulty", default=Difficulty.MEDIUM.value, choices=[d.value for d in Difficulty]
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--max-turns", type=int, default=1000)
    parser.add_argument("--dump", type=Path, default=None, help="write final snapshots as JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    stats = run(
        games=args.games,
        players=args.players,
        difficulty=Difficulty(args.difficulty),
        seed=args.seed,
        max_turns=args.max_turns,
        dump=args.dump,
    )

    print(f"Games played: {stats.games_played} (unfinished: {stats.unfinished})")
    print(f"Average turns: {stats.average_turns:.1f}")
    for seat in range(args.players):
        print(f"  seat {seat}: {stats.seat_wins[seat]} wins")
    return 0


if __name__ == "__main__":
    sys.exit(main())
