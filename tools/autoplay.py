"""
Headless Autoplay
=================

Plays whole games with a scripted slicer to exercise level progression,
retries, and adaptive spawning without any rendering.

The bot waits for a fruit it needs to rise into view and slices it. With
probability --mistake-rate it slices any visible fruit instead.

Usage:
    python -m tools.autoplay [--games N] [--seed SEED] [--mistake-rate P]
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
import time
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from recipe_slice.core.config_loader import load_config, GameConfig
from recipe_slice.core.director import Phase
from recipe_slice.core.session import GameSession


@dataclass
class GameResult:
    """Result of one autoplayed game."""
    seed: int
    cleared: bool
    highest_level: int
    attempts: int
    losses: int
    fruit_spawned: int
    game_seconds: float


class ScriptedSlicer:
    """Picks which visible body to slice each frame."""

    def __init__(self, mistake_rate: float, rng: random.Random, visible_y: float = -5.0):
        self._mistake_rate = mistake_rate
        self._rng = rng
        self._visible_y = visible_y

    def choose(self, session: GameSession) -> Optional[int]:
        snapshot = session.director.snapshot()
        visible = [
            e for e in session.area.entities.values()
            if e.position[1] > self._visible_y
        ]
        if not visible:
            return None

        if self._rng.random() < self._mistake_rate:
            return self._rng.choice(visible).uid

        if snapshot.goal is not None and snapshot.goal.order_enforced:
            wanted = {snapshot.next_expected}
        else:
            wanted = set(snapshot.remaining)
        for entity in visible:
            if entity.kind in wanted:
                return entity.uid
        return None


def play_game(
    config: GameConfig,
    seed: int,
    mistake_rate: float = 0.0,
    max_attempts: int = 50,
    max_seconds_per_attempt: float = 120.0
) -> GameResult:
    """
    Play one game until cleared or out of attempts.

    Returns:
        GameResult summary.
    """
    session = GameSession(config=config, seed=seed)
    slicer = ScriptedSlicer(mistake_rate, random.Random(seed + 1))
    director = session.director
    dt = config.physics.dt
    # Mistakes are only rolled a few times per second, not every frame
    decide_every = max(1, int(0.25 / dt))

    attempts = 0
    highest = 0
    frame = 0

    while attempts < max_attempts:
        director.start_attempt()
        if director.phase is Phase.CLEARED:
            break
        attempts += 1
        highest = max(highest, director.level_index)

        deadline = session.time + max_seconds_per_attempt
        while director.phase in (Phase.REVEALING, Phase.ACTIVE) and session.time < deadline:
            session.tick(dt)
            frame += 1
            if director.phase is Phase.ACTIVE and frame % decide_every == 0:
                uid = slicer.choose(session)
                if uid is not None:
                    session.slice_entity(uid)

        phase = director.phase
        session.clear_area()
        if phase is Phase.WON:
            director.acknowledge_win()
        elif phase is Phase.LOST:
            director.acknowledge_loss()
        elif phase is Phase.CLEARED:
            break
        else:
            # Timed out without resolving
            director.return_to_menu()

    losses = sum(1 for r in director.history if r.outcome is Phase.LOST)
    return GameResult(
        seed=seed,
        cleared=director.phase is Phase.CLEARED,
        highest_level=highest,
        attempts=attempts,
        losses=losses,
        fruit_spawned=session.spawner.total_spawned,
        game_seconds=session.time
    )


def main():
    parser = argparse.ArgumentParser(description="Autoplay Recipe Slice headlessly")
    parser.add_argument("--games", type=int, default=10, help="Number of games")
    parser.add_argument("--seed", type=int, default=0, help="Seed of the first game")
    parser.add_argument("--mistake-rate", type=float, default=0.02,
                        help="Chance a slice decision targets a random fruit")
    parser.add_argument("--max-attempts", type=int, default=50, help="Attempt cap per game")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s"
    )

    config = load_config(args.config)

    results: List[GameResult] = []
    start = time.perf_counter()
    for i in range(args.games):
        seed = args.seed + i
        result = play_game(config, seed, args.mistake_rate, args.max_attempts)
        results.append(result)
        print(f"  Seed {seed}: level={result.highest_level}, attempts={result.attempts}, "
              f"losses={result.losses}, cleared={result.cleared}")
    elapsed = time.perf_counter() - start

    levels = np.array([r.highest_level for r in results])
    attempts = np.array([r.attempts for r in results])
    print()
    print("=" * 50)
    print("AUTOPLAY SUMMARY")
    print("=" * 50)
    print(f"Games played:    {len(results)}")
    print(f"Cleared:         {sum(r.cleared for r in results)}")
    print(f"Mean level:      {levels.mean():.2f}")
    print(f"Mean attempts:   {attempts.mean():.2f}")
    print(f"Std attempts:    {attempts.std():.2f}")
    print(f"Total time:      {elapsed:.2f}s")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
