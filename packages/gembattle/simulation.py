"""
Batch battle simulation.

Runs many independent single battles with a fixed policy and summarizes
them. Each battle gets its own run seeded with `seed + index`, so a batch
is reproducible and any single battle can be replayed on its own.

Usage:
    summary = simulate_battles(500, "rogue", seed=7, day=2, phase=DayPhase.DARK)
    print(summary.win_rate, summary.rounds_p90)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from .config import DEFAULT_CONFIG, EngineConfig
from .content.enemies import DayPhase
from .engine import BattleEngine
from .state.battle import BattleOutcome, BattlePhase
from .state.run import create_run

logger = logging.getLogger(__name__)

# A policy returns the instance ids to play next, or None to end the turn.
Policy = Callable[[BattleEngine], Optional[List[int]]]


# =============================================================================
# Policies
# =============================================================================

def greedy_policy(engine: BattleEngine) -> Optional[List[int]]:
    """Play the single most valuable affordable gem, else end the turn."""
    stamina = engine.player.stamina
    affordable = [g for g in engine.inventory.hand if g.cost <= stamina]
    if not affordable:
        return None
    best = max(affordable, key=engine.resolver.compute_value)
    return [best.instance_id]


# =============================================================================
# Results
# =============================================================================

@dataclass
class BattleRecord:
    """Outcome of one simulated battle."""
    seed: int
    outcome: Optional[BattleOutcome]
    rounds: int
    health_remaining: int
    enemy: str


@dataclass
class SimulationSummary:
    """Aggregate statistics for a batch."""
    battles: int
    wins: int
    losses: int
    timeouts: int
    win_rate: float
    rounds_mean: float
    rounds_p50: float
    rounds_p90: float
    health_remaining_mean: float
    elapsed_ms: float
    records: List[BattleRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "battles": self.battles,
            "wins": self.wins,
            "losses": self.losses,
            "timeouts": self.timeouts,
            "win_rate": self.win_rate,
            "rounds_mean": self.rounds_mean,
            "rounds_p50": self.rounds_p50,
            "rounds_p90": self.rounds_p90,
            "health_remaining_mean": self.health_remaining_mean,
            "elapsed_ms": self.elapsed_ms,
        }


def summarize(records: List[BattleRecord], elapsed_ms: float = 0.0) -> SimulationSummary:
    """Reduce battle records to summary statistics."""
    if not records:
        return SimulationSummary(0, 0, 0, 0, 0.0, 0.0, 0.0, 0.0, 0.0, elapsed_ms)

    rounds = np.array([r.rounds for r in records], dtype=float)
    wins = np.array([r.outcome == BattleOutcome.VICTORY for r in records])
    losses = np.array([r.outcome == BattleOutcome.DEFEAT for r in records])
    health = np.array([r.health_remaining for r in records], dtype=float)

    return SimulationSummary(
        battles=len(records),
        wins=int(wins.sum()),
        losses=int(losses.sum()),
        timeouts=int(len(records) - wins.sum() - losses.sum()),
        win_rate=float(wins.mean()),
        rounds_mean=float(rounds.mean()),
        rounds_p50=float(np.percentile(rounds, 50)),
        rounds_p90=float(np.percentile(rounds, 90)),
        health_remaining_mean=float(health[wins].mean()) if wins.any() else 0.0,
        elapsed_ms=elapsed_ms,
        records=records,
    )


# =============================================================================
# Runner
# =============================================================================

def run_battle(engine: BattleEngine, policy: Policy, max_rounds: int = 100) -> None:
    """Drive one started battle to its end (or to `max_rounds`)."""
    while not engine.is_battle_over() and engine.battle.round <= max_rounds:
        if engine.phase != BattlePhase.PLAYER_TURN:
            engine.run_enemy_turn()
            continue
        choice = policy(engine)
        if choice:
            engine.play_gems(choice)
        else:
            engine.end_turn()


def simulate_battles(
    count: int,
    player_class="knight",
    seed: int = 0,
    day: int = 1,
    phase: DayPhase = DayPhase.DAWN,
    policy: Policy = greedy_policy,
    config: EngineConfig = DEFAULT_CONFIG,
    max_rounds: int = 100,
) -> SimulationSummary:
    """
    Run `count` independent battles and summarize them.

    Battles still going after `max_rounds` player turns count as timeouts.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    if isinstance(phase, str):
        phase = DayPhase(phase.upper())

    start = time.perf_counter()
    records = []
    for i in range(count):
        run = create_run(player_class, seed=seed + i, config=config)
        run.day = day
        run.phase = phase
        engine = BattleEngine(run, config=config)
        engine.start_battle()
        run_battle(engine, policy, max_rounds)

        records.append(BattleRecord(
            seed=seed + i,
            outcome=engine.outcome,
            rounds=engine.battle.round,
            health_remaining=run.player.health,
            enemy=engine.enemy.name,
        ))

    elapsed_ms = (time.perf_counter() - start) * 1000
    summary = summarize(records, elapsed_ms)
    logger.info("Simulated %d battles: win rate %.2f, mean rounds %.1f (%.0f ms)",
                summary.battles, summary.win_rate, summary.rounds_mean, elapsed_ms)
    return summary
