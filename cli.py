#!/usr/bin/env python3
"""
Gem Battle - Command Line Interface

CLI for inspecting content and running battles without a front end.

Usage:
    python cli.py catalog --class rogue
    python cli.py battle --seed ABC123 --class knight --day 1 --phase dark
    python cli.py simulate --count 500 --class mage --day 2 --phase dusk
    python cli.py rng --seed ABC123 --count 20
"""

import argparse
import json
import logging
import sys
from typing import List

from packages.gembattle.config import DEFAULT_CONFIG, EngineConfig
from packages.gembattle.content.classes import PlayerClass
from packages.gembattle.content.enemies import DayPhase
from packages.gembattle.content.gems import all_gems, starter_gems, unlockable_gems
from packages.gembattle.engine import BattleEngine
from packages.gembattle.events import BattleEvent
from packages.gembattle.simulation import greedy_policy, run_battle, simulate_battles
from packages.gembattle.state.rng import GameRNG, seed_to_long
from packages.gembattle.state.run import create_run


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_event(event: BattleEvent) -> str:
    """One line per event for the battle log."""
    parts = [f"[{event.turn:>3}] {event.event_type.value:<15}"]
    if event.source:
        parts.append(f"{event.source}")
    if event.target and event.target != event.source:
        parts.append(f"-> {event.target}")
    if event.amount:
        parts.append(f"({event.amount})")
    if event.data:
        parts.append(" ".join(f"{k}={v}" for k, v in event.data.items()))
    return " ".join(parts)


def load_config(path: str) -> EngineConfig:
    if not path:
        return DEFAULT_CONFIG
    with open(path) as f:
        return EngineConfig.from_dict(json.load(f))


def parse_seed(value: str) -> int:
    return seed_to_long(value.upper())


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_catalog(args) -> int:
    """List gems, optionally for one class."""
    if args.player_class:
        gems = starter_gems(args.player_class) + unlockable_gems(args.player_class)
    else:
        gems = all_gems()

    if args.json:
        print(json.dumps([
            {
                "key": g.key,
                "name": g.name,
                "color": g.color.value,
                "kind": g.kind.value,
                "value": g.base_value,
                "cost": g.stamina_cost,
                "rarity": g.rarity.value,
                "advanced": g.advanced,
            }
            for g in gems
        ], indent=2))
        return 0

    print(f"{'key':<18} {'kind':<7} {'color':<6} {'value':>5} {'cost':>4}  rarity")
    print("-" * 56)
    for g in gems:
        flag = " (advanced)" if g.advanced else ""
        print(f"{g.key:<18} {g.kind.value:<7} {g.color.value:<6} {g.base_value:>5} "
              f"{g.stamina_cost:>4}  {g.rarity.value}{flag}")
    return 0


def cmd_battle(args) -> int:
    """Play one battle with the greedy policy and print its event log."""
    config = load_config(args.config)
    seed = parse_seed(args.seed)
    run = create_run(args.player_class, seed=seed, config=config)
    run.day = args.day
    run.phase = DayPhase(args.phase.upper())

    engine = BattleEngine(run, config=config)
    engine.start_battle()
    run_battle(engine, greedy_policy, max_rounds=args.max_rounds)

    if args.json:
        print(json.dumps({
            "seed": seed,
            "outcome": engine.outcome.value if engine.outcome else None,
            "rounds": engine.battle.round,
            "player_health": run.player.health,
            "events": engine.log.to_dicts(),
        }, indent=2))
        return 0

    print(f"Seed: {args.seed} (numeric: {seed})")
    print(f"{run.player.player_class.value} vs {engine.enemy.name} "
          f"(day {args.day}, {args.phase})")
    print("=" * 60)
    for event in engine.log.entries:
        print(format_event(event))
    print("=" * 60)
    outcome = engine.outcome.value if engine.outcome else "unfinished"
    print(f"Result: {outcome} after {engine.battle.round} rounds, "
          f"{run.player.health}/{run.player.max_health} hp, {run.player.zenny} zenny")
    return 0


def cmd_simulate(args) -> int:
    """Run many battles and print summary statistics."""
    config = load_config(args.config)
    summary = simulate_battles(
        args.count,
        player_class=args.player_class,
        seed=parse_seed(args.seed),
        day=args.day,
        phase=DayPhase(args.phase.upper()),
        config=config,
        max_rounds=args.max_rounds,
    )

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
        return 0

    print(f"Battles:   {summary.battles}")
    print(f"Wins:      {summary.wins} ({summary.win_rate:.1%})")
    print(f"Losses:    {summary.losses}")
    print(f"Timeouts:  {summary.timeouts}")
    print(f"Rounds:    mean {summary.rounds_mean:.1f}, "
          f"p50 {summary.rounds_p50:.0f}, p90 {summary.rounds_p90:.0f}")
    print(f"HP left:   {summary.health_remaining_mean:.1f} (wins only)")
    print(f"Time:      {summary.elapsed_ms:.0f} ms")
    return 0


def cmd_rng(args) -> int:
    """Show the first values of each RNG stream for a seed."""
    seed = parse_seed(args.seed)
    rng = GameRNG(seed)
    streams = {
        "roll": rng.roll_rng,
        "ai": rng.ai_rng,
        "shuffle": rng.shuffle_rng,
        "loot": rng.loot_rng,
    }
    if args.stream:
        streams = {args.stream: streams[args.stream]}

    data = {name: [round(s.roll_percent(), 4) for _ in range(args.count)]
            for name, s in streams.items()}

    if args.json:
        print(json.dumps({"seed": seed, "streams": data}, indent=2))
        return 0

    print(f"Seed: {args.seed} (numeric: {seed})")
    for name, values in data.items():
        print(f"\n{name}_rng (roll_percent):")
        for i, value in enumerate(values):
            print(f"  {i:>3}: {value:8.4f}")
    return 0


# =============================================================================
# MAIN
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Gem Battle - CLI for content inspection and battle simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s catalog --class rogue
  %(prog)s battle --seed ABC123 --class knight --phase dark
  %(prog)s simulate --count 500 --class mage --day 2
  %(prog)s rng --seed ABC123 --count 20
        """
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    classes = [c.value for c in PlayerClass]
    phases = [p.value.lower() for p in DayPhase]
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Catalog command
    catalog_parser = subparsers.add_parser("catalog", help="List gems")
    catalog_parser.add_argument("--class", dest="player_class", choices=classes,
                                help="Only gems available to this class")
    catalog_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # Battle command
    battle_parser = subparsers.add_parser("battle", help="Auto-play one battle")
    battle_parser.add_argument("--seed", "-s", default="0", help="Run seed")
    battle_parser.add_argument("--class", dest="player_class", choices=classes, default="knight")
    battle_parser.add_argument("--day", "-d", type=int, default=1, help="Day number")
    battle_parser.add_argument("--phase", "-p", choices=phases, default="dawn")
    battle_parser.add_argument("--max-rounds", type=int, default=100)
    battle_parser.add_argument("--config", help="JSON file of EngineConfig overrides")
    battle_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # Simulate command
    sim_parser = subparsers.add_parser("simulate", help="Batch-simulate battles")
    sim_parser.add_argument("--count", "-n", type=int, default=100, help="Number of battles")
    sim_parser.add_argument("--seed", "-s", default="0", help="First run seed")
    sim_parser.add_argument("--class", dest="player_class", choices=classes, default="knight")
    sim_parser.add_argument("--day", "-d", type=int, default=1, help="Day number")
    sim_parser.add_argument("--phase", "-p", choices=phases, default="dawn")
    sim_parser.add_argument("--max-rounds", type=int, default=100)
    sim_parser.add_argument("--config", help="JSON file of EngineConfig overrides")
    sim_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # RNG command
    rng_parser = subparsers.add_parser("rng", help="Show RNG stream values")
    rng_parser.add_argument("--seed", "-s", required=True, help="Run seed")
    rng_parser.add_argument("--count", "-n", type=int, default=10, help="Values per stream")
    rng_parser.add_argument("--stream", choices=["roll", "ai", "shuffle", "loot"])
    rng_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    return parser


def main(argv: List[str] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    # Dispatch to command handler
    commands = {
        "catalog": cmd_catalog,
        "battle": cmd_battle,
        "simulate": cmd_simulate,
        "rng": cmd_rng,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
