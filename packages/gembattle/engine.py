"""
Battle Engine - turn/battle state machine for one encounter.

Turn flow:
    start_battle -> PLAYER_TURN
    PLAYER_TURN: play_gems (any number), then end_turn / wait /
                 discard_and_end -> ENEMY_TURN, or flee -> BATTLE_OVER
    ENEMY_TURN:  execute_enemy_action -> apply_dot -> prepare_next_action
                 -> finalize_turn -> PLAYER_TURN
    Any step moves to BATTLE_OVER the moment a combatant hits 0 health.

The four enemy steps are separately callable so a UI can pace them;
`end_turn()` runs them all. If the player is stunned when a player turn
starts, the turn is skipped and the enemy goes again
(at most `max_skipped_turns` turns in a row).

Every public operation returns the events it emitted. Rejected operations
raise a GemBattleError before changing anything.

Usage:
    run = create_run("knight", seed=42)
    engine = BattleEngine(run)
    engine.start_battle()

    while not engine.is_battle_over():
        hand = [g.instance_id for g in run.inventory.hand]
        try:
            engine.play_gems(hand[:1])
        except InsufficientStamina:
            engine.end_turn()
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

from .calc.combat import stamina_recovery
from .config import DEFAULT_CONFIG, EngineConfig
from .content.effects import StatusEffectKind
from .content.enemies import DayPhase, pick_template
from .enemy_ai import check_phase_shift, determine_next_action
from .errors import InvalidEncounterContext, NoTarget
from .events import BattleEvent, EventLog, EventType
from .registry import BattleContext, execute_enemy_action, execute_status_ticks
from .resolver import CombatResolver
from .state.battle import Battle, BattleOutcome, BattlePhase
from .state.combatants import Enemy, create_enemy
from .state.run import RunState

logger = logging.getLogger(__name__)


class ProgressionListener(Protocol):
    """Receives the end of every battle."""

    def on_battle_end(self, outcome: BattleOutcome, day: int, phase: DayPhase,
                      reward: int = 0) -> None:
        ...


class BattleEngine:
    """
    Runs battles for one RunState.

    The engine owns the Battle; player, inventory, meta-progress and RNG
    streams are read from and written to the run.
    """

    def __init__(
        self,
        run: RunState,
        config: EngineConfig = DEFAULT_CONFIG,
        progression: Optional[ProgressionListener] = None,
    ):
        self.run = run
        self.config = config
        self.progression = progression
        self.battle: Optional[Battle] = None
        self.log = EventLog()
        self.ctx: Optional[BattleContext] = None
        self.resolver: Optional[CombatResolver] = None

    # =========================================================================
    # State Access
    # =========================================================================

    @property
    def player(self):
        return self.run.player

    @property
    def inventory(self):
        return self.run.inventory

    @property
    def enemy(self) -> Optional[Enemy]:
        return self.battle.enemy if self.battle else None

    @property
    def phase(self) -> BattlePhase:
        return self.battle.state if self.battle else BattlePhase.NOT_STARTED

    def is_battle_over(self) -> bool:
        return self.battle is not None and self.battle.is_over

    @property
    def outcome(self) -> Optional[BattleOutcome]:
        return self.battle.outcome if self.battle else None

    # =========================================================================
    # Battle Flow
    # =========================================================================

    def start_battle(self, enemy: Optional[Enemy] = None) -> List[BattleEvent]:
        """
        Begin an encounter for the run's current day and phase.

        Without an explicit enemy one is picked from the day/phase pool.
        """
        if self.battle is not None and self.battle.in_progress:
            raise InvalidEncounterContext("A battle is already in progress", self.phase.value)
        if self.run.stage.is_final:
            raise InvalidEncounterContext(f"Run is over ({self.run.stage.value})",
                                          self.phase.value)

        if enemy is None:
            template = pick_template(
                self.run.day, self.run.phase, self.run.rng.loot_rng,
                self.config.scale_health_per_day, self.config.scale_attack_per_day,
            )
            enemy = create_enemy(template)
        if enemy.is_boss:
            enemy.phase_threshold = self.config.boss_phase_threshold

        self.battle = Battle(enemy=enemy, day=self.run.day, phase=self.run.phase)
        self.log = EventLog()
        self.ctx = BattleContext(
            player=self.player, enemy=enemy, battle=self.battle,
            rng=self.run.rng, config=self.config, log=self.log,
        )
        self.resolver = CombatResolver(self.ctx, self.inventory, self.run.meta)

        self.player.buffs.clear()
        self.player.stamina = self.player.max_stamina

        self.ctx.emit(EventType.BATTLE_STARTED, self.player.id, enemy.id, enemy.health,
                      enemy=enemy.name, day=self.battle.day, phase=self.battle.phase.value,
                      boss=self.battle.is_boss)
        logger.info("Battle start: day %d %s vs %s (%d hp)",
                    self.battle.day, self.battle.phase.value, enemy.name, enemy.health)

        self._choose_enemy_action()
        self._start_player_turn()
        return list(self.log.entries)

    def _start_player_turn(self) -> None:
        """
        Begin a player turn; a stunned player skips it.

        At most `max_skipped_turns` turns in a row are skipped. A stun that
        would go past that is removed and the player acts.
        """
        battle = self.battle
        battle.round += 1
        battle.state = BattlePhase.PLAYER_TURN
        battle.stamina_spent = 0

        drawn = self.inventory.fill_hand()
        self.ctx.emit(EventType.TURN_STARTED, self.player.id, None, self.player.stamina,
                      hand=[g.instance_id for g in self.inventory.hand])
        if drawn:
            self.ctx.emit(EventType.GEMS_DRAWN, self.player.id, self.player.id, len(drawn),
                          instance_ids=[g.instance_id for g in drawn])

        if self.player.is_stunned:
            self.player.buffs.consume(StatusEffectKind.STUNNED)
            if battle.turns_skipped < self.config.max_skipped_turns:
                battle.turns_skipped += 1
                self.ctx.emit(EventType.TURN_SKIPPED, self.player.id, None, 0, reason="stunned")
                battle.state = BattlePhase.ENEMY_TURN
                return
            self.ctx.emit(EventType.BUFF_EXPIRED, None, self.player.id, 0,
                          kind=StatusEffectKind.STUNNED.value, reason="skip_limit")
        battle.turns_skipped = 0

    # =========================================================================
    # Player Actions
    # =========================================================================

    def play_gems(self, instance_ids: Sequence[int]) -> List[BattleEvent]:
        """
        Play gems from the hand, in order.

        Raises InvalidEncounterContext, NoTarget, InvalidSelection or
        InsufficientStamina without changing anything. Stops resolving once
        the battle is decided.
        """
        self._require_player_turn()
        self._require_target()
        start = len(self.log)

        gems, cost = self.inventory.play(list(instance_ids), self.player.stamina)
        self.player.stamina -= cost
        self.battle.stamina_spent += cost

        for gem in gems:
            self.resolver.resolve(gem)
            if self._check_battle_end():
                break
        return self.log.since(start)

    def end_turn(self, run_enemy_turn: bool = True) -> List[BattleEvent]:
        """
        End the player's turn.

        With `run_enemy_turn` the whole enemy turn runs (including any
        turns the player skips while stunned). Otherwise the caller drives
        the enemy steps.
        """
        self._require_player_turn()
        start = len(self.log)
        self.battle.state = BattlePhase.ENEMY_TURN
        logger.debug("Turn %d end: spent %d stamina", self.battle.round, self.battle.stamina_spent)
        if run_enemy_turn:
            self.run_enemy_turn()
        return self.log.since(start)

    def wait(self) -> List[BattleEvent]:
        """Gain focus, then end the turn."""
        self._require_player_turn()
        start = len(self.log)
        self.ctx.apply_buff(self.player, StatusEffectKind.FOCUS, self.config.focus_bonus,
                            self.config.focus_duration, self.player.id)
        self.end_turn()
        return self.log.since(start)

    def discard_and_end(self, instance_ids: Sequence[int]) -> List[BattleEvent]:
        """Discard gems from the hand (ids not in hand are ignored), then end the turn."""
        self._require_player_turn()
        start = len(self.log)
        self.inventory.discard(instance_ids)
        self.end_turn()
        return self.log.since(start)

    def flee(self) -> List[BattleEvent]:
        """Leave the battle with no reward. Not allowed in boss encounters."""
        if self.battle is None or not self.battle.in_progress:
            raise InvalidEncounterContext("No battle in progress", self.phase.value)
        if self.battle.is_boss:
            raise InvalidEncounterContext("Cannot flee from a boss encounter", self.phase.value)
        start = len(self.log)
        self._end_battle(BattleOutcome.FLED)
        return self.log.since(start)

    # =========================================================================
    # Enemy Turn Steps
    # =========================================================================

    def run_enemy_turn(self) -> List[BattleEvent]:
        """Run enemy steps until it is the player's turn or the battle ends."""
        start = len(self.log)
        while self.phase == BattlePhase.ENEMY_TURN:
            self.execute_enemy_action()
            if self.is_battle_over():
                break
            self.apply_dot()
            if self.is_battle_over():
                break
            self.prepare_next_action()
            self.finalize_turn()
        return self.log.since(start)

    def execute_enemy_action(self) -> List[BattleEvent]:
        """Step 1: the enemy performs its queued action (or loses it to a stun)."""
        self._require_enemy_turn()
        self._require_target()
        start = len(self.log)
        enemy = self.enemy
        enemy.turn_counter += 1

        if enemy.is_stunned:
            enemy.buffs.consume(StatusEffectKind.STUNNED)
            self.ctx.emit(EventType.TURN_SKIPPED, enemy.id, None, 0, reason="stunned",
                          action=enemy.next_action.value if enemy.next_action else None)
            return self.log.since(start)

        action = enemy.next_action or determine_next_action(enemy, self.run.rng.ai_rng, self.config)
        self.ctx.emit(EventType.ENEMY_ACTION, enemy.id, self.player.id, 0, action=action.value)
        execute_enemy_action(action, self.ctx)
        enemy.next_action = None
        self._check_battle_end()
        return self.log.since(start)

    def apply_dot(self) -> List[BattleEvent]:
        """
        Step 2: the round tick.

        Damage/heal-over-time effects apply first (player, then enemy), then
        every effect counts down and expired ones are removed.
        """
        self._require_enemy_turn()
        start = len(self.log)
        for holder in (self.player, self.enemy):
            if execute_status_ticks(holder, self.ctx):
                self._check_battle_end()
                return self.log.since(start)
        check_phase_shift(self.ctx)

        for holder in (self.player, self.enemy):
            for effect in holder.buffs.decrement():
                self.ctx.emit(EventType.BUFF_EXPIRED, None, holder.id, effect.magnitude,
                              kind=effect.kind.value)
        return self.log.since(start)

    def prepare_next_action(self) -> List[BattleEvent]:
        """Step 3: pick (and announce) the enemy's next action."""
        self._require_enemy_turn()
        start = len(self.log)
        self._choose_enemy_action()
        return self.log.since(start)

    def finalize_turn(self) -> List[BattleEvent]:
        """Step 4: recover stamina and start the next player turn."""
        self._require_enemy_turn()
        start = len(self.log)
        recovered = stamina_recovery(
            self.battle.stamina_spent,
            full_recovery=self.config.full_recovery,
            rate=self.config.recovery_rate,
            cap=self.config.recovery_cap,
            webbed_penalty=self.player.buffs.magnitude(StatusEffectKind.WEBBED),
        )
        self.player.stamina = min(self.player.max_stamina, self.player.stamina + recovered)
        self._start_player_turn()
        return self.log.since(start)

    def _choose_enemy_action(self) -> None:
        enemy = self.enemy
        if enemy.next_action is None or enemy.pending_ultimate:
            enemy.next_action = determine_next_action(enemy, self.run.rng.ai_rng, self.config)
        self.ctx.emit(EventType.ENEMY_INTENT, enemy.id, self.player.id, 0,
                      action=enemy.next_action.value)

    # =========================================================================
    # Battle End
    # =========================================================================

    def _check_battle_end(self) -> bool:
        """End the battle if someone died. A dead player always means defeat."""
        if self.player.is_dead:
            self._end_battle(BattleOutcome.DEFEAT)
            return True
        if self.enemy.is_dead:
            self._end_battle(BattleOutcome.VICTORY)
            return True
        return False

    def _end_battle(self, outcome: BattleOutcome) -> None:
        battle = self.battle
        battle.state = BattlePhase.BATTLE_OVER
        battle.outcome = outcome
        enemy = battle.enemy

        if outcome == BattleOutcome.VICTORY:
            self.player.zenny += enemy.reward
            self.run.battles_won += 1
            self.ctx.emit(EventType.ZENNY_CHANGED, enemy.id, self.player.id, enemy.reward,
                          reason="reward")
            self.ctx.emit(EventType.VICTORY, self.player.id, enemy.id, enemy.reward)
        elif outcome == BattleOutcome.DEFEAT:
            self.ctx.emit(EventType.DEFEAT, enemy.id, self.player.id, 0)
        else:
            self.ctx.emit(EventType.FLED, self.player.id, enemy.id, 0)

        logger.info("Battle over: %s vs %s after %d rounds",
                    outcome.value, enemy.name, battle.round)
        if self.progression is not None:
            reward = enemy.reward if outcome == BattleOutcome.VICTORY else 0
            self.progression.on_battle_end(outcome, battle.day, battle.phase, reward)

    # =========================================================================
    # Guards
    # =========================================================================

    def _require_player_turn(self) -> None:
        if self.phase != BattlePhase.PLAYER_TURN:
            raise InvalidEncounterContext("Not the player's turn", self.phase.value)

    def _require_enemy_turn(self) -> None:
        if self.phase != BattlePhase.ENEMY_TURN:
            raise InvalidEncounterContext("Not the enemy's turn", self.phase.value)

    def _require_target(self) -> None:
        if self.enemy is None or self.enemy.is_dead or self.player.is_dead:
            raise NoTarget("No living combatant to act on")
