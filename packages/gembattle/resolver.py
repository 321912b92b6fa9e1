"""
Combat Resolver - applies one played gem.

Per gem:
1. Success roll: roll in [0, 100) from the roll stream, success iff
   roll < mastery for the gem key.
2. Failure: the failure effect replaces the intended one (self-damage,
   maybe a self-stun). Mastery is untouched.
3. Success: value from calc.combat.gem_value, then the kind-specific
   effect, parry reflection, mastery gain and on-success specials.

The resolver never decides the battle outcome; the engine checks for a
dead combatant after each gem.
"""

from __future__ import annotations

import logging
from typing import Optional

from .calc.combat import apply_curse, failure_self_damage, gem_value, parry_reflect
from .content.classes import PlayerClass, get_class
from .content.effects import StatusEffectKind
from .content.gems import Augmentation, GemKind, GemSpecial
from .enemy_ai import check_phase_shift
from .events import EventType
from .registry import BattleContext
from .state.inventory import GemInstance, Inventory
from .state.run import MetaProgress

logger = logging.getLogger(__name__)


class CombatResolver:
    """Resolves gem plays against the current battle context."""

    def __init__(self, ctx: BattleContext, inventory: Inventory, meta: MetaProgress):
        self.ctx = ctx
        self.inventory = inventory
        self.meta = meta

    @property
    def config(self):
        return self.ctx.config

    # =========================================================================
    # Entry point
    # =========================================================================

    def resolve(self, gem: GemInstance) -> bool:
        """Resolve one gem. Returns True if it succeeded."""
        defn = gem.definition
        mastery = self.meta.get_mastery(defn)
        roll = self.ctx.rng.roll_rng.roll_percent()
        success = roll < mastery

        if not success:
            self.ctx.emit(EventType.GEM_FAILED, self.ctx.player.id, None, 0,
                          gem=defn.key, instance_id=gem.instance_id,
                          roll=round(roll, 2), mastery=mastery)
            self.apply_failure_effect(gem)
            return False

        value = self.compute_value(gem)
        self.ctx.emit(EventType.GEM_PLAYED, self.ctx.player.id, self._target_id(defn.kind),
                      value, gem=defn.key, instance_id=gem.instance_id, kind=defn.kind.value)

        if defn.kind == GemKind.ATTACK:
            self._apply_attack(gem, value)
        elif defn.kind == GemKind.HEAL:
            self.ctx.heal(self.ctx.player, value, self.ctx.player.id)
        elif defn.kind == GemKind.SHIELD:
            self.ctx.apply_buff(self.ctx.player, StatusEffectKind.DEFENSE, value,
                                self._duration(defn, self.config.shield_duration),
                                self.ctx.player.id)
        elif defn.kind == GemKind.POISON:
            self.ctx.apply_buff(self.ctx.enemy, StatusEffectKind.POISON, value,
                                self._duration(defn, self.config.poison_duration),
                                self.ctx.player.id)

        self._gain_mastery(gem, mastery)

        if defn.special == GemSpecial.DRAW_EXTRA and not self.ctx.someone_dead:
            drawn = self.inventory.draw(1)
            if drawn:
                self.ctx.emit(EventType.GEMS_DRAWN, self.ctx.player.id, self.ctx.player.id,
                              len(drawn), instance_ids=[g.instance_id for g in drawn])
        return True

    # =========================================================================
    # Value
    # =========================================================================

    def compute_value(self, gem: GemInstance) -> int:
        """Gem value after affinity, focus and special multipliers."""
        defn = gem.definition
        player = self.ctx.player
        affinity = get_class(player.player_class).favored_color == defn.color
        poisoned_target = (
            defn.special == GemSpecial.DOUBLE_VS_POISONED
            and player.player_class == PlayerClass.ROGUE
            and self.ctx.enemy.buffs.has(StatusEffectKind.POISON)
        )
        return gem_value(
            defn.base_value,
            affinity=affinity,
            focus=player.buffs.has(StatusEffectKind.FOCUS),
            powerful=defn.augmentation == Augmentation.POWERFUL,
            poisoned_target=poisoned_target,
            affinity_mult=self.config.affinity_mult,
            focus_mult=self.config.focus_mult,
            powerful_mult=self.config.powerful_mult,
            poisoned_mult=self.config.poisoned_target_mult,
        )

    def _duration(self, defn, default: int) -> int:
        duration = defn.duration or default
        if defn.augmentation == Augmentation.LASTING:
            duration += self.config.lasting_bonus
        return duration

    def _target_id(self, kind: GemKind) -> Optional[str]:
        if kind in (GemKind.ATTACK, GemKind.POISON):
            return self.ctx.enemy.id
        return self.ctx.player.id

    # =========================================================================
    # Effects
    # =========================================================================

    def _apply_attack(self, gem: GemInstance, value: int) -> None:
        ctx = self.ctx
        player, enemy = ctx.player, ctx.enemy
        damage = apply_curse(value, player.buffs.magnitude(StatusEffectKind.CURSE))
        ctx.hit(enemy, damage, player.id,
                piercing=gem.definition.augmentation == Augmentation.PIERCING,
                gem=gem.key)

        # Parry resolves before anyone's death is acted on.
        parry = enemy.buffs.get(StatusEffectKind.PARRYING)
        if parry is not None:
            reflected = parry_reflect(value, parry.magnitude)
            if reflected > 0:
                ctx.lose_health(player, reflected, enemy.id, reflect=True)
                ctx.emit(EventType.PARRY_REFLECT, enemy.id, player.id, reflected)

        if not player.is_dead:
            check_phase_shift(ctx)

    def apply_failure_effect(self, gem: GemInstance) -> None:
        """Backfire of a failed gem: self-damage and, for attacks, a possible stun."""
        defn = gem.definition
        ctx = self.ctx
        self_damage = failure_self_damage(defn.kind, defn.base_value,
                                          self.config.heal_failure_damage)
        if self_damage:
            ctx.lose_health(ctx.player, self_damage, ctx.player.id, backfire=defn.key)

        if defn.kind == GemKind.ATTACK and not ctx.player.is_dead:
            if ctx.rng.roll_rng.random_boolean(self.config.failure_stun_chance):
                ctx.apply_buff(ctx.player, StatusEffectKind.STUNNED, 0,
                               self.config.stun_duration, ctx.player.id)
        logger.debug("Gem %s failed (self damage %s)", defn.key, self_damage)

    def _gain_mastery(self, gem: GemInstance, before: int) -> None:
        after = self.meta.record_success(
            gem.definition,
            increment=self.config.mastery_increment,
            normal_cap=self.config.mastery_cap,
            advanced_cap=self.config.advanced_mastery_cap,
        )
        if after != before:
            self.ctx.emit(EventType.MASTERY_CHANGED, self.ctx.player.id, None, after - before,
                          gem=gem.key, mastery=after)
