"""
Enemy action handlers.

Magnitudes derive from the enemy's current attack (A), floored:
    attack   A               defend   defense 0.8A, 2 turns
    howl     +0.5A, 2 turns  enrage   A += 0.3A permanently
    steal    1-3 zenny       summon   minion +0.3A, 3 turns
    poison   0.3A, 3 turns   curse    -30% player damage, 2 turns
    heal     0.2 max health  harden   defense 2A, 2 turns
    breathe  1.5A            tail     0.7A + stun
    bite     1.3A, 30% stun  charge   next attack x2
    web      webbed, 2 turns phase    phased, 2 turns
    parry    50% reflect     ritual   +1 attack per round
    rend     0.5A + bleed    ignite   0.6A + burn
    mend     regeneration    ultimate 2A (boss phase shift only)

Durations count round ticks. A buff the enemy gives itself is ticked once
right after its own action, so two turns means it lasts until the end of
its next action.
"""

from __future__ import annotations

from ..content.effects import PERMANENT_DURATION, StatusEffectKind
from ..content.enemies import EnemyActionKind
from ..events import EventType
from . import ActionContext, enemy_action


# =============================================================================
# Direct damage
# =============================================================================

@enemy_action(EnemyActionKind.ATTACK)
def attack(ctx: ActionContext) -> None:
    """Basic attack; doubled once after a charge."""
    damage = ctx.attack
    if ctx.enemy.charged:
        damage *= 2
        ctx.enemy.charged = False
    ctx.strike(damage)


@enemy_action(EnemyActionKind.BREATHE)
def breathe(ctx: ActionContext) -> None:
    ctx.strike(int(ctx.attack * 1.5))


@enemy_action(EnemyActionKind.TAIL)
def tail(ctx: ActionContext) -> None:
    ctx.strike(int(ctx.attack * 0.7))
    ctx.apply_buff(ctx.player, StatusEffectKind.STUNNED, 0, ctx.config.stun_duration, ctx.enemy.id)


@enemy_action(EnemyActionKind.BITE)
def bite(ctx: ActionContext) -> None:
    ctx.strike(int(ctx.attack * 1.3))
    if ctx.rng.ai_rng.random_boolean(ctx.config.bite_stun_chance):
        ctx.apply_buff(ctx.player, StatusEffectKind.STUNNED, 0, ctx.config.stun_duration,
                       ctx.enemy.id)


@enemy_action(EnemyActionKind.ULTIMATE)
def ultimate(ctx: ActionContext) -> None:
    ctx.enemy.pending_ultimate = False
    ctx.strike(ctx.attack * 2)


@enemy_action(EnemyActionKind.REND)
def rend(ctx: ActionContext) -> None:
    ctx.strike(int(ctx.attack * 0.5))
    ctx.apply_buff(ctx.player, StatusEffectKind.BLEEDING, max(1, int(ctx.attack * 0.2)), 3,
                   ctx.enemy.id)


@enemy_action(EnemyActionKind.IGNITE)
def ignite(ctx: ActionContext) -> None:
    ctx.strike(int(ctx.attack * 0.6))
    ctx.apply_buff(ctx.player, StatusEffectKind.BURNING, max(1, int(ctx.attack * 0.25)), 2,
                   ctx.enemy.id)


@enemy_action(EnemyActionKind.STEAL)
def steal(ctx: ActionContext) -> None:
    """Take up to 3 zenny; with an empty wallet, attack instead."""
    if ctx.player.zenny <= 0:
        attack(ctx)
        return
    amount = min(ctx.player.zenny, ctx.rng.ai_rng.random_int_range(1, 3))
    ctx.player.zenny -= amount
    ctx.emit(EventType.ZENNY_CHANGED, ctx.enemy.id, ctx.player.id, -amount, reason="steal")


# =============================================================================
# Self buffs
# =============================================================================

@enemy_action(EnemyActionKind.DEFEND)
def defend(ctx: ActionContext) -> None:
    ctx.apply_buff(ctx.enemy, StatusEffectKind.DEFENSE, int(ctx.attack * 0.8), 2, ctx.enemy.id)


@enemy_action(EnemyActionKind.HARDEN)
def harden(ctx: ActionContext) -> None:
    ctx.apply_buff(ctx.enemy, StatusEffectKind.DEFENSE, ctx.attack * 2, 2, ctx.enemy.id)


@enemy_action(EnemyActionKind.HOWL)
def howl(ctx: ActionContext) -> None:
    ctx.apply_buff(ctx.enemy, StatusEffectKind.ATTACK_BOOST, int(ctx.attack * 0.5), 2,
                   ctx.enemy.id)


@enemy_action(EnemyActionKind.ENRAGE)
def enrage(ctx: ActionContext) -> None:
    gain = int(ctx.attack * 0.3)
    ctx.enemy.attack += gain
    ctx.emit(EventType.BUFF_APPLIED, ctx.enemy.id, ctx.enemy.id, gain, kind="enrage",
             duration=PERMANENT_DURATION)


@enemy_action(EnemyActionKind.SUMMON)
def summon(ctx: ActionContext) -> None:
    ctx.apply_buff(ctx.enemy, StatusEffectKind.MINION, int(ctx.attack * 0.3), 3, ctx.enemy.id)


@enemy_action(EnemyActionKind.HEAL)
def heal(ctx: ActionContext) -> None:
    ctx.heal(ctx.enemy, int(ctx.enemy.max_health * 0.2), ctx.enemy.id)


@enemy_action(EnemyActionKind.MEND)
def mend(ctx: ActionContext) -> None:
    ctx.apply_buff(ctx.enemy, StatusEffectKind.REGENERATION, max(1, int(ctx.attack * 0.3)), 3,
                   ctx.enemy.id)


@enemy_action(EnemyActionKind.CHARGE)
def charge(ctx: ActionContext) -> None:
    ctx.enemy.charged = True
    ctx.emit(EventType.BUFF_APPLIED, ctx.enemy.id, ctx.enemy.id, 0, kind="charge", duration=1)


@enemy_action(EnemyActionKind.PHASE)
def phase(ctx: ActionContext) -> None:
    ctx.apply_buff(ctx.enemy, StatusEffectKind.PHASED, 0, 2, ctx.enemy.id)


@enemy_action(EnemyActionKind.PARRY)
def parry(ctx: ActionContext) -> None:
    ctx.apply_buff(ctx.enemy, StatusEffectKind.PARRYING, 50, 2, ctx.enemy.id)


@enemy_action(EnemyActionKind.RITUAL)
def ritual(ctx: ActionContext) -> None:
    current = ctx.enemy.buffs.magnitude(StatusEffectKind.RITUAL)
    ctx.apply_buff(ctx.enemy, StatusEffectKind.RITUAL, current + 1, PERMANENT_DURATION,
                   ctx.enemy.id)


# =============================================================================
# Player debuffs
# =============================================================================

@enemy_action(EnemyActionKind.POISON)
def poison(ctx: ActionContext) -> None:
    ctx.apply_buff(ctx.player, StatusEffectKind.POISON, max(1, int(ctx.attack * 0.3)), 3,
                   ctx.enemy.id)


@enemy_action(EnemyActionKind.CURSE)
def curse(ctx: ActionContext) -> None:
    ctx.apply_buff(ctx.player, StatusEffectKind.CURSE, 30, 2, ctx.enemy.id)


@enemy_action(EnemyActionKind.WEB)
def web(ctx: ActionContext) -> None:
    ctx.apply_buff(ctx.player, StatusEffectKind.WEBBED, ctx.config.webbed_penalty, 2,
                   ctx.enemy.id)
