"""
Round tick handlers for status effects.

Only effects that do something every round are registered here. Defense,
curse, focus and the rest just count down in StatusLedger.decrement.
"""

from __future__ import annotations

from ..content.effects import StatusEffectKind
from ..events import EventType
from . import StatusContext, status_tick


@status_tick(StatusEffectKind.POISON)
def poison_tick(ctx: StatusContext) -> None:
    """Poison: lose health, ignoring defense."""
    ctx.damage_holder(ctx.magnitude)


@status_tick(StatusEffectKind.BLEEDING)
def bleeding_tick(ctx: StatusContext) -> None:
    ctx.damage_holder(ctx.magnitude)


@status_tick(StatusEffectKind.BURNING)
def burning_tick(ctx: StatusContext) -> None:
    ctx.damage_holder(ctx.magnitude)


@status_tick(StatusEffectKind.REGENERATION)
def regeneration_tick(ctx: StatusContext) -> None:
    ctx.heal(ctx.holder, ctx.magnitude, StatusEffectKind.REGENERATION.value)


@status_tick(StatusEffectKind.RITUAL)
def ritual_tick(ctx: StatusContext) -> None:
    """Ritual: the holding enemy gains attack every round."""
    if ctx.holder is ctx.enemy:
        ctx.enemy.attack += ctx.magnitude
        ctx.emit(EventType.BUFF_APPLIED, ctx.enemy.id, ctx.enemy.id, ctx.magnitude,
                 kind="ritual_gain")
