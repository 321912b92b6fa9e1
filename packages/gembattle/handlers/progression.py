"""
Run progression - what happens between battles.

RunProgression listens for the end of each battle and moves the run to
its next stage:

    defeat                  -> GAME_OVER
    victory/flee at DAWN    -> DUSK, SHOP
    victory/flee at DUSK    -> DARK, SHOP
    victory at DARK (boss)  -> next day DAWN, CAMP (bag reset for the day)
    victory at DARK on the  -> COMPLETED, journey bonus paid into meta zenny
      last journey day

Pass an instance as the engine's `progression` argument.
"""

from __future__ import annotations

import logging

from ..config import DEFAULT_CONFIG, EngineConfig
from ..content.enemies import DayPhase
from ..errors import InvalidEncounterContext
from ..state.battle import BattleOutcome
from ..state.run import RunState, Stage

logger = logging.getLogger(__name__)


class RunProgression:
    """Stage transitions for one run."""

    def __init__(self, run: RunState, config: EngineConfig = DEFAULT_CONFIG):
        self.run = run
        self.config = config
        self.history = []

    def on_battle_end(self, outcome: BattleOutcome, day: int, phase: DayPhase,
                      reward: int = 0) -> Stage:
        self.history.append((outcome, day, phase, reward))
        run = self.run

        if outcome == BattleOutcome.DEFEAT:
            run.stage = Stage.GAME_OVER
            logger.info("Run over on day %d (%s)", day, phase.value)
            return run.stage

        if (outcome == BattleOutcome.VICTORY and phase.is_boss
                and day >= self.config.journey_days):
            run.stage = Stage.COMPLETED
            run.meta.meta_zenny += self.config.journey_bonus
            logger.info("Journey completed on day %d, +%d meta zenny",
                        day, self.config.journey_bonus)
            return run.stage

        new_day = run.advance_phase()
        if new_day:
            run.stage = Stage.CAMP
            run.inventory.reset_for_new_day()
            logger.info("Day %d cleared, camping before day %d", day, run.day)
        else:
            run.stage = Stage.SHOP
            logger.debug("Day %d %s done (%s), next %s",
                         day, phase.value, outcome.value, run.phase.value)
        return run.stage

    # =========================================================================
    # Stage actions
    # =========================================================================

    def camp_rest(self) -> int:
        """Heal a fraction of max health at camp. Returns health restored."""
        self._require_stage(Stage.CAMP)
        player = self.run.player
        healed = player.heal(int(player.max_health * self.config.camp_heal_fraction))
        logger.debug("Camp rest healed %d", healed)
        return healed

    def leave_shop(self) -> None:
        self._require_stage(Stage.SHOP)
        self.run.stage = Stage.BATTLE

    def leave_camp(self) -> None:
        self._require_stage(Stage.CAMP)
        self.run.stage = Stage.BATTLE

    def _require_stage(self, stage: Stage) -> None:
        if self.run.stage != stage:
            raise InvalidEncounterContext(
                f"Run is at {self.run.stage.value}, not {stage.value}", self.run.stage.value)
