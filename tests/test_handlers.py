"""
Shop and Progression Tests

Shop transactions against a run's wallets and inventory, and the stage
transitions that follow each battle.
"""

import pytest

from packages.gembattle.config import EngineConfig
from packages.gembattle.content.effects import StatusEffectKind
from packages.gembattle.content.enemies import DayPhase
from packages.gembattle.content.gems import Augmentation, UpgradeKind, augment_definition, get_gem
from packages.gembattle.errors import InsufficientFunds, InvalidEncounterContext, InvalidSelection
from packages.gembattle.handlers import (
    RunProgression,
    ShopAction,
    ShopActionType,
    ShopHandler,
    ShopOffer,
    ShopState,
)
from packages.gembattle.handlers.shop_handler import offer_pool
from packages.gembattle.state.battle import BattleOutcome
from packages.gembattle.state.inventory import Zone
from packages.gembattle.state.rng import ScriptedRandom
from packages.gembattle.state.run import Stage

from conftest import hand_id, make_engine, make_enemy, make_run


def _shop(*keys, price=3):
    return ShopState(offers=[
        ShopOffer(gem=get_gem(k), price=price, slot_index=i) for i, k in enumerate(keys)
    ])


def _run(zenny=10, **kwargs):
    run = make_run("knight", ["red-attack", "grey-heal", "blue-magic", "green-attack"],
                   zenny=zenny, **kwargs)
    run.inventory.fill_hand()
    return run


# =============================================================================
# Offers
# =============================================================================

class TestOffers:

    def test_create_shop(self):
        run = _run()
        shop = ShopHandler.create_shop(run)
        assert len(shop.offers) == 3
        pool = {g.key for g in offer_pool(run)}
        assert all(o.gem.key in pool for o in shop.offers)
        assert [o.slot_index for o in shop.offers] == [0, 1, 2]

    def test_unlocked_gems_are_offered(self):
        run = _run()
        run.meta.unlock("knight", "red-burst")
        assert "red-burst" in {g.key for g in offer_pool(run)}
        shop = ShopHandler.create_shop(run, rng=ScriptedRandom([0.99, 0.99, 0.99]))
        assert [o.gem.key for o in shop.offers] == ["red-burst"] * 3

    def test_locked_gems_are_not_offered(self):
        keys = {g.key for g in offer_pool(_run())}
        assert "red-burst" not in keys
        assert "red-strong" in keys


# =============================================================================
# Run wallet actions
# =============================================================================

class TestBuy:

    def test_buy(self):
        run = _run()
        shop = _shop("red-strong")
        result = ShopHandler.execute_action(
            ShopAction(ShopActionType.BUY_GEM, offer_index=0), shop, run)
        assert result.success
        assert result.zenny_spent == 3
        assert run.player.zenny == 7
        assert run.inventory.total_count == 5
        assert run.inventory.bag[-1].key == "red-strong"
        assert shop.get_available_offers() == []

    def test_buy_twice(self):
        run = _run()
        shop = _shop("red-strong")
        action = ShopAction(ShopActionType.BUY_GEM, offer_index=0)
        ShopHandler.execute_action(action, shop, run)
        assert not ShopHandler.execute_action(action, shop, run).success
        assert run.player.zenny == 7

    def test_insufficient_funds(self):
        run = _run(zenny=2)
        with pytest.raises(InsufficientFunds) as exc:
            ShopHandler.execute_action(ShopAction(ShopActionType.BUY_GEM, offer_index=0),
                                       _shop("red-strong"), run)
        assert exc.value.required == 3
        assert run.inventory.total_count == 4

    def test_full_bag(self):
        run = make_run("knight", ["red-attack"] * 20, zenny=10)
        result = ShopHandler.execute_action(
            ShopAction(ShopActionType.BUY_GEM, offer_index=0), _shop("grey-heal"), run)
        assert not result.success
        assert run.player.zenny == 10
        assert run.inventory.total_count == 20


class TestDiscard:

    def test_discard_from_bag(self):
        run = _run()
        target = run.inventory.bag[0].instance_id
        result = ShopHandler.execute_action(
            ShopAction(ShopActionType.DISCARD_GEM, instance_id=target), _shop(), run)
        assert result.success
        assert run.inventory.find(target) is None
        assert run.player.zenny == 7

    def test_discard_unknown(self):
        run = _run()
        with pytest.raises(InvalidSelection):
            ShopHandler.execute_action(
                ShopAction(ShopActionType.DISCARD_GEM, instance_id=404), _shop(), run)
        assert run.player.zenny == 10


class TestUpgradeAndSwap:

    def test_upgrade_hand_gem(self):
        run = _run()
        gem = run.inventory.hand[0]
        result = ShopHandler.execute_action(
            ShopAction(ShopActionType.UPGRADE_GEM, instance_id=gem.instance_id), _shop(), run)
        assert result.success
        assert run.player.zenny == 5
        assert run.inventory.find(gem.instance_id).definition.upgrade_count == 1

    def test_once_per_visit(self):
        run = _run(zenny=20)
        shop = _shop()
        action = ShopAction(ShopActionType.UPGRADE_GEM,
                            instance_id=run.inventory.hand[0].instance_id)
        ShopHandler.execute_action(action, shop, run)
        result = ShopHandler.execute_action(action, shop, run)
        assert not result.success
        assert run.player.zenny == 15

    def test_upgrade_requires_hand(self):
        run = _run()
        with pytest.raises(InvalidSelection):
            ShopHandler.execute_action(
                ShopAction(ShopActionType.UPGRADE_GEM, instance_id=run.inventory.bag[0].instance_id),
                _shop(), run)

    def test_swap_blocks_upgrade(self):
        run = _run()
        shop = _shop()
        old = run.inventory.hand[0].instance_id
        result = ShopHandler.execute_action(
            ShopAction(ShopActionType.SWAP_GEM, instance_id=old), shop, run)
        assert result.success
        assert run.player.zenny == 8
        assert len(run.inventory.hand) == 3
        assert len(shop.freshly_swapped) == 1

        fresh = next(iter(shop.freshly_swapped))
        assert run.inventory.zone_of(fresh) == Zone.HAND
        upgrade = ShopHandler.execute_action(
            ShopAction(ShopActionType.UPGRADE_GEM, instance_id=fresh), shop, run)
        assert not upgrade.success
        assert run.player.zenny == 8


class TestUpgradeOptions:
    """Direct, class and unlocked-gem upgrades."""

    def _knight(self, *keys):
        run = make_run("knight", keys, zenny=10)
        run.inventory.fill_hand()
        return run

    def test_base_gem_options(self):
        run = self._knight("red-attack")
        options = ShopHandler.get_upgrade_options(run, hand_id(run, "red-attack"))
        assert [o.kind for o in options] == [UpgradeKind.DIRECT, UpgradeKind.CLASS]
        assert options[0].definition.base_value == 12
        assert options[1].definition.key == "red-strong"

    def test_unlocked_gem_of_same_color(self):
        run = self._knight("grey-heal", "red-attack")
        run.meta.unlock("knight", "red-burst")
        red = ShopHandler.get_upgrade_options(run, hand_id(run, "red-attack"))
        assert [o.definition.key for o in red] == ["red-attack", "red-strong", "red-burst"]
        grey = ShopHandler.get_upgrade_options(run, hand_id(run, "grey-heal"))
        assert [o.kind for o in grey] == [UpgradeKind.DIRECT]

    def test_options_need_hand_gem(self):
        run = make_run("knight", ["red-attack"])
        with pytest.raises(InvalidSelection):
            ShopHandler.get_upgrade_options(run, run.inventory.bag[0].instance_id)

    def test_class_upgrade(self):
        run = self._knight("red-attack")
        gem_id = hand_id(run, "red-attack")
        shop = _shop()
        result = ShopHandler.execute_action(
            ShopAction(ShopActionType.UPGRADE_GEM, instance_id=gem_id, option_index=1), shop, run)
        assert result.success
        assert result.item_id == "red-strong"
        assert run.player.zenny == 5
        assert run.inventory.find(gem_id).key == "red-strong"
        assert run.inventory.zone_of(gem_id) == Zone.HAND
        assert not shop.can_upgrade(gem_id)

    def test_unlocked_upgrade(self):
        run = make_run("rogue", ["green-attack"], zenny=10)
        run.inventory.fill_hand()
        run.meta.unlock("rogue", "green-poison")
        gem_id = hand_id(run, "green-attack")
        kinds = [o.kind for o in ShopHandler.get_upgrade_options(run, gem_id)]
        assert kinds == [UpgradeKind.DIRECT, UpgradeKind.CLASS, UpgradeKind.UNLOCKED]
        ShopHandler.execute_action(
            ShopAction(ShopActionType.UPGRADE_GEM, instance_id=gem_id, option_index=2), _shop(), run)
        assert run.inventory.find(gem_id).key == "green-poison"

    def test_bad_option_index(self):
        run = self._knight("red-attack")
        with pytest.raises(InvalidSelection):
            ShopHandler.execute_action(
                ShopAction(ShopActionType.UPGRADE_GEM, instance_id=hand_id(run, "red-attack"),
                           option_index=5), _shop(), run)
        assert run.player.zenny == 10
        assert run.inventory.find(hand_id(run, "red-attack")).definition.upgrade_count == 0


class TestAugment:

    def test_augment(self):
        run = _run()
        gem_id = run.inventory.hand[0].instance_id
        result = ShopHandler.execute_action(
            ShopAction(ShopActionType.AUGMENT_GEM, instance_id=gem_id,
                       augmentation=Augmentation.SWIFT), _shop(), run)
        assert result.success
        assert result.zenny_spent == 4
        assert run.player.zenny == 6
        assert run.inventory.find(gem_id).definition.augmentation == Augmentation.SWIFT

    def test_augmented_gem_in_battle(self):
        """Piercing red-strong: 22 against 10 defense lands 17."""
        run = make_run("knight", ["red-strong"], zenny=10)
        run.inventory.fill_hand()
        gem_id = hand_id(run, "red-strong")
        ShopHandler.execute_action(
            ShopAction(ShopActionType.AUGMENT_GEM, instance_id=gem_id,
                       augmentation=Augmentation.PIERCING), _shop(), run)

        engine = make_engine(run)
        engine.start_battle(make_enemy(health=40))
        engine.enemy.buffs.apply(StatusEffectKind.DEFENSE, 10, 2)
        engine.play_gems([gem_id])
        assert engine.enemy.health == 23

    def test_same_augmentation_is_not_charged(self):
        run = make_run("knight", [augment_definition(get_gem("red-attack"), "swift")], zenny=10)
        run.inventory.fill_hand()
        result = ShopHandler.execute_action(
            ShopAction(ShopActionType.AUGMENT_GEM, instance_id=run.inventory.hand[0].instance_id,
                       augmentation=Augmentation.SWIFT), _shop(), run)
        assert not result.success
        assert run.player.zenny == 10

    def test_shares_the_visit_limit_with_upgrades(self):
        run = _run()
        shop = _shop()
        gem_id = run.inventory.hand[0].instance_id
        ShopHandler.execute_action(ShopAction(ShopActionType.UPGRADE_GEM, instance_id=gem_id),
                                   shop, run)
        result = ShopHandler.execute_action(
            ShopAction(ShopActionType.AUGMENT_GEM, instance_id=gem_id,
                       augmentation=Augmentation.LASTING), shop, run)
        assert not result.success
        assert run.player.zenny == 5

    def test_needs_an_augmentation(self):
        run = _run()
        with pytest.raises(ValueError):
            ShopHandler.execute_action(
                ShopAction(ShopActionType.AUGMENT_GEM, instance_id=run.inventory.hand[0].instance_id),
                _shop(), run)
        assert run.player.zenny == 10

    def test_insufficient_funds(self):
        run = _run(zenny=3)
        with pytest.raises(InsufficientFunds) as exc:
            ShopHandler.execute_action(
                ShopAction(ShopActionType.AUGMENT_GEM, instance_id=run.inventory.hand[0].instance_id,
                           augmentation=Augmentation.POWERFUL), _shop(), run)
        assert exc.value.required == 4


class TestHeal:

    def test_heal(self):
        run = _run(health=30)
        result = ShopHandler.execute_action(ShopAction(ShopActionType.HEAL), _shop(), run)
        assert result.success
        assert run.player.health == 40
        assert run.player.zenny == 7

    def test_heal_clamps(self):
        run = _run(health=35)
        ShopHandler.execute_action(ShopAction(ShopActionType.HEAL), _shop(), run)
        assert run.player.health == 40

    def test_full_health_is_not_charged(self):
        run = _run()
        result = ShopHandler.execute_action(ShopAction(ShopActionType.HEAL), _shop(), run)
        assert not result.success
        assert run.player.zenny == 10


# =============================================================================
# Meta wallet actions
# =============================================================================

class TestMetaWallet:

    def test_unlock(self):
        run = _run()
        run.meta.meta_zenny = 60
        result = ShopHandler.execute_action(
            ShopAction(ShopActionType.UNLOCK_GEM, gem_key="red-burst"), _shop(), run)
        assert result.success
        assert run.meta.meta_zenny == 10
        assert run.meta.unlocked_for("knight") == ["red-burst"]

    def test_unlock_twice(self):
        run = _run()
        run.meta.meta_zenny = 100
        action = ShopAction(ShopActionType.UNLOCK_GEM, gem_key="red-burst")
        ShopHandler.execute_action(action, _shop(), run)
        assert not ShopHandler.execute_action(action, _shop(), run).success
        assert run.meta.meta_zenny == 50

    def test_unlock_other_class(self):
        run = _run()
        run.meta.meta_zenny = 100
        result = ShopHandler.execute_action(
            ShopAction(ShopActionType.UNLOCK_GEM, gem_key="green-poison"), _shop(), run)
        assert not result.success
        assert run.meta.meta_zenny == 100

    def test_unlock_without_meta_zenny(self):
        run = _run()
        run.meta.meta_zenny = 49
        with pytest.raises(InsufficientFunds) as exc:
            ShopHandler.execute_action(
                ShopAction(ShopActionType.UNLOCK_GEM, gem_key="red-burst"), _shop(), run)
        assert exc.value.wallet == "meta zenny"

    def test_transfer_and_withdraw(self):
        run = _run(zenny=5)
        ShopHandler.transfer_to_meta(run, 3)
        assert (run.player.zenny, run.meta.meta_zenny) == (2, 3)
        ShopHandler.withdraw_from_meta(run, 1)
        assert (run.player.zenny, run.meta.meta_zenny) == (3, 2)

    def test_transfer_limits(self):
        run = _run(zenny=5)
        with pytest.raises(ValueError):
            ShopHandler.transfer_to_meta(run, 0)
        with pytest.raises(InsufficientFunds):
            ShopHandler.transfer_to_meta(run, 6)
        with pytest.raises(InsufficientFunds):
            ShopHandler.withdraw_from_meta(run, 1)
        with pytest.raises(ValueError):
            ShopHandler.withdraw_from_meta(run, -1)


class TestAvailableActions:

    def test_broke_and_healthy(self):
        run = _run(zenny=0)
        actions = ShopHandler.get_available_actions(_shop("grey-heal"), run)
        assert [a.action_type for a in actions] == [ShopActionType.LEAVE]

    def test_listing(self):
        run = _run(zenny=10, health=20)
        run.meta.meta_zenny = 50
        types = [a.action_type for a in
                 ShopHandler.get_available_actions(_shop("grey-heal", "red-strong"), run)]
        assert types.count(ShopActionType.BUY_GEM) == 2
        assert types.count(ShopActionType.DISCARD_GEM) == 4
        assert types.count(ShopActionType.UPGRADE_GEM) == 3
        assert types.count(ShopActionType.SWAP_GEM) == 3
        assert ShopActionType.HEAL in types
        assert types.count(ShopActionType.UNLOCK_GEM) == 1
        assert ShopActionType.TRANSFER_TO_META in types
        assert ShopActionType.WITHDRAW_FROM_META in types

    def test_lists_each_upgrade_option_and_augmentation(self):
        run = make_run("knight", ["red-attack"], zenny=10)
        run.inventory.fill_hand()
        run.meta.unlock("knight", "red-burst")
        actions = ShopHandler.get_available_actions(_shop(), run)
        upgrades = [a.option_index for a in actions if a.action_type == ShopActionType.UPGRADE_GEM]
        assert upgrades == [0, 1, 2]
        augments = [a.augmentation for a in actions if a.action_type == ShopActionType.AUGMENT_GEM]
        assert augments == list(Augmentation)

    def test_changed_gem_is_not_listed_again(self):
        run = make_run("knight", ["red-attack"], zenny=20)
        run.inventory.fill_hand()
        shop = _shop()
        ShopHandler.execute_action(
            ShopAction(ShopActionType.UPGRADE_GEM, instance_id=hand_id(run, "red-attack")), shop, run)
        types = [a.action_type for a in ShopHandler.get_available_actions(shop, run)]
        assert ShopActionType.UPGRADE_GEM not in types
        assert ShopActionType.AUGMENT_GEM not in types

    def test_leave(self):
        result = ShopHandler.execute_action(ShopAction(ShopActionType.LEAVE), _shop(), _run())
        assert result.success and result.left_shop

    def test_summary(self):
        shop = _shop("grey-heal", "red-strong")
        shop.offers[0].purchased = True
        text = ShopHandler.get_shop_summary(shop)
        assert "=== SHOP ===" in text
        assert "[SOLD]" in text
        assert "Strong Attack" in text


# =============================================================================
# Progression
# =============================================================================

class TestRunProgression:

    def test_victory_goes_to_shop(self):
        run = _run()
        progression = RunProgression(run)
        assert progression.on_battle_end(BattleOutcome.VICTORY, 1, DayPhase.DAWN, 3) == Stage.SHOP
        assert run.phase == DayPhase.DUSK
        progression.leave_shop()
        assert run.stage == Stage.BATTLE

    def test_flee_also_advances(self):
        run = _run(phase=DayPhase.DUSK)
        RunProgression(run).on_battle_end(BattleOutcome.FLED, 1, DayPhase.DUSK)
        assert run.phase == DayPhase.DARK
        assert run.stage == Stage.SHOP

    def test_boss_win_starts_new_day(self):
        run = _run(phase=DayPhase.DARK)
        run.inventory.play([run.inventory.hand[0].instance_id], stamina=3)
        progression = RunProgression(run)
        assert progression.on_battle_end(BattleOutcome.VICTORY, 1, DayPhase.DARK, 10) == Stage.CAMP
        assert (run.day, run.phase) == (2, DayPhase.DAWN)
        assert run.inventory.played == []
        assert run.inventory.total_count == 4

    def test_defeat_ends_run(self):
        run = _run()
        progression = RunProgression(run)
        assert progression.on_battle_end(BattleOutcome.DEFEAT, 1, DayPhase.DAWN) == Stage.GAME_OVER
        assert run.phase == DayPhase.DAWN
        assert progression.history == [(BattleOutcome.DEFEAT, 1, DayPhase.DAWN, 0)]

    def test_camp_rest(self):
        run = _run(health=10, phase=DayPhase.DARK)
        progression = RunProgression(run)
        progression.on_battle_end(BattleOutcome.VICTORY, 1, DayPhase.DARK, 10)
        assert progression.camp_rest() == 10
        assert run.player.health == 20
        progression.leave_camp()
        assert run.stage == Stage.BATTLE

    def test_wrong_stage(self):
        progression = RunProgression(_run())
        with pytest.raises(InvalidEncounterContext):
            progression.camp_rest()
        with pytest.raises(InvalidEncounterContext):
            progression.leave_shop()

    def test_wired_to_engine(self):
        run = make_run("knight", ["red-attack"] * 3)
        engine = make_engine(run, progression=RunProgression(run))
        engine.start_battle(make_enemy())
        engine.flee()
        assert run.stage == Stage.SHOP
        assert run.phase == DayPhase.DUSK


class TestJourney:
    """The run ends in victory after the last day's boss."""

    def test_final_boss_completes_journey(self):
        run = _run(phase=DayPhase.DARK, day=7)
        run.meta.meta_zenny = 5
        progression = RunProgression(run)
        stage = progression.on_battle_end(BattleOutcome.VICTORY, 7, DayPhase.DARK, 25)
        assert stage == Stage.COMPLETED
        assert run.meta.meta_zenny == 105
        assert (run.day, run.phase) == (7, DayPhase.DARK)

    def test_earlier_boss_still_camps(self):
        run = _run(phase=DayPhase.DARK, day=6)
        assert RunProgression(run).on_battle_end(BattleOutcome.VICTORY, 6, DayPhase.DARK) \
            == Stage.CAMP
        assert run.day == 7
        assert run.meta.meta_zenny == 0

    def test_configured_length(self):
        run = _run(phase=DayPhase.DARK)
        progression = RunProgression(run, EngineConfig(journey_days=1, journey_bonus=40))
        progression.on_battle_end(BattleOutcome.VICTORY, 1, DayPhase.DARK, 10)
        assert run.stage == Stage.COMPLETED
        assert run.meta.meta_zenny == 40

    def test_completed_run_cannot_battle(self):
        run = make_run("knight", ["red-attack"] * 3, phase=DayPhase.DARK, day=7)
        engine = make_engine(run, progression=RunProgression(run))
        engine.start_battle(make_enemy(health=10, boss=True))
        engine.play_gems([hand_id(run, "red-attack")])
        assert run.stage == Stage.COMPLETED
        assert run.stage.is_final
        assert run.meta.meta_zenny == 100
        with pytest.raises(InvalidEncounterContext):
            engine.start_battle(make_enemy())

    def test_game_over_cannot_battle(self):
        run = make_run("knight", ["red-attack"] * 3)
        run.stage = Stage.GAME_OVER
        with pytest.raises(InvalidEncounterContext):
            make_engine(run).start_battle(make_enemy())
