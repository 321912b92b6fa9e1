"""
Content Tests

Gem catalog, player classes and enemy pools.
"""

import pytest

from packages.gembattle.content.classes import PlayerClass, get_class
from packages.gembattle.content.enemies import (
    ENEMY_POOL,
    MAX_AUTHORED_DAY,
    DayPhase,
    EnemyActionKind,
    encounter_pool,
    parse_action,
    pick_template,
)
from packages.gembattle.content.gems import (
    BASE_GEM_KEYS,
    CLASS_GEM_KEYS,
    GEM_CATALOG,
    Augmentation,
    GemKind,
    UpgradeKind,
    augment_definition,
    definition_from_dict,
    get_gem,
    mastery_cap,
    starter_gems,
    starting_bag,
    unlockable_gems,
    upgrade_definition,
    upgrade_options,
)
from packages.gembattle.state.rng import Random


class TestGemCatalog:
    """Authored gems and lookups."""

    def test_catalog_size(self):
        assert len(GEM_CATALOG) == 11

    def test_get_gem(self):
        gem = get_gem("red-attack")
        assert gem.kind == GemKind.ATTACK
        assert gem.base_value == 10
        assert gem.stamina_cost == 2

    def test_unknown_gem_raises(self):
        with pytest.raises(ValueError):
            get_gem("rainbow-laser")

    def test_base_success(self):
        assert get_gem("red-attack").base_success == 100
        assert get_gem("red-burst").base_success == 90

    def test_mastery_caps(self):
        assert mastery_cap(get_gem("grey-heal")) == 100
        assert mastery_cap(get_gem("blue-shield")) == 95

    def test_starter_gems_include_class_gem(self):
        keys = [g.key for g in starter_gems(PlayerClass.MAGE)]
        assert keys == BASE_GEM_KEYS + ["blue-strong-heal"]

    def test_unlockables_per_class(self):
        assert [g.key for g in unlockable_gems("knight")] == ["red-burst"]
        assert [g.key for g in unlockable_gems("rogue")] == ["green-poison", "green-backstab"]
        assert all(g.advanced for g in unlockable_gems("rogue"))


class TestStartingBag:
    """Opening collection."""

    @pytest.mark.parametrize("player_class", ["knight", "mage", "rogue"])
    def test_bag_composition(self, player_class):
        bag = starting_bag(player_class, Random(5))
        keys = [g.key for g in bag]
        assert len(bag) == 20
        for key in BASE_GEM_KEYS:
            assert keys.count(key) >= 2
        assert keys.count(CLASS_GEM_KEYS[player_class]) >= 3
        assert not any(g.advanced for g in bag)

    def test_capacity(self):
        assert len(starting_bag("knight", Random(1), capacity=12)) == 12


class TestUpgradesAndAugments:
    """Derived definitions."""

    def test_upgrade_floors_by_rarity(self):
        assert upgrade_definition(get_gem("red-attack")).base_value == 12    # 10 * 1.25
        assert upgrade_definition(get_gem("red-strong")).base_value == 19    # 15 * 1.3
        assert upgrade_definition(get_gem("red-burst")).base_value == 27     # 20 * 1.35

    def test_upgrade_keeps_key_and_counts(self):
        twice = upgrade_definition(upgrade_definition(get_gem("grey-heal")))
        assert twice.key == "grey-heal"
        assert twice.upgrade_count == 2

    def test_swift_cost_floor(self):
        assert augment_definition(get_gem("red-burst"), Augmentation.SWIFT).effective_cost == 2
        assert augment_definition(get_gem("green-attack"), "swift").effective_cost == 1

    def test_definition_from_dict(self):
        gem = augment_definition(upgrade_definition(get_gem("red-attack")), Augmentation.PIERCING)
        restored = definition_from_dict(gem.to_dict())
        assert restored == gem

    def test_upgrade_options_follow_class_and_color(self):
        options = upgrade_options(get_gem("blue-magic"), "mage", ["blue-shield"])
        assert [o.kind for o in options] == [UpgradeKind.DIRECT, UpgradeKind.CLASS,
                                             UpgradeKind.UNLOCKED]
        assert [o.definition.key for o in options[1:]] == ["blue-strong-heal", "blue-shield"]

        other = upgrade_options(get_gem("red-attack"), "mage", ["blue-shield"])
        assert [o.kind for o in other] == [UpgradeKind.DIRECT]


class TestClasses:
    """Player class definitions."""

    def test_lookup_by_name(self):
        assert get_class("MAGE").max_stamina == 4
        assert get_class(PlayerClass.KNIGHT).max_health == 40

    def test_unknown_class(self):
        with pytest.raises(ValueError):
            get_class("bard")


class TestEnemyPool:
    """Day/phase encounter tables."""

    def test_every_day_has_three_slots(self):
        for day, slots in ENEMY_POOL.items():
            assert set(slots) == set(DayPhase), day

    def test_bosses_have_phase_threshold(self):
        for slots in ENEMY_POOL.values():
            assert all(t.phase_threshold == 0.5 for t in slots[DayPhase.DARK])
            assert all(t.phase_threshold is None for t in slots[DayPhase.DAWN])

    def test_templates_never_list_ultimate(self):
        for slots in ENEMY_POOL.values():
            for templates in slots.values():
                for t in templates:
                    assert EnemyActionKind.ULTIMATE not in t.actions

    def test_day_one_dawn(self):
        template = pick_template(1, DayPhase.DAWN, Random(0))
        assert template.name == "Small Grunt"
        assert (template.max_health, template.attack, template.reward) == (20, 8, 3)

    def test_days_past_authored_are_scaled(self):
        extra = 2
        base = ENEMY_POOL[MAX_AUTHORED_DAY][DayPhase.DUSK][0]
        template = pick_template(MAX_AUTHORED_DAY + extra, DayPhase.DUSK, Random(0))
        assert template.max_health == base.max_health + 5 * extra
        assert template.attack == base.attack + extra
        assert template.reward == base.reward + extra

    def test_day_below_one_uses_day_one(self):
        pool, extra = encounter_pool(0, DayPhase.DARK)
        assert pool == ENEMY_POOL[1][DayPhase.DARK]
        assert extra == 0

    def test_phase_order(self):
        assert DayPhase.DAWN.next() == DayPhase.DUSK
        assert DayPhase.DUSK.next() == DayPhase.DARK
        assert DayPhase.DARK.next() is None
        assert DayPhase.DARK.is_boss


class TestParseAction:
    """Action identifiers from data."""

    def test_known(self):
        assert parse_action("Howl") == EnemyActionKind.HOWL

    def test_unknown_falls_back_to_attack(self, caplog):
        with caplog.at_level("WARNING"):
            assert parse_action("moonwalk") == EnemyActionKind.ATTACK
        assert "moonwalk" in caplog.text
