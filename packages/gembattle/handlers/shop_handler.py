"""
Shop Handler - between-battle shop and meta-progression actions.

Handles:
- Gem offers (drawn from the class's starter and unlocked gems)
- Buying, discarding, upgrading, augmenting and swapping gems
- Healing for zenny
- Unlocking advanced gems with meta zenny
- Moving zenny between the run wallet and the meta wallet

Every paid action checks the wallet first and raises InsufficientFunds
without touching anything; a bad gem reference raises InvalidSelection.
Actions that are merely pointless (healing at full health, unlocking a gem
twice) come back as an unsuccessful ShopResult.

Usage:
    shop = ShopHandler.create_shop(run)
    actions = ShopHandler.get_available_actions(shop, run)
    result = ShopHandler.execute_action(actions[0], shop, run)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, List, Optional, Set

from ..config import DEFAULT_CONFIG, EngineConfig
from ..content.gems import (
    Augmentation,
    GemDefinition,
    UpgradeOption,
    augment_definition,
    get_gem,
    starter_gems,
    unlockable_gems,
    upgrade_options,
)
from ..errors import InsufficientFunds, InvalidSelection
from ..state.inventory import Zone

if TYPE_CHECKING:
    from ..state.rng import Random
    from ..state.run import RunState

logger = logging.getLogger(__name__)


# ============================================================================
# SHOP STATE
# ============================================================================

@dataclass
class ShopOffer:
    """A gem for sale."""
    gem: GemDefinition
    price: int
    purchased: bool = False
    slot_index: int = 0


@dataclass
class ShopState:
    """
    State of one shop visit.

    Upgrades and augmentations together are limited to once per gem
    instance per visit, and a gem brought into the hand by a swap cannot be
    changed in the same visit.
    """
    offers: List[ShopOffer] = field(default_factory=list)
    upgraded_this_visit: Set[int] = field(default_factory=set)
    freshly_swapped: Set[int] = field(default_factory=set)

    def get_available_offers(self) -> List[ShopOffer]:
        return [o for o in self.offers if not o.purchased]

    def can_upgrade(self, instance_id: int) -> bool:
        return (instance_id not in self.upgraded_this_visit
                and instance_id not in self.freshly_swapped)


def offer_pool(run_state: RunState) -> List[GemDefinition]:
    """Gems the shop may offer: class starters plus anything unlocked."""
    player_class = run_state.player.player_class
    pool = starter_gems(player_class)
    for key in run_state.meta.unlocked_for(player_class):
        pool.append(get_gem(key))
    return pool


def generate_offers(run_state: RunState, rng: Random,
                    config: EngineConfig = DEFAULT_CONFIG) -> ShopState:
    """Roll the visit's offers from the loot stream."""
    pool = offer_pool(run_state)
    offers = [
        ShopOffer(gem=rng.choice(pool), price=config.buy_gem_cost, slot_index=i)
        for i in range(config.shop_offer_slots)
    ]
    return ShopState(offers=offers)


# ============================================================================
# SHOP ACTIONS
# ============================================================================

class ShopActionType(Enum):
    """Types of actions available in the shop."""
    BUY_GEM = auto()
    DISCARD_GEM = auto()
    UPGRADE_GEM = auto()
    AUGMENT_GEM = auto()
    SWAP_GEM = auto()
    HEAL = auto()
    UNLOCK_GEM = auto()
    TRANSFER_TO_META = auto()
    WITHDRAW_FROM_META = auto()
    LEAVE = auto()


@dataclass(frozen=True)
class ShopAction:
    """
    An action that can be taken in the shop.

    offer_index: slot of the offer (BUY_GEM)
    instance_id: gem instance (DISCARD_GEM, UPGRADE_GEM, AUGMENT_GEM, SWAP_GEM)
    option_index: position in ShopHandler.get_upgrade_options (UPGRADE_GEM)
    augmentation: augmentation to attach (AUGMENT_GEM)
    gem_key: gem to unlock (UNLOCK_GEM)
    amount: zenny to move (TRANSFER_TO_META, WITHDRAW_FROM_META)
    """
    action_type: ShopActionType
    offer_index: int = -1
    instance_id: int = -1
    option_index: int = 0
    augmentation: Optional[Augmentation] = None
    gem_key: str = ""
    amount: int = 0


@dataclass
class ShopResult:
    """Result of a shop transaction."""
    success: bool
    action_type: ShopActionType
    item_id: str = ""
    item_name: str = ""
    zenny_spent: int = 0
    message: str = ""
    left_shop: bool = False


# ============================================================================
# SHOP HANDLER CLASS
# ============================================================================

class ShopHandler:
    """
    Handles all shop interactions.

    Usage:
        1. When entering the shop: shop = ShopHandler.create_shop(run)
        2. Get actions: actions = ShopHandler.get_available_actions(shop, run)
        3. Execute action: result = ShopHandler.execute_action(action, shop, run)
    """

    @staticmethod
    def create_shop(run_state: RunState, rng: Optional[Random] = None,
                    config: EngineConfig = DEFAULT_CONFIG) -> ShopState:
        """Create the shop for the current visit (offers from the loot stream by default)."""
        shop = generate_offers(run_state, rng or run_state.rng.loot_rng, config)
        logger.debug("Shop offers: %s", [o.gem.key for o in shop.offers])
        return shop

    @staticmethod
    def get_available_actions(shop_state: ShopState, run_state: RunState,
                              config: EngineConfig = DEFAULT_CONFIG) -> List[ShopAction]:
        """
        Get every shop action the player can currently afford.

        Meta transfers are listed once for the whole balance.
        """
        actions = [ShopAction(action_type=ShopActionType.LEAVE)]
        player = run_state.player
        inventory = run_state.inventory
        zenny = player.zenny

        if zenny >= config.buy_gem_cost and inventory.total_count < config.bag_capacity:
            for offer in shop_state.get_available_offers():
                actions.append(ShopAction(ShopActionType.BUY_GEM, offer_index=offer.slot_index))

        if zenny >= config.discard_gem_cost and inventory.total_count > 1:
            for gem in inventory.all_instances():
                actions.append(ShopAction(ShopActionType.DISCARD_GEM, instance_id=gem.instance_id))

        changeable = [g for g in inventory.hand if shop_state.can_upgrade(g.instance_id)]
        if zenny >= config.upgrade_gem_cost:
            for gem in changeable:
                options = ShopHandler.get_upgrade_options(run_state, gem.instance_id)
                for i in range(len(options)):
                    actions.append(ShopAction(ShopActionType.UPGRADE_GEM,
                                              instance_id=gem.instance_id, option_index=i))

        if zenny >= config.augment_gem_cost:
            for gem in changeable:
                for augmentation in Augmentation:
                    if gem.definition.augmentation != augmentation:
                        actions.append(ShopAction(ShopActionType.AUGMENT_GEM,
                                                  instance_id=gem.instance_id,
                                                  augmentation=augmentation))

        if zenny >= config.swap_gem_cost:
            for gem in inventory.hand:
                actions.append(ShopAction(ShopActionType.SWAP_GEM, instance_id=gem.instance_id))

        if zenny >= config.heal_cost and player.health < player.max_health:
            actions.append(ShopAction(ShopActionType.HEAL))

        if run_state.meta.meta_zenny >= config.unlock_gem_cost:
            unlocked = set(run_state.meta.unlocked_for(player.player_class))
            for gem in unlockable_gems(player.player_class):
                if gem.key not in unlocked:
                    actions.append(ShopAction(ShopActionType.UNLOCK_GEM, gem_key=gem.key))

        if zenny > 0:
            actions.append(ShopAction(ShopActionType.TRANSFER_TO_META, amount=zenny))
        if run_state.meta.meta_zenny > 0:
            actions.append(ShopAction(ShopActionType.WITHDRAW_FROM_META,
                                      amount=run_state.meta.meta_zenny))
        return actions

    @staticmethod
    def execute_action(action: ShopAction, shop_state: ShopState, run_state: RunState,
                       config: EngineConfig = DEFAULT_CONFIG) -> ShopResult:
        """
        Execute a shop action.

        Raises InsufficientFunds or InvalidSelection before any change.
        """
        if action.action_type == ShopActionType.LEAVE:
            return ShopResult(
                success=True,
                action_type=action.action_type,
                message="Left the shop",
                left_shop=True,
            )

        elif action.action_type == ShopActionType.BUY_GEM:
            return ShopHandler._buy_gem(action, shop_state, run_state, config)

        elif action.action_type == ShopActionType.DISCARD_GEM:
            return ShopHandler._discard_gem(action, run_state, config)

        elif action.action_type == ShopActionType.UPGRADE_GEM:
            return ShopHandler._upgrade_gem(action, shop_state, run_state, config)

        elif action.action_type == ShopActionType.AUGMENT_GEM:
            return ShopHandler._augment_gem(action, shop_state, run_state, config)

        elif action.action_type == ShopActionType.SWAP_GEM:
            return ShopHandler._swap_gem(action, shop_state, run_state, config)

        elif action.action_type == ShopActionType.HEAL:
            return ShopHandler._heal(action, run_state, config)

        elif action.action_type == ShopActionType.UNLOCK_GEM:
            return ShopHandler._unlock_gem(action, run_state, config)

        elif action.action_type == ShopActionType.TRANSFER_TO_META:
            return ShopHandler.transfer_to_meta(run_state, action.amount)

        elif action.action_type == ShopActionType.WITHDRAW_FROM_META:
            return ShopHandler.withdraw_from_meta(run_state, action.amount)

        return ShopResult(
            success=False,
            action_type=action.action_type,
            message="Unknown action type",
        )

    # ------------------------------------------------------------------------
    # Run zenny actions
    # ------------------------------------------------------------------------

    @staticmethod
    def _charge(run_state: RunState, cost: int) -> None:
        if run_state.player.zenny < cost:
            raise InsufficientFunds(cost, run_state.player.zenny)

    @staticmethod
    def _buy_gem(action: ShopAction, shop_state: ShopState, run_state: RunState,
                 config: EngineConfig) -> ShopResult:
        """Buy an offered gem into the bag."""
        offer = None
        for o in shop_state.offers:
            if o.slot_index == action.offer_index and not o.purchased:
                offer = o
                break

        if offer is None:
            return ShopResult(
                success=False,
                action_type=action.action_type,
                message="Gem not found or already purchased",
            )

        ShopHandler._charge(run_state, offer.price)

        if run_state.inventory.total_count >= config.bag_capacity:
            return ShopResult(
                success=False,
                action_type=action.action_type,
                item_id=offer.gem.key,
                item_name=offer.gem.name,
                message="Gem bag is full",
            )

        run_state.player.zenny -= offer.price
        run_state.inventory.add_gem(offer.gem, Zone.BAG)
        offer.purchased = True
        logger.debug("Bought %s for %d", offer.gem.key, offer.price)

        return ShopResult(
            success=True,
            action_type=action.action_type,
            item_id=offer.gem.key,
            item_name=offer.gem.name,
            zenny_spent=offer.price,
            message=f"Purchased {offer.gem.name} for {offer.price} zenny",
        )

    @staticmethod
    def _discard_gem(action: ShopAction, run_state: RunState,
                     config: EngineConfig) -> ShopResult:
        """Remove a gem from the collection for good."""
        cost = config.discard_gem_cost
        ShopHandler._charge(run_state, cost)

        inventory = run_state.inventory
        if inventory.find(action.instance_id) is None:
            raise InvalidSelection([action.instance_id], "inventory")

        gem = inventory.remove_gem(action.instance_id)
        run_state.player.zenny -= cost

        return ShopResult(
            success=True,
            action_type=action.action_type,
            item_id=gem.key,
            item_name=gem.definition.name,
            zenny_spent=cost,
            message=f"Discarded {gem.definition.name} for {cost} zenny",
        )

    @staticmethod
    def get_upgrade_options(run_state: RunState, instance_id: int) -> List[UpgradeOption]:
        """
        Upgrade choices for a Hand gem: direct, class, then unlocked gems.

        Raises InvalidSelection if the gem is not in the Hand.
        """
        gem = run_state.inventory.hand_gems([instance_id])[0]
        player_class = run_state.player.player_class
        return upgrade_options(gem.definition, player_class,
                               run_state.meta.unlocked_for(player_class))

    @staticmethod
    def _upgrade_gem(action: ShopAction, shop_state: ShopState, run_state: RunState,
                     config: EngineConfig) -> ShopResult:
        """Replace a Hand gem's definition with the chosen upgrade option."""
        cost = config.upgrade_gem_cost
        ShopHandler._charge(run_state, cost)

        inventory = run_state.inventory
        gem = inventory.hand_gems([action.instance_id])[0]
        options = ShopHandler.get_upgrade_options(run_state, gem.instance_id)
        if not 0 <= action.option_index < len(options):
            raise InvalidSelection([gem.instance_id], f"upgrade option {action.option_index}")

        if not shop_state.can_upgrade(gem.instance_id):
            return ShopResult(
                success=False,
                action_type=action.action_type,
                item_id=gem.key,
                item_name=gem.definition.name,
                message="Gem cannot be upgraded again this visit",
            )

        option = options[action.option_index]
        old_name = gem.definition.name
        inventory.upgrade_in_hand(gem.instance_id, option.definition)
        shop_state.upgraded_this_visit.add(gem.instance_id)
        run_state.player.zenny -= cost
        logger.debug("Upgraded %d (%s) to %s", gem.instance_id, option.kind.value,
                     option.definition.key)

        return ShopResult(
            success=True,
            action_type=action.action_type,
            item_id=option.definition.key,
            item_name=option.definition.name,
            zenny_spent=cost,
            message=f"Upgraded {old_name} to {option.definition.name} "
                    f"({option.definition.base_value})",
        )

    @staticmethod
    def _augment_gem(action: ShopAction, shop_state: ShopState, run_state: RunState,
                     config: EngineConfig) -> ShopResult:
        """Attach an augmentation to a Hand gem, replacing any it had."""
        cost = config.augment_gem_cost
        ShopHandler._charge(run_state, cost)

        inventory = run_state.inventory
        gem = inventory.hand_gems([action.instance_id])[0]
        if action.augmentation is None:
            raise ValueError("AUGMENT_GEM needs an augmentation")
        augmentation = Augmentation(action.augmentation)

        if gem.definition.augmentation == augmentation:
            return ShopResult(
                success=False,
                action_type=action.action_type,
                item_id=gem.key,
                item_name=gem.definition.name,
                message=f"{gem.definition.name} is already {augmentation.value}",
            )
        if not shop_state.can_upgrade(gem.instance_id):
            return ShopResult(
                success=False,
                action_type=action.action_type,
                item_id=gem.key,
                item_name=gem.definition.name,
                message="Gem cannot be changed again this visit",
            )

        inventory.upgrade_in_hand(gem.instance_id,
                                  augment_definition(gem.definition, augmentation))
        shop_state.upgraded_this_visit.add(gem.instance_id)
        run_state.player.zenny -= cost

        return ShopResult(
            success=True,
            action_type=action.action_type,
            item_id=gem.key,
            item_name=gem.definition.name,
            zenny_spent=cost,
            message=f"Made {gem.definition.name} {augmentation.value} for {cost} zenny",
        )

    @staticmethod
    def _swap_gem(action: ShopAction, shop_state: ShopState, run_state: RunState,
                  config: EngineConfig) -> ShopResult:
        """Send a Hand gem back to the bag and draw a replacement."""
        cost = config.swap_gem_cost
        ShopHandler._charge(run_state, cost)

        inventory = run_state.inventory
        old = inventory.hand_gems([action.instance_id])[0]

        inventory.discard([old.instance_id])
        drawn = inventory.draw(1)
        run_state.player.zenny -= cost
        for gem in drawn:
            shop_state.freshly_swapped.add(gem.instance_id)

        new_name = drawn[0].definition.name if drawn else "nothing"
        return ShopResult(
            success=True,
            action_type=action.action_type,
            item_id=old.key,
            item_name=old.definition.name,
            zenny_spent=cost,
            message=f"Swapped {old.definition.name} for {new_name}",
        )

    @staticmethod
    def _heal(action: ShopAction, run_state: RunState, config: EngineConfig) -> ShopResult:
        """Restore a fixed amount of health."""
        player = run_state.player
        if player.health >= player.max_health:
            return ShopResult(
                success=False,
                action_type=action.action_type,
                message="Already at full health",
            )

        cost = config.heal_cost
        ShopHandler._charge(run_state, cost)
        player.zenny -= cost
        healed = player.heal(config.heal_amount)

        return ShopResult(
            success=True,
            action_type=action.action_type,
            zenny_spent=cost,
            message=f"Healed {healed} HP for {cost} zenny",
        )

    # ------------------------------------------------------------------------
    # Meta progression
    # ------------------------------------------------------------------------

    @staticmethod
    def _unlock_gem(action: ShopAction, run_state: RunState,
                    config: EngineConfig) -> ShopResult:
        """Unlock an advanced gem for the class, paid from the meta wallet."""
        player_class = run_state.player.player_class
        meta = run_state.meta
        unlockable = {g.key: g for g in unlockable_gems(player_class)}
        gem = unlockable.get(action.gem_key)
        if gem is None:
            return ShopResult(
                success=False,
                action_type=action.action_type,
                item_id=action.gem_key,
                message=f"{action.gem_key} cannot be unlocked by {player_class.value}",
            )

        if action.gem_key in meta.unlocked_for(player_class):
            return ShopResult(
                success=False,
                action_type=action.action_type,
                item_id=gem.key,
                item_name=gem.name,
                message=f"{gem.name} is already unlocked",
            )

        cost = config.unlock_gem_cost
        if meta.meta_zenny < cost:
            raise InsufficientFunds(cost, meta.meta_zenny, wallet="meta zenny")

        meta.meta_zenny -= cost
        meta.unlock(player_class, gem.key)
        logger.info("Unlocked %s for %s", gem.key, player_class.value)

        return ShopResult(
            success=True,
            action_type=action.action_type,
            item_id=gem.key,
            item_name=gem.name,
            zenny_spent=cost,
            message=f"Unlocked {gem.name} for {cost} meta zenny",
        )

    @staticmethod
    def transfer_to_meta(run_state: RunState, amount: int) -> ShopResult:
        """Move zenny from the run wallet into the meta wallet."""
        if amount <= 0:
            raise ValueError(f"Transfer amount must be positive, got {amount}")
        ShopHandler._charge(run_state, amount)
        run_state.player.zenny -= amount
        run_state.meta.meta_zenny += amount
        return ShopResult(
            success=True,
            action_type=ShopActionType.TRANSFER_TO_META,
            zenny_spent=amount,
            message=f"Stored {amount} zenny",
        )

    @staticmethod
    def withdraw_from_meta(run_state: RunState, amount: int) -> ShopResult:
        """Move meta zenny back into the run wallet."""
        if amount <= 0:
            raise ValueError(f"Withdraw amount must be positive, got {amount}")
        meta = run_state.meta
        if meta.meta_zenny < amount:
            raise InsufficientFunds(amount, meta.meta_zenny, wallet="meta zenny")
        meta.meta_zenny -= amount
        run_state.player.zenny += amount
        return ShopResult(
            success=True,
            action_type=ShopActionType.WITHDRAW_FROM_META,
            message=f"Withdrew {amount} meta zenny",
        )

    @staticmethod
    def get_shop_summary(shop_state: ShopState, config: EngineConfig = DEFAULT_CONFIG) -> str:
        """Get a formatted string summary of the shop."""
        lines = ["=== SHOP ===", "", "GEMS:"]
        for o in shop_state.offers:
            status = "[SOLD]" if o.purchased else f"{o.price}z"
            lines.append(f"  {o.gem.name} ({o.gem.color.value} {o.gem.kind.value}) - {status}")
        lines.append("")
        lines.append(f"DISCARD: {config.discard_gem_cost}z  UPGRADE: {config.upgrade_gem_cost}z  "
                     f"AUGMENT: {config.augment_gem_cost}z  SWAP: {config.swap_gem_cost}z  "
                     f"HEAL: {config.heal_cost}z")
        return "\n".join(lines)
