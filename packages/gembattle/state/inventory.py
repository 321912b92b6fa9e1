"""
Gem inventory: four disjoint zones.

    Bag      undrawn pool
    Hand     drawn and playable (at most `hand_size`)
    Discard  face-up, waiting to be recycled into the Bag
    Played   used this encounter, only returns at the next day reset

Every gem instance is in exactly one zone. Moves take the instance out of
its zone and insert it into the destination in the same step, and every
operation validates its selection before touching any zone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..content.gems import GemDefinition, definition_from_dict
from ..errors import InsufficientStamina, InvalidSelection
from .rng import Random, shuffle_in_place

logger = logging.getLogger(__name__)

DEFAULT_HAND_SIZE = 3


class Zone(Enum):
    BAG = "bag"
    HAND = "hand"
    DISCARD = "discard"
    PLAYED = "played"


@dataclass
class GemInstance:
    """One physical gem in the player's collection."""
    instance_id: int
    definition: GemDefinition

    @property
    def key(self) -> str:
        return self.definition.key

    @property
    def cost(self) -> int:
        return self.definition.effective_cost

    def to_dict(self) -> dict:
        return {"instance_id": self.instance_id, **self.definition.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> GemInstance:
        return cls(instance_id=data["instance_id"], definition=definition_from_dict(data))


@dataclass
class Inventory:
    """The player's gems across Bag / Hand / Discard / Played."""
    shuffle_rng: Random
    hand_size: int = DEFAULT_HAND_SIZE
    bag: List[GemInstance] = field(default_factory=list)
    hand: List[GemInstance] = field(default_factory=list)
    discard_pile: List[GemInstance] = field(default_factory=list)
    played: List[GemInstance] = field(default_factory=list)
    next_instance_id: int = 1

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def _zones(self) -> Dict[Zone, List[GemInstance]]:
        return {
            Zone.BAG: self.bag,
            Zone.HAND: self.hand,
            Zone.DISCARD: self.discard_pile,
            Zone.PLAYED: self.played,
        }

    @property
    def total_count(self) -> int:
        return len(self.bag) + len(self.hand) + len(self.discard_pile) + len(self.played)

    def all_instances(self) -> List[GemInstance]:
        return self.bag + self.hand + self.discard_pile + self.played

    def zone_of(self, instance_id: int) -> Optional[Zone]:
        for zone, gems in self._zones().items():
            if any(g.instance_id == instance_id for g in gems):
                return zone
        return None

    def find(self, instance_id: int) -> Optional[GemInstance]:
        for gem in self.all_instances():
            if gem.instance_id == instance_id:
                return gem
        return None

    def hand_gems(self, instance_ids: Sequence[int]) -> List[GemInstance]:
        """
        Resolve ids to Hand instances, in the order given.

        Raises InvalidSelection if any id is missing from the Hand or is
        repeated.
        """
        by_id = {g.instance_id: g for g in self.hand}
        missing = [i for i in instance_ids if i not in by_id]
        if missing or len(set(instance_ids)) != len(instance_ids):
            raise InvalidSelection(missing or instance_ids, Zone.HAND.value)
        return [by_id[i] for i in instance_ids]

    # -------------------------------------------------------------------------
    # Zone transitions
    # -------------------------------------------------------------------------

    def draw(self, n: int) -> List[GemInstance]:
        """
        Move up to `n` gems from Bag to Hand.

        Recycles the Discard into the Bag first when the Bag is empty. Never
        fills the Hand past `hand_size`.
        """
        room = self.hand_size - len(self.hand)
        if n <= 0 or room <= 0:
            return []
        if not self.bag and self.discard_pile:
            self.recycle_discard()

        count = min(n, room, len(self.bag))
        drawn = [self.bag.pop() for _ in range(count)]
        self.hand.extend(drawn)
        return drawn

    def fill_hand(self) -> List[GemInstance]:
        return self.draw(self.hand_size - len(self.hand))

    def play(self, instance_ids: Sequence[int], stamina: int) -> Tuple[List[GemInstance], int]:
        """
        Move the selected Hand gems to Played.

        Returns the gems (in selection order) and their total stamina cost.
        Raises InvalidSelection or InsufficientStamina without moving
        anything. Stamina itself is owned by the player; the caller deducts
        the returned cost.
        """
        gems = self.hand_gems(instance_ids)
        cost = sum(g.cost for g in gems)
        if cost > stamina:
            raise InsufficientStamina(cost, stamina)

        played_ids = set(instance_ids)
        self.hand[:] = [g for g in self.hand if g.instance_id not in played_ids]
        self.played.extend(gems)
        return gems, cost

    def discard(self, instance_ids: Iterable[int]) -> List[GemInstance]:
        """
        Move matching Hand gems to Discard, then recycle Discard into Bag.

        Ids that are not in the Hand are ignored.
        """
        wanted = set(instance_ids)
        moved = [g for g in self.hand if g.instance_id in wanted]
        if not moved:
            return []
        self.hand[:] = [g for g in self.hand if g.instance_id not in wanted]
        self.discard_pile.extend(moved)
        self.recycle_discard()
        return moved

    def recycle_discard(self) -> None:
        """Shuffle the Discard into the Bag."""
        if not self.discard_pile:
            return
        self.bag.extend(self.discard_pile)
        self.discard_pile.clear()
        shuffle_in_place(self.bag, self.shuffle_rng)

    def reset_for_new_day(self) -> None:
        """Pool Bag, Discard and Played into a fresh shuffled Bag; Hand is kept."""
        pool = self.bag + self.discard_pile + self.played
        shuffle_in_place(pool, self.shuffle_rng)
        self.bag[:] = pool
        self.discard_pile.clear()
        self.played.clear()
        logger.debug("Day reset: bag=%d hand=%d", len(self.bag), len(self.hand))

    # -------------------------------------------------------------------------
    # Shop operations (the only ones that change the instance count)
    # -------------------------------------------------------------------------

    def add_gem(self, definition: GemDefinition, zone: Zone = Zone.BAG) -> GemInstance:
        gem = GemInstance(self.next_instance_id, definition)
        self.next_instance_id += 1
        self._zones()[zone].append(gem)
        return gem

    def remove_gem(self, instance_id: int) -> GemInstance:
        """Remove an instance from whichever zone holds it."""
        for zone, gems in self._zones().items():
            for idx, gem in enumerate(gems):
                if gem.instance_id == instance_id:
                    return gems.pop(idx)
        raise InvalidSelection([instance_id], "inventory")

    def upgrade_in_hand(self, instance_id: int, definition: GemDefinition) -> GemInstance:
        """Swap the definition of a Hand gem, keeping its id and zone."""
        gem = self.hand_gems([instance_id])[0]
        gem.definition = definition
        return gem

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "bag": [g.to_dict() for g in self.bag],
            "hand": [g.to_dict() for g in self.hand],
            "discard": [g.to_dict() for g in self.discard_pile],
            "played": [g.to_dict() for g in self.played],
            "next_instance_id": self.next_instance_id,
            "hand_size": self.hand_size,
        }

    @classmethod
    def from_dict(cls, data: dict, shuffle_rng: Random) -> Inventory:
        def load(items: List[dict]) -> List[GemInstance]:
            gems = []
            for item in items:
                try:
                    gems.append(GemInstance.from_dict(item))
                except ValueError:
                    logger.warning("Skipping unknown gem in save data: %r", item.get("key"))
            return gems

        return cls(
            shuffle_rng=shuffle_rng,
            hand_size=data.get("hand_size", DEFAULT_HAND_SIZE),
            bag=load(data.get("bag", [])),
            hand=load(data.get("hand", [])),
            discard_pile=load(data.get("discard", [])),
            played=load(data.get("played", [])),
            next_instance_id=data.get("next_instance_id", 1),
        )

    @classmethod
    def from_definitions(cls, definitions: Iterable[GemDefinition], shuffle_rng: Random,
                         hand_size: int = DEFAULT_HAND_SIZE) -> Inventory:
        """Fresh inventory with every gem in a shuffled Bag."""
        inventory = cls(shuffle_rng=shuffle_rng, hand_size=hand_size)
        for definition in definitions:
            inventory.add_gem(definition)
        shuffle_in_place(inventory.bag, shuffle_rng)
        return inventory
