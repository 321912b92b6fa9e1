"""Player classes and their base stats."""

from dataclasses import dataclass
from enum import Enum

from .gems import GemColor


class PlayerClass(Enum):
    KNIGHT = "knight"
    MAGE = "mage"
    ROGUE = "rogue"


@dataclass(frozen=True)
class ClassDefinition:
    player_class: PlayerClass
    favored_color: GemColor
    max_health: int
    max_stamina: int
    starting_zenny: int = 5


CLASS_DEFINITIONS = {
    PlayerClass.KNIGHT: ClassDefinition(PlayerClass.KNIGHT, GemColor.RED, 40, 3),
    PlayerClass.MAGE: ClassDefinition(PlayerClass.MAGE, GemColor.BLUE, 30, 4),
    PlayerClass.ROGUE: ClassDefinition(PlayerClass.ROGUE, GemColor.GREEN, 35, 3),
}


def get_class(player_class) -> ClassDefinition:
    """Look up a class by enum or name ("knight", "MAGE", ...)."""
    if isinstance(player_class, str):
        try:
            player_class = PlayerClass(player_class.lower())
        except ValueError:
            raise ValueError(f"Unknown class: {player_class}") from None
    return CLASS_DEFINITIONS[player_class]
