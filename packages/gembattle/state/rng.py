"""
Seeded RNG streams for the gem battler.

All randomness in the engine flows through a `Random` instance, never the
global `random` module, so a battle replays exactly from its seed.

Streams (see GameRNG):
- roll_rng: gem success rolls and failure side effects
- ai_rng: enemy action selection and action side effects
- shuffle_rng: bag shuffles
- loot_rng: encounter choice, shop offers, steal amounts
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, TypeVar

T = TypeVar("T")

_MASK64 = 0xFFFFFFFFFFFFFFFF


class XorShift128:
    """
    XorShift128+ PRNG.

    State is two 64-bit integers (seed0, seed1), derived from a single seed
    through the murmur3 finalizer.
    """

    def __init__(self, seed: int, seed1: Optional[int] = None):
        """
        Args:
            seed: Either the initial seed (if seed1 is None) or seed0 state
            seed1: If provided, use (seed, seed1) as direct state values
        """
        if seed1 is not None:
            self.seed0 = seed & _MASK64
            self.seed1 = seed1 & _MASK64
        else:
            if seed == 0:
                seed = -0x8000000000000000
            self.seed0 = self._murmur_hash3(seed)
            self.seed1 = self._murmur_hash3(self.seed0)

    @staticmethod
    def _murmur_hash3(x: int) -> int:
        x = x & _MASK64
        x ^= x >> 33
        x = (x * 0xff51afd7ed558ccd) & _MASK64
        x ^= x >> 33
        x = (x * 0xc4ceb9fe1a85ec53) & _MASK64
        x ^= x >> 33
        return x

    def _next_long(self) -> int:
        """Next unsigned 64-bit value."""
        s1 = self.seed0
        s0 = self.seed1
        self.seed0 = s0
        s1 ^= (s1 << 23) & _MASK64
        self.seed1 = (s1 ^ s0 ^ (s1 >> 17) ^ (s0 >> 26)) & _MASK64
        return (self.seed0 + self.seed1) & _MASK64

    def next_int(self, bound: int) -> int:
        """Random int in [0, bound), rejection sampled to avoid modulo bias."""
        if bound <= 0:
            raise ValueError("bound must be positive")
        limit = (1 << 63) - ((1 << 63) % bound)
        while True:
            bits = self._next_long() >> 1
            if bits < limit:
                return bits % bound

    def next_float(self) -> float:
        """Random float in [0, 1) with 24 bits of precision."""
        return (self._next_long() >> 40) / (1 << 24)

    def next_double(self) -> float:
        """Random double in [0, 1) with 53 bits of precision."""
        return (self._next_long() >> 11) / (1 << 53)

    def get_state(self, index: int) -> int:
        if index == 0:
            return self.seed0
        return self.seed1

    def copy(self) -> XorShift128:
        return XorShift128(self.seed0, self.seed1)


class Random:
    """
    Counted RNG wrapper used by every engine component.

    `counter` tracks the number of draws so a saved stream can be restored
    by replaying that many draws from the seed.
    """

    def __init__(self, seed: int, counter: int = 0):
        self.seed = seed
        self._rng = XorShift128(seed)
        self.counter = 0
        for _ in range(counter):
            self.random_int(999)

    def random_int(self, range_val: int) -> int:
        """Random int in [0, range_val] INCLUSIVE."""
        self.counter += 1
        return self._rng.next_int(range_val + 1)

    def random_int_range(self, start: int, end: int) -> int:
        """Random int in [start, end] INCLUSIVE."""
        self.counter += 1
        return start + self._rng.next_int(end - start + 1)

    def random_float(self) -> float:
        """Random float in [0, 1)."""
        self.counter += 1
        return self._rng.next_double()

    def random_boolean(self, chance: float = 0.5) -> bool:
        """True with probability `chance`."""
        return self.random_float() < chance

    def roll_percent(self) -> float:
        """Roll in [0, 100) used for gem success checks."""
        return self.random_float() * 100

    def choice(self, values: Sequence[T]) -> T:
        if not values:
            raise ValueError("Cannot choose from empty sequence")
        return values[self.random_int(len(values) - 1)]

    def copy(self) -> Random:
        new = Random.__new__(Random)
        new.seed = self.seed
        new._rng = self._rng.copy()
        new.counter = self.counter
        return new


class ScriptedRandom(Random):
    """
    Deterministic stream that replays queued values, for tests.

    Floats are returned from `random_float`; `random_int*` consume the
    next value too, treating it as the integer result when it is an int
    and as a fraction of the range otherwise.
    """

    def __init__(self, values: Optional[List[Any]] = None):
        self.seed = 0
        self.counter = 0
        self._values = list(values or [])

    def push(self, *values: Any) -> None:
        self._values.extend(values)

    @property
    def remaining(self) -> int:
        return len(self._values)

    def _next(self) -> Any:
        if not self._values:
            raise RuntimeError("ScriptedRandom exhausted")
        self.counter += 1
        return self._values.pop(0)

    def random_float(self) -> float:
        return float(self._next())

    def random_int(self, range_val: int) -> int:
        return self.random_int_range(0, range_val)

    def random_int_range(self, start: int, end: int) -> int:
        value = self._next()
        if isinstance(value, int):
            return max(start, min(end, value))
        return start + min(int(value * (end - start + 1)), end - start)

    def copy(self) -> ScriptedRandom:
        return ScriptedRandom(list(self._values))


def shuffle_in_place(values: List[Any], rng: Random) -> None:
    """Fisher-Yates shuffle driven by `rng`."""
    for i in range(len(values) - 1, 0, -1):
        j = rng.random_int(i)
        values[i], values[j] = values[j], values[i]


def seed_to_long(seed_string: str) -> int:
    """
    Convert a seed string to an integer seed.

    Numeric strings are taken as-is; anything else is read as base-36 with
    non-alphanumeric characters skipped.
    """
    if seed_string.lstrip("-").isdigit():
        return int(seed_string)

    result = 0
    for char in seed_string.upper():
        if char.isdigit():
            digit = ord(char) - ord("0")
        elif "A" <= char <= "Z":
            digit = ord(char) - ord("A") + 10
        else:
            continue
        result = (result * 36 + digit) & _MASK64
    return result


@dataclass
class GameRNG:
    """All RNG streams for one run."""
    seed: int
    roll_rng: Random = None
    ai_rng: Random = None
    shuffle_rng: Random = None
    loot_rng: Random = None

    def __post_init__(self):
        # Offsets keep the streams independent while sharing one seed.
        self.roll_rng = self.roll_rng or Random(self.seed)
        self.ai_rng = self.ai_rng or Random(self.seed + 1)
        self.shuffle_rng = self.shuffle_rng or Random(self.seed + 2)
        self.loot_rng = self.loot_rng or Random(self.seed + 3)

    @classmethod
    def scripted(cls, rolls: Optional[List[Any]] = None, ai: Optional[List[Any]] = None,
                 shuffle: Optional[List[Any]] = None,
                 loot: Optional[List[Any]] = None) -> GameRNG:
        """Build a GameRNG whose streams replay fixed values."""
        return cls(
            seed=0,
            roll_rng=ScriptedRandom(rolls),
            ai_rng=ScriptedRandom(ai),
            shuffle_rng=ScriptedRandom(shuffle),
            loot_rng=ScriptedRandom(loot),
        )

    def get_counters(self) -> Dict[str, int]:
        """Counter values for save state."""
        return {
            "roll": self.roll_rng.counter,
            "ai": self.ai_rng.counter,
            "shuffle": self.shuffle_rng.counter,
            "loot": self.loot_rng.counter,
        }

    @classmethod
    def from_save(cls, seed: int, counters: Dict[str, int]) -> GameRNG:
        """Restore RNG streams from a seed and saved counters."""
        return cls(
            seed=seed,
            roll_rng=Random(seed, counters.get("roll", 0)),
            ai_rng=Random(seed + 1, counters.get("ai", 0)),
            shuffle_rng=Random(seed + 2, counters.get("shuffle", 0)),
            loot_rng=Random(seed + 3, counters.get("loot", 0)),
        )
