"""
Alea pseudo random number generator.

Based on Johannes Baagøe's Alea algorithm. Unlike Python's ``hash()`` of a
string, Alea seeding is stable across interpreter runs, so every stream
derived from a world seed reproduces the same values in every process.
"""

from collections.abc import Iterable
from typing import List, Sequence, TypeVar, Union

T = TypeVar("T")
Seed = Union[int, str]

_MASH_SEED = 0xEFC8249D
_TWO_POW_32 = 0x100000000
_TWO_POW_NEG_32 = 2.3283064365386963e-10


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class _Mash:
    """Alea's string hashing state, shared across all seeding calls."""

    def __init__(self):
        self.n = _MASH_SEED

    def __call__(self, data) -> float:
        n = self.n
        for char in str(data):
            n += ord(char)
            h = 0.02519603282416938 * n
            n = _uint32(h)
            h -= n
            h *= n
            n = _uint32(h)
            h -= n
            n += h * _TWO_POW_32
        self.n = n
        return _uint32(n) * _TWO_POW_NEG_32


class AleaPRNG:
    """
    Seedable generator of floats in [0, 1).

    The seed may be a single value (``int`` or ``str``) or an iterable of
    values; every part contributes to the state, which is how labelled streams
    such as ``(seed, "rivers")`` are derived.
    """

    def __init__(self, seed):
        if isinstance(seed, Iterable) and not isinstance(seed, str):
            parts: List = list(seed)
        else:
            parts = [seed]

        mash = _Mash()
        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1
        self.call_count = 0

        for part in parts:
            self.s0 = self._wrap(self.s0 - mash(part))
            self.s1 = self._wrap(self.s1 - mash(part))
            self.s2 = self._wrap(self.s2 - mash(part))

    @staticmethod
    def _wrap(value: float) -> float:
        return value + 1 if value < 0 else value

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * _TWO_POW_NEG_32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def next_uint32(self) -> int:
        """Generate a random unsigned 32-bit integer."""
        return _uint32(self.random() * _TWO_POW_32)

    def randrange(self, stop: int) -> int:
        """Random integer in [0, stop)."""
        if stop <= 0:
            raise ValueError("randrange() requires a positive stop value")
        return int(self.random() * stop)

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self.randrange(len(seq))]


def derive_prng(seed: Seed, label: str) -> AleaPRNG:
    """
    Create a fresh Alea stream for a labelled step of generation.

    Every stochastic pass derives its own stream from the world seed and a
    fixed label, so passes never share or advance each other's state. Calling
    this twice with the same arguments returns two generators that produce
    identical sequences.

    Args:
        seed: World seed
        label: Name of the generation step, e.g. ``"springs"``

    Returns:
        AleaPRNG instance
    """
    return AleaPRNG((seed, label))
