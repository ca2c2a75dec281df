"""
Python implementation of the Alea PRNG used to seed island generation.

Based on Johannes Baagøe's Alea algorithm. A seed string always produces
the same stream, so a working grid can be regenerated from its seed.
"""


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class _Mash:
    """Mash hash that folds seed characters into fractions in [0, 1)."""

    def __init__(self):
        self.n = 0xEFC8249D

    def __call__(self, data):
        for char in str(data):
            self.n += ord(char)
            h = 0.02519603282416938 * self.n
            self.n = _uint32(h)
            h -= self.n
            h *= self.n
            self.n = _uint32(h)
            h -= self.n
            self.n += h * 0x100000000  # 2^32
        return _uint32(self.n) * 2.3283064365386963e-10  # 2^-32


class AleaPRNG:
    """
    Seeded pseudo-random stream.

    Every island run owns its own instance; nothing is shared between runs.
    """

    def __init__(self, seed: str):
        self.seed = seed
        self.call_count = 0

        mash = _Mash()
        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        self.s0 = self._fold(self.s0, mash(seed))
        self.s1 = self._fold(self.s1, mash(seed))
        self.s2 = self._fold(self.s2, mash(seed))

    @staticmethod
    def _fold(state: float, value: float) -> float:
        state -= value
        if state < 0:
            state += 1
        return state

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def next_int(self, low: int, high: int) -> int:
        """Return an integer in [low, high)."""
        if high <= low:
            return low
        return low + int(self.random() * (high - low))
