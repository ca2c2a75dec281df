"""
Random number generation utilities.

Seeds are plain strings. A run either uses the configured seed or derives
a fresh one from the clock, then builds its own Alea PRNG from it.
"""

import time
from typing import Optional

from ..core.alea_prng import AleaPRNG
from ..core.errors import ConfigurationError


def time_seed() -> str:
    """Derive a seed string from the current time."""
    return str(time.time_ns() & 0x7FFFFFFF)


def resolve_seed(seed: Optional[str], use_random_seed: bool) -> str:
    """
    Pick the seed for a generation run.

    Args:
        seed: Configured seed string
        use_random_seed: Ignore ``seed`` and derive one from the clock

    Returns:
        Seed string to feed the PRNG
    """
    if use_random_seed:
        return time_seed()
    if not seed:
        raise ConfigurationError("seed must be a non-empty string when random seeding is disabled")
    return seed


def create_prng(seed: str) -> AleaPRNG:
    """Create a fresh PRNG for one generation run."""
    return AleaPRNG(seed)
