"""
Per-run settings for island generation.

GenerationConfig holds the knobs a user tweaks between runs;
GenerationContext holds everything derived from the host surface, computed
once per run and handed to each stage.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError


@dataclass(frozen=True)
class GenerationConfig:
    """Island generation options."""

    # Cellular automaton
    smooth_times: int = 5  # automaton passes
    neighboring_walls: int = 4  # hysteresis threshold on the 8-neighbour land count
    random_fill_percent: int = 50  # chance (0-100) an interior cell starts as land

    # Shore falloff, tuned for a 512 px heightmap
    max_radius: int = 50

    # Perlin layer
    noise_height: float = 0.02
    noise_scale: float = 20.0

    # Number of blend passes run by IslandGenerator.smooth_map
    map_smooth_times: int = 10

    seed: Optional[str] = None
    use_random_seed: bool = True

    def __post_init__(self):
        if self.smooth_times < 0:
            raise ConfigurationError(f"smooth_times must be >= 0, got {self.smooth_times}")
        if not 0 <= self.neighboring_walls <= 8:
            raise ConfigurationError(
                f"neighboring_walls must be between 0 and 8, got {self.neighboring_walls}"
            )
        if not 0 <= self.random_fill_percent <= 100:
            raise ConfigurationError(
                f"random_fill_percent must be between 0 and 100, got {self.random_fill_percent}"
            )
        if self.max_radius <= 0:
            raise ConfigurationError(f"max_radius must be positive, got {self.max_radius}")
        if self.noise_height < 0:
            raise ConfigurationError(f"noise_height must be >= 0, got {self.noise_height}")
        if self.noise_scale <= 0:
            raise ConfigurationError(f"noise_scale must be positive, got {self.noise_scale}")
        if self.map_smooth_times < 1:
            raise ConfigurationError(f"map_smooth_times must be >= 1, got {self.map_smooth_times}")
        if not self.use_random_seed and not self.seed:
            raise ConfigurationError("seed must be a non-empty string when use_random_seed is False")


@dataclass(frozen=True)
class GenerationContext:
    """Host-derived sizes for one generation run."""

    resolution: int
    working_grid_size: int = 64
    reference_resolution: int = 512

    def __post_init__(self):
        if self.resolution <= 0:
            raise ConfigurationError(f"heightmap resolution must be positive, got {self.resolution}")
        if self.working_grid_size <= 0:
            raise ConfigurationError(
                f"working_grid_size must be positive, got {self.working_grid_size}"
            )
        if self.reference_resolution <= 0:
            raise ConfigurationError(
                f"reference_resolution must be positive, got {self.reference_resolution}"
            )

    @property
    def scale_multiplier(self) -> int:
        """How many times the host resolution is shrunk for the automaton."""
        return max(1, self.resolution // self.working_grid_size)

    @property
    def width(self) -> int:
        return self.resolution // self.scale_multiplier

    @property
    def height(self) -> int:
        return self.resolution // self.scale_multiplier

    @property
    def target_size(self) -> int:
        """Side length upscaling must reach."""
        return self.height * self.scale_multiplier

    def max_radius_px(self, config: GenerationConfig) -> int:
        """Shore radius scaled so shore steepness does not depend on resolution."""
        radius = int(config.max_radius * ((self.resolution - 1.0) / self.reference_resolution))
        if radius < 1:
            raise ConfigurationError(
                f"max_radius {config.max_radius} scales to {radius} px at resolution "
                f"{self.resolution}; increase max_radius or the resolution"
            )
        return radius
