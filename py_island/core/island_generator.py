"""
Island generation pipeline.

Ties the stages together against a terrain surface:

1. Base shape from a seeded cellular automaton on a ~64x64 grid
2. Upscaling to the surface resolution
3. Shore classification
4. Shore falloff on a background thread
5. Optional post-processing (Perlin noise, blending, sea floor reset)
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np
import structlog

from ..config.config import Settings, settings as default_settings
from ..utils.random import create_prng, resolve_seed
from .base_shape import BaseShapeGenerator
from .boundary import LAND, classify_shores
from .errors import JobInProgressError
from .generation_config import GenerationConfig, GenerationContext
from .post_processing import add_perlin_noise, blend_heights, reset_sea_floor
from .shore_falloff import LAND_HEIGHT, ShoreFalloffJob
from .terrain_surface import TerrainSurface
from .upscaler import upscale_to_size

logger = structlog.get_logger()


@dataclass
class GenerationRun:
    """Products of one base generation."""

    seed: str
    context: GenerationContext
    working_mask: np.ndarray
    shore_mask: np.ndarray
    heights: np.ndarray


class IslandGenerator:
    """Generates an island heightmap on a terrain surface."""

    def __init__(
        self,
        surface: TerrainSurface,
        config: Optional[GenerationConfig] = None,
        settings: Optional[Settings] = None,
    ):
        self.surface = surface
        self.config = config or GenerationConfig()
        self.settings = settings or default_settings
        self.used_seeds: List[str] = []
        self._job: Optional[ShoreFalloffJob] = None

    def create_context(self) -> GenerationContext:
        return GenerationContext(
            resolution=self.surface.heightmap_resolution,
            working_grid_size=self.settings.working_grid_size,
            reference_resolution=self.settings.reference_resolution,
        )

    def generate_base(self, seed: Optional[str] = None) -> GenerationRun:
        """
        Build the land/water heightmap and write it to the surface.

        Land gets ``LAND_HEIGHT``; water and shore candidates stay at zero
        until shore falloff runs.

        Args:
            seed: Overrides the configured seed (and random seeding) for this run
        """
        self._ensure_idle()
        context = self.create_context()
        # The scaled shore radius must be at least one pixel
        context.max_radius_px(self.config)
        if seed is None:
            seed = resolve_seed(self.config.seed, self.config.use_random_seed)
        self.used_seeds.append(seed)

        logger.info(
            "Island generation started",
            seed=seed,
            resolution=context.resolution,
            working_size=context.width,
            scale_multiplier=context.scale_multiplier,
        )

        self.flatten()

        shaper = BaseShapeGenerator(self.config, context.width, context.height, create_prng(seed))
        working_mask = shaper.generate()

        scaled, steps = upscale_to_size(working_mask, context.target_size)
        shore_mask = classify_shores(scaled)

        heights = np.zeros((context.resolution, context.resolution), dtype=np.float32)
        overlap_w = min(shore_mask.shape[0], context.resolution)
        overlap_h = min(shore_mask.shape[1], context.resolution)
        heights[:overlap_w, :overlap_h] = np.where(
            shore_mask[:overlap_w, :overlap_h] == LAND, LAND_HEIGHT, np.float32(0.0)
        )

        self.surface.set_heights(0, 0, heights)
        logger.info("Base shape written", scaled_shape=shore_mask.shape, upscale_steps=steps)

        return GenerationRun(
            seed=seed,
            context=context,
            working_mask=working_mask,
            shore_mask=shore_mask,
            heights=heights,
        )

    def calculate_shores(
        self, run: GenerationRun, on_row: Optional[Callable[[int], None]] = None
    ) -> ShoreFalloffJob:
        """Start shore falloff on a worker thread and return its handle."""
        self._ensure_idle()
        job = ShoreFalloffJob(
            run.shore_mask,
            run.heights,
            run.context.max_radius_px(self.config),
            on_row=on_row,
        )
        self._job = job
        return job.start()

    def smooth_shores(self, run: GenerationRun) -> None:
        """Copy the shored buffer to the surface once the job has ended."""
        self._ensure_idle()
        self.surface.set_heights(0, 0, run.heights)

    def generate(self, seed: Optional[str] = None, timeout: Optional[float] = None) -> GenerationRun:
        """Base shape plus shores, waiting for the shore job to finish."""
        run = self.generate_base(seed)
        job = self.calculate_shores(run)
        if not job.join(timeout):
            job.request_cancel()
            job.join()
            logger.warning("Shore falloff timed out", progress=job.poll_progress())
        if job.error is not None:
            raise job.error
        self.smooth_shores(run)
        return run

    @property
    def job(self) -> Optional[ShoreFalloffJob]:
        return self._job

    def _ensure_idle(self) -> None:
        if self._job is not None and self._job.is_running():
            raise JobInProgressError(
                f"shore falloff still running ({self._job.poll_progress()}); cancel or wait for it first"
            )

    def _read_surface(self) -> np.ndarray:
        resolution = self.surface.heightmap_resolution
        return self.surface.get_heights(0, 0, resolution, resolution)

    def flatten(self) -> None:
        """Zero the surface."""
        resolution = self.surface.heightmap_resolution
        self.surface.set_heights(0, 0, np.zeros((resolution, resolution), dtype=np.float32))

    def perlin_noise(self, offset: Optional[float] = None) -> None:
        """Add a Perlin layer to the surface."""
        self._ensure_idle()
        heights = add_perlin_noise(
            self._read_surface(), self.config.noise_height, self.config.noise_scale, offset
        )
        self.surface.set_heights(0, 0, heights)

    def blend_heights(self, passes: int = 1) -> None:
        """Average each surface cell with its neighbours, ``passes`` times."""
        self._ensure_idle()
        heights = self._read_surface()
        for _ in range(passes):
            heights = blend_heights(heights)
        self.surface.set_heights(0, 0, heights)

    def smooth_map(self) -> None:
        """Blend the surface ``config.map_smooth_times`` times."""
        self.blend_heights(self.config.map_smooth_times)

    def reset_sea_floor(self) -> None:
        """Drop the surface until its lowest point reaches zero."""
        self._ensure_idle()
        heights = reset_sea_floor(self._read_surface(), self.settings.floor_step)
        self.surface.set_heights(0, 0, heights)
