"""
Core island generation functionality.
"""

from .alea_prng import AleaPRNG
from .base_shape import BaseShapeGenerator
from .boundary import LAND, SHORE, WATER, classify_shores
from .errors import ConfigurationError, JobInProgressError
from .generation_config import GenerationConfig, GenerationContext
from .island_generator import GenerationRun, IslandGenerator
from .post_processing import add_perlin_noise, blend_heights, reset_sea_floor
from .shore_falloff import JobState, ShoreFalloffJob
from .terrain_surface import InMemoryTerrainSurface, TerrainSurface
from .upscaler import upscale_mask, upscale_to_size

__all__ = ['AleaPRNG', 'BaseShapeGenerator', 'LAND', 'SHORE', 'WATER', 'classify_shores',
           'ConfigurationError', 'JobInProgressError', 'GenerationConfig', 'GenerationContext',
           'GenerationRun', 'IslandGenerator', 'add_perlin_noise', 'blend_heights',
           'reset_sea_floor', 'JobState', 'ShoreFalloffJob', 'InMemoryTerrainSurface',
           'TerrainSurface', 'upscale_mask', 'upscale_to_size']
