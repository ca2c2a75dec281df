"""
Procedural island heightmap generation.
"""

__version__ = "0.1.0"

from .core import GenerationConfig, InMemoryTerrainSurface, IslandGenerator

__all__ = ['GenerationConfig', 'InMemoryTerrainSurface', 'IslandGenerator', '__version__']
