#!/usr/bin/env python3
"""
Generate an island heightmap and save it as a NumPy array.

Usage:
    python -m py_island generate --resolution 513 --seed my_island --output island.npy
"""

import argparse
import time
from pathlib import Path

import numpy as np
import structlog

from .config import configure_logging, settings
from .core import ConfigurationError, GenerationConfig, InMemoryTerrainSurface, IslandGenerator

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="py-island", description="Procedural island heightmaps")
    subparsers = parser.add_subparsers(dest="command", required=True)

    gen = subparsers.add_parser("generate", help="Generate an island heightmap")
    gen.add_argument("--resolution", type=int, default=settings.default_resolution,
                     help="Heightmap side length")
    gen.add_argument("--seed", help="Seed string; a time-based seed is used when omitted")
    gen.add_argument("--fill", type=int, default=50, help="Random fill percent (0-100)")
    gen.add_argument("--smooth-times", type=int, default=5, help="Cellular automaton passes")
    gen.add_argument("--walls", type=int, default=4, help="Neighbouring wall threshold")
    gen.add_argument("--max-radius", type=int, default=50, help="Max shore radius at 512 px")
    gen.add_argument("--no-shores", action="store_true", help="Skip shore falloff")
    gen.add_argument("--perlin", action="store_true", help="Add a Perlin noise layer")
    gen.add_argument("--noise-height", type=float, default=0.02)
    gen.add_argument("--noise-scale", type=float, default=20.0)
    gen.add_argument("--blend", type=int, default=0, help="Number of blend passes")
    gen.add_argument("--reset-floor", action="store_true", help="Drop the map until its lowest point is zero")
    gen.add_argument("--output", type=Path, default=Path(settings.output_dir) / "island.npy")
    return parser


def generate(args: argparse.Namespace) -> int:
    config = GenerationConfig(
        smooth_times=args.smooth_times,
        neighboring_walls=args.walls,
        random_fill_percent=args.fill,
        max_radius=args.max_radius,
        noise_height=args.noise_height,
        noise_scale=args.noise_scale,
        seed=args.seed,
        use_random_seed=args.seed is None,
    )
    surface = InMemoryTerrainSurface(args.resolution)
    generator = IslandGenerator(surface, config)

    run = generator.generate_base()
    print(f"Seed: {run.seed}")

    if not args.no_shores:
        job = generator.calculate_shores(run)
        try:
            while not job.join(timeout=0.5):
                print(f"  Shores: {job.poll_progress()}", end="\r", flush=True)
        except KeyboardInterrupt:
            job.request_cancel()
            job.join()
            print(f"\n  Shores cancelled at {job.poll_progress()}")
        else:
            print(f"  Shores: {job.poll_progress()}")
        generator.smooth_shores(run)

    if args.perlin:
        generator.perlin_noise()
    if args.blend:
        generator.blend_heights(args.blend)
    if args.reset_floor:
        generator.reset_sea_floor()

    args.output.parent.mkdir(parents=True, exist_ok=True)
    np.save(args.output, surface.heights)
    print(f"Saved {args.resolution}x{args.resolution} heightmap to {args.output}")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings)

    start = time.time()
    result = 1
    try:
        if args.command == "generate":
            result = generate(args)
    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        return 2
    logger.info("Done", command=args.command, seconds=round(time.time() - start, 2))
    return result
