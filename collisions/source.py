"""
Particle sources: random generation and a whitespace-separated reader.

Stream format: the particle count, then per particle
``x y vx vy radius mass r g b``.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, TextIO, Tuple

import numpy as np

import collisions as C
from collisions.particle import Particle

logger = logging.getLogger(__name__)

FIELDS_PER_PARTICLE = 9


@dataclass
class SourceConfig:
    """Everything a source needs to build particles. No global switches."""
    size: float = C.BOX_SIZE
    radius: float = C.RADIUS
    mass: float = C.MASS
    speed_range: Tuple[float, float] = C.SPEED_RANGE
    color: Tuple[int, int, int] = C.COLOR
    upscale_radii: bool = C.UPSCALE_RADII
    min_visible_radius: float = C.MIN_VISIBLE_RADIUS
    max_placement_attempts: int = C.MAX_PLACEMENT_ATTEMPTS
    seed: Optional[int] = None

    def effective_radius(self, radius: float) -> float:
        if self.upscale_radii and radius < self.min_visible_radius:
            return self.min_visible_radius
        return radius


def make_particle(x: float, y: float, vx: float, vy: float,
                  radius: float, mass: float,
                  color: Optional[Tuple[int, int, int]] = None,
                  config: Optional[SourceConfig] = None,
                  particle_id: int = 0) -> Particle:
    """Build one particle, applying the config's radius policy."""
    config = config or SourceConfig()
    return Particle(
        x=float(x), y=float(y), vx=float(vx), vy=float(vy),
        radius=config.effective_radius(float(radius)),
        mass=float(mass),
        color=tuple(color) if color is not None else config.color,
        size=config.size,
        particle_id=particle_id,
    )


def _overlaps_any(p: Particle, others: Iterable[Particle]) -> bool:
    return any(p.overlaps(q) for q in others)


def random_particles(n: int, config: Optional[SourceConfig] = None) -> List[Particle]:
    """
    ``n`` particles with uniform positions inside the box and uniform
    velocity components. A placement that overlaps an earlier particle is
    redrawn up to ``max_placement_attempts`` times, then kept with a warning.
    """
    config = config or SourceConfig()
    rng = np.random.RandomState(config.seed)
    radius = config.effective_radius(config.radius)
    if 2 * radius >= config.size:
        raise ValueError(f"Radius {radius} does not fit in a box of size {config.size}")

    def draw(i: int) -> Particle:
        return make_particle(
            x=rng.uniform(radius, config.size - radius),
            y=rng.uniform(radius, config.size - radius),
            vx=rng.uniform(*config.speed_range),
            vy=rng.uniform(*config.speed_range),
            radius=radius, mass=config.mass, config=config, particle_id=i,
        )

    particles: List[Particle] = []
    for i in range(n):
        p = draw(i)
        for _ in range(config.max_placement_attempts):
            if not _overlaps_any(p, particles):
                break
            p = draw(i)
        if _overlaps_any(p, particles):
            logger.warning("Could not place particle %d without overlap after %d attempts",
                           i, config.max_placement_attempts)
        particles.append(p)
    return particles


def _tokens(stream: TextIO) -> Iterator[str]:
    for line in stream:
        yield from line.split()


def read_particles(stream: TextIO, config: Optional[SourceConfig] = None) -> List[Particle]:
    config = config or SourceConfig()
    tokens = _tokens(stream)

    try:
        n = int(next(tokens))
    except StopIteration:
        raise ValueError("Empty particle stream, expected a particle count") from None
    except ValueError as e:
        raise ValueError(f"Invalid particle count: {e}") from None
    if n < 0:
        raise ValueError(f"Particle count must be non-negative, got {n}")

    particles = []
    for i in range(n):
        fields = list(itertools.islice(tokens, FIELDS_PER_PARTICLE))
        if len(fields) < FIELDS_PER_PARTICLE:
            raise ValueError(
                f"Particle {i}: expected {FIELDS_PER_PARTICLE} fields, got {len(fields)}")
        try:
            x, y, vx, vy, radius, mass = (float(f) for f in fields[:6])
            color = tuple(int(f) for f in fields[6:])
            if any(not 0 <= c <= 255 for c in color):
                raise ValueError(f"color {color} outside 0-255")
            particles.append(make_particle(x, y, vx, vy, radius, mass, color,
                                           config=config, particle_id=i))
        except ValueError as e:
            raise ValueError(f"Particle {i}: {e}") from None
        logger.debug("Particle %d added, radius %g", i, particles[-1].radius)

    logger.info("Read %d particles", len(particles))
    return particles
