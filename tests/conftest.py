"""
Pytest configuration and shared fixtures.
"""

import os

import pytest
import numpy as np

os.environ.setdefault('SDL_VIDEODRIVER', 'dummy')


@pytest.fixture
def head_on_pair():
    """Equal-mass disks 0.5 apart on a head-on course, contact at t=0.25."""
    from collisions.particle import Particle
    p = Particle(x=0.2, y=0.5, vx=1.0, vy=0.0, radius=0.05, mass=1.0, particle_id=0)
    q = Particle(x=0.8, y=0.5, vx=-1.0, vy=0.0, radius=0.05, mass=1.0, particle_id=1)
    return p, q


@pytest.fixture
def gas():
    """Thirty non-overlapping particles in the unit box."""
    from collisions.source import SourceConfig, random_particles
    return random_particles(30, SourceConfig(radius=0.02, seed=7))


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(seed=42)
