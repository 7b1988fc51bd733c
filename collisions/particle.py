"""
Hard-disk particle — state and collision geometry.

- Straight-line motion between events
- Time-to-contact prediction against another particle or the box walls
- Elastic velocity update on impact (unequal masses)
- State per particle: (x, y, vx, vy, radius, mass) + collision count
"""

import enum
from dataclasses import dataclass
from typing import Tuple

import numpy as np

import collisions as C

INFINITY = np.inf


class Wall(enum.Enum):
    """Wall orientation. Vertical walls bound x, horizontal walls bound y."""
    VERTICAL = 'vertical'
    HORIZONTAL = 'horizontal'


@dataclass(eq=False)
class Particle:
    """Physics state plus a cosmetic color.

    ``count`` is the generation counter: it goes up by one for every
    collision the particle takes part in, walls included. Predictions
    snapshot it to detect staleness.
    """
    x: float
    y: float
    vx: float
    vy: float
    radius: float = C.RADIUS
    mass: float = C.MASS
    color: Tuple[int, int, int] = C.COLOR
    size: float = C.BOX_SIZE
    particle_id: int = 0
    count: int = 0

    def __post_init__(self):
        if self.radius < 0:
            raise ValueError(f"Particle radius must be non-negative, got {self.radius}")
        if not self.mass > 0:
            raise ValueError(f"Particle mass must be positive, got {self.mass}")

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    @property
    def velocity(self) -> Tuple[float, float]:
        return self.vx, self.vy

    @property
    def speed(self) -> float:
        return float(np.hypot(self.vx, self.vy))

    @property
    def momentum(self) -> np.ndarray:
        return np.array([self.mass * self.vx, self.mass * self.vy])

    @property
    def state(self) -> np.ndarray:
        return np.array([self.x, self.y, self.vx, self.vy])

    @property
    def full_state(self) -> np.ndarray:
        return np.array([self.x, self.y, self.vx, self.vy, self.radius, self.mass])

    def advance(self, dt: float):
        """Move in a straight line for ``dt``. No bounds checking."""
        self.x += self.vx * dt
        self.y += self.vy * dt

    def distance_to(self, other: 'Particle') -> float:
        return float(np.hypot(other.x - self.x, other.y - self.y))

    def overlaps(self, other: 'Particle') -> bool:
        if other is self:
            return False
        return self.distance_to(other) < self.radius + other.radius

    # Prediction

    def time_to_collide(self, other: 'Particle') -> float:
        """Time until the two disks touch, assuming no intervening event.

        Solves |dr + dv t| = sigma for the earliest root. Returns INFINITY
        when the pair is not approaching or never touches. For a pair that
        already overlaps the root is returned as-is and may be negative.
        """
        if other is self:
            return INFINITY

        dx = other.x - self.x
        dy = other.y - self.y
        dvx = other.vx - self.vx
        dvy = other.vy - self.vy

        dvdr = dx * dvx + dy * dvy
        if dvdr >= 0:
            return INFINITY
        dvdv = dvx * dvx + dvy * dvy
        if dvdv == 0:
            return INFINITY

        drdr = dx * dx + dy * dy
        sigma = self.radius + other.radius
        d = dvdr * dvdr - dvdv * (drdr - sigma * sigma)
        if d < 0:
            return INFINITY
        return -(dvdr + np.sqrt(d)) / dvdv

    def time_to_hit_vertical_wall(self) -> float:
        if self.vx < 0:
            return (self.radius - self.x) / self.vx
        if self.vx > 0:
            return (self.size - self.radius - self.x) / self.vx
        return INFINITY

    def time_to_hit_horizontal_wall(self) -> float:
        if self.vy < 0:
            return (self.radius - self.y) / self.vy
        if self.vy > 0:
            return (self.size - self.radius - self.y) / self.vy
        return INFINITY

    def time_to_hit_wall(self, wall: Wall) -> float:
        if wall is Wall.VERTICAL:
            return self.time_to_hit_vertical_wall()
        return self.time_to_hit_horizontal_wall()

    # Response

    def resolve_collision(self, other: 'Particle'):
        """
        Elastic collision along the line of centers.
        Convention: dr = r_other - r_self, dv = v_other - v_self.
        """
        dx = other.x - self.x
        dy = other.y - self.y
        dvx = other.vx - self.vx
        dvy = other.vy - self.vy
        dist = np.hypot(dx, dy)

        if dist > 0:
            dvdr = dx * dvx + dy * dvy
            impulse = 2.0 * self.mass * other.mass * dvdr / ((self.mass + other.mass) * dist)
            jx = impulse * dx / dist
            jy = impulse * dy / dist

            self.vx += jx / self.mass
            self.vy += jy / self.mass
            other.vx -= jx / other.mass
            other.vy -= jy / other.mass

        self.count += 1
        other.count += 1

    def resolve_wall_collision(self, wall: Wall):
        if wall is Wall.VERTICAL:
            self.vx = -self.vx
        else:
            self.vy = -self.vy
        self.count += 1

    def kinetic_energy(self) -> float:
        return 0.5 * self.mass * (self.vx**2 + self.vy**2)
