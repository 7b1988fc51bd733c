"""
Event-driven collision system — the simulation driver.

- Predicts every future contact (pair and wall) up front
- Pops the earliest event, drops it if a participant has collided since
- Moves every particle to the event time, applies the response
- Re-predicts only the particles whose velocity just changed

Ticks are non-physical events that hand the current frame to a renderer.
A renderer is any object with ``clear()``, ``draw_particle(position,
radius, color)`` and ``present()``.
"""

import enum
import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

import collisions as C
from collisions.event import Event, EventKind
from collisions.particle import Particle
from collisions.schedule import EventSchedule

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    limit: float = C.LIMIT
    hz: float = C.HZ                 # redraws per unit of simulation time
    record_events: bool = True

    def __post_init__(self):
        if not self.hz > 0:
            raise ValueError(f"Redraw frequency must be positive, got {self.hz}")
        if self.limit < 0:
            raise ValueError(f"Time limit must be non-negative, got {self.limit}")

    @property
    def period(self) -> float:
        return 1.0 / self.hz


class SimulationState(enum.Enum):
    INITIALIZED = 'initialized'
    RUNNING = 'running'
    TERMINATED = 'terminated'


class CollisionSystem:
    """
    Discrete-event simulator for hard disks in a square box.

    Single pass: INITIALIZED → RUNNING → TERMINATED.
    """

    def __init__(self, particles: Sequence[Particle],
                 config: Optional[SimulationConfig] = None,
                 renderer=None,
                 on_tick: Optional[Callable[['CollisionSystem'], None]] = None):
        self.particles: List[Particle] = list(particles)
        self.config = config or SimulationConfig()
        self.renderer = renderer
        self.on_tick = on_tick

        self.time: float = 0.0
        self.state = SimulationState.INITIALIZED
        self.schedule = EventSchedule()
        self.event_log: List[Dict] = []
        self.stats: Dict[str, int] = {kind.value: 0 for kind in EventKind}
        self.stats.update(stale=0, overlaps=0, negative_predictions=0)

        self._check_overlaps()

    def _check_overlaps(self):
        for p, q in itertools.combinations(self.particles, 2):
            if p.overlaps(q):
                self.stats['overlaps'] += 1
                logger.warning(
                    "Particles %d and %d overlap at t=%.6g (distance %.6g < %.6g)",
                    p.particle_id, q.particle_id, self.time,
                    p.distance_to(q), p.radius + q.radius)

    # Prediction

    def _schedule(self, dt: float, make_event: Callable[[float], Event], limit: float):
        if dt < 0:
            # Overlap already in progress; resolve it now rather than in the past
            self.stats['negative_predictions'] += 1
            logger.warning("Negative collision time %.6g at t=%.6g, scheduling now",
                           dt, self.time)
            dt = 0.0
        if self.time + dt <= limit:
            self.schedule.insert(make_event(self.time + dt))

    def predict(self, p: Optional[Particle], limit: float):
        """Insert every future event involving ``p`` that falls within ``limit``."""
        if p is None:
            return
        for other in self.particles:
            if other is p:
                continue
            self._schedule(p.time_to_collide(other),
                           lambda t, other=other: Event.binary(t, p, other), limit)
        self._schedule(p.time_to_hit_vertical_wall(),
                       lambda t: Event.vertical_wall(t, p), limit)
        self._schedule(p.time_to_hit_horizontal_wall(),
                       lambda t: Event.horizontal_wall(t, p), limit)

    # Event handling

    def _redraw(self, limit: float):
        if self.renderer is not None:
            self.renderer.clear()
            for p in self.particles:
                self.renderer.draw_particle(p.position, p.radius, p.color)
            self.renderer.present()
        if self.on_tick is not None:
            self.on_tick(self)

        if self.time < limit:
            self.schedule.insert(Event.tick(min(self.time + self.config.period, limit)))

    def _advance_to(self, t: float):
        dt = t - self.time
        for p in self.particles:
            p.advance(dt)
        self.time = t

    def _dispatch(self, event: Event, limit: float):
        kind = event.kind
        if kind is EventKind.BINARY:
            event.a.resolve_collision(event.b)
            self.predict(event.a, limit)
            self.predict(event.b, limit)
        elif kind is EventKind.VERTICAL_WALL or kind is EventKind.HORIZONTAL_WALL:
            event.a.resolve_wall_collision(kind.wall)
            self.predict(event.a, limit)
        elif kind is EventKind.TICK:
            self._redraw(limit)
        else:
            raise ValueError(f"Unknown event kind: {kind!r}")

    def process(self, event: Event, limit: float) -> bool:
        """Apply one extracted event. Stale events are dropped and return False."""
        if not event.is_valid():
            self.stats['stale'] += 1
            return False

        self._advance_to(event.time)
        self.stats[event.kind.value] += 1
        if self.config.record_events:
            self.event_log.append(event.describe())
        logger.debug("t=%.6g %s", self.time, event.kind.value)

        self._dispatch(event, limit)
        return True

    def simulate(self, limit: Optional[float] = None) -> Dict:
        """Run the event loop until ``limit`` or until nothing is left to happen."""
        if self.state is not SimulationState.INITIALIZED:
            raise RuntimeError(f"Simulation already {self.state.value}; create a new system")
        if limit is None:
            limit = self.config.limit

        self.state = SimulationState.RUNNING
        logger.info("Simulating %d particles up to t=%g", len(self.particles), limit)

        for p in self.particles:
            self.predict(p, limit)
        self.schedule.insert(Event.tick(0.0))

        while self.schedule:
            self.process(self.schedule.extract_min(), limit)
            if self.time >= limit:
                break
        else:
            logger.info("Schedule exhausted at t=%g", self.time)

        self.state = SimulationState.TERMINATED
        summary = self.summary()
        logger.info("Simulation over at t=%g: %s", self.time, summary)
        return summary

    # State access

    def summary(self) -> Dict:
        return {
            'time': self.time,
            'state': self.state.value,
            'n_particles': len(self.particles),
            'events_inserted': self.schedule.inserted,
            'events_pending': len(self.schedule),
            **self.stats,
        }

    def get_state(self) -> np.ndarray:
        """(n_particles, 4) → [x, y, vx, vy]"""
        return np.array([p.state for p in self.particles]).reshape(-1, 4)

    def get_full_state(self) -> np.ndarray:
        """(n_particles, 6) → [x, y, vx, vy, radius, mass]"""
        return np.array([p.full_state for p in self.particles]).reshape(-1, 6)

    def total_kinetic_energy(self) -> float:
        return sum(p.kinetic_energy() for p in self.particles)

    def total_momentum(self) -> np.ndarray:
        px = sum(p.mass * p.vx for p in self.particles)
        py = sum(p.mass * p.vy for p in self.particles)
        return np.array([px, py])


def generate_trajectory(particles: Sequence[Particle],
                        config: Optional[SimulationConfig] = None) -> Dict:
    """Headless run. Returns per-tick states, energy, momentum and the event log."""
    times, states, energy, momentum = [], [], [], []

    def record(system: CollisionSystem):
        times.append(system.time)
        states.append(system.get_state())
        energy.append(system.total_kinetic_energy())
        momentum.append(system.total_momentum())

    system = CollisionSystem(particles, config, on_tick=record)
    summary = system.simulate()

    return {
        'times': np.array(times),
        'states': np.array(states),
        'full_states': system.get_full_state(),
        'energy': np.array(energy),
        'momentum': np.array(momentum),
        'events': system.event_log,
        'summary': summary,
    }


def generate_dataset(n_trajectories: int, n_particles: int,
                     config: Optional[SimulationConfig] = None,
                     seed: int = C.SEED, **source_kwargs) -> List[Dict]:
    from collisions.source import SourceConfig, random_particles

    trajectories = []
    for i in range(n_trajectories):
        source_config = SourceConfig(seed=seed + i, **source_kwargs)
        particles = random_particles(n_particles, source_config)
        trajectories.append(generate_trajectory(particles, config))
    return trajectories
