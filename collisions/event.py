"""
Predicted events for the collision system.

An event names what will happen (its kind), when, and to whom. It also
stamps each participant's collision count at creation; once any of those
counts moves on, the prediction is stale and the driver drops it.
"""

import enum
from dataclasses import dataclass, field
from typing import Optional, Tuple

from collisions.particle import Particle, Wall


class EventKind(enum.Enum):
    TICK = 'tick'                        # redraw, no participants
    VERTICAL_WALL = 'vertical_wall'      # a hits a vertical wall
    HORIZONTAL_WALL = 'horizontal_wall'  # a hits a horizontal wall
    BINARY = 'binary'                    # a hits b

    @property
    def wall(self) -> Optional[Wall]:
        if self is EventKind.VERTICAL_WALL:
            return Wall.VERTICAL
        if self is EventKind.HORIZONTAL_WALL:
            return Wall.HORIZONTAL
        return None

    @property
    def n_participants(self) -> int:
        return _PARTICIPANTS[self]


_PARTICIPANTS = {
    EventKind.TICK: 0,
    EventKind.VERTICAL_WALL: 1,
    EventKind.HORIZONTAL_WALL: 1,
    EventKind.BINARY: 2,
}

NO_COUNT = -1


def _count_of(p: Optional[Particle]) -> int:
    return p.count if p is not None else NO_COUNT


@dataclass(frozen=True, order=True)
class Event:
    """
    Immutable prediction ordered by time only.

    Use the constructors ``tick``, ``vertical_wall``, ``horizontal_wall``
    and ``binary``; they take the count snapshots for you.
    """
    time: float
    kind: EventKind = field(compare=False)
    a: Optional[Particle] = field(default=None, compare=False, repr=False)
    b: Optional[Particle] = field(default=None, compare=False, repr=False)
    count_a: int = field(default=NO_COUNT, compare=False)
    count_b: int = field(default=NO_COUNT, compare=False)

    def __post_init__(self):
        present = (self.a is not None) + (self.b is not None)
        if self.b is not None and self.a is None:
            raise ValueError("Event participant b requires a")
        if present != self.kind.n_participants:
            raise ValueError(
                f"{self.kind.value} event takes {self.kind.n_participants} "
                f"participants, got {present}")
        if self.kind is EventKind.BINARY and self.a is self.b:
            raise ValueError("Binary event needs two distinct particles")
        # frozen: snapshot through object.__setattr__
        if self.a is not None and self.count_a == NO_COUNT:
            object.__setattr__(self, 'count_a', self.a.count)
        if self.b is not None and self.count_b == NO_COUNT:
            object.__setattr__(self, 'count_b', self.b.count)

    @classmethod
    def tick(cls, time: float) -> 'Event':
        return cls(time, EventKind.TICK)

    @classmethod
    def vertical_wall(cls, time: float, p: Particle) -> 'Event':
        return cls(time, EventKind.VERTICAL_WALL, p, count_a=p.count)

    @classmethod
    def horizontal_wall(cls, time: float, p: Particle) -> 'Event':
        return cls(time, EventKind.HORIZONTAL_WALL, p, count_a=p.count)

    @classmethod
    def wall(cls, time: float, p: Particle, wall: Wall) -> 'Event':
        if wall is Wall.VERTICAL:
            return cls.vertical_wall(time, p)
        return cls.horizontal_wall(time, p)

    @classmethod
    def binary(cls, time: float, a: Particle, b: Particle) -> 'Event':
        return cls(time, EventKind.BINARY, a, b, count_a=a.count, count_b=b.count)

    @property
    def participants(self) -> Tuple[Particle, ...]:
        return tuple(p for p in (self.a, self.b) if p is not None)

    def is_valid(self) -> bool:
        """False once any participant has collided since this was predicted."""
        if self.a is not None and self.a.count != self.count_a:
            return False
        if self.b is not None and self.b.count != self.count_b:
            return False
        return True

    def describe(self) -> dict:
        return {
            'time': self.time,
            'kind': self.kind.value,
            'a': self.a.particle_id if self.a is not None else None,
            'b': self.b.particle_id if self.b is not None else None,
        }
