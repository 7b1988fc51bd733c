"""Unit tests for the CollisionSystem driver."""

import logging

import numpy as np
import pytest

from collisions.engine import (
    CollisionSystem, SimulationConfig, SimulationState, generate_dataset, generate_trajectory,
)
from collisions.event import Event, EventKind
from collisions.particle import Particle, Wall


class RecordingRenderer:
    """Stands in for the pygame renderer and counts calls."""

    def __init__(self):
        self.cleared = 0
        self.drawn = []
        self.presented = 0

    def clear(self):
        self.cleared += 1

    def draw_particle(self, position, radius, color):
        self.drawn.append((position, radius, color))

    def present(self):
        self.presented += 1


class TestSimulationConfig:

    def test_period(self):
        assert SimulationConfig(hz=4.0).period == 0.25

    def test_invalid_hz(self):
        with pytest.raises(ValueError):
            SimulationConfig(hz=0.0)

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            SimulationConfig(limit=-1.0)


class TestPredict:

    def test_pair_and_wall(self, head_on_pair):
        p, q = head_on_pair
        system = CollisionSystem([p, q], SimulationConfig(limit=10.0))
        system.predict(p, limit=10.0)

        kinds = []
        while system.schedule:
            e = system.schedule.extract_min()
            kinds.append((e.kind, e.time))
        # binary at 0.25, right wall at 0.75, vy == 0 so no horizontal wall
        assert [k for k, _ in kinds] == [EventKind.BINARY, EventKind.VERTICAL_WALL]
        assert kinds[0][1] == pytest.approx(0.25)
        assert kinds[1][1] == pytest.approx(0.75)

    def test_respects_limit(self, head_on_pair):
        p, q = head_on_pair
        system = CollisionSystem([p, q])
        system.predict(p, limit=0.5)
        assert len(system.schedule) == 1
        assert system.schedule.peek().kind is EventKind.BINARY

    def test_none_is_ignored(self):
        system = CollisionSystem([])
        system.predict(None, limit=1.0)
        assert len(system.schedule) == 0


class TestSimulate:

    def test_head_on_exchange(self, head_on_pair):
        p, q = head_on_pair
        system = CollisionSystem([p, q], SimulationConfig(limit=0.3, hz=10.0))
        summary = system.simulate()

        assert summary['binary'] == 1
        assert p.velocity == pytest.approx((-1.0, 0.0))
        assert q.velocity == pytest.approx((1.0, 0.0))
        assert system.time == pytest.approx(0.3)

    def test_single_particle_never_has_binary_events(self):
        p = Particle(x=0.5, y=0.5, vx=0.3, vy=0.17, radius=0.05)
        system = CollisionSystem([p], SimulationConfig(limit=10.0))
        summary = system.simulate()

        kinds = {e['kind'] for e in system.event_log}
        assert kinds <= {'tick', 'vertical_wall', 'horizontal_wall'}
        assert 'vertical_wall' in kinds
        assert summary['binary'] == 0
        assert p.count == summary['vertical_wall'] + summary['horizontal_wall']

    def test_clock_is_non_decreasing(self, gas):
        system = CollisionSystem(gas, SimulationConfig(limit=5.0, hz=2.0))
        system.simulate()
        times = [e['time'] for e in system.event_log]
        assert times == sorted(times)
        assert times[-1] <= 5.0
        assert system.stats['binary'] > 0

    def test_particles_stay_in_box(self, gas):
        system = CollisionSystem(gas, SimulationConfig(limit=5.0, hz=2.0))
        system.simulate()
        for p in gas:
            assert p.radius - 1e-9 <= p.x <= p.size - p.radius + 1e-9
            assert p.radius - 1e-9 <= p.y <= p.size - p.radius + 1e-9

    def test_no_overlap_after_run(self, gas):
        system = CollisionSystem(gas, SimulationConfig(limit=5.0, hz=2.0))
        system.simulate()
        for i, p in enumerate(gas):
            for q in gas[i + 1:]:
                assert p.distance_to(q) >= p.radius + q.radius - 1e-9

    def test_energy_conserved(self, gas):
        system = CollisionSystem(gas, SimulationConfig(limit=5.0, hz=2.0))
        energy = system.total_kinetic_energy()
        system.simulate()
        assert system.total_kinetic_energy() == pytest.approx(energy, rel=1e-9)

    def test_stale_events_are_discarded(self, gas):
        system = CollisionSystem(gas, SimulationConfig(limit=5.0, hz=2.0))
        summary = system.simulate()
        assert summary['stale'] > 0
        assert summary['events_inserted'] >= (
            summary['stale'] + summary['binary'] + summary['tick']
            + summary['vertical_wall'] + summary['horizontal_wall'])

    def test_counts_match_collisions(self, gas):
        system = CollisionSystem(gas, SimulationConfig(limit=5.0, hz=2.0))
        summary = system.simulate()
        total = sum(p.count for p in gas)
        walls = summary['vertical_wall'] + summary['horizontal_wall']
        assert total == 2 * summary['binary'] + walls

    def test_empty_population_only_ticks(self):
        system = CollisionSystem([], SimulationConfig(limit=3.0, hz=1.0))
        summary = system.simulate()
        assert summary['tick'] == 4
        assert system.time == 3.0
        assert {e['kind'] for e in system.event_log} == {'tick'}

    def test_last_tick_clamped_to_limit(self):
        p = Particle(x=0.5, y=0.5, vx=0.0, vy=0.0)
        system = CollisionSystem([p], SimulationConfig(limit=1.0, hz=3.0))
        system.simulate()
        assert system.time == pytest.approx(1.0)
        assert all(e['time'] <= 1.0 for e in system.event_log)

    def test_zero_limit(self, head_on_pair):
        system = CollisionSystem(list(head_on_pair), SimulationConfig(limit=0.0))
        summary = system.simulate()
        assert summary['tick'] == 1
        assert summary['binary'] == 0
        assert system.time == 0.0

    def test_limit_argument_overrides_config(self, head_on_pair):
        system = CollisionSystem(list(head_on_pair), SimulationConfig(limit=100.0, hz=10.0))
        system.simulate(limit=0.1)
        assert system.time == pytest.approx(0.1)

    def test_single_pass(self, head_on_pair):
        system = CollisionSystem(list(head_on_pair), SimulationConfig(limit=0.1))
        assert system.state is SimulationState.INITIALIZED
        system.simulate()
        assert system.state is SimulationState.TERMINATED
        with pytest.raises(RuntimeError):
            system.simulate()

    def test_record_events_off(self, head_on_pair):
        system = CollisionSystem(list(head_on_pair),
                                 SimulationConfig(limit=0.3, record_events=False))
        summary = system.simulate()
        assert system.event_log == []
        assert summary['binary'] == 1


class TestProcess:

    def test_stale_event_leaves_state_untouched(self):
        p = Particle(x=0.5, y=0.5, vx=0.2, vy=0.1, count=3)
        system = CollisionSystem([p], SimulationConfig(limit=10.0))
        event = Event.vertical_wall(0.5, p)

        p.resolve_wall_collision(Wall.HORIZONTAL)
        assert p.count == 4
        before = p.state.copy()

        assert system.process(event, limit=10.0) is False
        np.testing.assert_array_equal(p.state, before)
        assert p.count == 4
        assert system.time == 0.0
        assert system.stats['stale'] == 1
        assert len(system.schedule) == 0
        assert system.event_log == []

    def test_valid_wall_event_bounces_and_repredicts(self):
        p = Particle(x=0.05, y=0.5, vx=-1.0, vy=0.0, radius=0.05)
        system = CollisionSystem([p], SimulationConfig(limit=10.0))

        assert system.process(Event.vertical_wall(0.0, p), limit=10.0) is True
        assert p.velocity == (1.0, 0.0)
        assert p.count == 1
        nxt = system.schedule.peek()
        assert nxt.kind is EventKind.VERTICAL_WALL
        assert nxt.time == pytest.approx(0.9)

    def test_binary_repredicts_only_participants(self, head_on_pair):
        p, q = head_on_pair
        r = Particle(x=0.5, y=0.9, vx=0.0, vy=0.05, radius=0.05, particle_id=2)
        system = CollisionSystem([p, q, r], SimulationConfig(limit=10.0))
        p.advance(0.25)
        q.advance(0.25)

        system.process(Event.binary(0.0, p, q), limit=10.0)

        # r's own walls are not re-predicted, and nobody is heading for r
        seen = set()
        while system.schedule:
            e = system.schedule.extract_min()
            assert e.kind is EventKind.VERTICAL_WALL
            seen.update(id(x) for x in e.participants)
        assert seen == {id(p), id(q)}


class TestRendering:

    def test_renderer_called_on_ticks_only(self, head_on_pair):
        renderer = RecordingRenderer()
        system = CollisionSystem(list(head_on_pair), SimulationConfig(limit=2.0, hz=1.0),
                                 renderer=renderer)
        summary = system.simulate()

        assert summary['tick'] == 3
        assert renderer.cleared == 3
        assert renderer.presented == 3
        assert len(renderer.drawn) == 6
        position, radius, color = renderer.drawn[0]
        assert position == (0.2, 0.5)
        assert radius == 0.05

    def test_on_tick_callback(self):
        seen = []
        system = CollisionSystem([], SimulationConfig(limit=1.0, hz=2.0),
                                 on_tick=lambda s: seen.append(s.time))
        system.simulate()
        assert seen == [0.0, 0.5, 1.0]


class TestOverlapAnomaly:

    @pytest.fixture
    def overlapping(self):
        p = Particle(x=0.45, y=0.5, vx=0.1, vy=0.0, radius=0.1, mass=1.0, particle_id=0)
        q = Particle(x=0.55, y=0.5, vx=-0.1, vy=0.0, radius=0.1, mass=1.0, particle_id=1)
        return p, q

    def test_warning_at_construction(self, overlapping, caplog):
        with caplog.at_level(logging.WARNING, logger='collisions.engine'):
            system = CollisionSystem(list(overlapping))
        assert system.stats['overlaps'] == 1
        assert any('overlap' in r.getMessage() for r in caplog.records)

    def test_simulation_proceeds(self, overlapping):
        p, q = overlapping
        system = CollisionSystem([p, q], SimulationConfig(limit=1.0))
        summary = system.simulate()

        assert summary['negative_predictions'] >= 1
        assert summary['binary'] >= 1
        assert all(e['time'] >= 0.0 for e in system.event_log)
        # resolved at t=0 and now separating
        assert p.vx < 0 < q.vx


class TestStateAccess:

    def test_shapes(self, gas):
        system = CollisionSystem(gas)
        assert system.get_state().shape == (30, 4)
        assert system.get_full_state().shape == (30, 6)

    def test_empty_shapes(self):
        system = CollisionSystem([])
        assert system.get_state().shape == (0, 4)
        assert system.total_kinetic_energy() == 0

    def test_total_momentum(self, head_on_pair):
        system = CollisionSystem(list(head_on_pair))
        np.testing.assert_allclose(system.total_momentum(), [0.0, 0.0])


class TestTrajectory:

    def test_generate_trajectory(self, gas):
        traj = generate_trajectory(gas, SimulationConfig(limit=2.0, hz=2.0))
        assert traj['states'].shape == (5, 30, 4)
        np.testing.assert_allclose(traj['times'], [0.0, 0.5, 1.0, 1.5, 2.0])
        assert traj['energy'] == pytest.approx(np.full(5, traj['energy'][0]), rel=1e-9)
        assert traj['momentum'].shape == (5, 2)
        assert traj['summary']['state'] == 'terminated'

    def test_generate_dataset(self):
        data = generate_dataset(2, 10, SimulationConfig(limit=1.0, hz=1.0), seed=3)
        assert len(data) == 2
        assert data[0]['states'].shape == (2, 10, 4)
        assert not np.allclose(data[0]['states'][0], data[1]['states'][0])
