"""
Conservation check — does the event-driven engine keep kinetic energy?

For several seeded random boxes:
  1. Per-tick total kinetic energy (must stay flat: every collision is elastic)
  2. Per-tick |p| (changes only through wall bounces)
  3. Event mix: binary / wall / stale predictions discarded
"""
import logging
import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

import collisions as C
from collisions.engine import SimulationConfig, generate_dataset
from collisions.metrics import compute_energy, compute_momentum, relative_drift


COLORS = {
    'binary': '#3498db',
    'wall': '#2ecc71',
    'stale': '#e74c3c',
}


def evaluate(n_particles=60, n_seeds=5, limit=50.0, hz=2.0, radius=0.02):
    logging.basicConfig(level=logging.WARNING)
    os.makedirs('results/plots', exist_ok=True)

    config = SimulationConfig(limit=limit, hz=hz, record_events=False)
    print(f"Simulating {n_seeds} boxes × {n_particles} particles up to t={limit}...")
    trajectories = generate_dataset(n_seeds, n_particles, config,
                                    seed=C.SEED, radius=radius)

    print(f"\n{'=' * 60}")
    print(f"{'Seed':>6}  {'ticks':>6}  {'binary':>8}  {'wall':>8}  {'stale':>8}  {'max |ΔE/E₀|':>12}")
    print('-' * 60)
    energy_err, momenta = [], []
    for i, traj in enumerate(trajectories):
        masses = traj['full_states'][:, 5]
        energy = compute_energy(traj['states'], masses)
        p_norm = np.linalg.norm(compute_momentum(traj['states'], masses), axis=1)
        energy_err.append(np.abs(energy - energy[0]) / energy[0])
        momenta.append(p_norm)

        s = traj['summary']
        print(f"{C.SEED + i:>6}  {len(energy):>6}  {s['binary']:>8}  "
              f"{s['vertical_wall'] + s['horizontal_wall']:>8}  {s['stale']:>8}  "
              f"{relative_drift(energy):>12.2e}")

    times = trajectories[0]['times']
    fig, axes = plt.subplots(1, 3, figsize=(16, 5))
    fig.suptitle('Event-driven collision system: conservation', fontsize=14, fontweight='bold')

    ax = axes[0]
    for i, err in enumerate(energy_err):
        ax.plot(times[:len(err)], err, alpha=0.8, label=f'seed {C.SEED + i}')
    ax.set_xlabel('Simulation time')
    ax.set_ylabel('|ΔE / E₀|')
    ax.set_title('Kinetic energy error')
    ax.legend(fontsize=8)
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    for i, p in enumerate(momenta):
        ax.plot(times[:len(p)], p, alpha=0.8)
    ax.set_xlabel('Simulation time')
    ax.set_ylabel('|p|')
    ax.set_title('Total momentum (walls exchange it)')
    ax.grid(True, alpha=0.3)

    ax = axes[2]
    seeds = np.arange(len(trajectories))
    binary = [t['summary']['binary'] for t in trajectories]
    wall = [t['summary']['vertical_wall'] + t['summary']['horizontal_wall'] for t in trajectories]
    stale = [t['summary']['stale'] for t in trajectories]
    width = 0.25
    ax.bar(seeds - width, binary, width, label='binary', color=COLORS['binary'])
    ax.bar(seeds, wall, width, label='wall', color=COLORS['wall'])
    ax.bar(seeds + width, stale, width, label='stale', color=COLORS['stale'])
    ax.set_xticks(seeds)
    ax.set_xticklabels([str(C.SEED + i) for i in seeds])
    ax.set_xlabel('Seed')
    ax.set_ylabel('Events')
    ax.set_title('Event mix')
    ax.legend()

    fig.tight_layout()
    path = 'results/plots/conservation.png'
    fig.savefig(path, dpi=150)
    plt.close(fig)
    print(f"\nSaved {path}")


if __name__ == "__main__":
    evaluate()
