"""
Quick demo — watch the particles collide.
Run: python demo.py 100            (100 random particles)
     python demo.py < particles.txt (count, then x y vx vy radius mass r g b per line)
Press Q or close window to stop drawing.
"""
import argparse
import logging
import sys

import collisions as C
from collisions.engine import CollisionSystem, SimulationConfig
from collisions.renderer import Renderer, AppearanceConfig
from collisions.source import SourceConfig, random_particles, read_particles


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Event-driven elastic collision demo')
    parser.add_argument('n', type=int, nargs='?',
                        help='number of random particles (reads stdin when omitted)')
    parser.add_argument('--limit', type=float, default=C.LIMIT)
    parser.add_argument('--hz', type=float, default=10.0, help='redraws per unit time')
    parser.add_argument('--upscale', action='store_true', help='enlarge invisible radii')
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--frames', default=None, help='directory to save PNG frames to')
    parser.add_argument('--headless', action='store_true', help='no window')
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s %(name)s %(levelname)s %(message)s')

    source_config = SourceConfig(upscale_radii=args.upscale, seed=args.seed)
    if args.n is not None:
        particles = random_particles(args.n, source_config)
    else:
        print("Reading particles from stdin...")
        particles = read_particles(sys.stdin, source_config)

    renderer = Renderer(source_config.size,
                        AppearanceConfig(show_window=not args.headless, frame_dir=args.frames))
    system = CollisionSystem(particles, SimulationConfig(limit=args.limit, hz=args.hz),
                             renderer=renderer)
    energy_before = system.total_kinetic_energy()
    summary = system.simulate()
    renderer.close()

    print(f"Simulation over at t={summary['time']:.3f}")
    print(f"Collisions: {summary['binary']} binary, "
          f"{summary['vertical_wall'] + summary['horizontal_wall']} wall, "
          f"{summary['stale']} stale predictions discarded")
    print(f"Energy drift: {abs(system.total_kinetic_energy() - energy_before):.10f}")


if __name__ == '__main__':
    main()
