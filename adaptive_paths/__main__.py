#!/usr/bin/env python3
"""
Headless runner for the adaptive path engine.

`train` teaches the Q-Learning agent on a generated grid and reports the
learned path. `adaptive` follows an A* path while moving obstacles wander
across it and reports how often the path had to be replanned.
"""

import argparse
import logging
import sys

from .app.controller import SimulationController
from .domain.config import RLConfig, ObstacleConfig
from .domain.types import MovementPattern, CellType
from .utils.grid_factory import generate_maze_grid, place_start_and_end, create_empty_grid, add_random_walls
from .utils.rng import SeededRNG, set_global_seed


def _build_grid(args):
    rng = SeededRNG(args.seed)
    if args.maze:
        grid = generate_maze_grid(args.size, rng=rng)
        passages = [cell.coord for cell in grid if cell.type == CellType.EMPTY]
        start, end = place_start_and_end(grid, passages[0], passages[-1])
    else:
        grid = create_empty_grid(args.size)
        last = args.size - 1
        start, end = place_start_and_end(grid, (0, 0), (last, last))
        if args.wall_density > 0:
            add_random_walls(grid, args.wall_density, rng)
    return grid, start, end


def run_training(args) -> int:
    grid, start, end = _build_grid(args)
    config = RLConfig(
        learning_rate=args.learning_rate,
        discount_factor=args.discount,
        epsilon=args.epsilon,
        max_episodes=args.episodes,
    )
    controller = SimulationController(grid=grid, seed=args.seed, rl_config=config)

    print("🧠 Q-Learning training")
    print("=" * 50)
    print(f"📐 Grid: {grid.size}x{grid.size}")
    print(f"🎯 Start: {start} → End: {end}")
    print(f"   Episodes: {args.episodes}")
    print(f"   Learning rate: {config.learning_rate}, discount: {config.discount_factor}")
    print(f"   Epsilon: {config.epsilon} → {config.epsilon_min}")

    controller.run_training()
    result = controller.agent.training_result()

    print("\n🎉 Training completed!")
    print(f"   Total episodes: {result.total_episodes}")
    print(f"   Success rate: {result.success_rate:.1%}")
    print(f"   Last 50 episodes: {controller.agent.recent_success_rate(50):.1%}")
    print(f"   Average steps: {result.average_steps:.1f}")
    print(f"   Final epsilon: {result.final_epsilon:.3f}")

    path_result = controller.find_learned_path()
    if path_result.success:
        print(f"✅ Learned path length: {path_result.steps_taken} steps")
        return 0
    print(f"❌ Greedy policy stopped after {path_result.steps_taken} steps without reaching the end")
    return 1


def run_adaptive(args) -> int:
    grid, start, end = _build_grid(args)
    controller = SimulationController(
        grid=grid, seed=args.seed,
        obstacle_config=ObstacleConfig(speed=args.obstacle_speed),
    )

    pattern = MovementPattern[args.pattern.upper()]
    placed = sum(1 for _ in range(args.obstacles) if controller.add_random_obstacle(pattern))

    print("🚧 Adaptive path following")
    print("=" * 50)
    print(f"📐 Grid: {grid.size}x{grid.size}, {placed} {pattern.name.lower()} obstacles")
    print(f"🎯 Start: {start} → End: {end}")

    if not controller.start_adaptive():
        print("❌ No initial path found. Try fewer walls or obstacles.")
        return 1

    blocked_ticks = 0
    for _ in range(args.ticks):
        report = controller.tick_adaptive()
        if not report.path_available:
            blocked_ticks += 1

    snapshot = controller.snapshot()
    controller.stop()

    print(f"\n   Ticks: {args.ticks}")
    print(f"   Replans: {snapshot.replan_count}")
    print(f"   Planner success rate: {snapshot.planner_success_rate:.1%}")
    print(f"   Ticks without a path: {blocked_ticks}")
    print(f"   Final path length: {len(snapshot.path)} cells")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Adaptive grid path search")
    parser.add_argument("--size", type=int, default=20, help="Grid size (rows and columns)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--maze", action="store_true", help="Generate a maze instead of an open grid")
    parser.add_argument("--wall-density", type=float, default=0.0, help="Random wall density for open grids")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress")
    subparsers = parser.add_subparsers(dest="command", required=True)

    train = subparsers.add_parser("train", help="Train the Q-Learning agent")
    train.add_argument("--episodes", type=int, default=500, help="Number of episodes to train")
    train.add_argument("--learning-rate", type=float, default=0.1)
    train.add_argument("--discount", type=float, default=0.9)
    train.add_argument("--epsilon", type=float, default=0.3)
    train.set_defaults(func=run_training)

    adaptive = subparsers.add_parser("adaptive", help="Follow a path around moving obstacles")
    adaptive.add_argument("--obstacles", type=int, default=5, help="Number of obstacles to place")
    adaptive.add_argument("--pattern", choices=[p.name.lower() for p in MovementPattern], default="random")
    adaptive.add_argument("--obstacle-speed", type=int, default=1, help="Ticks between obstacle moves")
    adaptive.add_argument("--ticks", type=int, default=200, help="Number of simulation ticks")
    adaptive.set_defaults(func=run_adaptive)

    args = parser.parse_args(argv)
    set_global_seed(args.seed)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        return args.func(args)
    except ValueError as e:
        print(f"❌ {e}")
        return 2
    except KeyboardInterrupt:
        print("\n⏹️  Interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
