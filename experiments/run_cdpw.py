#!/usr/bin/env python3
"""Run a closed-loop episode of the CDPW planner on a synthetic problem.

Loads solver options from YAML, plans at every step of a
ConstrainedRandomWalk episode and reports return and accumulated cost.

Usage:
    python experiments/run_cdpw.py \
        --config configs/cdpw/base.yaml \
        --n_iterations 300 \
        --episodes 3
"""

import argparse
import logging

import numpy as np

from cdpw import load_config, solve
from cdpw.problems import ConstrainedRandomWalk
from cdpw.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def run_episode(planner, problem: ConstrainedRandomWalk, rng: np.random.Generator) -> dict:
    """Plan and act until the episode ends."""
    s = problem.initial_state()
    total_reward = 0.0
    total_cost = np.zeros(problem.n_costs())
    disc = 1.0
    infeasible_steps = 0
    while not problem.is_terminal(s):
        a, info = planner.action_info(s)
        if info.get("infeasible"):
            infeasible_steps += 1
        s, r, c = problem.step(s, a, rng)
        total_reward += disc * r
        total_cost += disc * np.asarray(c, dtype=float)
        disc *= problem.discount()
        logger.debug("t=%d a=%.2f x=%.3f r=%.3f c=%s", s[1], a, s[0], r, c)
    return {
        "return": total_reward,
        "cost": total_cost,
        "infeasible_steps": infeasible_steps,
    }


def main():
    parser = argparse.ArgumentParser(description="Run CDPW on a constrained random walk")
    parser.add_argument("--config", type=str, default="configs/cdpw/base.yaml")
    parser.add_argument("--n_iterations", type=int, default=None)
    parser.add_argument("--depth", type=int, default=None)
    parser.add_argument("--episodes", type=int, default=1)
    parser.add_argument("--budget", type=float, default=0.5)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO,
                  search_level=logging.INFO)

    solver = load_config(args.config)
    overrides = {}
    if args.n_iterations is not None:
        overrides["n_iterations"] = args.n_iterations
    if args.depth is not None:
        overrides["depth"] = args.depth
    solver = solver.with_options(keep_tree=True, seed=args.seed, **overrides)
    logger.info("Solver: depth=%d n_iterations=%d schedule=%r",
                solver.depth, solver.n_iterations, solver.schedule())

    problem = ConstrainedRandomWalk(budget=args.budget)
    env_rng = np.random.default_rng(args.seed + 1)

    results = []
    for ep in range(args.episodes):
        planner = solve(solver.with_options(seed=args.seed + ep), problem)
        result = run_episode(planner, problem, env_rng)
        results.append(result)
        logger.info("Episode %d: return=%.3f cost=%s budget=%.3f infeasible_steps=%d",
                    ep, result["return"], result["cost"], args.budget,
                    result["infeasible_steps"])

    returns = [r["return"] for r in results]
    costs = [float(r["cost"][0]) for r in results]
    logger.info("Mean return %.3f +/- %.3f, mean cost %.3f (budget %.3f)",
                np.mean(returns), np.std(returns), np.mean(costs), args.budget)


if __name__ == "__main__":
    main()
