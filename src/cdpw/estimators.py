"""Leaf value and cost estimators.

An estimator is called when the search creates a new state node or runs
out of depth. It returns a scalar value and a cost vector with one entry per
constraint.
"""

from typing import Any, Optional, Tuple

import numpy as np

from .model import ConstrainedMDP


class RolloutEstimator:
    """Estimate (value, cost) by simulating a policy to the depth limit.

    Rewards and costs are discounted with model.discount(). The rollout
    stops early at terminal states.

    Args:
        policy: Object with action(state)
        rng: Random stream passed to model.step
    """

    def __init__(self, policy, rng: np.random.Generator):
        self.policy = policy
        self.rng = rng

    def estimate(
        self,
        model: ConstrainedMDP,
        state: Any,
        depth: int
    ) -> Tuple[float, np.ndarray]:
        gamma = model.discount()
        value = 0.0
        cost = np.zeros(model.n_costs())
        disc = 1.0
        s = state
        for _ in range(max(int(depth), 0)):
            if model.is_terminal(s):
                break
            a = self.policy.action(s)
            s, r, c = model.step(s, a, self.rng)
            value += disc * float(r)
            cost = cost + disc * np.asarray(c, dtype=float)
            disc *= gamma
        return value, cost

    def __repr__(self) -> str:
        return f"RolloutEstimator(policy={type(self.policy).__name__})"


class HeuristicEstimator:
    """Wrap separate value and cost heuristics f(model, s) into one estimator."""

    def __init__(self, value_fn, cost_fn: Optional[Any] = None):
        self.value_fn = value_fn
        self.cost_fn = cost_fn

    def estimate(self, model: ConstrainedMDP, state: Any, depth: int):
        value = float(self.value_fn(model, state))
        if self.cost_fn is None:
            return value, np.zeros(model.n_costs())
        return value, np.asarray(self.cost_fn(model, state), dtype=float)
