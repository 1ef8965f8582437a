"""Small constrained decision processes for tests and experiments."""

from typing import Sequence, Tuple

import numpy as np

from .model import ConstrainedMDP


class TwoActionProblem(ConstrainedMDP):
    """One decision, two deterministic actions with equal reward.

    "A" costs more than the budget, "B" fits within it. A constrained planner
    should settle on "B".
    """

    def __init__(
        self,
        reward_a: float = 1.0,
        cost_a: float = 2.0,
        reward_b: float = 1.0,
        cost_b: float = 0.5,
        budget: float = 1.0
    ):
        self.outcomes = {"A": (reward_a, cost_a), "B": (reward_b, cost_b)}
        self.budget = budget

    def step(self, state, action, rng):
        reward, cost = self.outcomes[action]
        return "done", reward, [cost]

    def initial_budget(self):
        return [self.budget]

    def actions(self, state):
        return ("A", "B")

    def is_terminal(self, state) -> bool:
        return state == "done"


class ConstrainedRandomWalk(ConstrainedMDP):
    """Noisy 1-d walk towards a goal with a safe interval.

    State is the (rounded) position. Each step moves by the action plus
    Gaussian noise; the reward is the negative distance to the goal and the
    single cost is 1 whenever the walker ends outside [-safe_limit, safe_limit].

    Args:
        goal: Target position
        safe_limit: Half-width of the safe interval
        noise: Standard deviation of the transition noise
        budget: Expected discounted number of unsafe steps allowed
        gamma: Discount factor
        horizon: Episode length; the step count is part of the state
        step_sizes: Discrete action set used by actions()
    """

    def __init__(
        self,
        goal: float = 3.0,
        safe_limit: float = 2.0,
        noise: float = 0.3,
        budget: float = 0.5,
        gamma: float = 0.95,
        horizon: int = 20,
        step_sizes: Sequence[float] = (-1.0, -0.5, 0.0, 0.5, 1.0)
    ):
        self.goal = goal
        self.safe_limit = safe_limit
        self.noise = noise
        self.budget = budget
        self.gamma = gamma
        self.horizon = horizon
        self.step_sizes = tuple(step_sizes)

    def initial_state(self) -> Tuple[float, int]:
        return (0.0, 0)

    def step(self, state, action, rng):
        x, t = state
        x_next = round(float(x + action + self.noise * rng.standard_normal()), 3)
        reward = -abs(x_next - self.goal)
        cost = 1.0 if abs(x_next) > self.safe_limit else 0.0
        return (x_next, t + 1), reward, [cost]

    def initial_budget(self):
        return [self.budget]

    def actions(self, state):
        return self.step_sizes

    def is_terminal(self, state) -> bool:
        return state[1] >= self.horizon

    def discount(self) -> float:
        return self.gamma


class UniformStepGenerator:
    """Continuous action candidates for ConstrainedRandomWalk widening.

    Args:
        rng: Random stream (pass the planner's stream for reproducibility)
        max_step: Candidates are drawn from [-max_step, max_step]
    """

    def __init__(self, rng: np.random.Generator, max_step: float = 1.0):
        self.rng = rng
        self.max_step = max_step

    def propose(self, model, state, snode) -> float:
        return round(float(self.rng.uniform(-self.max_step, self.max_step)), 3)

