"""Pytest fixtures for testing."""

import pytest
import numpy as np

from cdpw import CDPWSolver
from cdpw.problems import ConstrainedRandomWalk, TwoActionProblem


class FaultyProblem(TwoActionProblem):
    """TwoActionProblem whose model raises after fail_after steps, or returns
    cost vectors of the wrong length when bad_cost_dim is set."""

    def __init__(self, fail_after: int = 0, bad_cost_dim=None):
        super().__init__()
        self.fail_after = fail_after
        self.bad_cost_dim = bad_cost_dim
        self.calls = 0

    def step(self, state, action, rng):
        self.calls += 1
        if self.bad_cost_dim is not None:
            return "done", 1.0, [0.0] * self.bad_cost_dim
        if self.calls > self.fail_after:
            raise RuntimeError("simulator crashed")
        return super().step(state, action, rng)


@pytest.fixture
def seed():
    """Seed shared by planners in a test."""
    return 42


@pytest.fixture
def rng(seed):
    return np.random.default_rng(seed)


@pytest.fixture
def two_action():
    """Action A (reward 1, cost 2) vs action B (reward 1, cost 0.5), budget 1."""
    return TwoActionProblem()


@pytest.fixture
def random_walk():
    return ConstrainedRandomWalk(noise=0.5, horizon=10)


@pytest.fixture
def faulty_problem():
    return FaultyProblem


@pytest.fixture
def small_solver(seed):
    """Cheap solver for end-to-end tests."""
    return CDPWSolver(depth=4, n_iterations=150, seed=seed)
