"""Lagrange multipliers and budget tracking for constrained search.

After each search iteration the multipliers take a projected dual-ascent
step against the cost vector realized at the root:

    lambda <- clip(lambda + alpha(i) * (cost - budget), 0, max_clip)

The floor of zero keeps cost slack from being rewarded; the ceiling bounds
how much the penalty can dominate the UCB score.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence, Union

import numpy as np

from .exceptions import DimensionMismatch

logger = logging.getLogger(__name__)


class AlphaSchedule(ABC):
    """Dual-ascent step size as a function of the iteration number."""

    @abstractmethod
    def alpha(self, iteration: int) -> float:
        pass


class ConstantAlphaSchedule(AlphaSchedule):
    """alpha(i) = scale"""

    def __init__(self, scale: float = 1e-3):
        self.scale = float(scale)

    def alpha(self, iteration: int) -> float:
        return self.scale

    def __repr__(self) -> str:
        return f"ConstantAlphaSchedule(scale={self.scale})"


class InverseAlphaSchedule(AlphaSchedule):
    """alpha(i) = scale / i

    Diminishing steps: slower to adapt than a constant step, but the
    multipliers settle instead of oscillating.
    """

    def __init__(self, scale: float = 1.0):
        self.scale = float(scale)

    def alpha(self, iteration: int) -> float:
        return self.scale / max(int(iteration), 1)

    def __repr__(self) -> str:
        return f"InverseAlphaSchedule(scale={self.scale})"


SCHEDULES = {
    "constant": ConstantAlphaSchedule,
    "inverse": InverseAlphaSchedule,
}


def make_schedule(
    schedule: Union[str, AlphaSchedule],
    nu: Optional[float] = None
) -> AlphaSchedule:
    """Build a schedule from a name or pass an instance through.

    Args:
        schedule: "constant", "inverse" or an AlphaSchedule
        nu: Scale override, only used when schedule is a name

    Returns:
        AlphaSchedule instance
    """
    if isinstance(schedule, AlphaSchedule):
        return schedule
    try:
        cls = SCHEDULES[str(schedule).lower()]
    except KeyError:
        raise ValueError(
            f"Unknown alpha_schedule {schedule!r}, expected one of {sorted(SCHEDULES)}"
        ) from None
    return cls() if nu is None else cls(nu)


def as_cost_vector(
    values: Union[float, Sequence[float], np.ndarray],
    n_costs: int,
    source: str,
    state=None,
    action=None
) -> np.ndarray:
    """Convert to a float vector of length n_costs, failing fast on mismatch."""
    vec = np.atleast_1d(np.asarray(values, dtype=float))
    if vec.ndim != 1 or vec.shape[0] != n_costs:
        raise DimensionMismatch(n_costs, int(vec.size), source, state, action)
    return vec


class DualAscentController:
    """Owns the multiplier vector and the remaining budget.

    Attributes:
        budget: Remaining budget vector
        lam: Current multipliers (same length as budget)
        cost_mem: Cost vector realized at the root on the last iteration
    """

    def __init__(
        self,
        budget: Sequence[float],
        schedule: AlphaSchedule,
        max_clip: Union[float, Sequence[float]] = np.inf,
        init_lambda: Optional[Sequence[float]] = None
    ):
        self.budget = np.array(budget, dtype=float)
        if self.budget.ndim != 1 or self.budget.size == 0:
            raise ValueError("Budget must be a non-empty 1-d vector")
        self.n_costs = int(self.budget.size)
        self.schedule = schedule
        self.max_clip = self._clip_bound(max_clip)
        self._init_lambda = (
            None if init_lambda is None
            else as_cost_vector(init_lambda, self.n_costs, "init_lambda")
        )
        self.lam = self.initial_lambda()
        self.cost_mem: Optional[np.ndarray] = None

    def _clip_bound(self, max_clip) -> np.ndarray:
        bound = np.asarray(max_clip, dtype=float)
        if bound.ndim == 0:
            return np.full(self.n_costs, float(bound))
        return as_cost_vector(bound, self.n_costs, "max_clip")

    def initial_lambda(self) -> np.ndarray:
        if self._init_lambda is None:
            return np.zeros(self.n_costs)
        return np.clip(self._init_lambda.copy(), 0.0, self.max_clip)

    def reset_lambda(self) -> None:
        self.lam = self.initial_lambda()
        self.cost_mem = None

    def reset_budget(self, budget: Sequence[float]) -> None:
        self.budget = as_cost_vector(budget, self.n_costs, "initial_budget")

    def record_cost(self, cost: np.ndarray) -> None:
        self.cost_mem = np.array(cost, dtype=float)

    def update(self, iteration: int) -> np.ndarray:
        """Projected dual-ascent step using the last recorded root cost.

        Args:
            iteration: 1-based iteration number passed to the schedule

        Returns:
            Updated multipliers
        """
        if self.cost_mem is None:
            return self.lam
        step = self.schedule.alpha(iteration)
        lam = self.lam + step * (self.cost_mem - self.budget)
        self.lam = np.clip(lam, 0.0, self.max_clip)
        logger.debug("iter %d: alpha=%.4g lambda=%s", iteration, step, self.lam)
        return self.lam

    def consume(self, cost: np.ndarray, discount: float = 1.0) -> np.ndarray:
        """Carry the budget forward after committing to an action.

        remaining = (budget - cost) / discount
        """
        self.budget = (self.budget - np.asarray(cost, dtype=float)) / discount
        return self.budget

    def __repr__(self) -> str:
        return (f"DualAscentController(budget={self.budget}, lambda={self.lam}, "
                f"schedule={self.schedule!r})")
