"""Interface for the constrained decision process being planned over."""

from abc import ABC, abstractmethod
from typing import Any, Sequence, Tuple

import numpy as np


class ConstrainedMDP(ABC):
    """Generative model with a reward and a vector of costs per step.

    Subclasses must implement step() and initial_budget(). actions() is only
    needed when action widening is disabled or the default random action
    generator / rollout policy is used.
    """

    @abstractmethod
    def step(
        self,
        state: Any,
        action: Any,
        rng: np.random.Generator
    ) -> Tuple[Any, float, Sequence[float]]:
        """Sample a transition.

        Must draw all randomness from rng so that search is reproducible.

        Args:
            state: Current state
            action: Action to apply
            rng: Planner-owned random stream

        Returns:
            (next_state, reward, cost_vector)
        """
        pass

    @abstractmethod
    def initial_budget(self) -> Sequence[float]:
        """Cost budget at the start of an episode (one entry per constraint)."""
        pass

    def actions(self, state: Any) -> Sequence[Any]:
        raise NotImplementedError(
            f"{type(self).__name__} does not enumerate actions; "
            "supply next_action or enable action widening with a generator"
        )

    def is_terminal(self, state: Any) -> bool:
        return False

    def discount(self) -> float:
        return 1.0

    def n_costs(self) -> int:
        return len(self.initial_budget())
