"""Constrained Double Progressive Widening MCTS (CDPW).

Online planning for decision processes with large or continuous state and
action spaces under expected cumulative cost constraints.

The search is DPW Monte Carlo tree search over reward and cost-vector
statistics. Constraints enter through Lagrange multipliers: UCB selection
penalizes each action by lambda . qc, and the multipliers are adjusted by
projected dual ascent after every iteration.
"""

__version__ = "0.1.0"

from .config import CDPWSolver, load_config
from .constraints import (
    AlphaSchedule,
    ConstantAlphaSchedule,
    DualAscentController,
    InverseAlphaSchedule,
)
from .estimators import HeuristicEstimator, RolloutEstimator
from .exceptions import (
    ActionGenerationFailure,
    CDPWError,
    DimensionMismatch,
    EstimatorFailure,
    InitializationFailure,
    ModelSimulationFailure,
    NoActionAvailable,
    ResetFailure,
    SearchFailure,
)
from .model import ConstrainedMDP
from .planner import CDPWPlanner, act, solve
from .strategies import ExceptionRethrow, RandomActionGenerator, RandomPolicy
from .tree import CDPWTree, StateNode

__all__ = [
    "CDPWSolver",
    "load_config",
    "AlphaSchedule",
    "ConstantAlphaSchedule",
    "InverseAlphaSchedule",
    "DualAscentController",
    "HeuristicEstimator",
    "RolloutEstimator",
    "CDPWError",
    "SearchFailure",
    "ModelSimulationFailure",
    "EstimatorFailure",
    "ActionGenerationFailure",
    "InitializationFailure",
    "ResetFailure",
    "NoActionAvailable",
    "DimensionMismatch",
    "ConstrainedMDP",
    "CDPWPlanner",
    "solve",
    "act",
    "ExceptionRethrow",
    "RandomActionGenerator",
    "RandomPolicy",
    "CDPWTree",
    "StateNode",
]
