"""Solver configuration for constrained DPW.

Usage:
    solver = CDPWSolver(depth=5, n_iterations=500, seed=0)
    solver = load_config("configs/cdpw/base.yaml")
"""

import dataclasses
import math
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Union

import yaml

from .constraints import AlphaSchedule, make_schedule
from .strategies import ExceptionRethrow


@dataclass(frozen=True)
class CDPWSolver:
    """Hyperparameters and strategies for a CDPW planner.

    Search budget:
        depth: Maximum tree depth and rollout horizon
        n_iterations: Iterations per planning call
        max_time: Wall-clock seconds per planning call, checked after each
            completed iteration

    Selection and widening:
        exploration_constant: c in q - lambda.qc + c*sqrt(ln N / n)
        k_action, alpha_action: New action admitted while
            children <= k_action * N^alpha_action
        k_state, alpha_state: New transition sampled while
            successors <= k_state * n^alpha_state
        enable_action_pw: If False, expand the full model.actions(s)
        enable_state_pw: If False, keep a single successor per action
        check_repeat_state, check_repeat_action: Deduplicate labels through
            the tree's lookup tables

    Constraints:
        alpha_schedule: "constant", "inverse" or an AlphaSchedule
        nu: Step-size scale used when alpha_schedule is given by name
        init_lambda: Initial multipliers (zeros if None)
        max_clip: Upper bound on each multiplier (scalar or per-dimension)

    Terminal policy:
        return_safe_action: If no root action is feasible, pick the one with
            the smallest worst-case violation
        return_best_cost: Pick the root action with the smallest total cost

    Strategies (constant, function or object, see strategies.py):
        estimate_value, init_Q, init_N, init_Qc, next_action, default_action

    Misc:
        keep_tree: Reuse tree, multipliers and remaining budget across calls
        reset_callback: f(model, s) restoring an external simulator to s
        tree_in_info, search_progress_info: Diagnostics only
        seed: Seed for the planner-owned random stream
        timer: Clock in seconds
    """
    depth: int = 10
    exploration_constant: float = 1.0
    nu: Optional[float] = None
    n_iterations: int = 100
    max_time: float = math.inf
    k_action: float = 10.0
    alpha_action: float = 0.5
    k_state: float = 10.0
    alpha_state: float = 0.5
    keep_tree: bool = False
    enable_action_pw: bool = True
    enable_state_pw: bool = True
    check_repeat_state: bool = True
    check_repeat_action: bool = True
    return_safe_action: bool = False
    return_best_cost: bool = False
    tree_in_info: bool = False
    search_progress_info: bool = False
    alpha_schedule: Union[str, AlphaSchedule] = "inverse"
    estimate_value: Any = 0.0
    init_Q: Any = 0.0
    init_N: Any = 0
    init_Qc: Any = 0.0
    init_lambda: Optional[Sequence[float]] = None
    max_clip: Union[float, Sequence[float]] = math.inf
    next_action: Any = None
    default_action: Any = field(default_factory=ExceptionRethrow)
    reset_callback: Optional[Callable] = None
    seed: Optional[int] = None
    timer: Callable[[], float] = time.perf_counter

    def __post_init__(self):
        if self.depth < 0:
            raise ValueError(f"depth must be >= 0, got {self.depth}")
        if self.n_iterations < 0:
            raise ValueError(f"n_iterations must be >= 0, got {self.n_iterations}")
        if self.max_time < 0:
            raise ValueError(f"max_time must be >= 0, got {self.max_time}")
        if self.exploration_constant < 0:
            raise ValueError("exploration_constant must be >= 0")
        for name in ("k_action", "alpha_action", "k_state", "alpha_state"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.return_safe_action and self.return_best_cost:
            raise ValueError("return_safe_action and return_best_cost are mutually exclusive")
        # fail early on unknown schedule names
        make_schedule(self.alpha_schedule, self.nu)

    def schedule(self) -> AlphaSchedule:
        return make_schedule(self.alpha_schedule, self.nu)

    def with_options(self, **kwargs) -> "CDPWSolver":
        """Copy with some options replaced."""
        return dataclasses.replace(self, **kwargs)

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> "CDPWSolver":
        """Build from a plain dict, e.g. a parsed YAML section.

        Unknown keys raise ValueError. Lists are stored as tuples.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ValueError(f"Unknown solver options: {unknown}")
        kwargs = {
            k: tuple(v) if isinstance(v, list) else v
            for k, v in options.items()
        }
        return cls(**kwargs)


def load_config(path: Union[str, Path], section: Optional[str] = "cdpw") -> CDPWSolver:
    """Load a CDPWSolver from a YAML file.

    Args:
        path: YAML file
        section: Top-level key holding the solver options; if the key is
            absent the whole document is used

    Returns:
        CDPWSolver
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path) as f:
        config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ValueError(f"Config root must be a mapping, got {type(config).__name__}")
    if section and section in config:
        config = config[section] or {}
    return CDPWSolver.from_dict(config)
