"""Pluggable strategies and their one-time resolution to callables.

Several solver options accept either a constant, a plain function, or an
object exposing a named method. They are resolved once, when the planner is
built, into a callable with a fixed signature:

    init_Q / init_N / init_Qc : f(model, state, action)
    estimate_value            : f(model, state, remaining_depth) -> (v, cost)
    next_action               : f(model, state, state_node) -> action
    default_action            : f(model, state, error) -> action
"""

import numbers
from typing import Any, Callable, Optional

import numpy as np

from .tree import StateNode


def _resolve(spec: Any, method: str) -> Optional[Callable]:
    """Return the callable for spec, or None when spec is a constant."""
    bound = getattr(spec, method, None)
    if bound is not None and callable(bound):
        return bound
    if callable(spec):
        return spec
    return None


def resolve_init(spec: Any, method: str) -> Callable:
    """Resolve an init_Q / init_N / init_Qc option.

    Args:
        spec: Constant, f(model, s, a), or object with `method`
        method: Method name looked up on objects ("init_q", "init_n", "init_qc")

    Returns:
        Callable f(model, state, action)
    """
    fn = _resolve(spec, method)
    if fn is not None:
        return fn
    value = spec

    def constant(model, state, action):
        return value

    return constant


def resolve_estimator(spec: Any, n_costs: int) -> Callable:
    """Resolve estimate_value into f(model, state, depth) -> (value, cost)."""
    fn = _resolve(spec, "estimate")
    if fn is not None:
        return fn
    if not isinstance(spec, numbers.Real):
        raise TypeError(
            f"estimate_value must be a number, a function or an object with "
            f"estimate(), got {type(spec).__name__}"
        )
    value = float(spec)
    zeros = np.zeros(n_costs)

    def constant(model, state, depth):
        return value, zeros

    return constant


def resolve_next_action(spec: Any) -> Callable:
    fn = _resolve(spec, "propose")
    if fn is None:
        raise TypeError(
            "next_action must be a function f(model, s, snode) or an object "
            f"with propose(), got {type(spec).__name__}"
        )
    return fn


def resolve_default_action(spec: Any) -> Callable:
    """Resolve default_action into f(model, state, error) -> action.

    Objects may expose default_action(model, state, error) or, like a policy,
    action(state). Anything else is returned as a fixed action.
    """
    fn = getattr(spec, "default_action", None)
    if fn is not None and callable(fn):
        return fn
    policy_action = getattr(spec, "action", None)
    if policy_action is not None and callable(policy_action):
        return lambda model, state, error: policy_action(state)
    if callable(spec):
        return spec
    fixed = spec

    def constant(model, state, error):
        return fixed

    return constant


class ExceptionRethrow:
    """Fallback that re-raises the search failure."""

    def default_action(self, model, state, error: BaseException):
        raise error

    def __repr__(self) -> str:
        return "ExceptionRethrow()"


class RandomActionGenerator:
    """Propose a random untried action from model.actions(state).

    Once every action at a state has been tried, any action may be proposed
    again; the search then reuses the existing child.
    """

    def __init__(self, rng: np.random.Generator):
        self.rng = rng

    def propose(self, model, state, snode: StateNode):
        actions = list(model.actions(state))
        if not actions:
            raise ValueError(f"No actions available at state {state!r}")
        tried = snode.action_labels()
        untried = [a for a in actions if a not in tried]
        pool = untried or actions
        return pool[int(self.rng.integers(len(pool)))]


class RandomPolicy:
    """Uniform random policy over model.actions(state)."""

    def __init__(self, model, rng: np.random.Generator):
        self.model = model
        self.rng = rng

    def action(self, state):
        actions = list(self.model.actions(state))
        return actions[int(self.rng.integers(len(actions)))]
