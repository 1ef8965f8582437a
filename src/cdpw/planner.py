"""CDPW planner: owns the tree, the multipliers and the random stream.

    planner = solve(CDPWSolver(depth=5, n_iterations=1000, seed=0), mdp)
    a = act(planner, s)
    a, info = planner.action_info(s)

A failed search (model, estimator or action generator raising) never escapes
the planner directly: the search returns an explicit failure outcome and the
configured default_action decides what to return. A cost vector with the
wrong length is the exception and is raised immediately.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

from .config import CDPWSolver
from .constraints import DualAscentController
from .estimators import RolloutEstimator
from .exceptions import NoActionAvailable, SearchFailure
from .model import ConstrainedMDP
from .search import reset_simulator, run_search
from .strategies import (
    RandomActionGenerator,
    RandomPolicy,
    resolve_default_action,
    resolve_estimator,
    resolve_init,
    resolve_next_action,
)
from .tree import CDPWTree
from .ucb import select_most_visited, select_root_action

logger = logging.getLogger(__name__)


@dataclass
class SearchSuccess:
    action: Any
    info: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SearchFailed:
    error: SearchFailure
    info: Dict[str, Any] = field(default_factory=dict)


SearchOutcome = Union[SearchSuccess, SearchFailed]


class CDPWPlanner:
    """Constrained double progressive widening MCTS planner.

    Strategies from the solver are resolved to callables once, here.

    Args:
        solver: Solver configuration
        model: Constrained decision process
        rng: Random stream; defaults to numpy's default_rng(solver.seed)
    """

    def __init__(
        self,
        solver: CDPWSolver,
        model: ConstrainedMDP,
        rng: Optional[np.random.Generator] = None
    ):
        self.solver = solver
        self.model = model
        self.rng = rng if rng is not None else np.random.default_rng(solver.seed)
        self.n_costs = int(model.n_costs())

        self.estimate_value = self._resolve_estimator(solver.estimate_value)
        self.init_Q = resolve_init(solver.init_Q, "init_q")
        self.init_N = resolve_init(solver.init_N, "init_n")
        self.init_Qc = resolve_init(solver.init_Qc, "init_qc")
        if solver.next_action is None:
            self.next_action = RandomActionGenerator(self.rng).propose
        else:
            self.next_action = resolve_next_action(solver.next_action)
        self.default_action = resolve_default_action(solver.default_action)
        self.reset_callback = solver.reset_callback

        self.controller = DualAscentController(
            budget=model.initial_budget(),
            schedule=solver.schedule(),
            max_clip=solver.max_clip,
            init_lambda=solver.init_lambda
        )
        if self.controller.n_costs != self.n_costs:
            raise ValueError(
                f"model.n_costs() is {self.n_costs} but the initial budget has "
                f"{self.controller.n_costs} entries"
            )
        self.tree: Optional[CDPWTree] = None

    def _resolve_estimator(self, spec):
        if isinstance(spec, str):
            if spec != "rollout":
                raise ValueError(f"Unknown estimate_value {spec!r}")
            return RolloutEstimator(RandomPolicy(self.model, self.rng), self.rng).estimate
        return resolve_estimator(spec, self.n_costs)

    @property
    def budget(self) -> np.ndarray:
        return self.controller.budget

    @property
    def lam(self) -> np.ndarray:
        return self.controller.lam

    def seed(self, seed: int) -> None:
        """Re-seed the random stream in place (strategies share it)."""
        bit_generator = self.rng.bit_generator
        bit_generator.state = type(bit_generator)(seed).state

    def reset(self) -> None:
        """Drop the tree and restore the initial multipliers and budget."""
        self.tree = None
        self.controller.reset_lambda()
        self.controller.reset_budget(self.model.initial_budget())

    def act(self, state: Any) -> Any:
        return self.action_info(state)[0]

    def action_info(
        self,
        state: Any,
        tree_in_info: bool = False,
        search_progress_info: bool = False
    ) -> Tuple[Any, Dict[str, Any]]:
        """Plan from state and return (action, diagnostics)."""
        outcome = self._plan(
            state,
            tree_in_info or self.solver.tree_in_info,
            search_progress_info or self.solver.search_progress_info
        )
        return self._resolve(state, outcome)

    def _root(self, state: Any) -> int:
        sol = self.solver
        if sol.keep_tree and self.tree is not None:
            snode = self.tree.s_lookup.get(state)
            if snode is None:
                snode = self.tree.insert_state_node(state, True)
            return snode
        self.tree = CDPWTree(self.n_costs)
        self.controller.reset_lambda()
        self.controller.reset_budget(self.model.initial_budget())
        return self.tree.insert_state_node(state, sol.keep_tree or sol.check_repeat_state)

    def _plan(self, state: Any, tree_in_info: bool, search_progress_info: bool) -> SearchOutcome:
        sol = self.solver
        info: Dict[str, Any] = {}
        progress = None
        if search_progress_info:
            progress = {
                "lambda_trajectory": [],
                "q_trajectory": [],
                "qc_trajectory": [],
                "n_a_children": [],
            }
        try:
            if self.model.is_terminal(state):
                raise SearchFailure("cannot plan from a terminal state", state)
            snode = self._root(state)

            nquery, elapsed = run_search(self, snode, progress)
            reset_simulator(self, state)

            info["search_time_us"] = elapsed * 1e6
            info["tree_queries"] = nquery
            if progress is not None:
                info.update(progress)
            if tree_in_info:
                info["tree"] = self.tree

            sanode, infeasible = select_root_action(
                self.tree, snode, self.controller.budget,
                sol.return_safe_action, sol.return_best_cost
            )
            if sanode is None:
                raise NoActionAvailable("root has no expanded actions", state)
        except SearchFailure as ex:
            return SearchFailed(ex, info)

        tree = self.tree
        children = tree.children[snode]
        info["lambda"] = self.controller.lam.copy()
        info["budget"] = self.controller.budget.copy()
        info["root_actions"] = [tree.a_labels[ch] for ch in children]
        info["root_visits"] = [tree.n[ch] for ch in children]
        info["root_q"] = [tree.q[ch] for ch in children]
        info["root_qc"] = [tree.qc[ch].copy() for ch in children]
        info["most_visited"] = tree.a_labels[select_most_visited(tree, snode)]
        info["infeasible"] = infeasible

        action = tree.a_labels[sanode]
        if infeasible:
            logger.warning("no root action satisfies budget %s; returning %r",
                           self.controller.budget, action)
        logger.info("planned %d iterations in %.1f ms: action=%r lambda=%s",
                    info["tree_queries"], info["search_time_us"] / 1e3,
                    action, self.controller.lam)

        if sol.keep_tree:
            self.controller.consume(self._immediate_cost(sanode), self.model.discount())
        return SearchSuccess(action, info)

    def _immediate_cost(self, sanode: int) -> np.ndarray:
        """Expected one-step cost of a root action, for budget carry-over."""
        tree = self.tree
        if sanode in tree.top_level_costs:
            return tree.top_level_costs[sanode]
        transitions = tree.transitions[sanode]
        if transitions:
            return np.mean([c for _, _, c in transitions], axis=0)
        return np.zeros(self.n_costs)

    def _resolve(self, state: Any, outcome: SearchOutcome) -> Tuple[Any, Dict[str, Any]]:
        if isinstance(outcome, SearchSuccess):
            return outcome.action, outcome.info
        info = outcome.info
        info["exception"] = outcome.error
        logger.warning("search failed, using default action: %s", outcome.error)
        action = self.default_action(self.model, state, outcome.error)
        return action, info

    def __repr__(self) -> str:
        return (f"CDPWPlanner(model={type(self.model).__name__}, "
                f"tree={self.tree!r}, controller={self.controller!r})")


def solve(solver: CDPWSolver, model: ConstrainedMDP,
          rng: Optional[np.random.Generator] = None) -> CDPWPlanner:
    return CDPWPlanner(solver, model, rng)


def act(planner: CDPWPlanner, state: Any) -> Any:
    return planner.act(state)
