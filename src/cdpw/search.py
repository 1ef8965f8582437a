"""Main CDPW search loop.

One iteration from the root:

    simulate(s, d):
        if terminal(s): return 0, 0
        if d == 0: return estimate(s, 0)
        maybe admit a new action          (action progressive widening)
        a = argmax q - lambda.qc + c*sqrt(ln N / n)
        maybe sample a new transition     (state progressive widening)
        else reuse a recorded transition
        v, cv = estimate(s', d-1) if s' is new else simulate(s', d-1)
        backprop(r + gamma v, c + gamma cv)

After each iteration the multipliers take a dual-ascent step against the
cost realized at the root.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

import numpy as np

from .backprop import backpropagate, discounted_return
from .constraints import as_cost_vector
from .exceptions import (
    ActionGenerationFailure,
    CDPWError,
    EstimatorFailure,
    InitializationFailure,
    ModelSimulationFailure,
    NoActionAvailable,
    ResetFailure,
)
from .progressive_widening import should_widen_actions, should_widen_states
from .tree import StateNode
from .ucb import ucb_select

if TYPE_CHECKING:
    from .planner import CDPWPlanner

logger = logging.getLogger(__name__)


def _initial_cost(value: Any, n_costs: int, state, action) -> np.ndarray:
    if np.ndim(value) == 0:
        return np.full(n_costs, float(value))
    return as_cost_vector(value, n_costs, "init_Qc", state, action)


def add_action(p: "CDPWPlanner", snode: int, state: Any, action: Any) -> int:
    """Admit an action under snode, seeded by init_N / init_Q / init_Qc."""
    tree = p.tree
    try:
        n0 = int(p.init_N(p.model, state, action))
        q0 = float(p.init_Q(p.model, state, action))
        qc0 = _initial_cost(p.init_Qc(p.model, state, action), tree.n_costs, state, action)
    except CDPWError:
        raise
    except Exception as ex:
        raise InitializationFailure("node initializer failed", state, action, ex) from ex
    if n0 < 0:
        raise InitializationFailure(f"init_N must be >= 0, got {n0}", state, action)
    sanode = tree.insert_action_node(snode, action, n0, q0, qc0,
                                     p.solver.check_repeat_action)
    tree.total_n[snode] += n0
    return sanode


def reset_simulator(p: "CDPWPlanner", state: Any) -> None:
    """Call reset_callback(model, state) if one is configured."""
    if p.reset_callback is None:
        return
    try:
        p.reset_callback(p.model, state)
    except CDPWError:
        raise
    except Exception as ex:
        raise ResetFailure("reset_callback failed", state, None, ex) from ex


def expand_all(p: "CDPWPlanner", snode: int, state: Any) -> None:
    """Admit every action of model.actions(state), used without action widening."""
    try:
        actions = list(p.model.actions(state))
    except CDPWError:
        raise
    except Exception as ex:
        raise ActionGenerationFailure("model.actions failed", state, None, ex) from ex
    for a in actions:
        add_action(p, snode, state, a)


def propose_action(p: "CDPWPlanner", snode: int, state: Any) -> Any:
    try:
        return p.next_action(p.model, state, StateNode(p.tree, snode))
    except CDPWError:
        raise
    except Exception as ex:
        raise ActionGenerationFailure("action generator failed", state, None, ex) from ex


def sample_transition(
    p: "CDPWPlanner",
    state: Any,
    action: Any
) -> Tuple[Any, float, np.ndarray]:
    """Draw (s', r, c) from the model using the planner's random stream."""
    try:
        sp, r, c = p.model.step(state, action, p.rng)
    except CDPWError:
        raise
    except Exception as ex:
        raise ModelSimulationFailure("transition model failed", state, action, ex) from ex
    cost = as_cost_vector(c, p.tree.n_costs, "model.step", state, action)
    return sp, float(r), cost


def estimate_leaf(p: "CDPWPlanner", state: Any, depth: int) -> Tuple[float, np.ndarray]:
    try:
        v, cv = p.estimate_value(p.model, state, depth)
    except CDPWError:
        raise
    except Exception as ex:
        raise EstimatorFailure("leaf estimator failed", state, None, ex) from ex
    return float(v), as_cost_vector(cv, p.tree.n_costs, "estimate_value", state)


def simulate(p: "CDPWPlanner", snode: int, d: int) -> Tuple[float, np.ndarray]:
    """Run one simulation below snode with d steps of depth remaining.

    Returns:
        (discounted reward sample, discounted cost-vector sample)
    """
    sol = p.solver
    tree = p.tree
    s = tree.s_labels[snode]
    reset_simulator(p, s)

    if p.model.is_terminal(s):
        return 0.0, np.zeros(tree.n_costs)
    if d == 0:
        return estimate_leaf(p, s, d)

    # action progressive widening
    if sol.enable_action_pw:
        if should_widen_actions(len(tree.children[snode]), tree.total_n[snode],
                                sol.k_action, sol.alpha_action):
            a = propose_action(p, snode, s)
            if not sol.check_repeat_action or (snode, a) not in tree.a_lookup:
                add_action(p, snode, s, a)
    elif not tree.children[snode]:
        expand_all(p, snode, s)

    if not tree.children[snode]:
        raise NoActionAvailable("no actions to expand", s)

    sanode = ucb_select(tree, snode, p.controller.lam, sol.exploration_constant)
    a = tree.a_labels[sanode]

    # state progressive widening
    new_node = False
    if ((sol.enable_state_pw and should_widen_states(tree.n_a_children[sanode], tree.n[sanode],
                                                     sol.k_state, sol.alpha_state))
            or tree.n_a_children[sanode] == 0):
        sp, r, c = sample_transition(p, s, a)
        if sol.check_repeat_state and sp in tree.s_lookup:
            spnode = tree.s_lookup[sp]
        else:
            spnode = tree.insert_state_node(sp, sol.keep_tree or sol.check_repeat_state)
            new_node = True
        tree.record_transition(sanode, spnode, r, c, count_unique=sol.check_repeat_state)
    else:
        transitions = tree.transitions[sanode]
        spnode, r, c = transitions[int(p.rng.integers(len(transitions)))]
        sp = tree.s_labels[spnode]

    if new_node:
        v, cv = estimate_leaf(p, sp, d - 1)
    else:
        v, cv = simulate(p, spnode, d - 1)
    q, qc = discounted_return(r, c, v, cv, p.model.discount())

    backpropagate(tree, snode, sanode, q, qc)

    if d == sol.depth:
        p.controller.record_cost(qc)
        tree.record_top_level_cost(sanode, c)
    return q, qc


def run_search(
    p: "CDPWPlanner",
    snode: int,
    progress: Optional[Dict[str, list]] = None
) -> Tuple[int, float]:
    """Iterate until n_iterations or max_time is exhausted.

    The clock is checked only between iterations; a started iteration always
    completes.

    Args:
        p: Planner owning tree, controller and random stream
        snode: Root state index
        progress: If given, per-iteration lambda and root statistics are
            appended to its lists

    Returns:
        (number of completed iterations, elapsed seconds)
    """
    sol = p.solver
    tree = p.tree
    timer = sol.timer
    start = timer()
    nquery = 0
    for i in range(1, sol.n_iterations + 1):
        nquery += 1
        simulate(p, snode, sol.depth)
        p.controller.update(i)

        if progress is not None:
            children = tree.children[snode]
            progress["lambda_trajectory"].append(p.controller.lam.copy())
            progress["q_trajectory"].append([tree.q[ch] for ch in children])
            progress["qc_trajectory"].append([tree.qc[ch].copy() for ch in children])
            progress["n_a_children"].append([tree.n_a_children[ch] for ch in children])

        if i % 100 == 0:
            logger.debug("iteration %d: states=%d actions=%d lambda=%s",
                         i, tree.n_state_nodes(), tree.n_action_nodes(),
                         p.controller.lam)

        if timer() - start >= sol.max_time:
            break
    return nquery, timer() - start
