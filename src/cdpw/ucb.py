"""Constrained UCB selection for CDPW.

During search:
    UCB = q(s,a) - lambda . qc(s,a) + c * sqrt(ln N(s) / n(s,a))

After search, the root action is chosen by one of three terminal policies
(see select_root_action).
"""

import math
from typing import List, Optional, Tuple

import numpy as np

from .tree import CDPWTree


def ucb_score(
    q: float,
    qc: np.ndarray,
    n: int,
    log_total: float,
    lam: np.ndarray,
    c: float = 1.0
) -> float:
    """Compute the constrained UCB score of one state-action node.

    Args:
        q: Mean reward estimate
        qc: Mean cost-vector estimate
        n: Visits of the state-action node
        log_total: ln N(s) of the parent (-inf when N(s) = 0)
        lam: Lagrange multipliers
        c: Exploration constant

    Returns:
        UCB score (inf for an unvisited action once the parent has visits)
    """
    value = q - float(np.dot(lam, qc))
    if c == 0.0 or log_total <= 0.0:
        return value
    if n == 0:
        return math.inf
    return value + c * math.sqrt(log_total / n)


def ucb_select(
    tree: CDPWTree,
    snode: int,
    lam: np.ndarray,
    c: float = 1.0
) -> int:
    """Select the child of snode with the highest constrained UCB score.

    Children are scanned in index order with a strict comparison, so ties
    go to the lowest index.

    Returns:
        State-action index
    """
    children = tree.children[snode]
    if not children:
        raise ValueError(f"State node {snode} has no children to select from")

    total = tree.total_n[snode]
    log_total = math.log(total) if total > 0 else -math.inf

    best_sanode = children[0]
    best_ucb = -math.inf
    for child in children:
        score = ucb_score(tree.q[child], tree.qc[child], tree.n[child],
                          log_total, lam, c)
        if math.isnan(score):
            raise ValueError(f"UCB score is NaN for state-action node {child}")
        if score > best_ucb:
            best_ucb = score
            best_sanode = child
    return best_sanode


def _argbest(children: List[int], key, maximize: bool) -> int:
    best = children[0]
    best_val = key(best)
    for child in children[1:]:
        val = key(child)
        if (val > best_val) if maximize else (val < best_val):
            best, best_val = child, val
    return best


def select_root_action(
    tree: CDPWTree,
    snode: int,
    budget: np.ndarray,
    return_safe_action: bool = False,
    return_best_cost: bool = False
) -> Tuple[Optional[int], bool]:
    """Terminal action selection at the root.

    - default: highest q among children with qc <= budget (component-wise);
      if none is feasible, highest q overall
    - return_safe_action: as default, but if none is feasible pick the child
      with the smallest worst violation max(qc - budget)
    - return_best_cost: ignore q, pick the smallest sum(qc)

    Returns:
        (state-action index or None if snode has no children, infeasible flag)
    """
    children = tree.children[snode]
    if not children:
        return None, True

    feasible = [ch for ch in children if np.all(tree.qc[ch] <= budget)]
    infeasible = not feasible

    if return_best_cost:
        return _argbest(children, lambda ch: float(np.sum(tree.qc[ch])), False), infeasible

    if feasible:
        return _argbest(feasible, lambda ch: tree.q[ch], True), False

    if return_safe_action:
        return _argbest(children, lambda ch: float(np.max(tree.qc[ch] - budget)), False), True

    return _argbest(children, lambda ch: tree.q[ch], True), True


def select_most_visited(tree: CDPWTree, snode: int) -> Optional[int]:
    """Most visited child of snode, for diagnostics."""
    children = tree.children[snode]
    if not children:
        return None
    return _argbest(children, lambda ch: tree.n[ch], True)
