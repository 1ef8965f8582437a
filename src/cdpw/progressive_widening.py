"""Double progressive widening thresholds.

A node visited N times may hold at most max(1, ceil(k * N^alpha)) children.
Both gates count the visit in progress: a child is admitted only if the new
count still fits the bound once this visit is backed up.
"""

import math


def widening_limit(visits: int, k: float, alpha: float) -> float:
    """Formula: k * N^alpha

    Args:
        visits: Visit count N of the node being widened
        k: Base constant
        alpha: Exponent

    Returns:
        Widening threshold (not rounded)
    """
    return k * (max(visits, 0) ** alpha)


def max_successors(n: int, k: float, alpha: float) -> int:
    """Upper bound on distinct children after n completed visits.

    max(1, ceil(k * n^alpha))
    """
    return max(1, math.ceil(widening_limit(n, k, alpha)))


def should_widen_actions(
    n_children: int,
    total_n: int,
    k: float = 10.0,
    alpha: float = 0.5
) -> bool:
    """Admit a new action if children + 1 <= max_successors(N(s) + 1).

    A state with no children is always widened.
    """
    return n_children + 1 <= max_successors(total_n + 1, k, alpha)


def should_widen_states(
    n_successors: int,
    n: int,
    k: float = 10.0,
    alpha: float = 0.5
) -> bool:
    """Sample a new transition if successors + 1 <= max_successors(n(s,a) + 1).

    An action with no sampled successor is always widened.
    """
    return n_successors + 1 <= max_successors(n + 1, k, alpha)
