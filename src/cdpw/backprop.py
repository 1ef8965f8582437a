"""Backpropagation for constrained DPW.

Each visit updates, for the state-action node on the path:
- Visit counts n(s,a) and N(s)
- Running-mean reward q(s,a)
- Running-mean cost vector qc(s,a)

The sample is the step reward/cost plus the discounted return from below.
"""

from typing import Tuple

import numpy as np

from .tree import CDPWTree


def discounted_return(
    reward: float,
    cost: np.ndarray,
    future_value: float,
    future_cost: np.ndarray,
    discount: float = 1.0
) -> Tuple[float, np.ndarray]:
    """(r + gamma * v, c + gamma * cv)"""
    return reward + discount * future_value, cost + discount * future_cost


def backpropagate(
    tree: CDPWTree,
    snode: int,
    sanode: int,
    q_sample: float,
    qc_sample: np.ndarray
) -> None:
    """Fold one (reward, cost) sample into a state-action node.

    Increments n(s,a) and N(s) together so that N(s) stays equal to the sum
    of its children's visits.

    Args:
        tree: Search tree
        snode: Parent state index
        sanode: State-action index
        q_sample: Realized discounted reward sample
        qc_sample: Realized discounted cost-vector sample
    """
    tree.n[sanode] += 1
    tree.total_n[snode] += 1
    n = tree.n[sanode]
    tree.q[sanode] += (q_sample - tree.q[sanode]) / n
    tree.qc[sanode] = tree.qc[sanode] + (qc_sample - tree.qc[sanode]) / n
