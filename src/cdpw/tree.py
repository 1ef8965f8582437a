"""Arena-indexed search tree for constrained DPW.

The tree is bipartite: state nodes own state-action nodes, and state-action
nodes record sampled transitions into state nodes. Nodes are stored as
parallel lists and referred to by integer index. Indices are handed out in
insertion order and are never reused or compacted while the tree is alive.
"""

from typing import Any, Dict, Hashable, List, Set, Tuple

import numpy as np


Transition = Tuple[int, float, np.ndarray]


class CDPWTree:
    """Append-only tree of state and state-action nodes.

    State node i:
        total_n[i]    - N(s), total visits
        children[i]   - state-action indices, in insertion order
        s_labels[i]   - state label

    State-action node j:
        n[j], q[j], qc[j]   - visits, mean reward, mean cost vector
        transitions[j]      - sampled (successor index, reward, cost vector)
        a_labels[j]         - action label
        n_a_children[j]     - distinct successors sampled (state widening)
        parent[j]           - owning state index

    Lookups (s_lookup, a_lookup, unique_transitions) key on the labels'
    own __eq__/__hash__: structural for tuples and frozen dataclasses,
    identity for plain objects.
    """

    def __init__(self, n_costs: int):
        self.n_costs = n_costs

        # state nodes
        self.total_n: List[int] = []
        self.children: List[List[int]] = []
        self.s_labels: List[Any] = []
        self.s_lookup: Dict[Hashable, int] = {}

        # state-action nodes
        self.n: List[int] = []
        self.q: List[float] = []
        self.qc: List[np.ndarray] = []
        self.transitions: List[List[Transition]] = []
        self.a_labels: List[Any] = []
        self.a_lookup: Dict[Tuple[int, Hashable], int] = {}
        self.parent: List[int] = []

        # transition bookkeeping
        self.n_a_children: List[int] = []
        self.unique_transitions: Set[Tuple[int, int]] = set()

        # mean one-step cost observed at each root-level state-action node
        self.top_level_costs: Dict[int, np.ndarray] = {}
        self._top_level_counts: Dict[int, int] = {}

    def insert_state_node(self, label: Any, register: bool = True) -> int:
        """Append a state node and return its index.

        Registering overwrites any earlier entry for an equal label; callers
        that want deduplication check s_lookup first.
        """
        self.total_n.append(0)
        self.children.append([])
        self.s_labels.append(label)
        snode = len(self.total_n) - 1
        if register:
            self.s_lookup[label] = snode
        return snode

    def insert_action_node(
        self,
        snode: int,
        label: Any,
        n0: int,
        q0: float,
        qc0: np.ndarray,
        register: bool = True
    ) -> int:
        """Append a state-action node under snode and return its index.

        Args:
            snode: Owning state index
            label: Action label
            n0: Initial visit count
            q0: Initial reward estimate
            qc0: Initial cost-vector estimate (length n_costs)
            register: Record (snode, label) in a_lookup

        Returns:
            Index of the new state-action node
        """
        if not 0 <= snode < len(self.total_n):
            raise IndexError(f"No state node {snode}")
        self.n.append(int(n0))
        self.q.append(float(q0))
        self.qc.append(np.array(qc0, dtype=float))
        self.a_labels.append(label)
        self.transitions.append([])
        self.parent.append(snode)
        self.n_a_children.append(0)
        sanode = len(self.n) - 1
        self.children[snode].append(sanode)
        if register:
            self.a_lookup[(snode, label)] = sanode
        return sanode

    def record_transition(
        self,
        sanode: int,
        spnode: int,
        reward: float,
        cost: np.ndarray,
        count_unique: bool = True
    ) -> bool:
        """Store a sampled transition and update the distinct-successor count.

        With count_unique, a (sanode, spnode) pair already seen does not
        count as a new successor.

        Returns:
            True if the successor counted as new
        """
        self.transitions[sanode].append((spnode, float(reward), cost))
        if count_unique:
            key = (sanode, spnode)
            if key in self.unique_transitions:
                return False
            self.unique_transitions.add(key)
        self.n_a_children[sanode] += 1
        return True

    def record_top_level_cost(self, sanode: int, cost: np.ndarray) -> None:
        """Running mean of the one-step cost seen at a root action."""
        count = self._top_level_counts.get(sanode, 0) + 1
        self._top_level_counts[sanode] = count
        prev = self.top_level_costs.get(sanode)
        if prev is None:
            self.top_level_costs[sanode] = np.array(cost, dtype=float)
        else:
            self.top_level_costs[sanode] = prev + (cost - prev) / count

    def is_empty(self) -> bool:
        """True when no state-action nodes exist."""
        return len(self.n) == 0

    def n_state_nodes(self) -> int:
        return len(self.total_n)

    def n_action_nodes(self) -> int:
        return len(self.n)

    def __repr__(self) -> str:
        return (f"CDPWTree(states={self.n_state_nodes()}, "
                f"actions={self.n_action_nodes()}, n_costs={self.n_costs})")


class StateNode:
    """Read-only view of one state node, handed to action generators."""

    def __init__(self, tree: CDPWTree, index: int):
        self.tree = tree
        self.index = index

    @property
    def label(self) -> Any:
        return self.tree.s_labels[self.index]

    @property
    def children(self) -> List[int]:
        return self.tree.children[self.index]

    @property
    def total_n(self) -> int:
        return self.tree.total_n[self.index]

    def n_children(self) -> int:
        return len(self.children)

    def action_labels(self) -> List[Any]:
        """Labels of the actions already tried at this state."""
        return [self.tree.a_labels[c] for c in self.children]

    def is_root(self) -> bool:
        return self.index == 0

    def __repr__(self) -> str:
        return (f"StateNode(index={self.index}, visits={self.total_n}, "
                f"children={self.n_children()})")
