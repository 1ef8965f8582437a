"""Tree inspection helpers for debugging searches."""

from typing import Any, Dict

import networkx as nx
import numpy as np

from .tree import CDPWTree


def tree_statistics(tree: CDPWTree, root: int = 0) -> Dict[str, Any]:
    """Get tree statistics."""
    children = tree.children[root] if tree.n_state_nodes() > root else []
    return {
        "state_nodes": tree.n_state_nodes(),
        "action_nodes": tree.n_action_nodes(),
        "transitions": sum(len(t) for t in tree.transitions),
        "root_visits": tree.total_n[root] if tree.n_state_nodes() > root else 0,
        "root_children": len(children),
        "max_successors": max(tree.n_a_children, default=0),
    }


def tree_to_graph(tree: CDPWTree) -> nx.DiGraph:
    """Snapshot the tree as a networkx DiGraph.

    Nodes are ("s", i) for state nodes and ("a", j) for state-action nodes.
    State -> action edges mark ownership; action -> state edges carry the
    number of times that transition was sampled.
    """
    g = nx.DiGraph()
    for i, label in enumerate(tree.s_labels):
        g.add_node(("s", i), kind="state", label=label, visits=tree.total_n[i])
    for j, label in enumerate(tree.a_labels):
        g.add_node(
            ("a", j),
            kind="action",
            label=label,
            visits=tree.n[j],
            q=tree.q[j],
            qc=np.array(tree.qc[j]),
            successors=tree.n_a_children[j],
        )
        g.add_edge(("s", tree.parent[j]), ("a", j))
        for spnode, _, _ in tree.transitions[j]:
            if g.has_edge(("a", j), ("s", spnode)):
                g.edges[("a", j), ("s", spnode)]["count"] += 1
            else:
                g.add_edge(("a", j), ("s", spnode), count=1)
    return g
