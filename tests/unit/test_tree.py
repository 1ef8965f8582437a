"""Test the arena-indexed CDPW tree."""

import numpy as np
import pytest

from cdpw.tree import CDPWTree, StateNode


def test_indices_are_append_only():
    """Indices strictly increase and earlier ones stay valid."""
    tree = CDPWTree(n_costs=2)
    s_idx = [tree.insert_state_node(f"s{i}") for i in range(5)]
    assert s_idx == [0, 1, 2, 3, 4]

    a_idx = [tree.insert_action_node(0, a, 0, 0.0, np.zeros(2)) for a in "xyz"]
    a_idx.append(tree.insert_action_node(3, "x", 0, 0.0, np.zeros(2)))
    assert a_idx == [0, 1, 2, 3]
    assert tree.s_labels[2] == "s2"
    assert tree.a_labels[1] == "y"


def test_lookups():
    tree = CDPWTree(n_costs=1)
    root = tree.insert_state_node((0, 0))
    hidden = tree.insert_state_node((1, 1), register=False)
    sa = tree.insert_action_node(root, "left", 0, 0.0, [0.0])
    sa_hidden = tree.insert_action_node(root, "right", 0, 0.0, [0.0], register=False)

    assert tree.s_lookup == {(0, 0): root}
    assert (1, 1) not in tree.s_lookup
    assert tree.s_labels[hidden] == (1, 1)
    assert tree.a_lookup == {(root, "left"): sa}
    assert tree.children[root] == [sa, sa_hidden]
    assert tree.parent[sa_hidden] == root


def test_action_node_initial_statistics():
    tree = CDPWTree(n_costs=2)
    root = tree.insert_state_node("s")
    qc0 = [0.1, 0.2]
    sa = tree.insert_action_node(root, "a", 3, 1.5, qc0)

    assert tree.n[sa] == 3
    assert tree.q[sa] == 1.5
    np.testing.assert_allclose(tree.qc[sa], qc0)
    assert tree.transitions[sa] == []
    assert tree.n_a_children[sa] == 0
    # N(s) is updated by the caller, not by the tree
    assert tree.total_n[root] == 0


def test_insert_action_under_unknown_state():
    tree = CDPWTree(n_costs=1)
    with pytest.raises(IndexError):
        tree.insert_action_node(0, "a", 0, 0.0, [0.0])


def test_is_empty():
    tree = CDPWTree(n_costs=1)
    assert tree.is_empty()
    root = tree.insert_state_node("s")
    assert tree.is_empty()
    tree.insert_action_node(root, "a", 0, 0.0, [0.0])
    assert not tree.is_empty()


def test_record_transition_counts_unique_successors():
    tree = CDPWTree(n_costs=1)
    root = tree.insert_state_node("s")
    sa = tree.insert_action_node(root, "a", 0, 0.0, [0.0])
    sp = tree.insert_state_node("sp")

    assert tree.record_transition(sa, sp, 1.0, np.array([0.0]))
    assert not tree.record_transition(sa, sp, 1.0, np.array([0.0]))
    assert tree.n_a_children[sa] == 1
    assert len(tree.transitions[sa]) == 2

    # without deduplication every draw counts
    tree.record_transition(sa, sp, 1.0, np.array([0.0]), count_unique=False)
    assert tree.n_a_children[sa] == 2


def test_top_level_cost_running_mean():
    tree = CDPWTree(n_costs=1)
    root = tree.insert_state_node("s")
    sa = tree.insert_action_node(root, "a", 0, 0.0, [0.0])
    for c in (1.0, 2.0, 3.0):
        tree.record_top_level_cost(sa, np.array([c]))
    np.testing.assert_allclose(tree.top_level_costs[sa], [2.0])


def test_state_node_view():
    tree = CDPWTree(n_costs=1)
    root = tree.insert_state_node("s")
    other = tree.insert_state_node("t")
    tree.insert_action_node(root, "a", 0, 0.0, [0.0])
    tree.insert_action_node(root, "b", 0, 0.0, [0.0])

    node = StateNode(tree, root)
    assert node.is_root()
    assert not StateNode(tree, other).is_root()
    assert node.label == "s"
    assert node.n_children() == 2
    assert node.action_labels() == ["a", "b"]
