"""Unit tests for tree diagnostics."""

from cdpw import CDPWSolver, solve
from cdpw.diagnostics import tree_statistics, tree_to_graph
from cdpw.tree import CDPWTree


def test_statistics_empty_tree():
    stats = tree_statistics(CDPWTree(1))
    assert stats["state_nodes"] == 0
    assert stats["root_visits"] == 0
    assert stats["max_successors"] == 0


def test_statistics_after_search(two_action):
    planner = solve(CDPWSolver(depth=1, n_iterations=40, seed=0), two_action)
    planner.act("start")
    stats = tree_statistics(planner.tree)
    assert stats["root_visits"] == 40
    assert stats["root_children"] == 2
    assert stats["action_nodes"] == 2
    # every sample lands on the shared "done" node
    assert stats["state_nodes"] == 2
    assert stats["transitions"] == 40
    assert stats["max_successors"] == 1


def test_graph_structure(two_action):
    planner = solve(CDPWSolver(depth=1, n_iterations=40, seed=0), two_action)
    planner.act("start")
    tree = planner.tree
    g = tree_to_graph(tree)

    assert g.number_of_nodes() == tree.n_state_nodes() + tree.n_action_nodes()
    assert set(g.successors(("s", 0))) == {("a", 0), ("a", 1)}
    for j in range(tree.n_action_nodes()):
        counts = sum(g.edges[("a", j), sp]["count"] for sp in g.successors(("a", j)))
        assert counts == len(tree.transitions[j])
        assert g.nodes[("a", j)]["visits"] == tree.n[j]
