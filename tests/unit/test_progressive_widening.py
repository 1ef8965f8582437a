"""Unit tests for widening thresholds and backpropagation."""

import numpy as np
import pytest

from cdpw.backprop import backpropagate, discounted_return
from cdpw.progressive_widening import (
    max_successors,
    should_widen_actions,
    should_widen_states,
    widening_limit,
)
from cdpw.tree import CDPWTree


class TestWidening:

    def test_limit(self):
        assert widening_limit(4, 2.0, 0.5) == pytest.approx(4.0)
        assert widening_limit(0, 2.0, 0.5) == 0.0

    def test_empty_node_always_widens(self):
        assert should_widen_actions(0, 0, k=0.0)
        assert should_widen_states(0, 0, k=0.0)

    def test_threshold(self):
        # 1 * 4^0.5 = 2
        assert should_widen_states(2, 4, k=1.0, alpha=0.5)
        assert not should_widen_states(3, 4, k=1.0, alpha=0.5)
        assert should_widen_actions(2, 4, k=1.0, alpha=0.5)
        assert not should_widen_actions(3, 4, k=1.0, alpha=0.5)

    @pytest.mark.parametrize("k", [1.0, 2.0, 3.0])
    def test_integer_threshold_is_not_exceeded(self, k):
        """With alpha = 0 the bound is exactly k at every visit count."""
        for n in (0, 1, 10, 100):
            assert should_widen_states(int(k) - 1, n, k=k, alpha=0.0)
            assert not should_widen_states(int(k), n, k=k, alpha=0.0)
            assert should_widen_actions(int(k) - 1, n, k=k, alpha=0.0)
            assert not should_widen_actions(int(k), n, k=k, alpha=0.0)

    def test_counts_visit_in_progress(self):
        # after this visit n = 4, bound ceil(1 * 4^0.5) = 2
        assert should_widen_states(1, 3, k=1.0, alpha=0.5)
        assert not should_widen_states(2, 3, k=1.0, alpha=0.5)

    def test_max_successors(self):
        assert max_successors(0, 1.0, 0.5) == 1
        assert max_successors(2, 1.0, 0.5) == 2
        assert max_successors(9, 1.0, 0.5) == 3


class TestBackprop:

    def test_discounted_return(self):
        q, qc = discounted_return(1.0, np.array([0.5]), 2.0, np.array([1.0]), 0.5)
        assert q == 2.0
        np.testing.assert_allclose(qc, [1.0])

    def test_running_means(self):
        tree = CDPWTree(2)
        s = tree.insert_state_node("s")
        a = tree.insert_action_node(s, "a", 0, 0.0, np.zeros(2))
        backpropagate(tree, s, a, 1.0, np.array([1.0, 0.0]))
        backpropagate(tree, s, a, 3.0, np.array([0.0, 2.0]))
        assert tree.n[a] == 2
        assert tree.total_n[s] == 2
        assert tree.q[a] == pytest.approx(2.0)
        np.testing.assert_allclose(tree.qc[a], [0.5, 1.0])

    def test_prior_counts_weight_initial_values(self):
        tree = CDPWTree(1)
        s = tree.insert_state_node("s")
        a = tree.insert_action_node(s, "a", 3, 4.0, np.array([2.0]))
        backpropagate(tree, s, a, 0.0, np.array([0.0]))
        assert tree.q[a] == pytest.approx(3.0)
        np.testing.assert_allclose(tree.qc[a], [1.5])
