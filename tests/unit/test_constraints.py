"""Test dual ascent, schedules and cost-vector validation."""

import numpy as np
import pytest

from cdpw.constraints import (
    ConstantAlphaSchedule,
    DualAscentController,
    InverseAlphaSchedule,
    as_cost_vector,
    make_schedule,
)
from cdpw.exceptions import DimensionMismatch


def test_constant_schedule():
    sched = ConstantAlphaSchedule(0.1)
    assert sched.alpha(1) == sched.alpha(1000) == pytest.approx(0.1)


def test_inverse_schedule():
    sched = InverseAlphaSchedule(2.0)
    assert sched.alpha(1) == 2.0
    assert sched.alpha(4) == 0.5


def test_make_schedule():
    assert isinstance(make_schedule("constant"), ConstantAlphaSchedule)
    assert make_schedule("constant").scale == pytest.approx(1e-3)
    assert make_schedule("inverse").scale == 1.0
    assert make_schedule("Inverse", nu=0.3).scale == pytest.approx(0.3)
    custom = ConstantAlphaSchedule(5.0)
    assert make_schedule(custom, nu=0.1) is custom
    with pytest.raises(ValueError):
        make_schedule("cosine")


def test_dual_ascent_step():
    ctrl = DualAscentController([1.0], InverseAlphaSchedule(1.0))
    np.testing.assert_allclose(ctrl.lam, [0.0])

    # no cost recorded yet: nothing to do
    ctrl.update(1)
    np.testing.assert_allclose(ctrl.lam, [0.0])

    ctrl.record_cost(np.array([2.0]))
    ctrl.update(1)
    np.testing.assert_allclose(ctrl.lam, [1.0])

    ctrl.record_cost(np.array([0.5]))
    ctrl.update(2)
    np.testing.assert_allclose(ctrl.lam, [0.75])


def test_multipliers_never_negative():
    ctrl = DualAscentController([1.0, 1.0], ConstantAlphaSchedule(1.0))
    ctrl.record_cost(np.array([0.0, 3.0]))
    ctrl.update(1)
    np.testing.assert_allclose(ctrl.lam, [0.0, 2.0])


def test_max_clip():
    ctrl = DualAscentController([0.0, 0.0], ConstantAlphaSchedule(10.0), max_clip=[1.0, 5.0])
    ctrl.record_cost(np.array([1.0, 1.0]))
    ctrl.update(1)
    np.testing.assert_allclose(ctrl.lam, [1.0, 5.0])

    scalar = DualAscentController([0.0], ConstantAlphaSchedule(10.0), max_clip=2.0)
    scalar.record_cost(np.array([1.0]))
    scalar.update(1)
    np.testing.assert_allclose(scalar.lam, [2.0])


def test_init_lambda():
    ctrl = DualAscentController([1.0, 1.0], InverseAlphaSchedule(), init_lambda=[0.5, 3.0],
                                max_clip=2.0)
    np.testing.assert_allclose(ctrl.lam, [0.5, 2.0])
    ctrl.lam = np.array([9.0, 9.0])
    ctrl.reset_lambda()
    np.testing.assert_allclose(ctrl.lam, [0.5, 2.0])

    with pytest.raises(DimensionMismatch):
        DualAscentController([1.0, 1.0], InverseAlphaSchedule(), init_lambda=[0.5])


def test_consume_budget():
    ctrl = DualAscentController([1.0], InverseAlphaSchedule())
    ctrl.consume(np.array([0.5]), discount=0.5)
    np.testing.assert_allclose(ctrl.budget, [1.0])
    ctrl.reset_budget([3.0])
    np.testing.assert_allclose(ctrl.budget, [3.0])
    with pytest.raises(DimensionMismatch):
        ctrl.reset_budget([3.0, 1.0])


def test_as_cost_vector():
    np.testing.assert_allclose(as_cost_vector([1, 2], 2, "test"), [1.0, 2.0])
    np.testing.assert_allclose(as_cost_vector(0.5, 1, "test"), [0.5])
    with pytest.raises(DimensionMismatch) as exc:
        as_cost_vector([1.0, 2.0, 3.0], 2, "model.step", state="s", action="a")
    assert exc.value.expected == 2
    assert exc.value.actual == 3
    assert exc.value.state == "s"
    assert exc.value.action == "a"


def test_empty_budget_rejected():
    with pytest.raises(ValueError):
        DualAscentController([], InverseAlphaSchedule())
