import numpy as np
import pytest

from ipsolver.problem import ProblemWrapper
from ipsolver.utils import (
    approx_grad,
    approx_jacobian,
    check_derivatives,
    symmetric_solve,
    symmetrize,
)


def test_symmetrize_returns_symmetric_part():
    A = np.array([[1.0, 2.0], [0.0, 3.0]])
    S = symmetrize(A)
    assert np.allclose(S, S.T)
    assert np.allclose(S, [[1.0, 1.0], [1.0, 3.0]])


def test_symmetric_solve_indefinite(rng):
    M = rng.standard_normal((4, 4))
    A = M + M.T
    A[0, 0] -= 10.0
    b = rng.standard_normal(4)
    x = symmetric_solve(A, b)
    assert np.allclose(A @ x, b)


def test_symmetric_solve_singular_falls_back():
    A = np.array([[1.0, 0.0], [0.0, 0.0]])
    b = np.array([2.0, 0.0])
    x = symmetric_solve(A, b)
    assert np.isfinite(x).all()
    assert x[0] == pytest.approx(2.0)


def test_finite_differences_match_analytic():
    def fun(x):
        return float(np.sin(x[0]) + x[0] * x[1] ** 2)

    def vec(x):
        return np.array([x[0] ** 2, x[0] * x[1], np.exp(x[1])])

    x = np.array([0.3, -0.7])
    assert np.allclose(approx_grad(fun, x), [np.cos(0.3) + 0.49, 2 * 0.3 * -0.7], atol=1e-8)
    expected = np.array([[0.6, 0.0], [-0.7, 0.3], [0.0, np.exp(-0.7)]])
    assert np.allclose(approx_jacobian(vec, x), expected, atol=1e-8)


def test_finite_differences_reject_bad_eps():
    with pytest.raises(ValueError):
        approx_grad(lambda x: 0.0, np.zeros(1), eps=0.0)
    with pytest.raises(ValueError):
        approx_jacobian(lambda x: x, np.zeros(1), eps=-1.0)


def test_check_derivatives_flags_wrong_jacobian():
    good = ProblemWrapper(
        objective=lambda x: float(x @ x),
        objective_gradient=lambda x: 2.0 * x,
        constraints=lambda x: np.array([x.sum() - 1.0]),
        constraints_jacobian=lambda x, z: np.ones((1, x.size)),
        lagrangian_hessian=lambda x, z: np.zeros((x.size, x.size)),
    )
    errors = check_derivatives(good, np.array([0.2, -0.4]))
    assert errors["gradient"] < 1e-8
    assert errors["jacobian"] < 1e-8

    bad = ProblemWrapper(
        objective=good.objective,
        objective_gradient=good.objective_gradient,
        constraints=good.constraints,
        constraints_jacobian=lambda x, z: -np.ones((1, x.size)),
        lagrangian_hessian=good.lagrangian_hessian,
    )
    assert check_derivatives(bad, np.array([0.2, -0.4]))["jacobian"] == pytest.approx(2.0)
