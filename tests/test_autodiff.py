import numpy as np
import pytest
import torch

from ipsolver import Descent, Solver, TorchProblem
from ipsolver.utils import check_derivatives

H = torch.diag(torch.tensor([2.0, 2.0, 4.0, 2.0], dtype=torch.float64))
Q = torch.tensor([-5.0, -5.0, -21.0, 7.0], dtype=torch.float64)
P = torch.stack(
    [
        torch.diag(torch.tensor([4.0, 2.0, 2.0, 0.0], dtype=torch.float64)),
        torch.diag(torch.tensor([2.0, 2.0, 2.0, 2.0], dtype=torch.float64)),
        torch.diag(torch.tensor([2.0, 4.0, 2.0, 4.0], dtype=torch.float64)),
    ]
)
R = torch.tensor(
    [[2.0, -1.0, 0.0, -1.0], [1.0, -1.0, 1.0, -1.0], [-1.0, 0.0, 0.0, -1.0]],
    dtype=torch.float64,
)
B = torch.tensor([5.0, 8.0, 10.0], dtype=torch.float64)


def objective(x: torch.Tensor) -> torch.Tensor:
    return 0.5 * x @ H @ x + Q @ x


def constraints(x: torch.Tensor) -> torch.Tensor:
    return 0.5 * torch.einsum("i,kij,j->k", x, P, x) + R @ x - B


@pytest.fixture
def problem() -> TorchProblem:
    return TorchProblem(objective, constraints)


def test_torch_problem_matches_analytic_derivatives(problem, rng):
    x = rng.standard_normal(4)
    z = rng.uniform(0.1, 2.0, size=3)
    h_np = H.numpy()
    p_np = P.numpy()
    r_np = R.numpy()

    assert problem.objective(x) == pytest.approx(0.5 * x @ h_np @ x + Q.numpy() @ x)
    assert np.allclose(problem.objective_gradient(x), h_np @ x + Q.numpy())
    assert np.allclose(problem.objective_hessian(x), h_np)
    assert np.allclose(problem.constraints_jacobian(x, z), np.array([Pi @ x + ri for Pi, ri in zip(p_np, r_np)]))
    assert np.allclose(problem.lagrangian_hessian(x, z), np.einsum("k,kij->ij", z, p_np))


def test_torch_problem_returns_numpy_float_arrays(problem):
    x = np.zeros(4)
    for value in (
        problem.objective_gradient(x),
        problem.constraints(x),
        problem.constraints_jacobian(x, np.ones(3)),
    ):
        assert isinstance(value, np.ndarray)
        assert value.dtype == np.float64
    assert isinstance(problem.objective(x), float)


def test_torch_problem_passes_derivative_check(problem, rng):
    errors = check_derivatives(problem, rng.standard_normal(4))
    assert errors["gradient"] < 1e-6
    assert errors["jacobian"] < 1e-6


def test_torch_problem_defaults_to_newton_and_solves(problem):
    solver = Solver.from_problem(problem)
    assert solver.descent is Descent.NEWTON
    x = solver.solve(np.zeros(4))
    assert np.allclose(x, [0.0, 1.0, 2.0, -1.0], atol=1e-5)


def test_torch_problem_with_bfgs(problem):
    res = Solver.from_problem(problem, descent=Descent.BFGS).minimize(np.zeros(4))
    assert res.success
    assert np.allclose(res.x, [0.0, 1.0, 2.0, -1.0], atol=1e-5)


def test_torch_problem_rejects_integer_dtype():
    with pytest.raises(ValueError, match="floating point"):
        TorchProblem(objective, constraints, dtype=torch.int64)
