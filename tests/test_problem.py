import numpy as np
import pytest

from ipsolver.problem import Problem, ProblemWrapper, as_problem_wrapper


class Halfspace(Problem):
    """min ||x||^2 subject to 1 - sum(x) < 0."""

    def objective(self, x):
        return float(x @ x)

    def objective_gradient(self, x):
        return 2.0 * x

    def constraints(self, x):
        return np.array([1.0 - x.sum()])

    def constraints_jacobian(self, x, z):
        return -np.ones((1, x.size))

    def lagrangian_hessian(self, x, z):
        return np.zeros((x.size, x.size))


class HalfspaceWithHessian(Halfspace):
    def objective_hessian(self, x):
        return 2.0 * np.eye(x.size)


def test_problem_is_abstract():
    with pytest.raises(TypeError):
        Problem()


def test_problem_hessian_is_optional():
    problem = Halfspace()
    assert not problem.has_objective_hessian
    with pytest.raises(NotImplementedError):
        problem.objective_hessian(np.zeros(2))
    assert HalfspaceWithHessian().has_objective_hessian


def test_wrapper_from_problem_without_hessian():
    wrapper = as_problem_wrapper(Halfspace())
    assert isinstance(wrapper, ProblemWrapper)
    assert not wrapper.has_objective_hessian
    assert wrapper.missing() == []
    assert wrapper.missing(require_hessian=True) == ["objective_hessian"]


def test_wrapper_from_problem_with_hessian():
    wrapper = ProblemWrapper.from_problem(HalfspaceWithHessian())
    assert wrapper.has_objective_hessian
    assert np.allclose(wrapper.evaluate_hessian(np.ones(3), 3), 2.0 * np.eye(3))


def test_wrapper_from_duck_typed_object():
    class Duck:
        def objective(self, x):
            return 0.0

        def objective_gradient(self, x):
            return np.zeros_like(x)

        def constraints(self, x):
            return -np.ones(1)

    wrapper = ProblemWrapper.from_problem(Duck())
    assert wrapper.missing() == ["constraints_jacobian", "lagrangian_hessian"]


def test_wrapper_is_returned_unchanged():
    wrapper = as_problem_wrapper(Halfspace())
    assert as_problem_wrapper(wrapper) is wrapper


def test_wrapper_evaluators_normalise_shapes():
    wrapper = ProblemWrapper(
        objective=lambda x: np.float32(x.sum()),
        objective_gradient=lambda x: [1.0] * x.size,
        constraints=lambda x: [[x[0] - 1.0, x[1] - 1.0]],
        constraints_jacobian=lambda x, z: np.eye(2),
        lagrangian_hessian=lambda x, z: np.zeros((2, 2)),
    )
    x = np.array([0.25, 0.5])
    assert isinstance(wrapper.evaluate_objective(x), float)
    assert wrapper.evaluate_gradient(x, 2).shape == (2,)
    assert np.allclose(wrapper.evaluate_constraints(x), [-0.75, -0.5])
    assert wrapper.evaluate_jacobian(x, np.ones(2)).shape == (2, 2)


def test_wrapper_reshapes_single_row_jacobian():
    wrapper = as_problem_wrapper(Halfspace())
    x = np.array([0.5, 0.5, 0.5])
    raw = ProblemWrapper(
        objective=wrapper.objective,
        objective_gradient=wrapper.objective_gradient,
        constraints=wrapper.constraints,
        constraints_jacobian=lambda x, z: -np.ones(x.size),
        lagrangian_hessian=wrapper.lagrangian_hessian,
    )
    assert raw.evaluate_jacobian(x, np.ones(1)).shape == (1, 3)


def test_wrapper_rejects_wrong_shapes():
    wrapper = ProblemWrapper(
        objective=lambda x: 0.0,
        objective_gradient=lambda x: np.zeros(x.size + 1),
        constraints=lambda x: np.zeros(2),
        constraints_jacobian=lambda x, z: np.zeros((3, x.size)),
        lagrangian_hessian=lambda x, z: np.zeros((x.size, x.size)),
    )
    x = np.zeros(2)
    with pytest.raises(ValueError, match="objective_gradient"):
        wrapper.evaluate_gradient(x, 2)
    with pytest.raises(ValueError, match="constraints"):
        wrapper.evaluate_constraints(x, 3)
    with pytest.raises(ValueError, match="constraints_jacobian"):
        wrapper.evaluate_jacobian(x, np.ones(2))
