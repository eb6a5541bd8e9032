"""
Dense linear-algebra and finite-difference helpers.

The perturbed KKT matrix ``B + W - J^T S J`` is symmetric but generally
indefinite, so it is factorised with LAPACK's Bunch-Kaufman ``sysv`` through
:func:`scipy.linalg.solve`. Singular systems degrade to a ridge-regularised
solve and finally to least squares.
"""

from __future__ import annotations

from typing import Any, Callable, Dict

import numpy as np
import scipy.linalg as la

from .core import Array
from .problem import as_problem_wrapper

Objective = Callable[[Array], float]
VectorFunction = Callable[[Array], Array]


def symmetrize(matrix: Array) -> Array:
    """
    Return the symmetric part of ``matrix``.

    Hessians assembled from user callbacks are only symmetric up to
    floating-point error; ``0.5 * (A + A^T)`` removes the asymmetry before a
    symmetric factorisation is attempted.
    """
    return 0.5 * (matrix + matrix.T)


def symmetric_solve(matrix: Array, rhs: Array, reg: float = 1e-12) -> Array:
    """
    Solve ``A x = b`` for symmetric, possibly indefinite ``A``.

    Tries an LDL^T solve first. On ``LinAlgError`` it retries with ``reg``
    added to the diagonal and falls back to ``np.linalg.lstsq`` if the system
    is still singular.
    """
    sym = symmetrize(np.asarray(matrix, dtype=float))
    try:
        return la.solve(sym, rhs, assume_a="sym", check_finite=False)
    except la.LinAlgError:
        if reg > 0.0:
            augmented = sym + reg * np.eye(sym.shape[0], dtype=sym.dtype)
            try:
                return la.solve(augmented, rhs, assume_a="sym", check_finite=False)
            except la.LinAlgError:
                pass
    sol, *_ = np.linalg.lstsq(sym, rhs, rcond=None)
    return sol


def approx_grad(fun: Objective, x: Array, eps: float = 1e-6) -> Array:
    """Central-difference gradient of a scalar function."""
    if eps <= 0:
        raise ValueError("eps must be positive")
    x = np.asarray(x, dtype=float).copy()
    grad = np.zeros_like(x)
    for i in range(x.size):
        ei = np.zeros_like(x)
        ei[i] = eps
        grad[i] = (fun(x + ei) - fun(x - ei)) / (2.0 * eps)
    return grad


def approx_jacobian(fun: VectorFunction, x: Array, eps: float = 1e-6) -> Array:
    """Central-difference Jacobian of a vector function, shape ``(m, n)``."""
    if eps <= 0:
        raise ValueError("eps must be positive")
    x = np.asarray(x, dtype=float).copy()
    columns = []
    for i in range(x.size):
        ei = np.zeros_like(x)
        ei[i] = eps
        plus = np.asarray(fun(x + ei), dtype=float).reshape(-1)
        minus = np.asarray(fun(x - ei), dtype=float).reshape(-1)
        columns.append((plus - minus) / (2.0 * eps))
    return np.column_stack(columns)


def check_derivatives(problem: Any, x: Array, z: Array | None = None, eps: float = 1e-6) -> Dict[str, float]:
    """
    Compare a problem's analytic derivatives with central differences.

    Returns the largest absolute deviation of the objective gradient and of
    the constraint Jacobian. Useful for catching sign or transposition errors
    in hand-written evaluators before handing them to the solver.
    """
    wrapper = as_problem_wrapper(problem)
    x = np.asarray(x, dtype=float).reshape(-1)
    c = wrapper.evaluate_constraints(x)
    z = np.ones(c.size) if z is None else np.asarray(z, dtype=float).reshape(-1)

    grad = wrapper.evaluate_gradient(x, x.size)
    grad_fd = approx_grad(wrapper.evaluate_objective, x, eps=eps)
    jac = wrapper.evaluate_jacobian(x, z)
    jac_fd = approx_jacobian(wrapper.evaluate_constraints, x, eps=eps)
    return {
        "gradient": float(np.max(np.abs(grad - grad_fd))) if grad.size else 0.0,
        "jacobian": float(np.max(np.abs(jac - jac_fd))) if jac.size else 0.0,
    }


__all__ = [
    "approx_grad",
    "approx_jacobian",
    "check_derivatives",
    "symmetric_solve",
    "symmetrize",
]
