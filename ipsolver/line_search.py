"""Merit function and backtracking line search for the primal-dual iteration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np

from .core import Array


@dataclass(frozen=True)
class LineSearchStep:
    """Accepted trial point of a backtracking search."""

    alpha: float
    x: Array
    z: Array
    fun: float
    c: Array
    nfev: int


def merit(z: Array, fun: float, c: Array, mu: float, epsilon: float) -> float:
    """``psi(x, z) = f - c.z - mu * sum(log(c^2 * z + epsilon))``."""
    return float(fun - c @ z - mu * np.sum(np.log(c**2 * z + epsilon)))


def merit_directional_derivative(
    z: Array,
    p_x: Array,
    p_z: Array,
    g: Array,
    c: Array,
    jac: Array,
    mu: float,
    epsilon: float,
) -> float:
    """Directional derivative of :func:`merit` along ``(p_x, p_z)``."""
    grad_x = g - jac.T @ z - 2.0 * mu * (jac.T @ (1.0 / (c - epsilon)))
    grad_z = c + mu / (z + epsilon)
    return float(p_x @ grad_x - p_z @ grad_z)


def backtracking_merit(
    objective: Callable[[Array], float],
    constraints: Callable[[Array], Array],
    x: Array,
    z: Array,
    p_x: Array,
    p_z: Array,
    mu: float,
    psi: float,
    dpsi: float,
    eta: float,
    alpha0: float,
    tau: float = 0.01,
    beta: float = 0.75,
    alpha_min: float = 1e-6,
    epsilon: float = 1e-8,
) -> LineSearchStep:
    """
    Shrink the step until the trial point is strictly feasible and decreases
    the merit function enough.

    A trial ``(x + alpha p_x, z + alpha p_z)`` is accepted when every
    constraint is negative and ``psi_new < psi + tau * eta * alpha * dpsi``.
    Rejected trials contract ``alpha`` by ``beta``.

    Raises:
        ValueError: If ``beta`` is outside ``(0, 1)``.
        RuntimeError: If ``alpha`` contracts to ``alpha_min`` or below.
    """
    if not (0 < beta < 1):
        raise ValueError("beta must lie in (0, 1)")
    alpha = float(alpha0)
    nfev = 0
    while True:
        x_new = x + alpha * p_x
        z_new = z + alpha * p_z
        f_new = float(objective(x_new))
        c_new = np.asarray(constraints(x_new), dtype=float).reshape(-1)
        nfev += 1
        if np.all(c_new < 0.0):
            psi_new = merit(z_new, f_new, c_new, mu, epsilon)
            if psi_new < psi + tau * eta * alpha * dpsi:
                return LineSearchStep(alpha=alpha, x=x_new, z=z_new, fun=f_new, c=c_new, nfev=nfev)
        alpha *= beta
        if alpha <= alpha_min:
            raise RuntimeError(
                f"line search step size too small (alpha = {alpha:.3e} after {nfev} trials)"
            )


__all__ = [
    "LineSearchStep",
    "backtracking_merit",
    "merit",
    "merit_directional_derivative",
]
