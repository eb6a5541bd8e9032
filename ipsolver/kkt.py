"""
Karush-Kuhn-Tucker pieces of the primal-dual interior-point iteration.

For ``min f(x) s.t. c(x) < 0`` with multipliers ``z > 0`` the unperturbed
KKT residual is ``r0 = [g + J^T z; c * z]``. Its scaled norm drives the
convergence test and the barrier schedule, and the perturbed system built
around the current iterate yields the primal-dual search direction.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .core import Array, check_convergence
from .utils import symmetric_solve


@dataclass(frozen=True)
class KKTResiduals:
    """Stationarity and complementarity residuals at one iterate."""

    dual: Array
    complementarity: Array

    @property
    def norm(self) -> float:
        return float(np.sqrt(self.dual @ self.dual + self.complementarity @ self.complementarity))

    def scaled_norm(self) -> float:
        """``||r0|| / (n + m)``, the quantity compared with the tolerance."""
        return self.norm / (self.dual.size + self.complementarity.size)


@dataclass(frozen=True)
class BarrierParameters:
    eta: float
    sigma: float
    mu: float
    duality_gap: float


def kkt_residuals(g: Array, c: Array, z: Array, jac: Array) -> KKTResiduals:
    """Return ``r_x = g + J^T z`` and ``r_c = c * z``."""
    return KKTResiduals(dual=g + jac.T @ z, complementarity=c * z)


def barrier_parameters(
    residuals: KKTResiduals,
    c: Array,
    z: Array,
    sigma_max: float,
    eta_max: float,
    mu_min: float,
) -> BarrierParameters:
    """
    Schedule the centering and barrier parameters from the residual norm.

    ``eta`` scales the sufficient-decrease test, ``sigma`` shrinks with the
    square root of the residual, and ``mu = sigma * gap / m`` is floored at
    ``mu_min`` whatever the sign of the duality gap ``-c.z``.
    """
    scaled = residuals.scaled_norm()
    eta = min(eta_max, scaled)
    sigma = min(sigma_max, float(np.sqrt(scaled)))
    duality_gap = float(-(c @ z))
    mu = max(mu_min, sigma * duality_gap / c.size)
    return BarrierParameters(eta=eta, sigma=sigma, mu=mu, duality_gap=duality_gap)


def solve_perturbed_kkt(
    hess_approx: Array,
    lag_hess: Array,
    jac: Array,
    g: Array,
    c: Array,
    z: Array,
    mu: float,
    epsilon: float,
) -> tuple[Array, Array]:
    """
    Compute the primal and dual search directions.

    With ``c_eps = c - epsilon`` and ``S = diag(z / c_eps)`` the primal step
    solves ``(B + W - J^T S J) p_x = -(g - mu J^T / c_eps)`` and the dual step
    is recovered as ``p_z = -(z + mu / c_eps + S J p_x)``.
    """
    c_eps = c - epsilon
    inv_c = 1.0 / c_eps
    s_diag = z * inv_c
    g_barrier = g - mu * (jac.T @ inv_c)
    kkt_matrix = hess_approx + lag_hess - jac.T @ (s_diag[:, None] * jac)
    p_x = symmetric_solve(kkt_matrix, -g_barrier)
    p_z = -(z + mu * inv_c + s_diag * (jac @ p_x))
    return p_x, p_z


def dual_step_cap(z: Array, p_z: Array, alpha_max: float) -> float:
    """
    Largest step keeping ``z + alpha * p_z`` nonnegative, scaled by ``alpha_max``.

    Only strictly decreasing components constrain the step.
    """
    decreasing = p_z < 0.0
    if not np.any(decreasing):
        return alpha_max
    ratio = float(np.min(z[decreasing] / -p_z[decreasing]))
    return alpha_max * min(1.0, ratio)


def is_kkt_optimal(residuals: KKTResiduals, tol: float) -> bool:
    """Return True if the scaled KKT residual lies strictly below ``tol``."""
    return check_convergence(residuals.scaled_norm(), tol)


__all__ = [
    "BarrierParameters",
    "KKTResiduals",
    "barrier_parameters",
    "dual_step_cap",
    "is_kkt_optimal",
    "kkt_residuals",
    "solve_perturbed_kkt",
]
