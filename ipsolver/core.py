"""Core types shared by the interior-point solver.

The solver works on the inequality-constrained program

    minimize f(x)  subject to  c(x) < 0,

with dense ``numpy`` vectors and matrices throughout. This module holds the
configuration container, the descent-mode and status enumerations, and the
result objects returned to callers.

References:
    - Nocedal & Wright, *Numerical Optimization* (2006), Chapter 19
    - Boyd & Vandenberghe, *Convex Optimization* (2004), Chapter 11
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Callable, List, Optional

import numpy as np

Array = np.ndarray
Objective = Callable[[Array], float]
Gradient = Callable[[Array], Array]
Hessian = Callable[[Array], Array]
Constraints = Callable[[Array], Array]
Jacobian = Callable[[Array, Array], Array]
LagrangianHessian = Callable[[Array, Array], Array]


class Descent(Enum):
    """How the Hessian approximation ``B`` is produced each iteration."""

    NEWTON = "newton"
    BFGS = "bfgs"
    STEEPEST = "steepest"

    @classmethod
    def coerce(cls, value: "Descent | str") -> "Descent":
        """Return ``value`` as a :class:`Descent`, accepting member names."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls[key]
        choices = ", ".join(member.name for member in cls)
        raise ValueError(f"descent must be one of {choices}, got {value!r}")


class Status(Enum):
    """Exit status of a solve that did not fail fatally."""

    OPTIMAL = "optimal"
    MAX_ITER = "max_iter"


@dataclass(frozen=True)
class SolverConfig:
    """
    Algorithm constants of the primal-dual interior-point method.

    Attributes:
        tolerance: Threshold on the scaled KKT residual ``||r0|| / (n + m)``.
        max_iterations: Upper bound on outer iterations.
        verbose: Print one progress row per iteration.
        epsilon: Shift keeping ``c - epsilon`` and the merit logarithm away
            from zero near the constraint boundary.
        sigma_max: Cap on the centering parameter.
        eta_max: Cap on the residual-derived sufficient-decrease scale.
        mu_min: Floor on the barrier parameter.
        alpha_max: Largest step length tried by the line search.
        alpha_min: Step length at or below which the line search fails.
        beta: Backtracking contraction factor.
        tau: Sufficient-decrease constant.
    """

    tolerance: float = 1e-6
    max_iterations: int = 100
    verbose: bool = False
    epsilon: float = 1e-8
    sigma_max: float = 0.5
    eta_max: float = 0.25
    mu_min: float = 1e-9
    alpha_max: float = 0.995
    alpha_min: float = 1e-6
    beta: float = 0.75
    tau: float = 0.01

    def __post_init__(self) -> None:
        """Validate that every numeric constant is positive."""
        if isinstance(self.max_iterations, bool) or not isinstance(
            self.max_iterations, (int, np.integer)
        ):
            raise ValueError(
                f"max_iterations must be an integer, got {self.max_iterations!r}."
            )
        for item in fields(self):
            if item.name == "verbose":
                continue
            value = getattr(self, item.name)
            if not value > 0:
                raise ValueError(f"{item.name} must be positive, got {value}.")
        if self.beta >= 1:
            raise ValueError(f"beta must be smaller than 1, got {self.beta}.")

    def updated(self, **changes) -> "SolverConfig":
        """Return a validated copy with ``changes`` applied."""
        unknown = set(changes) - {item.name for item in fields(self)}
        if unknown:
            raise ValueError(f"Unknown solver option(s): {', '.join(sorted(unknown))}")
        return replace(self, **changes)


@dataclass(frozen=True)
class IterationRecord:
    """Snapshot of one outer iteration, taken before its line search."""

    iteration: int
    fun: float
    mu: float
    sigma: float
    eta: float
    dual_residual: float
    complementarity: float
    kkt_residual: float
    alpha: float
    line_search_steps: int
    x: Array
    z: Array


@dataclass
class OptimizeResult:
    """
    Solution container returned by :meth:`ipsolver.Solver.minimize`.

    Attributes:
        x: Final primal iterate.
        z: Final dual iterate (inequality multipliers).
        fun: Objective value at ``x``.
        status: :class:`Status` describing how the iteration ended.
        success: True when the KKT tolerance was met.
        message: Human-readable explanation of ``status``.
        nit: Number of outer iterations performed.
        kkt_residual: Scaled KKT residual ``||r0|| / (n + m)`` at ``x``.
        dual_residual: Norm of the stationarity residual ``g + J^T z``.
        complementarity: Norm of the complementarity residual ``c * z``.
        mu: Barrier parameter of the last iteration.
        nfev: Objective evaluations.
        njev: Gradient evaluations.
        nhev: Objective Hessian evaluations.
        ncev: Constraint evaluations.
        history: Per-iteration records when requested.
    """

    x: Array
    z: Array
    fun: float
    status: Status
    success: bool
    message: str
    nit: int
    kkt_residual: float
    dual_residual: float
    complementarity: float
    mu: float
    nfev: int = 0
    njev: int = 0
    nhev: int = 0
    ncev: int = 0
    history: List[IterationRecord] = field(default_factory=list)


def check_convergence(kkt_residual: float, tol: float) -> bool:
    """Return True if the scaled KKT residual is strictly below ``tol``."""
    return kkt_residual < tol


__all__ = [
    "Array",
    "Objective",
    "Gradient",
    "Hessian",
    "Constraints",
    "Jacobian",
    "LagrangianHessian",
    "Descent",
    "Status",
    "SolverConfig",
    "IterationRecord",
    "OptimizeResult",
    "check_convergence",
]
