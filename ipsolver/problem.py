"""
Problem definitions consumed by the interior-point solver.

A problem supplies six evaluators:

- ``objective(x) -> float``
- ``objective_gradient(x) -> (n,)``
- ``objective_hessian(x) -> (n, n)``, needed only for Newton descent
- ``constraints(x) -> (m,)``, feasible when every entry is negative
- ``constraints_jacobian(x, z) -> (m, n)``
- ``lagrangian_hessian(x, z) -> (n, n)``, the constraint curvature
  ``sum_i z_i * hess(c_i)(x)`` without the objective's own Hessian

Callers either subclass :class:`Problem` or hand plain callables to
:class:`ProblemWrapper`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from .core import Array, Constraints, Gradient, Hessian, Jacobian, LagrangianHessian, Objective

_REQUIRED = (
    "objective",
    "objective_gradient",
    "constraints",
    "constraints_jacobian",
    "lagrangian_hessian",
)


class Problem(ABC):
    """Abstract inequality-constrained program ``min f(x) s.t. c(x) < 0``."""

    @abstractmethod
    def objective(self, x: Array) -> float:
        ...

    @abstractmethod
    def objective_gradient(self, x: Array) -> Array:
        ...

    def objective_hessian(self, x: Array) -> Array:
        """Hessian of the objective; override to enable Newton descent."""
        raise NotImplementedError(
            f"{type(self).__name__} does not provide an objective Hessian"
        )

    @abstractmethod
    def constraints(self, x: Array) -> Array:
        ...

    @abstractmethod
    def constraints_jacobian(self, x: Array, z: Array) -> Array:
        ...

    @abstractmethod
    def lagrangian_hessian(self, x: Array, z: Array) -> Array:
        ...

    @property
    def has_objective_hessian(self) -> bool:
        return type(self).objective_hessian is not Problem.objective_hessian


@dataclass(frozen=True)
class ProblemWrapper:
    """
    Adapter holding the evaluators as plain callables.

    ``objective_hessian`` is optional; every other evaluator is required and
    checked by :meth:`missing` before the solver starts iterating.
    """

    objective: Optional[Objective]
    objective_gradient: Optional[Gradient]
    constraints: Optional[Constraints]
    constraints_jacobian: Optional[Jacobian]
    lagrangian_hessian: Optional[LagrangianHessian]
    objective_hessian: Optional[Hessian] = None

    @classmethod
    def from_problem(cls, problem: Any) -> "ProblemWrapper":
        """
        Build a wrapper from any object exposing the evaluator methods.

        A :class:`Problem` subclass contributes its Hessian only when it
        overrides :meth:`Problem.objective_hessian`.
        """
        if isinstance(problem, ProblemWrapper):
            return problem
        if isinstance(problem, Problem):
            hessian = problem.objective_hessian if problem.has_objective_hessian else None
        else:
            hessian = getattr(problem, "objective_hessian", None)
        return cls(
            objective=getattr(problem, "objective", None),
            objective_gradient=getattr(problem, "objective_gradient", None),
            constraints=getattr(problem, "constraints", None),
            constraints_jacobian=getattr(problem, "constraints_jacobian", None),
            lagrangian_hessian=getattr(problem, "lagrangian_hessian", None),
            objective_hessian=hessian,
        )

    @property
    def has_objective_hessian(self) -> bool:
        return self.objective_hessian is not None

    def missing(self, require_hessian: bool = False) -> list[str]:
        """Names of required evaluators that are absent or not callable."""
        names = list(_REQUIRED)
        if require_hessian:
            names.insert(2, "objective_hessian")
        return [name for name in names if not callable(getattr(self, name))]

    def evaluate_objective(self, x: Array) -> float:
        return float(self.objective(x))

    def evaluate_gradient(self, x: Array, n: int) -> Array:
        return _as_vector(self.objective_gradient(x), n, "objective_gradient")

    def evaluate_hessian(self, x: Array, n: int) -> Array:
        return _as_matrix(self.objective_hessian(x), (n, n), "objective_hessian")

    def evaluate_constraints(self, x: Array, m: Optional[int] = None) -> Array:
        return _as_vector(self.constraints(x), m, "constraints")

    def evaluate_jacobian(self, x: Array, z: Array) -> Array:
        return _as_matrix(
            self.constraints_jacobian(x, z), (z.size, x.size), "constraints_jacobian"
        )

    def evaluate_lagrangian_hessian(self, x: Array, z: Array) -> Array:
        return _as_matrix(
            self.lagrangian_hessian(x, z), (x.size, x.size), "lagrangian_hessian"
        )


def _as_vector(value: Any, size: Optional[int], name: str) -> Array:
    out = np.asarray(value, dtype=float).reshape(-1)
    if size is not None and out.shape[0] != size:
        raise ValueError(f"{name} returned {out.shape[0]} entries, expected {size}")
    return out


def _as_matrix(value: Any, shape: tuple[int, int], name: str) -> Array:
    out = np.asarray(value, dtype=float)
    if out.ndim < 2 and out.size == shape[0] * shape[1]:
        out = out.reshape(shape)
    if out.shape != shape:
        raise ValueError(f"{name} returned shape {out.shape}, expected {shape}")
    return out


def as_problem_wrapper(problem: Any) -> ProblemWrapper:
    """Normalise ``problem`` into a :class:`ProblemWrapper`."""
    return ProblemWrapper.from_problem(problem)


__all__ = ["Problem", "ProblemWrapper", "as_problem_wrapper"]
