"""
Problems whose derivatives come from PyTorch autograd.

Writing gradients, Jacobians and constraint curvature by hand is the usual
source of solver failures. :class:`TorchProblem` only needs the objective and
the constraints written with ``torch`` operations; every derivative the
solver asks for is produced by :mod:`torch.autograd.functional`.

Example
-------
>>> import torch
>>> from ipsolver import Solver, TorchProblem
>>> problem = TorchProblem(
...     objective=lambda x: (x ** 2).sum(),
...     constraints=lambda x: 1.0 - x.sum().reshape(1),
... )
>>> solver = Solver.from_problem(problem)
"""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np
import torch
from torch.autograd.functional import hessian, jacobian

from .core import Array
from .problem import Problem

TensorFunction = Callable[[torch.Tensor], torch.Tensor]


class TorchProblem(Problem):
    """
    Inequality-constrained program defined by torch callables.

    Parameters
    ----------
    objective:
        Maps a 1D tensor ``x`` to a scalar tensor.
    constraints:
        Maps ``x`` to a tensor of constraint values (flattened to 1D);
        feasibility means every value is negative.
    dtype:
        Floating dtype used for evaluation, ``torch.float64`` by default.
    device:
        Device on which tensors are created, CPU by default.
    """

    def __init__(
        self,
        objective: TensorFunction,
        constraints: TensorFunction,
        dtype: torch.dtype = torch.float64,
        device: Optional[torch.device] = None,
    ) -> None:
        if not dtype.is_floating_point:
            raise ValueError(f"dtype must be a floating point dtype, got {dtype}")
        self._objective = objective
        self._constraints = constraints
        self.dtype = dtype
        self.device = device if device is not None else torch.device("cpu")

    def _as_tensor(self, x: Array) -> torch.Tensor:
        return torch.as_tensor(np.asarray(x, dtype=float), dtype=self.dtype, device=self.device)

    def _scalar_objective(self, x: torch.Tensor) -> torch.Tensor:
        return self._objective(x).reshape(())

    def _flat_constraints(self, x: torch.Tensor) -> torch.Tensor:
        return self._constraints(x).reshape(-1)

    def objective(self, x: Array) -> float:
        with torch.no_grad():
            return float(self._scalar_objective(self._as_tensor(x)).item())

    def objective_gradient(self, x: Array) -> Array:
        return _to_numpy(jacobian(self._scalar_objective, self._as_tensor(x)))

    def objective_hessian(self, x: Array) -> Array:
        return _to_numpy(hessian(self._scalar_objective, self._as_tensor(x)))

    def constraints(self, x: Array) -> Array:
        with torch.no_grad():
            return _to_numpy(self._flat_constraints(self._as_tensor(x)))

    def constraints_jacobian(self, x: Array, z: Array) -> Array:
        return _to_numpy(jacobian(self._flat_constraints, self._as_tensor(x)))

    def lagrangian_hessian(self, x: Array, z: Array) -> Array:
        weights = self._as_tensor(z)

        def weighted(v: torch.Tensor) -> torch.Tensor:
            return self._flat_constraints(v) @ weights

        return _to_numpy(hessian(weighted, self._as_tensor(x)))


def _to_numpy(tensor: torch.Tensor) -> Array:
    return tensor.detach().cpu().numpy().astype(float)


__all__ = ["TorchProblem"]
