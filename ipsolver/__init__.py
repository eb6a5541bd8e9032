"""ipsolver - a primal-dual interior-point method for convex inequality-constrained programs.

Example
-------
>>> import numpy as np
>>> from ipsolver import Descent, Solver
>>> solver = Solver(
...     objective=lambda x: float((x - 2.0) @ (x - 2.0)),
...     objective_gradient=lambda x: 2.0 * (x - 2.0),
...     constraints=lambda x: x - 1.0,
...     constraints_jacobian=lambda x, z: np.eye(x.size),
...     lagrangian_hessian=lambda x, z: np.zeros((x.size, x.size)),
...     descent=Descent.BFGS,
... )
>>> result = solver.minimize(np.zeros(2))
>>> result.success
True
"""

__version__ = "0.1.0"

from . import core, kkt, line_search, problem, quasi_newton, solver, utils
from .autodiff import TorchProblem
from .core import (
    Descent,
    IterationRecord,
    OptimizeResult,
    SolverConfig,
    Status,
)
from .kkt import barrier_parameters, dual_step_cap, kkt_residuals, solve_perturbed_kkt
from .line_search import backtracking_merit, merit, merit_directional_derivative
from .logging import configure_logging, get_logger, set_log_level
from .problem import Problem, ProblemWrapper, as_problem_wrapper
from .quasi_newton import bfgs_update
from .solver import Solver, interior_point
from .utils import check_derivatives, symmetric_solve

__all__ = [
    "__version__",
    "core",
    "kkt",
    "line_search",
    "problem",
    "quasi_newton",
    "solver",
    "utils",
    # Core types
    "Descent",
    "Status",
    "SolverConfig",
    "IterationRecord",
    "OptimizeResult",
    # Problems
    "Problem",
    "ProblemWrapper",
    "TorchProblem",
    "as_problem_wrapper",
    # Solver
    "Solver",
    "interior_point",
    # Building blocks
    "kkt_residuals",
    "barrier_parameters",
    "solve_perturbed_kkt",
    "dual_step_cap",
    "merit",
    "merit_directional_derivative",
    "backtracking_merit",
    "bfgs_update",
    "symmetric_solve",
    "check_derivatives",
    # Logging
    "configure_logging",
    "get_logger",
    "set_log_level",
]
