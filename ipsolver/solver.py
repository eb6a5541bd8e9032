"""
Primal-dual interior-point solver for convex inequality-constrained programs.

Each outer iteration evaluates the problem at the current iterate, schedules
the barrier parameter from the KKT residual, solves the perturbed KKT system
for a primal-dual direction and backtracks along it on a merit function. The
descent mode only decides how the objective Hessian approximation ``B`` is
produced: the true Hessian (NEWTON), a BFGS secant update (BFGS) or the
identity (STEEPEST).

Example
-------
>>> import numpy as np
>>> from ipsolver import Solver
>>> solver = Solver(
...     objective=lambda x: float(x @ x),
...     objective_gradient=lambda x: 2 * x,
...     constraints=lambda x: np.array([1.0 - x.sum()]),
...     constraints_jacobian=lambda x, z: -np.ones((1, x.size)),
...     lagrangian_hessian=lambda x, z: np.zeros((x.size, x.size)),
... )
>>> x = solver.solve(np.array([1.0, 1.0]))
"""

from __future__ import annotations

import sys
from typing import IO, Any, Callable, List, Optional

import numpy as np

from .core import (
    Array,
    Constraints,
    Descent,
    Gradient,
    Hessian,
    IterationRecord,
    Jacobian,
    LagrangianHessian,
    Objective,
    OptimizeResult,
    SolverConfig,
    Status,
)
from .kkt import (
    barrier_parameters,
    dual_step_cap,
    is_kkt_optimal,
    kkt_residuals,
    solve_perturbed_kkt,
)
from .line_search import backtracking_merit, merit, merit_directional_derivative
from .logging import get_logger
from .problem import ProblemWrapper, as_problem_wrapper
from .quasi_newton import bfgs_update

logger = get_logger(__name__)

_VERBOSE_HEADER = "i, f(x), lg(mu), sigma, ||r_x||, ||r_c||, alpha, #ls"


def _option(name: str) -> property:
    def getter(self: "Solver") -> Any:
        return getattr(self._config, name)

    def setter(self: "Solver", value: Any) -> None:
        self._update_config(**{name: value})

    return property(getter, setter, doc=f"``SolverConfig.{name}`` of this solver.")


class Solver:
    """
    Interior-point solver bound to one set of problem evaluators.

    Parameters
    ----------
    objective, objective_gradient, constraints, constraints_jacobian, lagrangian_hessian:
        Required evaluators, see :mod:`ipsolver.problem`.
    objective_hessian:
        Optional objective Hessian. Supplying it makes NEWTON the default
        descent mode; without it the default is BFGS.
    descent:
        :class:`~ipsolver.core.Descent` member or its name.
    config:
        Base :class:`~ipsolver.core.SolverConfig`; ``options`` override
        individual fields.

    Configuration can be changed through the properties between calls but not
    while :meth:`minimize` is running.
    """

    tolerance = _option("tolerance")
    max_iterations = _option("max_iterations")
    verbose = _option("verbose")
    epsilon = _option("epsilon")
    sigma_max = _option("sigma_max")
    eta_max = _option("eta_max")
    mu_min = _option("mu_min")
    alpha_max = _option("alpha_max")
    alpha_min = _option("alpha_min")
    beta = _option("beta")
    tau = _option("tau")

    def __init__(
        self,
        objective: Optional[Objective] = None,
        objective_gradient: Optional[Gradient] = None,
        constraints: Optional[Constraints] = None,
        constraints_jacobian: Optional[Jacobian] = None,
        lagrangian_hessian: Optional[LagrangianHessian] = None,
        objective_hessian: Optional[Hessian] = None,
        *,
        descent: Descent | str | None = None,
        config: Optional[SolverConfig] = None,
        **options: Any,
    ) -> None:
        self._problem = ProblemWrapper(
            objective=objective,
            objective_gradient=objective_gradient,
            constraints=constraints,
            constraints_jacobian=constraints_jacobian,
            lagrangian_hessian=lagrangian_hessian,
            objective_hessian=objective_hessian,
        )
        if descent is None:
            descent = Descent.NEWTON if objective_hessian is not None else Descent.BFGS
        self._descent = Descent.coerce(descent)
        base = config if config is not None else SolverConfig()
        self._config = base.updated(**options) if options else base
        self._solving = False

    @classmethod
    def from_problem(cls, problem: Any, **kwargs: Any) -> "Solver":
        """Create a solver from a :class:`~ipsolver.problem.Problem` or wrapper."""
        wrapper = as_problem_wrapper(problem)
        return cls(
            wrapper.objective,
            wrapper.objective_gradient,
            wrapper.constraints,
            wrapper.constraints_jacobian,
            wrapper.lagrangian_hessian,
            wrapper.objective_hessian,
            **kwargs,
        )

    @property
    def problem(self) -> ProblemWrapper:
        return self._problem

    @property
    def config(self) -> SolverConfig:
        return self._config

    @config.setter
    def config(self, value: SolverConfig) -> None:
        self._check_idle()
        if not isinstance(value, SolverConfig):
            raise ValueError(f"config must be a SolverConfig, got {type(value).__name__}")
        self._config = value

    @property
    def descent(self) -> Descent:
        return self._descent

    @descent.setter
    def descent(self, value: Descent | str) -> None:
        self._check_idle()
        self._descent = Descent.coerce(value)

    @property
    def is_solving(self) -> bool:
        return self._solving

    def _check_idle(self) -> None:
        if self._solving:
            raise RuntimeError("solver configuration cannot change during solve()")

    def _update_config(self, **changes: Any) -> None:
        self._check_idle()
        self._config = self._config.updated(**changes)

    def solve(self, x0: Array) -> Array:
        """Return the final primal iterate starting from ``x0``."""
        return self.minimize(x0).x

    def minimize(
        self,
        x0: Array,
        history: bool = False,
        callback: Optional[Callable[[IterationRecord], None]] = None,
        stream: Optional[IO[str]] = None,
    ) -> OptimizeResult:
        """
        Run the interior-point iteration from ``x0``.

        Parameters
        ----------
        x0:
            Initial guess, ideally strictly feasible (``c(x0) < 0``).
        history:
            Keep an :class:`~ipsolver.core.IterationRecord` per iteration.
        callback:
            Called with the record of each outer iteration.
        stream:
            Destination of verbose rows, ``sys.stdout`` by default.

        Raises
        ------
        ValueError
            If a required evaluator is missing or ``x0`` is empty.
        RuntimeError
            If the BFGS curvature condition fails or the line search step
            falls to ``alpha_min``.
        """
        config = self._config
        descent = self._descent
        problem = self._problem
        missing = problem.missing(require_hessian=descent is Descent.NEWTON)
        if missing:
            raise ValueError(
                f"missing required evaluator(s) for {descent.name} descent: {', '.join(missing)}"
            )
        x = np.asarray(x0, dtype=float).reshape(-1).copy()
        if x.size == 0:
            raise ValueError("initial guess must contain at least one variable")

        self._solving = True
        try:
            return _iterate(
                problem,
                config,
                descent,
                x,
                history,
                callback,
                stream if stream is not None else sys.stdout,
            )
        finally:
            self._solving = False


def _iterate(
    problem: ProblemWrapper,
    config: SolverConfig,
    descent: Descent,
    x: Array,
    history: bool,
    callback: Optional[Callable[[IterationRecord], None]],
    stream: IO[str],
) -> OptimizeResult:
    nfev = njev = nhev = ncev = 0
    c = problem.evaluate_constraints(x)
    ncev += 1
    n, m = x.size, c.size
    if m == 0:
        raise ValueError("at least one inequality constraint is required")
    if np.any(c >= 0.0):
        logger.warning(
            "initial guess is not strictly feasible (max constraint value %.3e)", float(np.max(c))
        )
    logger.info("solving n=%d, m=%d with %s descent", n, m, descent.name)

    def objective(point: Array) -> float:
        return problem.evaluate_objective(point)

    def constraints(point: Array) -> Array:
        return problem.evaluate_constraints(point, m)

    z = np.ones(m)
    hess_approx = np.eye(n)
    g_old: Optional[Array] = None
    step: Optional[Array] = None
    alpha = 0.0
    ls_steps = 0
    records: List[IterationRecord] = []
    status = Status.MAX_ITER
    nit = 0

    if config.verbose:
        print(_VERBOSE_HEADER, file=stream)

    for iteration in range(1, config.max_iterations + 1):
        nit = iteration
        fun = objective(x)
        c = constraints(x)
        g = problem.evaluate_gradient(x, n)
        jac = problem.evaluate_jacobian(x, z)
        lag_hess = problem.evaluate_lagrangian_hessian(x, z)
        nfev += 1
        ncev += 1
        njev += 1
        if descent is Descent.NEWTON:
            hess_approx = problem.evaluate_hessian(x, n)
            nhev += 1

        residuals = kkt_residuals(g, c, z, jac)
        params = barrier_parameters(
            residuals, c, z, config.sigma_max, config.eta_max, config.mu_min
        )
        record = IterationRecord(
            iteration=iteration,
            fun=fun,
            mu=params.mu,
            sigma=params.sigma,
            eta=params.eta,
            dual_residual=float(np.linalg.norm(residuals.dual)),
            complementarity=float(np.linalg.norm(residuals.complementarity)),
            kkt_residual=residuals.scaled_norm(),
            alpha=alpha,
            line_search_steps=ls_steps,
            x=x.copy(),
            z=z.copy(),
        )
        if history:
            records.append(record)
        if config.verbose:
            print(
                f"{iteration}, {fun:.6g}, {np.log10(params.mu):.3f}, {params.sigma:.3g}, "
                f"{record.dual_residual:.3e}, {record.complementarity:.3e}, "
                f"{alpha:.3g}, {ls_steps}",
                file=stream,
            )
        logger.debug(
            "iter %d: f=%.6g mu=%.3e sigma=%.3g kkt=%.3e",
            iteration,
            fun,
            params.mu,
            params.sigma,
            record.kkt_residual,
        )
        if callback is not None:
            callback(record)

        if is_kkt_optimal(residuals, config.tolerance):
            status = Status.OPTIMAL
            break

        try:
            if descent is Descent.BFGS and g_old is not None:
                hess_approx = bfgs_update(hess_approx, step, g - g_old)

            p_x, p_z = solve_perturbed_kkt(
                hess_approx, lag_hess, jac, g, c, z, params.mu, config.epsilon
            )
            psi = merit(z, fun, c, params.mu, config.epsilon)
            dpsi = merit_directional_derivative(
                z, p_x, p_z, g, c, jac, params.mu, config.epsilon
            )
            accepted = backtracking_merit(
                objective,
                constraints,
                x,
                z,
                p_x,
                p_z,
                mu=params.mu,
                psi=psi,
                dpsi=dpsi,
                eta=params.eta,
                alpha0=dual_step_cap(z, p_z, config.alpha_max),
                tau=config.tau,
                beta=config.beta,
                alpha_min=config.alpha_min,
                epsilon=config.epsilon,
            )
        except RuntimeError as exc:
            logger.error("iteration %d aborted: %s", iteration, exc)
            raise

        nfev += accepted.nfev
        ncev += accepted.nfev
        x, z = accepted.x, accepted.z
        alpha, ls_steps = accepted.alpha, accepted.nfev
        step = alpha * p_x
        g_old = g

    if status is Status.OPTIMAL:
        message = "KKT residual tolerance satisfied."
        logger.info("converged in %d iterations (kkt=%.3e)", nit, record.kkt_residual)
        fun = record.fun
        kkt_residual = record.kkt_residual
        dual_residual = record.dual_residual
        complementarity = record.complementarity
        mu = record.mu
    else:
        message = "Maximum iterations reached."
        fun = objective(x)
        c = constraints(x)
        g = problem.evaluate_gradient(x, n)
        jac = problem.evaluate_jacobian(x, z)
        nfev += 1
        ncev += 1
        njev += 1
        residuals = kkt_residuals(g, c, z, jac)
        kkt_residual = residuals.scaled_norm()
        dual_residual = float(np.linalg.norm(residuals.dual))
        complementarity = float(np.linalg.norm(residuals.complementarity))
        mu = barrier_parameters(
            residuals, c, z, config.sigma_max, config.eta_max, config.mu_min
        ).mu
        logger.warning(
            "no convergence after %d iterations (kkt=%.3e, tolerance=%.1e)",
            nit,
            kkt_residual,
            config.tolerance,
        )

    return OptimizeResult(
        x=x,
        z=z,
        fun=float(fun),
        status=status,
        success=status is Status.OPTIMAL,
        message=message,
        nit=nit,
        kkt_residual=kkt_residual,
        dual_residual=dual_residual,
        complementarity=complementarity,
        mu=mu,
        nfev=nfev,
        njev=njev,
        nhev=nhev,
        ncev=ncev,
        history=records,
    )


def interior_point(
    problem: Any,
    x0: Array,
    descent: Descent | str | None = None,
    tol: float = 1e-6,
    maxiter: int = 100,
    history: bool = False,
    callback: Optional[Callable[[IterationRecord], None]] = None,
    **options: Any,
) -> OptimizeResult:
    """
    Minimize ``problem`` subject to its inequality constraints.

    Functional counterpart of :class:`Solver`; ``options`` are forwarded as
    :class:`~ipsolver.core.SolverConfig` fields.
    """
    solver = Solver.from_problem(
        problem, descent=descent, tolerance=tol, max_iterations=maxiter, **options
    )
    return solver.minimize(x0, history=history, callback=callback)


__all__ = ["Solver", "interior_point"]
