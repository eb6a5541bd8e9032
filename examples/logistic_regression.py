"""
Example: L1-regularised logistic regression

Fits a sparse logistic regression model by splitting the coefficients into
their positive and negative parts, beta = u+ - u-, so that the L1 penalty
becomes linear and the model can be fitted under the bound constraints
u >= 0. The resulting Hessian is badly conditioned, which is why the solver
runs with steepest descent here.

References:
    Hastie, Tibshirani and Friedman. The Elements of Statistical Learning.
    Chen, Donoho and Saunders. Atomic Decomposition by Basis Pursuit.
"""

import numpy as np
from scipy.special import expit

from ipsolver import Descent, Solver

N_FEATURES = 8
N_SAMPLES = 100
NOISE = 0.25
PENALTY = 0.5

TRUE_BETA = np.array([0.0, 0.0, 2.0, -4.0, 0.0, 0.0, -1.0, 3.0])
FEATURE_SCALE = np.array([10.0, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0])


def make_dataset(seed: int = 42):
    """Draw samples and binary responses from the true model."""
    rng = np.random.default_rng(seed)
    A = FEATURE_SCALE * rng.standard_normal((N_SAMPLES, N_FEATURES))
    noise = NOISE * rng.standard_normal(N_SAMPLES)
    prob = expit(A @ TRUE_BETA + noise)
    y = (rng.standard_normal(N_SAMPLES) < prob).astype(float)
    return A, y


def main():
    A, y = make_dataset()
    P = np.hstack([A, -A])
    size = P.shape[1]

    def objective(x):
        t = P @ x
        return float(np.sum(np.logaddexp(0.0, t) - y * t) + PENALTY * np.sum(x))

    def objective_gradient(x):
        return -P.T @ (y - expit(P @ x)) + PENALTY

    def objective_hessian(x):
        u = expit(P @ x)
        return P.T @ ((u * (1.0 - u))[:, None] * P)

    solver = Solver(
        objective=objective,
        objective_gradient=objective_gradient,
        objective_hessian=objective_hessian,
        constraints=lambda x: -x,
        constraints_jacobian=lambda x, z: -np.eye(size),
        lagrangian_hessian=lambda x, z: np.zeros((size, size)),
        descent=Descent.STEEPEST,
        tolerance=1e-4,
        max_iterations=100,
        verbose=True,
    )
    result = solver.minimize(np.ones(size))

    beta = result.x[:N_FEATURES] - result.x[N_FEATURES:]
    print()
    print(f"Status: {result.status.name} after {result.nit} iterations")
    print(f"Objective: {result.fun:.6f}")
    print(f"True coefficients:      {np.round(TRUE_BETA, 3)}")
    print(f"Estimated coefficients: {np.round(beta, 3)}")


if __name__ == "__main__":
    main()
