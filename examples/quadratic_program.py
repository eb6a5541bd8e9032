"""
Example: Quadratically constrained quadratic program

Solves the Schwefel test problem

    min  x1^2 + x2^2 + 2 x3^2 + x4^2 - 5 x1 - 5 x2 - 21 x3 + 7 x4
    s.t. three convex quadratic inequalities

with every descent mode of the interior-point solver. The known minimiser is
x* = (0, 1, 2, -1) with f(x*) = -44.
"""

import numpy as np

from ipsolver import Descent, Problem, Solver


class SchwefelProblem(Problem):
    """Objective 0.5 x'Hx + q'x with constraints 0.5 x'P_i x + r_i'x - b_i < 0."""

    H = np.diag([2.0, 2.0, 4.0, 2.0])
    q = np.array([-5.0, -5.0, -21.0, 7.0])
    P = np.array(
        [
            np.diag([4.0, 2.0, 2.0, 0.0]),
            np.diag([2.0, 2.0, 2.0, 2.0]),
            np.diag([2.0, 4.0, 2.0, 4.0]),
        ]
    )
    r = np.array(
        [
            [2.0, -1.0, 0.0, -1.0],
            [1.0, -1.0, 1.0, -1.0],
            [-1.0, 0.0, 0.0, -1.0],
        ]
    )
    b = np.array([5.0, 8.0, 10.0])

    def objective(self, x):
        return float(0.5 * x @ self.H @ x + self.q @ x)

    def objective_gradient(self, x):
        return self.H @ x + self.q

    def objective_hessian(self, x):
        return self.H

    def constraints(self, x):
        return 0.5 * np.einsum("i,kij,j->k", x, self.P, x) + self.r @ x - self.b

    def constraints_jacobian(self, x, z):
        return self.P @ x + self.r

    def lagrangian_hessian(self, x, z):
        return np.einsum("k,kij->ij", z, self.P)


def main():
    problem = SchwefelProblem()
    x0 = np.zeros(4)

    print("=" * 60)
    print("Schwefel quadratic program")
    print("=" * 60)
    for descent in Descent:
        solver = Solver.from_problem(problem, descent=descent)
        result = solver.minimize(x0)
        print(f"{descent.name:<9} status={result.status.name:<8} nit={result.nit:<3} "
              f"f={result.fun:.6f} x={np.round(result.x, 4)}")
    print()

    print("Newton iterations:")
    Solver.from_problem(problem, verbose=True).solve(x0)
    print()
    print("Known solution: x = [0, 1, 2, -1], f = -44")


if __name__ == "__main__":
    main()
