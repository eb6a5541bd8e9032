"""BFGS update of the objective Hessian approximation."""

from __future__ import annotations

import numpy as np

from .core import Array


def bfgs_update(hess_approx: Array, s: Array, y: Array) -> Array:
    """
    Rank-two BFGS update of a Hessian (not inverse Hessian) approximation.

    ``B+ = B - (Bs)(Bs)^T / (s^T B s) + y y^T / (y^T s)`` with ``s`` the last
    primal step and ``y`` the matching change in the objective gradient.

    Raises:
        RuntimeError: If the curvature condition ``y^T s > 0`` fails, since
            the update would then destroy positive definiteness.
    """
    ys = float(np.dot(y, s))
    if not ys > 0.0:
        raise RuntimeError(
            f"BFGS update condition y's > 0 not satisfied (y's = {ys:.3e})"
        )
    bs = hess_approx @ s
    return hess_approx - np.outer(bs, bs) / float(np.dot(s, bs)) + np.outer(y, y) / ys


__all__ = ["bfgs_update"]
