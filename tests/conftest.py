"""Pytest configuration and shared fixtures for ipsolver tests.

This module provides deterministic RNG fixtures for numpy and torch so that
randomly generated problem data is reproducible across runs.
"""

import logging
import os

import numpy as np
import pytest
import torch

from ipsolver.logging import set_log_level


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic CPU torch RNG for tests."""
    generator = torch.Generator()
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


@pytest.fixture(scope="function", autouse=True)
def reset_log_level():
    """Restore the default WARNING level after tests that change it."""
    yield
    set_log_level(logging.WARNING)
