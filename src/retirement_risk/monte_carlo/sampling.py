"""
Random sampling primitives: Box-Muller normals, the percent-space
lognormal transform and regime selection.
"""

from typing import Sequence

import numpy as np

from .parameters import Distribution


def open_uniform(rng: np.random.Generator, size: int) -> np.ndarray:
    """Uniform draws on (0, 1); exact zeros are redrawn to keep log() finite."""
    u = rng.random(size)
    zeros = u == 0.0
    while zeros.any():
        u[zeros] = rng.random(int(zeros.sum()))
        zeros = u == 0.0
    return u


def normal_random(rng: np.random.Generator, mean, std_dev, size: int) -> np.ndarray:
    """Normal deviates via the Box-Muller transform of two uniform draws."""
    u = open_uniform(rng, size)
    v = open_uniform(rng, size)
    z = np.sqrt(-2.0 * np.log(u)) * np.cos(2.0 * np.pi * v)
    return z * std_dev + mean


def lognormal_random(rng: np.random.Generator, mean, volatility, size: int) -> np.ndarray:
    """
    Lognormal returns in percent.

    The percent-space mean and volatility are re-expressed in log space as
    ``ln(mean/100) - vol^2/20000`` and ``vol/100``; the exponentiated draw
    is rescaled back to a percent return, so results are always > -100.
    """
    log_mean = np.log(mean / 100.0) - (volatility * volatility) / (2 * 10000)
    log_vol = volatility / 100.0
    return (np.exp(normal_random(rng, log_mean, log_vol, size)) - 1.0) * 100.0


def generate_random_return(rng: np.random.Generator, mean: float, volatility: float,
                           distribution: Distribution, size: int) -> np.ndarray:
    """Percent returns drawn from the asset's sampling law."""
    if distribution is Distribution.LOGNORMAL:
        return lognormal_random(rng, mean, volatility, size)
    return normal_random(rng, mean, volatility, size)


def select_regimes(rng: np.random.Generator, probabilities: Sequence[float], size: int) -> np.ndarray:
    """
    Index of the regime drawn for each path.

    Walks the cumulative probability masses in table order and picks the
    first regime whose running total is >= the uniform draw. A draw left
    uncovered by floating-point rounding maps to the last regime.
    """
    cumulative = np.cumsum(np.asarray(probabilities, dtype=float))
    draws = rng.random(size)
    idx = np.searchsorted(cumulative, draws, side="left")
    return np.minimum(idx, len(cumulative) - 1)
