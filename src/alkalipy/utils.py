#!/usr/bin/env python
"""
Utilities for density-matrix bookkeeping and small physics helpers.

Main contents:

    Vectorization
        - ``flatten_index(row, col, N)`` / ``unflatten_index(k, N)``: the
        column-major bijection between a density-matrix element
        :math:`\\rho_{mn}` and its position in the vectorized density.
        - ``matrix_to_vector`` / ``vector_to_matrix``: reshape a single
        density matrix to and from a column vector.
        - ``vectors_to_matrices``: reshape a whole trajectory of column
        vectors into a stack of density matrices.
        - ``population_indices(N)``: positions of the diagonal elements.

    Time grids
        - ``time_grid(dt, T)``: evenly spaced grid ``0, dt, ..., <= T``.

    Density-matrix measures
        - ``purity`` and ``von_neumann_entropy``.

    Angular momentum
        - ``clebsch_gordan(j1, j2, j, m1, m2, m)``.

    Units & fitting
        - ``as_gauss(B)``: accept plain floats (Gauss) or ``pint`` quantities.
        - ``exponential_fit(time, population)``: decay-rate fit of a
        population trace.

    CLI/testing
        - ``is_fast_run()``: Check ``--fast`` CLI flag to run lighter examples.

Notes:

    - The vectorization convention is column-major (``order="F"``):
    :math:`\\rho_{mn}` lives at index ``m + n * N``.  Everything in
    :mod:`alkalipy.liouville` and :mod:`alkalipy.simulation` relies on it.
"""

from __future__ import annotations

import argparse
from typing import Tuple

import numpy as np
from scipy.optimize import curve_fit
from sklearn.metrics import r2_score
from sympy import Rational
from sympy.physics.wigner import clebsch_gordan as _sympy_clebsch_gordan

from .shared import ureg

TIME_GRID_RTOL = 1e-10


def is_fast_run():
    """Is the `--fast` parameter set at execution.

    This function helps examples to be used as tests.  By running the
    example with the `--fast` option, a faster version of main can be
    called (e.g., by setting fewer number of time steps etc.).
    """
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--fast",
        default=False,
        action="store_true",
        help="If set, the example should perform a reduced number of steps.",
    )
    args, _ = parser.parse_known_args()
    return args.fast


def as_gauss(B) -> float:
    """Magnetic field in Gauss.

    Args:
            B (float or pint.Quantity): Plain numbers are taken to be
                in Gauss, quantities are converted.

    Returns:
            float: The magnetic field in Gauss.

    >>> as_gauss(3.0)
    3.0
    >>> round(as_gauss(ureg.Quantity(1, "millitesla")), 10)
    10.0
    """
    if isinstance(B, ureg.Quantity):
        return float(B.to("gauss").magnitude)
    return float(B)


def flatten_index(row: int, col: int, N: int) -> int:
    """Position of :math:`\\rho_{row,col}` in the vectorized density.

    >>> flatten_index(1, 0, 3)
    1
    >>> flatten_index(0, 1, 3)
    3
    >>> flatten_index(2, 2, 3)
    8
    """
    if not (0 <= row < N and 0 <= col < N):
        raise ValueError(f"({row}, {col}) is outside a {N}x{N} matrix.")
    return row + col * N


def unflatten_index(k: int, N: int) -> Tuple[int, int]:
    """Inverse of `flatten_index`.

    >>> unflatten_index(3, 3)
    (0, 1)
    """
    if not 0 <= k < N * N:
        raise ValueError(f"{k} is outside a vector of length {N * N}.")
    return k % N, k // N


def population_indices(N: int) -> np.ndarray:
    """Vectorized positions of the diagonal (population) elements.

    >>> population_indices(3)
    array([0, 4, 8])
    """
    return np.arange(N) * (N + 1)


def matrix_to_vector(M: np.ndarray) -> np.ndarray:
    """Convert a matrix into a column vector."""
    return M.reshape((-1, 1), order="F")


def vector_to_matrix(v: np.ndarray, N: int) -> np.ndarray:
    """Convert a column vector into a matrix."""
    return v.reshape((N, N), order="F")


def vectors_to_matrices(vs: np.ndarray, N: int) -> np.ndarray:
    """Convert the columns of an ``(N**2, T)`` array into ``T`` matrices.

    Returns:
            np.ndarray: Array of shape ``(T, N, N)``.
    """
    return vs.T.reshape((-1, N, N)).transpose(0, 2, 1)


def time_grid(dt: float, T: float) -> np.ndarray:
    """Evenly spaced time grid ``0, dt, 2 dt, ...`` not exceeding `T`.

    `T` itself is included when it is a multiple of `dt` up to
    rounding.

    >>> time_grid(0.25, 1.0)
    array([0.  , 0.25, 0.5 , 0.75, 1.  ])
    >>> len(time_grid(0.1, 0.3))
    4
    >>> time_grid(1.0, 0.0)
    array([0.])
    """
    num_steps = int(np.floor(T / dt * (1 + TIME_GRID_RTOL))) + 1
    return dt * np.arange(num_steps)


def purity(rho: np.ndarray) -> float:
    """
    Calculate the purity of a density matrix.

    The purity is defined as :math:`P(\\rho) = \\operatorname{Tr}(\\rho^2)`.
    Pure states have :math:`P = 1`, a maximally mixed state of
    dimension :math:`d` has :math:`P = 1/d`.

    Args:

            rho (ndarray of shape (N, N)): Density matrix.

    Returns:

            float: Purity of the state, ``real(trace(rho @ rho))``.
    """
    return np.real(np.trace(rho @ rho))


def von_neumann_entropy(rho: np.ndarray) -> float:
    """
    Compute the von Neumann entropy of a density matrix.

    :math:`S(\\rho) = -\\sum_i \\lambda_i \\log \\lambda_i` over the
    eigenvalues of :math:`\\rho`, using the natural logarithm (nats).

    Args:

            rho (ndarray of shape (N, N)): Hermitian density matrix.

    Returns:

            float: The von Neumann entropy in nats.
    """
    evals = np.linalg.eigvalsh(rho)
    return -np.real(np.sum([val * np.log(val) for val in evals if val > 0]))


def _half_integer(x: float) -> Rational:
    return Rational(int(round(2 * x)), 2)


def clebsch_gordan(j1: float, j2: float, j: float, m1: float, m2: float, m: float):
    """Clebsch-Gordan coefficient :math:`\\langle j_1 m_1; j_2 m_2 | j m\\rangle`.

    Arguments may be integers or half-integers given as floats.
    Coefficients violating the selection rules are zero.

    >>> round(clebsch_gordan(0.5, 0.5, 1, 0.5, -0.5, 0), 6)
    0.707107
    >>> clebsch_gordan(1.5, 0.5, 2, 1.5, 0.5, 1)
    0.0
    """
    args = map(_half_integer, (j1, j2, j, m1, m2, m))
    return float(_sympy_clebsch_gordan(*args))


def exponential_decay(t: np.ndarray, amplitude: float, rate: float, offset: float):
    """Exponential model ``amplitude * exp(-rate * t) + offset``."""
    return amplitude * np.exp(-rate * t) + offset


def exponential_fit(
    time: np.ndarray, population: np.ndarray
) -> Tuple[float, np.ndarray, float, float]:
    """Decay-rate fit of a population trace.

    Args:
            time (np.ndarray): Time axis.
            population (np.ndarray): Population of one state, e.g. a
                row of `DensityMatrix.get_populations`.

    Returns:
            (float, np.ndarray, float, float):
            - `rate` (float): The fitted decay rate.
            - `fit_result` (np.ndarray): y-axis from fit.
            - `fit_error` (float): Standard error of the rate.
            - `R2` (float): R-squared value for the fit.
    """
    span = time[-1] - time[0]
    p0 = [population[0] - population[-1], 1 / span if span > 0 else 1, population[-1]]
    popt, pcov = curve_fit(exponential_decay, time, population, p0=p0, maxfev=10000)
    fit_result = exponential_decay(time, *popt)
    fit_error = np.sqrt(np.diag(pcov))[1]
    R2 = r2_score(population, fit_result)
    return popt[1], fit_result, fit_error, R2
