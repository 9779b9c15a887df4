#!/usr/bin/env python
"""
Liouville-space generators for the Lindblad master equation.

The density matrix :math:`\\rho` of an `N`-level system is vectorized
column-major (see `alkalipy.utils.flatten_index`), so that the master
equation becomes the linear ODE

.. math::

    \\frac{d}{dt} \\mathrm{vec}(\\rho) = M \\, \\mathrm{vec}(\\rho),

with the `N**2 x N**2` Liouvillian :math:`M` split into a unitary
(commutator) part and a dissipator built from spontaneous-decay rates.

Both parts are written directly in flattened-index form instead of
Kronecker products of the Hilbert-space operators.

Decay-rate convention
---------------------
``decay[g, e]`` is the rate of spontaneous decay from state ``e`` into
state ``g``.  `total_lindblad` only reads the upper triangle including
the diagonal (``g <= e``); entries below the diagonal are ignored.  A
non-zero diagonal entry ``decay[g, g]`` keeps the population of ``g``
but damps its coherences with every other state at half that rate.
"""

import logging

import numpy as np

from .utils import flatten_index

logger = logging.getLogger(__name__)


def _check_square(name: str, A: np.ndarray) -> int:
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"`{name}` must be a square matrix, got shape {A.shape}.")
    return A.shape[0]


def flatten_unitary(H: np.ndarray) -> np.ndarray:
    """Unitary part of the Liouvillian.

    For each output element :math:`\\rho_{mn}` and intermediate index
    :math:`j`, the element :math:`\\rho_{jn}` contributes
    :math:`-i H_{jm}` and :math:`\\rho_{mj}` contributes
    :math:`+i H_{nj}`.  In Kronecker form this is
    ``-1j * (kron(I, H.T) - kron(H, I))``, which equals
    :math:`-i[H, \\rho]` for a real symmetric Hamiltonian.

    Args:
            H (np.ndarray): Total (bare + coupling) Hamiltonian, `N x N`.

    Returns:
            np.ndarray: The `N**2 x N**2` unitary generator.

    >>> flatten_unitary(np.array([[0.0, 1.0], [1.0, 0.0]]))[0]
    array([0.+0.j, 0.-1.j, 0.+1.j, 0.+0.j])
    """
    N = _check_square("H", H)
    M = np.zeros((N * N, N * N), dtype=complex)
    for n in range(N):
        for m in range(N):
            row = flatten_index(m, n, N)
            for j in range(N):
                M[row, flatten_index(j, n, N)] -= 1j * H[j, m]
                M[row, flatten_index(m, j, N)] += 1j * H[n, j]
    return M


def _add_lindblad_term(L: np.ndarray, rate: float, g: int, e: int, N: int):
    # population transfer e -> g
    L[flatten_index(g, g, N), flatten_index(e, e, N)] += rate
    # anticommutator: rows and columns touching e
    for m in range(N):
        k = flatten_index(m, e, N)
        L[k, k] -= 0.5 * rate
    for n in range(N):
        k = flatten_index(e, n, N)
        L[k, k] -= 0.5 * rate


def lindblad_term(decay: np.ndarray, g: int, e: int) -> np.ndarray:
    """Dissipator for spontaneous decay from state `e` to state `g`.

    Implements :math:`\\Gamma (\\sigma \\rho \\sigma^\\dagger -
    \\frac{1}{2}\\{\\sigma^\\dagger \\sigma, \\rho\\})` for the jump
    operator :math:`\\sigma = |g\\rangle\\langle e|` and
    :math:`\\Gamma` = ``decay[g, e]``.

    Args:
            decay (np.ndarray): Decay-rate matrix, `N x N`.
            g (int): Index of the lower (final) state.
            e (int): Index of the upper (initial) state.

    Returns:
            np.ndarray: The `N**2 x N**2` dissipator for this pair.
    """
    N = _check_square("decay", decay)
    L = np.zeros((N * N, N * N), dtype=complex)
    _add_lindblad_term(L, decay[g, e], g, e, N)
    return L


def total_lindblad(decay: np.ndarray) -> np.ndarray:
    """Sum of `lindblad_term` over all pairs ``g <= e``.

    Args:
            decay (np.ndarray): Decay-rate matrix, `N x N`.

    Returns:
            np.ndarray: The `N**2 x N**2` dissipator.
    """
    N = _check_square("decay", decay)
    L = np.zeros((N * N, N * N), dtype=complex)
    channels = 0
    for g in range(N):
        for e in range(g, N):
            if decay[g, e] == 0:
                continue
            _add_lindblad_term(L, decay[g, e], g, e, N)
            channels += 1
    logger.debug("Dissipator built from %d decay channel(s), N = %d", channels, N)
    return L


def liouvillian(H: np.ndarray, lindblad: np.ndarray) -> np.ndarray:
    """Full generator ``flatten_unitary(H) + lindblad``."""
    M = flatten_unitary(H)
    if M.shape != lindblad.shape:
        raise ValueError(
            f"Dissipator shape {lindblad.shape} does not match generator shape {M.shape}."
        )
    return M + lindblad
