#!/usr/bin/env python
"""
Density-matrix simulation of optically driven multi-level atoms.

This module propagates the Lindblad master equation of an `N`-level
system in **Liouville** space: the density matrix is vectorized
column-major into an `N**2` vector and evolved with the Liouvillian
built by :mod:`alkalipy.liouville`.

Main classes
------------
- `Method` :
    Integration scheme: exact matrix exponential or implicit midpoint
    (Crank-Nicolson).
- `DensityMatrix` :
    Holds the bare and coupling Hamiltonians, the decay-rate matrix and
    the initial populations; builds the Liouvillian, integrates it in
    time or solves for the steady state, and reads populations back.

Errors
------
- `InvalidDimensionError` : matrices of inconsistent size.
- `InvalidArgumentError` : unknown method, bad time grid, nothing solved.
- `NumericalError` : non-finite initial state or singular linear systems.

Shape conventions
-----------------
- Hilbert density: `(N, N)`
- Liouville trajectory: `(N**2, T)`, steady state `(N**2, 1)`
- Populations: `(N, T)`

Units
-----
Energies and rates share one unit of angular frequency (e.g. rad/µs);
time is in the reciprocal unit.
"""

from __future__ import annotations

import enum
import logging
from typing import Optional, Sequence

import numpy as np
from scipy.linalg import expm, lstsq, lu_factor, lu_solve

from . import liouville, utils

logger = logging.getLogger(__name__)

IMAG_TOLERANCE = 1e-9


class InvalidDimensionError(ValueError):
    """Matrices or vectors that do not match the number of states."""


class InvalidArgumentError(ValueError):
    """Unsupported argument value (e.g. integration method)."""


class NumericalError(ArithmeticError):
    """Non-finite values or an ill-posed linear system."""


class Method(enum.Enum):
    """Time-integration scheme for `DensityMatrix.integrate`."""

    EXPONENTIAL = "exp"
    IMPLICIT_MIDPOINT = "fast"

    @classmethod
    def parse(cls, method) -> "Method":
        """Resolve a `Method` from a member or its name.

        >>> Method.parse("normal")
        <Method.EXPONENTIAL: 'exp'>
        >>> Method.parse("FAST")
        <Method.IMPLICIT_MIDPOINT: 'fast'>
        """
        if isinstance(method, cls):
            return method
        if isinstance(method, str):
            key = method.lower()
            if key == "normal":
                return cls.EXPONENTIAL
            for member in cls:
                if key == member.value:
                    return member
        raise InvalidArgumentError(f"Unknown method '{method}'!")


class DensityMatrix:
    """Master-equation solver for an `N`-level atom.

    Args:
        num_states (int): Total number of states. When omitted, call
            `set_num_states` before use.

    The total Hamiltonian is ``bare + coupling``.  ``decay[g, e]`` is
    the spontaneous-decay rate from state ``e`` to state ``g``; only
    entries with ``g <= e`` are used.  ``init_pop`` holds the initial
    populations, which are normalized before integration.

    >>> dm = DensityMatrix(2)
    >>> dm.coupling = [[0, 0.5], [0.5, 0]]
    >>> dm.init_pop = [1, 0]
    >>> P = dm.integrate(0.1, np.pi, "exp").get_populations()
    >>> P.shape
    (2, 32)
    >>> bool(np.allclose(P.sum(axis=0), 1))
    True
    """

    def __init__(self, num_states: Optional[int] = None):
        self.num_states = 0
        self.density = None
        self.density_vec = None
        self.dt = None
        self.T = None
        self.t = None
        self._bare = self._coupling = self._decay = np.zeros((0, 0))
        self._init_pop = np.zeros(0)
        self._lindblad = None
        self._lindblad_decay = None
        if num_states is not None:
            self.set_num_states(num_states)

    @classmethod
    def from_matrices(
        cls,
        bare,
        coupling=None,
        decay=None,
        init_pop=None,
    ) -> "DensityMatrix":
        """Construct a `DensityMatrix` sized after `bare`.

        Omitted matrices stay zero.
        """
        bare = np.asarray(bare)
        dm = cls(bare.shape[0])
        dm.bare = bare
        if coupling is not None:
            dm.coupling = coupling
        if decay is not None:
            dm.decay = decay
        if init_pop is not None:
            dm.init_pop = init_pop
        return dm

    def set_num_states(self, num_states: int) -> "DensityMatrix":
        """Set the number of states and pre-allocate (zero) all arrays.

        Any previous result and the cached dissipator are discarded.
        """
        if int(num_states) != num_states or num_states < 1:
            raise InvalidDimensionError(
                f"Number of states must be a positive integer, got {num_states}."
            )
        N = int(num_states)
        self.num_states = N
        self.density = np.zeros((N, N), dtype=complex)
        self._bare = np.zeros((N, N), dtype=complex)
        self._coupling = np.zeros((N, N), dtype=complex)
        self._decay = np.zeros((N, N))
        self._init_pop = np.zeros(N)
        self.density_vec = None
        self.dt = self.T = self.t = None
        self.invalidate_lindblad()
        return self

    def __repr__(self) -> str:
        steps = 0 if self.density_vec is None else self.density_vec.shape[1]
        return "\n".join(
            [
                f"Number of states: {self.num_states}",
                f"Decay channels: {int(np.count_nonzero(np.triu(self.decay)))}",
                f"Initial populations: {list(np.real(self.init_pop))}",
                f"Stored time steps: {steps}",
            ]
        )

    def _checked(self, name: str, value, shape: tuple, dtype=None) -> np.ndarray:
        value = np.array(value, dtype=dtype)
        if not np.iscomplexobj(value):
            value = value.astype(float)
        if value.shape != shape:
            raise InvalidDimensionError(
                f"`{name}` must have shape {shape}, got {value.shape}."
            )
        return value

    @property
    def bare(self) -> np.ndarray:
        """The bare (field-free) Hamiltonian."""
        return self._bare

    @bare.setter
    def bare(self, value):
        N = self.num_states
        self._bare = self._checked("bare", value, (N, N), complex)

    @property
    def coupling(self) -> np.ndarray:
        """The coupling (drive) Hamiltonian."""
        return self._coupling

    @coupling.setter
    def coupling(self, value):
        N = self.num_states
        self._coupling = self._checked("coupling", value, (N, N), complex)

    @property
    def decay(self) -> np.ndarray:
        """Decay rates, ``decay[g, e]`` from ``e`` to ``g``."""
        return self._decay

    @decay.setter
    def decay(self, value):
        N = self.num_states
        self._decay = self._checked("decay", value, (N, N))
        self.invalidate_lindblad()

    @property
    def init_pop(self) -> np.ndarray:
        """Unnormalized initial populations."""
        return self._init_pop

    @init_pop.setter
    def init_pop(self, value):
        self._init_pop = self._checked("init_pop", value, (self.num_states,))

    @property
    def hamiltonian(self) -> np.ndarray:
        """Total Hamiltonian ``bare + coupling``."""
        return self.bare + self.coupling

    def check_dimensions(self):
        """Raise `InvalidDimensionError` unless all arrays are sized `N`."""
        N = self.num_states
        if N < 1:
            raise InvalidDimensionError("Number of states has not been set.")
        expected = dict(
            bare=(N, N), coupling=(N, N), decay=(N, N), init_pop=(N,)
        )
        for name, shape in expected.items():
            actual = np.shape(getattr(self, name))
            if actual != shape:
                raise InvalidDimensionError(
                    f"`{name}` must have shape {shape}, got {actual}."
                )

    def invalidate_lindblad(self):
        """Drop the cached dissipator; it is rebuilt on next use."""
        self._lindblad = None
        self._lindblad_decay = None

    @property
    def lindblad(self) -> np.ndarray:
        """The dissipator, rebuilt only when the decay rates change."""
        if self._lindblad is None or not np.array_equal(
            self._lindblad_decay, self.decay
        ):
            self.make_total_lindblad()
        return self._lindblad

    def make_total_lindblad(self) -> np.ndarray:
        """Build and cache the total dissipator from `decay`."""
        self.check_dimensions()
        self._lindblad = liouville.total_lindblad(self.decay)
        self._lindblad_decay = self.decay.copy()
        return self._lindblad

    def make_lindblad(self, g: int, e: int, decay=None) -> np.ndarray:
        """Dissipator for decay from state `e` to state `g`.

        Args:
            g (int): Lower state.
            e (int): Upper state.
            decay (np.ndarray): Decay-rate matrix to use instead of
                `decay`.
        """
        if decay is None:
            decay = self.decay
        else:
            N = self.num_states
            decay = self._checked("decay", decay, (N, N))
        return liouville.lindblad_term(decay, g, e)

    def flatten_unitary(self) -> np.ndarray:
        """Unitary part of the Liouvillian for ``bare + coupling``."""
        return liouville.flatten_unitary(self.hamiltonian)

    def make_M(self) -> np.ndarray:
        """Liouvillian `M` with ``d/dt vec(rho) = M vec(rho)``."""
        self.check_dimensions()
        M = liouville.liouvillian(self.hamiltonian, self.lindblad)
        logger.debug("Liouvillian of shape %s assembled", M.shape)
        return M

    def initial_density_matrix(self) -> np.ndarray:
        """Diagonal density matrix from the normalized `init_pop`."""
        pop = np.real(self.init_pop)
        with np.errstate(divide="ignore", invalid="ignore"):
            rho0 = np.diag(pop / np.sum(pop)).astype(complex)
        if not np.all(np.isfinite(rho0)):
            raise NumericalError("NaNs encountered in initial density state")
        return rho0

    @staticmethod
    def propagator(M: np.ndarray, dt: float, method: Method) -> np.ndarray:
        """One-step propagator for a constant Liouvillian.

        Args:
            M (np.ndarray): Liouvillian.
            dt (float): Time step.
            method (Method): `Method.EXPONENTIAL` gives
                ``expm(M dt)``; `Method.IMPLICIT_MIDPOINT` gives
                ``(I - M dt/2)^-1 (I + M dt/2)`` from a single LU
                factorization.

        Returns:
            np.ndarray: Matrix mapping ``vec(rho(t))`` to
            ``vec(rho(t + dt))``.
        """
        if method == Method.EXPONENTIAL:
            return expm(M * dt)
        eye = np.eye(len(M), dtype=complex)
        lu = lu_factor(eye - M * dt / 2)
        D = lu_solve(lu, eye + M * dt / 2)
        if not np.all(np.isfinite(D)):
            raise NumericalError(
                "Implicit midpoint step is singular for this time step."
            )
        return D

    @staticmethod
    def propagate(propagator: np.ndarray, rho: np.ndarray) -> np.ndarray:
        return propagator @ rho

    def integrate(
        self, dt: float, T: float, method: Method | str = Method.EXPONENTIAL
    ) -> "DensityMatrix":
        """Integrate the master equation from ``t = 0`` to `T`.

        Args:
            dt (float): Time step (> 0).
            T (float): Total time (>= 0).
            method (Method or str): `Method` member, ``"exp"`` /
                ``"normal"`` or ``"fast"``.

        Returns:
            DensityMatrix: `self`, with `t`, `density` (initial state)
            and `density_vec` (trajectory) filled in.
        """
        method = Method.parse(method)
        if not dt > 0:
            raise InvalidArgumentError(f"Time step must be positive, got {dt}.")
        if not T >= 0:
            raise InvalidArgumentError(f"Total time must be non-negative, got {T}.")

        t = utils.time_grid(dt, T)
        M = self.make_M()
        rho0 = self.initial_density_matrix()

        N = self.num_states
        density_vec = np.zeros((N * N, len(t)), dtype=complex)
        density_vec[:, 0] = utils.matrix_to_vector(rho0)[:, 0]

        logger.info(
            "Integrating %d states over %d steps (dt=%g, method=%s)",
            N,
            len(t),
            dt,
            method.name,
        )
        D = self.propagator(M, dt, method)
        for n in range(1, len(t)):
            density_vec[:, n] = self.propagate(D, density_vec[:, n - 1])

        self.dt, self.T, self.t = dt, T, t
        self.density = rho0
        self.density_vec = density_vec
        return self

    def solve_steady_state(self) -> "DensityMatrix":
        """Solve ``M vec(rho) = 0`` subject to ``trace(rho) = 1``.

        The trace condition is appended to `M` as an extra row and the
        resulting overdetermined system is solved in the least-squares
        sense.

        Returns:
            DensityMatrix: `self`, with `density` (`N x N`) and
            `density_vec` (`N**2 x 1`) holding the steady state.
        """
        M = self.make_M()
        N = self.num_states
        trace_row = utils.matrix_to_vector(np.eye(N)).T
        A = np.vstack([M, trace_row])
        b = np.zeros(len(A), dtype=complex)
        b[-1] = 1

        v, _, _, s = lstsq(A, b)
        rank = int(np.sum(s > s.max() * max(A.shape) * np.finfo(float).eps))
        if rank < N * N:
            raise NumericalError(
                f"Steady state is not unique (rank {rank} < {N * N})."
            )
        logger.info("Steady state solved for %d states", N)
        self.density_vec = v.reshape((-1, 1))
        self.density = utils.vector_to_matrix(v, N)
        return self

    @property
    def densities(self) -> np.ndarray:
        """Stored density matrices with shape `(T, N, N)`."""
        if self.density_vec is None:
            raise InvalidArgumentError(
                "No solution stored, call integrate() or solve_steady_state() first."
            )
        return utils.vectors_to_matrices(self.density_vec, self.num_states)

    def populations_from_vectors(self) -> np.ndarray:
        """Diagonal elements of every stored vectorized density (complex)."""
        if self.density_vec is None:
            raise InvalidArgumentError(
                "No solution stored, call integrate() or solve_steady_state() first."
            )
        return self.density_vec[utils.population_indices(self.num_states), :]

    def get_populations(self, selector: Optional[Sequence[int]] = None) -> np.ndarray:
        """Populations (rows) as a function of time (columns).

        Args:
            selector (list[int]): State indices to return, in the given
                order (repeats allowed). All states when omitted or
                empty.

        Returns:
            np.ndarray: Real populations.
        """
        P = self.populations_from_vectors()
        if selector is not None and np.size(selector) > 0:
            P = P[np.atleast_1d(np.asarray(selector, dtype=int)), :]

        if P.size:
            residue = np.max(np.abs(P.imag))
            scale = max(1.0, np.max(np.abs(P.real)))
            if residue > IMAG_TOLERANCE * scale:
                logger.warning(
                    "Populations carry an imaginary part of up to %.3g", residue
                )
        return np.real(P)
