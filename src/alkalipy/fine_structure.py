#!/usr/bin/env python
"""
Hyperfine and Zeeman structure of a single fine-structure level.

`FineStructure` builds the hyperfine Hamiltonian of one :math:`n L_J`
level in the uncoupled basis :math:`|m_J, m_I\\rangle`, the
transformation to the coupled basis :math:`|F, m_F\\rangle` and the
eigenstates in an external magnetic field.  Energies are in MHz and
fields in Gauss (or any `pint` quantity convertible to Gauss).

Atomic constants (nuclear spin, g-factors, hyperfine constants) are
arguments; no species data is bundled.  The resulting energies are
typically placed on the diagonal of `DensityMatrix.bare`.

Hamiltonian
-----------
For each hyperfine level :math:`F` with
:math:`K = F(F+1) - I(I+1) - J(J+1)`:

.. math::

    E_F = \\frac{A_1}{2} K + A_2 \\frac{\\frac{3}{2} K (K + 1)
          - 2 I J (I + 1)(J + 1)}{4 I J (2I - 1)(2J - 1)},

where the electric quadrupole part only applies for :math:`L > 0`,
:math:`I \\geq 1` and :math:`J \\geq 1`.  The Zeeman term is
:math:`\\mu_B B (g_J m_J + g_I m_I) / h`.
"""

import logging

import numpy as np

from . import utils
from .shared import constants as C

logger = logging.getLogger(__name__)


class FineStructure:
    """Hyperfine + Zeeman structure of one fine-structure level.

    Args:
        L (int): Orbital angular momentum.
        J (float): Orbital + electron spin angular momentum.
        I (float): Nuclear spin.
        gI (float): Nuclear g-factor.
        A1 (float): Magnetic dipole constant (MHz).
        A2 (float): Electric quadrupole constant (MHz), defaults to 0.
        S (float): Electron spin, defaults to 1/2.

    Attributes after `solve_hyperfine`:
        E (np.ndarray): Energies as a diagonal matrix (MHz).
        U1int (np.ndarray): Eigenbasis -> uncoupled basis.
        U3int (np.ndarray): Eigenbasis -> coupled basis.

    >>> fs = FineStructure(L=0, J=0.5, I=1.5, gI=-0.001, A1=100.0)
    >>> fs
    Fine structure: L = 0, J = 0.5, I = 1.5
      gJ = 2.0, gI = -0.001
      A1 = 100.0 MHz, A2 = 0.0 MHz
      Number of states: 8
    >>> fs.energies(0).round(6).tolist()
    [-125.0, -125.0, -125.0, 75.0, 75.0, 75.0, 75.0, 75.0]
    """

    def __init__(self, L, J, I, gI, A1, A2=0.0, S=0.5):
        self.L = L
        self.J = J
        self.I = I
        self.S = S
        self.gI = gI
        self.A1 = A1
        self.A2 = A2
        self.gJ = self.calc_lande_j(S, L, J)
        self.num_states = int(round((2 * I + 1) * (2 * J + 1)))

        self.H0 = None
        self.U31 = None
        self.BV1 = None
        self.BV3 = None
        self.solve_hyperfine(0)

    def __repr__(self) -> str:
        return "\n".join(
            [
                f"Fine structure: L = {self.L}, J = {self.J}, I = {self.I}",
                f"  gJ = {self.gJ}, gI = {self.gI}",
                f"  A1 = {self.A1} MHz, A2 = {self.A2} MHz",
                f"  Number of states: {self.num_states}",
            ]
        )

    @property
    def F_values(self) -> np.ndarray:
        """Allowed total angular momenta, ascending."""
        return np.arange(abs(self.I - self.J), self.I + self.J + 0.5)

    def hyperfine_energy(self, F: float) -> float:
        """Zero-field energy (MHz) of the hyperfine level `F`."""
        I, J = self.I, self.J
        K = F * (F + 1) - I * (I + 1) - J * (J + 1)
        if J >= 1 and I >= 1 and self.L > 0:
            quadrupole = (1.5 * K * (K + 1) - 2 * I * J * (I + 1) * (J + 1)) / (
                4 * I * J * (2 * I - 1) * (2 * J - 1)
            )
            return self.A1 / 2 * K + self.A2 * quadrupole
        return self.A1 / 2 * K

    def make_H0(self) -> np.ndarray:
        """Build the bases, `U31` and the zero-field Hamiltonian `H0`.

        - `BV1`: uncoupled basis rows ``[mJ, mI]`` (``mI`` runs fastest).
        - `BV3`: coupled basis rows ``[F, mF]`` in order of increasing
          low-field energy: ``F`` ascending when ``A1 > 0``, ``mF``
          ascending when ``gF > 0``.
        - `U31`: Clebsch-Gordan matrix from the uncoupled to the
          coupled basis; its inverse is its transpose.
        """
        I, J = self.I, self.J
        mJ = np.arange(-J, J + 0.5)
        mI = np.arange(-I, I + 0.5)
        self.BV1 = np.array([[j, i] for j in mJ for i in mI])

        F_order = self.F_values if self.A1 > 0 else self.F_values[::-1]
        rows = []
        for F in F_order:
            mF = np.arange(-F, F + 0.5)
            if F > 0 and self.calc_lande_f(I, J, F, self.gI, self.gJ) <= 0:
                mF = mF[::-1]
            rows.extend([F, m] for m in mF)
        self.BV3 = np.array(rows)

        nDim = self.num_states
        U31 = np.zeros((nDim, nDim))
        for a, (F, mF) in enumerate(self.BV3):
            for b, (mJb, mIb) in enumerate(self.BV1):
                if mIb + mJb != mF:
                    continue
                U31[a, b] = utils.clebsch_gordan(I, J, F, mIb, mJb, mF)
        self.U31 = U31

        E_F = np.array([self.hyperfine_energy(F) for F in self.BV3[:, 0]])
        self.H0 = U31.T @ np.diag(E_F) @ U31
        logger.debug("Zero-field Hamiltonian built for %d states", nDim)
        return self.H0

    def zeeman_hamiltonian(self, B) -> np.ndarray:
        """Zeeman Hamiltonian (MHz) in the uncoupled basis.

        Args:
            B (float or pint.Quantity): Magnetic field (Gauss).
        """
        if self.H0 is None:
            self.make_H0()
        B = utils.as_gauss(B)
        mJ, mI = self.BV1[:, 0], self.BV1[:, 1]
        return np.diag(C.mu_B_h * B * (self.gJ * mJ + self.gI * mI))

    def solve_hyperfine(self, B):
        """Solve the hyperfine + Zeeman Hamiltonian.

        Args:
            B (float or pint.Quantity): Magnetic field (Gauss).

        Returns:
            (np.ndarray, np.ndarray): Diagonal energy matrix `E` (MHz)
            and `U1int`, which maps eigenstates to the uncoupled
            basis.  At zero field the eigenstates are the coupled
            basis states in `BV3` order; otherwise they are sorted by
            increasing energy.
        """
        if self.H0 is None:
            self.make_H0()
        B = utils.as_gauss(B)
        if B == 0:
            E = self.U31 @ self.H0 @ self.U31.T
            U1int = self.U31.T
        else:
            evals, U1int = np.linalg.eigh(self.H0 + self.zeeman_hamiltonian(B))
            E = np.diag(evals)

        self.E = E
        self.U1int = U1int
        self.U3int = self.U31 @ U1int
        return E, U1int

    def energies(self, B) -> np.ndarray:
        """Energies (MHz) at field `B` (Gauss), ascending."""
        E, _ = self.solve_hyperfine(B)
        return np.sort(np.real(np.diag(E)))

    @staticmethod
    def calc_lande_j(S, L, J):
        """Landé g-factor of a `J` level (electron g-factor taken as 2)."""
        JJ = J * (J + 1)
        SS = S * (S + 1)
        LL = L * (L + 1)
        return (JJ - SS + LL) / (2 * JJ) + 2 * (JJ + SS - LL) / (2 * JJ)

    @staticmethod
    def calc_lande_f(I, J, F, gI, gJ):
        """Landé g-factor of an `F` level."""
        FF = F * (F + 1)
        II = I * (I + 1)
        JJ = J * (J + 1)
        return gJ * (FF - II + JJ) / (2 * FF) + gI * (FF + II - JJ) / (2 * FF)
