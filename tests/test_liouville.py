#! /usr/bin/env python

import doctest
import unittest

import numpy as np

from alkalipy import liouville
from alkalipy.utils import matrix_to_vector


def load_tests(loader, tests, ignore):
    tests.addTests(doctest.DocTestSuite(liouville))
    return tests


def random_hermitian(rng, N):
    A = rng.normal(size=(N, N)) + 1j * rng.normal(size=(N, N))
    return (A + A.conj().T) / 2


def random_density(rng, N):
    A = rng.normal(size=(N, N)) + 1j * rng.normal(size=(N, N))
    rho = A @ A.conj().T
    return rho / np.trace(rho)


class UnitaryTests(unittest.TestCase):
    def setUp(self):
        self.rng = np.random.default_rng(7)
        self.N = 3

    def test_kronecker_form(self):
        H = self.rng.normal(size=(self.N, self.N)) + 1j * self.rng.normal(
            size=(self.N, self.N)
        )
        eye = np.eye(self.N)
        expected = -1j * (np.kron(eye, H.T) - np.kron(H, eye))
        np.testing.assert_allclose(liouville.flatten_unitary(H), expected)

    def test_commutator_for_real_symmetric_hamiltonian(self):
        A = self.rng.normal(size=(self.N, self.N))
        H = A + A.T
        rho = random_density(self.rng, self.N)
        M = liouville.flatten_unitary(H)
        expected = -1j * (H @ rho - rho @ H)
        np.testing.assert_allclose(
            M @ matrix_to_vector(rho), matrix_to_vector(expected), atol=1e-12
        )

    def test_action_on_density(self):
        H = random_hermitian(self.rng, self.N)
        rho = random_density(self.rng, self.N)
        M = liouville.flatten_unitary(H)
        expected = -1j * (H.T @ rho - rho @ H.T)
        np.testing.assert_allclose(
            M @ matrix_to_vector(rho), matrix_to_vector(expected), atol=1e-12
        )

    def test_trace_preserving(self):
        H = random_hermitian(self.rng, self.N)
        trace_row = matrix_to_vector(np.eye(self.N)).T
        np.testing.assert_allclose(
            trace_row @ liouville.flatten_unitary(H), 0, atol=1e-12
        )

    def test_non_square(self):
        with self.assertRaises(ValueError):
            liouville.flatten_unitary(np.zeros((2, 3)))


class LindbladTests(unittest.TestCase):
    def setUp(self):
        self.rng = np.random.default_rng(11)
        self.N = 4

    def dissipator(self, rate, g, e, rho):
        sigma = np.zeros((self.N, self.N))
        sigma[g, e] = 1
        sd = sigma.T
        return rate * (
            sigma @ rho @ sd - 0.5 * (sd @ sigma @ rho + rho @ sd @ sigma)
        )

    def test_single_channel_matches_operator_form(self):
        decay = np.zeros((self.N, self.N))
        decay[0, 2] = 0.7
        rho = random_density(self.rng, self.N)
        L = liouville.lindblad_term(decay, 0, 2)
        expected = self.dissipator(0.7, 0, 2, rho)
        np.testing.assert_allclose(
            L @ matrix_to_vector(rho), matrix_to_vector(expected), atol=1e-12
        )

    def test_population_transfer(self):
        decay = np.zeros((2, 2))
        decay[0, 1] = 2.0
        L = liouville.lindblad_term(decay, 0, 1)
        expected = np.diag([0, -1.0, -1.0, -2.0])
        expected[0, 3] = 2.0
        np.testing.assert_allclose(L, expected)

    def test_diagonal_entry_only_dephases(self):
        decay = np.zeros((self.N, self.N))
        decay[1, 1] = 0.4
        rho = random_density(self.rng, self.N)
        drho = (liouville.lindblad_term(decay, 1, 1) @ matrix_to_vector(rho)).reshape(
            (self.N, self.N), order="F"
        )
        np.testing.assert_allclose(np.diag(drho), 0, atol=1e-12)
        np.testing.assert_allclose(drho[0, 1], -0.2 * rho[0, 1])
        np.testing.assert_allclose(drho, self.dissipator(0.4, 1, 1, rho), atol=1e-12)

    def test_total_is_sum_over_upper_triangle(self):
        decay = np.triu(self.rng.uniform(size=(self.N, self.N)), k=1)
        expected = sum(
            liouville.lindblad_term(decay, g, e)
            for g in range(self.N)
            for e in range(g, self.N)
        )
        np.testing.assert_allclose(liouville.total_lindblad(decay), expected)

    def test_lower_triangle_is_ignored(self):
        decay = np.tril(self.rng.uniform(size=(self.N, self.N)), k=-1)
        np.testing.assert_array_equal(liouville.total_lindblad(decay), 0)

    def test_trace_preserving(self):
        decay = np.triu(self.rng.uniform(size=(self.N, self.N)))
        trace_row = matrix_to_vector(np.eye(self.N)).T
        np.testing.assert_allclose(
            trace_row @ liouville.total_lindblad(decay), 0, atol=1e-12
        )

    def test_liouvillian_adds_parts(self):
        H = random_hermitian(self.rng, self.N)
        decay = np.triu(self.rng.uniform(size=(self.N, self.N)), k=1)
        L = liouville.total_lindblad(decay)
        np.testing.assert_allclose(
            liouville.liouvillian(H, L), liouville.flatten_unitary(H) + L
        )

    def test_liouvillian_shape_mismatch(self):
        with self.assertRaises(ValueError):
            liouville.liouvillian(np.eye(2), np.zeros((9, 9)))


if __name__ == "__main__":
    unittest.main()
