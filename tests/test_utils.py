#! /usr/bin/env python

import doctest
import unittest

import numpy as np

import alkalipy as ap
from alkalipy import utils


def load_tests(loader, tests, ignore):
    tests.addTests(doctest.DocTestSuite(utils))
    return tests


class VectorizationTests(unittest.TestCase):
    def setUp(self):
        self.rng = np.random.default_rng(42)

    def test_flatten_index_is_bijection(self):
        for N in range(1, 6):
            with self.subTest(N=N):
                indices = [
                    utils.flatten_index(row, col, N)
                    for row in range(N)
                    for col in range(N)
                ]
                self.assertEqual(sorted(indices), list(range(N * N)))

    def test_unflatten_inverts_flatten(self):
        N = 4
        for row in range(N):
            for col in range(N):
                k = utils.flatten_index(row, col, N)
                self.assertEqual(utils.unflatten_index(k, N), (row, col))

    def test_flatten_index_is_column_major(self):
        N = 3
        self.assertEqual(utils.flatten_index(0, 0, N), 0)
        self.assertEqual(utils.flatten_index(1, 0, N), 1)
        self.assertEqual(utils.flatten_index(0, 1, N), N)
        self.assertEqual(utils.flatten_index(N - 1, N - 1, N), N * N - 1)

    def test_out_of_range(self):
        with self.assertRaises(ValueError):
            utils.flatten_index(3, 0, 3)
        with self.assertRaises(ValueError):
            utils.flatten_index(0, -1, 3)
        with self.assertRaises(ValueError):
            utils.unflatten_index(9, 3)

    def test_matrix_to_vector_uses_flatten_index(self):
        N = 4
        rho = self.rng.normal(size=(N, N)) + 1j * self.rng.normal(size=(N, N))
        v = utils.matrix_to_vector(rho)
        self.assertEqual(v.shape, (N * N, 1))
        for row in range(N):
            for col in range(N):
                self.assertEqual(v[utils.flatten_index(row, col, N), 0], rho[row, col])

    def test_round_trip(self):
        for N in [1, 2, 5]:
            rho = self.rng.normal(size=(N, N)) + 1j * self.rng.normal(size=(N, N))
            back = utils.vector_to_matrix(utils.matrix_to_vector(rho), N)
            np.testing.assert_array_equal(back, rho)

    def test_vectors_to_matrices(self):
        N, T = 3, 5
        rhos = self.rng.normal(size=(T, N, N))
        vs = np.hstack([utils.matrix_to_vector(r) for r in rhos])
        self.assertEqual(vs.shape, (N * N, T))
        np.testing.assert_array_equal(utils.vectors_to_matrices(vs, N), rhos)

    def test_population_indices_are_diagonal(self):
        N = 5
        expected = [utils.flatten_index(k, k, N) for k in range(N)]
        np.testing.assert_array_equal(utils.population_indices(N), expected)


class TimeGridTests(unittest.TestCase):
    def test_includes_end_point(self):
        t = utils.time_grid(0.01, 1.0)
        self.assertEqual(len(t), 101)
        self.assertAlmostEqual(t[-1], 1.0)

    def test_does_not_exceed_end(self):
        t = utils.time_grid(0.3, 1.0)
        np.testing.assert_allclose(t, [0, 0.3, 0.6, 0.9])

    def test_zero_duration(self):
        np.testing.assert_array_equal(utils.time_grid(0.1, 0), [0.0])

    def test_evenly_spaced(self):
        t = utils.time_grid(0.05, 3.0)
        np.testing.assert_allclose(np.diff(t), 0.05)


class DensityMeasureTests(unittest.TestCase):
    def test_pure_state(self):
        rho = np.diag([1.0, 0.0, 0.0])
        self.assertAlmostEqual(utils.purity(rho), 1.0)
        self.assertAlmostEqual(utils.von_neumann_entropy(rho), 0.0)

    def test_maximally_mixed(self):
        d = 4
        rho = np.eye(d) / d
        self.assertAlmostEqual(utils.purity(rho), 1 / d)
        self.assertAlmostEqual(utils.von_neumann_entropy(rho), np.log(d))


class ClebschGordanTests(unittest.TestCase):
    def test_completeness(self):
        I, J = 1.5, 0.5
        for mI in np.arange(-I, I + 0.5):
            for mJ in np.arange(-J, J + 0.5):
                total = sum(
                    utils.clebsch_gordan(I, J, F, mI, mJ, mI + mJ) ** 2
                    for F in [1, 2]
                )
                self.assertAlmostEqual(total, 1.0)

    def test_stretched_state(self):
        self.assertAlmostEqual(utils.clebsch_gordan(1.5, 0.5, 2, 1.5, 0.5, 2), 1.0)

    def test_selection_rule(self):
        self.assertEqual(utils.clebsch_gordan(1.5, 0.5, 2, 0.5, 0.5, 0), 0.0)


class UnitTests(unittest.TestCase):
    def test_plain_number_is_gauss(self):
        self.assertEqual(utils.as_gauss(2.5), 2.5)

    def test_quantity(self):
        self.assertAlmostEqual(utils.as_gauss(ap.Q_(0.5, "millitesla")), 5.0)
        self.assertAlmostEqual(utils.as_gauss(ap.Q_(1e-4, "tesla")), 1.0)


class ExponentialFitTests(unittest.TestCase):
    def test_recovers_rate(self):
        t = np.linspace(0, 10, 200)
        population = 0.8 * np.exp(-0.3 * t) + 0.1
        rate, fit_result, fit_error, R2 = utils.exponential_fit(t, population)
        self.assertAlmostEqual(rate, 0.3, places=5)
        self.assertGreater(R2, 0.9999)
        np.testing.assert_allclose(fit_result, population, atol=1e-6)


if __name__ == "__main__":
    unittest.main()
