#! /usr/bin/env python

import matplotlib.pyplot as plt

from alkalipy.simulation import DensityMatrix, Method
from alkalipy.utils import is_fast_run


def main(T=30.0, dt=0.05):
    omega = 1.0  # Rabi frequency
    gamma = 0.1  # spontaneous decay 1 -> 0

    dm = DensityMatrix(2)
    dm.coupling = [[0, omega / 2], [omega / 2, 0]]
    dm.decay = [[0, gamma], [0, 0]]
    dm.init_pop = [1, 0]

    fig = plt.figure(1)
    for method, style in [(Method.EXPONENTIAL, "-"), (Method.IMPLICIT_MIDPOINT, ":")]:
        P = dm.integrate(dt, T, method).get_populations([1])
        plt.plot(dm.t, P[0], style, linewidth=2, label=method.value)

    rho_ss = dm.solve_steady_state().density
    print(f"Steady-state excited population: {rho_ss[1, 1].real:.6f}")
    plt.axhline(rho_ss[1, 1].real, color="k", linestyle="--", label="steady state")
    plt.xlabel("Time", size=14)
    plt.ylabel("Excited population", size=14)
    plt.legend(fontsize=14)
    fig.set_size_inches([7, 4])
    if not is_fast_run():
        plt.show()


if __name__ == "__main__":
    if is_fast_run():
        main(T=5.0)
    else:
        main()
