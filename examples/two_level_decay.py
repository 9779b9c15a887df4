#! /usr/bin/env python

import matplotlib.pyplot as plt

from alkalipy.simulation import DensityMatrix
from alkalipy.utils import exponential_fit, is_fast_run


def main(T=20.0, dt=0.01):
    gamma = 0.5  # 1 -> 0

    dm = DensityMatrix(2)
    dm.decay = [[0, gamma], [0, 0]]
    dm.init_pop = [0, 1]
    P = dm.integrate(dt, T, "exp").get_populations()

    rate, fit, _, R2 = exponential_fit(dm.t, P[1])
    print(f"Fitted decay rate: {rate:.6f} (expected {gamma}), R2 = {R2:.8f}")

    plt.plot(dm.t, P[0], linewidth=2, label="ground")
    plt.plot(dm.t, P[1], linewidth=2, label="excited")
    plt.plot(dm.t, fit, "k--", label="fit")
    plt.xlabel("Time", size=14)
    plt.ylabel("Population", size=14)
    plt.legend(fontsize=14)
    if not is_fast_run():
        plt.show()


if __name__ == "__main__":
    if is_fast_run():
        main(T=5.0, dt=0.1)
    else:
        main()
