#! /usr/bin/env python

import matplotlib.pyplot as plt
import numpy as np

from alkalipy.simulation import DensityMatrix
from alkalipy.utils import is_fast_run


def main(T=200.0, dt=0.5):
    # Two ground states |0>, |1> coupled through one excited state |2>
    # (Lambda system); only |1> is driven, so population ends up in |0>.
    omega = 0.2
    gamma = 1.0

    dm = DensityMatrix(3)
    dm.coupling[1, 2] = dm.coupling[2, 1] = omega / 2
    dm.decay[0, 2] = dm.decay[1, 2] = gamma / 2
    dm.init_pop = [1, 1, 0]

    P = dm.integrate(dt, T).get_populations()
    print("Final populations:", np.round(P[:, -1], 6))
    print(
        "Steady state:",
        np.round(dm.solve_steady_state().get_populations()[:, 0], 6),
    )

    for n, label in enumerate(["|0>", "|1>", "|2>"]):
        plt.plot(dm.t, P[n], linewidth=2, label=label)
    plt.xlabel("Time", size=14)
    plt.ylabel("Population", size=14)
    plt.legend(fontsize=14)
    if not is_fast_run():
        plt.show()


if __name__ == "__main__":
    if is_fast_run():
        main(T=20.0)
    else:
        main()
