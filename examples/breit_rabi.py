#! /usr/bin/env python

import matplotlib.pyplot as plt
import numpy as np

from alkalipy.fine_structure import FineStructure
from alkalipy.utils import is_fast_run


def main(Bmax=5000.0, steps=201):
    # 87Rb 5S1/2
    fs = FineStructure(L=0, J=0.5, I=1.5, gI=-0.0009951414, A1=3417.341305452)
    print(fs)

    B = np.linspace(0, Bmax, steps)
    E = np.array([fs.energies(b) for b in B])

    print(f"Zero-field splitting: {E[0, -1] - E[0, 0]:.6f} MHz")

    plt.plot(B, E / 1e3, linewidth=2)
    plt.xlabel("Magnetic field / G", size=14)
    plt.ylabel("Energy / GHz", size=14)
    if not is_fast_run():
        plt.show()


if __name__ == "__main__":
    if is_fast_run():
        main(steps=11)
    else:
        main()
