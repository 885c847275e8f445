import logging

import numpy as np

from porenergy.box import Box
from porenergy.config import EwaldParams
from porenergy.energy import AdsorptionEnergy
from porenergy.forcefield import LennardJonesForceField
from porenergy.grid import unitcell_energy
from porenergy.system import Framework, Molecule


def init_cubic_lattice(n_side=2, spacing=0.5):
    """Fractional coordinates of an n_side^3 simple cubic arrangement."""
    pts = []
    for i in range(n_side):
        for j in range(n_side):
            for k in range(n_side):
                pts.append([i * spacing, j * spacing, k * spacing])
    return np.array(pts, float)


def build_framework(length=8.0):
    xf = init_cubic_lattice(2, 0.5)
    atoms = ["Zn" if (i + j + k) % 2 == 0 else "O" for i, j, k in np.round(2 * xf).astype(int)]
    charges = np.where(np.array(atoms) == "Zn", 1.0, -1.0)
    return Framework(Box.cubic(length), xf, atoms, charges)


def build_co2(center=(0.0, 0.0, 0.0)):
    bond = 1.16
    x = np.array([[-bond, 0.0, 0.0], [0.0, 0.0, 0.0], [bond, 0.0, 0.0]]) + np.asarray(center)
    return Molecule(
        atoms=["O_co2", "C_co2", "O_co2"],
        x=x,
        charges=[-0.35, 0.70, -0.35],
        charge_x=x.copy(),
    )


def main(mesh=(6, 6, 6)):
    logging.basicConfig(level=logging.INFO)
    framework = build_framework()
    ljff = LennardJonesForceField.from_mixing_rules(
        sigmas={"Zn": 2.46, "O": 3.12, "O_co2": 3.05, "C_co2": 2.80},
        epsilons={"Zn": 62.4, "O": 30.2, "O_co2": 79.0, "C_co2": 27.0},
        cutoff_radius=10.0,
    )
    ewald = EwaldParams(alpha=0.3, sr_cutoff_radius=10.0, k_repfactors=(5, 5, 5))
    model = AdsorptionEnergy(framework, ljff, ewald=ewald)

    co2 = build_co2(framework.box.to_cartesian([0.25, 0.25, 0.25]))
    stats = model.guest_host(co2)
    print(f"vdw={stats['vdw']:.4f} K  electrostatic={stats['electrostatic']:.4f} K  total={stats['total']:.4f} K")

    energy = unitcell_energy(framework, co2, ljff, model.repfactors, mesh=mesh)
    finite = energy[np.isfinite(energy)]
    print(f"energy map {energy.shape}: min={finite.min():.4f} K  overlaps={np.sum(np.isinf(energy))}")
    return stats, energy


if __name__ == "__main__":
    main()
