"""Host framework (periodic crystal) and guest molecules."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field

import numpy as np

from .box import Box
from .pbc import _as_repfactors, wrap_fractional


@dataclass(frozen=True, eq=False)
class Framework:
    """
    Crystal occupying the home unit cell of `box`.

    Attributes:
        box: home unit cell.
        xf: (N,3) fractional coordinates in [0, 1).
        atoms: (N,) atom type labels.
        charges: (N,) point charges (electron charges) sitting on the atoms.
    """

    box: Box
    xf: np.ndarray
    atoms: tuple
    charges: np.ndarray = None

    def __post_init__(self) -> None:
        xf = np.array(self.xf, dtype=np.float64)
        if xf.size == 0:
            xf = xf.reshape(0, 3)
        if xf.ndim != 2 or xf.shape[1] != 3:
            raise ValueError(f"xf must have shape (N, 3), got {xf.shape}")
        atoms = tuple(self.atoms)
        n = xf.shape[0]
        if len(atoms) != n:
            raise ValueError(f"Got {len(atoms)} atom labels for {n} atoms.")
        charges = np.zeros(n) if self.charges is None else np.array(self.charges, dtype=np.float64)
        if charges.shape != (n,):
            raise ValueError(f"charges must have shape ({n},), got {charges.shape}")
        if not np.all(np.isfinite(xf)) or np.any(xf < 0.0) or np.any(xf >= 1.0):
            raise ValueError("Framework fractional coordinates must lie in [0, 1).")
        xf.flags.writeable = False
        charges.flags.writeable = False
        object.__setattr__(self, "xf", xf)
        object.__setattr__(self, "atoms", atoms)
        object.__setattr__(self, "charges", charges)

    @classmethod
    def from_cartesian(cls, box, x, atoms, charges=None) -> Framework:
        """Build a framework from Cartesian positions, wrapped into the home cell."""
        xf = wrap_fractional(box.to_fractional(np.asarray(x, float).reshape(-1, 3)))
        return cls(box, xf, atoms, charges)

    @property
    def n_atoms(self) -> int:
        return self.xf.shape[0]

    @property
    def net_charge(self) -> float:
        return float(np.sum(self.charges))

    def is_charge_neutral(self, tol=1e-4) -> bool:
        return abs(self.net_charge) < tol

    def charged_atoms(self) -> Framework:
        """Same framework restricted to atoms carrying a non-zero charge."""
        keep = self.charges != 0.0
        atoms = tuple(a for a, k in zip(self.atoms, keep) if k)
        return Framework(self.box, self.xf[keep], atoms, self.charges[keep])

    def replicate(self, repfactors) -> Framework:
        """Explicit supercell framework, repfactors[j] copies along axis j."""
        r = _as_repfactors(repfactors).astype(int)
        shifts = np.array(list(itertools.product(range(r[0]), range(r[1]), range(r[2]))), float)
        xf = (self.xf[None, :, :] + shifts[:, None, :]).reshape(-1, 3) / r
        n_cells = shifts.shape[0]
        return Framework(
            self.box.replicate(r),
            wrap_fractional(xf),
            self.atoms * n_cells,
            np.tile(self.charges, n_cells),
        )


@dataclass(eq=False)
class Molecule:
    """
    Guest molecule. Positions are Cartesian and may be updated between
    energy evaluations (translate_by / translate_to).

    Attributes:
        atoms: (M,) atom type labels of the Lennard-Jones sites.
        x: (M,3) Cartesian positions of the Lennard-Jones sites.
        charges: (C,) point charges.
        charge_x: (C,3) Cartesian positions of the point charges; these need
            not coincide with the atoms.
    """

    atoms: tuple
    x: np.ndarray
    charges: np.ndarray = field(default_factory=lambda: np.zeros(0))
    charge_x: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))

    def __post_init__(self):
        self.atoms = tuple(self.atoms)
        self.x = np.array(self.x, dtype=np.float64).reshape(-1, 3)
        self.charges = np.array(self.charges, dtype=np.float64).reshape(-1)
        self.charge_x = np.array(self.charge_x, dtype=np.float64).reshape(-1, 3)
        if len(self.atoms) != self.x.shape[0]:
            raise ValueError(f"Got {len(self.atoms)} atom labels for {self.x.shape[0]} atoms.")
        if self.charges.shape[0] != self.charge_x.shape[0]:
            raise ValueError(
                f"Got {self.charges.shape[0]} charges for {self.charge_x.shape[0]} charge positions."
            )

    @property
    def n_atoms(self):
        return self.x.shape[0]

    @property
    def n_charges(self):
        return self.charges.shape[0]

    @property
    def center(self):
        """Centroid of the atoms (of the charges for a charge-only molecule)."""
        if self.n_atoms:
            return self.x.mean(axis=0)
        return self.charge_x.mean(axis=0)

    def translate_by(self, dx):
        dx = np.asarray(dx, float)
        self.x = self.x + dx
        self.charge_x = self.charge_x + dx

    def translate_to(self, xyz):
        """Rigidly move the molecule so its center sits at xyz."""
        self.translate_by(np.asarray(xyz, float) - self.center)

    def copy(self):
        return Molecule(self.atoms, self.x.copy(), self.charges.copy(), self.charge_x.copy())
