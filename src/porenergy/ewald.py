import itertools
import logging
import math
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
from scipy.special import erfc

from .constants import EPSILON_0, R_OVERLAP_SQUARED
from .pbc import _as_repfactors, nearest_image, wrap_fractional

logger = logging.getLogger(__name__)


class Kvector(NamedTuple):
    k: np.ndarray  # reciprocal lattice vector, 1/A
    weight: float  # weight of its cos(k . dx) term in the long-range sum


@dataclass(frozen=True, eq=False)
class Kvectors:
    """Read-only set of reciprocal vectors k (M,3) with their weights (M,)."""

    k: np.ndarray
    weights: np.ndarray

    def __post_init__(self) -> None:
        k = np.array(self.k, dtype=np.float64).reshape(-1, 3)
        weights = np.array(self.weights, dtype=np.float64).reshape(-1)
        if k.shape[0] != weights.shape[0]:
            raise ValueError(f"Got {k.shape[0]} k-vectors but {weights.shape[0]} weights.")
        k.flags.writeable = False
        weights.flags.writeable = False
        object.__setattr__(self, "k", k)
        object.__setattr__(self, "weights", weights)

    def __len__(self):
        return self.k.shape[0]

    def __iter__(self):
        for k, w in zip(self.k, self.weights):
            yield Kvector(k, float(w))


def compute_kvectors(sim_box, k_repfactors, alpha, epsilon0=EPSILON_0):
    """
    Reciprocal lattice vectors and weights for the long-range Ewald sum.

    Since cos(k . dx) = cos(-k . dx), only one of each pair {k, -k} is kept
    (ka >= 0; for ka == 0 only kb >= 0; for ka == kb == 0 only kc > 0) and
    its weight carries a factor 2:
        weight = 2 exp(-|k|^2 / (4 alpha^2)) / |k|^2 / epsilon0

    sim_box: the simulation (super)cell
    k_repfactors: (ka_max, kb_max, kc_max)
    alpha: Ewald convergence parameter, 1/A
    """
    kx, ky, kz = (int(v) for v in _as_repfactors(k_repfactors))
    triples = []
    for ka in range(0, kx + 1):
        for kb in range(-ky, ky + 1):
            for kc in range(-kz, kz + 1):
                if ka == 0 and kb == 0 and kc == 0:
                    continue
                if ka == 0 and kb < 0:
                    continue
                if ka == 0 and kb == 0 and kc < 0:
                    continue
                triples.append((ka, kb, kc))

    n = np.array(triples, float).reshape(-1, 3)
    k = n @ sim_box.reciprocal_lattice.T
    k2 = np.sum(k * k, axis=1)
    weights = 2.0 * np.exp(-k2 / (4.0 * alpha * alpha)) / k2 / epsilon0
    logger.debug("Built %d k-vectors for k_repfactors %s, alpha %.4f", len(triples), (kx, ky, kz), alpha)
    return Kvectors(k, weights)


class KvectorCache:
    """
    Memoizes compute_kvectors per (simulation box, k_repfactors, alpha,
    epsilon0). The returned Kvectors are immutable and safe to share.
    """

    def __init__(self):
        self._store = {}

    def get(self, sim_box, k_repfactors, alpha, epsilon0=EPSILON_0):
        key = (
            sim_box.key(),
            tuple(int(v) for v in _as_repfactors(k_repfactors)),
            float(alpha),
            float(epsilon0),
        )
        kvectors = self._store.get(key)
        if kvectors is None:
            kvectors = compute_kvectors(sim_box, k_repfactors, alpha, epsilon0)
            self._store[key] = kvectors
        return kvectors

    def __len__(self):
        return len(self._store)

    def clear(self):
        self._store.clear()


def _long_range(q, dx, kvectors):
    """sum_i sum_k q_i cos(k . dx_i) w_k"""
    if len(kvectors) == 0 or q.size == 0:
        return 0.0
    return float(q @ (np.cos(dx @ kvectors.k.T) @ kvectors.weights))


def _short_range(q, dx, sr_cutoff_radius, alpha, r_overlap_squared):
    """sum_i q_i erfc(alpha r_i) / r_i over r_i < sr_cutoff_radius"""
    r2 = np.sum(dx * dx, axis=-1)
    inside = r2 < sr_cutoff_radius * sr_cutoff_radius
    if not np.any(inside):
        return 0.0
    if np.any(r2[inside] < r_overlap_squared):
        raise ValueError(
            f"Point lies within {math.sqrt(r_overlap_squared)} A of a point charge; "
            "the real-space Ewald term is singular there."
        )
    r = np.sqrt(r2[inside])
    return float(np.sum(q[inside] / r * erfc(alpha * r)))


def electrostatic_potential(
    framework,
    x,
    sim_box,
    repfactors,
    sr_cutoff_radius,
    kvectors,
    alpha,
    epsilon0=EPSILON_0,
    r_overlap_squared=R_OVERLAP_SQUARED,
):
    """
    Ewald electrostatic potential (K / e) at Cartesian point x created by the
    framework point charges, periodic over the supercell `sim_box` made of
    `repfactors` home cells.

    Long range: every explicit replica enters with its raw displacement.
    Short range: nearest image within the supercell, cut at sr_cutoff_radius.
    Returns sr / (4 pi epsilon0) + lr / volume(sim_box).
    """
    r = _as_repfactors(repfactors)
    box = framework.box
    q = framework.charges
    xf = wrap_fractional(box.to_fractional(x))

    sr_potential = 0.0
    lr_potential = 0.0
    for n in itertools.product(*(range(int(v)) for v in r)):
        # x - x_i in fractional coords for replica n of every framework atom
        dxf = (xf - np.asarray(n, float)) - framework.xf

        lr_potential += _long_range(q, dxf @ box.f_to_c.T, kvectors)

        dx = nearest_image(dxf, r) @ box.f_to_c.T
        sr_potential += _short_range(q, dx, sr_cutoff_radius, alpha, r_overlap_squared)

    sr_potential /= 4.0 * math.pi * epsilon0
    lr_potential /= sim_box.volume
    return lr_potential + sr_potential


def electrostatic_potential_energy(
    framework,
    molecule,
    sim_box,
    repfactors,
    sr_cutoff_radius,
    kvectors,
    alpha,
    epsilon0=EPSILON_0,
    r_overlap_squared=R_OVERLAP_SQUARED,
):
    """Electrostatic energy (K) of the molecule's point charges in the framework potential."""
    energy = 0.0
    for q, x in zip(molecule.charges, molecule.charge_x):
        energy += q * electrostatic_potential(
            framework, x, sim_box, repfactors, sr_cutoff_radius, kvectors, alpha,
            epsilon0=epsilon0, r_overlap_squared=r_overlap_squared,
        )
    return energy


def electrostatic_potential_molecules(
    molecules,
    exclude_molecule_id,
    x,
    sim_box,
    sr_cutoff_radius,
    kvectors,
    alpha,
    epsilon0=EPSILON_0,
    r_overlap_squared=R_OVERLAP_SQUARED,
):
    """
    Ewald electrostatic potential (K / e) at Cartesian point x created by
    the point charges of every molecule except molecules[exclude_molecule_id].
    Molecules are free particles in `sim_box`: the short-range term uses the
    single-cell minimum image.
    """
    exclude_molecule_id = range(len(molecules))[exclude_molecule_id]
    others = [m for i, m in enumerate(molecules) if i != exclude_molecule_id and m.n_charges]
    if not others:
        return 0.0
    q = np.concatenate([m.charges for m in others])
    # vector from each point charge to x
    dx = np.asarray(x, float) - np.concatenate([m.charge_x for m in others])

    lr_potential = _long_range(q, dx, kvectors)

    dx = nearest_image(sim_box.to_fractional(dx), (1, 1, 1)) @ sim_box.f_to_c.T
    sr_potential = _short_range(q, dx, sr_cutoff_radius, alpha, r_overlap_squared)

    return lr_potential / sim_box.volume + sr_potential / (4.0 * math.pi * epsilon0)


def electrostatic_potential_energy_molecules(
    molecules,
    molecule_id,
    sim_box,
    sr_cutoff_radius,
    kvectors,
    alpha,
    epsilon0=EPSILON_0,
    r_overlap_squared=R_OVERLAP_SQUARED,
):
    """Electrostatic energy (K) of molecules[molecule_id] with all other molecules."""
    molecule_id = range(len(molecules))[molecule_id]
    molecule = molecules[molecule_id]
    energy = 0.0
    for q, x in zip(molecule.charges, molecule.charge_x):
        energy += q * electrostatic_potential_molecules(
            molecules, molecule_id, x, sim_box, sr_cutoff_radius, kvectors, alpha,
            epsilon0=epsilon0, r_overlap_squared=r_overlap_squared,
        )
    return energy


def total_electrostatic_potential_energy(
    molecules,
    sim_box,
    sr_cutoff_radius,
    kvectors,
    alpha,
    epsilon0=EPSILON_0,
    r_overlap_squared=R_OVERLAP_SQUARED,
):
    """Guest-guest electrostatic energy (K) of the whole set, each pair counted once."""
    energy = 0.0
    for i in range(len(molecules)):
        energy += electrostatic_potential_energy_molecules(
            molecules, i, sim_box, sr_cutoff_radius, kvectors, alpha,
            epsilon0=epsilon0, r_overlap_squared=r_overlap_squared,
        )
    return 0.5 * energy
