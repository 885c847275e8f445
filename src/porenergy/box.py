"""Periodic cell: fractional <-> Cartesian transforms and reciprocal lattice."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from .pbc import _as_repfactors

logger = logging.getLogger(__name__)


def _readonly(a):
    a = np.array(a, dtype=np.float64)
    a.flags.writeable = False
    return a


@dataclass(frozen=True, eq=False)
class Box:
    """
    Parallelepiped cell.

    Attributes:
        f_to_c: 3x3 fractional -> Cartesian matrix; its columns are the
            lattice vectors a, b, c (Angstrom).
        c_to_f: inverse of f_to_c.
        volume: cell volume (Angstrom^3).
        reciprocal_lattice: 3x3 matrix whose columns are the reciprocal
            vectors b_i with b_i . a_j = 2 pi delta_ij, so that
            k = reciprocal_lattice @ (ka, kb, kc).
    """

    f_to_c: np.ndarray
    c_to_f: np.ndarray = field(init=False, repr=False)
    volume: float = field(init=False)
    reciprocal_lattice: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        f_to_c = np.asarray(self.f_to_c, dtype=np.float64)
        if f_to_c.shape != (3, 3):
            raise ValueError(f"f_to_c must be a 3x3 matrix, got shape {f_to_c.shape}")
        if not np.all(np.isfinite(f_to_c)):
            raise ValueError("f_to_c contains non-finite entries.")
        volume = float(np.linalg.det(f_to_c))
        scale = float(np.prod(np.linalg.norm(f_to_c, axis=0)))
        if not volume > 1e-12 * max(scale, 1.0):
            raise ValueError(
                f"Box must have positive volume (right-handed, non-degenerate "
                f"lattice vectors); got volume {volume}."
            )
        c_to_f = np.linalg.inv(f_to_c)
        object.__setattr__(self, "f_to_c", _readonly(f_to_c))
        object.__setattr__(self, "c_to_f", _readonly(c_to_f))
        object.__setattr__(self, "volume", volume)
        object.__setattr__(self, "reciprocal_lattice", _readonly(2.0 * math.pi * c_to_f.T))

    @classmethod
    def from_lattice_parameters(cls, a, b, c, alpha_deg=90.0, beta_deg=90.0, gamma_deg=90.0) -> Box:
        """
        Build a box from unit cell lengths (Angstrom) and angles (degrees),
        with a along x and b in the xy-plane.
        """
        if min(a, b, c) <= 0.0:
            raise ValueError(f"Cell lengths must be positive, got {(a, b, c)}.")
        alpha, beta, gamma = np.deg2rad([alpha_deg, beta_deg, gamma_deg])
        cos_a, cos_b, cos_g = np.cos(alpha), np.cos(beta), np.cos(gamma)
        sin_g = np.sin(gamma)
        v2 = 1.0 - cos_a**2 - cos_b**2 - cos_g**2 + 2.0 * cos_a * cos_b * cos_g
        if v2 <= 1e-12 or sin_g <= 0.0:
            raise ValueError(
                f"Cell angles {(alpha_deg, beta_deg, gamma_deg)} do not describe a valid cell."
            )
        f_to_c = np.array(
            [
                [a, b * cos_g, c * cos_b],
                [0.0, b * sin_g, c * (cos_a - cos_b * cos_g) / sin_g],
                [0.0, 0.0, c * math.sqrt(v2) / sin_g],
            ]
        )
        return cls(f_to_c)

    @classmethod
    def orthorhombic(cls, lx, ly, lz) -> Box:
        return cls(np.diag([lx, ly, lz]).astype(float))

    @classmethod
    def cubic(cls, length) -> Box:
        return cls.orthorhombic(length, length, length)

    @property
    def lattice_vectors(self) -> np.ndarray:
        """Rows are a, b, c."""
        return self.f_to_c.T

    @property
    def perpendicular_widths(self) -> np.ndarray:
        """Distances between opposite faces (bc, ca, ab planes)."""
        a, b, c = self.lattice_vectors
        areas = np.linalg.norm([np.cross(b, c), np.cross(c, a), np.cross(a, b)], axis=1)
        return self.volume / areas

    def replicate(self, repfactors) -> Box:
        """Supercell box tiling this cell repfactors[j] times along axis j."""
        r = _as_repfactors(repfactors)
        return Box(self.f_to_c * r[None, :])

    def to_cartesian(self, xf):
        """xf: (3,) or (N,3) fractional -> Cartesian."""
        return np.asarray(xf, float) @ self.f_to_c.T

    def to_fractional(self, x):
        """x: (3,) or (N,3) Cartesian -> fractional."""
        return np.asarray(x, float) @ self.c_to_f.T

    def key(self):
        """Hashable identity of the cell geometry."""
        return tuple(float(v) for v in self.f_to_c.ravel())

    def __eq__(self, other):
        if not isinstance(other, Box):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self):
        return hash(self.key())


def replication_factors(box, cutoff_radius):
    """
    Smallest replication of `box` whose supercell is at least 2 * cutoff_radius
    wide along every axis, so the nearest image is the only one in range.
    """
    if cutoff_radius <= 0.0:
        raise ValueError(f"cutoff_radius must be positive, got {cutoff_radius}.")
    n = np.ceil(2.0 * cutoff_radius / box.perpendicular_widths - 1e-12)
    return tuple(int(max(1, v)) for v in n)


def check_repfactors(box, repfactors, cutoff_radius):
    """
    Raise ValueError if the supercell built from `box` and `repfactors` is
    narrower than 2 * cutoff_radius along any axis.
    """
    r = _as_repfactors(repfactors)
    if np.any(r < 1) or np.any(r != np.round(r)):
        raise ValueError(f"repfactors must be positive integers, got {tuple(repfactors)}.")
    widths = box.perpendicular_widths * r
    if np.any(widths < 2.0 * cutoff_radius):
        raise ValueError(
            f"Supercell {tuple(int(v) for v in r)} has perpendicular widths {widths}, "
            f"too small for cutoff radius {cutoff_radius} (need >= {2.0 * cutoff_radius}). "
            f"Use at least {replication_factors(box, cutoff_radius)}."
        )
    logger.debug("Supercell %s widths %s accept cutoff %.3f", tuple(r), widths, cutoff_radius)
