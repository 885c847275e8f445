"""Ewald summation settings."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .constants import EPSILON_0


@dataclass(frozen=True)
class EwaldParams:
    alpha: float = 0.28  # convergence parameter, 1/A
    sr_cutoff_radius: float = 12.5  # real-space cutoff, A
    k_repfactors: tuple = (6, 6, 6)  # reciprocal-space replications per axis
    epsilon0: float = EPSILON_0

    def __post_init__(self) -> None:
        k = self.k_repfactors
        k = (int(k),) * 3 if np.isscalar(k) else tuple(int(v) for v in k)
        if len(k) != 3 or min(k) < 0:
            raise ValueError(f"k_repfactors must be 3 non-negative integers, got {self.k_repfactors}.")
        if not self.alpha > 0.0:
            raise ValueError(f"alpha must be positive, got {self.alpha}.")
        if not self.sr_cutoff_radius > 0.0:
            raise ValueError(f"sr_cutoff_radius must be positive, got {self.sr_cutoff_radius}.")
        if not self.epsilon0 > 0.0:
            raise ValueError(f"epsilon0 must be positive, got {self.epsilon0}.")
        object.__setattr__(self, "k_repfactors", k)
        object.__setattr__(self, "alpha", float(self.alpha))
        object.__setattr__(self, "sr_cutoff_radius", float(self.sr_cutoff_radius))

    @classmethod
    def from_dict(cls, params) -> EwaldParams:
        """
        params: dict with optional keys
          ewald_alpha, ewald_r_real, ewald_kmax (int or 3 ints), epsilon0
        """
        defaults = cls()
        return cls(
            alpha=params.get("ewald_alpha", defaults.alpha),
            sr_cutoff_radius=params.get("ewald_r_real", defaults.sr_cutoff_radius),
            k_repfactors=params.get("ewald_kmax", defaults.k_repfactors),
            epsilon0=params.get("epsilon0", defaults.epsilon0),
        )

    @classmethod
    def from_tolerance(cls, sr_cutoff_radius, sim_box, tolerance=1e-6, epsilon0=EPSILON_0) -> EwaldParams:
        """
        Pick alpha and k_repfactors so both the real-space and the
        reciprocal-space truncation errors are about `tolerance`:
          alpha = sqrt(-ln tol) / r_c,  k_cut = 2 alpha sqrt(-ln tol),
          k_repfactors[i] = ceil(k_cut / |b_i|) = ceil(k_cut w_i / 2 pi)
        where w_i are the perpendicular widths of the simulation box.
        """
        if not 0.0 < tolerance < 1.0:
            raise ValueError(f"tolerance must be in (0, 1), got {tolerance}.")
        s = math.sqrt(-math.log(tolerance))
        alpha = s / sr_cutoff_radius
        k_cut = 2.0 * alpha * s
        k = np.ceil(k_cut * sim_box.perpendicular_widths / (2.0 * math.pi))
        return cls(alpha, sr_cutoff_radius, tuple(int(v) for v in k), epsilon0)
