"""Lennard-Jones parameters for pairs of atom types."""

import logging
import math

import numpy as np

logger = logging.getLogger(__name__)


def _pair_key(a, b):
    return (a, b) if a <= b else (b, a)


class LennardJonesForceField:
    """
    Symmetric (type, type) -> (sigma^2, epsilon) table with one global cutoff.

    pair_params: dict mapping (type_a, type_b) -> (sigma [A], epsilon [K]).
        Order inside a pair does not matter; giving both orders with
        different values is an error.
    cutoff_radius: Lennard-Jones cutoff shared by all pairs (A).

    The table is a dense matrix indexed by integer type ids, filled at both
    [i, j] and [j, i], so lookups are symmetric by construction.
    """

    def __init__(self, pair_params, cutoff_radius=12.5):
        if cutoff_radius <= 0.0:
            raise ValueError(f"cutoff_radius must be positive, got {cutoff_radius}.")
        self.cutoff_radius = float(cutoff_radius)
        self.cutoffradius_squared = self.cutoff_radius**2

        canonical = {}
        for (a, b), (sigma, epsilon) in pair_params.items():
            if sigma <= 0.0 or epsilon < 0.0:
                raise ValueError(f"Invalid LJ parameters for {(a, b)}: sigma={sigma}, epsilon={epsilon}.")
            key = _pair_key(a, b)
            value = (float(sigma), float(epsilon))
            if key in canonical and canonical[key] != value:
                raise ValueError(f"Conflicting LJ parameters for pair {key}: {canonical[key]} vs {value}.")
            canonical[key] = value

        self.atom_types = tuple(sorted({t for key in canonical for t in key}))
        self._index = {t: i for i, t in enumerate(self.atom_types)}
        n = len(self.atom_types)
        self.sigmas_squared = np.full((n, n), np.nan)
        self.epsilons = np.full((n, n), np.nan)
        for (a, b), (sigma, epsilon) in canonical.items():
            i, j = self._index[a], self._index[b]
            self.sigmas_squared[i, j] = self.sigmas_squared[j, i] = sigma * sigma
            self.epsilons[i, j] = self.epsilons[j, i] = epsilon
        self.sigmas_squared.flags.writeable = False
        self.epsilons.flags.writeable = False
        logger.debug("LJ force field: %d atom types, %d pairs, cutoff %.3f A",
                     n, len(canonical), self.cutoff_radius)

    @classmethod
    def from_mixing_rules(cls, sigmas, epsilons, cutoff_radius=12.5):
        """
        Lorentz-Berthelot mixing of per-type parameters:
        sigma_ij = (sigma_i + sigma_j) / 2, epsilon_ij = sqrt(epsilon_i epsilon_j).
        """
        if set(sigmas) != set(epsilons):
            raise ValueError("sigmas and epsilons must cover the same atom types.")
        types = sorted(sigmas)
        pair_params = {}
        for i, a in enumerate(types):
            for b in types[i:]:
                pair_params[(a, b)] = (
                    0.5 * (sigmas[a] + sigmas[b]),
                    math.sqrt(epsilons[a] * epsilons[b]),
                )
        return cls(pair_params, cutoff_radius)

    def _ids(self, types):
        try:
            return np.array([self._index[t] for t in types], dtype=int)
        except KeyError as err:
            raise ValueError(f"Atom type {err.args[0]!r} is not in the force field.") from None

    def lookup(self, a, b):
        """(sigma^2, epsilon) for the unordered pair {a, b}."""
        sigma_squared, epsilon = self.pair_table([a], [b])
        return float(sigma_squared[0, 0]), float(epsilon[0, 0])

    def pair_table(self, types_a, types_b):
        """(sigma^2, epsilon) matrices of shape (len(types_a), len(types_b))."""
        ia, ib = self._ids(types_a), self._ids(types_b)
        sigma_squared = self.sigmas_squared[np.ix_(ia, ib)]
        epsilon = self.epsilons[np.ix_(ia, ib)]
        if np.any(np.isnan(sigma_squared)):
            i, j = np.argwhere(np.isnan(sigma_squared))[0]
            raise ValueError(f"No LJ parameters for pair {(types_a[i], types_b[j])}.")
        return sigma_squared, epsilon
