"""
This module implements Newtonian gravitational acceleration by direct summation, with
optional Plummer softening and support for excluding interaction terms.

The geometry_buffers function computes pairwise separation vectors, squared distances
and inverse cubed distances in one pass using Einstein summation. gravitational_acceleration
builds the per-body acceleration from those buffers and honours an ignore_terms selector:
0 keeps every pair, 1 drops the interaction between bodies 0 and 1 (its contribution is
integrated analytically by the Jacobi Kepler drift of WHFast), and 2 drops every pair
involving body 0 (democratic-heliocentric splittings). gravitational_force returns the
corresponding pairwise force sum. All functions assume (N, 3) position arrays and
positive masses, and return zeros for fewer than two bodies or G == 0.
"""

from __future__ import annotations
from typing import Tuple
import numpy as np
from numpy.typing import NDArray


IGNORE_NONE = 0
IGNORE_FIRST_PAIR = 1
IGNORE_CENTRAL = 2


def geometry_buffers(
    pos: NDArray[np.floating],
    eps: float = 0.0,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    pos = np.asarray(pos, dtype=float)

    diff = pos[None, :, :] - pos[:, None, :]
    r2 = np.einsum("ijk,ijk->ij", diff, diff, optimize=True)

    inv_r3 = np.zeros_like(r2, dtype=float)
    r2_soft = r2 + eps * eps
    mask = r2_soft > 0.0
    if np.any(mask):
        inv_r3[mask] = np.power(r2_soft[mask], -1.5)

    np.fill_diagonal(inv_r3, 0.0)
    return diff, r2, inv_r3


def _pair_mask(n: int, ignore_terms: int) -> np.ndarray:
    keep = np.ones((n, n), dtype=bool)
    np.fill_diagonal(keep, False)
    if ignore_terms == IGNORE_FIRST_PAIR and n >= 2:
        keep[0, 1] = False
        keep[1, 0] = False
    elif ignore_terms == IGNORE_CENTRAL:
        keep[0, :] = False
        keep[:, 0] = False
    return keep


def gravitational_acceleration(
    q: NDArray[np.floating],
    m: NDArray[np.floating],
    G: float = 1.0,
    eps: float = 0.0,
    ignore_terms: int = IGNORE_NONE,
) -> NDArray[np.float64]:
    q = np.asarray(q, dtype=float)
    m = np.asarray(m, dtype=float)

    if q.shape[0] < 2 or G == 0.0:
        return np.zeros_like(q)

    diff, _, inv_r3 = geometry_buffers(q, eps)
    coeff = G * m[None, :] * inv_r3
    coeff[~_pair_mask(q.shape[0], int(ignore_terms))] = 0.0
    # diff[i, j] points from body i to body j
    return np.einsum("ij,ijk->ik", coeff, diff, optimize=True)


def gravitational_force(
    q: NDArray[np.floating],
    m: NDArray[np.floating],
    G: float = 1.0,
    eps: float = 0.0,
) -> NDArray[np.float64]:
    m = np.asarray(m, dtype=float)
    return m[:, None] * gravitational_acceleration(q, m, G=G, eps=eps)


def potential_energy(
    q: NDArray[np.floating],
    m: NDArray[np.floating],
    G: float = 1.0,
    eps: float = 0.0,
) -> float:
    q = np.asarray(q, dtype=float)
    m = np.asarray(m, dtype=float)
    n = q.shape[0]
    if n < 2 or G == 0.0:
        return 0.0
    _, r2, _ = geometry_buffers(q, eps)
    iu = np.triu_indices(n, 1)
    inv_r = 1.0 / np.sqrt(r2[iu] + eps * eps)
    return float(-G * np.sum(m[iu[0]] * m[iu[1]] * inv_r))


__all__ = [
    "IGNORE_NONE",
    "IGNORE_FIRST_PAIR",
    "IGNORE_CENTRAL",
    "geometry_buffers",
    "gravitational_acceleration",
    "gravitational_force",
    "potential_energy",
]
